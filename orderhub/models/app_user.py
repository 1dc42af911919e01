"""AppUser model - identity record shared by distributors and retailers."""
import enum
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from werkzeug.security import generate_password_hash, check_password_hash
from orderhub.database import Base, IdType


class UserRole(enum.Enum):
    """Platform roles."""
    DISTRIBUTOR = 'distributor'
    RETAILER = 'retailer'
    ADMIN = 'admin'


class AppUser(Base):
    """AppUser model - platform users with email/password authentication."""

    __tablename__ = 'users'

    id = Column(IdType, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    business_name = Column(String(200), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.RETAILER.value)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    distributor = relationship('Distributor', back_populates='user', uselist=False)
    retailer = relationship('Retailer', back_populates='user', uselist=False)

    def set_password(self, password):
        """Set password hash."""
        self.password_hash = generate_password_hash(password, method='scrypt')

    def check_password(self, password):
        """Check password against hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def full_name(self):
        parts = [self.first_name or '', self.last_name or '']
        return ' '.join(p for p in parts if p).strip()

    def __repr__(self):
        return f"<AppUser(id={self.id}, email='{self.email}', role='{self.role}')>"
