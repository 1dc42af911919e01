"""Distributor profile model."""
from sqlalchemy import Column, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from orderhub.database import Base, IdType


class Distributor(Base):
    """Distributor profile - 1:1 with AppUser, owns a product catalog."""

    __tablename__ = 'distributors'

    id = Column(IdType, primary_key=True, autoincrement=True)
    user_id = Column(IdType, ForeignKey('users.id'), nullable=False, unique=True)
    business_address = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    user = relationship('AppUser', back_populates='distributor')
    products = relationship('Product', back_populates='distributor', cascade='all, delete-orphan')
    partnerships = relationship('Partnership', back_populates='distributor')

    @property
    def name(self):
        return (self.user.business_name if self.user else None) or 'Unknown Business'

    def __repr__(self):
        return f"<Distributor(id={self.id}, user_id={self.user_id})>"
