"""Partnership model - distributor/retailer relationship."""
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from orderhub.database import Base, IdType


class PartnershipStatus(enum.Enum):
    """Partnership status enum."""
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'


class Partnership(Base):
    """Partnership between a distributor and a retailer."""

    __tablename__ = 'relationships'
    __table_args__ = (
        UniqueConstraint('distributor_id', 'retailer_id', name='uq_relationship_pair'),
    )

    id = Column(IdType, primary_key=True, autoincrement=True)
    distributor_id = Column(IdType, ForeignKey('distributors.id'), nullable=False)
    retailer_id = Column(IdType, ForeignKey('retailers.id'), nullable=False)
    status = Column(String(20), nullable=False, default=PartnershipStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    distributor = relationship('Distributor', back_populates='partnerships')
    retailer = relationship('Retailer', back_populates='partnerships')

    @property
    def is_accepted(self):
        return self.status == PartnershipStatus.ACCEPTED.value

    def __repr__(self):
        return f"<Partnership(id={self.id}, distributor_id={self.distributor_id}, retailer_id={self.retailer_id}, status='{self.status}')>"
