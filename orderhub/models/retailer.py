"""Retailer profile model."""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from orderhub.database import Base, IdType


class Retailer(Base):
    """
    Retailer profile - a business that receives orders.

    Display name, email and phone live on the owning AppUser.
    """

    __tablename__ = 'retailers'

    id = Column(IdType, primary_key=True, autoincrement=True)
    user_id = Column(IdType, ForeignKey('users.id'), nullable=False, unique=True)
    store_address = Column(Text, nullable=True)
    store_type = Column(String(50), nullable=False, default='retail')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    user = relationship('AppUser', back_populates='retailer')
    partnerships = relationship('Partnership', back_populates='retailer')
    orders = relationship('Order', back_populates='retailer')

    @property
    def name(self):
        return (self.user.business_name if self.user else None) or 'Unknown Business'

    def __repr__(self):
        return f"<Retailer(id={self.id}, user_id={self.user_id})>"
