"""Order model."""
import enum
from sqlalchemy import Column, String, Text, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from orderhub.database import Base, IdType


class OrderStatus(str, enum.Enum):
    """
    Canonical order status.

    The retailer dashboard historically used a second vocabulary for the same
    column; `normalize_order_status` maps it onto this one.
    """
    PENDING = 'pending'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class PaymentStatus(str, enum.Enum):
    """Payment status enum."""
    PENDING = 'pending'
    PAID = 'paid'
    FAILED = 'failed'


class PlacedBy(str, enum.Enum):
    """Which side of the partnership placed the order."""
    DISTRIBUTOR = 'distributor'
    RETAILER = 'retailer'


# Retailer-side vocabulary -> canonical status
LEGACY_STATUS_ALIASES = {
    'confirmed': OrderStatus.PROCESSING,
    'shipped': OrderStatus.PROCESSING,
    'delivered': OrderStatus.COMPLETED,
}

ALLOWED_STATUS_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


def normalize_order_status(value) -> OrderStatus:
    """
    Map a status string from either vocabulary to the canonical enum.

    Raises:
        ValueError: if the value belongs to neither vocabulary.
    """
    if isinstance(value, OrderStatus):
        return value
    cleaned = (value or '').strip().lower()
    if cleaned in LEGACY_STATUS_ALIASES:
        return LEGACY_STATUS_ALIASES[cleaned]
    return OrderStatus(cleaned)


class Order(Base):
    """Committed order header."""

    __tablename__ = 'orders'

    id = Column(IdType, primary_key=True, autoincrement=True)
    order_number = Column(String(64), nullable=False, unique=True, index=True)
    distributor_id = Column(IdType, ForeignKey('distributors.id'), nullable=False, index=True)
    retailer_id = Column(IdType, ForeignKey('retailers.id'), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)
    placed_by_type = Column(String(20), nullable=False, default=PlacedBy.DISTRIBUTOR.value)
    placed_by_user_id = Column(IdType, ForeignKey('users.id'), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    distributor = relationship('Distributor')
    retailer = relationship('Retailer', back_populates='orders')
    items = relationship('OrderItem', back_populates='order', cascade='all, delete-orphan')

    def to_dict(self, include_items=False):
        data = {
            'id': self.id,
            'order_number': self.order_number,
            'distributor_id': self.distributor_id,
            'retailer_id': self.retailer_id,
            'retailer_name': self.retailer.name if self.retailer else None,
            'status': self.status,
            'payment_status': self.payment_status,
            'subtotal': str(self.subtotal),
            'discount': str(self.discount),
            'tax': str(self.tax),
            'total': str(self.total),
            'notes': self.notes,
            'placed_by_type': self.placed_by_type,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_items:
            data['items'] = [item.to_dict() for item in self.items]
        return data

    def __repr__(self):
        return f"<Order(id={self.id}, number='{self.order_number}', status='{self.status}', total={self.total})>"
