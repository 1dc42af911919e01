"""Product model."""
from sqlalchemy import Column, String, Text, Integer, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from orderhub.database import Base, IdType


class Product(Base):
    """Catalog item owned by exactly one distributor."""

    __tablename__ = 'distributor_products'
    __table_args__ = (
        CheckConstraint('price >= 0', name='ck_product_price_non_negative'),
        CheckConstraint('case_size >= 1', name='ck_product_case_size_positive'),
        CheckConstraint('stock_quantity >= 0', name='ck_product_stock_non_negative'),
    )

    id = Column(IdType, primary_key=True, autoincrement=True)
    distributor_id = Column(IdType, ForeignKey('distributors.id'), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    case_size = Column(Integer, nullable=False, default=1, server_default='1')
    category_id = Column(IdType, ForeignKey('product_categories.id'), nullable=True)
    image_url = Column(String(500), nullable=True)
    stock_quantity = Column(Integer, nullable=False, default=0, server_default='0')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    distributor = relationship('Distributor', back_populates='products')
    category = relationship('ProductCategory', foreign_keys=[category_id])

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"
