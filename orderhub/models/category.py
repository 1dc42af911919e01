"""Product category model."""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from orderhub.database import Base, IdType


class ProductCategory(Base):
    """Product Category."""

    __tablename__ = 'product_categories'

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<ProductCategory(id={self.id}, name='{self.name}')>"
