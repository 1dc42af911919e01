"""Models package - exports all SQLAlchemy models."""
# Identity & profiles
from orderhub.models.app_user import AppUser, UserRole
from orderhub.models.distributor import Distributor
from orderhub.models.retailer import Retailer
from orderhub.models.partnership import Partnership, PartnershipStatus

# Catalog
from orderhub.models.category import ProductCategory
from orderhub.models.product import Product

# Orders
from orderhub.models.order import (
    Order, OrderStatus, PaymentStatus, PlacedBy, ALLOWED_STATUS_TRANSITIONS, normalize_order_status
)
from orderhub.models.order_item import OrderItem

__all__ = [
    'AppUser', 'UserRole', 'Distributor', 'Retailer', 'Partnership', 'PartnershipStatus',
    'ProductCategory', 'Product',
    'Order', 'OrderStatus', 'PaymentStatus', 'PlacedBy', 'ALLOWED_STATUS_TRANSITIONS', 'normalize_order_status',
    'OrderItem',
]
