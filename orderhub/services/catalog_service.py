"""
Catalog and retailer loader.

Reads the reference data an order draft is built from and converts backend
rows into validated DTOs. Malformed rows raise ResolutionError instead of
being patched with defaults.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from orderhub.exceptions import AuthenticationError, ResolutionError
from orderhub.models import Distributor, Retailer, Partnership, PartnershipStatus, Product
from orderhub.services.pricing_service import to_decimal

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = '/package-open.svg'


@dataclass(frozen=True)
class CatalogProduct:
    """Immutable snapshot of a product as seen by the ordering flow."""
    id: Any
    name: str
    description: str
    price: Decimal
    case_size: int
    category: str
    category_id: Optional[Any]
    image_url: str
    stock_quantity: int

    @classmethod
    def from_model(cls, product: Product) -> 'CatalogProduct':
        if not product.name:
            raise ResolutionError(f'Product {product.id} has no name')
        if product.price is None or to_decimal(product.price) < 0:
            raise ResolutionError(f'Product {product.id} has an invalid price: {product.price!r}')
        if product.case_size is None or product.case_size < 1:
            raise ResolutionError(f'Product {product.id} has an invalid case size: {product.case_size!r}')
        return cls(
            id=product.id,
            name=product.name,
            description=product.description or '',
            price=to_decimal(product.price),
            case_size=int(product.case_size),
            category=product.category.name if product.category else 'Uncategorized',
            category_id=product.category_id,
            image_url=product.image_url or PLACEHOLDER_IMAGE,
            stock_quantity=product.stock_quantity or 0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'price': str(self.price),
            'case_size': self.case_size,
            'category': self.category,
            'category_id': self.category_id,
            'image_url': self.image_url,
            'stock_quantity': self.stock_quantity,
        }


@dataclass(frozen=True)
class PartySummary:
    """Display data for a retailer or distributor (name/email/phone come from the user row)."""
    id: Any
    name: str
    email: str
    phone: str
    address: str = ''

    @classmethod
    def from_retailer(cls, retailer: Retailer) -> 'PartySummary':
        user = retailer.user
        if user is None:
            raise ResolutionError(f'Retailer {retailer.id} has no user record')
        return cls(
            id=retailer.id,
            name=user.business_name or 'Unknown Business',
            email=user.email or '',
            phone=user.phone or '',
            address=retailer.store_address or '',
        )

    @classmethod
    def from_distributor(cls, distributor: Distributor) -> 'PartySummary':
        user = distributor.user
        if user is None:
            raise ResolutionError(f'Distributor {distributor.id} has no user record')
        return cls(
            id=distributor.id,
            name=user.business_name or 'Unknown Business',
            email=user.email or '',
            phone=user.phone or '',
            address=distributor.business_address or '',
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'email': self.email, 'phone': self.phone, 'address': self.address}


# =====================================================
# IDENTITY RESOLUTION
# =====================================================

def resolve_distributor_id(session: Session, user_id: Optional[Any]) -> Any:
    """Distributor profile id for the authenticated user."""
    if not user_id:
        raise AuthenticationError()
    distributor_id = session.execute(
        select(Distributor.id).where(Distributor.user_id == user_id)
    ).scalar_one_or_none()
    if distributor_id is None:
        raise ResolutionError('Could not find distributor record for this user')
    return distributor_id


def resolve_retailer_id(session: Session, user_id: Optional[Any]) -> Any:
    """Retailer profile id for the authenticated user."""
    if not user_id:
        raise AuthenticationError()
    retailer_id = session.execute(
        select(Retailer.id).where(Retailer.user_id == user_id)
    ).scalar_one_or_none()
    if retailer_id is None:
        raise ResolutionError('Could not find retailer record for this user')
    return retailer_id


# =====================================================
# CATALOG
# =====================================================

def load_catalog(session: Session, distributor_id: Any) -> Dict[Any, CatalogProduct]:
    """All products of a distributor, keyed by product id."""
    products = session.query(Product).options(
        joinedload(Product.category)
    ).filter(
        Product.distributor_id == distributor_id
    ).order_by(Product.name).all()

    if not products:
        logger.info(f"No products found for distributor {distributor_id}")

    return {p.id: CatalogProduct.from_model(p) for p in products}


# =====================================================
# RETAILERS / DISTRIBUTORS
# =====================================================

def list_partner_retailers(session: Session, distributor_id: Any) -> List[PartySummary]:
    """Retailers with an accepted partnership with the distributor."""
    retailers = session.query(Retailer).options(
        joinedload(Retailer.user)
    ).join(
        Partnership, Partnership.retailer_id == Retailer.id
    ).filter(
        Partnership.distributor_id == distributor_id,
        Partnership.status == PartnershipStatus.ACCEPTED.value
    ).order_by(Retailer.id).all()
    return [PartySummary.from_retailer(r) for r in retailers]


def list_available_retailers(session: Session, distributor_id: Any) -> List[PartySummary]:
    """Retailers the distributor has no partnership (in any state) with yet."""
    linked = select(Partnership.retailer_id).where(Partnership.distributor_id == distributor_id)
    retailers = session.query(Retailer).options(
        joinedload(Retailer.user)
    ).filter(
        Retailer.id.not_in(linked)
    ).order_by(Retailer.id).all()
    return [PartySummary.from_retailer(r) for r in retailers]


def list_partner_distributors(session: Session, retailer_id: Any) -> List[PartySummary]:
    """Distributors with an accepted partnership with the retailer."""
    distributors = session.query(Distributor).options(
        joinedload(Distributor.user)
    ).join(
        Partnership, Partnership.distributor_id == Distributor.id
    ).filter(
        Partnership.retailer_id == retailer_id,
        Partnership.status == PartnershipStatus.ACCEPTED.value
    ).order_by(Distributor.id).all()
    return [PartySummary.from_distributor(d) for d in distributors]


def has_accepted_partnership(session: Session, distributor_id: Any, retailer_id: Any) -> bool:
    return session.query(Partnership).filter(
        Partnership.distributor_id == distributor_id,
        Partnership.retailer_id == retailer_id,
        Partnership.status == PartnershipStatus.ACCEPTED.value
    ).first() is not None
