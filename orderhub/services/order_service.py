"""
Order service - commits order drafts and manages committed orders.

commit_order() runs the whole submission in a single database transaction:
retailer creation (when requested), the order header and the order items are
either all persisted or all rolled back.
"""
import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from orderhub.exceptions import (
    BusinessLogicError, NotFoundError, ResolutionError, PersistenceError, OrderHubError, UnauthorizedError
)
from orderhub.models import (
    Distributor, Order, OrderItem, Retailer, OrderStatus, PaymentStatus, PlacedBy,
    ALLOWED_STATUS_TRANSITIONS, normalize_order_status
)
from orderhub.services.catalog_service import (
    CatalogProduct, has_accepted_partnership, load_catalog, resolve_distributor_id, resolve_retailer_id
)
from orderhub.services.order_draft import OrderDraft, OrderLineSelection, validate_draft
from orderhub.services.pricing_service import TAX_RATE, OrderTotals, price_draft, quantize_money
from orderhub.services.retailer_service import create_retailer_inline

logger = logging.getLogger(__name__)


def generate_order_number(now: Optional[datetime] = None) -> str:
    """Human-readable order number: ORD-YYYYMMDD-<8 hex chars>."""
    now = now or datetime.now()
    return f"ORD-{now.strftime('%Y%m%d')}-{uuid.uuid4().hex[:8].upper()}"


def commit_order(
    session: Session,
    draft: OrderDraft,
    user_id: Any,
    catalog: Optional[Mapping[Any, CatalogProduct]] = None,
    tax_rate: Decimal = TAX_RATE,
    placed_by: str = PlacedBy.DISTRIBUTOR.value
) -> Order:
    """
    Turn a validated draft into a persisted order.

    placed_by names the side the session user acts for. A distributor draft
    names the retailer (or an inline new one); a retailer draft names the
    distributor whose catalog it was priced against.

    Steps, strictly in order:
        1. resolve the acting party from the session user
        2. resolve the counterparty and check the partnership is accepted
        3. create the retailer inline when the distributor asked for it
        4. price the draft against the catalog snapshot
        5. write the order header (status pending) with a fresh order number
        6. batch-write the order items
        7. commit

    The draft is never modified, so the caller can keep it for a retry.

    Raises:
        AuthenticationError: no user in session.
        ResolutionError: acting profile or selected counterparty missing.
        UnauthorizedError: no accepted partnership between the two parties.
        DraftValidationError: draft is not submittable.
        PersistenceError: any write failed; nothing was persisted.
    """
    # 1-2. Parties (read-only, before any write)
    distributor_id, retailer_id = _resolve_parties(session, draft, user_id, placed_by)

    if catalog is None:
        catalog = load_catalog(session, distributor_id)

    try:
        # 3. Inline retailer
        if retailer_id is None:
            retailer_id = create_retailer_inline(session, distributor_id, draft.retailer_info).id

        # 4. Totals (full precision, rounded only for storage)
        totals = price_draft(draft, catalog, tax_rate)

        # 5. Header
        order = _persist_order_header(
            session,
            order_number=generate_order_number(),
            distributor_id=distributor_id,
            retailer_id=retailer_id,
            totals=totals,
            notes=draft.notes,
            placed_by=placed_by,
            user_id=user_id
        )

        # 6. Items
        _persist_order_items(session, order, draft.lines, catalog)

        # 7. Commit
        try:
            session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError('commit', cause=e) from e

        logger.info(
            f"Order {order.order_number} committed by {placed_by}: distributor={distributor_id} "
            f"retailer={retailer_id} items={len(order.items)} total={order.total}"
        )
        return order

    except PersistenceError as e:
        session.rollback()
        logger.error(f"PersistenceError at stage '{e.stage}' while committing order: {e.cause}")
        raise
    except Exception:
        session.rollback()
        raise


def _resolve_parties(session: Session, draft: OrderDraft, user_id: Any, placed_by: str):
    """
    Return (distributor_id, retailer_id) for the order. retailer_id is None
    only for a distributor draft that creates its retailer inline.
    """
    if placed_by == PlacedBy.RETAILER.value:
        retailer_id = resolve_retailer_id(session, user_id)
        validate_draft(draft, placed_by)
        distributor_id = draft.distributor_id
        if session.get(Distributor, distributor_id) is None:
            raise ResolutionError(f'Distributor {distributor_id} not found')
    elif placed_by == PlacedBy.DISTRIBUTOR.value:
        distributor_id = resolve_distributor_id(session, user_id)
        validate_draft(draft, placed_by)
        if draft.new_retailer:
            return distributor_id, None
        retailer_id = draft.retailer_id
        if session.get(Retailer, retailer_id) is None:
            raise ResolutionError(f'Retailer {retailer_id} not found')
    else:
        raise BusinessLogicError(f'Unknown order placer: {placed_by}')

    if not has_accepted_partnership(session, distributor_id, retailer_id):
        raise UnauthorizedError(
            f'No accepted partnership between distributor {distributor_id} and retailer {retailer_id}'
        )
    return distributor_id, retailer_id


def _persist_order_header(
    session: Session,
    order_number: str,
    distributor_id: Any,
    retailer_id: Any,
    totals: OrderTotals,
    notes: str,
    placed_by: str,
    user_id: Any
) -> Order:
    stored = totals.rounded()
    try:
        order = Order(
            order_number=order_number,
            distributor_id=distributor_id,
            retailer_id=retailer_id,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            subtotal=stored.subtotal,
            discount=stored.discount,
            tax=stored.tax,
            total=stored.total,
            notes=notes or None,
            placed_by_type=placed_by,
            placed_by_user_id=user_id
        )
        session.add(order)
        session.flush()
    except SQLAlchemyError as e:
        raise PersistenceError('order', cause=e) from e
    return order


def _persist_order_items(
    session: Session,
    order: Order,
    lines: Iterable[OrderLineSelection],
    catalog: Mapping[Any, CatalogProduct]
) -> List[OrderItem]:
    """One row per resolvable line; unit price comes from the catalog snapshot."""
    items = []
    for line in lines:
        product = catalog.get(line.product_id)
        if product is None or line.quantity < 1:
            continue
        items.append(OrderItem(
            order_id=order.id,
            product_id=product.id,
            quantity=line.quantity,
            unit_price=quantize_money(product.price),
            total_price=quantize_money(product.price * line.quantity)
        ))

    try:
        session.add_all(items)
        session.flush()
    except SQLAlchemyError as e:
        raise PersistenceError('order_items', cause=e) from e
    return items


# =====================================================
# QUERIES & STATUS
# =====================================================

def _status_filter(status: Optional[str]) -> Optional[str]:
    if not status or status == 'all':
        return None
    try:
        return normalize_order_status(status).value
    except ValueError:
        raise BusinessLogicError(f'Unknown order status: {status}')


def list_orders_for_distributor(
    session: Session,
    distributor_id: Any,
    status: Optional[str] = None,
    payment_status: Optional[str] = None
) -> List[Order]:
    """Orders received by a distributor, newest first."""
    query = session.query(Order).options(
        joinedload(Order.retailer).joinedload(Retailer.user)
    ).filter(Order.distributor_id == distributor_id)

    status_value = _status_filter(status)
    if status_value:
        query = query.filter(Order.status == status_value)

    if payment_status and payment_status != 'all':
        try:
            query = query.filter(Order.payment_status == PaymentStatus(payment_status).value)
        except ValueError:
            raise BusinessLogicError(f'Unknown payment status: {payment_status}')

    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def list_orders_for_retailer(session: Session, retailer_id: Any, status: Optional[str] = None) -> List[Order]:
    """Orders placed for a retailer, newest first."""
    query = session.query(Order).filter(Order.retailer_id == retailer_id)
    status_value = _status_filter(status)
    if status_value:
        query = query.filter(Order.status == status_value)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def get_order_details(
    session: Session,
    order_id: Any,
    distributor_id: Any = None,
    retailer_id: Any = None
) -> Order:
    """Order with items, visible only to its distributor or its retailer."""
    if distributor_id is None and retailer_id is None:
        raise BusinessLogicError('An order lookup must be scoped to a distributor or a retailer')

    query = session.query(Order).options(
        joinedload(Order.items).joinedload(OrderItem.product),
        joinedload(Order.retailer).joinedload(Retailer.user)
    ).filter(Order.id == order_id)
    if distributor_id is not None:
        query = query.filter(Order.distributor_id == distributor_id)
    if retailer_id is not None:
        query = query.filter(Order.retailer_id == retailer_id)

    order = query.first()
    if not order:
        raise NotFoundError(f'Order {order_id} not found.')
    return order


def update_order_status(session: Session, order_id: Any, new_status: str, distributor_id: Any) -> Order:
    """Move an order through pending -> processing -> completed (or cancelled)."""
    try:
        order = get_order_details(session, order_id, distributor_id=distributor_id)
        try:
            target = normalize_order_status(new_status)
        except ValueError:
            raise BusinessLogicError(f'Unknown order status: {new_status}')

        current = normalize_order_status(order.status)
        if target not in ALLOWED_STATUS_TRANSITIONS[current]:
            raise BusinessLogicError(f'Cannot change order status from {current.value} to {target.value}.')

        order.status = target.value
        session.commit()
        logger.info(f"Order {order.order_number} status {current.value} -> {target.value}")
        return order
    except OrderHubError as e:
        session.rollback()
        raise e
    except Exception:
        session.rollback()
        raise


def find_orders_without_items(session: Session, distributor_id: Any = None) -> List[Order]:
    """
    Orders whose header exists but has no items. commit_order never leaves
    these behind; they come from imports or manual edits and need reconciliation.
    """
    query = session.query(Order).outerjoin(OrderItem, OrderItem.order_id == Order.id).filter(
        OrderItem.id.is_(None)
    )
    if distributor_id is not None:
        query = query.filter(Order.distributor_id == distributor_id)
    return query.order_by(Order.id).all()
