"""Orders blueprint - order draft (kept in the session), submission and order tracking."""
from decimal import InvalidOperation
from typing import Any, Dict, Mapping, Tuple

from flask import Blueprint, request, session, g, jsonify, current_app, Response

from orderhub.database import get_session
from orderhub.exceptions import BusinessLogicError, OrderHubError, UnauthorizedError
from orderhub.forms.order_forms import NewRetailerForm
from orderhub.middleware import require_login, require_role
from orderhub.models import PlacedBy, UserRole
from orderhub.blueprints.metrics import record_draft_update, record_order_committed, record_order_failure
from orderhub.services.catalog_service import (
    CatalogProduct, has_accepted_partnership, load_catalog, resolve_distributor_id, resolve_retailer_id
)
from orderhub.services.order_draft import OrderDraft, NewRetailerInfo, draft_problems
from orderhub.services.order_service import (
    commit_order, list_orders_for_distributor, list_orders_for_retailer,
    get_order_details, update_order_status
)
from orderhub.services.pricing_service import price_draft

orders_bp = Blueprint('orders', __name__, url_prefix='/orders')

DRAFT_SESSION_KEY = 'order_draft'

# Both sides of a partnership can build and submit a draft
ORDERING_ROLES = (UserRole.DISTRIBUTOR, UserRole.RETAILER)


def get_draft() -> OrderDraft:
    """Get the order draft of the current browser session."""
    return OrderDraft.from_dict(session.get(DRAFT_SESSION_KEY))


def save_draft(draft: OrderDraft) -> None:
    session[DRAFT_SESSION_KEY] = draft.to_dict()
    session.modified = True
    record_draft_update(_placed_by(), request.endpoint)


def _json_body() -> Dict[str, Any]:
    return request.get_json(silent=True) or {}


def _placed_by() -> str:
    if g.user.role == UserRole.RETAILER.value:
        return PlacedBy.RETAILER.value
    return PlacedBy.DISTRIBUTOR.value


def _draft_catalog(db_session, draft: OrderDraft) -> Mapping[Any, CatalogProduct]:
    """
    Catalog the draft is priced against: the distributor's own, or for a
    retailer the selected distributor's once their partnership is accepted.
    """
    if _placed_by() == PlacedBy.DISTRIBUTOR.value:
        return load_catalog(db_session, resolve_distributor_id(db_session, g.user_id))

    retailer_id = resolve_retailer_id(db_session, g.user_id)
    if draft.distributor_id is None:
        return {}
    if not has_accepted_partnership(db_session, draft.distributor_id, retailer_id):
        return {}
    return load_catalog(db_session, draft.distributor_id)


def _draft_response(draft: OrderDraft) -> Response:
    """Draft plus a live totals preview priced against the current catalog."""
    catalog = _draft_catalog(get_session(), draft)
    totals = price_draft(draft, catalog, current_app.config['ORDER_TAX_RATE'])
    problems = draft_problems(draft, _placed_by())
    return jsonify({
        'draft': draft.to_dict(),
        'placed_by': _placed_by(),
        'totals': totals.to_dict(),
        'unknown_products': [l.product_id for l in draft.lines if l.product_id not in catalog],
        'can_submit': not problems,
        'problems': problems,
    })


# =====================================================
# DRAFT
# =====================================================

@orders_bp.route('/draft', methods=['GET'])
@require_login
@require_role(*ORDERING_ROLES)
def show_draft():
    return _draft_response(get_draft())


@orders_bp.route('/draft', methods=['DELETE'])
@require_login
@require_role(*ORDERING_ROLES)
def discard_draft():
    session.pop(DRAFT_SESSION_KEY, None)
    return jsonify({'status': 'ok'})


@orders_bp.route('/draft/distributor', methods=['PUT'])
@require_login
@require_role(UserRole.RETAILER)
def select_distributor():
    """Pick the partner distributor a retailer orders from (clears lines on change)."""
    distributor_id = _json_body().get('distributor_id')
    if distributor_id in (None, ''):
        raise BusinessLogicError('distributor_id is required')
    try:
        distributor_id = int(distributor_id)
    except (TypeError, ValueError):
        raise BusinessLogicError('distributor_id must be a number')

    db_session = get_session()
    retailer_id = resolve_retailer_id(db_session, g.user_id)
    if not has_accepted_partnership(db_session, distributor_id, retailer_id):
        raise UnauthorizedError('You can only order from distributors that accepted your partnership')

    draft = get_draft()
    draft.select_distributor(distributor_id)
    save_draft(draft)
    return _draft_response(draft)


@orders_bp.route('/draft/retailer', methods=['PUT'])
@require_login
@require_role(UserRole.DISTRIBUTOR)
def select_retailer():
    retailer_id = _json_body().get('retailer_id')
    if retailer_id in (None, ''):
        raise BusinessLogicError('retailer_id is required')
    draft = get_draft()
    draft.select_retailer(retailer_id)
    save_draft(draft)
    return _draft_response(draft)


@orders_bp.route('/draft/new-retailer', methods=['PUT'])
@require_login
@require_role(UserRole.DISTRIBUTOR)
def use_new_retailer():
    form = NewRetailerForm()
    if not form.validate_on_submit():
        raise BusinessLogicError(form.first_error() or 'Invalid retailer data', payload={'errors': form.errors})

    draft = get_draft()
    draft.use_new_retailer(NewRetailerInfo(
        name=form.name.data.strip(),
        email=form.email.data.strip(),
        phone=(form.phone.data or '').strip(),
        address=(form.address.data or '').strip()
    ))
    save_draft(draft)
    return _draft_response(draft)


@orders_bp.route('/draft/lines/<product_id>', methods=['PUT'])
@require_login
@require_role(*ORDERING_ROLES)
def set_line(product_id):
    """Set the quantity for a product (0 removes it)."""
    draft = get_draft()
    draft.set_line(product_id, _json_body().get('quantity'))
    save_draft(draft)
    return _draft_response(draft)


@orders_bp.route('/draft/lines/<product_id>', methods=['DELETE'])
@require_login
@require_role(*ORDERING_ROLES)
def remove_line(product_id):
    draft = get_draft()
    draft.remove_line(product_id)
    save_draft(draft)
    return _draft_response(draft)


@orders_bp.route('/draft/discount', methods=['PUT'])
@require_login
@require_role(*ORDERING_ROLES)
def set_discount():
    draft = get_draft()
    try:
        draft.set_discount(_json_body().get('discount', 0))
    except (InvalidOperation, ValueError):
        raise BusinessLogicError('Discount must be a number')
    save_draft(draft)
    return _draft_response(draft)


@orders_bp.route('/draft/notes', methods=['PUT'])
@require_login
@require_role(*ORDERING_ROLES)
def set_notes():
    draft = get_draft()
    draft.set_notes(_json_body().get('notes'))
    save_draft(draft)
    return _draft_response(draft)


@orders_bp.route('/draft/submit', methods=['POST'])
@require_login
@require_role(*ORDERING_ROLES)
def submit_draft() -> Tuple[Response, int]:
    """
    Commit the draft. On failure the draft stays in the session so the user
    can retry without re-entering it; on success it is cleared.
    """
    db_session = get_session()
    draft = get_draft()
    placed_by = _placed_by()

    try:
        order = commit_order(
            db_session,
            draft,
            g.user_id,
            tax_rate=current_app.config['ORDER_TAX_RATE'],
            placed_by=placed_by
        )
    except OrderHubError as e:
        stage = record_order_failure(placed_by, e)
        current_app.logger.error(
            f"Order submission failed [{type(e).__name__}] placed_by={placed_by} user={g.user_id} "
            f"stage={stage}: {getattr(e, 'cause', None) or e.message}"
        )
        raise

    record_order_committed(placed_by, order.total)
    session.pop(DRAFT_SESSION_KEY, None)

    return jsonify({
        'status': 'ok',
        'message': f'Order {order.order_number} created successfully!',
        'order': order.to_dict(include_items=True)
    }), 201


# =====================================================
# COMMITTED ORDERS
# =====================================================

def _scope_ids() -> Tuple[Any, Any]:
    """(distributor_id, retailer_id) for the current user; one of them is None."""
    db_session = get_session()
    if g.user.role == UserRole.DISTRIBUTOR.value:
        return resolve_distributor_id(db_session, g.user_id), None
    return None, resolve_retailer_id(db_session, g.user_id)


@orders_bp.route('/', methods=['GET'])
@require_login
def list_orders():
    """Orders visible to the user, filterable by ?status= and ?payment_status=."""
    db_session = get_session()
    distributor_id, retailer_id = _scope_ids()
    status = request.args.get('status')

    if distributor_id is not None:
        orders = list_orders_for_distributor(
            db_session, distributor_id, status=status,
            payment_status=request.args.get('payment_status')
        )
    else:
        orders = list_orders_for_retailer(db_session, retailer_id, status=status)

    return jsonify({'orders': [o.to_dict() for o in orders]})


@orders_bp.route('/<int:order_id>', methods=['GET'])
@require_login
def order_detail(order_id):
    distributor_id, retailer_id = _scope_ids()
    order = get_order_details(get_session(), order_id, distributor_id=distributor_id, retailer_id=retailer_id)
    return jsonify({'order': order.to_dict(include_items=True)})


@orders_bp.route('/<int:order_id>/status', methods=['POST'])
@require_login
@require_role(UserRole.DISTRIBUTOR)
def change_status(order_id):
    db_session = get_session()
    distributor_id = resolve_distributor_id(db_session, g.user_id)
    new_status = _json_body().get('status')
    if not new_status:
        raise BusinessLogicError('status is required')
    order = update_order_status(db_session, order_id, new_status, distributor_id)
    return jsonify({'status': 'ok', 'order': order.to_dict()})
