"""Catalog blueprint - products and trading partners for the ordering flow."""
from flask import Blueprint, request, g, jsonify

from orderhub.database import get_session
from orderhub.exceptions import BusinessLogicError, UnauthorizedError
from orderhub.middleware import require_login, require_role
from orderhub.models import UserRole
from orderhub.services.catalog_service import (
    load_catalog, list_partner_retailers, list_available_retailers, list_partner_distributors,
    resolve_distributor_id, resolve_retailer_id, has_accepted_partnership
)

catalog_bp = Blueprint('catalog', __name__, url_prefix='/catalog')


@catalog_bp.route('/products')
@require_login
def list_products():
    """
    Distributors see their own catalog; retailers pass ?distributor_id= and
    must have an accepted partnership with that distributor.
    """
    db_session = get_session()

    if g.user.role == UserRole.DISTRIBUTOR.value:
        distributor_id = resolve_distributor_id(db_session, g.user_id)
    else:
        raw_id = request.args.get('distributor_id', '').strip()
        if not raw_id.isdigit():
            raise BusinessLogicError('distributor_id is required')
        distributor_id = int(raw_id)
        retailer_id = resolve_retailer_id(db_session, g.user_id)
        if not has_accepted_partnership(db_session, distributor_id, retailer_id):
            raise UnauthorizedError('You are not a partner of this distributor')

    catalog = load_catalog(db_session, distributor_id)
    return jsonify({'products': [p.to_dict() for p in catalog.values()]})


@catalog_bp.route('/retailers')
@require_login
@require_role(UserRole.DISTRIBUTOR)
def partner_retailers():
    db_session = get_session()
    distributor_id = resolve_distributor_id(db_session, g.user_id)
    return jsonify({'retailers': [r.to_dict() for r in list_partner_retailers(db_session, distributor_id)]})


@catalog_bp.route('/retailers/available')
@require_login
@require_role(UserRole.DISTRIBUTOR)
def available_retailers():
    """Retailers the distributor can send a partnership request to."""
    db_session = get_session()
    distributor_id = resolve_distributor_id(db_session, g.user_id)
    return jsonify({'retailers': [r.to_dict() for r in list_available_retailers(db_session, distributor_id)]})


@catalog_bp.route('/distributors')
@require_login
@require_role(UserRole.RETAILER)
def partner_distributors():
    db_session = get_session()
    retailer_id = resolve_retailer_id(db_session, g.user_id)
    return jsonify({'distributors': [d.to_dict() for d in list_partner_distributors(db_session, retailer_id)]})
