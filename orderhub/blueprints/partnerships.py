"""Partnerships blueprint - distributor requests, retailer responses."""
from flask import Blueprint, request, g, jsonify

from orderhub.database import get_session
from orderhub.exceptions import BusinessLogicError
from orderhub.middleware import require_login, require_role
from orderhub.models import UserRole
from orderhub.services.catalog_service import resolve_distributor_id, resolve_retailer_id
from orderhub.services.partnership_service import send_partnership_request, respond_to_partnership

partnerships_bp = Blueprint('partnerships', __name__, url_prefix='/partnerships')


def _partnership_payload(partnership):
    return {
        'id': partnership.id,
        'distributor_id': partnership.distributor_id,
        'retailer_id': partnership.retailer_id,
        'status': partnership.status,
    }


@partnerships_bp.route('/', methods=['POST'])
@require_login
@require_role(UserRole.DISTRIBUTOR)
def request_partnership():
    db_session = get_session()
    retailer_id = (request.get_json(silent=True) or {}).get('retailer_id')
    if retailer_id in (None, ''):
        raise BusinessLogicError('retailer_id is required')

    distributor_id = resolve_distributor_id(db_session, g.user_id)
    partnership = send_partnership_request(db_session, distributor_id, retailer_id)
    return jsonify({
        'status': 'ok',
        'message': 'Partnership request sent! You can create orders once they accept.',
        'partnership': _partnership_payload(partnership)
    }), 201


@partnerships_bp.route('/<int:partnership_id>/respond', methods=['POST'])
@require_login
@require_role(UserRole.RETAILER)
def respond(partnership_id):
    db_session = get_session()
    data = request.get_json(silent=True) or {}
    if 'accept' not in data:
        raise BusinessLogicError('accept is required')

    retailer_id = resolve_retailer_id(db_session, g.user_id)
    partnership = respond_to_partnership(db_session, partnership_id, retailer_id, bool(data['accept']))
    return jsonify({'status': 'ok', 'partnership': _partnership_payload(partnership)})
