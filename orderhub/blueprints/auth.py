"""
Authentication blueprint.
Handles login, logout and the current-user endpoint.
"""
import logging
from typing import Any, Dict

from flask import Blueprint, request, session, g, jsonify
from sqlalchemy import func

from orderhub.database import get_session
from orderhub.exceptions import AuthenticationError
from orderhub.middleware import require_login
from orderhub.models import AppUser

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


def _request_data() -> Dict[str, Any]:
    """Accept both JSON bodies and classic form posts."""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


def _user_payload(user: AppUser) -> Dict[str, Any]:
    return {
        'id': user.id,
        'email': user.email,
        'name': user.full_name,
        'business_name': user.business_name,
        'role': user.role,
        'distributor_id': user.distributor.id if user.distributor else None,
        'retailer_id': user.retailer.id if user.retailer else None,
    }


@auth_bp.route('/login', methods=['POST'])
def login():
    """Authenticate with email and password."""
    data = _request_data()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''

    if not email or not password:
        raise AuthenticationError('Email and password are required')

    db_session = get_session()
    user = db_session.query(AppUser).filter(func.lower(AppUser.email) == email).first()

    if not user or not user.active or not user.check_password(password):
        logger.warning(f"Failed login attempt for {email}")
        raise AuthenticationError('Invalid email or password')

    session.clear()
    session['user_id'] = user.id
    session.permanent = True
    logger.info(f"User {user.id} logged in")

    return jsonify({'status': 'ok', 'user': _user_payload(user)})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Clear the session (including any order draft)."""
    session.clear()
    return jsonify({'status': 'ok'})


@auth_bp.route('/me')
@require_login
def me():
    return jsonify({'status': 'ok', 'user': _user_payload(g.user)})
