"""Middleware for authentication and role context."""
from functools import wraps
from flask import session, g, current_app
from orderhub.database import get_session
from orderhub.exceptions import AuthenticationError, UnauthorizedError
from orderhub.models import AppUser


def load_user():
    """
    Load current user into g (Flask's per-request global).

    Called before each request. Sets g.user and g.user_id if authenticated.
    """
    g.user = None
    g.user_id = None

    try:
        user_id = session.get('user_id')
        if user_id:
            db_session = get_session()
            if not db_session:
                return

            user = db_session.query(AppUser).filter_by(id=user_id, active=True).first()
            if user:
                g.user = user
                g.user_id = user.id
            else:
                # Stale or deactivated account
                session.pop('user_id', None)
    except Exception as e:
        # Avoid crashing the whole app if context loading fails
        current_app.logger.error(f"Error in load_user: {e}")


def require_login(f):
    """Decorator: Require an authenticated user (401 otherwise)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user') is None:
            raise AuthenticationError()
        return f(*args, **kwargs)
    return decorated_function


def require_role(*roles):
    """
    Decorator: Require the user to have one of the given roles.

    Must be used AFTER require_login.
    """
    allowed = {getattr(r, 'value', r) for r in roles}

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if g.get('user') is None:
                raise AuthenticationError()
            if g.user.role not in allowed:
                raise UnauthorizedError(f"This action requires one of the roles: {', '.join(sorted(allowed))}")
            return f(*args, **kwargs)
        return decorated_function
    return decorator
