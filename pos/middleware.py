"""Middleware for authentication context."""
from functools import wraps
from typing import Optional
from flask import session, g
from pos.database import get_session
from pos.exceptions import UnauthorizedError
from pos.models import User


def load_user():
    """
    Load current user into g (Flask's per-request global).
    
    Called before each request. Sets g.user to None when the session has no
    user or the user no longer exists.
    """
    g.user = None
    
    user_id = session.get('user_id')
    if user_id:
        user = get_session().get(User, user_id)
        if user is None:
            session.pop('user_id', None)
            return
        g.user = user


def actor_scope() -> Optional[str]:
    """Reporting scope for the current user: None (everything) for admins, else own username."""
    user = g.get('user')
    if user is None or user.is_admin:
        return None
    return user.username


def require_login(f):
    """Decorator: Require user to be logged in (401 JSON otherwise)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user') is None:
            raise UnauthorizedError('Login required')
        return f(*args, **kwargs)
    return decorated_function


def require_admin(f):
    """Decorator: Require an ADMIN user (403 otherwise)."""
    @wraps(f)
    @require_login
    def decorated_function(*args, **kwargs):
        if not g.user.is_admin:
            raise UnauthorizedError('Admin role required', status_code=403)
        return f(*args, **kwargs)
    return decorated_function
