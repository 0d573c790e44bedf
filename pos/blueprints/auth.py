"""Auth blueprint: session login for sale attribution."""
from typing import Any, Dict
from flask import Blueprint, session, g, current_app
from pos.database import get_session
from pos.exceptions import UnauthorizedError
from pos.middleware import require_login
from pos.services.user_service import authenticate, user_to_dict
from pos.blueprints._helpers import json_body

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


@auth_bp.route('/login', methods=['POST'])
def login() -> Dict[str, Any]:
    data = json_body()
    user = authenticate(get_session(), data.get('username'), data.get('password'))
    if user is None:
        current_app.logger.warning(f"Failed login for '{data.get('username')}'")
        raise UnauthorizedError('Invalid username or password')
    
    session.clear()
    session['user_id'] = user.id
    return {'status': 'ok', 'user': user_to_dict(user)}


@auth_bp.route('/logout', methods=['POST'])
def logout() -> Dict[str, Any]:
    session.clear()
    return {'status': 'ok'}


@auth_bp.route('/me')
@require_login
def me() -> Dict[str, Any]:
    return {'user': user_to_dict(g.user)}
