"""User directory used for sale attribution and login."""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from pos.exceptions import ValidationError, StorageError
from pos.models import User, UserRole

logger = logging.getLogger(__name__)


def normalize_username(username: Optional[str]) -> str:
    return (username or '').strip().lower()


def list_users(session) -> List[User]:
    return session.query(User).order_by(User.username).all()


def find_by_username(session, username: Optional[str]) -> Optional[User]:
    """Case-insensitive lookup; blank usernames never match."""
    normalized = normalize_username(username)
    if not normalized:
        return None
    return session.query(User).filter(User.username == normalized).first()


def authenticate(session, username: str, password: str) -> Optional[User]:
    """Return the user when the password matches, else None."""
    user = find_by_username(session, username)
    if user is None or not password:
        return None
    return user if user.check_password(password) else None


def save_user(session, username: str, display_name: str, role, password: Optional[str]) -> User:
    """
    Insert or update a user by username.
    
    A blank password keeps the existing hash on update and is rejected for
    new users. Display name falls back to the username.
    """
    normalized = normalize_username(username)
    if not normalized:
        raise ValidationError('Username cannot be empty')
    
    try:
        role_value = role.value if isinstance(role, UserRole) else UserRole(str(role).strip().upper()).value
    except ValueError:
        raise ValidationError(f'Invalid role: {role}')
    
    existing = find_by_username(session, normalized)
    password = (password or '').strip()
    if not password and existing is None:
        raise ValidationError('Password cannot be empty for new user')
    
    user = existing or User(username=normalized)
    user.display_name = (display_name or '').strip() or normalized
    user.role = role_value
    if password:
        user.set_password(password)
    
    try:
        if existing is None:
            session.add(user)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception(f"Error saving user {normalized}")
        raise StorageError(f'Could not save user {normalized}: {e}') from e
    
    logger.info(f"User {'updated' if existing else 'created'}: {normalized} ({role_value})")
    return user


def ensure_admin_account(session, username: str = 'admin', password: str = 'admin123') -> User:
    """Create the bootstrap admin when it does not exist yet."""
    existing = find_by_username(session, username)
    if existing is not None:
        return existing
    logger.info(f"Creating default admin user '{normalize_username(username)}'")
    return save_user(session, username, 'Administrator', UserRole.ADMIN, password)


def user_to_dict(user: User) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'display_name': user.display_name,
        'role': user.role,
        'created_at': user.created_at.isoformat() if user.created_at else None,
    }
