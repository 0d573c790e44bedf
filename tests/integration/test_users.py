"""
Integration tests for the user directory.
"""

import pytest

from pos.exceptions import ValidationError
from pos.models import User, UserRole
from pos.services import user_service


class TestSaveUser:

    def test_username_is_normalized(self, session):
        user = user_service.save_user(session, '  Mary ', '', 'cashier', 'pw')

        assert user.username == 'mary'
        assert user.display_name == 'mary'
        assert user.role == UserRole.CASHIER.value
        assert user.password_hash != 'pw'

    def test_update_keeps_password_when_blank(self, session, cashier):
        user_service.save_user(session, 'cashier1', 'Renamed', UserRole.ADMIN, '')

        user = user_service.authenticate(session, 'CASHIER1', 'secret1')
        assert user is not None
        assert user.display_name == 'Renamed'
        assert user.is_admin

    def test_new_user_requires_password(self, session):
        with pytest.raises(ValidationError):
            user_service.save_user(session, 'nopass', 'No Pass', 'CASHIER', '  ')

    def test_invalid_role(self, session):
        with pytest.raises(ValidationError):
            user_service.save_user(session, 'x', 'X', 'MANAGER', 'pw')

    def test_blank_username(self, session):
        with pytest.raises(ValidationError):
            user_service.save_user(session, ' ', 'X', 'CASHIER', 'pw')


class TestAuthenticate:

    def test_wrong_password(self, session, cashier):
        assert user_service.authenticate(session, 'cashier1', 'nope') is None
        assert user_service.authenticate(session, 'cashier1', '') is None
        assert user_service.authenticate(session, 'ghost', 'secret1') is None

    def test_ensure_admin_account_is_idempotent(self, session):
        first = user_service.ensure_admin_account(session)
        second = user_service.ensure_admin_account(session, 'ADMIN', 'other')

        assert first.id == second.id
        assert session.query(User).count() == 1
        assert user_service.authenticate(session, 'admin', 'admin123') is not None

    def test_list_users(self, session, cashier):
        assert [u.username for u in user_service.list_users(session)] == ['admin', 'cashier1']
