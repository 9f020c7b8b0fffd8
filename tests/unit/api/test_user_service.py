"""
Tests for the user service.

Tests:
- Registration and login
- Profile updates
- Account management
"""

import pytest

from api.services import users as user_service
from core.exceptions import AuthenticationFailedError, ConflictError, NotFoundError
from core.security import verify_jwt_token, verify_password
from database.models.users import UserRole


class TestRegistration:
    """Test registration and login."""

    async def test_register_returns_token(self, db_session):
        result = await user_service.register_user(
            db_session, "Ada", "Ada@Example.com", "password123"
        )

        user = result["user"]
        assert user.email == "ada@example.com"
        assert user.role == UserRole.USER
        assert user.last_login_at is not None
        assert result["token_type"] == "bearer"

        payload = verify_jwt_token(result["token"])
        assert payload["user_id"] == user.id
        assert payload["role"] == "user"

    async def test_password_is_hashed(self, db_session):
        result = await user_service.register_user(db_session, "Ada", "ada@example.com", "password123")
        user = result["user"]

        assert user.password_hash != "password123"
        assert verify_password("password123", user.password_hash)

    async def test_duplicate_email(self, db_session):
        await user_service.register_user(db_session, "Ada", "ada@example.com", "password123")

        with pytest.raises(ConflictError, match="Email already exists"):
            await user_service.register_user(db_session, "Ada", "ADA@example.com", "other-pass")

    async def test_login(self, db_session, staff_user):
        result = await user_service.authenticate_user(db_session, "staff@example.com", "password123")
        assert result["user"].id == staff_user.id

    @pytest.mark.parametrize("email,password", [
        ("staff@example.com", "wrong-password"),
        ("nobody@example.com", "password123"),
    ])
    async def test_bad_credentials(self, db_session, staff_user, email, password):
        with pytest.raises(AuthenticationFailedError, match="Invalid email or password"):
            await user_service.authenticate_user(db_session, email, password)

    async def test_inactive_account(self, db_session, staff_user):
        await user_service.update_user(db_session, staff_user.id, {"is_active": False})

        with pytest.raises(AuthenticationFailedError, match="deactivated"):
            await user_service.authenticate_user(db_session, "staff@example.com", "password123")


class TestUserManagement:
    """Test profile and admin operations."""

    async def test_update_profile(self, db_session, staff_user):
        updated = await user_service.update_user(
            db_session,
            staff_user.id,
            {"name": "Renamed", "email": None, "password": "new-password"},
        )

        assert updated.name == "Renamed"
        assert updated.email == "staff@example.com"
        assert verify_password("new-password", updated.password_hash)

    async def test_update_email_conflict(self, db_session, staff_user, manager_user):
        with pytest.raises(ConflictError):
            await user_service.update_user(
                db_session, staff_user.id, {"email": "manager@example.com"}
            )

    async def test_keep_own_email(self, db_session, staff_user):
        updated = await user_service.update_user(
            db_session, staff_user.id, {"email": "STAFF@example.com"}
        )
        assert updated.email == "staff@example.com"

    async def test_list_and_active(self, db_session, staff_user, manager_user, admin_user):
        await user_service.update_user(db_session, manager_user.id, {"is_active": False})

        users, total = await user_service.list_users(db_session, limit=2)
        active = await user_service.get_active_users(db_session)

        assert total == 3
        assert len(users) == 2
        assert {u.id for u in active} == {staff_user.id, admin_user.id}

    async def test_delete(self, db_session, staff_user):
        await user_service.delete_user(db_session, staff_user.id)

        with pytest.raises(NotFoundError):
            await user_service.get_user(db_session, staff_user.id)
