"""Tests for authentication and session services"""

import pytest
from datetime import datetime, timedelta
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from atelier.api.errors import ConflictError
from atelier.models import User, UserSession
from atelier.services.auth_service import AuthService
from atelier.services.session_service import SessionService

from conftest import create_user


class TestPasswordHashing:
    """Test password hashing and verification"""

    def test_hash_password(self):
        """Test password hashing generates a hash"""
        password = "TestPassword123!"
        hashed = AuthService.hash_password(password)

        assert hashed != password
        assert hashed.startswith("$2b$12$")  # bcrypt, 12 rounds

    def test_verify_password_correct(self):
        hashed = AuthService.hash_password("TestPassword123!")

        assert AuthService.verify_password("TestPassword123!", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = AuthService.hash_password("TestPassword123!")

        assert AuthService.verify_password("WrongPassword", hashed) is False

    def test_hash_same_password_different_hashes(self):
        """Hashing the same password twice produces different hashes (due to salt)"""
        password = "TestPassword123!"
        hash1 = AuthService.hash_password(password)
        hash2 = AuthService.hash_password(password)

        assert hash1 != hash2
        assert AuthService.verify_password(password, hash1) is True
        assert AuthService.verify_password(password, hash2) is True

    @pytest.mark.parametrize("stored", [None, "", "plain-text-password"])
    def test_verify_without_usable_hash(self, stored):
        """Federated-only accounts and corrupt values never match"""
        assert AuthService.verify_password("plain-text-password", stored) is False


class TestVerificationToken:
    """Email verification tokens"""

    def test_token_format(self):
        token, expires = AuthService.generate_verification_token()

        assert len(token) == 64
        int(token, 16)
        assert timedelta(hours=23) < expires - datetime.utcnow() <= timedelta(hours=24)

    def test_tokens_are_unique(self):
        tokens = {AuthService.generate_verification_token()[0] for _ in range(10)}

        assert len(tokens) == 10


@pytest.mark.asyncio
class TestUserLookup:
    """AuthService lookups against the database"""

    async def test_login_by_username_or_email(self, db_session: AsyncSession):
        user = await create_user(db_session, "frank")

        assert (await AuthService.get_user_by_login(db_session, "frank")).id == user.id
        assert (await AuthService.get_user_by_login(db_session, "FRANK@example.com")).id == user.id
        assert await AuthService.get_user_by_login(db_session, "nobody") is None

    async def test_unique_username(self, db_session: AsyncSession):
        assert await AuthService.unique_username(db_session, "grace@example.com") == "grace"

        await create_user(db_session, "grace")
        await create_user(db_session, "grace1")

        assert await AuthService.unique_username(db_session, "grace@elsewhere.com") == "grace2"


@pytest.mark.asyncio
class TestSessions:
    """SessionService"""

    async def test_session_resolves_to_user(self, db_session: AsyncSession, alice):
        session = await SessionService.create_session(db_session, alice)

        assert len(session.id) >= 40
        user = await SessionService.get_user(db_session, session.id)
        assert user.id == alice.id

    async def test_unknown_session(self, db_session: AsyncSession):
        assert await SessionService.get_user(db_session, "unknown") is None

    async def test_expired_session_is_removed(self, db_session: AsyncSession, alice):
        session = await SessionService.create_session(db_session, alice)
        session_id = session.id
        session.expires_at = datetime.utcnow() - timedelta(minutes=1)
        await db_session.commit()

        assert await SessionService.get_user(db_session, session_id) is None

        result = await db_session.execute(select(UserSession).where(UserSession.id == session_id))
        assert result.scalar_one_or_none() is None

    async def test_destroy_session(self, db_session: AsyncSession, alice):
        session = await SessionService.create_session(db_session, alice)
        session_id = session.id

        await SessionService.destroy_session(db_session, session_id)
        await SessionService.destroy_session(db_session, session_id)

        assert await SessionService.get_user(db_session, session_id) is None


@pytest.mark.asyncio
class TestSaveNewUser:
    """AuthService.save_new_user"""

    async def test_saves_and_refreshes(self, db_session: AsyncSession):
        user = await AuthService.save_new_user(
            db_session,
            User(username="henk", email="henk@example.com", name="Henk", role="client"),
        )

        assert user.id is not None
        assert user.verified is False

    async def test_taken_email_is_a_conflict(self, db_session: AsyncSession, alice):
        with pytest.raises(ConflictError):
            await AuthService.save_new_user(
                db_session,
                User(username="henk", email=alice.email, name="Henk", role="client"),
            )

        result = await db_session.execute(select(User).where(User.username == "henk"))
        assert result.scalar_one_or_none() is None
