"""Authentication service for password hashing and account verification tokens"""

import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple
import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from atelier.api.errors import ConflictError
from atelier.config import settings
from atelier.models import User


class AuthService:
    """Service for handling passwords, verification tokens and user lookups"""

    @staticmethod
    def hash_password(password: str) -> str:
        """
        Hash a password using bcrypt with salt rounds >= 12

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        password_bytes = password.encode('utf-8')
        salt = bcrypt.gensalt(rounds=12)
        hashed = bcrypt.hashpw(password_bytes, salt)
        return hashed.decode('utf-8')

    @staticmethod
    def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
        """
        Verify a password against its hash

        Args:
            plain_password: Plain text password to verify
            hashed_password: Hashed password to compare against (None for federated-only accounts)

        Returns:
            True if password matches, False otherwise
        """
        if not hashed_password:
            return False
        password_bytes = plain_password.encode('utf-8')
        hashed_bytes = hashed_password.encode('utf-8')
        try:
            return bcrypt.checkpw(password_bytes, hashed_bytes)
        except ValueError:
            # Stored value is not a bcrypt hash
            return False

    @staticmethod
    def generate_verification_token() -> Tuple[str, datetime]:
        """
        Create an email verification token and its expiry

        Returns:
            Tuple of (64 hex character token, expiry timestamp)
        """
        token = secrets.token_hex(32)
        expires = datetime.utcnow() + timedelta(hours=settings.verification_token_hours)
        return token, expires

    @staticmethod
    async def get_user_by_login(db: AsyncSession, login: str) -> Optional[User]:
        """Find a user by username, falling back to email"""
        result = await db.execute(select(User).where(User.username == login))
        user = result.scalar_one_or_none()
        if user:
            return user

        result = await db.execute(select(User).where(User.email == login.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def unique_username(db: AsyncSession, email: str) -> str:
        """
        Derive a username from the local part of an email address,
        appending 1, 2, ... until it is free.
        """
        base = email.split("@")[0] or "user"
        candidate = base
        counter = 1

        while True:
            result = await db.execute(select(User.id).where(User.username == candidate))
            if result.scalar_one_or_none() is None:
                return candidate
            candidate = f"{base}{counter}"
            counter += 1

    @staticmethod
    async def save_new_user(db: AsyncSession, user: User) -> User:
        """
        Insert a new account

        The unique constraints on username and email decide when two
        registrations for the same name race past the lookup.

        Raises:
            ConflictError: If the username or email was taken in the meantime
        """
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("Username or email already registered")
        await db.refresh(user)
        return user
