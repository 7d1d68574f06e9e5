"""Server-side session store backed by the sessions table"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional
from fastapi import Response
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from atelier.config import settings
from atelier.models import User, UserSession

logger = logging.getLogger(__name__)


class SessionService:
    """Create, resolve and destroy login sessions"""

    @staticmethod
    async def create_session(db: AsyncSession, user: User) -> UserSession:
        """
        Open a new session for a user

        Args:
            db: Database session
            user: Authenticated user

        Returns:
            The persisted session; its id is the cookie value
        """
        session = UserSession(
            id=secrets.token_urlsafe(32),
            user_id=user.id,
            expires_at=datetime.utcnow() + timedelta(days=settings.session_max_age_days),
        )
        db.add(session)
        await db.commit()
        logger.info(f"Opened session for user {user.id}")
        return session

    @staticmethod
    async def get_user(db: AsyncSession, session_id: str) -> Optional[User]:
        """
        Resolve a session id to its user

        Returns:
            The user, or None when the session is unknown or expired
        """
        result = await db.execute(select(UserSession).where(UserSession.id == session_id))
        session = result.scalar_one_or_none()
        if session is None:
            return None

        if session.is_expired(datetime.utcnow()):
            await db.delete(session)
            await db.commit()
            return None

        result = await db.execute(select(User).where(User.id == session.user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def destroy_session(db: AsyncSession, session_id: str) -> None:
        """Delete a session. Unknown ids are ignored."""
        await db.execute(delete(UserSession).where(UserSession.id == session_id))
        await db.commit()

    @staticmethod
    def set_cookie(response: Response, session: UserSession) -> None:
        response.set_cookie(
            key=settings.session_cookie_name,
            value=session.id,
            max_age=settings.session_max_age_seconds,
            httponly=True,
            secure=settings.session_cookie_secure,
            samesite="lax",
        )

    @staticmethod
    def clear_cookie(response: Response) -> None:
        response.delete_cookie(
            key=settings.session_cookie_name,
            httponly=True,
            secure=settings.session_cookie_secure,
            samesite="lax",
        )
