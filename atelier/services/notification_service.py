"""In-app notifications

Notifications are a best-effort side channel: they are written after the
change that triggered them has been committed, and a failure to write one
never fails the triggering request.
"""

import logging
from typing import List, Optional
from sqlalchemy import select, update, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from atelier.models import Notification, User, UserRole

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for creating and reading per-user notifications"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def notify(
        self,
        user_id: int,
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None,
    ) -> Optional[Notification]:
        """
        Append a notification for a user

        Returns:
            The notification, or None if it could not be stored
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            link=link,
        )
        # Only the savepoint is rolled back on failure; the caller's objects stay loaded
        try:
            async with self.db.begin_nested():
                self.db.add(notification)
        except SQLAlchemyError as e:
            logger.warning(f"Failed to store notification for user {user_id}: {e}")
            return None
        await self.db.commit()

        logger.info(f"Notified user {user_id}: {title}")
        return notification

    async def notify_admins(
        self,
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None,
    ) -> int:
        """
        Send the same notification to every admin

        Returns:
            Number of notifications stored
        """
        try:
            result = await self.db.execute(
                select(User.id).where(User.role == UserRole.ADMIN.value)
            )
            admin_ids = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.warning(f"Failed to look up admins for notification: {e}")
            return 0

        stored = 0
        for admin_id in admin_ids:
            if await self.notify(admin_id, title, message, type=type, link=link):
                stored += 1
        return stored

    async def list_for_user(self, user_id: int) -> List[Notification]:
        """All notifications for a user, newest first"""
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return list(result.scalars().all())

    async def unread_count(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.read.is_(False),
            )
        )
        return result.scalar_one()

    async def get(self, notification_id: int) -> Optional[Notification]:
        result = await self.db.execute(
            select(Notification).where(Notification.id == notification_id)
        )
        return result.scalar_one_or_none()

    async def mark_read(self, notification: Notification) -> Notification:
        """Mark one notification read. Already-read notifications are left as they are."""
        if not notification.read:
            notification.read = True
            await self.db.commit()
            await self.db.refresh(notification)
        return notification

    async def mark_all_read(self, user_id: int) -> int:
        """
        Mark every unread notification of a user read

        Returns:
            Number of notifications changed
        """
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount or 0
