"""API dependencies for authentication and authorization"""

from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from atelier.config import settings
from atelier.database import get_db
from atelier.models import Project, User
from atelier.services.session_service import SessionService
from atelier.api.errors import AuthenticationError, AuthorizationError, NotFoundError


async def get_optional_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Get the user behind the session cookie, if any.

    Args:
        request: Incoming request carrying the session cookie
        db: Database session

    Returns:
        User object or None
    """
    session_id = request.cookies.get(settings.session_cookie_name)
    if not session_id:
        return None
    return await SessionService.get_user(db, session_id)


async def get_current_user(
    user: Optional[User] = Depends(get_optional_current_user),
) -> User:
    """
    Get current authenticated user from the session cookie.

    Raises:
        AuthenticationError: If there is no valid session
    """
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """
    Require the current user to be an admin.

    Raises:
        AuthorizationError: If the user is not an admin
    """
    if not user.is_admin:
        raise AuthorizationError("Admin access required")
    return user


async def get_project_or_404(db: AsyncSession, project_id: int) -> Project:
    result = await db.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()
    if not project:
        raise NotFoundError(f"Project {project_id} not found")
    return project


async def get_accessible_project(db: AsyncSession, project_id: int, user: User) -> Project:
    """
    Load a project the user may see: their own, or any project for admins.

    Raises:
        NotFoundError: If the project does not exist
        AuthorizationError: If a client asks for someone else's project
    """
    project = await get_project_or_404(db, project_id)
    if not user.is_admin and project.user_id != user.id:
        raise AuthorizationError("You do not have access to this project")
    return project
