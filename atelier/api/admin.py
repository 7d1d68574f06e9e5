"""Admin area endpoints: client accounts, project approval and the lead inbox"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from atelier.database import get_db
from atelier.models import Contact, User, UserRole
from atelier.schemas.admin import ClientCreate
from atelier.schemas.auth import UserResponse
from atelier.schemas.contact import ContactResponse
from atelier.schemas.project import (
    AdminProjectResponse,
    ProjectDetailResponse,
    ProjectResponse,
    ProjectUpdate,
    RejectRequest,
)
from atelier.services.auth_service import AuthService
from atelier.services.notification_service import NotificationService
from atelier.services.project_lifecycle import ProjectLifecycleService
from atelier.services.project_service import ProjectService
from atelier.services.query_cache import (
    collection_etag,
    mark_stale,
    project_invalidation_keys,
    revalidate,
)
from atelier.api.auth import ensure_unique_account
from atelier.api.dependencies import require_admin, get_project_or_404
from atelier.api.errors import NotFoundError
from atelier.api.projects import detail_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/clients", response_model=List[UserResponse])
async def list_clients(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """List every client account"""
    result = await db.execute(
        select(User).where(User.role == UserRole.CLIENT.value).order_by(User.id)
    )
    return [UserResponse.model_validate(u) for u in result.scalars().all()]


@router.post("/clients", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """
    Create a client account

    Accounts created by an admin are verified straight away.

    Raises:
        ConflictError: If the username or email is taken (400)
    """
    await ensure_unique_account(db, data.username, data.email)

    user = User(
        username=data.username,
        email=data.email,
        password_hash=AuthService.hash_password(data.password),
        name=data.name,
        company=data.company,
        role=UserRole.CLIENT.value,
        verified=True,
        preferences={},
    )
    await AuthService.save_new_user(db, user)
    logger.info(f"Admin {admin.id} created client {user.id} ({user.username})")

    payload = UserResponse.model_validate(user)
    await NotificationService(db).notify(
        user.id,
        "Welcome to Digitaal Atelier",
        "Your client account has been set up. You can follow your projects from the dashboard.",
        type="success",
    )
    return payload


@router.get("/projects", response_model=List[AdminProjectResponse])
async def list_all_projects(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """
    List every project with its owner

    Responds 304 when the client's cached copy (If-None-Match) is current.
    """
    rows = await ProjectService(db).list_all()
    projects = [
        AdminProjectResponse.model_validate({
            **ProjectResponse.model_validate(project).model_dump(),
            "owner_name": owner.name,
            "owner_email": owner.email,
            "owner_company": owner.company,
        })
        for project, owner in rows
    ]

    etag = collection_etag(
        projects, "status", "updated_at", "user_id", "owner_name", "owner_email", "owner_company"
    )
    not_modified = revalidate(request, response, etag)
    if not_modified:
        return not_modified

    return projects


@router.put("/projects/{project_id}", response_model=ProjectDetailResponse)
async def update_any_project(
    project_id: int,
    data: ProjectUpdate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """
    Update any project, including its status

    Raises:
        NotFoundError: If the project does not exist
        InvalidTransitionError: If the status change is not allowed
    """
    project = await get_project_or_404(db, project_id)
    service = ProjectService(db)
    project = await service.update(project, data, admin)

    mark_stale(response, project_invalidation_keys(project_id))
    return await detail_response(service, project)


@router.post("/projects/{project_id}/approve", response_model=ProjectResponse)
async def approve_project(
    project_id: int,
    response: Response,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """
    Approve a pending project and notify its owner

    Raises:
        NotFoundError: If the project does not exist
        InvalidTransitionError: If the project is not pending
    """
    project = await get_project_or_404(db, project_id)
    project = await ProjectLifecycleService(db).approve(project)
    logger.info(f"Admin {admin.id} approved project {project_id}")

    mark_stale(response, project_invalidation_keys(project_id))
    return ProjectResponse.model_validate(project)


@router.post("/projects/{project_id}/reject", response_model=ProjectResponse)
async def reject_project(
    project_id: int,
    response: Response,
    data: Optional[RejectRequest] = None,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """
    Reject a pending project and notify its owner

    Args:
        project_id: Project to reject
        response: Response carrying the cache invalidation header
        data: Optional reason passed on to the owner
        db: Database session
        admin: Acting admin

    Raises:
        NotFoundError: If the project does not exist
        InvalidTransitionError: If the project is not pending
    """
    project = await get_project_or_404(db, project_id)
    reason = data.reason if data else None
    project = await ProjectLifecycleService(db).reject(project, reason=reason)
    logger.info(f"Admin {admin.id} rejected project {project_id}")

    mark_stale(response, project_invalidation_keys(project_id))
    return ProjectResponse.model_validate(project)


@router.get("/contacts", response_model=List[ContactResponse])
async def list_contacts(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Contact form submissions, newest first"""
    result = await db.execute(
        select(Contact).order_by(Contact.created_at.desc(), Contact.id.desc())
    )
    return [ContactResponse.model_validate(c) for c in result.scalars().all()]


@router.post("/contacts/{contact_id}/read", response_model=ContactResponse)
async def mark_contact_read(
    contact_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Mark a lead as handled"""
    result = await db.execute(select(Contact).where(Contact.id == contact_id))
    contact = result.scalar_one_or_none()
    if not contact:
        raise NotFoundError(f"Contact {contact_id} not found")

    if not contact.read:
        contact.read = True
        await db.commit()
        await db.refresh(contact)
    return ContactResponse.model_validate(contact)
