"""Client dashboard project endpoints"""

import logging
from typing import List
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from atelier.database import get_db
from atelier.models import Project, User
from atelier.schemas.auth import MessageResponse
from atelier.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectDetailResponse,
)
from atelier.services.project_service import ProjectService
from atelier.services.query_cache import (
    collection_etag,
    mark_stale,
    project_invalidation_keys,
    revalidate,
)
from atelier.services.s3_service import S3Service, S3ServiceError
from atelier.api.dependencies import get_current_user, get_accessible_project
from atelier.api.errors import AuthorizationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard/projects", tags=["Projects"])


async def detail_response(service: ProjectService, project: Project) -> ProjectDetailResponse:
    progress = await service.progress(project)
    return ProjectDetailResponse.model_validate(
        {**ProjectResponse.model_validate(project).model_dump(), **progress}
    )


async def remove_stored_files(keys: List[str]) -> None:
    """Delete storage objects of removed files; failures only leave orphans"""
    if not keys:
        return
    try:
        s3_service = S3Service()
        for key in keys:
            await run_in_threadpool(s3_service.delete_object, key)
    except S3ServiceError as e:
        logger.warning(f"Could not remove stored files, orphaned objects left behind: {e}")


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    List the current user's projects, oldest first

    Responds 304 when the client's cached copy (If-None-Match) is current.
    """
    projects = await ProjectService(db).list_for_user(current_user.id)

    not_modified = revalidate(
        request, response, collection_etag(projects, "status", "updated_at")
    )
    if not_modified:
        return not_modified

    return [ProjectResponse.model_validate(p) for p in projects]


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Submit a new project request

    The project starts pending whatever status is sent, and every admin
    is notified.

    Args:
        data: Project fields (name, type, description and intake answers)
        response: Response carrying the cache invalidation header
        db: Database session
        current_user: Project owner

    Returns:
        Created project
    """
    project = await ProjectService(db).create(current_user, data)
    mark_stale(response, project_invalidation_keys(project.id))
    return ProjectResponse.model_validate(project)


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get a project with its milestone progress

    Raises:
        NotFoundError: If the project does not exist
        AuthorizationError: If the project belongs to another client
    """
    project = await get_accessible_project(db, project_id, current_user)
    return await detail_response(ProjectService(db), project)


@router.put("/{project_id}", response_model=ProjectDetailResponse)
async def update_project(
    project_id: int,
    data: ProjectUpdate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Update a project

    Clients may edit their own project's details. Changing the status is
    reserved for admins and follows the allowed transitions.

    Raises:
        NotFoundError: If the project does not exist
        AuthorizationError: If the user may not make this change
        InvalidTransitionError: If the status change is not allowed
    """
    project = await get_accessible_project(db, project_id, current_user)
    service = ProjectService(db)
    project = await service.update(project, data, current_user)

    mark_stale(response, project_invalidation_keys(project_id))
    return await detail_response(service, project)


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: int,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Delete a project with its milestones and files

    Only the owner may delete a project.

    Raises:
        NotFoundError: If the project does not exist
        AuthorizationError: If the user does not own the project
    """
    project = await get_accessible_project(db, project_id, current_user)
    if project.user_id != current_user.id:
        raise AuthorizationError("Only the project owner can delete a project")

    keys = await ProjectService(db).delete(project)
    await remove_stored_files(keys)

    mark_stale(response, project_invalidation_keys(project_id))
    return MessageResponse(message="Project deleted")
