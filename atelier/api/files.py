"""Project file endpoints"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select
from starlette.concurrency import run_in_threadpool

from atelier.database import get_db
from atelier.models import ProjectFile, User
from atelier.schemas.auth import MessageResponse
from atelier.schemas.project_file import ProjectFileResponse
from atelier.services import S3Service
from atelier.services.notification_service import NotificationService
from atelier.services.query_cache import mark_stale, project_invalidation_keys
from atelier.services.s3_service import (
    S3ConnectionError,
    InvalidFileTypeError,
    FileTooLargeError,
)
from atelier.api.dependencies import get_current_user, get_accessible_project
from atelier.api.errors import NotFoundError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard/projects/{project_id}/files", tags=["Files"])


@router.get("", response_model=List[ProjectFileResponse])
async def list_files(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List a project's files, newest first"""
    await get_accessible_project(db, project_id, current_user)

    result = await db.execute(
        select(ProjectFile)
        .where(ProjectFile.project_id == project_id)
        .order_by(ProjectFile.created_at.desc(), ProjectFile.id.desc())
    )
    return [ProjectFileResponse.model_validate(f) for f in result.scalars().all()]


@router.post("", response_model=ProjectFileResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    project_id: int,
    response: Response,
    file: UploadFile = File(..., description="File to attach to the project"),
    description: Optional[str] = Form(None),
    notify_admin: bool = Form(False, description="Let the admins know about this upload"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Upload a file to a project

    The bytes go to object storage first; the metadata row is written
    once the upload has succeeded.

    Args:
        project_id: Project to attach the file to
        response: Response carrying the cache invalidation header
        file: Multipart file
        description: Optional description shown with the file
        notify_admin: Notify every admin about the upload
        db: Database session
        current_user: Uploader

    Returns:
        Stored file metadata

    Raises:
        ValidationError: If the file is empty, too large or of a disallowed type
        UpstreamError: If object storage rejects the upload
    """
    project = await get_accessible_project(db, project_id, current_user)
    project_name = project.name

    file_bytes = await file.read()
    file_name = file.filename or "upload"
    content_type = file.content_type or "application/octet-stream"

    try:
        s3_service = S3Service()
        s3_service.validate_file(len(file_bytes), content_type)
        s3_key = s3_service.generate_s3_key(project_id, file_name)
        file_url = await run_in_threadpool(
            s3_service.upload_bytes, file_bytes, s3_key, content_type
        )
    except (FileTooLargeError, InvalidFileTypeError) as e:
        raise ValidationError(str(e))
    except S3ConnectionError as e:
        logger.error(f"Upload to storage failed for project {project_id}: {e}")
        raise UpstreamError("File storage is unavailable, please try again later")

    record = ProjectFile(
        project_id=project_id,
        name=file_name,
        description=description,
        file_url=file_url,
        file_key=s3_key,
        file_type=content_type,
        file_size=len(file_bytes),
        uploaded_by=current_user.id,
    )
    try:
        db.add(record)
        await db.commit()
        await db.refresh(record)
    except SQLAlchemyError:
        logger.error(f"Stored object {s3_key} has no metadata row; it is orphaned")
        raise

    logger.info(f"User {current_user.id} uploaded {file_name} ({len(file_bytes)} bytes) to project {project_id}")
    payload = ProjectFileResponse.model_validate(record)

    if notify_admin:
        await NotificationService(db).notify_admins(
            "New file uploaded",
            f'{current_user.name} uploaded "{file_name}" to project "{project_name}".',
            type="info",
            link=f"/admin/projects/{project_id}",
        )

    mark_stale(response, project_invalidation_keys(project_id))
    return payload


@router.delete("/{file_id}", response_model=MessageResponse)
async def delete_file(
    project_id: int,
    file_id: int,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Delete a project file

    The storage object is removed after the row; if that fails the object
    is left behind and logged.

    Raises:
        NotFoundError: If the project or file does not exist
        AuthorizationError: If the project belongs to another client
    """
    await get_accessible_project(db, project_id, current_user)

    result = await db.execute(
        select(ProjectFile).where(
            ProjectFile.id == file_id,
            ProjectFile.project_id == project_id,
        )
    )
    record = result.scalar_one_or_none()
    if not record:
        raise NotFoundError(f"File {file_id} not found")

    s3_key = record.file_key
    await db.delete(record)
    await db.commit()
    logger.info(f"User {current_user.id} deleted file {file_id} from project {project_id}")

    if s3_key:
        try:
            await run_in_threadpool(S3Service().delete_object, s3_key)
        except S3ConnectionError as e:
            logger.warning(f"Object {s3_key} could not be removed from storage: {e}")

    mark_stale(response, project_invalidation_keys(project_id))
    return MessageResponse(message="File deleted")
