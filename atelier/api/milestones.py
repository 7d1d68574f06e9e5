"""Project milestone endpoints"""

import logging
from datetime import datetime
from typing import List
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from atelier.database import get_db
from atelier.models import Milestone, MilestoneStatus, User
from atelier.schemas.milestone import MilestoneCreate, MilestoneUpdate, MilestoneResponse
from atelier.services.query_cache import mark_stale, project_invalidation_keys
from atelier.api.dependencies import get_current_user, get_accessible_project
from atelier.api.errors import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard/projects/{project_id}/milestones", tags=["Milestones"])


@router.get("", response_model=List[MilestoneResponse])
async def list_milestones(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List a project's milestones in timeline order"""
    await get_accessible_project(db, project_id, current_user)

    result = await db.execute(
        select(Milestone)
        .where(Milestone.project_id == project_id)
        .order_by(Milestone.order, Milestone.id)
    )
    return [MilestoneResponse.model_validate(m) for m in result.scalars().all()]


@router.post("", response_model=MilestoneResponse, status_code=status.HTTP_201_CREATED)
async def create_milestone(
    project_id: int,
    data: MilestoneCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Add a milestone to a project

    Raises:
        NotFoundError: If the project does not exist
        AuthorizationError: If the project belongs to another client
    """
    await get_accessible_project(db, project_id, current_user)

    milestone = Milestone(project_id=project_id, **data.model_dump())
    if milestone.status == MilestoneStatus.COMPLETED.value:
        milestone.completed_date = datetime.utcnow()

    db.add(milestone)
    await db.commit()
    await db.refresh(milestone)
    logger.info(f"Added milestone {milestone.id} to project {project_id}")

    mark_stale(response, project_invalidation_keys(project_id))
    return MilestoneResponse.model_validate(milestone)


@router.patch("/{milestone_id}", response_model=MilestoneResponse)
async def update_milestone(
    project_id: int,
    milestone_id: int,
    data: MilestoneUpdate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Edit a milestone or advance its status

    Completing a milestone records the completion date.

    Raises:
        NotFoundError: If the project or milestone does not exist
        AuthorizationError: If the project belongs to another client
    """
    await get_accessible_project(db, project_id, current_user)

    result = await db.execute(
        select(Milestone).where(
            Milestone.id == milestone_id,
            Milestone.project_id == project_id,
        )
    )
    milestone = result.scalar_one_or_none()
    if not milestone:
        raise NotFoundError(f"Milestone {milestone_id} not found")

    for field, value in data.changes().items():
        setattr(milestone, field, value)
    if milestone.status == MilestoneStatus.COMPLETED.value and milestone.completed_date is None:
        milestone.completed_date = datetime.utcnow()
    milestone.updated_at = datetime.utcnow()

    await db.commit()
    await db.refresh(milestone)

    mark_stale(response, project_invalidation_keys(project_id))
    return MilestoneResponse.model_validate(milestone)
