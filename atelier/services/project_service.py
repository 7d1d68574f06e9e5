"""Project repository operations shared by the dashboard and admin routes"""

import logging
from datetime import datetime
from typing import List, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from atelier.api.errors import AuthorizationError
from atelier.models import Milestone, MilestoneStatus, Project, ProjectFile, ProjectStatus, User
from atelier.schemas.project import ProjectCreate, ProjectUpdate
from atelier.services.notification_service import NotificationService
from atelier.services.project_lifecycle import ProjectLifecycleService, check_transition

logger = logging.getLogger(__name__)


class ProjectService:
    """Create, read, update and delete projects"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    async def list_for_user(self, user_id: int) -> List[Project]:
        result = await self.db.execute(
            select(Project).where(Project.user_id == user_id).order_by(Project.id)
        )
        return list(result.scalars().all())

    async def list_all(self) -> List[Tuple[Project, User]]:
        """Every project with its owner, oldest first"""
        result = await self.db.execute(
            select(Project, User).join(User, Project.user_id == User.id).order_by(Project.id)
        )
        return [(project, owner) for project, owner in result.all()]

    async def create(self, owner: User, data: ProjectCreate) -> Project:
        """
        Create a project for a client and tell the admins about it

        New projects always start pending.
        """
        project = Project(
            user_id=owner.id,
            name=data.name,
            type=data.type,
            description=data.description,
            status=ProjectStatus.PENDING.value,
            start_date=data.start_date,
            end_date=data.end_date,
            budget=data.budget,
            thumbnail_url=data.thumbnail_url,
            meta_data=data.meta_data or {},
        )
        self.db.add(project)
        await self.db.commit()
        await self.db.refresh(project)
        logger.info(f"User {owner.id} created project {project.id}")

        await self.notifications.notify_admins(
            "New project request",
            f'{owner.name} submitted a new project: "{project.name}".',
            type="info",
            link=f"/admin/projects/{project.id}",
        )
        return project

    async def progress(self, project: Project) -> dict:
        """Milestone counts and completion percentage of a project"""
        result = await self.db.execute(
            select(
                func.count(Milestone.id),
                func.count(Milestone.id).filter(
                    Milestone.status == MilestoneStatus.COMPLETED.value
                ),
            ).where(Milestone.project_id == project.id)
        )
        total, completed = result.one()
        percentage = int(completed * 100 / total) if total else 0
        return {
            "milestone_count": total,
            "completed_milestones": completed,
            "progress": percentage,
        }

    async def update(self, project: Project, data: ProjectUpdate, user: User) -> Project:
        """
        Merge a partial update into a project

        A status that differs from the current one is a transition: only
        admins may request it and it must be allowed from the current
        state. The transition is checked before anything is written.

        Raises:
            AuthorizationError: If a client tries to change the status
            InvalidTransitionError: If the transition is not allowed
        """
        changes = data.changes()
        requested = changes.pop("status", None)

        target = None
        if requested is not None:
            target = ProjectStatus.parse(requested)
            if target == project.current_status:
                target = None
        if target is not None:
            if not user.is_admin:
                raise AuthorizationError("Only admins can change the project status")
            check_transition(project.current_status, target)

        if changes:
            for field, value in changes.items():
                setattr(project, field, value)
            project.updated_at = datetime.utcnow()
            await self.db.commit()
            await self.db.refresh(project)
            logger.info(f"User {user.id} updated project {project.id}: {', '.join(changes)}")

        if target is not None:
            project = await ProjectLifecycleService(self.db).transition(project, target)

        return project

    async def delete(self, project: Project) -> List[str]:
        """
        Delete a project with its milestones and files

        Returns:
            Storage keys of the project's files, for the caller to remove
        """
        result = await self.db.execute(
            select(ProjectFile.file_key).where(
                ProjectFile.project_id == project.id,
                ProjectFile.file_key.isnot(None),
            )
        )
        keys = list(result.scalars().all())

        project_id = project.id
        await self.db.delete(project)
        await self.db.commit()
        logger.info(f"Deleted project {project_id} with {len(keys)} file(s)")
        return keys
