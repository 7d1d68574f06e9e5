"""Project status transitions

Admins move a project out of ``pending`` by approving or rejecting it, and
then through the execution states. Every successful transition is
persisted first and then announced to the owner with a notification.
"""

import logging
from datetime import datetime
from typing import Dict, FrozenSet, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from atelier.api.errors import InvalidTransitionError
from atelier.models import Project, ProjectStatus
from atelier.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

S = ProjectStatus

TRANSITIONS: Dict[ProjectStatus, FrozenSet[ProjectStatus]] = {
    S.PENDING: frozenset({S.APPROVED, S.REJECTED}),
    S.APPROVED: frozenset({S.PLANNING, S.IN_PROGRESS, S.REVIEW, S.COMPLETED}),
    S.PLANNING: frozenset({S.IN_PROGRESS, S.REVIEW, S.COMPLETED}),
    S.IN_PROGRESS: frozenset({S.REVIEW, S.COMPLETED}),
    S.REVIEW: frozenset({S.IN_PROGRESS, S.COMPLETED}),
    S.REJECTED: frozenset(),
    S.COMPLETED: frozenset(),
}

STATUS_LABELS = {
    S.PENDING: "pending review",
    S.APPROVED: "approved",
    S.REJECTED: "rejected",
    S.PLANNING: "in planning",
    S.IN_PROGRESS: "in progress",
    S.REVIEW: "ready for review",
    S.COMPLETED: "completed",
}


def can_transition(current: ProjectStatus, target: ProjectStatus) -> bool:
    return target in TRANSITIONS[current]


def check_transition(current: ProjectStatus, target: ProjectStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is allowed"""
    if not can_transition(current, target):
        allowed = sorted(s.value for s in TRANSITIONS[current])
        if allowed:
            detail = (
                f"Cannot change status from '{current.value}' to '{target.value}'. "
                f"Allowed: {', '.join(allowed)}"
            )
        else:
            detail = f"Project is {current.value}; its status can no longer change"
        raise InvalidTransitionError(detail)


class ProjectLifecycleService:
    """Applies status transitions and notifies the project owner"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    async def approve(self, project: Project) -> Project:
        return await self.transition(project, ProjectStatus.APPROVED)

    async def reject(self, project: Project, reason: Optional[str] = None) -> Project:
        return await self.transition(project, ProjectStatus.REJECTED, reason=reason)

    async def transition(
        self,
        project: Project,
        target: ProjectStatus,
        reason: Optional[str] = None,
    ) -> Project:
        """
        Move a project to a new status

        Args:
            project: Project to change
            target: Requested status
            reason: Optional explanation included in the owner's notification

        Returns:
            The updated project

        Raises:
            InvalidTransitionError: If the transition table does not allow the move
        """
        current = project.current_status
        check_transition(current, target)

        project.status = target.value
        project.updated_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(project)
        logger.info(f"Project {project.id} status: {current.value} -> {target.value}")

        await self._notify_owner(project.id, project.user_id, project.name, target, reason)
        return project

    async def _notify_owner(
        self,
        project_id: int,
        owner_id: int,
        name: str,
        status: ProjectStatus,
        reason: Optional[str],
    ) -> None:
        link = f"/dashboard/projects/{project_id}"

        if status == ProjectStatus.APPROVED:
            title = "Project approved"
            message = f'Your project "{name}" has been approved. We will contact you soon to plan the next steps.'
            type = "success"
        elif status == ProjectStatus.REJECTED:
            title = "Project not approved"
            message = f'Your project "{name}" has not been approved.'
            type = "destructive"
        else:
            title = "Project status updated"
            message = f'Your project "{name}" is now {STATUS_LABELS[status]}.'
            type = "info"

        if reason:
            message = f"{message} Reason: {reason}"

        await self.notifications.notify(owner_id, title, message, type=type, link=link)
