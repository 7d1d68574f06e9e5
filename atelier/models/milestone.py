"""Milestone model"""

import enum
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from atelier.models.base import BaseModel


class MilestoneStatus(str, enum.Enum):
    """Milestone progress status"""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class Milestone(BaseModel):
    """
    A dated sub-goal on a project's timeline.
    Display order along the timeline follows the ``order`` column.
    """

    __tablename__ = "milestones"

    project_id = Column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(String(50), default=MilestoneStatus.PENDING.value, nullable=False)
    due_date = Column(DateTime, nullable=True)
    completed_date = Column(DateTime, nullable=True)
    order = Column(Integer, default=0, nullable=False)

    project = relationship("Project", back_populates="milestones")

    def __repr__(self):
        return f"<Milestone(id={self.id}, title={self.title}, status={self.status})>"
