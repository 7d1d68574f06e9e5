"""Project model"""

import enum
from typing import Optional
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from atelier.models.base import BaseModel


class ProjectStatus(str, enum.Enum):
    """Project lifecycle status"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PLANNING = "planning"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: str) -> "ProjectStatus":
        """Parse a status token, accepting the legacy spellings"""
        token = value.strip().lower()
        token = STATUS_ALIASES.get(token, token)
        return cls(token)


STATUS_ALIASES = {
    "new": ProjectStatus.PENDING.value,
    "in-progress": ProjectStatus.IN_PROGRESS.value,
}


class Project(BaseModel):
    """
    Project model representing a client's request for agency services.
    Projects belong to a user and contain milestones and files.
    """

    __tablename__ = "projects"

    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False)  # website, webapp, ecommerce, dashboard, mobile, other
    description = Column(Text, nullable=False)
    status = Column(
        String(50), default=ProjectStatus.PENDING.value, nullable=False, index=True
    )
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    budget = Column(String(100), nullable=True)
    thumbnail_url = Column(String(500), nullable=True)
    meta_data = Column("meta_data", JSON, default=dict, nullable=True)

    # Relationships
    owner = relationship("User", back_populates="projects")
    milestones = relationship(
        "Milestone",
        back_populates="project",
        cascade="all, delete-orphan",
    )
    files = relationship(
        "ProjectFile",
        back_populates="project",
        cascade="all, delete-orphan",
    )

    @property
    def current_status(self) -> Optional[ProjectStatus]:
        if self.status is None:
            return None
        return ProjectStatus.parse(self.status)

    def __repr__(self):
        return f"<Project(id={self.id}, name={self.name}, status={self.status})>"
