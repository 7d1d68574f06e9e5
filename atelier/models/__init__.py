"""Database models package"""

from atelier.models.base import BaseModel
from atelier.models.user import User, UserRole
from atelier.models.session import UserSession
from atelier.models.project import Project, ProjectStatus
from atelier.models.milestone import Milestone, MilestoneStatus
from atelier.models.project_file import ProjectFile
from atelier.models.notification import Notification
from atelier.models.contact import Contact
from atelier.models.chat import ChatSession, ChatMessage

# Export all models
__all__ = [
    "BaseModel",
    "User",
    "UserRole",
    "UserSession",
    "Project",
    "ProjectStatus",
    "Milestone",
    "MilestoneStatus",
    "ProjectFile",
    "Notification",
    "Contact",
    "ChatSession",
    "ChatMessage",
]
