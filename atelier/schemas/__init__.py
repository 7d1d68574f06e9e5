"""API schemas package"""

from .auth import (
    RegisterRequest,
    LoginRequest,
    FirebaseLoginRequest,
    UserResponse,
)
from .project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectDetailResponse,
    AdminProjectResponse,
)
from .milestone import MilestoneCreate, MilestoneUpdate, MilestoneResponse
from .project_file import ProjectFileResponse
from .notification import NotificationResponse

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "FirebaseLoginRequest",
    "UserResponse",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
    "ProjectDetailResponse",
    "AdminProjectResponse",
    "MilestoneCreate",
    "MilestoneUpdate",
    "MilestoneResponse",
    "ProjectFileResponse",
    "NotificationResponse",
]
