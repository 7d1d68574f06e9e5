"""Services package"""

from .auth_service import AuthService
from .session_service import SessionService
from .notification_service import NotificationService
from .project_lifecycle import ProjectLifecycleService
from .s3_service import S3Service
from .email_service import EmailService

__all__ = [
    "AuthService",
    "SessionService",
    "NotificationService",
    "ProjectLifecycleService",
    "S3Service",
    "EmailService",
]
