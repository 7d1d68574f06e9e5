"""User model"""

import enum
from sqlalchemy import Column, String, Boolean, DateTime, JSON
from sqlalchemy.orm import relationship
from atelier.models.base import BaseModel


class UserRole(str, enum.Enum):
    """Roles that decide which endpoints a user can reach"""
    CLIENT = "client"
    ADMIN = "admin"


class User(BaseModel):
    """
    User model representing agency clients and staff.
    Accounts are created by local registration, by an admin, or on the
    first federated sign-in.
    """

    __tablename__ = "users"

    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)  # null for federated-only accounts
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    company = Column(String(255), nullable=True)
    role = Column(String(50), default=UserRole.CLIENT.value, nullable=False)
    avatar_url = Column(String(500), nullable=True)
    firebase_uid = Column(String(128), unique=True, nullable=True, index=True)
    verified = Column(Boolean, default=False, nullable=False)
    verification_token = Column(String(128), nullable=True, index=True)
    verification_expires = Column(DateTime, nullable=True)
    last_login = Column(DateTime, nullable=True)
    preferences = Column(JSON, default=dict, nullable=True)

    # Relationships
    projects = relationship("Project", back_populates="owner", cascade="all, delete-orphan")
    notifications = relationship(
        "Notification", back_populates="user", cascade="all, delete-orphan"
    )
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"
