"""Authentication and account schemas"""

from typing import Optional, Any, Dict
from pydantic import BaseModel, EmailStr, Field, validator
from datetime import datetime


class RegisterRequest(BaseModel):
    """Local account registration"""
    username: str = Field(..., min_length=3, max_length=100, description="Unique username")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, description="Password (minimum 8 characters)")
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    company: Optional[str] = Field(None, max_length=255, description="Company name")

    @validator("username")
    def validate_username(cls, v):
        """Usernames are single tokens"""
        v = v.strip()
        if any(ch.isspace() for ch in v):
            raise ValueError("Username may not contain spaces")
        return v

    @validator("email")
    def normalize_email(cls, v):
        return v.lower()


class LoginRequest(BaseModel):
    """Login with username or email"""
    username: str = Field(..., min_length=1, description="Username or email address")
    password: str = Field(..., min_length=1, description="User password")


class FirebaseLoginRequest(BaseModel):
    """Federated sign-in with a Firebase ID token"""
    id_token: str = Field(..., min_length=1, description="Firebase ID token")


class ResendVerificationRequest(BaseModel):
    email: EmailStr

    @validator("email")
    def normalize_email(cls, v):
        return v.lower()


class ProfileUpdate(BaseModel):
    """Profile update - all fields optional"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    avatar_url: Optional[str] = Field(None, max_length=500)
    preferences: Optional[Dict[str, Any]] = None


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, description="New password (minimum 8 characters)")


class UserResponse(BaseModel):
    """User as returned to clients, without credentials"""
    id: int
    username: str
    email: str
    name: str
    company: Optional[str]
    role: str
    avatar_url: Optional[str]
    verified: bool
    last_login: Optional[datetime]
    preferences: Optional[Dict[str, Any]]
    created_at: datetime

    class Config:
        from_attributes = True


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
