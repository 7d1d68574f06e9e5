"""Admin area schemas"""

from typing import Optional
from pydantic import BaseModel, EmailStr, Field, validator


class ClientCreate(BaseModel):
    """Client account created by an admin"""
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1, max_length=255)
    company: Optional[str] = Field(None, max_length=255)

    @validator("email")
    def normalize_email(cls, v):
        return v.lower()
