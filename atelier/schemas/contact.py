"""Contact form schemas"""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime


class ContactCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    company: str = Field(..., min_length=1, max_length=255)
    service: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=10)


class ContactCreatedResponse(BaseModel):
    message: str
    contact_id: int


class ContactResponse(BaseModel):
    id: int
    name: str
    email: str
    company: str
    service: str
    message: str
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True
