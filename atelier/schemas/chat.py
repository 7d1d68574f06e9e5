"""Chat widget schemas"""

from typing import Optional
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime


class ChatSessionCreate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    company: Optional[str] = Field(None, max_length=255)


class ChatSessionResponse(BaseModel):
    session_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class ChatMessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=4000)


class ChatMessageResponse(BaseModel):
    id: int
    role: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True
