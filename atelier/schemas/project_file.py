"""Project file schemas"""

from typing import Optional
from pydantic import BaseModel
from datetime import datetime


class ProjectFileResponse(BaseModel):
    id: int
    project_id: int
    name: str
    description: Optional[str]
    file_url: str
    file_type: str
    file_size: int
    uploaded_by: int
    created_at: datetime

    class Config:
        from_attributes = True
