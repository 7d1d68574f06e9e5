"""Project schemas"""

import json
from typing import Optional, Any, ClassVar, Dict, FrozenSet
from pydantic import BaseModel, Field, validator
from datetime import datetime

from atelier.models.project import ProjectStatus


class ProjectBase(BaseModel):
    """Base project schema"""
    name: str = Field(..., min_length=3, max_length=255, description="Project name")
    type: str = Field(..., min_length=1, max_length=50, description="website, webapp, ecommerce, dashboard, mobile or other")
    description: str = Field(..., min_length=10, description="What the client wants built")
    start_date: Optional[datetime] = Field(None, description="Desired start date")
    end_date: Optional[datetime] = Field(None, description="Desired delivery date")
    budget: Optional[str] = Field(None, max_length=100, description="Budget indication")
    thumbnail_url: Optional[str] = Field(None, max_length=500)
    meta_data: Dict[str, Any] = Field(
        default_factory=dict,
        description="Intake answers: requested services, domain/logo, contact person",
    )


class ProjectCreate(ProjectBase):
    """
    Project request submitted by a client.

    Any status sent along is ignored; new projects always start pending.
    """

    @validator("meta_data", pre=True)
    def parse_meta_data(cls, v):
        """The intake form may send its answers as a JSON string"""
        if v is None:
            return {}
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except ValueError:
                raise ValueError("meta_data must be a JSON object")
        return v


class ProjectUpdate(BaseModel):
    """Project update schema - all fields optional"""
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, min_length=10)
    status: Optional[str] = Field(None, description="Admins only; must be an allowed transition")
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    budget: Optional[str] = Field(None, max_length=100)
    thumbnail_url: Optional[str] = Field(None, max_length=500)
    meta_data: Optional[Dict[str, Any]] = None

    # Columns an explicit null clears
    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"start_date", "end_date", "budget", "thumbnail_url"})

    @validator("status")
    def validate_status(cls, v):
        if v is None:
            return v
        try:
            return ProjectStatus.parse(v).value
        except ValueError:
            allowed = ", ".join(s.value for s in ProjectStatus)
            raise ValueError(f"Status must be one of: {allowed}")

    def changes(self) -> Dict[str, Any]:
        """Fields the client sent; nulls are kept only for nullable columns"""
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True).items()
            if value is not None or field in self.NULLABLE_FIELDS
        }


class RejectRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000, description="Shown to the client")


class ProjectResponse(ProjectBase):
    """Project response schema"""
    id: int
    user_id: int
    status: str
    meta_data: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    # Stored rows may predate the current validation rules
    name: str
    type: str
    description: str

    @validator("status", pre=True)
    def normalize_status(cls, v):
        try:
            return ProjectStatus.parse(v).value
        except ValueError:
            return v

    class Config:
        from_attributes = True


class ProjectDetailResponse(ProjectResponse):
    """Project with milestone progress"""
    milestone_count: int = Field(default=0, description="Number of milestones")
    completed_milestones: int = Field(default=0, description="Number of completed milestones")
    progress: int = Field(default=0, description="Completed milestones as a percentage")


class AdminProjectResponse(ProjectResponse):
    """Project with its owner, for the admin overview"""
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None
    owner_company: Optional[str] = None
