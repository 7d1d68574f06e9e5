"""Milestone schemas"""

from typing import Any, ClassVar, Dict, FrozenSet, Optional
from pydantic import BaseModel, Field, validator
from datetime import datetime

from atelier.models.milestone import MilestoneStatus


def _check_status(v):
    if v is None:
        return v
    token = v.strip().lower().replace("_", "-")
    try:
        return MilestoneStatus(token).value
    except ValueError:
        allowed = ", ".join(s.value for s in MilestoneStatus)
        raise ValueError(f"Status must be one of: {allowed}")


class MilestoneCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", description="Milestone description")
    status: str = Field(default=MilestoneStatus.PENDING.value)
    due_date: Optional[datetime] = None
    order: int = Field(default=0, ge=0, description="Position on the project timeline")

    _status = validator("status", allow_reuse=True)(_check_status)


class MilestoneUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[datetime] = None
    order: Optional[int] = Field(None, ge=0)

    _status = validator("status", allow_reuse=True)(_check_status)

    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"due_date"})

    def changes(self) -> Dict[str, Any]:
        """Fields the client sent; an explicit null only clears the due date"""
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True).items()
            if value is not None or field in self.NULLABLE_FIELDS
        }


class MilestoneResponse(BaseModel):
    id: int
    project_id: int
    title: str
    description: str
    status: str
    due_date: Optional[datetime]
    completed_date: Optional[datetime]
    order: int
    created_at: datetime

    class Config:
        from_attributes = True
