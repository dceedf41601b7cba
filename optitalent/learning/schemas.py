"""Learning request / response schemas."""


import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from optitalent.common.constants import EnrollmentStatus


class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    duration_hours: Optional[float] = Field(None, gt=0)
    is_mandatory: bool = False


class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    duration_hours: Optional[float] = None
    is_mandatory: bool
    created_at: datetime


class EnrollRequest(BaseModel):
    """HR may enroll someone else; omit ``employee_id`` to self-enroll."""

    employee_id: Optional[uuid.UUID] = None


class ProgressUpdate(BaseModel):
    progress: int = Field(..., ge=0, le=100)


class EnrollmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    course_id: uuid.UUID
    employee_id: uuid.UUID
    progress: int
    status: EnrollmentStatus
    completed_at: Optional[datetime] = None
    course: CourseOut


class TeamMemberProgress(BaseModel):
    employee_id: uuid.UUID
    employee_name: str
    enrolled: int
    completed: int
    average_progress: float
