"""Leave request / response schemas."""


import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from optitalent.common.constants import LeaveStatus, LeaveType


# ── Requests ────────────────────────────────────────────────────────

class LeaveRequestCreate(BaseModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def end_not_before_start(self) -> "LeaveRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class LeaveApproveRequest(BaseModel):
    remarks: Optional[str] = Field(None, max_length=1000)


class LeaveRejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=1000)


# ── Responses ───────────────────────────────────────────────────────

class EmployeeBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    full_name: str


class LeaveRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee: EmployeeBrief
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: int
    reason: Optional[str] = None
    status: LeaveStatus
    reviewed_by: Optional[uuid.UUID] = None
    reviewed_at: Optional[datetime] = None
    reviewer_remarks: Optional[str] = None
    created_at: datetime
