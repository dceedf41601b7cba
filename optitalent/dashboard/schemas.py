"""Dashboard Pydantic v2 schemas — role-parameterised KPI summary."""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, Field

from optitalent.common.constants import UserRole


class DepartmentBreakdownItem(BaseModel):
    """Active employee count for a single department."""

    department_id: uuid.UUID
    department_name: str
    count: int = 0


class OrgStats(BaseModel):
    """Organisation-wide cards (HR and admins)."""

    headcount: int = Field(..., description="Active employees")
    present_today: int = Field(..., description="Attendance records checked in today")
    pending_leave_requests: int
    department_breakdown: list[DepartmentBreakdownItem] = Field(default_factory=list)


class TeamStats(BaseModel):
    """Direct reports of the calling manager / team leader."""

    team_size: int
    team_present_today: int
    team_pending_leaves: int


class MyStats(BaseModel):
    """Personal cards shown to anyone with an employee profile."""

    pending_leaves: int
    approved_leave_days: int
    days_present_this_month: int
    courses_in_progress: int
    open_tickets: int


class DashboardSummaryResponse(BaseModel):
    """Only the sections relevant to the caller's role are populated."""

    role: UserRole
    unread_notifications: int = 0
    org: Optional[OrgStats] = None
    team: Optional[TeamStats] = None
    open_tickets: Optional[int] = None
    open_jobs: Optional[int] = None
    active_applicants: Optional[int] = None
    pending_enrollments: Optional[int] = None
    my: Optional[MyStats] = None
