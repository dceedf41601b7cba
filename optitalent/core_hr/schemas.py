"""Core HR Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Update  → request bodies (write)
  - *Response / *Detail → response bodies (read)
  - *Summary / *ListItem → compact read representations
"""


import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from optitalent.common.constants import EmploymentStatus


# ═════════════════════════════════════════════════════════════════════
# Department / Role catalogue
# ═════════════════════════════════════════════════════════════════════


class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None


class DepartmentResponse(BaseModel):
    """Full department representation."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    # Enriched by the service layer
    employee_count: int = 0


class DepartmentBrief(BaseModel):
    """Minimal department info embedded in other responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None


# ═════════════════════════════════════════════════════════════════════
# Employee: write schemas
# ═════════════════════════════════════════════════════════════════════


class EmployeeCreate(BaseModel):
    """Payload for creating a new employee."""

    employee_code: str = Field(..., min_length=1, max_length=30)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    job_title: Optional[str] = Field(None, max_length=150)
    department_id: Optional[uuid.UUID] = None
    role_id: Optional[uuid.UUID] = None
    manager_id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    employment_status: EmploymentStatus = EmploymentStatus.active
    date_of_joining: date
    monthly_salary: Decimal = Field(Decimal("0"), ge=0)
    profile_photo_url: Optional[str] = None


class EmployeeUpdate(BaseModel):
    """Partial-update payload for an employee (all fields optional)."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    job_title: Optional[str] = Field(None, max_length=150)
    department_id: Optional[uuid.UUID] = None
    role_id: Optional[uuid.UUID] = None
    manager_id: Optional[uuid.UUID] = None
    employment_status: Optional[EmploymentStatus] = None
    monthly_salary: Optional[Decimal] = Field(None, ge=0)
    profile_photo_url: Optional[str] = None
    is_active: Optional[bool] = None


# ═════════════════════════════════════════════════════════════════════
# Employee: read schemas
# ═════════════════════════════════════════════════════════════════════


class EmployeeSummary(BaseModel):
    """Minimal employee reference (manager links, team lists)."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    full_name: str
    email: str
    job_title: Optional[str] = None
    profile_photo_url: Optional[str] = None


class EmployeeListItem(BaseModel):
    """Compact employee row for paginated list endpoints."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: Optional[str] = None
    job_title: Optional[str] = None
    employment_status: str
    date_of_joining: date
    is_active: bool
    department: Optional[DepartmentBrief] = None
    profile_photo_url: Optional[str] = None


class EmployeeDetail(BaseModel):
    """Full employee record — returned by GET /employees/{id}."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: Optional[str] = None
    job_title: Optional[str] = None
    department_id: Optional[uuid.UUID] = None
    role_id: Optional[uuid.UUID] = None
    manager_id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    department: Optional[DepartmentBrief] = None
    role: Optional[RoleResponse] = None
    manager: Optional[EmployeeSummary] = None
    employment_status: str
    date_of_joining: date
    monthly_salary: Decimal
    profile_photo_url: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    direct_reports_count: int = 0


# ═════════════════════════════════════════════════════════════════════
# AI role suggestion
# ═════════════════════════════════════════════════════════════════════


class RoleSuggestionRequest(BaseModel):
    department: str = Field(..., min_length=1)
    job_title: str = Field(..., min_length=1)
