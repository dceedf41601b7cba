"""Recruitment request / response schemas."""


import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from optitalent.ai.flows.recruitment import ScoreAndParseInput
from optitalent.common.constants import ApplicantStatus, JobStatus


# ── Job openings ────────────────────────────────────────────────────

class JobOpeningCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    department_id: Optional[uuid.UUID] = None


class JobOpeningUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    status: Optional[JobStatus] = None


class JobOpeningOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    department_id: Optional[uuid.UUID] = None
    description: str
    status: JobStatus
    created_at: datetime


# ── Applicants ──────────────────────────────────────────────────────

class ApplicantCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    job_id: Optional[uuid.UUID] = None
    resume_text: Optional[str] = None


class ApplicantStatusUpdate(BaseModel):
    status: ApplicantStatus


class ApplicantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    job_id: Optional[uuid.UUID] = None
    full_name: str
    email: str
    phone: Optional[str] = None
    status: ApplicantStatus
    ai_score: Optional[float] = None
    ai_justification: Optional[str] = None
    created_at: datetime


class ApplicantDetail(ApplicantOut):
    resume_text: Optional[str] = None
    parsed_resume: Optional[dict[str, Any]] = None


# ── AI helpers ──────────────────────────────────────────────────────

class ScoreAndParseRequest(ScoreAndParseInput):
    """When ``applicant_id`` is given the result is stored on that applicant."""

    applicant_id: Optional[uuid.UUID] = None


class InterviewQuestionsRequest(BaseModel):
    role: str = Field(..., min_length=1, max_length=200)
