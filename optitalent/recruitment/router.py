"""Recruitment router — job openings, applicants, AI screening tools."""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.auth.dependencies import get_current_user, get_tenant_id, require_role
from optitalent.auth.models import User
from optitalent.common.constants import ApplicantStatus, JobStatus, UserRole
from optitalent.common.pagination import PaginationParams
from optitalent.common.rate_limit import limiter
from optitalent.config import settings
from optitalent.database import get_db
from optitalent.recruitment.schemas import (
    ApplicantCreate,
    ApplicantDetail,
    ApplicantOut,
    ApplicantStatusUpdate,
    InterviewQuestionsRequest,
    JobOpeningCreate,
    JobOpeningOut,
    JobOpeningUpdate,
    ScoreAndParseRequest,
)
from optitalent.recruitment.service import ApplicantService, JobService

router = APIRouter(prefix="", tags=["recruitment"])

_RECRUITERS = (UserRole.recruiter, UserRole.hr)


# ═════════════════════════════════════════════════════════════════════
# Job openings
# ═════════════════════════════════════════════════════════════════════


@router.get("/jobs")
async def list_jobs(
    status: Optional[JobStatus] = Query(None),
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    jobs = await JobService.list_jobs(db, tenant_id, status)
    return {"data": [JobOpeningOut.model_validate(j).model_dump(mode="json") for j in jobs]}


@router.post("/jobs", status_code=201)
async def create_job(
    body: JobOpeningCreate,
    user: User = Depends(require_role(*_RECRUITERS)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    job = await JobService.create_job(db, tenant_id, body)
    return {"data": JobOpeningOut.model_validate(job).model_dump(mode="json"), "message": "Job opening created"}


@router.get("/jobs/{job_id}")
async def get_job(
    job_id: uuid.UUID,
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    job = await JobService.get_job(db, tenant_id, job_id)
    return {"data": JobOpeningOut.model_validate(job).model_dump(mode="json")}


@router.patch("/jobs/{job_id}")
async def update_job(
    job_id: uuid.UUID,
    body: JobOpeningUpdate,
    user: User = Depends(require_role(*_RECRUITERS)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    job = await JobService.update_job(db, tenant_id, job_id, body)
    return {"data": JobOpeningOut.model_validate(job).model_dump(mode="json")}


# ═════════════════════════════════════════════════════════════════════
# Applicants
# ═════════════════════════════════════════════════════════════════════


@router.get("/applicants")
async def list_applicants(
    job_id: Optional[uuid.UUID] = Query(None),
    status: Optional[ApplicantStatus] = Query(None),
    pagination: PaginationParams = Depends(),
    user: User = Depends(require_role(*_RECRUITERS)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    result = await ApplicantService.list_applicants(
        db, tenant_id, pagination, job_id=job_id, status=status,
    )
    return result.envelope(ApplicantOut)


@router.post("/applicants", status_code=201)
async def create_applicant(
    body: ApplicantCreate,
    user: User = Depends(require_role(*_RECRUITERS)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    applicant = await ApplicantService.create_applicant(db, tenant_id, body)
    return {"data": ApplicantDetail.model_validate(applicant).model_dump(mode="json")}


@router.get("/applicants/{applicant_id}")
async def get_applicant(
    applicant_id: uuid.UUID,
    user: User = Depends(require_role(*_RECRUITERS)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    applicant = await ApplicantService.get_applicant(db, tenant_id, applicant_id)
    return {"data": ApplicantDetail.model_validate(applicant).model_dump(mode="json")}


@router.patch("/applicants/{applicant_id}/status")
async def update_applicant_status(
    applicant_id: uuid.UUID,
    body: ApplicantStatusUpdate,
    user: User = Depends(require_role(*_RECRUITERS)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    applicant = await ApplicantService.set_status(db, tenant_id, applicant_id, body.status)
    return {"data": ApplicantOut.model_validate(applicant).model_dump(mode="json")}


# ── AI screening ────────────────────────────────────────────────────

@router.post("/applicants/{applicant_id}/score")
@limiter.limit(settings.AI_RATE_LIMIT)
async def score_applicant(
    request: Request,
    applicant_id: uuid.UUID,
    user: User = Depends(require_role(*_RECRUITERS)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    applicant = await ApplicantService.score_applicant(db, tenant_id, applicant_id)
    return {"data": ApplicantOut.model_validate(applicant).model_dump(mode="json")}


@router.post("/score-and-parse")
@limiter.limit(settings.AI_RATE_LIMIT)
async def score_and_parse(
    request: Request,
    body: ScoreAndParseRequest,
    user: User = Depends(require_role(*_RECRUITERS)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    result = await ApplicantService.score_and_parse(db, tenant_id, body)
    return {"data": result.model_dump()}


@router.post("/interview-questions")
@limiter.limit(settings.AI_RATE_LIMIT)
async def interview_questions(
    request: Request,
    body: InterviewQuestionsRequest,
    user: User = Depends(require_role(*_RECRUITERS)),
):
    result = await ApplicantService.interview_questions(body.role)
    return {"data": result.model_dump()}
