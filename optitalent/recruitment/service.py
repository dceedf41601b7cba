"""Recruitment service — job openings, applicants and AI screening."""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.ai import flows
from optitalent.ai.flows.recruitment import (
    InterviewQuestionsInput,
    InterviewQuestionsOutput,
    ScoreAndParseInput,
    ScoreAndParseOutput,
    ScoreResumeInput,
    ScoreResumeOutput,
)
from optitalent.common.constants import ApplicantStatus, JobStatus
from optitalent.common.exceptions import NotFoundException, ValidationException
from optitalent.common.pagination import PaginatedResponse, PaginationParams, paginate
from optitalent.core_hr.models import Department
from optitalent.recruitment.models import Applicant, JobOpening
from optitalent.recruitment.schemas import (
    ApplicantCreate,
    JobOpeningCreate,
    JobOpeningUpdate,
    ScoreAndParseRequest,
)

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# Job openings
# ═════════════════════════════════════════════════════════════════════


class JobService:

    @staticmethod
    async def create_job(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: JobOpeningCreate,
    ) -> JobOpening:
        if data.department_id is not None:
            dept = await db.get(Department, data.department_id)
            if dept is None or dept.tenant_id != tenant_id:
                raise ValidationException(
                    {"department_id": [f"No such record in this organisation: {data.department_id}"]}
                )
        job = JobOpening(tenant_id=tenant_id, status=JobStatus.open.value, **data.model_dump())
        db.add(job)
        await db.flush()
        return job

    @staticmethod
    async def list_jobs(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        status: Optional[JobStatus] = None,
    ) -> Sequence[JobOpening]:
        stmt = (
            select(JobOpening)
            .where(JobOpening.tenant_id == tenant_id)
            .order_by(JobOpening.created_at.desc())
        )
        if status:
            stmt = stmt.where(JobOpening.status == status.value)
        return (await db.execute(stmt)).scalars().all()

    @staticmethod
    async def get_job(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        job_id: uuid.UUID,
    ) -> JobOpening:
        job = await db.get(JobOpening, job_id)
        if job is None or job.tenant_id != tenant_id:
            raise NotFoundException("JobOpening", str(job_id))
        return job

    @staticmethod
    async def update_job(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        job_id: uuid.UUID,
        data: JobOpeningUpdate,
    ) -> JobOpening:
        job = await JobService.get_job(db, tenant_id, job_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            setattr(job, field, value.value if hasattr(value, "value") else value)
        await db.flush()
        return job

    @staticmethod
    async def count_open(db: AsyncSession, tenant_id: uuid.UUID) -> int:
        return await db.scalar(
            select(func.count()).select_from(JobOpening).where(
                JobOpening.tenant_id == tenant_id,
                JobOpening.status == JobStatus.open.value,
            )
        ) or 0


# ═════════════════════════════════════════════════════════════════════
# Applicants
# ═════════════════════════════════════════════════════════════════════


class ApplicantService:

    @staticmethod
    async def create_applicant(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: ApplicantCreate,
    ) -> Applicant:
        if data.job_id is not None:
            await JobService.get_job(db, tenant_id, data.job_id)
        values = data.model_dump()
        values["email"] = values["email"].lower()
        applicant = Applicant(tenant_id=tenant_id, status=ApplicantStatus.applied.value, **values)
        db.add(applicant)
        await db.flush()
        return applicant

    @staticmethod
    async def list_applicants(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        job_id: Optional[uuid.UUID] = None,
        status: Optional[ApplicantStatus] = None,
    ) -> PaginatedResponse:
        stmt = (
            select(Applicant)
            .where(Applicant.tenant_id == tenant_id)
            .order_by(Applicant.created_at.desc())
        )
        if job_id:
            stmt = stmt.where(Applicant.job_id == job_id)
        if status:
            stmt = stmt.where(Applicant.status == status.value)
        return await paginate(db, stmt, pagination, model=Applicant)

    @staticmethod
    async def get_applicant(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        applicant_id: uuid.UUID,
    ) -> Applicant:
        applicant = await db.get(Applicant, applicant_id)
        if applicant is None or applicant.tenant_id != tenant_id:
            raise NotFoundException("Applicant", str(applicant_id))
        return applicant

    @staticmethod
    async def set_status(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        applicant_id: uuid.UUID,
        status: ApplicantStatus,
    ) -> Applicant:
        applicant = await ApplicantService.get_applicant(db, tenant_id, applicant_id)
        applicant.status = status.value
        await db.flush()
        return applicant

    @staticmethod
    async def count_active(db: AsyncSession, tenant_id: uuid.UUID) -> int:
        return await db.scalar(
            select(func.count()).select_from(Applicant).where(
                Applicant.tenant_id == tenant_id,
                Applicant.status.not_in(
                    (ApplicantStatus.hired.value, ApplicantStatus.rejected.value)
                ),
            )
        ) or 0

    # ── AI screening ────────────────────────────────────────────────

    @staticmethod
    async def score_applicant(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        applicant_id: uuid.UUID,
    ) -> Applicant:
        """Score the stored resume text against the applicant's job description."""
        applicant = await ApplicantService.get_applicant(db, tenant_id, applicant_id)
        if applicant.job_id is None:
            raise ValidationException({"job_id": ["Applicant is not linked to a job opening."]})
        if not applicant.resume_text:
            raise ValidationException({"resume_text": ["Applicant has no resume text to score."]})
        job = await JobService.get_job(db, tenant_id, applicant.job_id)

        result = await ApplicantService.score_resume(job.description, applicant.resume_text)
        applicant.ai_score = result.score
        applicant.ai_justification = result.justification
        await db.flush()
        logger.info("Applicant %s scored %.0f", applicant.id, result.score)
        return applicant

    @staticmethod
    async def score_resume(jd: str, resume: str) -> ScoreResumeOutput:
        return await flows.score_resume.run(ScoreResumeInput(jd=jd, resume=resume))

    @staticmethod
    async def score_and_parse(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: ScoreAndParseRequest,
    ) -> ScoreAndParseOutput:
        """Parse a resume document and score it; optionally store on an applicant."""
        applicant: Optional[Applicant] = None
        if data.applicant_id is not None:
            applicant = await ApplicantService.get_applicant(db, tenant_id, data.applicant_id)

        result = await flows.score_and_parse_resume.run(
            ScoreAndParseInput(
                job_description=data.job_description,
                resume_data_uri=data.resume_data_uri,
            )
        )
        if applicant is not None:
            applicant.ai_score = result.score
            applicant.ai_justification = result.justification
            applicant.parsed_resume = result.parsed_data.model_dump()
            await db.flush()
        return result

    @staticmethod
    async def interview_questions(role: str) -> InterviewQuestionsOutput:
        return await flows.interview_questions.run(InterviewQuestionsInput(role=role))
