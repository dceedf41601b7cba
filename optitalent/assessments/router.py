"""Assessments router — definitions, MCQ and typing submissions, attempts."""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.assessments.schemas import (
    AssessmentCreate,
    AssessmentDetail,
    AssessmentOut,
    AttemptOut,
    McqSubmission,
    TypingResultOut,
    TypingSubmission,
)
from optitalent.assessments.service import AssessmentService
from optitalent.auth.dependencies import get_current_user, get_tenant_id, has_role, require_role
from optitalent.auth.models import User
from optitalent.common.constants import UserRole
from optitalent.core_hr.service import EmployeeService
from optitalent.database import get_db

router = APIRouter(prefix="", tags=["assessments"])

_AUTHORS = (UserRole.hr, UserRole.qa_analyst, UserRole.trainer, UserRole.process_manager)


def _hide_answers(detail: dict) -> dict:
    for section in detail["sections"]:
        for question in section["questions"]:
            question["correct_answer"] = None
    return detail


@router.get("")
async def list_assessments(
    process_type: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    items = await AssessmentService.list_assessments(db, tenant_id, process_type=process_type)
    return {"data": [AssessmentOut.model_validate(a).model_dump(mode="json") for a in items]}


@router.post("", status_code=201)
async def create_assessment(
    body: AssessmentCreate,
    user: User = Depends(require_role(*_AUTHORS)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    assessment = await AssessmentService.create_assessment(db, tenant_id, body, created_by=user.id)
    return {
        "data": AssessmentDetail.model_validate(assessment).model_dump(mode="json"),
        "message": "Assessment created",
    }


@router.get("/{assessment_id}")
async def get_assessment(
    request: Request,
    assessment_id: uuid.UUID,
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    """Candidates get the questions without the answer key."""
    assessment = await AssessmentService.get_assessment(db, tenant_id, assessment_id)
    detail = AssessmentDetail.model_validate(assessment).model_dump(mode="json")
    if not has_role(request.state.user_role, *_AUTHORS):
        detail = _hide_answers(detail)
    return {"data": detail}


# ── Submissions ─────────────────────────────────────────────────────

@router.post("/{assessment_id}/mcq", status_code=201)
async def submit_mcq(
    assessment_id: uuid.UUID,
    body: McqSubmission,
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.require_for_user(db, tenant_id, user.id)
    attempt = await AssessmentService.submit_mcq(
        db, tenant_id, assessment_id, employee.id, body.answers,
    )
    return {"data": AttemptOut.model_validate(attempt).model_dump(mode="json")}


@router.post("/{assessment_id}/typing", status_code=201)
async def submit_typing(
    assessment_id: uuid.UUID,
    body: TypingSubmission,
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.require_for_user(db, tenant_id, user.id)
    attempt, result = await AssessmentService.submit_typing(
        db, tenant_id, assessment_id, employee.id, body,
    )
    return {
        "data": TypingResultOut(
            wpm=result.wpm, accuracy=result.accuracy, passed=attempt.passed,
        ).model_dump(),
    }


@router.get("/{assessment_id}/attempts")
async def list_attempts(
    request: Request,
    assessment_id: uuid.UUID,
    employee_id: Optional[uuid.UUID] = Query(None),
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    """Authors see every attempt (optionally filtered); others see their own."""
    if not has_role(request.state.user_role, *_AUTHORS):
        employee_id = (await EmployeeService.require_for_user(db, tenant_id, user.id)).id
    attempts = await AssessmentService.list_attempts(
        db, tenant_id, assessment_id, employee_id=employee_id,
    )
    return {"data": [AttemptOut.model_validate(a).model_dump(mode="json") for a in attempts]}
