"""Assessment service — definitions, attempts, MCQ and typing scoring."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.assessments.models import Assessment, AssessmentAttempt
from optitalent.assessments.schemas import AssessmentCreate, TypingSubmission
from optitalent.assessments.typing import TypingResult, score_typing
from optitalent.common.constants import PassingScoreType, QuestionType
from optitalent.common.exceptions import (
    ConflictError,
    NotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


# ── Pure scoring helpers ────────────────────────────────────────────

def mcq_questions(sections: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        q
        for section in sections
        for q in section.get("questions", [])
        if q.get("type") == QuestionType.mcq.value
    ]


def mcq_score(sections: list[dict[str, Any]], answers: dict[str, str]) -> int:
    """Percentage of MCQ questions answered correctly, rounded; 0 when there are none."""
    questions = mcq_questions(sections)
    if not questions:
        return 0
    correct = sum(
        1 for q in questions
        if q.get("correct_answer") is not None
        and answers.get(q["id"]) == q["correct_answer"]
    )
    return int(correct / len(questions) * 100 + 0.5)


def typing_task(sections: list[dict[str, Any]]) -> Optional[tuple[str, int]]:
    """``(prompt, time_limit_seconds)`` of the first typing question, if any."""
    for section in sections:
        for q in section.get("questions", []):
            if q.get("type") == QuestionType.typing.value and q.get("typing_prompt"):
                return q["typing_prompt"], int(section["time_limit"]) * 60
    return None


def typing_passed(result: TypingResult, passing_score: int, score_type: str) -> bool:
    if score_type == PassingScoreType.wpm.value:
        return result.wpm >= passing_score
    return result.accuracy >= passing_score


class AssessmentService:

    # ── Definitions ─────────────────────────────────────────────────

    @staticmethod
    async def create_assessment(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: AssessmentCreate,
        *,
        created_by: Optional[uuid.UUID] = None,
    ) -> Assessment:
        values = data.model_dump(mode="json")
        assessment = Assessment(tenant_id=tenant_id, created_by=created_by, **values)
        db.add(assessment)
        await db.flush()
        logger.info("Assessment '%s' created in tenant %s", assessment.title, tenant_id)
        return assessment

    @staticmethod
    async def list_assessments(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        *,
        process_type: Optional[str] = None,
    ) -> Sequence[Assessment]:
        stmt = (
            select(Assessment)
            .where(Assessment.tenant_id == tenant_id)
            .order_by(Assessment.created_at.desc())
        )
        if process_type:
            stmt = stmt.where(Assessment.process_type == process_type)
        return (await db.execute(stmt)).scalars().all()

    @staticmethod
    async def get_assessment(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        assessment_id: uuid.UUID,
    ) -> Assessment:
        assessment = await db.get(Assessment, assessment_id)
        if assessment is None or assessment.tenant_id != tenant_id:
            raise NotFoundException("Assessment", str(assessment_id))
        return assessment

    # ── Attempts ────────────────────────────────────────────────────

    @staticmethod
    async def submit_mcq(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        assessment_id: uuid.UUID,
        employee_id: uuid.UUID,
        answers: dict[str, str],
    ) -> AssessmentAttempt:
        assessment = await AssessmentService.get_assessment(db, tenant_id, assessment_id)
        if assessment.passing_score_type != PassingScoreType.percent.value:
            raise ValidationException(
                {"assessment": ["This assessment is scored by typing speed."]}
            )
        if not mcq_questions(assessment.sections):
            raise ValidationException({"assessment": ["This assessment has no MCQ questions."]})

        score = mcq_score(assessment.sections, answers)
        return await AssessmentService._record_attempt(
            db,
            assessment,
            employee_id,
            score=score,
            passed=score >= assessment.passing_score,
            answers=answers,
        )

    @staticmethod
    async def submit_typing(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        assessment_id: uuid.UUID,
        employee_id: uuid.UUID,
        data: TypingSubmission,
    ) -> tuple[AssessmentAttempt, TypingResult]:
        """Score typed text against the assessment's typing prompt and store the attempt."""
        assessment = await AssessmentService.get_assessment(db, tenant_id, assessment_id)
        task = typing_task(assessment.sections)
        if task is None:
            raise ValidationException({"assessment": ["This assessment has no typing test."]})
        prompt, limit_seconds = task

        result = score_typing(prompt, data.typed_text, data.elapsed_seconds, limit_seconds)
        passed = typing_passed(result, assessment.passing_score, assessment.passing_score_type)
        attempt = await AssessmentService._record_attempt(
            db,
            assessment,
            employee_id,
            score=result.wpm if assessment.passing_score_type == PassingScoreType.wpm.value
            else result.accuracy,
            wpm=result.wpm,
            accuracy=result.accuracy,
            passed=passed,
            answers={"typed_text": data.typed_text, "elapsed_seconds": result.elapsed_seconds},
            wpm_samples=[s.model_dump() for s in data.wpm_samples] if data.wpm_samples else None,
        )
        return attempt, result

    @staticmethod
    async def list_attempts(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        assessment_id: uuid.UUID,
        *,
        employee_id: Optional[uuid.UUID] = None,
    ) -> Sequence[AssessmentAttempt]:
        await AssessmentService.get_assessment(db, tenant_id, assessment_id)
        stmt = (
            select(AssessmentAttempt)
            .where(AssessmentAttempt.assessment_id == assessment_id)
            .order_by(AssessmentAttempt.created_at.desc())
        )
        if employee_id:
            stmt = stmt.where(AssessmentAttempt.employee_id == employee_id)
        return (await db.execute(stmt)).scalars().all()

    @staticmethod
    async def count_attempts(
        db: AsyncSession,
        assessment_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> int:
        return await db.scalar(
            select(func.count()).select_from(AssessmentAttempt).where(
                AssessmentAttempt.assessment_id == assessment_id,
                AssessmentAttempt.employee_id == employee_id,
            )
        ) or 0

    @staticmethod
    async def _record_attempt(
        db: AsyncSession,
        assessment: Assessment,
        employee_id: uuid.UUID,
        **values: Any,
    ) -> AssessmentAttempt:
        taken = await AssessmentService.count_attempts(db, assessment.id, employee_id)
        if taken >= assessment.max_attempts:
            raise ValidationException(
                {"attempts": [f"Maximum of {assessment.max_attempts} attempt(s) reached."]}
            )

        attempt = AssessmentAttempt(
            assessment_id=assessment.id,
            employee_id=employee_id,
            attempt_number=taken + 1,
            **values,
        )
        db.add(attempt)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("attempt_number", taken + 1)

        logger.info(
            "Attempt %d on assessment %s by employee %s: score=%s passed=%s",
            attempt.attempt_number, assessment.id, employee_id, attempt.score, attempt.passed,
        )
        return attempt
