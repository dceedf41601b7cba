"""Assessment ORM models: Assessment, AssessmentAttempt."""

from __future__ import annotations

import uuid
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from optitalent.common.audit import TimestampMixin
from optitalent.common.constants import PassingScoreType
from optitalent.core_hr.models import Employee
from optitalent.database import Base


class Assessment(Base, TimestampMixin):
    """A quality/hiring assessment made of sections of questions.

    ``sections`` holds ``[{id, section_type, title, time_limit, questions:
    [{id, type, question_text, options?, correct_answer?, typing_prompt?}]}]``
    with ``time_limit`` in minutes.
    """

    __tablename__ = "assessments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    process_type: Mapped[Optional[str]] = mapped_column(sa.String(100))
    role: Mapped[Optional[str]] = mapped_column(sa.String(100))
    passing_score: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    passing_score_type: Mapped[str] = mapped_column(
        sa.String(10), nullable=False, default=PassingScoreType.percent.value,
    )
    max_attempts: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=1)
    duration_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    sections: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"),
    )

    attempts: Mapped[list[AssessmentAttempt]] = relationship(
        back_populates="assessment", cascade="all, delete-orphan",
    )


class AssessmentAttempt(Base, TimestampMixin):
    __tablename__ = "assessment_attempts"
    __table_args__ = (
        sa.UniqueConstraint(
            "assessment_id", "employee_id", "attempt_number", name="uq_attempt_number",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    assessment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attempt_number: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    score: Mapped[Optional[int]] = mapped_column(sa.Integer)
    wpm: Mapped[Optional[int]] = mapped_column(sa.Integer)
    accuracy: Mapped[Optional[int]] = mapped_column(sa.Integer)
    passed: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    answers: Mapped[Optional[dict]] = mapped_column(JSONB)
    wpm_samples: Mapped[Optional[list]] = mapped_column(JSONB)

    assessment: Mapped[Assessment] = relationship(back_populates="attempts")
    employee: Mapped[Employee] = relationship()
