"""Recruitment ORM models: JobOpening, Applicant."""

from __future__ import annotations

import uuid
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from optitalent.common.audit import TimestampMixin
from optitalent.common.constants import ApplicantStatus, JobStatus
from optitalent.database import Base


class JobOpening(Base, TimestampMixin):
    __tablename__ = "job_openings"

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
    department_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("departments.id", ondelete="SET NULL"),
    )
    description: Mapped[str] = mapped_column(sa.Text, nullable=False)
    status: Mapped[str] = mapped_column(
        sa.String(20), nullable=False, default=JobStatus.open.value,
    )

    applicants: Mapped[list[Applicant]] = relationship(back_populates="job")


class Applicant(Base, TimestampMixin):
    __tablename__ = "applicants"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    job_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("job_openings.id", ondelete="SET NULL"),
    )
    full_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(sa.String(30))
    status: Mapped[str] = mapped_column(
        sa.String(20), nullable=False, default=ApplicantStatus.applied.value,
    )
    resume_text: Mapped[Optional[str]] = mapped_column(sa.Text)
    ai_score: Mapped[Optional[float]] = mapped_column(sa.Float)
    ai_justification: Mapped[Optional[str]] = mapped_column(sa.Text)
    parsed_resume: Mapped[Optional[dict]] = mapped_column(JSONB)

    job: Mapped[Optional[JobOpening]] = relationship(back_populates="applicants")
