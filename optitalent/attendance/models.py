"""Attendance ORM model: one AttendanceRecord per employee per work date."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from optitalent.common.audit import TimestampMixin
from optitalent.common.constants import AttendanceStatus
from optitalent.core_hr.models import Employee
from optitalent.database import Base


class AttendanceRecord(Base, TimestampMixin):
    __tablename__ = "attendance_records"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "work_date", name="uq_attendance_emp_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    work_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    check_in: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    check_out: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    status: Mapped[str] = mapped_column(
        sa.String(20), nullable=False, default=AttendanceStatus.present.value,
    )
    face_verified: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    face_confidence: Mapped[Optional[float]] = mapped_column(sa.Float)

    employee: Mapped[Employee] = relationship()
