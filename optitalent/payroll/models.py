"""Payroll ORM models: PayrollRun, PayrollEntry."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from optitalent.common.audit import TimestampMixin
from optitalent.common.constants import PayrollStatus
from optitalent.core_hr.models import Employee
from optitalent.database import Base


# ═════════════════════════════════════════════════════════════════════
# PayrollRun
# ═════════════════════════════════════════════════════════════════════


class PayrollRun(Base, TimestampMixin):
    __tablename__ = "payroll_runs"
    __table_args__ = (
        sa.UniqueConstraint(
            "tenant_id", "period_start", "period_end", name="uq_payroll_run_period",
        ),
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
    period_start: Mapped[date] = mapped_column(sa.Date, nullable=False)
    period_end: Mapped[date] = mapped_column(sa.Date, nullable=False)
    pay_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    status: Mapped[str] = mapped_column(
        sa.String(20), nullable=False, default=PayrollStatus.draft.value,
    )
    employee_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    total_gross: Mapped[Decimal] = mapped_column(sa.Numeric(14, 2), nullable=False, default=Decimal("0"))
    total_deductions: Mapped[Decimal] = mapped_column(sa.Numeric(14, 2), nullable=False, default=Decimal("0"))
    total_net: Mapped[Decimal] = mapped_column(sa.Numeric(14, 2), nullable=False, default=Decimal("0"))
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"),
    )

    entries: Mapped[list[PayrollEntry]] = relationship(
        back_populates="run", cascade="all, delete-orphan",
        order_by="PayrollEntry.employee_id",
    )


# ═════════════════════════════════════════════════════════════════════
# PayrollEntry
# ═════════════════════════════════════════════════════════════════════


class PayrollEntry(Base):
    __tablename__ = "payroll_entries"
    __table_args__ = (
        sa.UniqueConstraint("run_id", "employee_id", name="uq_payroll_entry_run_emp"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    run_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("payroll_runs.id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    gross: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False)
    deductions: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False)
    net: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False)

    run: Mapped[PayrollRun] = relationship(back_populates="entries")
    employee: Mapped[Employee] = relationship()
