"""Payroll service — run generation, lifecycle and AI pre-processing audit."""

from __future__ import annotations

import json
import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from optitalent.ai import flows
from optitalent.ai.flows.payroll import PayrollAuditInput, PayrollAuditOutput
from optitalent.common.audit import create_audit_entry
from optitalent.common.constants import PayrollStatus
from optitalent.common.exceptions import ConflictError, NotFoundException, ValidationException
from optitalent.config import settings
from optitalent.core_hr.models import Employee
from optitalent.payroll.models import PayrollEntry, PayrollRun
from optitalent.payroll.schemas import PayrollRunCreate

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# Allowed forward transitions
_NEXT_STATUS: dict[str, set[str]] = {
    PayrollStatus.draft.value: {PayrollStatus.processed.value},
    PayrollStatus.processed.value: {PayrollStatus.paid.value},
    PayrollStatus.paid.value: set(),
}


def compute_entry(gross: Decimal, rate: Decimal) -> tuple[Decimal, Decimal, Decimal]:
    """Return (gross, deductions, net) rounded to cents at a flat deduction rate."""
    gross = gross.quantize(CENT, rounding=ROUND_HALF_UP)
    deductions = (gross * rate).quantize(CENT, rounding=ROUND_HALF_UP)
    return gross, deductions, gross - deductions


def _run_snapshot(run: PayrollRun) -> dict[str, Any]:
    return {
        "period_start": run.period_start.isoformat(),
        "period_end": run.period_end.isoformat(),
        "employee_count": run.employee_count,
        "total_gross": str(run.total_gross),
        "total_deductions": str(run.total_deductions),
        "total_net": str(run.total_net),
        "entries": [
            {
                "employee_code": e.employee.employee_code,
                "name": e.employee.full_name,
                "gross": str(e.gross),
                "deductions": str(e.deductions),
                "net": str(e.net),
            }
            for e in run.entries
        ],
    }


class PayrollService:

    @staticmethod
    async def create_run(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: PayrollRunCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> PayrollRun:
        """Build a draft run from every active employee's monthly salary."""
        rate = Decimal(str(settings.PAYROLL_DEDUCTION_RATE))

        result = await db.execute(
            select(Employee)
            .where(
                Employee.tenant_id == tenant_id,
                Employee.is_active.is_(True),
                Employee.monthly_salary.is_not(None),
            )
            .order_by(Employee.employee_code)
        )
        employees = result.scalars().all()

        run = PayrollRun(
            tenant_id=tenant_id,
            period_start=data.period_start,
            period_end=data.period_end,
            pay_date=data.pay_date,
            status=PayrollStatus.draft.value,
            created_by=actor_id,
        )
        total_gross = total_deductions = total_net = Decimal("0")
        for emp in employees:
            gross, deductions, net = compute_entry(Decimal(emp.monthly_salary), rate)
            run.entries.append(
                PayrollEntry(employee_id=emp.id, gross=gross, deductions=deductions, net=net)
            )
            total_gross += gross
            total_deductions += deductions
            total_net += net

        run.employee_count = len(run.entries)
        run.total_gross = total_gross
        run.total_deductions = total_deductions
        run.total_net = total_net

        db.add(run)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(
                "period", f"{data.period_start.isoformat()}..{data.period_end.isoformat()}",
            )

        await create_audit_entry(
            db,
            action="create",
            entity_type="payroll_run",
            entity_id=run.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            new_values={
                "period_start": data.period_start.isoformat(),
                "period_end": data.period_end.isoformat(),
                "employee_count": run.employee_count,
                "total_net": str(total_net),
            },
        )
        logger.info(
            "Payroll run %s..%s created for tenant %s (%d employees)",
            data.period_start, data.period_end, tenant_id, run.employee_count,
        )
        return await PayrollService.get_run(db, tenant_id, run.id)

    @staticmethod
    async def list_runs(db: AsyncSession, tenant_id: uuid.UUID) -> Sequence[PayrollRun]:
        result = await db.execute(
            select(PayrollRun)
            .where(PayrollRun.tenant_id == tenant_id)
            .order_by(PayrollRun.period_start.desc())
        )
        return result.scalars().all()

    @staticmethod
    async def get_run(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        run_id: uuid.UUID,
    ) -> PayrollRun:
        result = await db.execute(
            select(PayrollRun)
            .where(PayrollRun.id == run_id, PayrollRun.tenant_id == tenant_id)
            .options(selectinload(PayrollRun.entries).selectinload(PayrollEntry.employee))
            .execution_options(populate_existing=True)
        )
        run = result.scalars().first()
        if run is None:
            raise NotFoundException("PayrollRun", str(run_id))
        return run

    @staticmethod
    async def set_status(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        run_id: uuid.UUID,
        status: PayrollStatus,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> PayrollRun:
        run = await PayrollService.get_run(db, tenant_id, run_id)
        if status.value not in _NEXT_STATUS[run.status]:
            raise ValidationException(
                {"status": [f"Cannot move a {run.status} payroll run to {status.value}."]}
            )
        old = run.status
        run.status = status.value
        await db.flush()
        await create_audit_entry(
            db,
            action="update",
            entity_type="payroll_run",
            entity_id=run.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            old_values={"status": old},
            new_values={"status": run.status},
        )
        return run

    @staticmethod
    async def audit_run(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        run_id: uuid.UUID,
    ) -> PayrollAuditOutput:
        """Ask the model to flag anomalies, comparing with the previous run."""
        run = await PayrollService.get_run(db, tenant_id, run_id)

        previous_id = await db.scalar(
            select(PayrollRun.id)
            .where(
                PayrollRun.tenant_id == tenant_id,
                PayrollRun.period_start < run.period_start,
            )
            .order_by(PayrollRun.period_start.desc())
            .limit(1)
        )
        historical: Optional[str] = None
        if previous_id is not None:
            previous = await PayrollService.get_run(db, tenant_id, previous_id)
            historical = json.dumps(_run_snapshot(previous))

        return await flows.detect_payroll_errors.run(
            PayrollAuditInput(
                payroll_data=json.dumps(_run_snapshot(run)),
                historical_data=historical,
            )
        )
