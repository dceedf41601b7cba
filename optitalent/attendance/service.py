"""Attendance service — check-in/out with optional AI face verification."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.ai import flows
from optitalent.ai.flows.attendance import FaceVerificationInput
from optitalent.attendance.models import AttendanceRecord
from optitalent.attendance.schemas import CheckInRequest
from optitalent.common.constants import AttendanceStatus
from optitalent.common.exceptions import NotFoundException, ValidationException
from optitalent.common.pagination import PaginatedResponse, PaginationParams, paginate
from optitalent.config import settings
from optitalent.core_hr.models import Employee

logger = logging.getLogger(__name__)

HALF_DAY_HOURS = 4


def parse_shift_start(value: str) -> time:
    """``"09:30"`` → ``time(9, 30)``."""
    hours, minutes = value.split(":", 1)
    return time(int(hours), int(minutes))


def attendance_status(
    check_in: datetime,
    shift_start: time,
    grace_minutes: int,
) -> AttendanceStatus:
    """``late`` when check-in falls after shift start plus grace, else ``present``."""
    cutoff = datetime.combine(check_in.date(), shift_start, tzinfo=check_in.tzinfo)
    cutoff += timedelta(minutes=grace_minutes)
    return AttendanceStatus.late if check_in > cutoff else AttendanceStatus.present


class AttendanceService:

    @staticmethod
    async def check_in(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        employee: Employee,
        data: CheckInRequest,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Open today's attendance record. One check-in per day."""
        now = now or datetime.now(timezone.utc)

        existing = await AttendanceService._get_for_day(db, employee.id, now.date())
        if existing is not None:
            raise ValidationException({"check_in": ["You have already checked in today."]})

        face_verified = False
        face_confidence: Optional[float] = None
        if data.capture_image_uri:
            reference = data.reference_image_uri or employee.profile_photo_url
            if not reference:
                raise ValidationException(
                    {"reference_image_uri": ["No reference photo is available for face verification."]}
                )
            try:
                verify_input = FaceVerificationInput(
                    profile_image_uri=reference,
                    capture_image_uri=data.capture_image_uri,
                )
            except ValueError:
                raise ValidationException(
                    {"reference_image_uri": ["The stored profile photo is not an inline image."]}
                )
            result = await flows.verify_face.run(verify_input)
            if not result.is_same_person:
                logger.warning(
                    "Face verification failed for %s (confidence %.2f)",
                    employee.employee_code, result.confidence,
                )
                raise ValidationException(
                    {"capture_image_uri": [f"Face verification failed: {result.reasoning}"]}
                )
            face_verified = True
            face_confidence = result.confidence

        status = attendance_status(
            now, parse_shift_start(settings.SHIFT_START), settings.LATE_GRACE_MINUTES,
        )
        record = AttendanceRecord(
            tenant_id=tenant_id,
            employee_id=employee.id,
            work_date=now.date(),
            check_in=now,
            status=status.value,
            face_verified=face_verified,
            face_confidence=face_confidence,
        )
        db.add(record)
        await db.flush()
        logger.info("Check-in %s for %s (%s)", record.work_date, employee.employee_code, status.value)
        return record

    @staticmethod
    async def check_out(
        db: AsyncSession,
        employee: Employee,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or datetime.now(timezone.utc)
        record = await AttendanceService._get_for_day(db, employee.id, now.date())
        if record is None:
            raise NotFoundException("AttendanceRecord", now.date().isoformat())
        if record.check_out is not None:
            raise ValidationException({"check_out": ["You have already checked out today."]})

        record.check_out = now
        check_in = record.check_in
        if check_in.tzinfo is None:
            check_in = check_in.replace(tzinfo=timezone.utc)
        if now - check_in < timedelta(hours=HALF_DAY_HOURS):
            record.status = AttendanceStatus.half_day.value
        await db.flush()
        return record

    @staticmethod
    async def list_records(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        employee_id: Optional[uuid.UUID] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> PaginatedResponse:
        query = (
            select(AttendanceRecord)
            .where(AttendanceRecord.tenant_id == tenant_id)
            .order_by(AttendanceRecord.work_date.desc())
        )
        if employee_id:
            query = query.where(AttendanceRecord.employee_id == employee_id)
        if from_date:
            query = query.where(AttendanceRecord.work_date >= from_date)
        if to_date:
            query = query.where(AttendanceRecord.work_date <= to_date)
        if status:
            query = query.where(AttendanceRecord.status == status.value)
        return await paginate(db, query, pagination, model=AttendanceRecord)

    @staticmethod
    async def _get_for_day(
        db: AsyncSession,
        employee_id: uuid.UUID,
        work_date: date,
    ) -> Optional[AttendanceRecord]:
        result = await db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.employee_id == employee_id,
                AttendanceRecord.work_date == work_date,
            )
        )
        return result.scalars().first()
