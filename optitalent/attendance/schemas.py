"""Attendance Pydantic schemas."""


import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from optitalent.ai.client import MediaPart
from optitalent.common.constants import AttendanceStatus


# ── Requests ────────────────────────────────────────────────────────

class CheckInRequest(BaseModel):
    """Optional live capture for face verification.

    When ``capture_image_uri`` is given, it is compared against
    ``reference_image_uri`` or, failing that, the stored profile photo.
    """

    capture_image_uri: Optional[str] = None
    reference_image_uri: Optional[str] = None

    @field_validator("capture_image_uri", "reference_image_uri")
    @classmethod
    def _check_data_uri(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            MediaPart.from_data_uri(value)
        return value


# ── Responses ───────────────────────────────────────────────────────

class AttendanceRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    work_date: date
    check_in: datetime
    check_out: Optional[datetime] = None
    status: AttendanceStatus
    face_verified: bool
    face_confidence: Optional[float] = None
