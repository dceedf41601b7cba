"""Attendance: late rule, half days, one check-in per day, face verification."""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

import pytest

from optitalent.attendance.schemas import CheckInRequest
from optitalent.attendance.service import (
    AttendanceService,
    attendance_status,
    parse_shift_start,
)
from optitalent.common.constants import AttendanceStatus, UserRole
from optitalent.common.exceptions import ValidationException
from tests.conftest import seed_employee

BASE = "/api/v1/attendance"
PIXEL = "data:image/png;base64,iVBORw0KGgo="
UTC = timezone.utc


def at(hour: int, minute: int, day: int = 6) -> datetime:
    return datetime(2025, 1, day, hour, minute, tzinfo=UTC)


# ── Pure rules ──────────────────────────────────────────────────────

class TestStatusRule:
    def test_parse_shift_start(self):
        assert parse_shift_start("09:30") == time(9, 30)

    @pytest.mark.parametrize(
        "check_in,expected",
        [
            (at(9, 0), AttendanceStatus.present),
            (at(9, 45), AttendanceStatus.present),
            (at(9, 46), AttendanceStatus.late),
            (at(14, 0), AttendanceStatus.late),
        ],
    )
    def test_grace_window(self, check_in, expected):
        assert attendance_status(check_in, time(9, 30), 15) is expected


# ── Service with a fixed clock ──────────────────────────────────────

class TestCheckInOut:
    async def test_late_then_full_day(self, db, tenant):
        emp = await seed_employee(db, tenant.id)
        record = await AttendanceService.check_in(db, tenant.id, emp, CheckInRequest(), now=at(10, 0))
        assert record.status == "late"
        assert record.face_verified is False

        record = await AttendanceService.check_out(db, emp, now=at(18, 30))
        assert record.status == "late"
        assert record.check_out == at(18, 30)

    async def test_short_day_becomes_half_day(self, db, tenant):
        emp = await seed_employee(db, tenant.id)
        await AttendanceService.check_in(db, tenant.id, emp, CheckInRequest(), now=at(9, 15))
        record = await AttendanceService.check_out(db, emp, now=at(9, 15) + timedelta(hours=3, minutes=59))
        assert record.status == "half_day"

    async def test_one_check_in_per_day(self, db, tenant):
        emp = await seed_employee(db, tenant.id)
        await AttendanceService.check_in(db, tenant.id, emp, CheckInRequest(), now=at(9, 0))
        with pytest.raises(ValidationException):
            await AttendanceService.check_in(db, tenant.id, emp, CheckInRequest(), now=at(11, 0))

        record = await AttendanceService.check_in(
            db, tenant.id, emp, CheckInRequest(), now=at(9, 0, day=7),
        )
        assert record.work_date.day == 7

    async def test_double_check_out_rejected(self, db, tenant):
        emp = await seed_employee(db, tenant.id)
        await AttendanceService.check_in(db, tenant.id, emp, CheckInRequest(), now=at(9, 0))
        await AttendanceService.check_out(db, emp, now=at(17, 0))
        with pytest.raises(ValidationException):
            await AttendanceService.check_out(db, emp, now=at(17, 5))


# ── API ─────────────────────────────────────────────────────────────

class TestAttendanceAPI:
    async def test_check_in_twice_is_422(self, client, make_actor):
        actor = await make_actor()
        first = await client.post(f"{BASE}/check-in", json={}, headers=actor.headers)
        assert first.status_code == 201
        assert first.json()["data"]["status"] in ("present", "late")

        second = await client.post(f"{BASE}/check-in", json={}, headers=actor.headers)
        assert second.status_code == 422

    async def test_check_out_without_check_in_is_404(self, client, make_actor):
        actor = await make_actor()
        resp = await client.post(f"{BASE}/check-out", headers=actor.headers)
        assert resp.status_code == 404

    async def test_immediate_check_out_is_half_day(self, client, make_actor):
        actor = await make_actor()
        await client.post(f"{BASE}/check-in", json={}, headers=actor.headers)
        resp = await client.post(f"{BASE}/check-out", headers=actor.headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "half_day"

    async def test_face_match_marks_verified(self, client, make_actor, mock_ai):
        actor = await make_actor()
        reply = {"is_same_person": True, "confidence": 0.93, "reasoning": "same jawline"}
        with mock_ai(reply) as generate:
            resp = await client.post(
                f"{BASE}/check-in",
                json={"capture_image_uri": PIXEL, "reference_image_uri": PIXEL},
                headers=actor.headers,
            )
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["face_verified"] is True
        assert data["face_confidence"] == pytest.approx(0.93)
        assert len(generate.call_args.kwargs["media"]) == 2

    async def test_face_mismatch_is_422_and_nothing_recorded(self, client, make_actor, mock_ai):
        actor = await make_actor()
        reply = {"is_same_person": False, "confidence": 0.05, "reasoning": "different person"}
        with mock_ai(reply):
            resp = await client.post(
                f"{BASE}/check-in",
                json={"capture_image_uri": PIXEL, "reference_image_uri": PIXEL},
                headers=actor.headers,
            )
        assert resp.status_code == 422
        assert "different person" in resp.json()["errors"]["capture_image_uri"][0]

        records = (await client.get(f"{BASE}/my-records", headers=actor.headers)).json()
        assert records["meta"]["total"] == 0

    async def test_capture_without_reference_photo(self, client, make_actor):
        actor = await make_actor()
        resp = await client.post(
            f"{BASE}/check-in", json={"capture_image_uri": PIXEL}, headers=actor.headers,
        )
        assert resp.status_code == 422

    async def test_non_data_uri_rejected(self, client, make_actor):
        actor = await make_actor()
        resp = await client.post(
            f"{BASE}/check-in",
            json={"capture_image_uri": "https://cdn.example.com/me.jpg"},
            headers=actor.headers,
        )
        assert resp.status_code == 422

    async def test_tenant_listing_requires_hr(self, client, make_actor):
        actor = await make_actor()
        resp = await client.get(BASE, headers=actor.headers)
        assert resp.status_code == 403

        hr = await make_actor(UserRole.hr)
        resp = await client.get(BASE, headers=hr.headers)
        assert resp.status_code == 200
