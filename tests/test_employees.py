"""Employees, departments and job roles: CRUD, uniqueness, tenant isolation."""

from __future__ import annotations

import uuid

import pytest

from optitalent.common.constants import UserRole
from tests.conftest import seed_employee, seed_tenant

BASE = "/api/v1/employees"


def employee_payload(**overrides) -> dict:
    payload = {
        "employee_code": "EMP-0001",
        "first_name": "Priya",
        "last_name": "Sharma",
        "email": "Priya.Sharma@acme.com",
        "job_title": "Process Associate",
        "date_of_joining": "2024-03-01",
        "monthly_salary": "42000.00",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def hr(make_actor):
    return await make_actor(UserRole.hr, first_name="Hema", last_name="Rao")


# ═════════════════════════════════════════════════════════════════════
# Employees
# ═════════════════════════════════════════════════════════════════════


class TestCreateEmployee:
    async def test_read_after_write(self, client, hr):
        resp = await client.post(BASE, json=employee_payload(), headers=hr.headers)
        assert resp.status_code == 201
        created = resp.json()["data"]
        assert created["email"] == "priya.sharma@acme.com"
        assert created["full_name"] == "Priya Sharma"
        assert created["employment_status"] == "active"
        assert created["is_active"] is True

        fetched = await client.get(f"{BASE}/{created['id']}", headers=hr.headers)
        assert fetched.status_code == 200
        assert fetched.json()["data"]["employee_code"] == "EMP-0001"

    async def test_duplicate_code_conflicts(self, client, hr):
        await client.post(BASE, json=employee_payload(), headers=hr.headers)
        resp = await client.post(
            BASE,
            json=employee_payload(email="someone.else@acme.com"),
            headers=hr.headers,
        )
        assert resp.status_code == 409
        assert "employee_code" in resp.json()["errors"]

    async def test_duplicate_email_conflicts(self, client, hr):
        await client.post(BASE, json=employee_payload(), headers=hr.headers)
        resp = await client.post(
            BASE, json=employee_payload(employee_code="EMP-0002"), headers=hr.headers,
        )
        assert resp.status_code == 409
        assert "email" in resp.json()["errors"]

    async def test_manager_must_exist_in_tenant(self, client, hr):
        resp = await client.post(
            BASE, json=employee_payload(manager_id=str(uuid.uuid4())), headers=hr.headers,
        )
        assert resp.status_code == 422
        assert "manager_id" in resp.json()["errors"]

    async def test_missing_required_field(self, client, hr):
        payload = employee_payload()
        del payload["date_of_joining"]
        resp = await client.post(BASE, json=payload, headers=hr.headers)
        assert resp.status_code == 422

    async def test_employee_cannot_create(self, client, make_actor):
        actor = await make_actor(UserRole.employee)
        resp = await client.post(BASE, json=employee_payload(), headers=actor.headers)
        assert resp.status_code == 403


class TestEmployeeLifecycle:
    async def test_update_then_deactivate(self, client, hr):
        created = (await client.post(BASE, json=employee_payload(), headers=hr.headers)).json()["data"]

        resp = await client.patch(
            f"{BASE}/{created['id']}",
            json={"job_title": "Senior Associate"},
            headers=hr.headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["job_title"] == "Senior Associate"

        resp = await client.post(f"{BASE}/{created['id']}/deactivate", headers=hr.headers)
        assert resp.status_code == 200

        detail = (await client.get(f"{BASE}/{created['id']}", headers=hr.headers)).json()["data"]
        assert detail["is_active"] is False
        assert detail["employment_status"] == "terminated"

    async def test_self_management_rejected(self, client, hr):
        created = (await client.post(BASE, json=employee_payload(), headers=hr.headers)).json()["data"]
        resp = await client.patch(
            f"{BASE}/{created['id']}", json={"manager_id": created["id"]}, headers=hr.headers,
        )
        assert resp.status_code == 422

    async def test_hard_delete_requires_admin(self, client, hr, make_actor):
        created = (await client.post(BASE, json=employee_payload(), headers=hr.headers)).json()["data"]

        resp = await client.delete(f"{BASE}/{created['id']}", headers=hr.headers)
        assert resp.status_code == 403

        admin = await make_actor(UserRole.admin, with_employee=False)
        resp = await client.delete(f"{BASE}/{created['id']}", headers=admin.headers)
        assert resp.status_code == 200
        resp = await client.get(f"{BASE}/{created['id']}", headers=admin.headers)
        assert resp.status_code == 404


class TestListAndIsolation:
    async def test_list_search(self, client, hr):
        await client.post(BASE, json=employee_payload(), headers=hr.headers)
        resp = await client.get(BASE, params={"search": "priya"}, headers=hr.headers)
        assert resp.status_code == 200
        body = resp.json()
        assert [row["first_name"] for row in body["data"]] == ["Priya"]
        assert body["meta"]["total"] == 1

    async def test_sort_overrides_default_order(self, client, db, tenant, hr):
        await seed_employee(db, tenant.id, first_name="Zoe")
        await seed_employee(db, tenant.id, first_name="Aaron")

        default = (await client.get(BASE, headers=hr.headers)).json()["data"]
        assert [row["first_name"] for row in default] == ["Aaron", "Hema", "Zoe"]

        resp = await client.get(BASE, params={"sort": "-first_name"}, headers=hr.headers)
        assert [row["first_name"] for row in resp.json()["data"]] == ["Zoe", "Hema", "Aaron"]

    async def test_sort_by_relationship_is_ignored(self, client, hr):
        resp = await client.get(BASE, params={"sort": "department"}, headers=hr.headers)
        assert resp.status_code == 200
        assert [row["first_name"] for row in resp.json()["data"]] == ["Hema"]

    async def test_other_tenant_employee_invisible(self, client, db, hr):
        other = await seed_tenant(db, name="Globex Inc", slug="globex")
        outsider = await seed_employee(db, other.id, first_name="Otto")

        resp = await client.get(f"{BASE}/{outsider.id}", headers=hr.headers)
        assert resp.status_code == 404

        listing = (await client.get(BASE, headers=hr.headers)).json()["data"]
        assert str(outsider.id) not in {row["id"] for row in listing}

    async def test_direct_reports(self, client, make_actor, hr):
        lead = await make_actor(UserRole.team_leader, first_name="Lena")
        await make_actor(UserRole.employee, first_name="Ravi", manager=lead.employee)

        resp = await client.get(f"{BASE}/{lead.employee.id}/direct-reports", headers=hr.headers)
        assert resp.status_code == 200
        assert [r["full_name"] for r in resp.json()["data"]] == ["Ravi Employee"]


# ═════════════════════════════════════════════════════════════════════
# AI role suggestion
# ═════════════════════════════════════════════════════════════════════


class TestSuggestRole:
    async def test_suggestion_returned(self, client, hr, mock_ai):
        with mock_ai({"suggested_role": "Recruiter"}):
            resp = await client.post(
                f"{BASE}/suggest-role",
                json={"department": "Talent Acquisition", "job_title": "Sourcer"},
                headers=hr.headers,
            )
        assert resp.status_code == 200
        assert resp.json()["data"] == {"suggested_role": "Recruiter"}

    async def test_off_schema_reply_is_generic_error(self, client, hr, mock_ai):
        with mock_ai({"suggested_role": "Wizard"}):
            resp = await client.post(
                f"{BASE}/suggest-role",
                json={"department": "Ops", "job_title": "Agent"},
                headers=hr.headers,
            )
        assert resp.status_code == 502
        assert resp.json()["detail"] == "The AI service failed to produce a valid response."


# ═════════════════════════════════════════════════════════════════════
# Departments / roles
# ═════════════════════════════════════════════════════════════════════


class TestDepartments:
    async def test_create_list_and_duplicate(self, client, hr):
        resp = await client.post(
            "/api/v1/departments", json={"name": "Quality"}, headers=hr.headers,
        )
        assert resp.status_code == 201
        dup = await client.post(
            "/api/v1/departments", json={"name": "Quality"}, headers=hr.headers,
        )
        assert dup.status_code == 409

        listing = await client.get("/api/v1/departments", headers=hr.headers)
        assert [d["name"] for d in listing.json()] == ["Quality"]

    async def test_role_catalogue_admin_only(self, client, hr, make_actor):
        resp = await client.post("/api/v1/roles", json={"name": "Analyst"}, headers=hr.headers)
        assert resp.status_code == 403

        admin = await make_actor(UserRole.admin, with_employee=False)
        resp = await client.post("/api/v1/roles", json={"name": "Analyst"}, headers=admin.headers)
        assert resp.status_code == 201
        assert resp.json()["name"] == "Analyst"
