"""Auth: login, /me, refresh rotation, logout, RBAC hierarchy."""

from __future__ import annotations

import pytest

from optitalent.auth.dependencies import has_role
from optitalent.common.constants import UserRole
from tests.conftest import PASSWORD, seed_user


# ═════════════════════════════════════════════════════════════════════
# Role hierarchy
# ═════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    "role,allowed,expected",
    [
        (UserRole.super_admin, (UserRole.super_admin,), True),
        (UserRole.admin, (UserRole.hr,), True),
        (UserRole.admin, (UserRole.super_admin,), False),
        (UserRole.hr, (UserRole.team_leader,), True),
        (UserRole.hr, (UserRole.finance,), False),
        (UserRole.manager, (UserRole.team_leader,), True),
        (UserRole.team_leader, (UserRole.manager,), False),
        (UserRole.employee, (UserRole.employee,), True),
        (UserRole.guest, (UserRole.employee,), False),
    ],
)
def test_role_hierarchy(role, allowed, expected):
    assert has_role(role, *allowed) is expected


# ═════════════════════════════════════════════════════════════════════
# Login / session lifecycle
# ═════════════════════════════════════════════════════════════════════


class TestLogin:
    async def test_login_success(self, client, db, tenant):
        user = await seed_user(db, tenant.id, role=UserRole.hr, email="hr@acme.com")
        resp = await client.post(
            "/api/v1/auth/login", json={"email": "HR@acme.com", "password": PASSWORD},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["id"] == str(user.id)
        assert body["user"]["role"] == "hr"
        assert body["user"]["tenant_slug"] == "acme"

    async def test_login_wrong_password(self, client, db, tenant):
        await seed_user(db, tenant.id, email="emp@acme.com")
        resp = await client.post(
            "/api/v1/auth/login", json={"email": "emp@acme.com", "password": "nope"},
        )
        assert resp.status_code == 401

    async def test_login_unknown_email(self, client):
        resp = await client.post(
            "/api/v1/auth/login", json={"email": "ghost@acme.com", "password": PASSWORD},
        )
        assert resp.status_code == 401

    async def test_me_returns_employee_link(self, client, make_actor):
        actor = await make_actor(UserRole.employee, first_name="Asha", last_name="Rao")
        resp = await client.get("/api/v1/auth/me", headers=actor.headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["employee_id"] == str(actor.employee.id)
        assert body["full_name"] == "Asha Rao"

    async def test_me_without_token(self, client):
        resp = await client.get("/api/v1/auth/me")
        assert resp.status_code == 401

    async def test_logout_revokes_session(self, client, make_actor):
        actor = await make_actor()
        resp = await client.post("/api/v1/auth/logout", headers=actor.headers)
        assert resp.status_code == 200
        resp = await client.get("/api/v1/auth/me", headers=actor.headers)
        assert resp.status_code == 401

    async def test_refresh_rotation_and_reuse_detection(self, client, db, tenant):
        await seed_user(db, tenant.id, email="rot@acme.com")
        login = await client.post(
            "/api/v1/auth/login", json={"email": "rot@acme.com", "password": PASSWORD},
        )
        refresh = login.json()["refresh_token"]

        first = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh})
        assert first.status_code == 200
        assert first.json()["refresh_token"] != refresh

        reused = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh})
        assert reused.status_code == 403

        new_access = first.json()["access_token"]
        resp = await client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {new_access}"},
        )
        assert resp.status_code == 401


class TestTenantPinning:
    async def test_foreign_subdomain_rejected(self, client, make_actor):
        actor = await make_actor(UserRole.hr)
        resp = await client.get(
            "/api/v1/employees",
            headers={**actor.headers, "Host": "globex.optitalent.app"},
        )
        assert resp.status_code == 403

    async def test_own_subdomain_accepted(self, client, make_actor):
        actor = await make_actor(UserRole.hr)
        resp = await client.get(
            "/api/v1/employees",
            headers={**actor.headers, "Host": "acme.optitalent.app"},
        )
        assert resp.status_code == 200
