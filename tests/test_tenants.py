"""Tenant provisioning, slug generation, and lifecycle."""

from __future__ import annotations

import re

import pytest

from optitalent.common.constants import UserRole
from optitalent.tenants.service import make_slug
from tests.conftest import auth_headers_for, seed_user

PROVISION_URL = "/api/v1/tenants/provision"


@pytest.fixture
async def super_admin_headers(db):
    user = await seed_user(db, None, role=UserRole.super_admin, email="root@optitalent.com")
    return await auth_headers_for(db, user)


# ── make_slug ───────────────────────────────────────────────────────

class TestMakeSlug:
    def test_format(self):
        slug = make_slug("Acme Corp")
        assert re.fullmatch(r"acme-corp-\d{1,3}", slug)
        assert 0 <= int(slug.rsplit("-", 1)[1]) <= 999

    def test_non_alphanumerics_become_dashes(self):
        assert make_slug("R&D Labs, Inc.", suffix=7) == "r-d-labs--inc--7"


# ── Provisioning ────────────────────────────────────────────────────

class TestProvision:
    async def test_super_admin_provisions_tenant_and_admin(self, client, super_admin_headers):
        resp = await client.post(
            PROVISION_URL,
            json={"name": "Globex Inc", "plan": "Enterprise", "admin_email": "Boss@Globex.com"},
            headers=super_admin_headers,
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["tenant"]["name"] == "Globex Inc"
        assert body["tenant"]["plan"] == "Enterprise"
        assert body["tenant"]["status"] == "Active"
        assert re.fullmatch(r"globex-inc-\d{1,3}", body["tenant"]["slug"])
        assert body["admin_email"] == "boss@globex.com"
        assert len(body["temporary_password"]) >= 12

        login = await client.post(
            "/api/v1/auth/login",
            json={"email": "boss@globex.com", "password": body["temporary_password"]},
        )
        assert login.status_code == 200
        user = login.json()["user"]
        assert user["role"] == "admin"
        assert user["tenant_id"] == body["tenant"]["id"]

    async def test_missing_fields_rejected(self, client, super_admin_headers):
        resp = await client.post(
            PROVISION_URL, json={"name": "Initech"}, headers=super_admin_headers,
        )
        assert resp.status_code == 422

    async def test_duplicate_admin_email_conflicts(self, client, super_admin_headers):
        payload = {"name": "Initech", "plan": "Free", "admin_email": "owner@initech.com"}
        first = await client.post(PROVISION_URL, json=payload, headers=super_admin_headers)
        assert first.status_code == 201

        second = await client.post(
            PROVISION_URL, json={**payload, "name": "Initech Two"}, headers=super_admin_headers,
        )
        assert second.status_code == 409

        listing = await client.get("/api/v1/tenants", headers=super_admin_headers)
        assert [t["name"] for t in listing.json()] == ["Initech"]

    @pytest.mark.parametrize("role", [UserRole.admin, UserRole.hr, UserRole.employee])
    async def test_non_super_admin_forbidden(self, client, make_actor, role):
        actor = await make_actor(role)
        resp = await client.post(
            PROVISION_URL,
            json={"name": "Hooli", "plan": "Startup", "admin_email": "gavin@hooli.com"},
            headers=actor.headers,
        )
        assert resp.status_code == 403


# ── Lifecycle ───────────────────────────────────────────────────────

class TestTenantStatus:
    async def test_suspended_tenant_cannot_log_in(self, client, db, tenant, super_admin_headers):
        await seed_user(db, tenant.id, email="staff@acme.com")

        resp = await client.patch(
            f"/api/v1/tenants/{tenant.id}/status",
            json={"status": "Suspended"},
            headers=super_admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "Suspended"

        login = await client.post(
            "/api/v1/auth/login",
            json={"email": "staff@acme.com", "password": "Str0ng-Passw0rd!"},
        )
        assert login.status_code == 403

    async def test_super_admin_needs_subdomain_for_tenant_data(self, client, tenant, super_admin_headers):
        resp = await client.get("/api/v1/employees", headers=super_admin_headers)
        assert resp.status_code == 403

        resp = await client.get(
            "/api/v1/employees",
            headers={**super_admin_headers, "Host": "acme.optitalent.app"},
        )
        assert resp.status_code == 200
