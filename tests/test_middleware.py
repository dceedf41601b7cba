"""Request-entry middleware: fixed-window limiter, maintenance, headers, tenant tag."""

from __future__ import annotations

import pytest

from optitalent.config import settings
from optitalent.middleware import (
    SECURITY_HEADERS,
    FixedWindowRateLimiter,
    InMemoryWindowStore,
    tenant_slug_from_host,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


# ═════════════════════════════════════════════════════════════════════
# FixedWindowRateLimiter
# ═════════════════════════════════════════════════════════════════════


class TestFixedWindowRateLimiter:
    def test_101st_request_in_window_rejected(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(100, 60, clock=clock)
        results = [limiter.hit("10.0.0.1") for _ in range(101)]
        assert all(results[:100])
        assert results[100] is False

    def test_window_resets_after_expiry(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(100, 60, clock=clock)
        for _ in range(101):
            limiter.hit("10.0.0.1")
        clock.now = 60.5
        assert limiter.hit("10.0.0.1") is True
        assert limiter.store.get("10.0.0.1").count == 1

    def test_window_boundary_is_exclusive(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)
        assert limiter.hit("ip")
        clock.now = 60.0
        assert limiter.hit("ip") is False

    def test_keys_are_independent(self):
        limiter = FixedWindowRateLimiter(1, 60, clock=FakeClock())
        assert limiter.hit("a")
        assert limiter.hit("b")
        assert limiter.hit("a") is False

    def test_expired_windows_are_evicted(self):
        clock = FakeClock()
        store = InMemoryWindowStore()
        limiter = FixedWindowRateLimiter(1, 60, store=store, clock=clock)
        for n in range(50):
            limiter.hit(f"10.0.0.{n}")
        assert len(store) == 50

        clock.now = 61
        limiter.hit("10.0.1.1")
        assert len(store) == 1
        assert store.get("10.0.0.0") is None

    def test_reset_clears_store(self):
        store = InMemoryWindowStore()
        limiter = FixedWindowRateLimiter(1, 60, store=store, clock=FakeClock())
        limiter.hit("a")
        limiter.reset()
        assert len(store) == 0


# ═════════════════════════════════════════════════════════════════════
# Tenant tagging
# ═════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    "host,expected",
    [
        ("acme.optitalent.app", "acme"),
        ("Acme.optitalent.app:8443", "acme"),
        ("www.optitalent.app", None),
        ("localhost:8000", None),
        ("127.0.0.1:8000", None),
        ("[::1]:8000", None),
        ("", None),
    ],
)
def test_tenant_slug_from_host(host, expected):
    assert tenant_slug_from_host(host) == expected


# ═════════════════════════════════════════════════════════════════════
# Middleware through the app
# ═════════════════════════════════════════════════════════════════════


class TestRequestEntryMiddleware:
    async def test_security_headers_on_every_response(self, client):
        resp = await client.get("/api/v1/health")
        assert resp.status_code == 200
        for name, value in SECURITY_HEADERS.items():
            assert resp.headers[name] == value

        resp = await client.get("/api/v1/auth/me")
        assert resp.status_code == 401
        assert resp.headers["X-Frame-Options"] == "SAMEORIGIN"

    async def test_tenant_header_echoed(self, client):
        resp = await client.get("/api/v1/health", headers={"Host": "acme.optitalent.app"})
        assert resp.headers["x-tenant-id"] == "acme"

        resp = await client.get("/api/v1/health")
        assert "x-tenant-id" not in resp.headers

    async def test_rate_limit_returns_429(self, app, client):
        app.state.entry_limiter.limit = 3
        statuses = [(await client.get("/api/v1/auth/me")).status_code for _ in range(4)]
        assert statuses == [401, 401, 401, 429]

        resp = await client.get("/api/v1/auth/me")
        assert resp.json() == {
            "success": False,
            "message": "Too many requests. Please try again later.",
        }
        assert resp.headers["Strict-Transport-Security"].startswith("max-age=63072000")

    async def test_limit_keyed_by_forwarded_ip(self, app, client):
        app.state.entry_limiter.limit = 1
        first = await client.get("/api/v1/auth/me", headers={"X-Forwarded-For": "1.1.1.1"})
        second = await client.get(
            "/api/v1/auth/me", headers={"X-Forwarded-For": "2.2.2.2, 10.0.0.1"},
        )
        third = await client.get("/api/v1/auth/me", headers={"X-Forwarded-For": "1.1.1.1"})
        assert (first.status_code, second.status_code, third.status_code) == (401, 401, 429)

    async def test_health_is_exempt(self, app, client):
        app.state.entry_limiter.limit = 1
        for _ in range(5):
            assert (await client.get("/api/v1/health")).status_code == 200

    async def test_first_request_after_window_succeeds(self, app, client):
        clock = FakeClock()
        app.state.entry_limiter.clock = clock
        app.state.entry_limiter.limit = 2
        for _ in range(2):
            await client.get("/api/v1/auth/me")
        assert (await client.get("/api/v1/auth/me")).status_code == 429
        clock.now = 61
        assert (await client.get("/api/v1/auth/me")).status_code == 401

    async def test_maintenance_mode(self, client, monkeypatch):
        monkeypatch.setattr(settings, "MAINTENANCE_MODE", True)
        resp = await client.get("/api/v1/auth/me")
        assert resp.status_code == 503
        assert resp.json()["success"] is False

        health = await client.get("/api/v1/health")
        assert health.status_code == 200
        assert health.json()["maintenance"] is True
