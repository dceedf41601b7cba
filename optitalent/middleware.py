"""Request-entry middleware: per-IP fixed window, maintenance mode,
security headers and subdomain tenant tagging.

The window counters live in process memory and are lost on restart; a
shared store can be plugged in through ``WindowStore``. Clients are keyed
by ``client_ip``, which trusts the first ``X-Forwarded-For`` hop, so the
app must sit behind a proxy that overwrites that header.
"""

from __future__ import annotations

import ipaddress
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from optitalent.common.rate_limit import client_ip
from optitalent.config import settings

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Frame-Options": "SAMEORIGIN",
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains; preload",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "origin-when-cross-origin",
}

TOO_MANY_REQUESTS = {"success": False, "message": "Too many requests. Please try again later."}
UNDER_MAINTENANCE = {
    "success": False,
    "message": "The service is undergoing maintenance. Please try again later.",
}

_NON_TENANT_LABELS = {"www", "localhost"}


# ═════════════════════════════════════════════════════════════════════
# Fixed-window limiter
# ═════════════════════════════════════════════════════════════════════


@dataclass
class Window:
    count: int
    started_at: float


class WindowStore(Protocol):
    def get(self, key: str) -> Optional[Window]: ...

    def put(self, key: str, window: Window) -> None: ...

    def evict(self, cutoff: float) -> None: ...

    def clear(self) -> None: ...


class InMemoryWindowStore:
    """``ip -> Window`` map for a single process."""

    def __init__(self) -> None:
        self._windows: dict[str, Window] = {}

    def get(self, key: str) -> Optional[Window]:
        return self._windows.get(key)

    def put(self, key: str, window: Window) -> None:
        self._windows[key] = window

    def evict(self, cutoff: float) -> None:
        """Drop windows opened before *cutoff*."""
        for key in [k for k, w in self._windows.items() if w.started_at < cutoff]:
            del self._windows[key]

    def clear(self) -> None:
        self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)


class FixedWindowRateLimiter:
    """Allow ``limit`` hits per key per ``window_seconds``.

    A window elapses once strictly more than ``window_seconds`` have passed
    since it opened; the hit that opens a new window counts as the first.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        store: Optional[WindowStore] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self.store = store if store is not None else InMemoryWindowStore()
        self.clock = clock
        self._evicted_at = clock()

    def hit(self, key: str) -> bool:
        """Count one request for *key*; False once the window's limit is exceeded."""
        now = self.clock()
        # Sweep expired windows at most once per window length
        if now - self._evicted_at > self.window_seconds:
            self.store.evict(now - self.window_seconds)
            self._evicted_at = now
        window = self.store.get(key)
        if window is None or now - window.started_at > self.window_seconds:
            window = Window(count=1, started_at=now)
        else:
            window.count += 1
        self.store.put(key, window)
        return window.count <= self.limit

    def reset(self) -> None:
        self.store.clear()


# ═════════════════════════════════════════════════════════════════════
# Middleware
# ═════════════════════════════════════════════════════════════════════


def tenant_slug_from_host(host: str) -> Optional[str]:
    """First DNS label of *host* unless it is ``www``, ``localhost`` or an IP."""
    hostname = host.strip().lower()
    if hostname.startswith("["):
        return None
    hostname = hostname.split(":")[0]
    if not hostname:
        return None
    try:
        ipaddress.ip_address(hostname)
        return None
    except ValueError:
        pass
    label = hostname.split(".")[0]
    if not label or label in _NON_TENANT_LABELS:
        return None
    return label


class RequestEntryMiddleware(BaseHTTPMiddleware):
    """Applied to every request before routing."""

    def __init__(
        self,
        app,
        limiter: Optional[FixedWindowRateLimiter] = None,
        exempt_paths: Optional[list[str]] = None,
    ) -> None:
        super().__init__(app)
        self.limiter = limiter or FixedWindowRateLimiter(
            settings.RATE_LIMIT_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS,
        )
        self.exempt_paths = tuple(
            exempt_paths if exempt_paths is not None else settings.rate_limit_exempt_paths
        )

    def _is_exempt(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.exempt_paths)

    async def dispatch(self, request: Request, call_next) -> Response:
        slug = tenant_slug_from_host(request.headers.get("host", ""))
        request.state.tenant_slug = slug
        exempt = self._is_exempt(request.url.path)

        if not exempt:
            ip = client_ip(request) or "127.0.0.1"
            if not self.limiter.hit(ip):
                logger.warning("Rate limit exceeded for %s on %s", ip, request.url.path)
                response: Response = JSONResponse(TOO_MANY_REQUESTS, status_code=429)
                return self._decorate(response, slug)
            if settings.MAINTENANCE_MODE:
                response = JSONResponse(UNDER_MAINTENANCE, status_code=503)
                return self._decorate(response, slug)

        response = await call_next(request)
        return self._decorate(response, slug)

    @staticmethod
    def _decorate(response: Response, slug: Optional[str]) -> Response:
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        if slug:
            response.headers["x-tenant-id"] = slug
        return response
