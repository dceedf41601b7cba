"""Per-route rate limiting using slowapi.

Provides a module-level Limiter instance that routers import for
endpoint-specific limits (login, AI tools). The blanket per-IP window
lives in ``optitalent.middleware``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from optitalent.config import settings


def client_ip(request) -> str:
    """First ``X-Forwarded-For`` hop, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


# Individual routes opt in with @limiter.limit(settings.AI_RATE_LIMIT).
limiter = Limiter(
    key_func=client_ip,
    default_limits=[f"{settings.RATE_LIMIT_REQUESTS}/minute"],
)
