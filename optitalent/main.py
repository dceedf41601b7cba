"""OptiTalent — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from optitalent.ai.router import router as ai_router
from optitalent.assessments.router import router as assessments_router
from optitalent.attendance.router import router as attendance_router
from optitalent.auth.router import router as auth_router
from optitalent.common.exceptions import register_exception_handlers
from optitalent.common.rate_limit import limiter
from optitalent.config import settings
from optitalent.core_hr.router import (
    departments_router,
    employees_router,
    roles_router,
)
from optitalent.dashboard.router import router as dashboard_router
from optitalent.database import engine
from optitalent.helpdesk.router import router as helpdesk_router
from optitalent.learning.router import router as learning_router
from optitalent.leave.router import router as leave_router
from optitalent.logging_config import configure_logging
from optitalent.middleware import FixedWindowRateLimiter, RequestEntryMiddleware
from optitalent.notifications.router import router as notifications_router
from optitalent.payroll.router import router as payroll_router
from optitalent.recruitment.router import router as recruitment_router
from optitalent.tenants.router import router as tenants_router

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("OptiTalent %s starting (%s)", VERSION, settings.ENVIRONMENT)
    if settings.MAINTENANCE_MODE:
        logger.warning("Maintenance mode is ON; non-exempt requests get 503")
    yield
    await engine.dispose()
    logger.info("OptiTalent stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="OptiTalent",
        description="Multi-tenant HRMS with AI-assisted HR workflows",
        version=VERSION,
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Per-route limits (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request entry: added last so it runs first
    app.state.entry_limiter = FixedWindowRateLimiter(
        settings.RATE_LIMIT_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    app.add_middleware(RequestEntryMiddleware, limiter=app.state.entry_limiter)

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": VERSION,
            "environment": settings.ENVIRONMENT,
            "maintenance": settings.MAINTENANCE_MODE,
        }

    # Register routers
    app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(tenants_router, prefix="/api/v1/tenants", tags=["tenants"])
    app.include_router(employees_router, prefix="/api/v1/employees", tags=["employees"])
    app.include_router(departments_router, prefix="/api/v1/departments", tags=["departments"])
    app.include_router(roles_router, prefix="/api/v1/roles", tags=["roles"])
    app.include_router(attendance_router, prefix="/api/v1/attendance", tags=["attendance"])
    app.include_router(leave_router, prefix="/api/v1/leave", tags=["leave"])
    app.include_router(payroll_router, prefix="/api/v1/payroll", tags=["payroll"])
    app.include_router(helpdesk_router, prefix="/api/v1/helpdesk", tags=["helpdesk"])
    app.include_router(recruitment_router, prefix="/api/v1/recruitment", tags=["recruitment"])
    app.include_router(learning_router, prefix="/api/v1/learning", tags=["learning"])
    app.include_router(assessments_router, prefix="/api/v1/assessments", tags=["assessments"])
    app.include_router(notifications_router, prefix="/api/v1/notifications", tags=["notifications"])
    app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["dashboard"])
    app.include_router(ai_router, prefix="/api/v1/ai", tags=["ai"])

    return app


app = create_app()
