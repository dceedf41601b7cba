"""Shared test fixtures — async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import json
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Optional
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from optitalent.auth.models import User
from optitalent.auth.security import hash_password
from optitalent.auth.service import create_session
from optitalent.common.constants import TenantPlan, TenantStatus, UserRole
from optitalent.core_hr.models import Department, Employee
from optitalent.database import Base, get_db
from optitalent.main import create_app
from optitalent.tenants.models import Tenant

# Import ALL model modules so every table is registered on Base.metadata
import optitalent.assessments.models  # noqa: F401
import optitalent.attendance.models  # noqa: F401
import optitalent.common.audit  # noqa: F401
import optitalent.helpdesk.models  # noqa: F401
import optitalent.learning.models  # noqa: F401
import optitalent.leave.models  # noqa: F401
import optitalent.notifications.models  # noqa: F401
import optitalent.payroll.models  # noqa: F401
import optitalent.recruitment.models  # noqa: F401

# ── SQLite compat: compile PG-specific types ────────────────────────

from sqlalchemy.dialects.postgresql import INET, JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(INET, "sqlite")
def _inet_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
    )


TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)

PASSWORD = "Str0ng-Passw0rd!"


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Per-route (slowapi) counters are process-wide; start each test clean."""
    from optitalent.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app (no tenant subdomain)."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://localhost",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

async def seed_tenant(
    db: AsyncSession,
    *,
    name: str = "Acme Corp",
    slug: str = "acme",
    plan: TenantPlan = TenantPlan.startup,
) -> Tenant:
    tenant = Tenant(name=name, slug=slug, plan=plan.value, status=TenantStatus.active.value)
    db.add(tenant)
    await db.commit()
    return tenant


async def seed_user(
    db: AsyncSession,
    tenant_id: Optional[uuid.UUID],
    *,
    role: UserRole = UserRole.employee,
    email: Optional[str] = None,
    full_name: str = "Test User",
) -> User:
    user = User(
        tenant_id=tenant_id,
        email=email or f"{role.value}.{uuid.uuid4().hex[:6]}@acme.com",
        password_hash=hash_password(PASSWORD),
        full_name=full_name,
        role=role.value,
    )
    db.add(user)
    await db.commit()
    return user


async def seed_employee(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    *,
    user_id: Optional[uuid.UUID] = None,
    first_name: str = "Test",
    last_name: str = "Employee",
    manager_id: Optional[uuid.UUID] = None,
    department_id: Optional[uuid.UUID] = None,
    monthly_salary: Decimal = Decimal("50000.00"),
    is_active: bool = True,
) -> Employee:
    emp = Employee(
        tenant_id=tenant_id,
        user_id=user_id,
        employee_code=f"EMP-{uuid.uuid4().hex[:6].upper()}",
        first_name=first_name,
        last_name=last_name,
        email=f"{first_name.lower()}.{uuid.uuid4().hex[:6]}@acme.com",
        job_title="Associate",
        manager_id=manager_id,
        department_id=department_id,
        date_of_joining=date(2024, 1, 15),
        monthly_salary=monthly_salary,
        is_active=is_active,
    )
    db.add(emp)
    await db.commit()
    return emp


async def seed_department(db: AsyncSession, tenant_id: uuid.UUID, name: str = "Operations") -> Department:
    dept = Department(tenant_id=tenant_id, name=name)
    db.add(dept)
    await db.commit()
    return dept


async def auth_headers_for(db: AsyncSession, user: User) -> dict[str, str]:
    """Persist a live session for *user* and return its Bearer header."""
    access_token, _, _ = await create_session(db, user, "127.0.0.1", "pytest")
    await db.commit()
    return {"Authorization": f"Bearer {access_token}"}


@dataclass
class Actor:
    user: User
    employee: Optional[Employee]
    headers: dict[str, str]


@pytest.fixture
async def tenant(db) -> Tenant:
    return await seed_tenant(db)


@pytest.fixture
def make_actor(db, tenant):
    """Factory: user of *role* in the default tenant, linked employee, auth headers."""

    async def _make(
        role: UserRole = UserRole.employee,
        *,
        first_name: str = "Test",
        last_name: str = "Employee",
        manager: Optional[Employee] = None,
        with_employee: bool = True,
        monthly_salary: Decimal = Decimal("50000.00"),
    ) -> Actor:
        user = await seed_user(
            db, tenant.id, role=role, full_name=f"{first_name} {last_name}",
        )
        employee = None
        if with_employee:
            employee = await seed_employee(
                db,
                tenant.id,
                user_id=user.id,
                first_name=first_name,
                last_name=last_name,
                manager_id=manager.id if manager else None,
                monthly_salary=monthly_salary,
            )
        headers = await auth_headers_for(db, user)
        return Actor(user=user, employee=employee, headers=headers)

    return _make


# ── AI mocking ──────────────────────────────────────────────────────

@pytest.fixture
def mock_ai():
    """Patch the Gemini client so flows receive *reply* (dict → JSON text)."""

    def _mock(reply):
        text = reply if isinstance(reply, str) else json.dumps(reply)
        return patch(
            "optitalent.ai.client.GeminiClient.generate",
            new_callable=AsyncMock,
            return_value=text,
        )

    return _mock
