#!/usr/bin/env python3
"""Seed the demo tenants and, optionally, a platform super-admin.

Tenants (slug → plan):
  - optitalent  OptiTalent HQ  Enterprise
  - acme        Acme Corp      Startup
  - globex      Globex Inc     Free

Existing slugs and emails are left untouched, so the script can be re-run.

Usage:
    python scripts/seed_tenants.py
    python scripts/seed_tenants.py --super-admin root@optitalent.com
    python scripts/seed_tenants.py --super-admin root@optitalent.com --password 's3cret!'

Requires DATABASE_URL and JWT_SECRET in the environment or .env
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

# ── Path setup ────────────────────────────────────────────────────────
SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import select

from optitalent.auth.models import User
from optitalent.auth.security import generate_temporary_password, hash_password
from optitalent.common.constants import TenantPlan, TenantStatus, UserRole
from optitalent.database import engine, session_scope
from optitalent.logging_config import configure_logging
from optitalent.tenants.models import Tenant

logger = logging.getLogger("seed_tenants")

DEMO_TENANTS: list[tuple[str, str, TenantPlan]] = [
    ("OptiTalent HQ", "optitalent", TenantPlan.enterprise),
    ("Acme Corp", "acme", TenantPlan.startup),
    ("Globex Inc", "globex", TenantPlan.free),
]


async def seed(super_admin_email: Optional[str], password: Optional[str]) -> int:
    created = 0
    async with session_scope() as session:
        for name, slug, plan in DEMO_TENANTS:
            exists = await session.scalar(select(Tenant.id).where(Tenant.slug == slug))
            if exists:
                logger.info("Tenant %s already present, skipping", slug)
                continue
            session.add(
                Tenant(name=name, slug=slug, plan=plan.value, status=TenantStatus.active.value)
            )
            created += 1
            logger.info("Tenant %s (%s) created", slug, plan.value)

        if super_admin_email:
            email = super_admin_email.lower()
            exists = await session.scalar(select(User.id).where(User.email == email))
            if exists:
                logger.info("User %s already present, skipping", email)
            else:
                secret = password or generate_temporary_password()
                session.add(
                    User(
                        tenant_id=None,
                        email=email,
                        password_hash=hash_password(secret),
                        full_name="Platform Admin",
                        role=UserRole.super_admin.value,
                    )
                )
                logger.info("Super-admin %s created", email)
                if not password:
                    print(f"Temporary password for {email}: {secret}")

    await engine.dispose()
    return created


def main():
    parser = argparse.ArgumentParser(
        description="Seed OptiTalent demo tenants",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--super-admin", metavar="EMAIL", help="also create a super-admin account")
    parser.add_argument("--password", help="password for the super-admin (random if omitted)")
    args = parser.parse_args()

    configure_logging("info")
    created = asyncio.run(seed(args.super_admin, args.password))
    logger.info("Done: %d tenant(s) created", created)


if __name__ == "__main__":
    main()
