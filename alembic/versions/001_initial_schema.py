"""001 – Initial schema: tenants, auth, core HR and every HR module.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000+00:00
"""

from alembic import op

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# Drop order is the reverse of creation
TABLES = [
    "tenants",
    "users",
    "user_sessions",
    "audit_trail",
    "departments",
    "roles",
    "employees",
    "attendance_records",
    "leave_requests",
    "payroll_runs",
    "payroll_entries",
    "tickets",
    "ticket_messages",
    "job_openings",
    "applicants",
    "courses",
    "enrollments",
    "assessments",
    "assessment_attempts",
    "notifications",
]


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── 1. tenants ────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE tenants (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name        VARCHAR(200) NOT NULL,
            slug        VARCHAR(120) NOT NULL UNIQUE,
            plan        VARCHAR(20)  NOT NULL DEFAULT 'Free',
            status      VARCHAR(20)  NOT NULL DEFAULT 'Active',
            created_at  TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ  DEFAULT NOW()
        )
    """)

    # ── 2. users ──────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE users (
            id             UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id      UUID REFERENCES tenants(id) ON DELETE CASCADE,
            email          VARCHAR(255) NOT NULL UNIQUE,
            password_hash  VARCHAR(128),
            full_name      VARCHAR(200) NOT NULL,
            role           VARCHAR(30)  NOT NULL DEFAULT 'employee',
            is_active      BOOLEAN      NOT NULL DEFAULT TRUE,
            last_login_at  TIMESTAMPTZ,
            created_at     TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at     TIMESTAMPTZ  NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_users_tenant_id ON users(tenant_id)")

    # ── 3. user_sessions ──────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE user_sessions (
            id                  UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            user_id             UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            token_hash          VARCHAR(128) NOT NULL,
            refresh_token_hash  VARCHAR(128),
            ip_address          INET,
            user_agent          TEXT,
            expires_at          TIMESTAMPTZ NOT NULL,
            is_revoked          BOOLEAN     NOT NULL DEFAULT FALSE,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_user_sessions_token_hash ON user_sessions(token_hash)")
    op.execute("CREATE INDEX ix_user_sessions_refresh_token_hash ON user_sessions(refresh_token_hash)")

    # ── 4. audit_trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_trail (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id    UUID REFERENCES tenants(id) ON DELETE SET NULL,
            actor_id     UUID REFERENCES users(id) ON DELETE SET NULL,
            action       VARCHAR(50) NOT NULL,
            entity_type  VARCHAR(50) NOT NULL,
            entity_id    UUID        NOT NULL,
            old_values   JSONB,
            new_values   JSONB,
            ip_address   INET,
            user_agent   TEXT,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_audit_trail_actor_id   ON audit_trail(actor_id)")
    op.execute("CREATE INDEX ix_audit_trail_entity     ON audit_trail(entity_type, entity_id)")
    op.execute("CREATE INDEX ix_audit_trail_created_at ON audit_trail(created_at)")

    # ── 5. departments / roles ────────────────────────────────────────────
    op.execute("""
        CREATE TABLE departments (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id    UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            name         VARCHAR(150) NOT NULL,
            description  TEXT,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_department_tenant_name UNIQUE (tenant_id, name)
        )
    """)
    op.execute("CREATE INDEX ix_departments_tenant_id ON departments(tenant_id)")

    op.execute("""
        CREATE TABLE roles (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id    UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            name         VARCHAR(100) NOT NULL,
            description  TEXT,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_role_tenant_name UNIQUE (tenant_id, name)
        )
    """)
    op.execute("CREATE INDEX ix_roles_tenant_id ON roles(tenant_id)")

    # ── 6. employees ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE employees (
            id                 UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id          UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            user_id            UUID UNIQUE REFERENCES users(id) ON DELETE SET NULL,
            employee_code      VARCHAR(30)  NOT NULL,
            first_name         VARCHAR(100) NOT NULL,
            last_name          VARCHAR(100) NOT NULL,
            email              VARCHAR(255) NOT NULL,
            phone              VARCHAR(30),
            profile_photo_url  TEXT,
            job_title          VARCHAR(150),
            department_id      UUID REFERENCES departments(id) ON DELETE SET NULL,
            role_id            UUID REFERENCES roles(id) ON DELETE SET NULL,
            manager_id         UUID REFERENCES employees(id) ON DELETE SET NULL,
            employment_status  VARCHAR(30)   NOT NULL DEFAULT 'active',
            date_of_joining    DATE          NOT NULL,
            monthly_salary     NUMERIC(12,2) NOT NULL DEFAULT 0,
            is_active          BOOLEAN       NOT NULL DEFAULT TRUE,
            created_at         TIMESTAMPTZ   NOT NULL DEFAULT NOW(),
            updated_at         TIMESTAMPTZ   NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_employee_tenant_code  UNIQUE (tenant_id, employee_code),
            CONSTRAINT uq_employee_tenant_email UNIQUE (tenant_id, email)
        )
    """)
    op.execute("CREATE INDEX ix_employees_tenant_id ON employees(tenant_id)")
    op.execute("CREATE INDEX ix_employees_manager_id ON employees(manager_id)")

    # ── 7. attendance_records ─────────────────────────────────────────────
    op.execute("""
        CREATE TABLE attendance_records (
            id               UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id        UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            employee_id      UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            work_date        DATE        NOT NULL,
            check_in         TIMESTAMPTZ NOT NULL,
            check_out        TIMESTAMPTZ,
            status           VARCHAR(20) NOT NULL DEFAULT 'present',
            face_verified    BOOLEAN     NOT NULL DEFAULT FALSE,
            face_confidence  DOUBLE PRECISION,
            created_at       TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at       TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_attendance_emp_date UNIQUE (employee_id, work_date)
        )
    """)
    op.execute("CREATE INDEX ix_attendance_records_tenant_id ON attendance_records(tenant_id)")

    # ── 8. leave_requests ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_requests (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id         UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            employee_id       UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            leave_type        VARCHAR(20) NOT NULL,
            start_date        DATE        NOT NULL,
            end_date          DATE        NOT NULL,
            total_days        INTEGER     NOT NULL,
            reason            TEXT,
            status            VARCHAR(20) NOT NULL DEFAULT 'pending',
            reviewed_by       UUID REFERENCES users(id) ON DELETE SET NULL,
            reviewed_at       TIMESTAMPTZ,
            reviewer_remarks  TEXT,
            cancelled_at      TIMESTAMPTZ,
            created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_leave_dates CHECK (end_date >= start_date)
        )
    """)
    op.execute("CREATE INDEX ix_leave_requests_tenant_id ON leave_requests(tenant_id)")
    op.execute("""
        CREATE INDEX ix_leave_requests_employee_dates
            ON leave_requests(employee_id, start_date, end_date)
    """)

    # ── 9. payroll ────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE payroll_runs (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id         UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            period_start      DATE          NOT NULL,
            period_end        DATE          NOT NULL,
            pay_date          DATE,
            status            VARCHAR(20)   NOT NULL DEFAULT 'draft',
            employee_count    INTEGER       NOT NULL DEFAULT 0,
            total_gross       NUMERIC(14,2) NOT NULL DEFAULT 0,
            total_deductions  NUMERIC(14,2) NOT NULL DEFAULT 0,
            total_net         NUMERIC(14,2) NOT NULL DEFAULT 0,
            created_by        UUID REFERENCES users(id) ON DELETE SET NULL,
            created_at        TIMESTAMPTZ   NOT NULL DEFAULT NOW(),
            updated_at        TIMESTAMPTZ   NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_payroll_run_period UNIQUE (tenant_id, period_start, period_end)
        )
    """)
    op.execute("CREATE INDEX ix_payroll_runs_tenant_id ON payroll_runs(tenant_id)")

    op.execute("""
        CREATE TABLE payroll_entries (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            run_id       UUID NOT NULL REFERENCES payroll_runs(id) ON DELETE CASCADE,
            employee_id  UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            gross        NUMERIC(12,2) NOT NULL,
            deductions   NUMERIC(12,2) NOT NULL,
            net          NUMERIC(12,2) NOT NULL,
            CONSTRAINT uq_payroll_entry_run_emp UNIQUE (run_id, employee_id)
        )
    """)

    # ── 10. helpdesk ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE tickets (
            id             UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id      UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            ticket_number  VARCHAR(20)  NOT NULL,
            subject        VARCHAR(300) NOT NULL,
            description    TEXT         NOT NULL,
            category       VARCHAR(50)  NOT NULL,
            priority       VARCHAR(20)  NOT NULL DEFAULT 'Medium',
            status         VARCHAR(20)  NOT NULL DEFAULT 'open',
            raised_by      UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            assigned_to    UUID REFERENCES users(id) ON DELETE SET NULL,
            resolved_at    TIMESTAMPTZ,
            created_at     TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at     TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_ticket_tenant_number UNIQUE (tenant_id, ticket_number)
        )
    """)
    op.execute("CREATE INDEX ix_tickets_tenant_id ON tickets(tenant_id)")

    op.execute("""
        CREATE TABLE ticket_messages (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            ticket_id   UUID NOT NULL REFERENCES tickets(id) ON DELETE CASCADE,
            author_id   UUID REFERENCES users(id) ON DELETE SET NULL,
            body        TEXT        NOT NULL,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_ticket_messages_ticket_id ON ticket_messages(ticket_id)")

    # ── 11. recruitment ───────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE job_openings (
            id             UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id      UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            title          VARCHAR(200) NOT NULL,
            department_id  UUID REFERENCES departments(id) ON DELETE SET NULL,
            description    TEXT         NOT NULL,
            status         VARCHAR(20)  NOT NULL DEFAULT 'open',
            created_at     TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at     TIMESTAMPTZ  NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_job_openings_tenant_id ON job_openings(tenant_id)")

    op.execute("""
        CREATE TABLE applicants (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id         UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            job_id            UUID REFERENCES job_openings(id) ON DELETE SET NULL,
            full_name         VARCHAR(200) NOT NULL,
            email             VARCHAR(255) NOT NULL,
            phone             VARCHAR(30),
            status            VARCHAR(20)  NOT NULL DEFAULT 'applied',
            resume_text       TEXT,
            ai_score          DOUBLE PRECISION,
            ai_justification  TEXT,
            parsed_resume     JSONB,
            created_at        TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at        TIMESTAMPTZ  NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_applicants_tenant_id ON applicants(tenant_id)")

    # ── 12. learning ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE courses (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id       UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            title           VARCHAR(200) NOT NULL,
            description     TEXT,
            category        VARCHAR(100),
            duration_hours  DOUBLE PRECISION,
            is_mandatory    BOOLEAN     NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_courses_tenant_id ON courses(tenant_id)")

    op.execute("""
        CREATE TABLE enrollments (
            id            UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            course_id     UUID NOT NULL REFERENCES courses(id) ON DELETE CASCADE,
            employee_id   UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            progress      INTEGER     NOT NULL DEFAULT 0,
            status        VARCHAR(20) NOT NULL DEFAULT 'not_started',
            completed_at  TIMESTAMPTZ,
            created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_enrollment_course_emp UNIQUE (course_id, employee_id),
            CONSTRAINT ck_enrollment_progress CHECK (progress BETWEEN 0 AND 100)
        )
    """)
    op.execute("CREATE INDEX ix_enrollments_employee_id ON enrollments(employee_id)")

    # ── 13. assessments ───────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE assessments (
            id                  UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id           UUID NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
            title               VARCHAR(200) NOT NULL,
            process_type        VARCHAR(100),
            role                VARCHAR(100),
            passing_score       INTEGER     NOT NULL,
            passing_score_type  VARCHAR(10) NOT NULL DEFAULT 'percent',
            max_attempts        INTEGER     NOT NULL DEFAULT 1,
            duration_minutes    INTEGER,
            sections            JSONB       NOT NULL DEFAULT '[]'::jsonb,
            created_by          UUID REFERENCES users(id) ON DELETE SET NULL,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_assessments_tenant_id ON assessments(tenant_id)")

    op.execute("""
        CREATE TABLE assessment_attempts (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            assessment_id   UUID NOT NULL REFERENCES assessments(id) ON DELETE CASCADE,
            employee_id     UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            attempt_number  INTEGER NOT NULL,
            score           INTEGER,
            wpm             INTEGER,
            accuracy        INTEGER,
            passed          BOOLEAN NOT NULL DEFAULT FALSE,
            answers         JSONB,
            wpm_samples     JSONB,
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_attempt_number UNIQUE (assessment_id, employee_id, attempt_number)
        )
    """)
    op.execute("CREATE INDEX ix_assessment_attempts_assessment_id ON assessment_attempts(assessment_id)")
    op.execute("CREATE INDEX ix_assessment_attempts_employee_id ON assessment_attempts(employee_id)")

    # ── 14. notifications ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE notifications (
            id            UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            tenant_id     UUID REFERENCES tenants(id) ON DELETE CASCADE,
            recipient_id  UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            type          VARCHAR(30)  NOT NULL DEFAULT 'info',
            title         VARCHAR(200) NOT NULL,
            message       TEXT         NOT NULL,
            action_url    VARCHAR(500),
            entity_type   VARCHAR(50),
            entity_id     UUID,
            is_read       BOOLEAN      NOT NULL DEFAULT FALSE,
            read_at       TIMESTAMPTZ,
            created_at    TIMESTAMPTZ  NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX ix_notifications_recipient_unread
            ON notifications(recipient_id, is_read)
    """)


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    for table in reversed(TABLES):
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE")
