"""Enums and constants for OptiTalent — values stored in VARCHAR status columns."""

from __future__ import annotations

import enum


# ── Tenants ─────────────────────────────────────────────────────────

class TenantPlan(str, enum.Enum):
    free = "Free"
    startup = "Startup"
    enterprise = "Enterprise"


class TenantStatus(str, enum.Enum):
    active = "Active"
    suspended = "Suspended"


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    super_admin = "super_admin"
    admin = "admin"
    hr = "hr"
    manager = "manager"
    team_leader = "team_leader"
    recruiter = "recruiter"
    qa_analyst = "qa_analyst"
    process_manager = "process_manager"
    trainer = "trainer"
    it_manager = "it_manager"
    operations_manager = "operations_manager"
    finance = "finance"
    employee = "employee"
    trainee = "trainee"
    guest = "guest"


# ── Employee / Core HR ──────────────────────────────────────────────

class EmploymentStatus(str, enum.Enum):
    active = "active"
    probation = "probation"
    notice_period = "notice_period"
    terminated = "terminated"


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceStatus(str, enum.Enum):
    present = "present"
    late = "late"
    absent = "absent"
    half_day = "half_day"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveType(str, enum.Enum):
    casual = "casual"
    sick = "sick"
    earned = "earned"
    unpaid = "unpaid"
    maternity = "maternity"
    paternity = "paternity"


class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"


# ── Payroll ─────────────────────────────────────────────────────────

class PayrollStatus(str, enum.Enum):
    draft = "draft"
    processed = "processed"
    paid = "paid"


# ── Helpdesk ────────────────────────────────────────────────────────

class TicketCategory(str, enum.Enum):
    it_support = "IT Support"
    hr_query = "HR Query"
    payroll_issue = "Payroll Issue"
    facilities = "Facilities"
    general_inquiry = "General Inquiry"


class TicketPriority(str, enum.Enum):
    low = "Low"
    medium = "Medium"
    high = "High"


class TicketStatus(str, enum.Enum):
    open = "open"
    in_progress = "in_progress"
    resolved = "resolved"
    closed = "closed"


# ── Recruitment ─────────────────────────────────────────────────────

class JobStatus(str, enum.Enum):
    open = "open"
    on_hold = "on_hold"
    closed = "closed"


class ApplicantStatus(str, enum.Enum):
    applied = "applied"
    screening = "screening"
    interview = "interview"
    offered = "offered"
    hired = "hired"
    rejected = "rejected"


# ── Learning ────────────────────────────────────────────────────────

class EnrollmentStatus(str, enum.Enum):
    not_started = "not_started"
    in_progress = "in_progress"
    completed = "completed"


# ── Assessments ─────────────────────────────────────────────────────

class PassingScoreType(str, enum.Enum):
    percent = "percent"
    wpm = "wpm"


class QuestionType(str, enum.Enum):
    mcq = "mcq"
    typing = "typing"
    text = "text"


# ── Notifications ───────────────────────────────────────────────────

class NotificationType(str, enum.Enum):
    info = "info"
    action_required = "action_required"
    approval = "approval"
    reminder = "reminder"
    alert = "alert"


# ── Misc constants ──────────────────────────────────────────────────

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50
