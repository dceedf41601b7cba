"""Common module — shared utilities for OptiTalent."""

from optitalent.common.audit import AuditTrail, TimestampMixin, create_audit_entry, utcnow
from optitalent.common.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    ApplicantStatus,
    AttendanceStatus,
    EmploymentStatus,
    EnrollmentStatus,
    JobStatus,
    LeaveStatus,
    LeaveType,
    NotificationType,
    PassingScoreType,
    PayrollStatus,
    QuestionType,
    TenantPlan,
    TenantStatus,
    TicketCategory,
    TicketPriority,
    TicketStatus,
    UserRole,
)
from optitalent.common.exceptions import (
    AIServiceError,
    AppException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
    register_exception_handlers,
)
from optitalent.common.filters import apply_filters, apply_search, apply_sorting
from optitalent.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Audit
    "AuditTrail",
    "TimestampMixin",
    "create_audit_entry",
    "utcnow",
    # Constants / Enums
    "ApplicantStatus",
    "AttendanceStatus",
    "EmploymentStatus",
    "EnrollmentStatus",
    "JobStatus",
    "LeaveStatus",
    "LeaveType",
    "NotificationType",
    "PassingScoreType",
    "PayrollStatus",
    "QuestionType",
    "TenantPlan",
    "TenantStatus",
    "TicketCategory",
    "TicketPriority",
    "TicketStatus",
    "UserRole",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AIServiceError",
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "NotFoundException",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_search",
    "apply_sorting",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
