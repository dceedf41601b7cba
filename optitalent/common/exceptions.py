"""Domain exceptions rendered as RFC 7807 ``application/problem+json``.

Services raise these; ``register_exception_handlers`` turns them into
responses. Each subclass fixes its status, slug and title at class level
and only supplies ``detail`` / ``errors`` per instance.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

BASE_ERROR_URI = "https://optitalent.com/errors"
PROBLEM_JSON = "application/problem+json"


class AppException(Exception):
    status_code: ClassVar[int] = 500
    error_type: ClassVar[str] = "internal-error"
    title: str = "Internal Error"

    def __init__(self, detail: str, errors: Optional[dict[str, list[str]]] = None) -> None:
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class NotFoundException(AppException):
    status_code = 404
    error_type = "not-found"

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        self.title = f"{entity_type} Not Found"
        super().__init__(f"{entity_type} with id '{entity_id}' does not exist.")


class ConflictError(AppException):
    """Duplicate of a tenant-unique value (employee code, email, period...)."""

    status_code = 409
    error_type = "conflict"
    title = "Conflict"

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(
            f"An entry with {field}='{value}' already exists.",
            {field: [f"'{value}' is already in use."]},
        )


class ForbiddenException(AppException):
    status_code = 403
    error_type = "forbidden"
    title = "Forbidden"

    def __init__(self, detail: str = "You do not have permission to perform this action.") -> None:
        super().__init__(detail)


class ValidationException(AppException):
    """Business-rule failure on otherwise well-formed input."""

    status_code = 422
    error_type = "validation-error"
    title = "Validation Error"

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__("One or more fields failed validation.", errors)


class AIServiceError(AppException):
    """The model call failed or its reply did not match the output schema.

    Clients always get the same generic detail; *reason* is only logged.
    """

    status_code = 502
    error_type = "ai-service-error"
    title = "AI Service Error"

    def __init__(self, flow: str, reason: str = "") -> None:
        self.flow = flow
        self.reason = reason
        super().__init__("The AI service failed to produce a valid response.")


# ── Handlers ────────────────────────────────────────────────────────

def _problem(
    request: Request,
    status: int,
    error_type: str,
    title: str,
    detail: str,
    errors: Optional[dict[str, Any]] = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{error_type}",
        "title": title,
        "status": status,
        "detail": detail,
        "instance": request.url.path,
    }
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status, content=body, media_type=PROBLEM_JSON)


async def _handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
    if isinstance(exc, AIServiceError):
        logger.warning("AI flow %s failed: %s", exc.flow, exc.reason)
    return _problem(request, exc.status_code, exc.error_type, exc.title, exc.detail, exc.errors)


def _field_name(loc: tuple) -> str:
    # ("body", "sections", 0, "title") -> "sections.0.title"
    if len(loc) > 1:
        return ".".join(str(part) for part in loc[1:])
    return str(loc[0]) if loc else "unknown"


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        errors.setdefault(_field_name(tuple(err.get("loc", ()))), []).append(
            err.get("msg", "Invalid value")
        )
    return _problem(
        request, 422, "validation-error", "Validation Error", "Request validation failed.", errors,
    )


async def _handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _problem(
        request, 500, "database-error", "Database Error", "The request could not be completed.",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, _handle_app_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _handle_database_error)  # type: ignore[arg-type]
