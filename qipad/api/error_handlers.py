"""Error Handlers - map every failure to the envelope the Qipad client reads.

Invariants:
    - Every error body carries a top-level "message" the client toasts as-is,
      plus error.code for branching (KYC_REQUIRED, INSUFFICIENT_CREDITS, ...)
    - 401 responses advertise the bearer scheme (WWW-Authenticate: Bearer)
    - Request validation failures are 400 and name the first offending field
      by its wire (camelCase) name; error.details lists all of them
    - Unhandled exceptions become 500 without internal details

Design Decisions:
    - 4xx QipadErrors log at WARNING, 5xx at ERROR: a KYC or credit rejection
      is a normal outcome of the community flow, not an incident
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from qipad.core.errors import ErrorCategory, ErrorSeverity, QipadError

logger = logging.getLogger(__name__)

INVALID_REQUEST = "Invalid request data"


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QipadError, handle_qipad_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


def _log_extra(request: Request, status_code: int, code: str) -> dict:
    return {
        "path": request.url.path,
        "method": request.method,
        "status_code": status_code,
        "error_code": code,
    }


async def handle_qipad_error(request: Request, exc: QipadError) -> JSONResponse:
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(exc.message, extra=_log_extra(request, exc.http_status, exc.code))
    headers = None
    if exc.http_status == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.http_status, content=exc.to_response(), headers=headers,
    )


def _field_name(loc: tuple) -> str:
    # ("body", "fundingGoal") -> "fundingGoal"; ("path", "project_id") kept whole
    parts = [str(p) for p in loc]
    if len(parts) > 1 and parts[0] == "body":
        parts = parts[1:]
    return ".".join(parts)


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    errors = exc.errors()
    details = [
        {"field": _field_name(e["loc"]), "message": e["msg"], "type": e["type"]}
        for e in errors
    ]
    message = INVALID_REQUEST
    if details:
        message = f"{INVALID_REQUEST}: {details[0]['field']} {details[0]['message'].lower()}"
    logger.warning(
        f"{INVALID_REQUEST} ({len(details)} field errors)",
        extra=_log_extra(request, 400, "VALIDATION_ERROR"),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": message,
            "error": {
                "code": "VALIDATION_ERROR",
                "message": INVALID_REQUEST,
                "category": ErrorCategory.VALIDATION.value,
                "severity": ErrorSeverity.ERROR.value,
                "details": details,
            },
        },
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__}: {exc}",
        exc_info=True,
        extra=_log_extra(request, 500, "INTERNAL_ERROR"),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "message": "Something went wrong. Please try again.",
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": ErrorCategory.INTERNAL.value,
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )
