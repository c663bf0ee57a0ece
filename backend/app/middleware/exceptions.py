"""Exception types and handlers behind EasyRent's error responses.

Every error leaves the API in one envelope:

    {"error": {"code": "PROPERTY_LEASED", "message": "...", "details": {...}}}

`details` is only present when there is something to add (field errors for
request validation). Wizard-core and collaborator exceptions are mapped to
HTTP statuses in WIZARD_ERROR_STATUS. A failed wizard submission is not an
exception: it is returned as a normal SubmissionResult.
"""

import logging
from typing import Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.wizard.collaborators import AuthError, NotificationError, PersistenceError, StorageError
from app.wizard.errors import DraftLockedError, StepOutOfRange, UnknownPropertyType, WizardError
from app.wizard.files import UploadRejectedError

logger = logging.getLogger(__name__)


# ── Application exceptions ──────────────────────────────────

class EasyRentException(Exception):
    """Base for errors raised on purpose by routers and services."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, error_code: str | None = None):
        self.message = message
        if error_code:
            self.error_code = error_code
        super().__init__(message)


class BusinessLogicError(EasyRentException):
    """A well-formed request that breaks a rental rule (leased property, land invite)."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "BUSINESS_LOGIC_ERROR"


class ResourceNotFoundError(EasyRentException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}")


class PermissionDeniedError(EasyRentException):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "PERMISSION_DENIED"

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message)


# Wizard-core and collaborator errors: (type, status, error_code), most specific first
WIZARD_ERROR_STATUS: list[tuple[type[Exception], int, str]] = [
    (UnknownPropertyType, status.HTTP_422_UNPROCESSABLE_ENTITY, "UNKNOWN_PROPERTY_TYPE"),
    (StepOutOfRange, status.HTTP_422_UNPROCESSABLE_ENTITY, "STEP_OUT_OF_RANGE"),
    (DraftLockedError, status.HTTP_409_CONFLICT, "DRAFT_LOCKED"),
    (WizardError, status.HTTP_409_CONFLICT, "WIZARD_STATE_ERROR"),
    (UploadRejectedError, status.HTTP_422_UNPROCESSABLE_ENTITY, "UPLOAD_REJECTED"),
    (AuthError, status.HTTP_401_UNAUTHORIZED, "NOT_AUTHENTICATED"),
    (StorageError, status.HTTP_502_BAD_GATEWAY, "STORAGE_ERROR"),
    (PersistenceError, status.HTTP_502_BAD_GATEWAY, "PERSISTENCE_ERROR"),
    (NotificationError, status.HTTP_502_BAD_GATEWAY, "NOTIFICATION_ERROR"),
]

# Substring of the driver message → (error_code, message) for constraint violations
INTEGRITY_MESSAGES: list[tuple[str, str, str]] = [
    ("temp_tenants_token", "DUPLICATE_INVITE_TOKEN", "Invite token collision, please retry"),
    ("unique", "DUPLICATE_RECORD", "A record with this value already exists"),
    ("foreign key", "UNKNOWN_REFERENCE", "A referenced property, tenant or invite does not exist"),
    ("not null", "MISSING_VALUE", "Required field is missing"),
]


# ── Response helpers ────────────────────────────────────────

def error_body(
    status_code: int,
    code: str,
    message: str,
    details: Union[dict, list, None] = None,
) -> JSONResponse:
    error: dict = {"code": code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


def _context(request: Request, **extra) -> dict:
    return {"path": request.url.path, "method": request.method, **extra}


# ── Handlers ────────────────────────────────────────────────

async def easyrent_exception_handler(request: Request, exc: EasyRentException) -> JSONResponse:
    logger.warning(
        f"{exc.error_code} on {request.url.path}: {exc.message}",
        extra=_context(request, error_code=exc.error_code),
    )
    return error_body(exc.status_code, exc.error_code, exc.message)


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code}: {exc.detail}", extra=_context(request))
    response = error_body(exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail))
    for name, value in (getattr(exc, "headers", None) or {}).items():
        response.headers[name] = value
    return response


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError],
) -> JSONResponse:
    """Request bodies: one entry per offending field, dotted through the location."""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.info(
        f"Rejected request to {request.url.path} ({len(errors)} field errors)",
        extra=_context(request),
    )
    return error_body(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Validation error",
        details={"errors": errors},
    )


async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    driver_message = str(getattr(exc, "orig", None) or exc)
    logger.error(f"Constraint violation on {request.url.path}: {driver_message}", extra=_context(request))

    lowered = driver_message.lower()
    for needle, code, message in INTEGRITY_MESSAGES:
        if needle in lowered:
            break
    else:
        code, message = "INTEGRITY_ERROR", "Database constraint violation"
    return error_body(status.HTTP_422_UNPROCESSABLE_ENTITY, code, message)


async def operational_exception_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error(f"Database unavailable on {request.url.path}: {exc}", extra=_context(request))
    return error_body(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "DATABASE_UNAVAILABLE",
        "Database temporarily unavailable. Please try again.",
    )


async def wizard_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    for exc_type, status_code, error_code in WIZARD_ERROR_STATUS:
        if isinstance(exc, exc_type):
            break
    else:
        return await general_exception_handler(request, exc)

    logger.warning(
        f"{type(exc).__name__} on {request.url.path}: {exc}",
        extra=_context(request, error_code=error_code),
    )
    return error_body(status_code, error_code, str(exc))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", extra=_context(request), exc_info=exc)
    # Internal details stay in the log
    return error_body(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred. Please try again later.",
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(EasyRentException, easyrent_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    for exc_type, _, _ in WIZARD_ERROR_STATUS:
        app.add_exception_handler(exc_type, wizard_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
