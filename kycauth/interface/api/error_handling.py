"""Exception handlers mapping the error taxonomy to HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import pydantic
from starlette.exceptions import HTTPException

from kycauth.domain.error import (
    AccountInactiveError,
    AccountLockedError,
    AuthenticationRequiredError,
    DomainError,
    DuplicateEmailError,
    InvalidCredentialsError,
    LastAuthMethodError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitedError,
    ValidationError,
)
from kycauth.util.jwt import JWTError, TokenExpiredError, TokenInvalidError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"

# Checked in order; subclasses first
_DOMAIN_ERRORS: list[tuple[type[Exception], int, str]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR"),
    (LastAuthMethodError, status.HTTP_400_BAD_REQUEST, "LAST_AUTH_METHOD"),
    (InvalidCredentialsError, status.HTTP_401_UNAUTHORIZED, "INVALID_CREDENTIALS"),
    (AccountInactiveError, status.HTTP_401_UNAUTHORIZED, "ACCOUNT_INACTIVE"),
    (AuthenticationRequiredError, status.HTTP_401_UNAUTHORIZED, "TOKEN_MISSING"),
    (TokenExpiredError, status.HTTP_401_UNAUTHORIZED, "TOKEN_EXPIRED"),
    (TokenInvalidError, status.HTTP_401_UNAUTHORIZED, "INVALID_TOKEN"),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN, "FORBIDDEN"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "NOT_FOUND"),
    (DuplicateEmailError, status.HTTP_409_CONFLICT, "DUPLICATE_EMAIL"),
    (AccountLockedError, status.HTTP_423_LOCKED, "ACCOUNT_LOCKED"),
    (RateLimitedError, status.HTTP_429_TOO_MANY_REQUESTS, "RATE_LIMITED"),
]


def error_response(
    status_code: int,
    message: str,
    code: str,
    headers: dict[str, str] | None = None,
    **extra,
) -> JSONResponse:
    """Build the ``{"success": false, "message", "code", ...}`` error body."""
    content = {"success": False, "message": message, "code": code, **extra}
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def classify(exc: Exception) -> tuple[int, str] | None:
    """Status and code for a known error, or None for anything unexpected."""
    for error_type, status_code, code in _DOMAIN_ERRORS:
        if isinstance(exc, error_type):
            return status_code, code
    return None


def _field_errors(errors: list[dict]) -> list[dict[str, str]]:
    """Flatten pydantic errors to ``{field, message}`` pairs."""
    result = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        message = error.get("msg", "Invalid value")
        # Messages from field validators carry a "Value error, " prefix
        message = message.removeprefix("Value error, ")
        result.append({"field": ".".join(loc), "message": message})
    return result


def _known_error_response(request: Request, exc: Exception) -> JSONResponse:
    classified = classify(exc)
    if classified is None:
        return _internal_error_response(request, exc)

    status_code, code = classified
    logger.info(
        f"{request.method} {request.url.path} rejected: {code} ({type(exc).__name__})"
    )

    extra: dict = {}
    headers = None
    if isinstance(exc, AccountLockedError):
        extra["lockedUntil"] = exc.locked_until.isoformat()
    elif isinstance(exc, RateLimitedError):
        extra["retryAfter"] = exc.retry_after
        headers = {"Retry-After": str(exc.retry_after)}
    elif isinstance(exc, PermissionDeniedError):
        code = exc.code

    return error_response(status_code, str(exc), code, headers=headers, **extra)


def _internal_error_response(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"{request.method} {request.url.path} failed: {type(exc).__name__}",
        exc_info=exc,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE, "INTERNAL_ERROR"
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for domain, token, validation and unexpected errors."""

    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError):
        return _known_error_response(request, exc)

    @app.exception_handler(JWTError)
    async def handle_jwt_error(request: Request, exc: JWTError):
        return _known_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ):
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Validation failed",
            "VALIDATION_ERROR",
            errors=_field_errors(list(exc.errors())),
        )

    @app.exception_handler(pydantic.ValidationError)
    async def handle_model_validation_error(
        request: Request, exc: pydantic.ValidationError
    ):
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Validation failed",
            "VALIDATION_ERROR",
            errors=_field_errors(exc.errors()),
        )

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException):
        code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
        return error_response(
            exc.status_code, str(exc.detail), code, headers=exc.headers
        )

    @app.exception_handler(Exception)
    async def handle_uncaught(request: Request, exc: Exception):
        return _internal_error_response(request, exc)
