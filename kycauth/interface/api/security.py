"""Request gatekeeper dependencies.

Routes declare what they need:

    current: AuthenticatedUser = Depends(require_user)
    current: AuthenticatedUser | None = Depends(optional_user)
    _: None = Depends(enforce_rate_limit)
"""

from collections.abc import Awaitable, Callable

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from kycauth.application.usecase.auth import (
    AuthenticatedUser,
    AuthenticateRequestUseCase,
)
from kycauth.application.usecase.auth.authenticate_request import (
    AuthenticateRequestRequest,
)
from kycauth.config import Settings
from kycauth.domain.error import PermissionDeniedError
from kycauth.domain.service import RateLimiter

bearer_scheme = HTTPBearer(auto_error=False)


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str | None:
    return credentials.credentials if credentials else None


@inject
async def require_user(
    authenticate: FromDishka[AuthenticateRequestUseCase],
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthenticatedUser:
    """Authenticated, active and unlocked user, or an error response.

    Raises:
        AuthenticationRequiredError: No bearer token (401 TOKEN_MISSING)
        TokenExpiredError: Expired access token (401 TOKEN_EXPIRED)
        TokenInvalidError: Bad token or unknown user (401 INVALID_TOKEN)
        AccountInactiveError: Deactivated account (401)
        AccountLockedError: Locked account (423)
    """
    return await authenticate.execute(
        AuthenticateRequestRequest(token=_bearer_token(credentials))
    )


@inject
async def optional_user(
    authenticate: FromDishka[AuthenticateRequestUseCase],
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthenticatedUser | None:
    """Like ``require_user`` but an anonymous request passes with None."""
    return await authenticate.try_execute(
        AuthenticateRequestRequest(token=_bearer_token(credentials))
    )


async def require_verified_email(
    current: AuthenticatedUser = Depends(require_user),
) -> AuthenticatedUser:
    if not current.user.is_email_verified:
        raise PermissionDeniedError(
            "Email verification required", code="EMAIL_NOT_VERIFIED"
        )
    return current


def require_ownership(
    param: str = "user_id",
) -> Callable[..., Awaitable[AuthenticatedUser]]:
    """Dependency that admits only the user named by the ``param`` path parameter."""

    async def dependency(
        request: Request, current: AuthenticatedUser = Depends(require_user)
    ) -> AuthenticatedUser:
        owner = request.path_params.get(param)
        if owner is None or owner != str(current.user.id):
            raise PermissionDeniedError(
                "Access denied: you can only access your own resources"
            )
        return current

    return dependency


@inject
async def enforce_rate_limit(request: Request, limiter: FromDishka[RateLimiter]) -> None:
    """Count this attempt against ``(client address, route path)``.

    Raises:
        RateLimitedError: Budget exhausted for the window (429)
    """
    await limiter.check(client_address(request), request.url.path)


def set_refresh_cookie(response: Response, token: str, settings: Settings) -> None:
    """Attach the refresh token as an HTTP-only, same-site strict cookie."""
    response.set_cookie(
        key=settings.auth.refresh_cookie_name,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
        max_age=settings.auth.refresh_token_expiry_days * 24 * 60 * 60,
    )


def clear_refresh_cookie(response: Response, settings: Settings) -> None:
    # Same attributes as when it was set
    response.delete_cookie(
        key=settings.auth.refresh_cookie_name,
        path="/",
        secure=settings.is_production,
        httponly=True,
        samesite="strict",
    )
