"""Authentication routes."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends, Request, Response, status

from kycauth.application.usecase.auth import (
    AuthenticatedUser,
    ChangePasswordUseCase,
    LoginUseCase,
    LogoutAllUseCase,
    LogoutUseCase,
    RefreshTokenUseCase,
    SignupUseCase,
)
from kycauth.application.usecase.auth.change_password import ChangePasswordRequest
from kycauth.application.usecase.auth.login import LoginRequest
from kycauth.application.usecase.auth.logout import LogoutAllRequest, LogoutRequest
from kycauth.application.usecase.auth.refresh_token import RefreshTokenRequest
from kycauth.application.usecase.auth.signup import SignupRequest
from kycauth.application.usecase.common import SessionResponse, UserView
from kycauth.config import Settings
from kycauth.interface.api.schemas import (
    ChangePasswordBody,
    Envelope,
    LoginBody,
    RefreshBody,
    SessionData,
    SignupBody,
    TokenData,
    UserData,
    UserOut,
)
from kycauth.interface.api.security import (
    clear_refresh_cookie,
    client_address,
    enforce_rate_limit,
    require_user,
    set_refresh_cookie,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"], route_class=DishkaRoute)


def _session_envelope(
    session: SessionResponse, response: Response, settings: Settings, message: str
) -> Envelope[SessionData]:
    # The refresh token only travels in the cookie
    set_refresh_cookie(response, session.refresh_token, settings)
    return Envelope(message=message, data=SessionData.model_validate(session))


def _presented_refresh_token(
    request: Request, body: RefreshBody | None, settings: Settings
) -> str | None:
    """Refresh token from the cookie, falling back to the JSON body."""
    cookie = request.cookies.get(settings.auth.refresh_cookie_name)
    if cookie:
        return cookie
    return body.refresh_token if body else None


@router.post(
    "/signup",
    response_model=Envelope[SessionData],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_rate_limit)],
)
async def signup(
    body: SignupBody,
    request: Request,
    response: Response,
    signup_use_case: FromDishka[SignupUseCase],
    settings: FromDishka[Settings],
) -> Envelope[SessionData]:
    """Register a password account and start a session.

    Example:
        POST /auth/signup
        {
            "name": "Jane Doe",
            "email": "jane@x.com",
            "password": "Passw0rd",
            "dateOfBirth": "1990-04-01"
        }

        Response (201, Set-Cookie: refreshToken=...):
        {
            "success": true,
            "message": "User registered successfully",
            "data": {"user": {...}, "accessToken": "...", "tokenType": "Bearer", "expiresIn": 900}
        }
    """
    session = await signup_use_case.execute(
        SignupRequest(
            name=body.name,
            email=body.email,
            password=body.password,
            date_of_birth=body.date_of_birth,
            ip=client_address(request),
        )
    )
    return _session_envelope(session, response, settings, "User registered successfully")


@router.post(
    "/login",
    response_model=Envelope[SessionData],
    dependencies=[Depends(enforce_rate_limit)],
)
async def login(
    body: LoginBody,
    request: Request,
    response: Response,
    login_use_case: FromDishka[LoginUseCase],
    settings: FromDishka[Settings],
) -> Envelope[SessionData]:
    """Authenticate with email and password.

    Unknown email and wrong password both answer 401 INVALID_CREDENTIALS.
    A locked account answers 423 with ``lockedUntil``.
    """
    session = await login_use_case.execute(
        LoginRequest(
            email=body.email, password=body.password, ip=client_address(request)
        )
    )
    return _session_envelope(session, response, settings, "Login successful")


@router.post("/refresh", response_model=Envelope[TokenData])
async def refresh(
    request: Request,
    response: Response,
    refresh_use_case: FromDishka[RefreshTokenUseCase],
    settings: FromDishka[Settings],
    body: RefreshBody | None = None,
) -> Envelope[TokenData]:
    """Exchange a refresh token for a new access token.

    The presented refresh token is consumed; a rotated one is set in the
    cookie. Presenting the same token twice fails with 401 INVALID_TOKEN.
    """
    rotated = await refresh_use_case.execute(
        RefreshTokenRequest(
            refresh_token=_presented_refresh_token(request, body, settings)
        )
    )
    set_refresh_cookie(response, rotated.refresh_token, settings)
    return Envelope(
        message="Token refreshed successfully",
        data=TokenData.model_validate(rotated),
    )


@router.get("/me", response_model=Envelope[UserData])
async def me(
    current: AuthenticatedUser = Depends(require_user),
) -> Envelope[UserData]:
    """Current user."""
    user = UserOut.model_validate(UserView.from_user(current.user))
    return Envelope(data=UserData(user=user))


@router.post("/logout", response_model=Envelope[None])
async def logout(
    request: Request,
    response: Response,
    logout_use_case: FromDishka[LogoutUseCase],
    settings: FromDishka[Settings],
    body: RefreshBody | None = None,
    current: AuthenticatedUser = Depends(require_user),
) -> Envelope[None]:
    """End this session: revoke the presented refresh token and clear the cookie."""
    result = await logout_use_case.execute(
        LogoutRequest(
            user_id=current.user.id,
            refresh_token=_presented_refresh_token(request, body, settings),
        )
    )
    clear_refresh_cookie(response, settings)
    return Envelope(message=result.message)


@router.post("/logout-all", response_model=Envelope[None])
async def logout_all(
    response: Response,
    logout_all_use_case: FromDishka[LogoutAllUseCase],
    settings: FromDishka[Settings],
    current: AuthenticatedUser = Depends(require_user),
) -> Envelope[None]:
    """End every session of the current user."""
    result = await logout_all_use_case.execute(
        LogoutAllRequest(user_id=current.user.id)
    )
    clear_refresh_cookie(response, settings)
    return Envelope(message=result.message)


@router.post("/change-password", response_model=Envelope[None])
async def change_password(
    body: ChangePasswordBody,
    response: Response,
    change_password_use_case: FromDishka[ChangePasswordUseCase],
    settings: FromDishka[Settings],
    current: AuthenticatedUser = Depends(require_user),
) -> Envelope[None]:
    """Change (or, for an OAuth-only account, set) the password.

    Every refresh token is revoked, so all devices must log in again.
    """
    result = await change_password_use_case.execute(
        ChangePasswordRequest(
            user_id=current.user.id,
            current_password=body.current_password,
            new_password=body.new_password,
        )
    )
    logger.info(f"Password changed for user {current.user.id}")
    clear_refresh_cookie(response, settings)
    return Envelope(message=result.message)
