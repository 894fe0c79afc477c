"""Authenticate request use case (the core of the request gatekeeper)."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from kycauth.domain.error import (
    AccountInactiveError,
    AccountLockedError,
    AuthenticationRequiredError,
)
from kycauth.domain.model import User
from kycauth.domain.model.common import utc_now
from kycauth.domain.service import JWTService, UserService
from kycauth.domain.value import TokenKind, UserId
from kycauth.util.jwt import JWTError, TokenInvalidError


class AuthenticateRequestRequest(BaseModel):
    """Bearer token extracted from the Authorization header."""

    token: str | None = None


class AuthenticatedUser(BaseModel):
    """User and access token attached to the request context."""

    model_config = ConfigDict(frozen=True)

    user: User
    token: str


class AuthenticateRequestUseCase:
    """Verify an access token and load an active, unlocked user."""

    def __init__(self, jwt_service: JWTService, user_service: UserService) -> None:
        self.jwt_service = jwt_service
        self.user_service = user_service

    async def execute(self, request: AuthenticateRequestRequest) -> AuthenticatedUser:
        """Execute the gatekeeper checks.

        Raises:
            AuthenticationRequiredError: If no token was presented
            TokenExpiredError: If the access token has expired
            TokenInvalidError: If the token is invalid or its user is gone
            AccountInactiveError: If the account is deactivated
            AccountLockedError: If the account is locked
        """
        if not request.token:
            raise AuthenticationRequiredError()

        payload = self.jwt_service.verify(request.token, TokenKind.ACCESS)
        try:
            user_id = UserId(UUID(payload.user_id))
        except ValueError:
            raise TokenInvalidError("Malformed token subject")

        user = await self.user_service.get_user_by_id(user_id)
        if not user:
            raise TokenInvalidError("User not found")
        if not user.is_active:
            raise AccountInactiveError()
        if user.is_locked(utc_now()):
            raise AccountLockedError(user.locked_until)

        return AuthenticatedUser(user=user, token=request.token)

    async def try_execute(
        self, request: AuthenticateRequestRequest
    ) -> AuthenticatedUser | None:
        """Optional variant: the authenticated user, or None instead of an error."""
        try:
            return await self.execute(request)
        except (
            JWTError,
            AuthenticationRequiredError,
            AccountInactiveError,
            AccountLockedError,
        ):
            return None
