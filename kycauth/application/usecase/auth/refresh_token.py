"""Refresh token rotation use case."""

from uuid import UUID

import logfire
from pydantic import BaseModel

from kycauth.domain.error import (
    AccountInactiveError,
    AccountLockedError,
    AuthenticationRequiredError,
)
from kycauth.domain.model.common import utc_now
from kycauth.domain.service import JWTService, RefreshTokenLedger, UserService
from kycauth.domain.value import TokenKind, UserId
from kycauth.util.jwt import TokenInvalidError


class RefreshTokenRequest(BaseModel):
    """Refresh request (token from the cookie or the body)."""

    refresh_token: str | None = None


class RefreshTokenResponse(BaseModel):
    """New access token plus the rotated refresh token."""

    access_token: str
    refresh_token: str
    token_type: str
    expires_in: int


class RefreshTokenUseCase:
    """Use case for single-use refresh token rotation."""

    def __init__(
        self,
        jwt_service: JWTService,
        user_service: UserService,
        ledger: RefreshTokenLedger,
    ) -> None:
        self.jwt_service = jwt_service
        self.user_service = user_service
        self.ledger = ledger

    async def execute(self, request: RefreshTokenRequest) -> RefreshTokenResponse:
        """Execute rotation.

        Steps:
        1. Verify the refresh JWT (signature, expiry, kind)
        2. Load the user; refuse inactive or locked accounts
        3. Confirm the token is still in the ledger
        4. Atomically swap it for a new one and mint a new access token

        Raises:
            AuthenticationRequiredError: If no token was presented
            TokenExpiredError: If the refresh JWT has expired
            TokenInvalidError: If the token is invalid, unknown or already used
        """
        if not request.refresh_token:
            raise AuthenticationRequiredError("Refresh token is required")

        token = request.refresh_token
        payload = self.jwt_service.verify(token, TokenKind.REFRESH)

        with logfire.span("refresh_token", user_id=payload.user_id):
            try:
                user_id = UserId(UUID(payload.user_id))
            except ValueError:
                raise TokenInvalidError("Malformed token subject")

            user = await self.user_service.get_user_by_id(user_id)
            if not user:
                raise TokenInvalidError("User not found")

            now = utc_now()
            if not user.is_active:
                raise AccountInactiveError()
            if user.is_locked(now):
                raise AccountLockedError(user.locked_until)

            if not self.ledger.contains(user, token, now):
                logfire.warn(
                    "Refresh token not in ledger, possible replay", user_id=str(user.id)
                )
                raise TokenInvalidError("Invalid refresh token")

            pair = self.jwt_service.create_token_pair(user)
            if not await self.ledger.rotate(user.id, token, pair.refresh_token, now):
                raise TokenInvalidError("Invalid refresh token")

            return RefreshTokenResponse(
                access_token=pair.access_token,
                refresh_token=pair.refresh_token,
                token_type=pair.token_type,
                expires_in=pair.expires_in,
            )
