"""Logout use cases."""

from pydantic import BaseModel

from kycauth.domain.service import RefreshTokenLedger
from kycauth.domain.value import UserId


class LogoutRequest(BaseModel):
    """Logout request for the authenticated user."""

    user_id: UserId
    refresh_token: str | None = None  # The session's token, if the client sent it


class LogoutAllRequest(BaseModel):
    """Logout-everywhere request for the authenticated user."""

    user_id: UserId


class LogoutResponse(BaseModel):
    """Logout response."""

    message: str


class LogoutUseCase:
    """Use case for ending one session."""

    def __init__(self, ledger: RefreshTokenLedger) -> None:
        self.ledger = ledger

    async def execute(self, request: LogoutRequest) -> LogoutResponse:
        """Revoke the presented refresh token, if any.

        The access token stays valid until it expires.
        """
        if request.refresh_token:
            await self.ledger.revoke(request.user_id, request.refresh_token)
        return LogoutResponse(message="Logged out successfully")


class LogoutAllUseCase:
    """Use case for ending every session of a user."""

    def __init__(self, ledger: RefreshTokenLedger) -> None:
        self.ledger = ledger

    async def execute(self, request: LogoutAllRequest) -> LogoutResponse:
        await self.ledger.revoke_all(request.user_id)
        return LogoutResponse(message="Logged out from all devices successfully")
