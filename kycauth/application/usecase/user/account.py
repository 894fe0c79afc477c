"""Account deactivation and reactivation use cases."""

import logfire
from pydantic import BaseModel

from kycauth.application.usecase.base import check_in_thread
from kycauth.domain.error import InvalidCredentialsError, NotFoundError
from kycauth.domain.service import RefreshTokenLedger, UserService
from kycauth.domain.value import UserId


class DeactivateAccountRequest(BaseModel):
    """Deactivate account request."""

    user_id: UserId


class ReactivateAccountRequest(BaseModel):
    """Reactivate account request (public, proves ownership by password)."""

    email: str
    password: str


class AccountStatusResponse(BaseModel):
    """Account status change response."""

    message: str


class DeactivateAccountUseCase:
    """Use case for deactivating an account.

    Accounts are never deleted. A deactivated account cannot log in or
    refresh, and all of its refresh tokens are revoked.
    """

    def __init__(self, user_service: UserService, ledger: RefreshTokenLedger) -> None:
        self.user_service = user_service
        self.ledger = ledger

    async def execute(self, request: DeactivateAccountRequest) -> AccountStatusResponse:
        with logfire.span("deactivate_account", user_id=str(request.user_id)):
            user = await self.user_service.set_active(request.user_id, False)
            await self.ledger.revoke_all(user.id)
            logfire.info("Account deactivated", user_id=str(user.id))
            return AccountStatusResponse(message="Account deactivated successfully")


class ReactivateAccountUseCase:
    """Use case for reactivating a deactivated password account."""

    def __init__(self, user_service: UserService) -> None:
        self.user_service = user_service

    async def execute(self, request: ReactivateAccountRequest) -> AccountStatusResponse:
        """Execute reactivation.

        Raises:
            NotFoundError: If no deactivated account has this email
            InvalidCredentialsError: If the password does not match
        """
        with logfire.span("reactivate_account"):
            user = await self.user_service.get_user_by_email(request.email)
            if not user or user.is_active:
                raise NotFoundError("Deactivated account", request.email)

            if not await check_in_thread(user, request.password):
                raise InvalidCredentialsError()

            await self.user_service.set_active(user.id, True)
            logfire.info("Account reactivated", user_id=str(user.id))
            return AccountStatusResponse(message="Account reactivated successfully")
