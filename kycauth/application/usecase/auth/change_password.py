"""Change password use case."""

import logfire
from pydantic import BaseModel

from kycauth.application.usecase.base import check_in_thread, hash_in_thread
from kycauth.application.usecase.common import StrongPassword
from kycauth.config import AuthSettings
from kycauth.domain.error import ValidationError
from kycauth.domain.service import RefreshTokenLedger, UserService
from kycauth.domain.value import UserId


class ChangePasswordRequest(BaseModel):
    """Change password request.

    ``current_password`` may be empty for an OAuth-only account setting its
    first password.
    """

    user_id: UserId
    current_password: str = ""
    new_password: StrongPassword


class ChangePasswordResponse(BaseModel):
    """Change password response."""

    message: str


class ChangePasswordUseCase:
    """Use case for changing (or setting) a password.

    Every refresh token is revoked afterwards, so all devices must log in
    again.
    """

    def __init__(
        self,
        user_service: UserService,
        ledger: RefreshTokenLedger,
        auth_settings: AuthSettings,
    ) -> None:
        self.user_service = user_service
        self.ledger = ledger
        self.auth_settings = auth_settings

    async def execute(self, request: ChangePasswordRequest) -> ChangePasswordResponse:
        """Execute change password flow.

        Raises:
            NotFoundError: If the user does not exist
            ValidationError: If the current password is incorrect
        """
        with logfire.span("change_password", user_id=str(request.user_id)):
            user = await self.user_service.get_by_id(request.user_id)

            if user.has_password and not await check_in_thread(
                user, request.current_password
            ):
                raise ValidationError("Current password is incorrect")

            hashed = await hash_in_thread(
                user, request.new_password, self.auth_settings.bcrypt_rounds
            )
            user = await self.user_service.set_password_hash(
                user.id, hashed.password_hash
            )
            await self.ledger.revoke_all(user.id)

            logfire.info("Password changed", user_id=str(user.id))
            return ChangePasswordResponse(
                message="Password changed successfully. Please login again."
            )
