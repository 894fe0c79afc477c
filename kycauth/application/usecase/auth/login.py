"""Login use case."""

import logfire
from pydantic import BaseModel

from kycauth.application.usecase.base import check_in_thread
from kycauth.application.usecase.common import SessionResponse
from kycauth.domain.error import (
    AccountInactiveError,
    AccountLockedError,
    InvalidCredentialsError,
)
from kycauth.domain.model import User
from kycauth.domain.model.common import utc_now
from kycauth.domain.service import LockoutService, SessionService, UserService


class LoginRequest(BaseModel):
    """Email and password login request."""

    email: str
    password: str
    ip: str | None = None  # Client address, for the login audit


class LoginUseCase:
    """Use case for password login."""

    def __init__(
        self,
        user_service: UserService,
        lockout_service: LockoutService,
        session_service: SessionService,
    ) -> None:
        """Initialize login use case.

        Args:
            user_service: User domain service
            lockout_service: Lockout domain service
            session_service: Session domain service
        """
        self.user_service = user_service
        self.lockout_service = lockout_service
        self.session_service = session_service

    async def authenticate(self, email: str, password: str, ip: str | None) -> User:
        """Check credentials and apply the lockout transitions.

        Steps:
        1. Look up the user by case-folded email
        2. Refuse a locked account, whatever the password
        3. Refuse a deactivated account
        4. Verify the password; on mismatch record the failure
        5. On success reset the counter and record the login audit

        Returns:
            The user after the successful-login transition

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
            AccountLockedError: Account inside its lock window
            AccountInactiveError: Account deactivated
        """
        now = utc_now()

        user = await self.user_service.get_user_by_email(email)
        if not user:
            logfire.info("Login failed: unknown email")
            raise InvalidCredentialsError()

        if user.is_locked(now):
            logfire.info("Login refused: account locked", user_id=str(user.id))
            raise AccountLockedError(user.locked_until)

        if not user.is_active:
            logfire.info("Login refused: account inactive", user_id=str(user.id))
            raise AccountInactiveError()

        if not await check_in_thread(user, password):
            await self.lockout_service.register_failure(user, now)
            raise InvalidCredentialsError()

        return await self.lockout_service.register_success(user, now, ip)

    async def execute(self, request: LoginRequest) -> SessionResponse:
        """Execute login flow and start a session.

        Args:
            request: Login request with credentials

        Returns:
            The user and a fresh token pair
        """
        with logfire.span("login"):
            user = await self.authenticate(request.email, request.password, request.ip)
            pair = await self.session_service.start_session(user)
            logfire.info("User logged in", user_id=str(user.id))
            return SessionResponse.build(user, pair)
