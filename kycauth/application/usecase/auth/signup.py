"""Signup use case."""

from datetime import date
from uuid import uuid4

import logfire
from pydantic import BaseModel

from kycauth.application.usecase.base import BaseUseCase, hash_in_thread
from kycauth.application.usecase.common import SessionResponse, StrongPassword
from kycauth.config import AuthSettings
from kycauth.domain.error import DuplicateEmailError
from kycauth.domain.model import User
from kycauth.domain.model.common import utc_now
from kycauth.domain.service import LockoutService, SessionService, UserService
from kycauth.domain.value import Email, UserId


class SignupRequest(BaseModel):
    """Signup request."""

    name: str
    email: Email
    password: StrongPassword
    date_of_birth: date | None = None
    ip: str | None = None  # Client address, for the login audit


class SignupUseCase(BaseUseCase):
    """Use case for registering a password account."""

    def __init__(
        self,
        user_service: UserService,
        lockout_service: LockoutService,
        session_service: SessionService,
        auth_settings: AuthSettings,
    ) -> None:
        """Initialize signup use case.

        Args:
            user_service: User domain service
            lockout_service: Lockout domain service (records the login audit)
            session_service: Session domain service
            auth_settings: Authentication settings (bcrypt cost)
        """
        self.user_service = user_service
        self.lockout_service = lockout_service
        self.session_service = session_service
        self.auth_settings = auth_settings

    async def execute(self, request: SignupRequest) -> SessionResponse:
        """Execute signup flow.

        Steps:
        1. Refuse an email that is already registered
        2. Build the user and hash the password off the event loop
        3. Insert the user (the store enforces email uniqueness)
        4. Record the login audit and start a session

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        with logfire.span("signup"):
            if await self.user_service.get_user_by_email(request.email.root):
                raise DuplicateEmailError(request.email.root)

            now = utc_now()
            user = User(
                id=UserId(uuid4()),
                name=request.name,
                email=request.email,
                date_of_birth=request.date_of_birth,
                created_at=now,
                updated_at=now,
            )
            user = await hash_in_thread(
                user, request.password, self.auth_settings.bcrypt_rounds
            )
            user = await self.user_service.create(user)

            user = await self.lockout_service.register_success(user, now, request.ip)
            pair = await self.session_service.start_session(user)

            logfire.info("User signed up", user_id=str(user.id))
            return SessionResponse.build(user, pair)
