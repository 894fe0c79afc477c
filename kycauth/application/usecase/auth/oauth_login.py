"""OAuth login use case."""

import logfire
from pydantic import BaseModel

from kycauth.application.usecase.common import SessionResponse
from kycauth.domain.error import AccountInactiveError, AccountLockedError
from kycauth.domain.model.common import utc_now
from kycauth.domain.service import AuthService, OAuthIdentityResolver, SessionService
from kycauth.domain.value import OAuthProviderName


class OAuthLoginRequest(BaseModel):
    """OAuth callback parameters.

    These parameters come from the OAuth provider in the callback URL.
    """

    provider: OAuthProviderName
    code: str
    state: str


class OAuthLoginResponse(SessionResponse):
    """Session plus how the identity was resolved."""

    created: bool
    linked: bool


class OAuthLoginUseCase:
    """Use case for login through a third-party identity provider."""

    def __init__(
        self,
        auth_service: AuthService,
        resolver: OAuthIdentityResolver,
        session_service: SessionService,
    ) -> None:
        """Initialize OAuth login use case.

        Args:
            auth_service: Authentication domain service (handles all providers)
            resolver: OAuth identity resolver
            session_service: Session domain service
        """
        self.auth_service = auth_service
        self.resolver = resolver
        self.session_service = session_service

    async def execute(self, request: OAuthLoginRequest) -> OAuthLoginResponse:
        """Execute OAuth login flow.

        Steps:
        1. Complete the handshake with the provider
        2. Resolve the profile to an existing, linked or new user
        3. Refuse inactive or locked accounts
        4. Start a session

        Raises:
            OAuthProviderError: If the handshake fails
            AccountInactiveError: If the resolved account is deactivated
            AccountLockedError: If the resolved account is locked
        """
        profile = await self.auth_service.complete_login(
            request.provider, request.code, request.state
        )

        with logfire.span("oauth_login", provider=request.provider.value):
            now = utc_now()
            resolved = await self.resolver.resolve(profile, now)
            user = resolved.user

            if not user.is_active:
                raise AccountInactiveError()
            if user.is_locked(now):
                raise AccountLockedError(user.locked_until)

            pair = await self.session_service.start_session(user)
            session = SessionResponse.build(user, pair)

            logfire.info(
                "OAuth login succeeded",
                user_id=str(user.id),
                provider=request.provider.value,
                created=resolved.created,
                linked=resolved.linked,
            )
            return OAuthLoginResponse(
                **session.model_dump(), created=resolved.created, linked=resolved.linked
            )
