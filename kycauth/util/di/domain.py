"""Domain layer DI providers."""

from dishka import Scope, provide

from kycauth.config import AuthSettings, RateLimitSettings
from kycauth.domain.repository import AttemptStore, UserRepository
from kycauth.domain.service import (
    AuthService,
    JWTService,
    LockoutService,
    OAuthClient,
    OAuthIdentityResolver,
    RateLimiter,
    RefreshTokenLedger,
    SessionService,
    UserService,
)
from kycauth.domain.value import OAuthProviderName
from kycauth.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_auth_service(
        self, oauth_clients: dict[OAuthProviderName, OAuthClient]
    ) -> AuthService:
        """Provide multi-provider authentication domain service.

        Args:
            oauth_clients: Dictionary mapping configured providers to their OAuth clients

        Returns:
            AuthService configured with all available OAuth clients
        """
        return AuthService(oauth_clients=oauth_clients)

    @provide
    def get_jwt_service(self, auth_settings: AuthSettings) -> JWTService:
        """Provide JWT token domain service."""
        return JWTService(auth_settings=auth_settings)

    @provide
    def get_user_service(self, user_repository: UserRepository) -> UserService:
        """Provide user domain service."""
        return UserService(user_repository=user_repository)

    @provide
    def get_lockout_service(
        self, user_repository: UserRepository, auth_settings: AuthSettings
    ) -> LockoutService:
        """Provide lockout domain service."""
        return LockoutService(
            user_repository=user_repository, auth_settings=auth_settings
        )

    @provide
    def get_refresh_token_ledger(
        self, user_repository: UserRepository, auth_settings: AuthSettings
    ) -> RefreshTokenLedger:
        """Provide refresh-token ledger."""
        return RefreshTokenLedger(
            user_repository=user_repository, auth_settings=auth_settings
        )

    @provide
    def get_session_service(
        self, jwt_service: JWTService, ledger: RefreshTokenLedger
    ) -> SessionService:
        """Provide session domain service."""
        return SessionService(jwt_service=jwt_service, ledger=ledger)

    @provide
    def get_oauth_identity_resolver(
        self, user_service: UserService
    ) -> OAuthIdentityResolver:
        """Provide OAuth identity resolver."""
        return OAuthIdentityResolver(user_service=user_service)

    @provide(scope=Scope.APP)
    def get_rate_limiter(
        self, store: AttemptStore, settings: RateLimitSettings
    ) -> RateLimiter:
        """Provide rate limiter bound to the configured attempt store."""
        return RateLimiter.from_settings(store, settings)
