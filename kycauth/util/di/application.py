"""Application layer DI providers."""

from dishka import Scope, provide

from kycauth.application.usecase.auth import (
    AuthenticateRequestUseCase,
    ChangePasswordUseCase,
    LoginUseCase,
    LogoutAllUseCase,
    LogoutUseCase,
    OAuthLoginUseCase,
    RefreshTokenUseCase,
    SignupUseCase,
)
from kycauth.application.usecase.user import (
    DeactivateAccountUseCase,
    DisconnectOAuthUseCase,
    GetPublicProfileUseCase,
    ListOAuthLinksUseCase,
    ReactivateAccountUseCase,
    UpdateProfileUseCase,
)
from kycauth.config import AuthSettings
from kycauth.domain.service import (
    AuthService,
    JWTService,
    LockoutService,
    OAuthIdentityResolver,
    RefreshTokenLedger,
    SessionService,
    UserService,
)
from kycauth.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Auth use cases
    @provide(scope=Scope.REQUEST)
    def get_signup_use_case(
        self,
        user_service: UserService,
        lockout_service: LockoutService,
        session_service: SessionService,
        auth_settings: AuthSettings,
    ) -> SignupUseCase:
        """Provide signup use case."""
        return SignupUseCase(
            user_service=user_service,
            lockout_service=lockout_service,
            session_service=session_service,
            auth_settings=auth_settings,
        )

    @provide(scope=Scope.REQUEST)
    def get_login_use_case(
        self,
        user_service: UserService,
        lockout_service: LockoutService,
        session_service: SessionService,
    ) -> LoginUseCase:
        """Provide login use case."""
        return LoginUseCase(
            user_service=user_service,
            lockout_service=lockout_service,
            session_service=session_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_refresh_token_use_case(
        self,
        jwt_service: JWTService,
        user_service: UserService,
        ledger: RefreshTokenLedger,
    ) -> RefreshTokenUseCase:
        """Provide refresh token use case."""
        return RefreshTokenUseCase(
            jwt_service=jwt_service, user_service=user_service, ledger=ledger
        )

    @provide(scope=Scope.REQUEST)
    def get_logout_use_case(self, ledger: RefreshTokenLedger) -> LogoutUseCase:
        """Provide logout use case."""
        return LogoutUseCase(ledger=ledger)

    @provide(scope=Scope.REQUEST)
    def get_logout_all_use_case(self, ledger: RefreshTokenLedger) -> LogoutAllUseCase:
        """Provide logout-all use case."""
        return LogoutAllUseCase(ledger=ledger)

    @provide(scope=Scope.REQUEST)
    def get_change_password_use_case(
        self,
        user_service: UserService,
        ledger: RefreshTokenLedger,
        auth_settings: AuthSettings,
    ) -> ChangePasswordUseCase:
        """Provide change password use case."""
        return ChangePasswordUseCase(
            user_service=user_service, ledger=ledger, auth_settings=auth_settings
        )

    @provide(scope=Scope.REQUEST)
    def get_oauth_login_use_case(
        self,
        auth_service: AuthService,
        resolver: OAuthIdentityResolver,
        session_service: SessionService,
    ) -> OAuthLoginUseCase:
        """Provide OAuth login use case."""
        return OAuthLoginUseCase(
            auth_service=auth_service,
            resolver=resolver,
            session_service=session_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_authenticate_request_use_case(
        self, jwt_service: JWTService, user_service: UserService
    ) -> AuthenticateRequestUseCase:
        """Provide request gatekeeper use case."""
        return AuthenticateRequestUseCase(
            jwt_service=jwt_service, user_service=user_service
        )

    # User use cases
    @provide(scope=Scope.REQUEST)
    def get_public_profile_use_case(
        self, user_service: UserService
    ) -> GetPublicProfileUseCase:
        """Provide get public profile use case."""
        return GetPublicProfileUseCase(user_service=user_service)

    @provide(scope=Scope.REQUEST)
    def get_update_profile_use_case(
        self, user_service: UserService
    ) -> UpdateProfileUseCase:
        """Provide update profile use case."""
        return UpdateProfileUseCase(user_service=user_service)

    @provide(scope=Scope.REQUEST)
    def get_deactivate_account_use_case(
        self, user_service: UserService, ledger: RefreshTokenLedger
    ) -> DeactivateAccountUseCase:
        """Provide deactivate account use case."""
        return DeactivateAccountUseCase(user_service=user_service, ledger=ledger)

    @provide(scope=Scope.REQUEST)
    def get_reactivate_account_use_case(
        self, user_service: UserService
    ) -> ReactivateAccountUseCase:
        """Provide reactivate account use case."""
        return ReactivateAccountUseCase(user_service=user_service)

    @provide(scope=Scope.REQUEST)
    def get_list_oauth_links_use_case(
        self, user_service: UserService
    ) -> ListOAuthLinksUseCase:
        """Provide list OAuth links use case."""
        return ListOAuthLinksUseCase(user_service=user_service)

    @provide(scope=Scope.REQUEST)
    def get_disconnect_oauth_use_case(
        self, user_service: UserService
    ) -> DisconnectOAuthUseCase:
        """Provide disconnect OAuth use case."""
        return DisconnectOAuthUseCase(user_service=user_service)
