"""Mock OAuth providers for testing."""

from dishka import Scope, provide

from kycauth.adapter.oauth import (
    MockFacebookOAuthClient,
    MockGitHubOAuthClient,
    MockGoogleOAuthClient,
)
from kycauth.domain.service.auth_service import OAuthClient
from kycauth.domain.value import OAuthProviderName
from kycauth.util.di.infrastructure.oauth import OAuthProvider


class MockOAuthProvider(OAuthProvider):
    """Mock OAuth provider with all three providers configured."""

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_oauth_clients(self) -> dict[OAuthProviderName, OAuthClient]:
        """Provide mock OAuth clients for every provider."""
        return {
            OAuthProviderName.GOOGLE: MockGoogleOAuthClient(),
            OAuthProviderName.FACEBOOK: MockFacebookOAuthClient(),
            OAuthProviderName.GITHUB: MockGitHubOAuthClient(),
        }
