"""OAuth infrastructure providers for multi-provider authentication."""

from dishka import Scope, provide
import logfire

from kycauth.adapter.oauth import (
    RealFacebookOAuthClient,
    RealGitHubOAuthClient,
    RealGoogleOAuthClient,
)
from kycauth.config import Settings
from kycauth.domain.service.auth_service import OAuthClient
from kycauth.domain.value import OAuthProviderName
from kycauth.util.di.base import ProviderBase


class OAuthProvider(ProviderBase):
    """OAuth component base."""

    __mock_component__ = "oauth"


class ProdOAuthProvider(OAuthProvider):
    """Production OAuth provider with the real Google, Facebook and GitHub clients."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_oauth_clients(
        self, settings: Settings
    ) -> dict[OAuthProviderName, OAuthClient]:
        """Provide dictionary of OAuth clients by provider.

        Only providers with both a client ID and a client secret are
        included; the others are reported as unavailable.

        Args:
            settings: Application settings

        Returns:
            Dictionary mapping OAuthProviderName to OAuthClient
        """
        oauth = settings.oauth
        candidates = [
            (
                OAuthProviderName.GOOGLE,
                RealGoogleOAuthClient,
                oauth.google,
                oauth.google_callback_url,
            ),
            (
                OAuthProviderName.FACEBOOK,
                RealFacebookOAuthClient,
                oauth.facebook,
                oauth.facebook_callback_url,
            ),
            (
                OAuthProviderName.GITHUB,
                RealGitHubOAuthClient,
                oauth.github,
                oauth.github_callback_url,
            ),
        ]

        clients: dict[OAuthProviderName, OAuthClient] = {}
        for provider, client_class, credentials, callback_url in candidates:
            if not credentials.is_configured:
                continue
            clients[provider] = client_class(
                client_id=credentials.client_id,
                client_secret=credentials.client_secret,
                redirect_uri=callback_url,
                timeout=oauth.http_timeout_seconds,
            )

        logfire.info(
            "OAuth providers configured",
            providers=[p.value for p in clients],
        )
        return clients
