"""Google OAuth 2.0 client implementation."""

import httpx

from kycauth.adapter.error import OAuthProviderError
from kycauth.domain.service.auth_service import OAuthClient
from kycauth.domain.value import OAuthProviderName, ProviderProfile

from .base import RealOAuthClient

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_PROFILE_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


class GoogleOAuthClient(OAuthClient):
    """Base class for Google OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealGoogleOAuthClient(RealOAuthClient, GoogleOAuthClient):
    """Google OpenID Connect login (``openid email profile``)."""

    provider = OAuthProviderName.GOOGLE
    authorize_url = GOOGLE_AUTH_URL
    token_url = GOOGLE_TOKEN_URL
    scope = "openid email profile"

    def _authorization_params(self, state: str) -> dict[str, str]:
        params = super()._authorization_params(state)
        params["prompt"] = "select_account"
        return params

    async def _fetch_profile(
        self, client: httpx.AsyncClient, access_token: str
    ) -> ProviderProfile:
        info = await self._get_json(client, GOOGLE_PROFILE_URL, access_token)
        if not info.get("sub"):
            raise self._error("Profile response did not include a subject")

        return ProviderProfile(
            provider=self.provider,
            provider_id=str(info["sub"]),
            email=info.get("email"),
            name=info.get("name") or "",
            avatar=info.get("picture"),
        )


class MockGoogleOAuthClient(GoogleOAuthClient):
    """Mock Google OAuth client for testing.

    Returns deterministic test data without making real API calls. The
    authorization code selects the identity: ``code`` is used as the
    provider ID and ``<code>@gmail.com`` as the email. The code
    ``invalid`` simulates a rejected handshake.
    """

    async def initiate_authorization(self, state: str) -> str:
        return f"{GOOGLE_AUTH_URL}?state={state}&mock=true"

    async def complete_authorization(self, code: str, state: str) -> ProviderProfile:
        if code == "invalid":
            raise OAuthProviderError("google", "invalid_grant")
        return ProviderProfile(
            provider=OAuthProviderName.GOOGLE,
            provider_id=f"google-{code}",
            email=f"{code}@gmail.com",
            name="Mock Google User",
            avatar="https://example.com/google-avatar.png",
        )
