"""Facebook OAuth 2.0 client implementation."""

import httpx

from kycauth.domain.service.auth_service import OAuthClient
from kycauth.domain.value import OAuthProviderName, ProviderProfile

from .base import RealOAuthClient

FACEBOOK_GRAPH_VERSION = "v19.0"
FACEBOOK_AUTH_URL = f"https://www.facebook.com/{FACEBOOK_GRAPH_VERSION}/dialog/oauth"
FACEBOOK_TOKEN_URL = (
    f"https://graph.facebook.com/{FACEBOOK_GRAPH_VERSION}/oauth/access_token"
)
FACEBOOK_PROFILE_URL = f"https://graph.facebook.com/{FACEBOOK_GRAPH_VERSION}/me"


class FacebookOAuthClient(OAuthClient):
    """Base class for Facebook OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealFacebookOAuthClient(RealOAuthClient, FacebookOAuthClient):
    """Facebook Login via the Graph API."""

    provider = OAuthProviderName.FACEBOOK
    authorize_url = FACEBOOK_AUTH_URL
    token_url = FACEBOOK_TOKEN_URL
    scope = "email"

    async def _fetch_profile(
        self, client: httpx.AsyncClient, access_token: str
    ) -> ProviderProfile:
        info = await self._get_json(
            client,
            FACEBOOK_PROFILE_URL,
            access_token,
            params={"fields": "id,name,email,picture.type(large)"},
        )
        if not info.get("id"):
            raise self._error("Profile response did not include an id")

        picture = (info.get("picture") or {}).get("data") or {}
        return ProviderProfile(
            provider=self.provider,
            provider_id=str(info["id"]),
            email=info.get("email"),
            name=info.get("name") or "",
            avatar=picture.get("url"),
        )


class MockFacebookOAuthClient(FacebookOAuthClient):
    """Mock Facebook OAuth client for testing."""

    async def initiate_authorization(self, state: str) -> str:
        return f"{FACEBOOK_AUTH_URL}?state={state}&mock=true"

    async def complete_authorization(self, code: str, state: str) -> ProviderProfile:
        return ProviderProfile(
            provider=OAuthProviderName.FACEBOOK,
            provider_id=f"facebook-{code}",
            email=f"{code}@facebook.example.com",
            name="Mock Facebook User",
            avatar=None,
        )
