"""GitHub OAuth client implementation."""

from typing import Optional

import httpx

from kycauth.domain.service.auth_service import OAuthClient
from kycauth.domain.value import OAuthProviderName, ProviderProfile

from .base import RealOAuthClient

GITHUB_AUTH_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_URL = "https://api.github.com/user"
GITHUB_EMAILS_URL = "https://api.github.com/user/emails"


class GitHubOAuthClient(OAuthClient):
    """Base class for GitHub OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealGitHubOAuthClient(RealOAuthClient, GitHubOAuthClient):
    """GitHub OAuth App login.

    GitHub omits the email from ``/user`` when the user keeps it private;
    the primary verified address is then read from ``/user/emails``.
    """

    provider = OAuthProviderName.GITHUB
    authorize_url = GITHUB_AUTH_URL
    token_url = GITHUB_TOKEN_URL
    scope = "user:email"

    async def _fetch_profile(
        self, client: httpx.AsyncClient, access_token: str
    ) -> ProviderProfile:
        info = await self._get_json(client, GITHUB_USER_URL, access_token)
        if not info.get("id"):
            raise self._error("Profile response did not include an id")

        email = info.get("email") or await self._primary_email(client, access_token)
        return ProviderProfile(
            provider=self.provider,
            provider_id=str(info["id"]),
            email=email,
            name=info.get("name") or info.get("login") or "",
            avatar=info.get("avatar_url"),
        )

    async def _primary_email(
        self, client: httpx.AsyncClient, access_token: str
    ) -> Optional[str]:
        emails = await self._get_json(client, GITHUB_EMAILS_URL, access_token)
        for entry in emails:
            if entry.get("primary") and entry.get("verified"):
                return entry.get("email")
        return None


class MockGitHubOAuthClient(GitHubOAuthClient):
    """Mock GitHub OAuth client for testing.

    Codes starting with ``private`` simulate a user with a hidden email.
    """

    async def initiate_authorization(self, state: str) -> str:
        return f"{GITHUB_AUTH_URL}?state={state}&mock=true"

    async def complete_authorization(self, code: str, state: str) -> ProviderProfile:
        email = None if code.startswith("private") else f"{code}@users.github.example.com"
        return ProviderProfile(
            provider=OAuthProviderName.GITHUB,
            provider_id=f"github-{code}",
            email=email,
            name="Mock GitHub User",
            avatar="https://example.com/github-avatar.png",
        )
