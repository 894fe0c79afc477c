"""Unit tests for the httpx-based OAuth clients."""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from kycauth.adapter.error import OAuthProviderError
from kycauth.adapter.oauth import (
    RealFacebookOAuthClient,
    RealGitHubOAuthClient,
    RealGoogleOAuthClient,
)
from kycauth.adapter.oauth.facebook import FACEBOOK_PROFILE_URL, FACEBOOK_TOKEN_URL
from kycauth.adapter.oauth.github import (
    GITHUB_EMAILS_URL,
    GITHUB_TOKEN_URL,
    GITHUB_USER_URL,
)
from kycauth.adapter.oauth.google import GOOGLE_PROFILE_URL, GOOGLE_TOKEN_URL
from kycauth.domain.value import OAuthProviderName

REDIRECT_URI = "http://localhost:8000/auth/oauth/{}/callback"


def provider_transport(routes: dict[str, httpx.Response], seen: list | None = None):
    """MockTransport answering by URL (without query string)."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        if url not in routes:
            return httpx.Response(404, json={"error": "not_found"})
        return routes[url]

    return httpx.MockTransport(handler)


def make_client(cls, name: str, transport: httpx.MockTransport):
    return cls(
        client_id=f"{name}-client-id",
        client_secret=f"{name}-client-secret",
        redirect_uri=REDIRECT_URI.format(name),
        transport=transport,
    )


class TestAuthorizationUrl:
    @pytest.mark.asyncio
    async def test_google_authorization_url(self):
        client = make_client(RealGoogleOAuthClient, "google", provider_transport({}))

        url = await client.initiate_authorization("state-abc")

        params = parse_qs(urlparse(url).query)
        assert params["client_id"] == ["google-client-id"]
        assert params["redirect_uri"] == [REDIRECT_URI.format("google")]
        assert params["scope"] == ["openid email profile"]
        assert params["state"] == ["state-abc"]
        assert params["response_type"] == ["code"]

    @pytest.mark.asyncio
    async def test_unknown_state_is_rejected(self):
        client = make_client(RealGoogleOAuthClient, "google", provider_transport({}))

        with pytest.raises(OAuthProviderError):
            await client.complete_authorization("code", "never-issued")

    @pytest.mark.asyncio
    async def test_state_is_single_use(self):
        transport = provider_transport(
            {
                GOOGLE_TOKEN_URL: httpx.Response(200, json={"access_token": "at"}),
                GOOGLE_PROFILE_URL: httpx.Response(
                    200, json={"sub": "1", "email": "a@x.com", "name": "Alice"}
                ),
            }
        )
        client = make_client(RealGoogleOAuthClient, "google", transport)
        await client.initiate_authorization("state-abc")
        await client.complete_authorization("code", "state-abc")

        with pytest.raises(OAuthProviderError):
            await client.complete_authorization("code", "state-abc")


class TestGoogle:
    @pytest.mark.asyncio
    async def test_profile_mapping(self):
        # Arrange
        seen: list[httpx.Request] = []
        transport = provider_transport(
            {
                GOOGLE_TOKEN_URL: httpx.Response(200, json={"access_token": "at-1"}),
                GOOGLE_PROFILE_URL: httpx.Response(
                    200,
                    json={
                        "sub": "1089",
                        "email": "Alice@Example.com",
                        "name": "Alice Example",
                        "picture": "https://example.com/a.png",
                    },
                ),
            },
            seen,
        )
        client = make_client(RealGoogleOAuthClient, "google", transport)
        await client.initiate_authorization("s")

        # Act
        profile = await client.complete_authorization("auth-code", "s")

        # Assert
        assert profile.provider is OAuthProviderName.GOOGLE
        assert profile.provider_id == "1089"
        assert profile.email == "alice@example.com"
        assert profile.avatar == "https://example.com/a.png"

        token_request, profile_request = seen
        assert token_request.method == "POST"
        form = parse_qs(token_request.content.decode())
        assert form["code"] == ["auth-code"]
        assert form["grant_type"] == ["authorization_code"]
        assert profile_request.headers["Authorization"] == "Bearer at-1"

    @pytest.mark.asyncio
    async def test_token_exchange_failure(self):
        transport = provider_transport(
            {GOOGLE_TOKEN_URL: httpx.Response(400, json={"error": "invalid_grant"})}
        )
        client = make_client(RealGoogleOAuthClient, "google", transport)
        await client.initiate_authorization("s")

        with pytest.raises(OAuthProviderError):
            await client.complete_authorization("bad-code", "s")

    @pytest.mark.asyncio
    async def test_missing_access_token(self):
        transport = provider_transport(
            {GOOGLE_TOKEN_URL: httpx.Response(200, json={"token_type": "bearer"})}
        )
        client = make_client(RealGoogleOAuthClient, "google", transport)
        await client.initiate_authorization("s")

        with pytest.raises(OAuthProviderError):
            await client.complete_authorization("code", "s")

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        client = make_client(
            RealGoogleOAuthClient, "google", httpx.MockTransport(handler)
        )
        await client.initiate_authorization("s")

        with pytest.raises(OAuthProviderError):
            await client.complete_authorization("code", "s")


class TestFacebook:
    @pytest.mark.asyncio
    async def test_profile_mapping(self):
        seen: list[httpx.Request] = []
        transport = provider_transport(
            {
                FACEBOOK_TOKEN_URL: httpx.Response(200, json={"access_token": "fb"}),
                FACEBOOK_PROFILE_URL: httpx.Response(
                    200,
                    json={
                        "id": "10220",
                        "name": "Bob Builder",
                        "email": "bob@x.com",
                        "picture": {"data": {"url": "https://fb.example/bob.jpg"}},
                    },
                ),
            },
            seen,
        )
        client = make_client(RealFacebookOAuthClient, "facebook", transport)
        await client.initiate_authorization("s")

        profile = await client.complete_authorization("code", "s")

        assert profile.provider is OAuthProviderName.FACEBOOK
        assert profile.provider_id == "10220"
        assert profile.avatar == "https://fb.example/bob.jpg"
        assert seen[1].url.params["fields"] == "id,name,email,picture.type(large)"


class TestGitHub:
    @pytest.mark.asyncio
    async def test_public_email(self):
        transport = provider_transport(
            {
                GITHUB_TOKEN_URL: httpx.Response(200, json={"access_token": "gh"}),
                GITHUB_USER_URL: httpx.Response(
                    200,
                    json={
                        "id": 583231,
                        "login": "octocat",
                        "name": None,
                        "email": "octo@x.com",
                        "avatar_url": "https://github.example/octo.png",
                    },
                ),
            }
        )
        client = make_client(RealGitHubOAuthClient, "github", transport)
        await client.initiate_authorization("s")

        profile = await client.complete_authorization("code", "s")

        assert profile.provider_id == "583231"
        assert profile.name == "octocat"
        assert profile.email == "octo@x.com"

    @pytest.mark.asyncio
    async def test_private_email_falls_back_to_primary_verified(self):
        transport = provider_transport(
            {
                GITHUB_TOKEN_URL: httpx.Response(200, json={"access_token": "gh"}),
                GITHUB_USER_URL: httpx.Response(
                    200, json={"id": 1, "login": "octocat", "email": None}
                ),
                GITHUB_EMAILS_URL: httpx.Response(
                    200,
                    json=[
                        {"email": "old@x.com", "primary": False, "verified": True},
                        {"email": "main@x.com", "primary": True, "verified": True},
                    ],
                ),
            }
        )
        client = make_client(RealGitHubOAuthClient, "github", transport)
        await client.initiate_authorization("s")

        profile = await client.complete_authorization("code", "s")

        assert profile.email == "main@x.com"

    @pytest.mark.asyncio
    async def test_no_verified_email(self):
        transport = provider_transport(
            {
                GITHUB_TOKEN_URL: httpx.Response(200, json={"access_token": "gh"}),
                GITHUB_USER_URL: httpx.Response(
                    200, json={"id": 1, "login": "octocat", "email": None}
                ),
                GITHUB_EMAILS_URL: httpx.Response(
                    200,
                    json=[{"email": "main@x.com", "primary": True, "verified": False}],
                ),
            }
        )
        client = make_client(RealGitHubOAuthClient, "github", transport)
        await client.initiate_authorization("s")

        profile = await client.complete_authorization("code", "s")

        assert profile.email is None
