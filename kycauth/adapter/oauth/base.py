"""Shared authorization-code flow for OAuth 2.0 providers.

Each provider client builds its consent URL, exchanges the callback code
for an access token and maps the provider's user document onto a
``ProviderProfile``.
"""

from typing import Any
from urllib.parse import urlencode

import httpx
import logfire

from kycauth.adapter.error import OAuthProviderError
from kycauth.domain.service.auth_service import OAuthClient
from kycauth.domain.value import OAuthProviderName, ProviderProfile


class RealOAuthClient(OAuthClient):
    """Authorization-code flow over httpx.

    Subclasses set the endpoint URLs and scope and implement
    ``_fetch_profile``. Issued states are remembered in memory and are
    single use; in a multi-instance deployment the callback must reach
    the instance that issued the state.
    """

    provider: OAuthProviderName
    authorize_url: str
    token_url: str
    scope: str

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize OAuth client.

        Args:
            client_id: OAuth client ID
            client_secret: OAuth client secret
            redirect_uri: Callback URL registered with the provider
            timeout: Upper bound for each provider HTTP call in seconds
            transport: httpx transport override (tests use httpx.MockTransport)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self.transport = transport
        self._issued_states: set[str] = set()

    def _authorization_params(self, state: str) -> dict[str, str]:
        return {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": self.scope,
            "state": state,
        }

    async def initiate_authorization(self, state: str) -> str:
        self._issued_states.add(state)
        params = self._authorization_params(state)

        logfire.info(
            "OAuth authorization initiated",
            provider=self.provider.value,
            redirect_uri=self.redirect_uri,
        )
        return f"{self.authorize_url}?{urlencode(params)}"

    async def complete_authorization(self, code: str, state: str) -> ProviderProfile:
        if state not in self._issued_states:
            raise self._error("Invalid or expired state")
        self._issued_states.discard(state)

        if not code:
            raise self._error("Missing authorization code")

        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self.transport
        ) as client:
            access_token = await self._exchange_code_for_token(client, code)
            profile = await self._fetch_profile(client, access_token)

        logfire.info(
            "OAuth authorization completed",
            provider=self.provider.value,
            provider_id=profile.provider_id,
            has_email=profile.email is not None,
        )
        return profile

    async def _exchange_code_for_token(self, client: httpx.AsyncClient, code: str) -> str:
        """Exchange authorization code for access token.

        Raises:
            OAuthProviderError: If token exchange fails
        """
        data = {
            "code": code,
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
        }
        result = await self._request(
            client,
            "POST",
            self.token_url,
            data=data,
            headers={"Accept": "application/json"},
        )
        access_token = result.get("access_token")
        if not access_token:
            raise self._error("Token response did not include an access token")
        return access_token

    async def _get_json(
        self, client: httpx.AsyncClient, url: str, access_token: str, **kwargs: Any
    ) -> Any:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }
        return await self._request(client, "GET", url, headers=headers, **kwargs)

    async def _request(
        self, client: httpx.AsyncClient, method: str, url: str, **kwargs: Any
    ) -> Any:
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logfire.error(
                "OAuth provider HTTP error",
                provider=self.provider.value,
                error_type=type(e).__name__,
            )
            raise self._error(f"HTTP error: {type(e).__name__}") from e

        if response.status_code != 200:
            logfire.error(
                "OAuth provider request failed",
                provider=self.provider.value,
                status_code=response.status_code,
            )
            raise self._error(f"Request failed: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise self._error("Malformed provider response") from e

    async def _fetch_profile(
        self, client: httpx.AsyncClient, access_token: str
    ) -> ProviderProfile:
        raise NotImplementedError

    def _error(self, message: str) -> OAuthProviderError:
        return OAuthProviderError(self.provider.value, message)
