"""Authentication domain service."""

import secrets

import logfire

from kycauth.domain.error import NotFoundError
from kycauth.domain.value import OAuthProviderName, ProviderProfile

from .base import Service


class OAuthClient:
    """Generic OAuth client interface for all providers."""

    async def initiate_authorization(self, state: str) -> str:
        """Initiate OAuth authorization flow.

        Args:
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect user to
        """
        raise NotImplementedError

    async def complete_authorization(self, code: str, state: str) -> ProviderProfile:
        """Complete OAuth authorization flow.

        Args:
            code: Authorization code from OAuth callback
            state: State parameter issued by ``initiate_authorization``

        Returns:
            Profile asserted by the provider

        Raises:
            OAuthProviderError: If the handshake fails
        """
        raise NotImplementedError


class AuthService(Service):
    """Domain service coordinating the configured OAuth providers."""

    def __init__(self, oauth_clients: dict[OAuthProviderName, OAuthClient]) -> None:
        """Initialize auth service.

        Args:
            oauth_clients: Map of configured provider to OAuth client
        """
        self.oauth_clients = oauth_clients

    def available_providers(self) -> list[OAuthProviderName]:
        return [p for p in OAuthProviderName if p in self.oauth_clients]

    def _client(self, provider: OAuthProviderName) -> OAuthClient:
        client = self.oauth_clients.get(provider)
        if not client:
            raise NotFoundError("OAuth provider", provider.value)
        return client

    async def initiate_login(self, provider: OAuthProviderName) -> str:
        """Start an OAuth login with a fresh CSRF state.

        Returns:
            Authorization URL to redirect user to

        Raises:
            NotFoundError: If the provider is not configured
        """
        client = self._client(provider)
        state = secrets.token_urlsafe(32)
        logfire.info("OAuth login initiated", provider=provider.value)
        return await client.initiate_authorization(state)

    async def complete_login(
        self, provider: OAuthProviderName, code: str, state: str
    ) -> ProviderProfile:
        """Complete an OAuth login.

        Raises:
            NotFoundError: If the provider is not configured
            OAuthProviderError: If the handshake fails
        """
        with logfire.span("auth_service.complete_login", provider=provider.value):
            return await self._client(provider).complete_authorization(code, state)
