"""Infrastructure layer errors."""


class AdapterError(Exception):
    """Base infrastructure error."""

    pass


class ProviderError(AdapterError):
    """External provider error."""

    pass


class OAuthProviderError(ProviderError):
    """OAuth handshake failed (bad state, rejected code, unreachable provider)."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider} OAuth failed: {message}")
