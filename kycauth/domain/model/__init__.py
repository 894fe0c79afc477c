"""Domain model entities."""

from kycauth.domain.model.user import OAuthLink, RefreshTokenEntry, User

__all__ = [
    "OAuthLink",
    "RefreshTokenEntry",
    "User",
]
