"""Domain value objects."""

from kycauth.domain.value.identifiers import UserId
from kycauth.domain.value.types import (
    Email,
    LockoutPolicy,
    OAuthProviderName,
    ProviderProfile,
    TokenKind,
    normalize_email,
)

__all__ = [
    # Identifiers
    "UserId",
    # Types
    "Email",
    "LockoutPolicy",
    "OAuthProviderName",
    "ProviderProfile",
    "TokenKind",
    "normalize_email",
]
