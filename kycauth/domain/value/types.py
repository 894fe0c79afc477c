"""Domain value objects for identity and sessions.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

import re
from datetime import datetime, timedelta
from enum import Enum

from pydantic import field_validator

from kycauth.domain.value.common import RootValueObject, ValueObject

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PLACEHOLDER_EMAIL_DOMAIN_SUFFIX = ".local"


class OAuthProviderName(str, Enum):
    """Supported third-party identity providers."""

    GOOGLE = "google"
    FACEBOOK = "facebook"
    GITHUB = "github"


class TokenKind(str, Enum):
    """Kind of bearer token."""

    ACCESS = "access"
    REFRESH = "refresh"


def normalize_email(value: str) -> str:
    """Trim and case-fold an email address."""
    return value.strip().lower()


class Email(RootValueObject[str]):
    """Case-folded email address.

    Accepts synthesized placeholders such as ``12345@github.local``.
    """

    @field_validator("root")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Normalize and validate the address format."""
        v = normalize_email(v)
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please provide a valid email")
        return v

    @classmethod
    def placeholder(cls, provider: OAuthProviderName, provider_id: str) -> "Email":
        """Synthesize ``<providerId>@<provider>.local`` for providers that withhold email."""
        return cls(f"{provider_id}@{provider.value}{PLACEHOLDER_EMAIL_DOMAIN_SUFFIX}")

    @property
    def is_placeholder(self) -> bool:
        return self.root.endswith(PLACEHOLDER_EMAIL_DOMAIN_SUFFIX)


class ProviderProfile(ValueObject):
    """Identity asserted by an OAuth provider after a completed handshake.

    Provider adapters produce this; the identity resolver consumes it.
    """

    provider: OAuthProviderName
    provider_id: str
    email: str | None = None
    name: str
    avatar: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_provider_email(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = normalize_email(v)
        return v or None


class LockoutPolicy(ValueObject):
    """Failed-login threshold and lock duration."""

    max_attempts: int = 5
    lock_duration: timedelta = timedelta(hours=2)

    def lock_expiry(self, now: datetime) -> datetime:
        return now + self.lock_duration
