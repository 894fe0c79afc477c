"""User aggregate root.

A user signs in with a password, with one or more linked OAuth identities
(Google, Facebook, GitHub), or both. The aggregate also carries the
lockout counters and the bounded ledger of live refresh tokens.
"""

from datetime import date, datetime, timedelta
from typing import Optional

from pydantic import Field, field_validator

from kycauth.domain.error import LastAuthMethodError, NotFoundError
from kycauth.domain.model.common import DomainModel, utc_now
from kycauth.domain.value import Email, LockoutPolicy, OAuthProviderName, UserId
from kycauth.util.password import hash_password, verify_password

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50


class OAuthLink(DomainModel):
    """An external identity linked to the account (at most one per provider)."""

    provider: OAuthProviderName
    provider_id: str
    connected_at: datetime = Field(default_factory=utc_now)


class RefreshTokenEntry(DomainModel):
    """A live refresh token recorded server-side."""

    token: str
    created_at: datetime = Field(default_factory=utc_now)

    def is_expired(self, now: datetime, max_age: timedelta) -> bool:
        """Absolute expiry, independent of the JWT's own ``exp`` claim."""
        return now >= self.created_at + max_age


class User(DomainModel):
    """User aggregate root."""

    id: UserId
    name: str
    email: Email
    password_hash: Optional[str] = Field(default=None, repr=False)
    date_of_birth: Optional[date] = None
    avatar: Optional[str] = None
    oauth_links: list[OAuthLink] = Field(default_factory=list)
    is_email_verified: bool = False
    is_active: bool = True
    failed_login_count: int = Field(default=0, ge=0)
    locked_until: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    last_login_ip: Optional[str] = None
    refresh_tokens: list[RefreshTokenEntry] = Field(default_factory=list, repr=False)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not NAME_MIN_LENGTH <= len(v) <= NAME_MAX_LENGTH:
            raise ValueError(
                f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
            )
        return v

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: Optional[date]) -> Optional[date]:
        if v is not None and v >= date.today():
            raise ValueError("Date of birth must be in the past")
        return v

    # Derived state

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and self.locked_until > now

    @property
    def has_password(self) -> bool:
        return self.password_hash is not None

    def oauth_link(self, provider: OAuthProviderName) -> Optional[OAuthLink]:
        return next((link for link in self.oauth_links if link.provider == provider), None)

    # Credentials

    def with_password(self, plaintext: str, rounds: int = 12) -> "User":
        """Return a copy holding a fresh bcrypt hash of ``plaintext``.

        This is CPU-bound; async callers should run it in a worker thread.
        """
        return self.model_copy(
            update={
                "password_hash": hash_password(plaintext, rounds),
                "updated_at": utc_now(),
            }
        )

    def check_password(self, plaintext: str) -> bool:
        return verify_password(plaintext, self.password_hash)

    # OAuth links

    def with_oauth_link(
        self, provider: OAuthProviderName, provider_id: str, now: datetime
    ) -> "User":
        """Link a provider, replacing any existing link for the same provider."""
        links = [link for link in self.oauth_links if link.provider != provider]
        links.append(
            OAuthLink(provider=provider, provider_id=provider_id, connected_at=now)
        )
        return self.model_copy(update={"oauth_links": links, "updated_at": now})

    def without_oauth_link(self, provider: OAuthProviderName) -> "User":
        """Unlink a provider.

        Raises:
            NotFoundError: If the provider is not linked
            LastAuthMethodError: If this is the only way left to sign in
        """
        if self.oauth_link(provider) is None:
            raise NotFoundError("OAuth provider link", provider.value)
        remaining = [link for link in self.oauth_links if link.provider != provider]
        if not remaining and not self.has_password:
            raise LastAuthMethodError()
        return self.model_copy(update={"oauth_links": remaining, "updated_at": utc_now()})

    # Lockout transitions

    def after_failed_login(self, now: datetime, policy: LockoutPolicy) -> "User":
        """Apply one failed password attempt.

        An expired lock starts a fresh window at a count of 1 without
        re-locking. Otherwise the count is incremented and the account is
        locked once it reaches the policy threshold.
        """
        if self.locked_until is not None and self.locked_until <= now:
            return self.model_copy(
                update={"failed_login_count": 1, "locked_until": None, "updated_at": now}
            )

        count = self.failed_login_count + 1
        locked_until = self.locked_until
        if count >= policy.max_attempts and not self.is_locked(now):
            locked_until = policy.lock_expiry(now)
        return self.model_copy(
            update={
                "failed_login_count": count,
                "locked_until": locked_until,
                "updated_at": now,
            }
        )

    def after_successful_login(self, now: datetime, ip: Optional[str]) -> "User":
        return self.model_copy(
            update={
                "failed_login_count": 0,
                "locked_until": None,
                "last_login_at": now,
                "last_login_ip": ip,
                "updated_at": now,
            }
        )

    # Refresh-token ledger

    def with_refresh_token(self, entry: RefreshTokenEntry, max_tokens: int) -> "User":
        """Append a token, evicting the oldest entries beyond ``max_tokens``."""
        tokens = [*self.refresh_tokens, entry][-max_tokens:]
        return self.model_copy(update={"refresh_tokens": tokens})

    def without_refresh_token(self, token: str) -> "User":
        tokens = [entry for entry in self.refresh_tokens if entry.token != token]
        return self.model_copy(update={"refresh_tokens": tokens})

    def without_refresh_tokens(self) -> "User":
        return self.model_copy(update={"refresh_tokens": []})

    def refresh_token_entry(self, token: str) -> Optional[RefreshTokenEntry]:
        return next((e for e in self.refresh_tokens if e.token == token), None)
