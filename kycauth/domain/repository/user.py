"""User repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from kycauth.domain.model.user import OAuthLink, RefreshTokenEntry, User
from kycauth.domain.value import LockoutPolicy, OAuthProviderName, UserId


class UserRepository(ABC):
    """Repository for the User aggregate (the credential store).

    Per-user counters, credentials, the active flag, OAuth links and the
    refresh-token ledger are only ever changed through the atomic
    primitives below, never by read-modify-write in the caller.
    Implementations raise ``StoreUnavailableError`` on timeouts or driver
    failures.
    """

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: The user's unique identifier

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by email (case-insensitive).

        Args:
            email: The user's email address

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_oauth(
        self, provider: OAuthProviderName, provider_id: str
    ) -> Optional[User]:
        """Find the user holding an OAuth link.

        Args:
            provider: The identity provider
            provider_id: The user's ID on that provider

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Insert a new user.

        Args:
            user: The user to insert

        Returns:
            The stored user

        Raises:
            DuplicateEmailError: If the case-folded email is taken
        """
        pass

    @abstractmethod
    async def save(self, user: User) -> User:
        """Persist profile fields of an existing user.

        Covers name, date of birth and avatar only. Credentials, the active
        flag, OAuth links, counters and refresh tokens have their own
        primitives and are never written from a possibly stale copy.

        Args:
            user: The user to update

        Returns:
            The stored user

        Raises:
            NotFoundError: If the user does not exist
        """
        pass

    @abstractmethod
    async def set_password_hash(
        self, user_id: UserId, password_hash: str, now: datetime
    ) -> User:
        """Replace the stored password hash.

        Raises:
            NotFoundError: If the user does not exist
        """
        pass

    @abstractmethod
    async def set_active(self, user_id: UserId, active: bool, now: datetime) -> User:
        """Set the active flag.

        Raises:
            NotFoundError: If the user does not exist
        """
        pass

    @abstractmethod
    async def link_oauth(self, user_id: UserId, link: OAuthLink) -> User:
        """Add a provider link, replacing the user's link for the same provider.

        Links for other providers are left as stored, so concurrent links
        for different providers both survive.

        Raises:
            NotFoundError: If the user does not exist
        """
        pass

    @abstractmethod
    async def unlink_oauth(self, user_id: UserId, provider: OAuthProviderName) -> User:
        """Remove a provider link, checked against the current stored state.

        Raises:
            NotFoundError: If the user or the link does not exist
            LastAuthMethodError: If no password and no other link would remain
        """
        pass

    @abstractmethod
    async def record_oauth_login(
        self, user_id: UserId, now: datetime, avatar: Optional[str]
    ) -> User:
        """Set ``last_login_at`` and fill the avatar only if none is stored.

        Lockout counters are not touched.
        """
        pass

    @abstractmethod
    async def record_failed_login(
        self, user_id: UserId, now: datetime, policy: LockoutPolicy
    ) -> User:
        """Atomically apply one failed password attempt.

        Increment, threshold check and expired-lock reset happen as a
        single store operation, so concurrent failures cannot both observe
        the same count.

        Returns:
            The user after the transition
        """
        pass

    @abstractmethod
    async def record_successful_login(
        self, user_id: UserId, now: datetime, ip: Optional[str]
    ) -> User:
        """Atomically reset the lockout counters and set the login audit fields.

        Returns:
            The user after the transition
        """
        pass

    @abstractmethod
    async def add_refresh_token(
        self, user_id: UserId, entry: RefreshTokenEntry, max_tokens: int
    ) -> User:
        """Append a refresh token, evicting the oldest beyond ``max_tokens``."""
        pass

    @abstractmethod
    async def remove_refresh_token(self, user_id: UserId, token: str) -> bool:
        """Remove an exact token match.

        Returns:
            True if the token was present
        """
        pass

    @abstractmethod
    async def rotate_refresh_token(
        self,
        user_id: UserId,
        old_token: str,
        new_entry: RefreshTokenEntry,
        max_tokens: int,
    ) -> bool:
        """Atomically replace ``old_token`` with ``new_entry``.

        Returns:
            False if ``old_token`` was no longer present (nothing is added)
        """
        pass

    @abstractmethod
    async def clear_refresh_tokens(self, user_id: UserId) -> None:
        """Remove every refresh token of the user."""
        pass

    @abstractmethod
    async def unlock(self, user_id: UserId) -> None:
        """Clear the lock and the failed-attempt counter of one user."""
        pass

    @abstractmethod
    async def unlock_all(self) -> int:
        """Clear locks and counters of every user.

        Returns:
            Number of users that were locked or had failed attempts
        """
        pass
