"""User domain service."""

from datetime import datetime

import logfire

from kycauth.domain.error import NotFoundError
from kycauth.domain.model import OAuthLink, User
from kycauth.domain.model.common import utc_now
from kycauth.domain.repository import UserRepository
from kycauth.domain.value import OAuthProviderName, UserId, normalize_email

from .base import Service


class UserService(Service):
    """Domain service for user lookups and profile persistence."""

    def __init__(self, user_repository: UserRepository) -> None:
        """Initialize user service.

        Args:
            user_repository: User repository
        """
        self.user_repository = user_repository

    async def get_by_id(self, user_id: UserId) -> User:
        """Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User entity

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("user_service.get_by_id", user_id=str(user_id)):
            user = await self.user_repository.find_by_id(user_id)
            if not user:
                logfire.warn("User not found", user_id=str(user_id))
                raise NotFoundError("User", str(user_id))
            return user

    async def get_user_by_id(self, user_id: UserId) -> User | None:
        with logfire.span("user_service.get_user_by_id", user_id=str(user_id)):
            return await self.user_repository.find_by_id(user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email (case-insensitive).

        Args:
            email: User email

        Returns:
            User if found, None otherwise
        """
        with logfire.span("user_service.get_user_by_email"):
            return await self.user_repository.find_by_email(normalize_email(email))

    async def get_user_by_oauth(
        self, provider: OAuthProviderName, provider_id: str
    ) -> User | None:
        """Get the user holding an OAuth link.

        Args:
            provider: Identity provider
            provider_id: Provider-specific user ID

        Returns:
            User if found, None otherwise
        """
        with logfire.span(
            "user_service.get_user_by_oauth",
            provider=provider.value,
            provider_id=provider_id,
        ):
            user = await self.user_repository.find_by_oauth(provider, provider_id)
            if user:
                logfire.info(
                    "User found by OAuth link",
                    provider=provider.value,
                    user_id=str(user.id),
                )
            return user

    async def create(self, user: User) -> User:
        """Create a new user.

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        with logfire.span("user_service.create", user_id=str(user.id)):
            created = await self.user_repository.create(user)
            logfire.info("User created", user_id=str(created.id))
            return created

    async def save(self, user: User) -> User:
        """Save profile changes (name, date of birth, avatar) of an existing user.

        Args:
            user: User to save

        Returns:
            Saved user
        """
        with logfire.span("user_service.save", user_id=str(user.id)):
            saved = await self.user_repository.save(user)
            logfire.info("User saved", user_id=str(saved.id))
            return saved

    async def set_password_hash(self, user_id: UserId, password_hash: str) -> User:
        with logfire.span("user_service.set_password_hash", user_id=str(user_id)):
            return await self.user_repository.set_password_hash(
                user_id, password_hash, utc_now()
            )

    async def set_active(self, user_id: UserId, active: bool) -> User:
        with logfire.span(
            "user_service.set_active", user_id=str(user_id), active=active
        ):
            return await self.user_repository.set_active(user_id, active, utc_now())

    async def link_oauth(self, user_id: UserId, link: OAuthLink) -> User:
        """Link a provider onto an existing account.

        Replaces the account's earlier link for the same provider.
        """
        with logfire.span(
            "user_service.link_oauth",
            user_id=str(user_id),
            provider=link.provider.value,
        ):
            return await self.user_repository.link_oauth(user_id, link)

    async def unlink_oauth(self, user_id: UserId, provider: OAuthProviderName) -> User:
        """Unlink a provider.

        Raises:
            NotFoundError: If the provider is not linked
            LastAuthMethodError: If this is the only way left to sign in
        """
        with logfire.span(
            "user_service.unlink_oauth", user_id=str(user_id), provider=provider.value
        ):
            return await self.user_repository.unlink_oauth(user_id, provider)

    async def record_oauth_login(
        self, user_id: UserId, now: datetime, avatar: str | None = None
    ) -> User:
        return await self.user_repository.record_oauth_login(user_id, now, avatar)
