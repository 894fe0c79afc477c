"""OAuth identity resolution domain service.

Maps a ``ProviderProfile`` onto an existing or new user. Resolution order,
first match wins:

1. A user already linked to ``(provider, provider_id)``.
2. A user whose email equals the provider email: the provider is linked
   onto that account (replacing any earlier link for the same provider).
3. A new user, with a placeholder email when the provider withheld one.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import uuid4

import logfire

from kycauth.domain.error import DuplicateEmailError
from kycauth.domain.model import OAuthLink, User
from kycauth.domain.model.user import NAME_MAX_LENGTH, NAME_MIN_LENGTH
from kycauth.domain.value import Email, ProviderProfile, UserId

from .base import Service
from .user_service import UserService


@dataclass
class ResolvedIdentity:
    """Result of resolving a provider profile."""

    user: User
    created: bool = False
    linked: bool = False


class OAuthIdentityResolver(Service):
    """Single resolution algorithm shared by every provider adapter."""

    def __init__(self, user_service: UserService) -> None:
        self.user_service = user_service

    async def resolve(self, profile: ProviderProfile, now: datetime) -> ResolvedIdentity:
        """Resolve a provider profile to a user record.

        Args:
            profile: Identity asserted by the provider
            now: Resolution time, recorded as ``last_login_at``

        Returns:
            The resolved user and whether it was created or newly linked
        """
        with logfire.span(
            "oauth_identity_resolver.resolve",
            provider=profile.provider.value,
            provider_id=profile.provider_id,
        ):
            user = await self.user_service.get_user_by_oauth(
                profile.provider, profile.provider_id
            )
            if user:
                user = await self.user_service.record_oauth_login(
                    user.id, now, profile.avatar
                )
                return ResolvedIdentity(user=user)

            if profile.email:
                linked = await self._link_by_email(profile, now)
                if linked:
                    return linked

            try:
                user = await self.user_service.create(self._new_user(profile, now))
            except DuplicateEmailError:
                # A concurrent callback created the account first
                logfire.info(
                    "OAuth account creation raced, linking instead",
                    provider=profile.provider.value,
                )
                linked = await self._link_by_email(profile, now)
                if not linked:
                    raise
                return linked

            logfire.info(
                "User created from OAuth profile",
                user_id=str(user.id),
                provider=profile.provider.value,
            )
            return ResolvedIdentity(user=user, created=True)

    async def _link_by_email(
        self, profile: ProviderProfile, now: datetime
    ) -> ResolvedIdentity | None:
        email = profile.email or Email.placeholder(profile.provider, profile.provider_id).root
        user = await self.user_service.get_user_by_email(email)
        if not user:
            return None
        link = OAuthLink(
            provider=profile.provider, provider_id=profile.provider_id, connected_at=now
        )
        await self.user_service.link_oauth(user.id, link)
        user = await self.user_service.record_oauth_login(user.id, now, profile.avatar)
        logfire.info(
            "OAuth provider linked by email",
            user_id=str(user.id),
            provider=profile.provider.value,
        )
        return ResolvedIdentity(user=user, linked=True)

    @staticmethod
    def _display_name(profile: ProviderProfile) -> str:
        name = profile.name.strip()[:NAME_MAX_LENGTH].strip()
        if len(name) < NAME_MIN_LENGTH:
            name = f"{profile.provider.value.capitalize()} User"
        return name

    def _new_user(self, profile: ProviderProfile, now: datetime) -> User:
        email = (
            Email(profile.email)
            if profile.email
            else Email.placeholder(profile.provider, profile.provider_id)
        )
        return User(
            id=UserId(uuid4()),
            name=self._display_name(profile),
            email=email,
            avatar=profile.avatar,
            # Provider-supplied emails are trusted as verified
            is_email_verified=profile.email is not None,
            oauth_links=[
                OAuthLink(
                    provider=profile.provider,
                    provider_id=profile.provider_id,
                    connected_at=now,
                )
            ],
            last_login_at=now,
            created_at=now,
            updated_at=now,
        )
