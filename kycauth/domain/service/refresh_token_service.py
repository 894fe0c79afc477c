"""Refresh-token ledger domain service."""

from datetime import datetime, timedelta

import logfire

from kycauth.config import AuthSettings
from kycauth.domain.model import RefreshTokenEntry, User
from kycauth.domain.model.common import utc_now
from kycauth.domain.repository import UserRepository
from kycauth.domain.value import UserId

from .base import Service


class RefreshTokenLedger(Service):
    """Bounded, ordered list of live refresh tokens per user.

    Adding beyond the cap evicts the oldest entry. Each entry also expires
    a fixed time after it was recorded, whatever the JWT ``exp`` says.
    """

    def __init__(
        self, user_repository: UserRepository, auth_settings: AuthSettings
    ) -> None:
        self.user_repository = user_repository
        self.max_tokens = auth_settings.max_refresh_tokens
        self.max_age = timedelta(days=auth_settings.refresh_token_expiry_days)

    async def add(
        self, user_id: UserId, token: str, now: datetime | None = None
    ) -> User:
        with logfire.span("refresh_token_ledger.add", user_id=str(user_id)):
            entry = RefreshTokenEntry(token=token, created_at=now or utc_now())
            return await self.user_repository.add_refresh_token(
                user_id, entry, self.max_tokens
            )

    async def revoke(self, user_id: UserId, token: str) -> bool:
        """Remove one token (logout).

        Returns:
            True if the token was live
        """
        with logfire.span("refresh_token_ledger.revoke", user_id=str(user_id)):
            return await self.user_repository.remove_refresh_token(user_id, token)

    async def revoke_all(self, user_id: UserId) -> None:
        """Remove every token (logout everywhere, password change, deactivation)."""
        with logfire.span("refresh_token_ledger.revoke_all", user_id=str(user_id)):
            await self.user_repository.clear_refresh_tokens(user_id)
            logfire.info("All refresh tokens revoked", user_id=str(user_id))

    def contains(self, user: User, token: str, now: datetime) -> bool:
        """Whether ``token`` is recorded for the user and not past its absolute expiry."""
        entry = user.refresh_token_entry(token)
        return entry is not None and not entry.is_expired(now, self.max_age)

    async def rotate(
        self,
        user_id: UserId,
        old_token: str,
        new_token: str,
        now: datetime | None = None,
    ) -> bool:
        """Atomically swap ``old_token`` for ``new_token``.

        Returns:
            False if ``old_token`` was already revoked or rotated
        """
        with logfire.span("refresh_token_ledger.rotate", user_id=str(user_id)):
            entry = RefreshTokenEntry(token=new_token, created_at=now or utc_now())
            rotated = await self.user_repository.rotate_refresh_token(
                user_id, old_token, entry, self.max_tokens
            )
            if not rotated:
                logfire.warn(
                    "Refresh token reuse detected", user_id=str(user_id)
                )
            return rotated
