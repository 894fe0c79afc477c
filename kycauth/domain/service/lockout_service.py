"""Account lockout domain service.

States:
    Unlocked: ``failed_login_count`` below the threshold, no future lock.
    Locked: ``locked_until`` in the future.

Every failure goes through ``UserRepository.record_failed_login``, which
applies increment, threshold check and expired-lock reset atomically.
"""

from datetime import datetime, timedelta

import logfire

from kycauth.config import AuthSettings
from kycauth.domain.error import NotFoundError
from kycauth.domain.model import User
from kycauth.domain.repository import UserRepository
from kycauth.domain.value import LockoutPolicy, normalize_email

from .base import Service


class LockoutService(Service):
    """Domain service for the failed-login state machine."""

    def __init__(
        self, user_repository: UserRepository, auth_settings: AuthSettings
    ) -> None:
        self.user_repository = user_repository
        self.policy = LockoutPolicy(
            max_attempts=auth_settings.max_login_attempts,
            lock_duration=timedelta(hours=auth_settings.lock_duration_hours),
        )

    async def register_failure(self, user: User, now: datetime) -> User:
        """Record a failed password attempt.

        Args:
            user: The account the attempt targeted
            now: Attempt time

        Returns:
            The user after the transition
        """
        with logfire.span("lockout_service.register_failure", user_id=str(user.id)):
            updated = await self.user_repository.record_failed_login(
                user.id, now, self.policy
            )
            if updated.is_locked(now):
                logfire.warn(
                    "Account locked after repeated failures",
                    user_id=str(user.id),
                    failed_login_count=updated.failed_login_count,
                    locked_until=updated.locked_until.isoformat(),
                )
            else:
                logfire.info(
                    "Failed login recorded",
                    user_id=str(user.id),
                    failed_login_count=updated.failed_login_count,
                )
            return updated

    async def register_success(
        self, user: User, now: datetime, ip: str | None
    ) -> User:
        """Reset the counter and lock and record the login audit fields."""
        with logfire.span("lockout_service.register_success", user_id=str(user.id)):
            return await self.user_repository.record_successful_login(user.id, now, ip)

    async def unlock(self, email: str) -> User:
        """Unlock one account by email.

        Raises:
            NotFoundError: If no user has this email
        """
        with logfire.span("lockout_service.unlock"):
            user = await self.user_repository.find_by_email(normalize_email(email))
            if not user:
                raise NotFoundError("User", email)
            await self.user_repository.unlock(user.id)
            logfire.info("Account unlocked", user_id=str(user.id))
            return user

    async def unlock_all(self) -> int:
        """Unlock every account.

        Returns:
            Number of accounts that were reset
        """
        with logfire.span("lockout_service.unlock_all"):
            count = await self.user_repository.unlock_all()
            logfire.info("All accounts unlocked", count=count)
            return count
