"""Sliding-window rate limiter domain service."""

from datetime import datetime, timedelta

import logfire

from kycauth.config import RateLimitSettings
from kycauth.domain.error import RateLimitedError
from kycauth.domain.model.common import utc_now
from kycauth.domain.repository import AttemptStore

from .base import Service


class RateLimiter(Service):
    """Throttle keyed by ``(client address, endpoint)``.

    Constructed with an explicit attempt store; the limit is only as global
    as the store behind it.
    """

    def __init__(
        self,
        store: AttemptStore,
        max_attempts: int = 5,
        window: timedelta = timedelta(minutes=15),
    ) -> None:
        self.store = store
        self.max_attempts = max_attempts
        self.window = window

    @classmethod
    def from_settings(cls, store: AttemptStore, settings: RateLimitSettings) -> "RateLimiter":
        return cls(
            store=store,
            max_attempts=settings.max_attempts,
            window=timedelta(minutes=settings.window_minutes),
        )

    @staticmethod
    def key_for(client_address: str, endpoint: str) -> str:
        return f"{client_address}:{endpoint}"

    async def check(
        self, client_address: str, endpoint: str, now: datetime | None = None
    ) -> None:
        """Record an attempt or reject it.

        Raises:
            RateLimitedError: If the window already holds ``max_attempts`` attempts
        """
        result = await self.store.hit(
            self.key_for(client_address, endpoint),
            now or utc_now(),
            self.window,
            self.max_attempts,
        )
        if not result.allowed:
            logfire.warn(
                "Rate limit exceeded",
                client_address=client_address,
                endpoint=endpoint,
                retry_after=result.retry_after,
            )
            raise RateLimitedError(retry_after=result.retry_after)

    async def reset(self, client_address: str, endpoint: str) -> None:
        await self.store.reset(self.key_for(client_address, endpoint))
