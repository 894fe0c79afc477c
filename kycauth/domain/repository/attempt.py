"""Attempt store interface for sliding-window rate limiting."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from pydantic import BaseModel


class AttemptResult(BaseModel):
    """Outcome of recording one attempt."""

    allowed: bool
    retry_after: int = 0  # Seconds until a slot frees up when not allowed


class AttemptStore(ABC):
    """Keyed store of attempt timestamps.

    The in-process implementation serves single-instance deployments;
    a shared cache makes the limit global across instances.
    """

    @abstractmethod
    async def hit(
        self, key: str, now: datetime, window: timedelta, limit: int
    ) -> AttemptResult:
        """Prune, check and record an attempt as one atomic step.

        Timestamps older than ``now - window`` are discarded. If ``limit``
        or more remain, the attempt is rejected and not recorded;
        otherwise ``now`` is appended.

        Args:
            key: Client address + endpoint key
            now: Attempt time
            window: Sliding window length
            limit: Maximum attempts allowed inside the window

        Returns:
            Whether the attempt is allowed, with a retry hint if not
        """
        pass

    @abstractmethod
    async def reset(self, key: str) -> None:
        """Forget every attempt recorded under ``key``."""
        pass
