"""Process-local attempt store."""

import math
from datetime import datetime, timedelta

from kycauth.domain.repository.attempt import AttemptResult, AttemptStore


class InMemoryAttemptStore(AttemptStore):
    """Attempt timestamps per key, kept in this process only.

    The limit is per instance; deployments with several API replicas
    should use the Redis store. Keys whose attempts have all left the
    window are dropped, so memory follows the number of recent clients.
    """

    def __init__(self) -> None:
        self._attempts: dict[str, list[datetime]] = {}

    def _sweep(self, cutoff: datetime) -> None:
        # Timestamps are appended in order, so the last one is the newest
        stale = [
            key
            for key, times in self._attempts.items()
            if not times or times[-1] <= cutoff
        ]
        for key in stale:
            del self._attempts[key]

    async def hit(
        self, key: str, now: datetime, window: timedelta, limit: int
    ) -> AttemptResult:
        cutoff = now - window
        self._sweep(cutoff)
        attempts = [t for t in self._attempts.get(key, []) if t > cutoff]

        if len(attempts) >= limit:
            self._attempts[key] = attempts
            retry_after = math.ceil((attempts[0] + window - now).total_seconds())
            return AttemptResult(allowed=False, retry_after=max(1, retry_after))

        attempts.append(now)
        self._attempts[key] = attempts
        return AttemptResult(allowed=True)

    async def reset(self, key: str) -> None:
        self._attempts.pop(key, None)
