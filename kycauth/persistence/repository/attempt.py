"""Redis-backed attempt store shared across API instances."""

import math
import uuid
from datetime import datetime, timedelta

import logfire
import redis.asyncio as aioredis
from redis.exceptions import RedisError

from kycauth.domain.error import StoreUnavailableError
from kycauth.domain.repository.attempt import AttemptResult, AttemptStore


class RedisAttemptStore(AttemptStore):
    """Sliding-window log kept in one sorted set per key.

    Members are unique attempt ids scored by their timestamp. Pruning,
    counting and recording run inside a single Lua script so two instances
    can never both take the last free slot.
    """

    KEY_PREFIX = "ratelimit:"

    _SLIDING_WINDOW_SCRIPT = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])
local member = ARGV[4]

redis.call('ZREMRANGEBYSCORE', key, '-inf', now - window)
local count = redis.call('ZCARD', key)

if count >= limit then
  local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
  return {0, oldest[2]}
end

redis.call('ZADD', key, now, member)
redis.call('EXPIRE', key, math.ceil(window))
return {1, 0}
"""

    def __init__(self, redis_url: str, *, socket_timeout: float = 5.0):
        self.client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        self._sliding_window = self.client.register_script(self._SLIDING_WINDOW_SCRIPT)

    def _key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}{key}"

    async def hit(
        self, key: str, now: datetime, window: timedelta, limit: int
    ) -> AttemptResult:
        now_ts = now.timestamp()
        window_seconds = window.total_seconds()
        try:
            allowed, oldest = await self._sliding_window(
                keys=[self._key(key)],
                args=[now_ts, window_seconds, limit, uuid.uuid4().hex],
            )
        except RedisError as e:
            logfire.error("Attempt store unavailable", error_type=type(e).__name__)
            raise StoreUnavailableError("Attempt store unavailable") from e

        if int(allowed) == 1:
            return AttemptResult(allowed=True)

        retry_after = math.ceil(float(oldest) + window_seconds - now_ts)
        return AttemptResult(allowed=False, retry_after=max(1, retry_after))

    async def reset(self, key: str) -> None:
        try:
            await self.client.delete(self._key(key))
        except RedisError as e:
            raise StoreUnavailableError("Attempt store unavailable") from e

    async def close(self) -> None:
        await self.client.aclose()
