"""Rate limit infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide

from kycauth.config import Settings
from kycauth.domain.repository import AttemptStore
from kycauth.persistence.repository import RedisAttemptStore
from kycauth.persistence.repository.inmemory import InMemoryAttemptStore
from kycauth.util.di.base import ProviderBase


class RateLimitProvider(ProviderBase):
    """Rate limit component base."""

    __mock_component__ = "ratelimit"


class ProdRateLimitProvider(RateLimitProvider):
    """Production attempt store selected by ``rate_limit.backend``."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    async def get_attempt_store(self, settings: Settings) -> AsyncIterator[AttemptStore]:
        """Provide the attempt store.

        ``memory`` keeps attempts in this process; ``redis`` shares them
        across instances.
        """
        if settings.rate_limit.backend == "redis":
            store = RedisAttemptStore(
                settings.rate_limit.redis_url,
                socket_timeout=settings.store.timeout_seconds,
            )
            yield store
            await store.close()
        else:
            yield InMemoryAttemptStore()
