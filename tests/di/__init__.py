"""Mock providers for testing."""

from .oauth import MockOAuthProvider
from .persistence import MockPersistenceProvider
from .ratelimit import MockRateLimitProvider
from .container import build_test_container

__all__ = [
    "MockOAuthProvider",
    "MockPersistenceProvider",
    "MockRateLimitProvider",
    "build_test_container",
]
