"""In-memory store implementations for testing and single-instance use."""

from .attempt import InMemoryAttemptStore
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryAttemptStore",
    "InMemoryUserRepository",
]
