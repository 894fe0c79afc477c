"""Persistent store implementations."""

from kycauth.persistence.repository.attempt import RedisAttemptStore
from kycauth.persistence.repository.user import PostgresUserRepository

__all__ = [
    "PostgresUserRepository",
    "RedisAttemptStore",
]
