"""Base use case."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

from kycauth.domain.model import User


class BaseUseCase(ABC):
    """Base use case for orchestrating domain services."""

    @abstractmethod
    async def execute(self, request: Any) -> Any:
        pass


async def hash_in_thread(user: User, plaintext: str, rounds: int) -> User:
    """Set a new password without blocking the event loop."""
    return await asyncio.to_thread(user.with_password, plaintext, rounds)


async def check_in_thread(user: User, plaintext: str) -> bool:
    """Verify a password without blocking the event loop."""
    return await asyncio.to_thread(user.check_password, plaintext)
