"""Unit tests for PostgresUserRepository failure handling.

The session is replaced by a stub, so no database is needed.
"""

import asyncio

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError

from kycauth.domain.error import StoreUnavailableError
from kycauth.persistence.repository.user import PostgresUserRepository
from kycauth.persistence.tables import users_table


class StubSession:
    """Session whose ``execute`` runs a given coroutine function."""

    def __init__(self, execute):
        self._execute = execute

    async def execute(self, stmt):
        return await self._execute(stmt)


def repository(execute, timeout_seconds: float = 5.0) -> PostgresUserRepository:
    return PostgresUserRepository(StubSession(execute), timeout_seconds=timeout_seconds)


class TestPostgresUserRepositoryFailClosed:
    """Timeouts and driver errors surface as StoreUnavailableError."""

    @pytest.mark.asyncio
    async def test_timeout_error_becomes_store_unavailable(self):
        # Arrange
        async def execute(stmt):
            raise asyncio.TimeoutError()

        repo = repository(execute)

        # Act / Assert
        with pytest.raises(StoreUnavailableError):
            await repo._execute(select(users_table))

    @pytest.mark.asyncio
    async def test_slow_statement_is_cut_off(self):
        # Arrange
        async def execute(stmt):
            await asyncio.sleep(1)

        repo = repository(execute, timeout_seconds=0.01)

        # Act / Assert
        with pytest.raises(StoreUnavailableError):
            await repo._execute(select(users_table))

    @pytest.mark.asyncio
    async def test_driver_error_becomes_store_unavailable(self):
        async def execute(stmt):
            raise OperationalError("SELECT 1", {}, ConnectionError("down"))

        repo = repository(execute)

        with pytest.raises(StoreUnavailableError):
            await repo._execute(select(users_table))

    @pytest.mark.asyncio
    async def test_integrity_error_is_left_to_the_caller(self):
        async def execute(stmt):
            raise IntegrityError("INSERT", {}, ValueError("duplicate"))

        repo = repository(execute)

        with pytest.raises(IntegrityError):
            await repo._execute(select(users_table))

    @pytest.mark.asyncio
    async def test_lookup_fails_closed_instead_of_reporting_no_user(self):
        """A failed email lookup must not look like an unknown email."""
        # Arrange
        async def execute(stmt):
            raise asyncio.TimeoutError()

        repo = repository(execute)

        # Act / Assert
        with pytest.raises(StoreUnavailableError):
            await repo.find_by_email("jane@x.com")
