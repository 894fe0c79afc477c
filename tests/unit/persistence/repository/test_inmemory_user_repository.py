"""Unit tests for the in-memory user repository."""

from datetime import timedelta
from uuid import uuid4

import pytest

from kycauth.domain.error import DuplicateEmailError, NotFoundError
from kycauth.domain.model import RefreshTokenEntry
from kycauth.domain.model.common import utc_now
from kycauth.domain.value import LockoutPolicy, OAuthProviderName, UserId
from kycauth.persistence.repository.inmemory.user import InMemoryUserRepository
from tests.factories import make_user


class TestInMemoryUserRepository:
    """Unit tests for InMemoryUserRepository."""

    @pytest.mark.asyncio
    async def test_email_uniqueness_ignores_case(self):
        repo = InMemoryUserRepository()
        await repo.create(make_user(email="jane@x.com"))

        with pytest.raises(DuplicateEmailError):
            await repo.create(make_user(email="JANE@X.COM"))

        assert await repo.find_by_email("Jane@X.com") is not None

    @pytest.mark.asyncio
    async def test_oauth_identity_cannot_be_linked_twice(self):
        # Arrange
        repo = InMemoryUserRepository()
        now = utc_now()
        await repo.create(
            make_user(email="a@x.com").with_oauth_link(
                OAuthProviderName.GITHUB, "4242", now
            )
        )
        other = make_user(email="b@x.com").with_oauth_link(
            OAuthProviderName.GITHUB, "4242", now
        )

        # Act / Assert
        with pytest.raises(ValueError):
            await repo.create(other)

    @pytest.mark.asyncio
    async def test_save_keeps_counters_and_tokens(self):
        """A profile save with a stale copy never resets the lockout state."""
        # Arrange
        repo = InMemoryUserRepository()
        stale = await repo.create(make_user())
        now = utc_now()
        await repo.record_failed_login(stale.id, now, LockoutPolicy())
        await repo.add_refresh_token(
            stale.id, RefreshTokenEntry(token="t1", created_at=now), max_tokens=5
        )

        # Act
        saved = await repo.save(stale.model_copy(update={"name": "Jane Q. Doe"}))

        # Assert
        assert saved.name == "Jane Q. Doe"
        assert saved.failed_login_count == 1
        assert [e.token for e in saved.refresh_tokens] == ["t1"]

    @pytest.mark.asyncio
    async def test_rotate_is_single_use(self):
        # Arrange
        repo = InMemoryUserRepository()
        user = await repo.create(make_user())
        start = utc_now()
        await repo.add_refresh_token(
            user.id, RefreshTokenEntry(token="old", created_at=start), max_tokens=5
        )
        new_entry = RefreshTokenEntry(
            token="new", created_at=start + timedelta(seconds=1)
        )

        # Act
        first = await repo.rotate_refresh_token(user.id, "old", new_entry, 5)
        second = await repo.rotate_refresh_token(user.id, "old", new_entry, 5)

        # Assert
        assert first is True
        assert second is False
        stored = await repo.find_by_id(user.id)
        assert [e.token for e in stored.refresh_tokens] == ["new"]

    @pytest.mark.asyncio
    async def test_unlock_all_counts_only_affected_users(self):
        # Arrange
        repo = InMemoryUserRepository()
        locked = await repo.create(make_user(email="a@x.com"))
        await repo.create(make_user(email="b@x.com"))
        policy = LockoutPolicy()
        for _ in range(5):
            await repo.record_failed_login(locked.id, utc_now(), policy)

        # Act
        count = await repo.unlock_all()

        # Assert
        assert count == 1
        user = await repo.find_by_id(locked.id)
        assert user.failed_login_count == 0
        assert user.locked_until is None

    @pytest.mark.asyncio
    async def test_mutating_unknown_user(self):
        repo = InMemoryUserRepository()

        with pytest.raises(NotFoundError):
            await repo.clear_refresh_tokens(UserId(uuid4()))
