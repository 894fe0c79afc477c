"""Unit tests for LoginUseCase."""

from datetime import timedelta

import pytest
from dishka import AsyncContainer

from kycauth.application.usecase.auth import LoginUseCase
from kycauth.application.usecase.auth.login import LoginRequest
from kycauth.domain.error import (
    AccountInactiveError,
    AccountLockedError,
    InvalidCredentialsError,
)
from kycauth.domain.model import User
from kycauth.domain.model.common import utc_now
from kycauth.domain.repository import UserRepository
from tests.factories import TEST_PASSWORD, make_user
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


async def _create_user(unit_env: AsyncContainer, **overrides) -> User:
    user_repo = await unit_env.get(UserRepository)
    return await user_repo.create(make_user(**overrides))


class TestLoginUseCase:
    """Tests for LoginUseCase."""

    @pytest.mark.asyncio
    async def test_login_with_correct_password(self, unit_env: AsyncContainer):
        """Login should reset the counter and start a session."""
        # Arrange
        user = await _create_user(unit_env, failed_login_count=2)
        use_case = await unit_env.get(LoginUseCase)

        # Act
        response = await use_case.execute(
            LoginRequest(email="Jane@X.com", password=TEST_PASSWORD, ip="10.0.0.9")
        )

        # Assert
        assert response.user.id == str(user.id)
        assert response.access_token
        stored = await (await unit_env.get(UserRepository)).find_by_id(user.id)
        assert stored.failed_login_count == 0
        assert stored.last_login_ip == "10.0.0.9"
        assert stored.last_login_at is not None

    @pytest.mark.asyncio
    async def test_unknown_email_is_invalid_credentials(self, unit_env):
        use_case = await unit_env.get(LoginUseCase)

        with pytest.raises(InvalidCredentialsError):
            await use_case.execute(LoginRequest(email="nobody@x.com", password="x"))

    @pytest.mark.asyncio
    async def test_lockout_progression(self, unit_env):
        """Four failures leave the account open; the fifth locks it."""
        # Arrange
        user = await _create_user(unit_env)
        use_case = await unit_env.get(LoginUseCase)
        user_repo = await unit_env.get(UserRepository)

        # Act / Assert
        for attempt in range(1, 5):
            with pytest.raises(InvalidCredentialsError):
                await use_case.execute(LoginRequest(email="jane@x.com", password="Wrong1"))
            stored = await user_repo.find_by_id(user.id)
            assert stored.failed_login_count == attempt
            assert stored.locked_until is None

        with pytest.raises(InvalidCredentialsError):
            await use_case.execute(LoginRequest(email="jane@x.com", password="Wrong1"))

        stored = await user_repo.find_by_id(user.id)
        assert stored.failed_login_count == 5
        remaining = stored.locked_until - utc_now()
        assert timedelta(hours=1, minutes=59) < remaining <= timedelta(hours=2)

    @pytest.mark.asyncio
    async def test_locked_account_rejects_correct_password(self, unit_env):
        """A correct password during the lock window is refused without changing state."""
        # Arrange
        locked_until = utc_now() + timedelta(hours=1)
        user = await _create_user(
            unit_env, failed_login_count=5, locked_until=locked_until
        )
        use_case = await unit_env.get(LoginUseCase)

        # Act
        with pytest.raises(AccountLockedError) as exc:
            await use_case.execute(
                LoginRequest(email="jane@x.com", password=TEST_PASSWORD)
            )

        # Assert
        assert exc.value.locked_until == locked_until
        stored = await (await unit_env.get(UserRepository)).find_by_id(user.id)
        assert stored.failed_login_count == 5
        assert stored.refresh_tokens == []

    @pytest.mark.asyncio
    async def test_expired_lock_allows_login(self, unit_env):
        await _create_user(
            unit_env,
            failed_login_count=5,
            locked_until=utc_now() - timedelta(minutes=1),
        )
        use_case = await unit_env.get(LoginUseCase)

        response = await use_case.execute(
            LoginRequest(email="jane@x.com", password=TEST_PASSWORD)
        )

        assert response.refresh_token

    @pytest.mark.asyncio
    async def test_inactive_account_is_refused(self, unit_env):
        await _create_user(unit_env, is_active=False)
        use_case = await unit_env.get(LoginUseCase)

        with pytest.raises(AccountInactiveError):
            await use_case.execute(
                LoginRequest(email="jane@x.com", password=TEST_PASSWORD)
            )

    @pytest.mark.asyncio
    async def test_oauth_only_account_cannot_use_password_login(self, unit_env):
        user = await _create_user(unit_env, password=None)
        use_case = await unit_env.get(LoginUseCase)

        with pytest.raises(InvalidCredentialsError):
            await use_case.execute(LoginRequest(email="jane@x.com", password=""))

        stored = await (await unit_env.get(UserRepository)).find_by_id(user.id)
        assert stored.failed_login_count == 1
