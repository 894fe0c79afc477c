"""Unit tests for RefreshTokenUseCase and the logout use cases."""

import pytest
from dishka import AsyncContainer

from kycauth.application.usecase.auth import (
    LoginUseCase,
    LogoutAllUseCase,
    LogoutUseCase,
    RefreshTokenUseCase,
)
from kycauth.application.usecase.auth.login import LoginRequest
from kycauth.application.usecase.auth.logout import LogoutAllRequest, LogoutRequest
from kycauth.application.usecase.auth.refresh_token import RefreshTokenRequest
from kycauth.domain.error import (
    AccountInactiveError,
    AccountLockedError,
    AuthenticationRequiredError,
)
from kycauth.domain.model.common import utc_now
from kycauth.domain.repository import UserRepository
from kycauth.domain.value import LockoutPolicy
from kycauth.util.jwt import TokenInvalidError
from tests.factories import TEST_PASSWORD, make_user
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


async def _login(unit_env: AsyncContainer):
    user = await (await unit_env.get(UserRepository)).create(make_user())
    login = await unit_env.get(LoginUseCase)
    session = await login.execute(
        LoginRequest(email="jane@x.com", password=TEST_PASSWORD)
    )
    return user, session


class TestRefreshTokenUseCase:
    """Tests for RefreshTokenUseCase."""

    @pytest.mark.asyncio
    async def test_refresh_rotates_token(self, unit_env: AsyncContainer):
        # Arrange
        user, session = await _login(unit_env)
        use_case = await unit_env.get(RefreshTokenUseCase)

        # Act
        response = await use_case.execute(
            RefreshTokenRequest(refresh_token=session.refresh_token)
        )

        # Assert
        assert response.refresh_token != session.refresh_token
        stored = await (await unit_env.get(UserRepository)).find_by_id(user.id)
        assert stored.refresh_token_entry(session.refresh_token) is None
        assert stored.refresh_token_entry(response.refresh_token) is not None

    @pytest.mark.asyncio
    async def test_refresh_token_is_single_use(self, unit_env):
        """Presenting the same refresh token twice fails the second time."""
        # Arrange
        _, session = await _login(unit_env)
        use_case = await unit_env.get(RefreshTokenUseCase)
        await use_case.execute(RefreshTokenRequest(refresh_token=session.refresh_token))

        # Act / Assert
        with pytest.raises(TokenInvalidError):
            await use_case.execute(
                RefreshTokenRequest(refresh_token=session.refresh_token)
            )

    @pytest.mark.asyncio
    async def test_access_token_is_not_a_refresh_token(self, unit_env):
        _, session = await _login(unit_env)
        use_case = await unit_env.get(RefreshTokenUseCase)

        with pytest.raises(TokenInvalidError):
            await use_case.execute(
                RefreshTokenRequest(refresh_token=session.access_token)
            )

    @pytest.mark.asyncio
    async def test_missing_token(self, unit_env):
        use_case = await unit_env.get(RefreshTokenUseCase)

        with pytest.raises(AuthenticationRequiredError):
            await use_case.execute(RefreshTokenRequest())

    @pytest.mark.asyncio
    async def test_deactivated_user_cannot_refresh(self, unit_env):
        user, session = await _login(unit_env)
        user_repo = await unit_env.get(UserRepository)
        await user_repo.set_active(user.id, False, utc_now())
        use_case = await unit_env.get(RefreshTokenUseCase)

        with pytest.raises(AccountInactiveError):
            await use_case.execute(
                RefreshTokenRequest(refresh_token=session.refresh_token)
            )

    @pytest.mark.asyncio
    async def test_locked_user_cannot_refresh(self, unit_env):
        user, session = await _login(unit_env)
        user_repo = await unit_env.get(UserRepository)
        for _ in range(5):
            await user_repo.record_failed_login(
                user.id, utc_now(), LockoutPolicy()
            )
        use_case = await unit_env.get(RefreshTokenUseCase)

        with pytest.raises(AccountLockedError):
            await use_case.execute(
                RefreshTokenRequest(refresh_token=session.refresh_token)
            )


class TestLogoutUseCases:
    """Tests for LogoutUseCase and LogoutAllUseCase."""

    @pytest.mark.asyncio
    async def test_logout_revokes_presented_token(self, unit_env):
        # Arrange
        user, session = await _login(unit_env)
        logout = await unit_env.get(LogoutUseCase)
        refresh = await unit_env.get(RefreshTokenUseCase)

        # Act
        await logout.execute(
            LogoutRequest(user_id=user.id, refresh_token=session.refresh_token)
        )

        # Assert
        with pytest.raises(TokenInvalidError):
            await refresh.execute(
                RefreshTokenRequest(refresh_token=session.refresh_token)
            )

    @pytest.mark.asyncio
    async def test_logout_without_token_succeeds(self, unit_env):
        user, _ = await _login(unit_env)
        logout = await unit_env.get(LogoutUseCase)

        response = await logout.execute(LogoutRequest(user_id=user.id))

        assert response.message == "Logged out successfully"

    @pytest.mark.asyncio
    async def test_logout_all_revokes_every_session(self, unit_env):
        # Arrange
        user, first = await _login(unit_env)
        login = await unit_env.get(LoginUseCase)
        second = await login.execute(
            LoginRequest(email="jane@x.com", password=TEST_PASSWORD)
        )
        logout_all = await unit_env.get(LogoutAllUseCase)

        # Act
        await logout_all.execute(LogoutAllRequest(user_id=user.id))

        # Assert
        stored = await (await unit_env.get(UserRepository)).find_by_id(user.id)
        assert stored.refresh_tokens == []
        refresh = await unit_env.get(RefreshTokenUseCase)
        for session in (first, second):
            with pytest.raises(TokenInvalidError):
                await refresh.execute(
                    RefreshTokenRequest(refresh_token=session.refresh_token)
                )
