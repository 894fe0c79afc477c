"""Unit tests for AuthenticateRequestUseCase."""

from datetime import datetime, timedelta, timezone

import pytest

from kycauth.application.usecase.auth import AuthenticateRequestUseCase
from kycauth.application.usecase.auth.authenticate_request import (
    AuthenticateRequestRequest,
)
from kycauth.domain.error import (
    AccountInactiveError,
    AccountLockedError,
    AuthenticationRequiredError,
)
from kycauth.domain.model.common import utc_now
from kycauth.domain.repository import UserRepository
from kycauth.domain.service import JWTService
from kycauth.domain.value import TokenKind
from kycauth.util.jwt import TokenExpiredError, TokenInvalidError
from tests.factories import make_user
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestAuthenticateRequestUseCase:
    """Tests for the gatekeeper checks."""

    @pytest.mark.asyncio
    async def test_valid_access_token(self, unit_env):
        # Arrange
        user = await (await unit_env.get(UserRepository)).create(make_user())
        jwt_service = await unit_env.get(JWTService)
        token = jwt_service.create_token(user, TokenKind.ACCESS)
        use_case = await unit_env.get(AuthenticateRequestUseCase)

        # Act
        authenticated = await use_case.execute(AuthenticateRequestRequest(token=token))

        # Assert
        assert authenticated.user.id == user.id
        assert authenticated.token == token

    @pytest.mark.asyncio
    async def test_missing_token(self, unit_env):
        use_case = await unit_env.get(AuthenticateRequestUseCase)

        with pytest.raises(AuthenticationRequiredError):
            await use_case.execute(AuthenticateRequestRequest())

    @pytest.mark.asyncio
    async def test_expired_token(self, unit_env):
        user = await (await unit_env.get(UserRepository)).create(make_user())
        jwt_service = await unit_env.get(JWTService)
        issued = datetime.now(timezone.utc) - timedelta(minutes=20)
        token = jwt_service.create_token(user, TokenKind.ACCESS, now=issued)
        use_case = await unit_env.get(AuthenticateRequestUseCase)

        with pytest.raises(TokenExpiredError):
            await use_case.execute(AuthenticateRequestRequest(token=token))

    @pytest.mark.asyncio
    async def test_refresh_token_is_rejected(self, unit_env):
        user = await (await unit_env.get(UserRepository)).create(make_user())
        jwt_service = await unit_env.get(JWTService)
        token = jwt_service.create_token(user, TokenKind.REFRESH)
        use_case = await unit_env.get(AuthenticateRequestUseCase)

        with pytest.raises(TokenInvalidError):
            await use_case.execute(AuthenticateRequestRequest(token=token))

    @pytest.mark.asyncio
    async def test_unknown_user(self, unit_env):
        """A valid token whose subject no longer exists is invalid."""
        jwt_service = await unit_env.get(JWTService)
        token = jwt_service.create_token(make_user(), TokenKind.ACCESS)
        use_case = await unit_env.get(AuthenticateRequestUseCase)

        with pytest.raises(TokenInvalidError):
            await use_case.execute(AuthenticateRequestRequest(token=token))

    @pytest.mark.asyncio
    async def test_inactive_user(self, unit_env):
        user = await (await unit_env.get(UserRepository)).create(
            make_user(is_active=False)
        )
        token = (await unit_env.get(JWTService)).create_token(user, TokenKind.ACCESS)
        use_case = await unit_env.get(AuthenticateRequestUseCase)

        with pytest.raises(AccountInactiveError):
            await use_case.execute(AuthenticateRequestRequest(token=token))

    @pytest.mark.asyncio
    async def test_locked_user(self, unit_env):
        user = await (await unit_env.get(UserRepository)).create(
            make_user(failed_login_count=5, locked_until=utc_now() + timedelta(hours=1))
        )
        token = (await unit_env.get(JWTService)).create_token(user, TokenKind.ACCESS)
        use_case = await unit_env.get(AuthenticateRequestUseCase)

        with pytest.raises(AccountLockedError):
            await use_case.execute(AuthenticateRequestRequest(token=token))

    @pytest.mark.asyncio
    async def test_try_execute_returns_none(self, unit_env):
        use_case = await unit_env.get(AuthenticateRequestUseCase)

        assert await use_case.try_execute(AuthenticateRequestRequest()) is None
        assert (
            await use_case.try_execute(AuthenticateRequestRequest(token="garbage"))
            is None
        )
