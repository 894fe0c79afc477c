"""Unit tests for ChangePasswordUseCase."""

import pytest
from dishka import AsyncContainer
from pydantic import ValidationError as PydanticValidationError

from kycauth.application.usecase.auth import ChangePasswordUseCase, LoginUseCase
from kycauth.application.usecase.auth.change_password import ChangePasswordRequest
from kycauth.application.usecase.auth.login import LoginRequest
from kycauth.domain.error import ValidationError
from kycauth.domain.repository import UserRepository
from tests.factories import TEST_PASSWORD, make_user
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestChangePasswordUseCase:
    """Tests for ChangePasswordUseCase."""

    @pytest.mark.asyncio
    async def test_change_password_revokes_all_sessions(self, unit_env: AsyncContainer):
        """Changing the password rehashes it and clears the refresh-token ledger."""
        # Arrange
        user_repo = await unit_env.get(UserRepository)
        user = await user_repo.create(make_user())
        login = await unit_env.get(LoginUseCase)
        await login.execute(LoginRequest(email="jane@x.com", password=TEST_PASSWORD))
        use_case = await unit_env.get(ChangePasswordUseCase)

        # Act
        response = await use_case.execute(
            ChangePasswordRequest(
                user_id=user.id,
                current_password=TEST_PASSWORD,
                new_password="N3wSecret",
            )
        )

        # Assert
        assert "login again" in response.message
        stored = await user_repo.find_by_id(user.id)
        assert stored.check_password("N3wSecret")
        assert not stored.check_password(TEST_PASSWORD)
        assert stored.refresh_tokens == []

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, unit_env):
        user = await (await unit_env.get(UserRepository)).create(make_user())
        use_case = await unit_env.get(ChangePasswordUseCase)

        with pytest.raises(ValidationError):
            await use_case.execute(
                ChangePasswordRequest(
                    user_id=user.id,
                    current_password="Wrong123",
                    new_password="N3wSecret",
                )
            )

    @pytest.mark.asyncio
    async def test_oauth_only_user_sets_first_password(self, unit_env):
        """An account without a password may set one without a current password."""
        # Arrange
        user_repo = await unit_env.get(UserRepository)
        user = await user_repo.create(make_user(password=None))
        use_case = await unit_env.get(ChangePasswordUseCase)

        # Act
        await use_case.execute(
            ChangePasswordRequest(user_id=user.id, new_password="N3wSecret")
        )

        # Assert
        stored = await user_repo.find_by_id(user.id)
        assert stored.has_password
        assert stored.check_password("N3wSecret")

    def test_new_password_must_be_strong(self):
        with pytest.raises(PydanticValidationError):
            ChangePasswordRequest(
                user_id=make_user(password=None).id, new_password="weak"
            )

    def test_new_password_over_72_bytes_is_rejected(self):
        with pytest.raises(PydanticValidationError, match="at most 72 bytes"):
            ChangePasswordRequest(
                user_id=make_user(password=None).id, new_password="Aa1" + "x" * 70
            )
