"""Test configuration and fixtures."""

import os

# Must be set before Settings is first instantiated
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AUTH__BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT__BACKEND", "memory")

import pytest  # noqa: E402

from kycauth.config import AuthSettings  # noqa: E402


@pytest.fixture
def auth_settings() -> AuthSettings:
    """Auth settings with distinct test secrets and a cheap bcrypt cost."""
    return AuthSettings(
        access_token_secret="test-access-secret",
        refresh_token_secret="test-refresh-secret",
        bcrypt_rounds=4,
    )
