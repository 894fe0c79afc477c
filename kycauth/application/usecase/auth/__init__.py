"""Authentication use cases."""

from .authenticate_request import AuthenticatedUser, AuthenticateRequestUseCase
from .change_password import ChangePasswordUseCase
from .login import LoginUseCase
from .logout import LogoutAllUseCase, LogoutUseCase
from .oauth_login import OAuthLoginUseCase
from .refresh_token import RefreshTokenUseCase
from .signup import SignupUseCase

__all__ = [
    "AuthenticateRequestUseCase",
    "AuthenticatedUser",
    "ChangePasswordUseCase",
    "LoginUseCase",
    "LogoutAllUseCase",
    "LogoutUseCase",
    "OAuthLoginUseCase",
    "RefreshTokenUseCase",
    "SignupUseCase",
]
