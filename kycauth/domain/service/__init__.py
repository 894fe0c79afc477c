"""Domain services."""

from .auth_service import AuthService, OAuthClient
from .base import Service
from .jwt_service import JWTService, TokenPair
from .lockout_service import LockoutService
from .oauth_identity_service import OAuthIdentityResolver, ResolvedIdentity
from .rate_limiter import RateLimiter
from .refresh_token_service import RefreshTokenLedger
from .session_service import SessionService
from .user_service import UserService

__all__ = [
    "AuthService",
    "JWTService",
    "LockoutService",
    "OAuthClient",
    "OAuthIdentityResolver",
    "RateLimiter",
    "RefreshTokenLedger",
    "ResolvedIdentity",
    "Service",
    "SessionService",
    "TokenPair",
    "UserService",
]
