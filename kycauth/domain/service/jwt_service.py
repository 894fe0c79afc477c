"""JWT token domain service."""

from datetime import datetime

import logfire
from pydantic import BaseModel

from kycauth.config import AuthSettings
from kycauth.domain.model import User
from kycauth.domain.value import TokenKind
from kycauth.util.jwt import (
    JWTError,
    TokenPayload,
    create_token,
    decode_unverified,
    verify_token,
)

from .base import Service


class TokenPair(BaseModel):
    """Access and refresh token issued together."""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int  # Access token lifetime in seconds


class JWTService(Service):
    """Domain service for JWT token operations."""

    def __init__(self, auth_settings: AuthSettings) -> None:
        """Initialize JWT service.

        Args:
            auth_settings: Authentication settings
        """
        self.auth_settings = auth_settings

    @property
    def access_token_lifetime_seconds(self) -> int:
        return self.auth_settings.access_token_expiry_minutes * 60

    def create_token(
        self, user: User, kind: TokenKind, now: datetime | None = None
    ) -> str:
        """Create a JWT of the given kind for the user.

        Args:
            user: Token subject
            kind: Access or refresh
            now: Issue time (defaults to the current UTC time)

        Returns:
            JWT token string
        """
        with logfire.span(
            "jwt_service.create_token", user_id=str(user.id), kind=kind.value
        ):
            return create_token(
                user_id=str(user.id),
                email=user.email.root,
                name=user.name,
                kind=kind,
                settings=self.auth_settings,
                now=now,
            )

    def create_token_pair(self, user: User) -> TokenPair:
        """Mint an access token and a refresh token for the user."""
        return TokenPair(
            access_token=self.create_token(user, TokenKind.ACCESS),
            refresh_token=self.create_token(user, TokenKind.REFRESH),
            expires_in=self.access_token_lifetime_seconds,
        )

    def verify(self, token: str, kind: TokenKind) -> TokenPayload:
        """Verify JWT token and extract payload.

        Args:
            token: JWT token string
            kind: Expected token kind

        Returns:
            Token payload

        Raises:
            TokenExpiredError: If the token has expired
            TokenInvalidError: If the token is invalid
        """
        with logfire.span("jwt_service.verify", kind=kind.value):
            try:
                payload = verify_token(token, kind, self.auth_settings)
            except JWTError as e:
                logfire.info(
                    "JWT verification failed",
                    kind=kind.value,
                    error_type=type(e).__name__,
                )
                raise
            return payload

    def decode_unverified(self, token: str) -> dict:
        """Read claims without verification. Diagnostics only."""
        return decode_unverified(token)

    def get_user_id_from_token(self, token: str | None) -> str | None:
        """Extract the user ID from an access token without raising.

        Args:
            token: JWT token string (optional)

        Returns:
            User ID if token is valid, None if token is missing or invalid
        """
        if not token:
            return None

        try:
            return self.verify(token, TokenKind.ACCESS).user_id
        except JWTError:
            return None
