"""JWT token utilities.

Access and refresh tokens share one claim layout but are signed with
distinct secrets and carry a ``kind`` claim, so a token of one kind can
never be verified as the other.
"""

import secrets
from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel, ConfigDict, Field

from kycauth.config import AuthSettings
from kycauth.domain.value.types import TokenKind


class TokenPayload(BaseModel):
    """JWT token payload."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    email: str
    name: str
    kind: TokenKind
    iss: str
    aud: str
    iat: datetime
    exp: datetime
    jti: str


class JWTError(Exception):
    """JWT-related error."""

    pass


class TokenExpiredError(JWTError):
    """The token signature is valid but its ``exp`` has passed."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message)


class TokenInvalidError(JWTError):
    """The token is malformed, tampered, of the wrong kind or revoked."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


def _secret_for(kind: TokenKind, settings: AuthSettings) -> str:
    if kind is TokenKind.ACCESS:
        return settings.access_token_secret
    return settings.refresh_token_secret


def _lifetime_for(kind: TokenKind, settings: AuthSettings) -> timedelta:
    if kind is TokenKind.ACCESS:
        return timedelta(minutes=settings.access_token_expiry_minutes)
    return timedelta(days=settings.refresh_token_expiry_days)


def create_token(
    user_id: str,
    email: str,
    name: str,
    kind: TokenKind,
    settings: AuthSettings,
    now: datetime | None = None,
) -> str:
    """Create a signed JWT for the user.

    Args:
        user_id: User ID
        email: User email
        name: User display name
        kind: Access or refresh
        settings: Authentication settings
        now: Issue time (defaults to the current UTC time)

    Returns:
        Encoded JWT token
    """
    issued_at = now or datetime.now(timezone.utc)

    payload = {
        "userId": user_id,
        "email": email,
        "name": name,
        "kind": kind.value,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": issued_at,
        "exp": issued_at + _lifetime_for(kind, settings),
        # Two tokens minted in the same second must still differ
        "jti": secrets.token_hex(16),
    }

    return jwt.encode(
        payload, _secret_for(kind, settings), algorithm=settings.jwt_algorithm
    )


def verify_token(token: str, kind: TokenKind, settings: AuthSettings) -> TokenPayload:
    """Verify and decode a JWT token.

    Checks signature, issuer, audience, expiry and the ``kind`` claim.

    Args:
        token: JWT token to verify
        kind: Expected token kind
        settings: Authentication settings

    Returns:
        Token payload if valid

    Raises:
        TokenExpiredError: If the token has expired
        TokenInvalidError: If the token is invalid for any other reason
    """
    try:
        payload = jwt.decode(
            token,
            _secret_for(kind, settings),
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            options={"require": ["exp", "iat", "iss", "aud"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()
    except jwt.InvalidTokenError:
        raise TokenInvalidError()

    if payload.get("kind") != kind.value:
        raise TokenInvalidError("Unexpected token kind")

    try:
        return TokenPayload.model_validate(payload)
    except ValueError:
        raise TokenInvalidError("Malformed token claims")


def decode_unverified(token: str) -> dict:
    """Decode a token without checking its signature or expiry.

    For diagnostics only (e.g. reporting the claims of an expired token).
    Never use the result to authorize a request.

    Raises:
        TokenInvalidError: If the token cannot be decoded at all
    """
    try:
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
            algorithms=["HS256", "HS384", "HS512"],
        )
    except jwt.InvalidTokenError:
        raise TokenInvalidError()
