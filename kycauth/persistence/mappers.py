"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict, Iterable
from uuid import UUID

from kycauth.domain.model import OAuthLink, RefreshTokenEntry, User
from kycauth.domain.value import Email, OAuthProviderName, UserId


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_oauth_link(row: Dict[str, Any]) -> OAuthLink:
    return OAuthLink(
        provider=OAuthProviderName(row["provider"]),
        provider_id=row["provider_id"],
        connected_at=row["connected_at"],
    )


def row_to_refresh_token(row: Dict[str, Any]) -> RefreshTokenEntry:
    return RefreshTokenEntry(token=row["token"], created_at=row["created_at"])


def row_to_user(
    row: Dict[str, Any],
    link_rows: Iterable[Dict[str, Any]] = (),
    token_rows: Iterable[Dict[str, Any]] = (),
) -> User:
    """Convert database rows to a User domain model.

    Args:
        row: ``users`` row as dict
        link_rows: The user's ``user_oauth_links`` rows
        token_rows: The user's ``refresh_tokens`` rows, oldest first

    Returns:
        User domain model
    """
    return User(
        id=UserId(_uuid(row["id"])),
        name=row["name"],
        email=Email(row["email"]),
        password_hash=row.get("password_hash"),
        date_of_birth=row.get("date_of_birth"),
        avatar=row.get("avatar"),
        oauth_links=[row_to_oauth_link(r) for r in link_rows],
        is_email_verified=row["is_email_verified"],
        is_active=row["is_active"],
        failed_login_count=row["failed_login_count"],
        locked_until=row.get("locked_until"),
        last_login_at=row.get("last_login_at"),
        last_login_ip=row.get("last_login_ip"),
        refresh_tokens=[row_to_refresh_token(r) for r in token_rows],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert a User to a ``users`` row dict (links and tokens excluded)."""
    return user.model_dump(exclude={"oauth_links", "refresh_tokens"})


def user_profile_to_dict(user: User) -> Dict[str, Any]:
    """Columns written by a profile save."""
    return user.model_dump(include={"name", "date_of_birth", "avatar", "updated_at"})


def oauth_link_to_dict(user_id: UserId, link: OAuthLink) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "provider": link.provider.value,
        "provider_id": link.provider_id,
        "connected_at": link.connected_at,
    }
