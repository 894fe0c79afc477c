"""Models shared by the auth and user use cases."""

import re
from datetime import date, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel

from kycauth.domain.model import User
from kycauth.domain.service import TokenPair
from kycauth.domain.value import OAuthProviderName

PASSWORD_MIN_LENGTH = 6
# bcrypt only accepts up to 72 bytes of input
PASSWORD_MAX_BYTES = 72
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def check_password_strength(value: str) -> str:
    """At least 6 characters with a lowercase letter, an uppercase letter and a digit.

    At most 72 bytes once UTF-8 encoded.
    """
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        )
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes long")
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter, "
            "one lowercase letter, and one number"
        )
    return value


StrongPassword = Annotated[str, AfterValidator(check_password_strength)]


class OAuthLinkView(BaseModel):
    """Linked provider as shown to its owner."""

    provider: OAuthProviderName
    connected_at: datetime


class UserView(BaseModel):
    """User as returned to its owner.

    The password hash, the refresh tokens and the lockout counters never
    leave the service.
    """

    id: str
    name: str
    email: str
    date_of_birth: date | None
    avatar: str | None
    oauth_providers: list[OAuthLinkView]
    is_email_verified: bool
    is_active: bool
    has_password: bool
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserView":
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email.root,
            date_of_birth=user.date_of_birth,
            avatar=user.avatar,
            oauth_providers=[
                OAuthLinkView(provider=link.provider, connected_at=link.connected_at)
                for link in user.oauth_links
            ],
            is_email_verified=user.is_email_verified,
            is_active=user.is_active,
            has_password=user.has_password,
            last_login_at=user.last_login_at,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class SessionResponse(BaseModel):
    """A freshly started session: the user plus a token pair."""

    user: UserView
    access_token: str
    refresh_token: str
    token_type: str
    expires_in: int

    @classmethod
    def build(cls, user: User, pair: TokenPair) -> "SessionResponse":
        return cls(
            user=UserView.from_user(user),
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            token_type=pair.token_type,
            expires_in=pair.expires_in,
        )
