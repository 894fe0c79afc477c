"""Request and response bodies of the HTTP API.

Bodies use camelCase keys on the wire. Responses are wrapped in
``{"success": true, "message": ..., "data": ...}``.
"""

from datetime import date, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from kycauth.domain.value import OAuthProviderName

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(CamelModel, Generic[T]):
    """Success envelope."""

    success: bool = True
    message: str | None = None
    data: T | None = None


# Requests


class SignupBody(CamelModel):
    name: str
    email: str
    password: str
    date_of_birth: date | None = None


class LoginBody(CamelModel):
    email: str
    password: str


class RefreshBody(CamelModel):
    refresh_token: str | None = None


class ChangePasswordBody(CamelModel):
    current_password: str = ""
    new_password: str


class UpdateProfileBody(CamelModel):
    name: str | None = None
    date_of_birth: date | None = None


class ReactivateBody(CamelModel):
    email: str
    password: str


# Responses


class OAuthLinkOut(CamelModel):
    provider: OAuthProviderName
    connected_at: datetime


class UserOut(CamelModel):
    """Owner's view of the account."""

    id: str
    name: str
    email: str
    date_of_birth: date | None
    avatar: str | None
    oauth_providers: list[OAuthLinkOut]
    is_email_verified: bool
    is_active: bool
    has_password: bool
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime


class SessionData(CamelModel):
    """Signup and login payload; the refresh token travels in the cookie."""

    user: UserOut
    access_token: str
    token_type: str
    expires_in: int


class TokenData(CamelModel):
    access_token: str
    token_type: str
    expires_in: int


class UserData(CamelModel):
    user: UserOut


class PublicProfileOut(CamelModel):
    id: str
    name: str
    avatar: str | None
    created_at: datetime


class PublicProfileData(CamelModel):
    user: PublicProfileOut


class OAuthLinksData(CamelModel):
    providers: list[OAuthLinkOut]


class ProvidersData(CamelModel):
    providers: list[OAuthProviderName]
