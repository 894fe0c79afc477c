"""User use cases."""

from .account import DeactivateAccountUseCase, ReactivateAccountUseCase
from .get_user_profile import GetPublicProfileUseCase
from .oauth_links import DisconnectOAuthUseCase, ListOAuthLinksUseCase
from .update_user_profile import UpdateProfileUseCase

__all__ = [
    "DeactivateAccountUseCase",
    "DisconnectOAuthUseCase",
    "GetPublicProfileUseCase",
    "ListOAuthLinksUseCase",
    "ReactivateAccountUseCase",
    "UpdateProfileUseCase",
]
