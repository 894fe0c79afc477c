"""Linked OAuth provider use cases."""

import logfire
from pydantic import BaseModel

from kycauth.application.usecase.common import OAuthLinkView
from kycauth.domain.service import UserService
from kycauth.domain.value import OAuthProviderName, UserId


class ListOAuthLinksRequest(BaseModel):
    user_id: UserId


class ListOAuthLinksResponse(BaseModel):
    providers: list[OAuthLinkView]


class DisconnectOAuthRequest(BaseModel):
    user_id: UserId
    provider: OAuthProviderName


class DisconnectOAuthResponse(BaseModel):
    message: str


class ListOAuthLinksUseCase:
    """Use case for listing the providers linked to the user's account."""

    def __init__(self, user_service: UserService) -> None:
        self.user_service = user_service

    async def execute(self, request: ListOAuthLinksRequest) -> ListOAuthLinksResponse:
        user = await self.user_service.get_by_id(request.user_id)
        return ListOAuthLinksResponse(
            providers=[
                OAuthLinkView(provider=link.provider, connected_at=link.connected_at)
                for link in user.oauth_links
            ]
        )


class DisconnectOAuthUseCase:
    """Use case for unlinking a provider.

    The last remaining way to sign in cannot be removed.
    """

    def __init__(self, user_service: UserService) -> None:
        self.user_service = user_service

    async def execute(self, request: DisconnectOAuthRequest) -> DisconnectOAuthResponse:
        """Execute disconnect flow.

        Raises:
            NotFoundError: If the user or the link does not exist
            LastAuthMethodError: If no password and no other link would remain
        """
        user = await self.user_service.unlink_oauth(request.user_id, request.provider)

        logfire.info(
            "OAuth provider disconnected",
            user_id=str(user.id),
            provider=request.provider.value,
        )
        name = request.provider.value.capitalize()
        return DisconnectOAuthResponse(message=f"{name} account disconnected successfully")
