"""User profile and account routes."""

from uuid import UUID

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends, Response

from kycauth.application.usecase.auth import AuthenticatedUser
from kycauth.application.usecase.common import UserView
from kycauth.application.usecase.user import (
    DeactivateAccountUseCase,
    DisconnectOAuthUseCase,
    GetPublicProfileUseCase,
    ListOAuthLinksUseCase,
    ReactivateAccountUseCase,
    UpdateProfileUseCase,
)
from kycauth.application.usecase.user.account import (
    DeactivateAccountRequest,
    ReactivateAccountRequest,
)
from kycauth.application.usecase.user.get_user_profile import GetPublicProfileRequest
from kycauth.application.usecase.user.oauth_links import (
    DisconnectOAuthRequest,
    ListOAuthLinksRequest,
)
from kycauth.application.usecase.user.update_user_profile import UpdateProfileRequest
from kycauth.config import Settings
from kycauth.domain.value import OAuthProviderName, UserId
from kycauth.interface.api.schemas import (
    Envelope,
    OAuthLinksData,
    PublicProfileData,
    PublicProfileOut,
    ReactivateBody,
    UpdateProfileBody,
    UserData,
    UserOut,
)
from kycauth.interface.api.security import (
    clear_refresh_cookie,
    enforce_rate_limit,
    require_user,
)

router = APIRouter(prefix="/users", tags=["users"], route_class=DishkaRoute)


@router.get("/profile", response_model=Envelope[UserData])
async def get_my_profile(
    current: AuthenticatedUser = Depends(require_user),
) -> Envelope[UserData]:
    """Current user's full profile."""
    user = UserOut.model_validate(UserView.from_user(current.user))
    return Envelope(data=UserData(user=user))


@router.put("/profile", response_model=Envelope[UserData])
async def update_my_profile(
    body: UpdateProfileBody,
    update_profile_use_case: FromDishka[UpdateProfileUseCase],
    current: AuthenticatedUser = Depends(require_user),
) -> Envelope[UserData]:
    """Update the current user's name and date of birth.

    Example:
        PUT /users/profile
        Authorization: Bearer ...

        Request:
        {
            "name": "Jane Q. Doe",
            "dateOfBirth": "1990-04-01"
        }
    """
    view = await update_profile_use_case.execute(
        UpdateProfileRequest(
            user_id=current.user.id,
            name=body.name,
            date_of_birth=body.date_of_birth,
        )
    )
    return Envelope(
        message="Profile updated successfully",
        data=UserData(user=UserOut.model_validate(view)),
    )


@router.delete("/account", response_model=Envelope[None])
async def deactivate_account(
    response: Response,
    deactivate_use_case: FromDishka[DeactivateAccountUseCase],
    settings: FromDishka[Settings],
    current: AuthenticatedUser = Depends(require_user),
) -> Envelope[None]:
    """Deactivate (never delete) the current user's account."""
    result = await deactivate_use_case.execute(
        DeactivateAccountRequest(user_id=current.user.id)
    )
    clear_refresh_cookie(response, settings)
    return Envelope(message=result.message)


@router.post(
    "/reactivate",
    response_model=Envelope[None],
    dependencies=[Depends(enforce_rate_limit)],
)
async def reactivate_account(
    body: ReactivateBody,
    reactivate_use_case: FromDishka[ReactivateAccountUseCase],
) -> Envelope[None]:
    """Reactivate a deactivated account by proving its password."""
    result = await reactivate_use_case.execute(
        ReactivateAccountRequest(email=body.email, password=body.password)
    )
    return Envelope(message=result.message)


@router.get("/oauth/providers", response_model=Envelope[OAuthLinksData])
async def list_linked_providers(
    list_links_use_case: FromDishka[ListOAuthLinksUseCase],
    current: AuthenticatedUser = Depends(require_user),
) -> Envelope[OAuthLinksData]:
    """Providers linked to the current user's account."""
    result = await list_links_use_case.execute(
        ListOAuthLinksRequest(user_id=current.user.id)
    )
    return Envelope(data=OAuthLinksData.model_validate(result))


@router.delete("/oauth/{provider}", response_model=Envelope[None])
async def disconnect_provider(
    provider: OAuthProviderName,
    disconnect_use_case: FromDishka[DisconnectOAuthUseCase],
    current: AuthenticatedUser = Depends(require_user),
) -> Envelope[None]:
    """Unlink a provider; the last way to sign in cannot be removed (400)."""
    result = await disconnect_use_case.execute(
        DisconnectOAuthRequest(user_id=current.user.id, provider=provider)
    )
    return Envelope(message=result.message)


@router.get("/{user_id}", response_model=Envelope[PublicProfileData])
async def get_public_profile(
    user_id: UUID,
    get_public_profile_use_case: FromDishka[GetPublicProfileUseCase],
) -> Envelope[PublicProfileData]:
    """Public profile of any active user.

    Example:
        GET /users/123e4567-e89b-12d3-a456-426614174000

        Response:
        {
            "success": true,
            "data": {"user": {"id": "...", "name": "Jane Doe", "avatar": null, "createdAt": "..."}}
        }
    """
    profile = await get_public_profile_use_case.execute(
        GetPublicProfileRequest(user_id=UserId(user_id))
    )
    return Envelope(data=PublicProfileData(user=PublicProfileOut.model_validate(profile)))
