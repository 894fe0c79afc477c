"""Get public profile use case."""

from datetime import datetime

from pydantic import BaseModel

from kycauth.domain.error import NotFoundError
from kycauth.domain.service import UserService
from kycauth.domain.value import UserId


class GetPublicProfileRequest(BaseModel):
    """Get public profile request."""

    user_id: UserId


class GetPublicProfileResponse(BaseModel):
    """Public profile: no email, no account state."""

    id: str
    name: str
    avatar: str | None
    created_at: datetime


class GetPublicProfileUseCase:
    """Use case for getting any active user's public profile."""

    def __init__(self, user_service: UserService) -> None:
        """Initialize get public profile use case.

        Args:
            user_service: User domain service
        """
        self.user_service = user_service

    async def execute(self, request: GetPublicProfileRequest) -> GetPublicProfileResponse:
        """Execute get public profile flow.

        Raises:
            NotFoundError: If the user does not exist or is deactivated
        """
        user = await self.user_service.get_user_by_id(request.user_id)
        if not user or not user.is_active:
            raise NotFoundError("User", str(request.user_id))

        return GetPublicProfileResponse(
            id=str(user.id),
            name=user.name,
            avatar=user.avatar,
            created_at=user.created_at,
        )
