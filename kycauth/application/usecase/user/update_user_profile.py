"""Update profile use case."""

from datetime import date

from pydantic import BaseModel

from kycauth.application.usecase.common import UserView
from kycauth.domain.model import User
from kycauth.domain.model.common import utc_now
from kycauth.domain.service import UserService
from kycauth.domain.value import UserId


class UpdateProfileRequest(BaseModel):
    """Update profile request."""

    user_id: UserId  # From authenticated user
    name: str | None = None
    date_of_birth: date | None = None


class UpdateProfileUseCase:
    """Use case for updating a user's own profile.

    Only the name and the date of birth can be changed here; email and
    credentials have their own flows.
    """

    def __init__(self, user_service: UserService) -> None:
        """Initialize update profile use case.

        Args:
            user_service: User domain service
        """
        self.user_service = user_service

    async def execute(self, request: UpdateProfileRequest) -> UserView:
        """Execute update profile flow.

        Steps:
        1. Get user by ID
        2. Apply the provided fields and re-validate the aggregate
        3. Save and return the updated user

        Raises:
            NotFoundError: If user not found
            pydantic.ValidationError: If a new value breaks a field rule
        """
        user = await self.user_service.get_by_id(request.user_id)

        changes = request.model_dump(
            include={"name", "date_of_birth"}, exclude_none=True
        )
        if not changes:
            return UserView.from_user(user)

        # model_copy skips validation, so rebuild to enforce the field rules
        updated = User.model_validate(
            {**user.model_dump(), **changes, "updated_at": utc_now()}
        )
        saved = await self.user_service.save(updated)
        return UserView.from_user(saved)
