"""In-memory user repository for testing."""

from datetime import datetime
from typing import Optional

from kycauth.domain.error import DuplicateEmailError, NotFoundError
from kycauth.domain.model.user import OAuthLink, RefreshTokenEntry, User
from kycauth.domain.repository.user import UserRepository
from kycauth.domain.value import LockoutPolicy, OAuthProviderName, UserId, normalize_email


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository for testing.

    No mutation awaits between reading and writing a user, so every
    primitive is atomic with respect to other tasks on the event loop.
    """

    def __init__(self) -> None:
        self._users: dict[UserId, User] = {}

    def _get(self, user_id: UserId) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        return user

    def _email_taken(self, email: str) -> bool:
        return any(u.email.root == email for u in self._users.values())

    def _oauth_taken(self, user: User) -> bool:
        for other in self._users.values():
            if other.id == user.id:
                continue
            for link in user.oauth_links:
                theirs = other.oauth_link(link.provider)
                if theirs is not None and theirs.provider_id == link.provider_id:
                    return True
        return False

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID."""
        return self._users.get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by their email (case-insensitive)."""
        email = normalize_email(email)
        for user in self._users.values():
            if user.email.root == email:
                return user
        return None

    async def find_by_oauth(
        self, provider: OAuthProviderName, provider_id: str
    ) -> Optional[User]:
        """Find the user holding an OAuth link."""
        for user in self._users.values():
            link = user.oauth_link(provider)
            if link is not None and link.provider_id == provider_id:
                return user
        return None

    async def create(self, user: User) -> User:
        if self._email_taken(user.email.root):
            raise DuplicateEmailError(user.email.root)
        if self._oauth_taken(user):
            raise ValueError("OAuth identity already linked to another user")
        self._users[user.id] = user
        return user

    def _update(self, user_id: UserId, **fields) -> User:
        user = self._get(user_id).model_copy(update=fields)
        self._users[user_id] = user
        return user

    async def save(self, user: User) -> User:
        """Update profile fields only; everything else keeps its stored value."""
        return self._update(
            user.id,
            name=user.name,
            date_of_birth=user.date_of_birth,
            avatar=user.avatar,
            updated_at=user.updated_at,
        )

    async def set_password_hash(
        self, user_id: UserId, password_hash: str, now: datetime
    ) -> User:
        return self._update(user_id, password_hash=password_hash, updated_at=now)

    async def set_active(self, user_id: UserId, active: bool, now: datetime) -> User:
        return self._update(user_id, is_active=active, updated_at=now)

    async def link_oauth(self, user_id: UserId, link: OAuthLink) -> User:
        holder = await self.find_by_oauth(link.provider, link.provider_id)
        if holder is not None and holder.id != user_id:
            raise ValueError("OAuth identity already linked to another user")
        user = self._get(user_id).with_oauth_link(
            link.provider, link.provider_id, link.connected_at
        )
        self._users[user_id] = user
        return user

    async def unlink_oauth(self, user_id: UserId, provider: OAuthProviderName) -> User:
        user = self._get(user_id).without_oauth_link(provider)
        self._users[user_id] = user
        return user

    async def record_oauth_login(
        self, user_id: UserId, now: datetime, avatar: Optional[str]
    ) -> User:
        current = self._get(user_id)
        return self._update(
            user_id,
            last_login_at=now,
            avatar=current.avatar or avatar,
            updated_at=now,
        )

    async def record_failed_login(
        self, user_id: UserId, now: datetime, policy: LockoutPolicy
    ) -> User:
        user = self._get(user_id).after_failed_login(now, policy)
        self._users[user_id] = user
        return user

    async def record_successful_login(
        self, user_id: UserId, now: datetime, ip: Optional[str]
    ) -> User:
        user = self._get(user_id).after_successful_login(now, ip)
        self._users[user_id] = user
        return user

    async def add_refresh_token(
        self, user_id: UserId, entry: RefreshTokenEntry, max_tokens: int
    ) -> User:
        user = self._get(user_id).with_refresh_token(entry, max_tokens)
        self._users[user_id] = user
        return user

    async def remove_refresh_token(self, user_id: UserId, token: str) -> bool:
        user = self._get(user_id)
        if user.refresh_token_entry(token) is None:
            return False
        self._users[user_id] = user.without_refresh_token(token)
        return True

    async def rotate_refresh_token(
        self,
        user_id: UserId,
        old_token: str,
        new_entry: RefreshTokenEntry,
        max_tokens: int,
    ) -> bool:
        user = self._get(user_id)
        if user.refresh_token_entry(old_token) is None:
            return False
        self._users[user_id] = user.without_refresh_token(old_token).with_refresh_token(
            new_entry, max_tokens
        )
        return True

    async def clear_refresh_tokens(self, user_id: UserId) -> None:
        self._users[user_id] = self._get(user_id).without_refresh_tokens()

    async def unlock(self, user_id: UserId) -> None:
        user = self._get(user_id)
        self._users[user_id] = user.model_copy(
            update={"failed_login_count": 0, "locked_until": None}
        )

    async def unlock_all(self) -> int:
        count = 0
        for user_id, user in list(self._users.items()):
            if user.failed_login_count > 0 or user.locked_until is not None:
                self._users[user_id] = user.model_copy(
                    update={"failed_login_count": 0, "locked_until": None}
                )
                count += 1
        return count
