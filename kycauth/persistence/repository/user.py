"""PostgreSQL implementation of User repository."""

import asyncio
from datetime import datetime
from typing import Any, Optional

import logfire
from sqlalchemy import and_, case, delete, func, literal, null, or_, select
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from kycauth.domain.error import (
    DuplicateEmailError,
    NotFoundError,
    StoreUnavailableError,
)
from kycauth.domain.model import OAuthLink, RefreshTokenEntry, User
from kycauth.domain.repository import UserRepository
from kycauth.domain.value import LockoutPolicy, OAuthProviderName, UserId
from kycauth.persistence.mappers import (
    oauth_link_to_dict,
    row_to_user,
    user_profile_to_dict,
    user_to_dict,
)
from kycauth.persistence.tables import (
    refresh_tokens_table,
    user_oauth_links_table,
    users_table,
)

EMAIL_UNIQUE_INDEX = "uq_users_email_lower"


class PostgresUserRepository(UserRepository):
    """PostgreSQL implementation of UserRepository.

    All statements run inside the request session's transaction. Counter
    transitions are single ``UPDATE ... RETURNING`` statements; ledger and
    OAuth link changes lock the user row first.
    """

    def __init__(self, session: AsyncSession, timeout_seconds: float = 5.0) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
            timeout_seconds: Upper bound for every statement
        """
        self.session = session
        self.timeout_seconds = timeout_seconds

    async def _execute(self, stmt: Any):
        """Execute a statement, failing closed on timeouts and driver errors.

        Raises:
            StoreUnavailableError: On timeout or driver failure
            IntegrityError: On constraint violations (left to the caller)
        """
        try:
            return await asyncio.wait_for(
                self.session.execute(stmt), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            logfire.error("Credential store timed out", timeout=self.timeout_seconds)
            raise StoreUnavailableError("Credential store timed out") from e
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            logfire.error("Credential store failure", error_type=type(e).__name__)
            raise StoreUnavailableError("Credential store unavailable") from e

    async def _hydrate(self, row: Any) -> User:
        user_id = row["id"]
        links = await self._execute(
            select(user_oauth_links_table)
            .where(user_oauth_links_table.c.user_id == user_id)
            .order_by(user_oauth_links_table.c.id)
        )
        tokens = await self._execute(
            select(refresh_tokens_table)
            .where(refresh_tokens_table.c.user_id == user_id)
            .order_by(refresh_tokens_table.c.id)
        )
        return row_to_user(
            dict(row),
            [dict(r) for r in links.mappings().all()],
            [dict(r) for r in tokens.mappings().all()],
        )

    async def _find_one(self, stmt: Any) -> Optional[User]:
        result = await self._execute(stmt)
        row = result.mappings().first()
        return await self._hydrate(row) if row else None

    async def _lock_user_row(self, user_id: UserId) -> None:
        result = await self._execute(
            select(users_table.c.id).where(users_table.c.id == user_id).with_for_update()
        )
        if result.first() is None:
            raise NotFoundError("User", str(user_id))

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: User ID to look up

        Returns:
            User if found, None otherwise
        """
        return await self._find_one(select(users_table).where(users_table.c.id == user_id))

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by email, case-insensitively.

        Args:
            email: Email to search for

        Returns:
            User if found, None otherwise
        """
        return await self._find_one(
            select(users_table).where(
                func.lower(users_table.c.email) == email.strip().lower()
            )
        )

    async def find_by_oauth(
        self, provider: OAuthProviderName, provider_id: str
    ) -> Optional[User]:
        """Find the user holding an OAuth link.

        Args:
            provider: The identity provider
            provider_id: The user's ID on that provider

        Returns:
            User if found, None otherwise
        """
        stmt = (
            select(users_table)
            .select_from(
                users_table.join(
                    user_oauth_links_table,
                    users_table.c.id == user_oauth_links_table.c.user_id,
                )
            )
            .where(user_oauth_links_table.c.provider == provider.value)
            .where(user_oauth_links_table.c.provider_id == provider_id)
        )
        return await self._find_one(stmt)

    async def create(self, user: User) -> User:
        """Insert a new user with its links and tokens.

        The insert runs inside a savepoint so a duplicate email leaves the
        surrounding transaction usable.

        Raises:
            DuplicateEmailError: If the case-folded email is taken
        """
        try:
            async with self.session.begin_nested():
                await self._execute(users_table.insert().values(**user_to_dict(user)))
                for link in user.oauth_links:
                    await self._execute(
                        user_oauth_links_table.insert().values(
                            **oauth_link_to_dict(user.id, link)
                        )
                    )
                for entry in user.refresh_tokens:
                    await self._execute(
                        refresh_tokens_table.insert().values(
                            user_id=user.id,
                            token=entry.token,
                            created_at=entry.created_at,
                        )
                    )
        except IntegrityError as e:
            if EMAIL_UNIQUE_INDEX in str(e.orig):
                raise DuplicateEmailError(user.email.root) from e
            raise StoreUnavailableError("Could not create user") from e
        return user

    async def _update_returning(self, user_id: UserId, stmt: Any) -> User:
        result = await self._execute(stmt.returning(*users_table.c))
        row = result.mappings().first()
        if row is None:
            raise NotFoundError("User", str(user_id))
        return await self._hydrate(row)

    def _update_user(self, user_id: UserId, **values: Any) -> Any:
        return users_table.update().where(users_table.c.id == user_id).values(**values)

    async def save(self, user: User) -> User:
        """Persist the profile columns (name, date of birth, avatar) only.

        Raises:
            NotFoundError: If the user does not exist
        """
        return await self._update_returning(
            user.id, self._update_user(user.id, **user_profile_to_dict(user))
        )

    async def set_password_hash(
        self, user_id: UserId, password_hash: str, now: datetime
    ) -> User:
        return await self._update_returning(
            user_id,
            self._update_user(user_id, password_hash=password_hash, updated_at=now),
        )

    async def set_active(self, user_id: UserId, active: bool, now: datetime) -> User:
        return await self._update_returning(
            user_id, self._update_user(user_id, is_active=active, updated_at=now)
        )

    async def link_oauth(self, user_id: UserId, link: OAuthLink) -> User:
        """Upsert on ``(user_id, provider)`` under the user row lock.

        Raises:
            NotFoundError: If the user does not exist
            ValueError: If the identity is already linked to another user
        """
        await self._lock_user_row(user_id)
        values = oauth_link_to_dict(user_id, link)
        stmt = (
            pg_insert(user_oauth_links_table)
            .values(**values)
            .on_conflict_do_update(
                constraint="uq_oauth_user_provider",
                set_={
                    "provider_id": values["provider_id"],
                    "connected_at": values["connected_at"],
                },
            )
        )
        try:
            async with self.session.begin_nested():
                await self._execute(stmt)
        except IntegrityError as e:
            raise ValueError("OAuth identity already linked to another user") from e
        return await self._update_returning(
            user_id, self._update_user(user_id, updated_at=link.connected_at)
        )

    async def unlink_oauth(self, user_id: UserId, provider: OAuthProviderName) -> User:
        """Re-read the user under its row lock, check the last-method rule, delete."""
        await self._lock_user_row(user_id)
        user = await self.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        updated = user.without_oauth_link(provider)
        await self._execute(
            delete(user_oauth_links_table)
            .where(user_oauth_links_table.c.user_id == user_id)
            .where(user_oauth_links_table.c.provider == provider.value)
        )
        await self._execute(self._update_user(user_id, updated_at=updated.updated_at))
        return updated

    async def record_oauth_login(
        self, user_id: UserId, now: datetime, avatar: Optional[str]
    ) -> User:
        c = users_table.c
        return await self._update_returning(
            user_id,
            self._update_user(
                user_id,
                last_login_at=now,
                avatar=func.coalesce(c.avatar, avatar),
                updated_at=now,
            ),
        )

    async def record_failed_login(
        self, user_id: UserId, now: datetime, policy: LockoutPolicy
    ) -> User:
        """Apply one failed attempt in a single UPDATE.

        All SET expressions read the pre-update row, so increment,
        threshold check and expired-lock reset are evaluated together.
        """
        c = users_table.c
        now_param = literal(now, TIMESTAMP(timezone=True))
        lock_expiry = literal(policy.lock_expiry(now), TIMESTAMP(timezone=True))
        lock_expired = and_(c.locked_until.is_not(None), c.locked_until <= now_param)

        stmt = (
            users_table.update()
            .where(c.id == user_id)
            .values(
                failed_login_count=case(
                    (lock_expired, 1), else_=c.failed_login_count + 1
                ),
                locked_until=case(
                    (lock_expired, null()),
                    (
                        and_(
                            c.failed_login_count + 1 >= policy.max_attempts,
                            c.locked_until.is_(None),
                        ),
                        lock_expiry,
                    ),
                    else_=c.locked_until,
                ),
                updated_at=now_param,
            )
        )
        return await self._update_returning(user_id, stmt)

    async def record_successful_login(
        self, user_id: UserId, now: datetime, ip: Optional[str]
    ) -> User:
        stmt = (
            users_table.update()
            .where(users_table.c.id == user_id)
            .values(
                failed_login_count=0,
                locked_until=None,
                last_login_at=now,
                last_login_ip=ip,
                updated_at=now,
            )
        )
        return await self._update_returning(user_id, stmt)

    async def _trim_refresh_tokens(self, user_id: UserId, max_tokens: int) -> None:
        keep = (
            select(refresh_tokens_table.c.id)
            .where(refresh_tokens_table.c.user_id == user_id)
            .order_by(refresh_tokens_table.c.id.desc())
            .limit(max_tokens)
        )
        await self._execute(
            delete(refresh_tokens_table)
            .where(refresh_tokens_table.c.user_id == user_id)
            .where(refresh_tokens_table.c.id.not_in(keep.scalar_subquery()))
        )

    async def _insert_refresh_token(
        self, user_id: UserId, entry: RefreshTokenEntry
    ) -> None:
        await self._execute(
            refresh_tokens_table.insert().values(
                user_id=user_id, token=entry.token, created_at=entry.created_at
            )
        )

    async def add_refresh_token(
        self, user_id: UserId, entry: RefreshTokenEntry, max_tokens: int
    ) -> User:
        await self._lock_user_row(user_id)
        await self._insert_refresh_token(user_id, entry)
        await self._trim_refresh_tokens(user_id, max_tokens)
        user = await self.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        return user

    async def remove_refresh_token(self, user_id: UserId, token: str) -> bool:
        result = await self._execute(
            delete(refresh_tokens_table)
            .where(refresh_tokens_table.c.user_id == user_id)
            .where(refresh_tokens_table.c.token == token)
        )
        return result.rowcount > 0

    async def rotate_refresh_token(
        self,
        user_id: UserId,
        old_token: str,
        new_entry: RefreshTokenEntry,
        max_tokens: int,
    ) -> bool:
        await self._lock_user_row(user_id)
        removed = await self.remove_refresh_token(user_id, old_token)
        if not removed:
            return False
        await self._insert_refresh_token(user_id, new_entry)
        await self._trim_refresh_tokens(user_id, max_tokens)
        return True

    async def clear_refresh_tokens(self, user_id: UserId) -> None:
        await self._execute(
            delete(refresh_tokens_table).where(refresh_tokens_table.c.user_id == user_id)
        )

    async def unlock(self, user_id: UserId) -> None:
        await self._execute(
            users_table.update()
            .where(users_table.c.id == user_id)
            .values(failed_login_count=0, locked_until=None)
        )

    async def unlock_all(self) -> int:
        result = await self._execute(
            users_table.update()
            .where(
                or_(
                    users_table.c.failed_login_count > 0,
                    users_table.c.locked_until.is_not(None),
                )
            )
            .values(failed_login_count=0, locked_until=None)
        )
        return result.rowcount
