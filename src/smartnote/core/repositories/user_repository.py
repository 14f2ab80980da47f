"""User repository for database operations."""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from ..exceptions import DuplicateError, StoreError, ValidationError
from ..models.base import utcnow
from ..models.user import User
from ..schemas.auth import UserProfileUpdate, UserRead
from ..schemas.common import validate_payload

logger = logging.getLogger(__name__)


def _require_hash(password_hash: Optional[str]) -> str:
    if not password_hash:
        raise ValidationError("A password hash is required", field="password_hash")
    return password_hash


class UserRepository:
    """Repository for user accounts. Not scoped: it is how owners are found."""

    def __init__(self, database):
        self.database = database

    async def _update(self, operation: str, user_id: int, **values) -> bool:
        values["updated_at"] = utcnow()
        async with self.database.transaction(operation) as session:
            result = await session.execute(
                update(User)
                .where(User.id == user_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    async def _get_where(self, operation: str, *criteria) -> Optional[UserRead]:
        async with self.database.transaction(operation) as session:
            user = await session.scalar(select(User).where(*criteria))
            return UserRead.model_validate(user) if user is not None else None

    async def authenticate(self, username: str, password_hash: str) -> Optional[UserRead]:
        """Active user with exactly this username and stored hash, else None."""
        if not username or not password_hash:
            return None
        return await self._get_where(
            "authenticate",
            User.username == username,
            User.password_hash == password_hash,
            User.is_active.is_(True),
        )

    async def get_credentials(self, username: str) -> Optional[Tuple[UserRead, str]]:
        """Active user and stored hash, for verifying a password in the service layer."""
        if not username:
            return None
        async with self.database.transaction("get credentials") as session:
            user = await session.scalar(
                select(User).where(User.username == username, User.is_active.is_(True))
            )
            if user is None:
                return None
            return UserRead.model_validate(user), user.password_hash

    async def username_exists(self, username: str, exclude_user_id: Optional[int] = None) -> bool:
        """Check if username is taken, optionally ignoring one account."""
        stmt = select(func.count(User.id)).where(User.username == username)
        if exclude_user_id is not None:
            stmt = stmt.where(User.id != exclude_user_id)
        async with self.database.transaction("check username") as session:
            return bool(await session.scalar(stmt))

    async def create(
        self,
        username: str,
        password_hash: str,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> UserRead:
        """Create new user."""
        profile = validate_payload(UserProfileUpdate, username=username, email=email, full_name=full_name)
        password_hash = _require_hash(password_hash)

        if await self.username_exists(profile.username):
            raise DuplicateError("User", "username", profile.username)

        now = utcnow()
        user = User(
            username=profile.username,
            password_hash=password_hash,
            email=profile.email,
            full_name=profile.full_name,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        try:
            async with self.database.transaction("create user") as session:
                session.add(user)
                await session.flush()
                created = UserRead.model_validate(user)
        except StoreError as e:
            # lost a race with another registration of the same name
            if isinstance(e.__cause__, IntegrityError):
                raise DuplicateError("User", "username", profile.username) from e
            raise

        logger.info(f"Created user {created.id} ({created.username})")
        return created

    async def get(self, user_id: int) -> Optional[UserRead]:
        """Get user by ID."""
        return await self._get_where("get user", User.id == user_id)

    async def get_by_username(self, username: str) -> Optional[UserRead]:
        """Get user by username."""
        return await self._get_where("get user by username", User.username == username)

    async def get_by_email(self, email: str) -> Optional[UserRead]:
        if not email:
            return None
        return await self._get_where("get user by email", User.email == email)

    async def list_active(self) -> List[UserRead]:
        async with self.database.transaction("list users") as session:
            result = await session.execute(
                select(User).where(User.is_active.is_(True)).order_by(User.username)
            )
            return [UserRead.model_validate(u) for u in result.scalars().all()]

    async def update_profile(
        self,
        user_id: int,
        username: str,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> bool:
        """Update username, email and full name of an account."""
        profile = validate_payload(UserProfileUpdate, username=username, email=email, full_name=full_name)

        if await self.username_exists(profile.username, exclude_user_id=user_id):
            raise DuplicateError("User", "username", profile.username)

        try:
            changed = await self._update(
                "update profile",
                user_id,
                username=profile.username,
                email=profile.email,
                full_name=profile.full_name,
            )
        except StoreError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise DuplicateError("User", "username", profile.username) from e
            raise

        if not changed:
            logger.warning(f"Profile update for unknown user {user_id}")
        return changed

    async def update_password(self, user_id: int, password_hash: str) -> bool:
        return await self._update("update password", user_id, password_hash=_require_hash(password_hash))

    async def deactivate(self, user_id: int) -> bool:
        """Soft delete: the account stays but can no longer log in."""
        changed = await self._update("deactivate user", user_id, is_active=False)
        if changed:
            logger.info(f"Deactivated user {user_id}")
        return changed
