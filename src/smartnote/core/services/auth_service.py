"""Authentication service implementation."""

import logging
from typing import Optional

from ...security import hash_password, identify, needs_update, verify_password
from ..repositories.user_repository import UserRepository
from ..schemas.auth import PasswordChange, RegisterRequest, UserRead
from ..schemas.common import validate_payload
from .interfaces import IAuthService
from .session import NotebookSession

logger = logging.getLogger(__name__)


class AuthService(IAuthService):
    """Authentication service implementation."""

    def __init__(self, database):
        self.database = database
        self.user_repo = UserRepository(database)

    def _verify(self, username: str, password: str, password_hash: str) -> bool:
        try:
            return verify_password(password, password_hash)
        except ValueError:
            # unreadable stored hash, treat like a wrong password
            logger.warning(f"Stored password hash for '{username}' could not be identified")
            return False

    async def register(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> UserRead:
        """Register new user."""
        request = validate_payload(
            RegisterRequest, username=username, password=password, email=email, full_name=full_name
        )
        return await self.user_repo.create(
            request.username,
            hash_password(request.password),
            email=request.email,
            full_name=request.full_name,
        )

    async def login(self, username: str, password: str) -> Optional[NotebookSession]:
        """Login user and open their notebook.

        Unknown users, inactive users and wrong passwords all give None.
        """
        if not username or not password:
            return None

        found = await self.user_repo.get_credentials(username.strip())
        if found is None:
            logger.info("Login failed")
            return None

        user, password_hash = found
        if not self._verify(user.username, password, password_hash):
            logger.info("Login failed")
            return None

        # Upgrade hashes made with deprecated settings
        if needs_update(password_hash):
            logger.info(f"Upgrading {identify(password_hash)} password hash of user {user.id}")
            await self.user_repo.update_password(user.id, hash_password(password))

        logger.info(f"User {user.id} logged in")
        return self.open_session(user)

    def open_session(self, user: UserRead) -> NotebookSession:
        return NotebookSession.open(self.database, user)

    async def change_password(self, user_id: int, current_password: str, new_password: str) -> bool:
        """Change user password. False when the current password is wrong."""
        request = validate_payload(
            PasswordChange, current_password=current_password, new_password=new_password
        )

        user = await self.user_repo.get(user_id)
        if user is None:
            return False
        found = await self.user_repo.get_credentials(user.username)
        if found is None:
            return False

        _, password_hash = found
        if not self._verify(user.username, request.current_password, password_hash):
            logger.info(f"Password change for user {user_id} rejected")
            return False

        return await self.user_repo.update_password(user_id, hash_password(request.new_password))
