"""Base class for repositories bound to one owning user."""

from typing import TYPE_CHECKING

from ..exceptions import ErrorCode, ValidationError

if TYPE_CHECKING:
    from ...database import Database


def require_owner(user_id) -> int:
    """Return user_id if it is a positive integer, else raise ValidationError."""
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
        raise ValidationError(
            "A positive owner id is required",
            field="user_id",
            value=user_id,
            code=ErrorCode.OWNER_REQUIRED,
        )
    return user_id


class ScopedRepository:
    """Repository whose every query is filtered by the owner it was built for.

    There is no way to change the owner after construction; a different user
    needs a different repository instance.
    """

    def __init__(self, database: "Database", user_id: int):
        self._database = database
        self._user_id = require_owner(user_id)

    @property
    def database(self) -> "Database":
        return self._database

    @property
    def user_id(self) -> int:
        return self._user_id

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(user_id={self._user_id})>"
