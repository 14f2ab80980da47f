"""Repository layer for data access."""

from .base import ScopedRepository, require_owner
from .category_repository import CategoryRepository
from .note_repository import NoteRepository
from .tag_repository import TagRepository
from .user_repository import UserRepository
from .version_repository import VersionRepository

__all__ = [
    "ScopedRepository",
    "require_owner",
    "UserRepository",
    "CategoryRepository",
    "NoteRepository",
    "TagRepository",
    "VersionRepository",
]
