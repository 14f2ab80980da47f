"""
Pydantic schemas for store payloads and read models.
"""

from .auth import PasswordChange, RegisterRequest, UserProfileUpdate, UserRead
from .categories import CategoryRead
from .common import ReadModel, check_color, require_color, validate_payload
from .notes import (
    ContentSuggestions,
    NoteContentUpdate,
    NoteCreate,
    NoteRead,
    NoteStatistics,
    NoteUpdate,
)
from .tags import TagRead
from .versions import NoteVersionRead, VersionSnapshot

__all__ = [
    # Common
    "ReadModel",
    "validate_payload",
    "check_color",
    "require_color",
    # Users
    "RegisterRequest",
    "PasswordChange",
    "UserProfileUpdate",
    "UserRead",
    # Categories
    "CategoryRead",
    # Notes
    "NoteCreate",
    "NoteUpdate",
    "NoteContentUpdate",
    "NoteRead",
    "NoteStatistics",
    "ContentSuggestions",
    # Tags
    "TagRead",
    # Versions
    "VersionSnapshot",
    "NoteVersionRead",
]
