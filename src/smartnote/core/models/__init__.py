"""
Database models for the SmartNote core.

This package contains SQLAlchemy ORM models that define the database schema
for notes, their tags and revision history, and the users owning them.

Models included:
    - User: User account with username/password-hash authentication
    - Category: Shared note categories
    - Note: Note content, status and lifecycle flags
    - Tag: Per-user tag; NoteTag links notes and tags
    - NoteVersion: Immutable note snapshots
"""

from .base import BaseModel
from .category import Category
from .note import Note
from .note_version import NoteVersion
from .tag import NoteTag, Tag
from .types import NoteStatus
from .user import User

__all__ = [
    "BaseModel",
    "User",
    "Category",
    "Note",
    "NoteStatus",
    "Tag",
    "NoteTag",
    "NoteVersion",
]
