"""
Service interfaces for SmartNote.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, List, Optional, Union

from ..schemas.auth import UserRead
from ..schemas.notes import ContentSuggestions, NoteCreate, NoteRead


class IAuthService(ABC):
    """Auth service for user management."""

    @abstractmethod
    async def register(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> UserRead:
        """Register new user."""
        pass

    @abstractmethod
    async def login(self, username: str, password: str):
        """Check credentials and open a notebook session, None on failure."""
        pass

    @abstractmethod
    async def change_password(self, user_id: int, current_password: str, new_password: str) -> bool:
        """Change user password."""
        pass


class INoteService(ABC):
    """Editor-facing note operations for one session."""

    @abstractmethod
    async def open(self, note_id: int) -> Optional[NoteRead]:
        """Get a note and count the view."""
        pass

    @abstractmethod
    async def create_note(self, note: NoteCreate, tag_names: Optional[List[str]] = None) -> NoteRead:
        """Create new note with its tags."""
        pass

    @abstractmethod
    async def save(
        self,
        note_id: int,
        title: str,
        content: str,
        html_content: Optional[str] = None,
        summary: Optional[str] = None,
        tag_names: Optional[List[str]] = None,
        snapshot: bool = True,
    ) -> bool:
        """Save editor content, keeping the previous content as a version."""
        pass


class ContentAnalyzer(ABC):
    """Text analysis helper that proposes a summary, a title and tags.

    Implementations may be plain or async; an empty field in the result
    means there is nothing to suggest for it.
    """

    @abstractmethod
    def analyze(self, text: str) -> Union[ContentSuggestions, Awaitable[ContentSuggestions]]:
        pass
