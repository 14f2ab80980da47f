"""
Service layer: authentication and editor workflows over the scoped stores.
"""

from .auth_service import AuthService
from .interfaces import ContentAnalyzer, IAuthService, INoteService
from .note_service import NoteService
from .session import NotebookSession

__all__ = [
    # Interfaces
    "IAuthService",
    "INoteService",
    "ContentAnalyzer",
    # Implementations
    "AuthService",
    "NoteService",
    "NotebookSession",
]
