"""Per-user bundle of scoped stores."""

from dataclasses import dataclass

from ..repositories.note_repository import NoteRepository
from ..repositories.tag_repository import TagRepository
from ..repositories.version_repository import VersionRepository
from ..schemas.auth import UserRead


@dataclass(frozen=True)
class NotebookSession:
    """Stores bound to one logged-in user.

    Built once at login; every store filters by ``user.id`` so nothing
    reachable from a session can touch another user's rows.
    """

    user: UserRead
    notes: NoteRepository
    tags: TagRepository
    versions: VersionRepository

    @classmethod
    def open(cls, database, user: UserRead) -> "NotebookSession":
        return cls(
            user=user,
            notes=NoteRepository(database, user.id),
            tags=TagRepository(database, user.id),
            versions=VersionRepository(database, user.id),
        )

    @property
    def user_id(self) -> int:
        return self.user.id
