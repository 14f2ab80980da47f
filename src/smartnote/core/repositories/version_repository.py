"""Version repository - numbered content snapshots of a user's notes."""

import logging
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import NotFoundError, StoreError, ValidationError
from ..models.base import utcnow
from ..models.note import Note
from ..models.note_version import NoteVersion
from ..schemas.notes import NoteContentUpdate, NoteRead
from ..schemas.versions import NoteVersionRead, VersionSnapshot
from .base import ScopedRepository
from .note_repository import apply_content_update

logger = logging.getLogger(__name__)

# attempts at claiming the next version number before giving up
MAX_NUMBERING_ATTEMPTS = 3


class VersionRepository(ScopedRepository):
    """Repository for note versions, scoped to the owner of the notes."""

    def _owned_note_ids(self):
        return select(Note.id).where(Note.user_id == self.user_id)

    def _owned(self, *criteria):
        return select(NoteVersion).where(NoteVersion.note_id.in_(self._owned_note_ids()), *criteria)

    async def _load_note(self, session: AsyncSession, note_id: int, refresh: bool = False) -> Note:
        stmt = select(Note).where(Note.id == note_id, Note.user_id == self.user_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        note = await session.scalar(stmt)
        if note is None:
            raise NotFoundError("Note", note_id)
        return note

    async def _insert_version(
        self,
        session: AsyncSession,
        note: Note,
        snapshot: Optional[VersionSnapshot],
        change_description: Optional[str],
    ) -> NoteVersion:
        if snapshot is None:
            snapshot = VersionSnapshot(title=note.title, content=note.content, html_content=note.html_content)

        latest = await session.scalar(
            select(func.max(NoteVersion.version_number)).where(NoteVersion.note_id == note.id)
        )
        version = NoteVersion(
            note_id=note.id,
            version_number=(latest or 0) + 1,
            title=snapshot.title,
            content=snapshot.content,
            html_content=snapshot.html_content,
            change_description=change_description,
            created_by=self.user_id,
            created_at=utcnow(),
        )
        session.add(version)
        await session.flush()
        return version

    async def create_version(
        self,
        note_id: int,
        snapshot: Optional[VersionSnapshot] = None,
        change_description: Optional[str] = None,
    ) -> NoteVersionRead:
        """Store a snapshot as the next version of a note.

        Without an explicit snapshot the note's current content is captured.
        Two writers racing for the same number collide on the unique
        (note_id, version_number) constraint; the loser retries.
        """
        if change_description is not None and len(change_description) > 500:
            raise ValidationError("Change description is too long", field="change_description")

        for attempt in range(1, MAX_NUMBERING_ATTEMPTS + 1):
            try:
                async with self.database.transaction("create version") as session:
                    note = await self._load_note(session, note_id)
                    version = await self._insert_version(session, note, snapshot, change_description)
                    created = NoteVersionRead.model_validate(version)
            except StoreError as e:
                if not isinstance(e.__cause__, IntegrityError) or attempt == MAX_NUMBERING_ATTEMPTS:
                    raise
                logger.info(f"Version number taken for note {note_id}, retrying (attempt {attempt})")
                continue

            logger.info(f"Created version {created.version_number} of note {note_id}")
            return created

        raise StoreError(f"Could not number a new version of note {note_id}", operation="create version")

    async def list_versions(
        self, note_id: int, newest_first: bool = True, limit: Optional[int] = None
    ) -> List[NoteVersionRead]:
        """Versions of an owned note; empty for notes of other users."""
        order = NoteVersion.version_number.desc() if newest_first else NoteVersion.version_number.asc()
        stmt = self._owned(NoteVersion.note_id == note_id).order_by(order)
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self.database.transaction("list versions") as session:
            result = await session.execute(stmt)
            return [NoteVersionRead.model_validate(v) for v in result.scalars().all()]

    async def get_version(self, version_id: int) -> Optional[NoteVersionRead]:
        async with self.database.transaction("get version") as session:
            version = await session.scalar(self._owned(NoteVersion.id == version_id))
            return NoteVersionRead.model_validate(version) if version is not None else None

    async def get_latest(self, note_id: int) -> Optional[NoteVersionRead]:
        versions = await self.list_versions(note_id, newest_first=True, limit=1)
        return versions[0] if versions else None

    async def count_versions(self, note_id: int) -> int:
        stmt = select(func.count(NoteVersion.id)).where(
            NoteVersion.note_id == note_id,
            NoteVersion.note_id.in_(self._owned_note_ids()),
        )
        async with self.database.transaction("count versions") as session:
            return (await session.scalar(stmt)) or 0

    async def rollback(self, note_id: int, version_id: int) -> NoteRead:
        """Restore a note's content from one of its versions.

        The content being replaced is saved as a new version first, so a
        rollback can itself be undone.
        """
        async with self.database.transaction("rollback note") as session:
            note = await self._load_note(session, note_id)
            target = await session.scalar(
                select(NoteVersion).where(NoteVersion.id == version_id, NoteVersion.note_id == note_id)
            )
            if target is None:
                raise NotFoundError("NoteVersion", version_id)

            await self._insert_version(
                session, note, None, f"Before rollback to version {target.version_number}"
            )
            changes = NoteContentUpdate(
                title=target.title, content=target.content, html_content=target.html_content
            )
            await apply_content_update(session, note_id, self.user_id, changes)

            restored = NoteRead.model_validate(await self._load_note(session, note_id, refresh=True))

        logger.info(f"Rolled back note {note_id} to version {target.version_number}")
        return restored

    async def delete_version(self, version_id: int) -> bool:
        """Delete one snapshot; remaining versions keep their numbers."""
        async with self.database.transaction("delete version") as session:
            result = await session.execute(
                delete(NoteVersion)
                .where(NoteVersion.id == version_id, NoteVersion.note_id.in_(self._owned_note_ids()))
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    async def prune(self, note_id: int, keep: int) -> int:
        """Keep the newest `keep` versions of a note; returns how many were deleted."""
        if keep < 0:
            raise ValidationError("keep must not be negative", field="keep", value=keep)

        async with self.database.transaction("prune versions") as session:
            stale = (
                select(NoteVersion.id)
                .where(NoteVersion.note_id == note_id, NoteVersion.note_id.in_(self._owned_note_ids()))
                .order_by(NoteVersion.version_number.desc())
                .offset(keep)
            )
            stale_ids = list((await session.scalars(stale)).all())
            if not stale_ids:
                return 0
            await session.execute(
                delete(NoteVersion)
                .where(NoteVersion.id.in_(stale_ids))
                .execution_options(synchronize_session=False)
            )

        logger.info(f"Pruned {len(stale_ids)} old versions of note {note_id}")
        return len(stale_ids)
