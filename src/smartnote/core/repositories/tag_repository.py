"""Tag repository for database operations."""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..exceptions import DuplicateError, ErrorCode, StoreError, ValidationError
from ..models.base import utcnow
from ..models.note import Note
from ..models.tag import NoteTag, Tag
from ..schemas.common import require_color
from ..schemas.tags import TagRead
from .base import ScopedRepository

logger = logging.getLogger(__name__)

MAX_SYNC_ATTEMPTS = 3


def normalize_tag_name(raw_name: Optional[str]) -> str:
    """Normalize a user supplied tag name, rejecting names with nothing left."""
    name = Tag.normalize_name(raw_name or "")
    if not name:
        raise ValidationError(
            "Tag name is empty after normalization",
            field="name",
            value=raw_name,
            code=ErrorCode.INVALID_TAG_NAME,
        )
    return name


def _caused_by_integrity_error(error: StoreError) -> bool:
    return isinstance(error.__cause__, IntegrityError)


class TagRepository(ScopedRepository):
    """Repository for a user's tags and their links to notes."""

    def _usage_select(self, *criteria):
        """Tags of the bound user with their number of linked notes."""
        usage = func.count(NoteTag.note_id).label("usage_count")
        return (
            select(Tag, usage)
            .outerjoin(NoteTag, NoteTag.tag_id == Tag.id)
            .where(Tag.user_id == self.user_id, *criteria)
            .group_by(Tag.id)
        )

    async def _fetch(self, session: AsyncSession, stmt) -> List[TagRead]:
        result = await session.execute(stmt)
        return [TagRead.from_row(tag, usage) for tag, usage in result.all()]

    async def _fetch_one(self, session: AsyncSession, *criteria) -> Optional[TagRead]:
        rows = await self._fetch(session, self._usage_select(*criteria))
        return rows[0] if rows else None

    async def _owns_note(self, session: AsyncSession, note_id: int) -> bool:
        found = await session.scalar(
            select(Note.id).where(Note.id == note_id, Note.user_id == self.user_id)
        )
        return found is not None

    async def _owns_tag(self, session: AsyncSession, tag_id: int) -> bool:
        found = await session.scalar(
            select(Tag.id).where(Tag.id == tag_id, Tag.user_id == self.user_id)
        )
        return found is not None

    async def _existing_ids(self, session: AsyncSession, names: List[str]) -> Dict[str, int]:
        result = await session.execute(
            select(Tag.name, Tag.id).where(Tag.user_id == self.user_id, Tag.name.in_(names))
        )
        return {name: tag_id for name, tag_id in result.all()}

    async def _resolve_names(
        self, session: AsyncSession, names: List[str], color: str
    ) -> Dict[str, int]:
        """Map normalized names to tag ids, inserting the missing ones."""
        ids = await self._existing_ids(session, names)

        for name in names:
            if name in ids:
                continue
            tag = Tag(user_id=self.user_id, name=name, color=color, created_at=utcnow())
            session.add(tag)
            await session.flush()
            ids[name] = tag.id
            logger.debug(f"Created tag '{name}' for user {self.user_id}")
        return ids

    async def _replace_links(self, session: AsyncSession, note_id: int, tag_ids: Iterable[int]) -> None:
        await session.execute(delete(NoteTag).where(NoteTag.note_id == note_id))
        rows = [{"note_id": note_id, "tag_id": tag_id} for tag_id in dict.fromkeys(tag_ids)]
        if rows:
            await session.execute(insert(NoteTag), rows)

    # -- lookups -----------------------------------------------------------

    async def find_or_create(self, raw_name: str, color: Optional[str] = None) -> TagRead:
        """Get the tag with this name, creating it on first use.

        A unique violation on insert means another writer created the same
        tag first; the existing row is fetched and returned.
        """
        name = normalize_tag_name(raw_name)
        color = require_color(color) or get_settings().default_tag_color

        try:
            async with self.database.transaction("find or create tag") as session:
                existing = await self._fetch_one(session, Tag.name == name)
                if existing is not None:
                    return existing

                tag = Tag(user_id=self.user_id, name=name, color=color, created_at=utcnow())
                session.add(tag)
                await session.flush()
                logger.info(f"Created tag '{name}' for user {self.user_id}")
                return TagRead.from_row(tag, 0)
        except StoreError as e:
            if not _caused_by_integrity_error(e):
                raise

        logger.info(f"Tag '{name}' was created concurrently, fetching it")
        found = await self.find_by_name(name)
        if found is None:
            raise StoreError(f"Tag '{name}' vanished after a conflicting insert", operation="find or create tag")
        return found

    async def get(self, tag_id: int) -> Optional[TagRead]:
        async with self.database.transaction("get tag") as session:
            return await self._fetch_one(session, Tag.id == tag_id)

    async def find_by_name(self, raw_name: str) -> Optional[TagRead]:
        """Look up a tag by name; the name is normalized first."""
        name = Tag.normalize_name(raw_name or "")
        if not name:
            return None
        async with self.database.transaction("find tag") as session:
            return await self._fetch_one(session, Tag.name == name)

    # -- note links --------------------------------------------------------

    async def attach(self, note_id: int, tag_id: int) -> bool:
        """Link a tag to a note. Linking twice is a no-op."""
        async with self.database.transaction("attach tag") as session:
            if not (await self._owns_note(session, note_id) and await self._owns_tag(session, tag_id)):
                logger.warning(f"Cannot attach tag {tag_id} to note {note_id} for user {self.user_id}")
                return False

            if await session.get(NoteTag, (note_id, tag_id)) is None:
                session.add(NoteTag(note_id=note_id, tag_id=tag_id))
        return True

    async def detach(self, note_id: int, tag_id: int) -> bool:
        """Unlink a tag from a note. Unlinking an absent link succeeds."""
        async with self.database.transaction("detach tag") as session:
            if not (await self._owns_note(session, note_id) and await self._owns_tag(session, tag_id)):
                return False
            await session.execute(
                delete(NoteTag).where(NoteTag.note_id == note_id, NoteTag.tag_id == tag_id)
            )
        return True

    async def replace_note_tags(self, note_id: int, tag_ids: Iterable[int]) -> bool:
        """Make tag_ids the complete tag set of a note.

        Nothing changes when the note or any of the tags is not owned by the
        bound user.
        """
        wanted = list(dict.fromkeys(tag_ids))

        async with self.database.transaction("replace note tags") as session:
            if not await self._owns_note(session, note_id):
                logger.warning(f"Note {note_id} not found or not owned by user {self.user_id}")
                return False

            if wanted:
                owned = await session.scalar(
                    select(func.count(Tag.id)).where(Tag.user_id == self.user_id, Tag.id.in_(wanted))
                )
                if owned != len(wanted):
                    logger.warning(f"Rejected foreign tag ids for note {note_id}: {wanted}")
                    return False

            await self._replace_links(session, note_id, wanted)

        logger.debug(f"Note {note_id} now has tags {wanted}")
        return True

    async def sync_note_tags(self, note_id: int, raw_names: Iterable[str]) -> List[TagRead]:
        """Set a note's tags by name, creating missing tags.

        Names that normalize to nothing are skipped. Returns the note's tags
        after the change, or an empty list when the note is not owned.

        A unique violation while creating a tag means another writer created
        it first. Nothing has been committed at that point, so the whole sync
        is run again and picks up the existing row.
        """
        names = list(dict.fromkeys(n for n in (Tag.normalize_name(raw or "") for raw in raw_names) if n))
        color = get_settings().default_tag_color

        for attempt in range(1, MAX_SYNC_ATTEMPTS + 1):
            try:
                async with self.database.transaction("sync note tags") as session:
                    if not await self._owns_note(session, note_id):
                        logger.warning(f"Note {note_id} not found or not owned by user {self.user_id}")
                        return []

                    ids = await self._resolve_names(session, names, color)
                    await self._replace_links(session, note_id, (ids[name] for name in names))

                    return await self._fetch(
                        session,
                        self._usage_select(Tag.id.in_(list(ids.values()))).order_by(Tag.name),
                    )
            except StoreError as e:
                if not _caused_by_integrity_error(e) or attempt == MAX_SYNC_ATTEMPTS:
                    raise
                logger.info(f"Tag created concurrently while syncing note {note_id}, retrying (attempt {attempt})")

        raise StoreError(f"Could not sync tags of note {note_id}", operation="sync note tags")

    # -- listings ----------------------------------------------------------

    async def list_for_note(self, note_id: int) -> List[TagRead]:
        linked = select(NoteTag.tag_id).join(Note, Note.id == NoteTag.note_id).where(
            NoteTag.note_id == note_id, Note.user_id == self.user_id
        )
        async with self.database.transaction("list note tags") as session:
            return await self._fetch(session, self._usage_select(Tag.id.in_(linked)).order_by(Tag.name))

    async def list_for_user(self) -> List[TagRead]:
        async with self.database.transaction("list tags") as session:
            return await self._fetch(session, self._usage_select().order_by(Tag.name))

    async def search(self, keyword: Optional[str]) -> List[TagRead]:
        """Tags whose name contains the keyword, case-insensitively."""
        criteria = []
        if keyword and keyword.strip():
            criteria.append(Tag.name.icontains(keyword, autoescape=True))
        async with self.database.transaction("search tags") as session:
            return await self._fetch(session, self._usage_select(*criteria).order_by(Tag.name))

    async def list_popular(self, limit: Optional[int] = None) -> List[TagRead]:
        """Most used tags first, ties broken by name."""
        if limit is None:
            limit = get_settings().popular_tags_limit
        if limit <= 0:
            return []
        stmt = self._usage_select().order_by(func.count(NoteTag.note_id).desc(), Tag.name).limit(limit)
        async with self.database.transaction("list popular tags") as session:
            return await self._fetch(session, stmt)

    # -- maintenance -------------------------------------------------------

    async def update(self, tag_id: int, name: Optional[str] = None, color: Optional[str] = None) -> bool:
        """Rename and/or recolor a tag."""
        values = {}
        if name is not None:
            values["name"] = normalize_tag_name(name)
        if color is not None:
            values["color"] = require_color(color)
        if not values:
            return await self.get(tag_id) is not None

        async with self.database.transaction("update tag") as session:
            if "name" in values:
                clash = await session.scalar(
                    select(Tag.id).where(
                        Tag.user_id == self.user_id, Tag.name == values["name"], Tag.id != tag_id
                    )
                )
                if clash is not None:
                    raise DuplicateError("Tag", "name", values["name"])

            result = await session.execute(
                update(Tag)
                .where(Tag.id == tag_id, Tag.user_id == self.user_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    async def delete(self, tag_id: int) -> bool:
        """Delete a tag and unlink it from every note."""
        async with self.database.transaction("delete tag") as session:
            if not await self._owns_tag(session, tag_id):
                return False
            links = await session.execute(delete(NoteTag).where(NoteTag.tag_id == tag_id))
            await session.execute(delete(Tag).where(Tag.id == tag_id, Tag.user_id == self.user_id))

        logger.info(f"Deleted tag {tag_id} and {links.rowcount} note links")
        return True
