"""Note repository for database operations."""

import logging
from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import and_, case, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..exceptions import ErrorCode, ValidationError
from ..models.base import utcnow
from ..models.category import Category
from ..models.note import Note
from ..models.note_version import NoteVersion
from ..models.tag import NoteTag
from ..models.types import NoteStatus
from ..schemas.common import validate_payload
from ..schemas.notes import NoteContentUpdate, NoteCreate, NoteRead, NoteStatistics, NoteUpdate
from .base import ScopedRepository

logger = logging.getLogger(__name__)

_UNSET: Any = object()


def keyword_filter(keyword: Optional[str]):
    """Case-insensitive substring match on title, content or summary.

    The keyword is matched as given, surrounding spaces included. Returns
    None for an empty or blank keyword so callers can skip the clause.
    """
    if keyword is None or not keyword.strip():
        return None
    return or_(
        Note.title.icontains(keyword, autoescape=True),
        Note.content.icontains(keyword, autoescape=True),
        Note.summary.icontains(keyword, autoescape=True),
    )


def parse_status(status) -> NoteStatus:
    try:
        return NoteStatus.parse(status)
    except ValueError as e:
        raise ValidationError(str(e), field="status", value=status, code=ErrorCode.INVALID_STATUS) from e


async def apply_content_update(
    session: AsyncSession, note_id: int, user_id: int, changes: NoteContentUpdate
) -> bool:
    """Write title/content (and html/summary when set) of an owned note.

    Shared by NoteRepository.update_content and version rollback so both go
    through the same ownership filter inside the caller's transaction.
    """
    values = changes.model_dump(include={"title", "content"} | changes.model_fields_set)
    values["updated_at"] = utcnow()
    stmt = (
        update(Note)
        .where(Note.id == note_id, Note.user_id == user_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount > 0


class NoteRepository(ScopedRepository):
    """Repository for note database operations, scoped to one owner."""

    def _owned(self, *criteria):
        return and_(Note.user_id == self.user_id, *criteria)

    def _listing(self, *criteria):
        return (
            select(Note)
            .where(self._owned(*criteria))
            .order_by(Note.updated_at.desc(), Note.id.desc())
        )

    async def _list(self, operation: str, *criteria) -> List[NoteRead]:
        async with self.database.transaction(operation) as session:
            result = await session.execute(self._listing(*criteria))
            return [NoteRead.model_validate(note) for note in result.scalars().all()]

    async def _update(self, operation: str, note_id: int, **values) -> bool:
        values.setdefault("updated_at", utcnow())
        stmt = (
            update(Note)
            .where(self._owned(Note.id == note_id))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self.database.transaction(operation) as session:
            result = await session.execute(stmt)
            changed = result.rowcount > 0

        if not changed:
            logger.warning(f"{operation}: note {note_id} not found or not owned by user {self.user_id}")
        return changed

    @staticmethod
    async def _check_category(session: AsyncSession, category_id: Optional[int]) -> None:
        if category_id is not None and await session.get(Category, category_id) is None:
            raise ValidationError("Unknown category", field="category_id", value=category_id)

    # -- writes ------------------------------------------------------------

    async def create(self, note: Union[NoteCreate, Mapping[str, Any]]) -> int:
        """Insert a note for the bound owner and return its new id."""
        if not isinstance(note, NoteCreate):
            note = validate_payload(NoteCreate, **note)

        now = utcnow()
        row = Note(
            user_id=self.user_id,
            category_id=note.category_id,
            title=note.title,
            content=note.content,
            html_content=note.html_content,
            summary=note.summary,
            status=note.status,
            is_favorite=note.is_favorite,
            is_archived=False,
            color=note.color or get_settings().default_note_color,
            view_count=0,
            created_at=now,
            updated_at=now,
        )

        async with self.database.transaction("create note") as session:
            await self._check_category(session, note.category_id)
            session.add(row)
            await session.flush()
            note_id = row.id

        logger.info(f"Created note {note_id} for user {self.user_id}")
        return note_id

    async def update(self, note_id: int, data: Union[NoteUpdate, Mapping[str, Any]]) -> bool:
        """Overwrite every editable column of an owned note."""
        if not isinstance(data, NoteUpdate):
            data = validate_payload(NoteUpdate, **data)

        stmt = (
            update(Note)
            .where(self._owned(Note.id == note_id))
            .values(
                category_id=data.category_id,
                title=data.title,
                content=data.content,
                html_content=data.html_content,
                summary=data.summary,
                status=data.status,
                is_favorite=data.is_favorite,
                is_archived=data.is_archived,
                color=data.color or get_settings().default_note_color,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        async with self.database.transaction("update note") as session:
            await self._check_category(session, data.category_id)
            result = await session.execute(stmt)
            changed = result.rowcount > 0

        if not changed:
            logger.warning(f"Note {note_id} not found or not owned by user {self.user_id}")
        return changed

    async def update_content(
        self,
        note_id: int,
        title: str,
        content: str,
        html_content: Optional[str] = _UNSET,
        summary: Optional[str] = _UNSET,
    ) -> bool:
        """Update only the content fields; status and flags are untouched."""
        fields = {"title": title, "content": content}
        if html_content is not _UNSET:
            fields["html_content"] = html_content
        if summary is not _UNSET:
            fields["summary"] = summary
        changes = validate_payload(NoteContentUpdate, **fields)

        async with self.database.transaction("update note content") as session:
            changed = await apply_content_update(session, note_id, self.user_id, changes)

        if not changed:
            logger.warning(f"Note {note_id} not found or not owned by user {self.user_id}")
        return changed

    async def toggle_favorite(self, note_id: int) -> bool:
        """Flip the favorite flag in a single statement."""
        flipped = case((Note.is_favorite.is_(True), False), else_=True)
        return await self._update("toggle favorite", note_id, is_favorite=flipped)

    async def update_status(self, note_id: int, status: Union[NoteStatus, str]) -> bool:
        return await self._update("update status", note_id, status=parse_status(status))

    async def archive(self, note_id: int) -> bool:
        """Soft delete; archiving an archived note succeeds."""
        return await self._update("archive note", note_id, is_archived=True)

    async def restore(self, note_id: int) -> bool:
        return await self._update("restore note", note_id, is_archived=False)

    async def increment_view_count(self, note_id: int) -> bool:
        # keep updated_at as is, a view is not an edit
        return await self._update(
            "increment view count",
            note_id,
            view_count=Note.view_count + 1,
            updated_at=Note.updated_at,
        )

    async def delete_permanently(self, note_id: int) -> bool:
        """Remove the note with its tag links and version history."""
        async with self.database.transaction("delete note") as session:
            owned = await session.scalar(select(Note.id).where(self._owned(Note.id == note_id)))
            if owned is None:
                logger.warning(f"Note {note_id} not found or not owned by user {self.user_id}")
                return False

            tag_links = await session.execute(delete(NoteTag).where(NoteTag.note_id == note_id))
            versions = await session.execute(delete(NoteVersion).where(NoteVersion.note_id == note_id))
            await session.execute(delete(Note).where(self._owned(Note.id == note_id)))

        logger.info(
            f"Deleted note {note_id} with {tag_links.rowcount} tag links "
            f"and {versions.rowcount} versions"
        )
        return True

    # -- reads -------------------------------------------------------------

    async def get(self, note_id: int) -> Optional[NoteRead]:
        """Get note by id if owned by the bound user."""
        async with self.database.transaction("get note") as session:
            note = await session.scalar(select(Note).where(self._owned(Note.id == note_id)))
            return NoteRead.model_validate(note) if note is not None else None

    async def list_active(self) -> List[NoteRead]:
        return await self._list("list notes", Note.is_archived.is_(False))

    async def list_by_status(self, status: Union[NoteStatus, str]) -> List[NoteRead]:
        return await self._list(
            "list notes by status", Note.status == parse_status(status), Note.is_archived.is_(False)
        )

    async def list_by_category(self, category_id: int) -> List[NoteRead]:
        return await self._list(
            "list notes by category", Note.category_id == category_id, Note.is_archived.is_(False)
        )

    async def list_favorites(self) -> List[NoteRead]:
        return await self._list(
            "list favorite notes", Note.is_favorite.is_(True), Note.is_archived.is_(False)
        )

    async def list_archived(self) -> List[NoteRead]:
        return await self._list("list archived notes", Note.is_archived.is_(True))

    async def search(self, keyword: Optional[str]) -> List[NoteRead]:
        """Search non-archived notes; an empty keyword matches everything."""
        criteria = [Note.is_archived.is_(False)]
        match = keyword_filter(keyword)
        if match is not None:
            criteria.append(match)
        return await self._list("search notes", *criteria)

    async def search_advanced(
        self,
        keyword: Optional[str] = None,
        status: Optional[Union[NoteStatus, str]] = None,
        category_id: Optional[int] = None,
        favorite_only: Optional[bool] = None,
    ) -> List[NoteRead]:
        """Keyword search AND'd with each filter that is set."""
        criteria = [Note.is_archived.is_(False)]
        match = keyword_filter(keyword)
        if match is not None:
            criteria.append(match)
        if status is not None:
            criteria.append(Note.status == parse_status(status))
        if category_id is not None:
            criteria.append(Note.category_id == category_id)
        if favorite_only:
            criteria.append(Note.is_favorite.is_(True))
        return await self._list("advanced search", *criteria)

    async def count(self) -> int:
        """Number of non-archived notes."""
        stmt = select(func.count(Note.id)).where(self._owned(Note.is_archived.is_(False)))
        async with self.database.transaction("count notes") as session:
            return (await session.scalar(stmt)) or 0

    async def get_statistics(self) -> NoteStatistics:
        """Per-status and favorite counts over non-archived notes."""
        active = Note.is_archived.is_(False)

        def _count_where(condition):
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        stmt = select(
            _count_where(active).label("total"),
            _count_where(and_(active, Note.status == NoteStatus.REGULAR)).label("regular"),
            _count_where(and_(active, Note.status == NoteStatus.URGENT)).label("urgent"),
            _count_where(and_(active, Note.status == NoteStatus.IDEAS)).label("ideas"),
            _count_where(and_(active, Note.status == NoteStatus.COMPLETED)).label("completed"),
            _count_where(and_(active, Note.is_favorite.is_(True))).label("favorites"),
            _count_where(Note.is_archived.is_(True)).label("archived"),
        ).where(Note.user_id == self.user_id)

        async with self.database.transaction("note statistics") as session:
            row = (await session.execute(stmt)).one()
        return NoteStatistics(**row._mapping)
