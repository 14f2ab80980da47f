"""Note service implementation."""

import inspect
import logging
from typing import List, Optional

from ...config import Settings, get_settings
from ..exceptions import NotFoundError
from ..models.note_version import strip_html
from ..models.types import NoteStatus
from ..schemas.notes import ContentSuggestions, NoteCreate, NoteRead
from .interfaces import ContentAnalyzer, INoteService
from .session import NotebookSession

logger = logging.getLogger(__name__)

QUICK_TITLE_WORDS = 12
DEFAULT_TITLE = "New note"


def title_from_text(text: Optional[str]) -> str:
    """First words of text as a title, first letter capitalized."""
    words = (text or "").split()
    if not words:
        return DEFAULT_TITLE
    title = " ".join(words[:QUICK_TITLE_WORDS])
    return title[0].upper() + title[1:]


class NoteService(INoteService):
    """Editor workflows on top of a session's stores."""

    def __init__(self, session: NotebookSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()

    async def _analyze(self, analyzer: ContentAnalyzer, text: str) -> ContentSuggestions:
        suggestions = analyzer.analyze(text)
        if inspect.isawaitable(suggestions):
            suggestions = await suggestions
        return suggestions

    @property
    def notes(self):
        return self.session.notes

    @property
    def tags(self):
        return self.session.tags

    @property
    def versions(self):
        return self.session.versions

    async def open(self, note_id: int) -> Optional[NoteRead]:
        """Get a note for display and count the view."""
        note = await self.notes.get(note_id)
        if note is None:
            return None
        await self.notes.increment_view_count(note_id)
        return note.model_copy(update={"view_count": note.view_count + 1})

    async def create_note(self, note: NoteCreate, tag_names: Optional[List[str]] = None) -> NoteRead:
        """Create new note."""
        note_id = await self.notes.create(note)
        if tag_names:
            await self.tags.sync_note_tags(note_id, tag_names)

        created = await self.notes.get(note_id)
        if created is None:
            raise NotFoundError("Note", note_id)
        return created

    async def quick_note(
        self,
        content: str,
        html_content: Optional[str] = None,
        analyzer: Optional[ContentAnalyzer] = None,
    ) -> NoteRead:
        """Create a note from content alone, deriving its title.

        The analyzer's title suggestion is used when there is one, else the
        first words of the text.
        """
        text = strip_html(html_content) if html_content else content
        title = ""
        if analyzer is not None and text.strip():
            title = (await self._analyze(analyzer, text)).title.strip()
        return await self.create_note(
            NoteCreate(title=title or title_from_text(text), content=content, html_content=html_content)
        )

    async def mark_completed(self, note_id: int) -> bool:
        return await self.notes.update_status(note_id, NoteStatus.COMPLETED)

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
        """Save editor content.

        The content being replaced is stored as a version first, but only
        when it actually differs. html_content and summary are kept as they
        are when not given. Tags are replaced when tag_names is given.
        """
        current = await self.notes.get(note_id)
        if current is None:
            logger.warning(f"Save of unknown note {note_id} by user {self.session.user_id}")
            return False

        extra = {}
        if html_content is not None:
            extra["html_content"] = html_content
        if summary is not None:
            extra["summary"] = summary

        changed = (current.title, current.content) != (title, content) or (
            html_content is not None and html_content != current.html_content
        )
        if snapshot and changed:
            await self.versions.create_version(note_id, change_description="Saved from editor")
            keep = self.settings.max_versions_per_note
            if keep:
                await self.versions.prune(note_id, keep)

        updated = await self.notes.update_content(note_id, title, content, **extra)
        if updated and tag_names is not None:
            await self.tags.sync_note_tags(note_id, tag_names)
        return updated

    async def apply_suggestions(
        self, note_id: int, analyzer: ContentAnalyzer, use_title: bool = False
    ) -> Optional[ContentSuggestions]:
        """Run the analyzer over a note and store what it suggests.

        A non-empty summary replaces the note's summary, suggested tags are
        added to the existing ones, and the title is only replaced when
        use_title is set. Returns None for a note the user does not own.
        """
        note = await self.notes.get(note_id)
        if note is None:
            return None

        text = note.content or strip_html(note.html_content)
        if not text.strip():
            return ContentSuggestions()

        suggestions = await self._analyze(analyzer, text)

        title = suggestions.title.strip() if use_title and suggestions.title.strip() else note.title
        summary = suggestions.summary.strip() or note.summary
        if (title, summary) != (note.title, note.summary):
            await self.notes.update_content(note_id, title, note.content, summary=summary)

        if suggestions.tags:
            await self.tags.sync_note_tags(note_id, note.tags + list(suggestions.tags))

        logger.debug(f"Applied suggestions to note {note_id}: {len(suggestions.tags)} tags")
        return suggestions
