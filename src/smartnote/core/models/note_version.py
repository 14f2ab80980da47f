# Revision history for notes
import re
from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, IdMixin
from .note import TITLE_MAX_LENGTH

_HTML_TAG = re.compile(r"<[^>]*>")
_WHITESPACE_RUN = re.compile(r"\s+")


def strip_html(html: Optional[str]) -> str:
    """Plain text of an HTML fragment, whitespace collapsed."""
    if not html:
        return ""
    return _WHITESPACE_RUN.sub(" ", _HTML_TAG.sub(" ", html)).strip()


class NoteVersion(IdMixin, BaseModel):
    """Immutable snapshot of a note's content."""

    __tablename__ = "note_versions"

    note_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("notes.id", ondelete="CASCADE"), nullable=False
    )
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    html_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    change_description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("note_id", "version_number", name="uq_note_versions_note_number"),
        Index("idx_note_versions_note_id", "note_id"),
    )

    def __repr__(self) -> str:
        return f"<NoteVersion(note_id={self.note_id}, version_number={self.version_number})>"
