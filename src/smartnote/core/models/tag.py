# Tag models for organizing notes
import re

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint, event
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, IdMixin

TAG_NAME_MAX_LENGTH = 50

_WHITESPACE_RUN = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^\w\-]")


class Tag(IdMixin, BaseModel):
    """Per-user label for notes."""

    __tablename__ = "tags"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(TAG_NAME_MAX_LENGTH), nullable=False)
    color: Mapped[str] = mapped_column(String(7), default="#95a5a6", nullable=False)  # hex colors

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_tags_user_name"),
        Index("idx_tags_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Tag(name='{self.name}')>"

    @classmethod
    def normalize_name(cls, name: str) -> str:
        """Clean up tag name.

        Trims, case-folds, turns each whitespace run into a single hyphen and
        drops anything that is not a word character or hyphen. Returns an
        empty string when nothing usable is left.
        """
        if not name:
            return ""
        clean = _WHITESPACE_RUN.sub("-", name.strip().casefold())
        clean = _DISALLOWED.sub("", clean)
        return clean[:TAG_NAME_MAX_LENGTH]


# Always store the normalized name on ORM inserts and updates
@event.listens_for(Tag, "before_insert", propagate=True)
def _normalize_tag_name_before_insert(mapper, connection, target: Tag):
    target.name = Tag.normalize_name(target.name)


@event.listens_for(Tag, "before_update", propagate=True)
def _normalize_tag_name_before_update(mapper, connection, target: Tag):
    target.name = Tag.normalize_name(target.name)


class NoteTag(BaseModel):
    """Links notes to tags."""

    __tablename__ = "note_tags"

    note_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("notes.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )

    __table_args__ = (
        Index("idx_note_tags_tag_id", "tag_id"),
    )

    def __repr__(self) -> str:
        return f"<NoteTag(note_id={self.note_id}, tag_id={self.tag_id})>"
