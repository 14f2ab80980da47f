# Note model for user content
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel, IdMixin, UpdatedAtMixin
from .types import NoteStatus

if TYPE_CHECKING:
    from .tag import Tag

TITLE_MAX_LENGTH = 1000
SUMMARY_MAX_LENGTH = 2000
ELLIPSIS = "..."


def truncate_text(value: Optional[str], limit: int) -> Optional[str]:
    """Cut value to limit characters, the last three being an ellipsis."""
    if value is None or len(value) <= limit:
        return value
    return value[: limit - len(ELLIPSIS)] + ELLIPSIS


class Note(IdMixin, UpdatedAtMixin, BaseModel):
    """Note owned by a single user."""

    __tablename__ = "notes"

    # owner reference, never changes after insert
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    html_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    summary: Mapped[Optional[str]] = mapped_column(String(SUMMARY_MAX_LENGTH), nullable=True)

    status: Mapped[NoteStatus] = mapped_column(
        Enum(NoteStatus, native_enum=False, length=20, validate_strings=True),
        default=NoteStatus.REGULAR,
        nullable=False,
    )
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    color: Mapped[str] = mapped_column(String(7), default="#ffffff", nullable=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # read side only, associations are written through note_tags rows
    tags: Mapped[List["Tag"]] = relationship(
        "Tag",
        secondary="note_tags",
        lazy="selectin",
        viewonly=True,
        order_by="Tag.name",
    )

    __table_args__ = (
        Index("idx_notes_user_archived_updated", "user_id", "is_archived", "updated_at"),
        Index("idx_notes_user_status", "user_id", "status"),
        Index("idx_notes_category", "category_id"),
    )

    def __repr__(self) -> str:
        truncated = self.title if len(self.title) <= 30 else (self.title[:30] + ELLIPSIS)
        return f"<Note(title='{truncated}', user_id={self.user_id})>"

    @property
    def tag_names(self) -> List[str]:
        """Names of the tags attached to this note, alphabetical."""
        return [tag.name for tag in self.tags]
