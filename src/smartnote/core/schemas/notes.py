"""
Note schemas.

Write payloads normalize oversized titles and summaries (silent truncation)
and coerce status names; read models are the only place a note row is
turned into a value handed back to callers.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..models.note import SUMMARY_MAX_LENGTH, TITLE_MAX_LENGTH, truncate_text
from ..models.types import NoteStatus
from .common import ReadModel, check_color


class _ContentFields(BaseModel):
    """Title/summary normalization shared by write payloads."""

    @field_validator("title", check_fields=False)
    @classmethod
    def truncate_title(cls, v):
        return truncate_text(v, TITLE_MAX_LENGTH)

    @field_validator("summary", check_fields=False)
    @classmethod
    def truncate_summary(cls, v):
        return truncate_text(v, SUMMARY_MAX_LENGTH)


class NoteCreate(_ContentFields):
    """Note creation payload."""

    title: str = Field(default="", description="Note title, truncated beyond 1000 chars")
    content: str = Field(default="", description="Plain-text content")
    html_content: Optional[str] = Field(default=None, description="Rich (HTML) content")
    summary: Optional[str] = Field(default=None, description="Summary, truncated beyond 2000 chars")
    status: NoteStatus = Field(default=NoteStatus.REGULAR)
    category_id: Optional[int] = Field(default=None, ge=1)
    is_favorite: bool = Field(default=False)
    color: Optional[str] = Field(default=None, description="Hex color, store default when omitted")

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return NoteStatus.parse(v)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        return check_color(v)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Groceries",
                "content": "milk, eggs, bread",
                "status": "REGULAR",
                "is_favorite": False,
            }
        }
    )


class NoteUpdate(NoteCreate):
    """Full-record update payload; every column is overwritten."""

    is_archived: bool = Field(default=False)


class NoteContentUpdate(_ContentFields):
    """Content-only update; html_content and summary are left alone unless set."""

    title: str = Field(default="")
    content: str = Field(default="")
    html_content: Optional[str] = Field(default=None)
    summary: Optional[str] = Field(default=None)


class NoteRead(ReadModel):
    """Note as seen by its owner."""

    id: int
    user_id: int
    category_id: Optional[int] = None
    title: str = ""
    content: str = ""
    html_content: Optional[str] = None
    summary: Optional[str] = None
    status: NoteStatus = NoteStatus.REGULAR
    is_favorite: bool = False
    is_archived: bool = False
    color: str = "#ffffff"
    view_count: int = 0
    tags: List[str] = Field(default_factory=list, validation_alias=AliasChoices("tag_names", "tags"))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def preview(self) -> str:
        if len(self.content) <= 150:
            return self.content
        return self.content[:147] + "..."


class NoteStatistics(BaseModel):
    """Aggregate counts over a user's non-archived notes."""

    total: int = 0
    regular: int = 0
    urgent: int = 0
    ideas: int = 0
    completed: int = 0
    favorites: int = 0
    archived: int = 0

    def by_status(self) -> dict:
        return {
            NoteStatus.REGULAR: self.regular,
            NoteStatus.URGENT: self.urgent,
            NoteStatus.IDEAS: self.ideas,
            NoteStatus.COMPLETED: self.completed,
        }


class ContentSuggestions(BaseModel):
    """Output of the external text analyzer; any part may be empty."""

    summary: str = ""
    title: str = ""
    tags: List[str] = Field(default_factory=list)
