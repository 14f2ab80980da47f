"""Note version schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..models.note import TITLE_MAX_LENGTH, truncate_text
from .common import ReadModel


class VersionSnapshot(BaseModel):
    """Content captured by a version."""

    title: str = Field(default="")
    content: str = Field(default="")
    html_content: Optional[str] = Field(default=None)

    @field_validator("title")
    @classmethod
    def truncate_title(cls, v):
        return truncate_text(v, TITLE_MAX_LENGTH)


class NoteVersionRead(ReadModel):
    """Stored snapshot of a note."""

    id: int
    note_id: int
    version_number: int
    title: str = ""
    content: str = ""
    html_content: Optional[str] = None
    change_description: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def label(self) -> str:
        return f"Version {self.version_number}"

    @property
    def snapshot(self) -> VersionSnapshot:
        return VersionSnapshot(title=self.title, content=self.content, html_content=self.html_content)
