"""Tag schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from ..models.tag import Tag
from .common import ReadModel


class TagRead(ReadModel):
    """Tag with its usage count derived from the association table."""

    id: int
    user_id: int
    name: str
    color: str = "#95a5a6"
    usage_count: int = Field(default=0, description="Number of notes carrying this tag")
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, tag: Tag, usage_count: Optional[int] = 0) -> "TagRead":
        return cls.model_validate(tag).model_copy(update={"usage_count": usage_count or 0})

    @property
    def display_name(self) -> str:
        return f"#{self.name}"
