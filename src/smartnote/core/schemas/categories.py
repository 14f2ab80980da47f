"""Category schemas."""

from datetime import datetime
from typing import Optional

from .common import ReadModel


class CategoryRead(ReadModel):
    id: int
    name: str
    color: str = "#3498db"
    description: Optional[str] = None
    created_at: Optional[datetime] = None
