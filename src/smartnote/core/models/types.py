"""Column types and enumerated values shared by models and schemas."""

import enum
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


class NoteStatus(str, enum.Enum):
    """Workflow status of a note."""

    REGULAR = "REGULAR"
    URGENT = "URGENT"
    IDEAS = "IDEAS"
    COMPLETED = "COMPLETED"

    @classmethod
    def parse(cls, value) -> "NoteStatus":
        """Coerce a status or its name, case-insensitively.

        Raises:
            ValueError: if the value is not one of the four statuses
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValueError(f"Invalid note status: {value!r}")


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamp on every backend.

    - PostgreSQL stores it as TIMESTAMP WITH TIME ZONE
    - SQLite has no zone support, so values are stored as naive UTC and
      tagged with UTC again when loaded
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
