"""
Shared schema helpers - read model base and payload validation
"""

import re
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError

T = TypeVar("T", bound=BaseModel)


class ReadModel(BaseModel):
    """Base for schemas mapped from ORM rows (one mapping per entity)."""

    model_config = ConfigDict(from_attributes=True, frozen=True)


def validate_payload(model: Type[T], **data: Any) -> T:
    """Build a schema from keyword data, raising the core ValidationError."""
    try:
        return model(**data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(first.get("msg", "Invalid input"), field=field, value=first.get("input")) from e


COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


def check_color(v: Optional[str]) -> Optional[str]:
    """Validate a #rrggbb color, lowercasing it."""
    if v is None:
        return v
    if not COLOR_PATTERN.match(v):
        raise ValueError("Color must be a hex value like #a1b2c3")
    return v.lower()


def require_color(v: Optional[str], field: str = "color") -> Optional[str]:
    """check_color for plain arguments, raising the core ValidationError."""
    try:
        return check_color(v)
    except ValueError as e:
        raise ValidationError(str(e), field=field, value=v) from e
