"""
User account schemas.

Registration input is validated here; password hashing happens in the
service layer, so repositories only ever see hashes.
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .common import ReadModel

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_username(v: str) -> str:
    v = v.strip()
    if not USERNAME_PATTERN.match(v):
        raise ValueError("Username can only contain letters, numbers, dots, hyphens, and underscores")
    return v


class RegisterRequest(BaseModel):
    """User registration request schema."""

    username: str = Field(min_length=3, max_length=50, description="Unique username")
    password: str = Field(min_length=6, max_length=128, description="User password")
    confirm_password: Optional[str] = Field(default=None, description="Password confirmation")
    email: Optional[str] = Field(default=None, max_length=255, description="Email (optional)")
    full_name: Optional[str] = Field(default=None, max_length=100, description="Full name (optional)")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        """Validate username format."""
        return _check_username(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if v is None or not v.strip():
            return None
        v = v.strip()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v

    @model_validator(mode="after")
    def passwords_match(self):
        """Validate that passwords match when a confirmation is given."""
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "new_user",
                "password": "secret123",
                "confirm_password": "secret123",
                "email": "new_user@example.com",
                "full_name": "New User",
            }
        }
    )


class UserProfileUpdate(BaseModel):
    """Profile edit payload."""

    username: str = Field(min_length=3, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=100)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        return _check_username(v)


class UserRead(ReadModel):
    """User record without credentials."""

    id: int = Field(description="User identifier")
    username: str = Field(description="Username")
    email: Optional[str] = Field(default=None, description="Email address")
    full_name: Optional[str] = Field(default=None, description="Full name")
    is_active: bool = Field(default=True, description="Whether user account is active")
    created_at: Optional[datetime] = Field(default=None, description="Account creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")

    @property
    def display_name(self) -> str:
        return self.full_name if self.full_name else self.username


class PasswordChange(BaseModel):
    """Password change payload."""

    current_password: str = Field(min_length=1, description="Current password")
    new_password: str = Field(min_length=6, max_length=128, description="New password")
    confirm_new_password: Optional[str] = Field(default=None, description="New password confirmation")

    @model_validator(mode="after")
    def passwords_match(self):
        if self.confirm_new_password is not None and self.confirm_new_password != self.new_password:
            raise ValueError("New passwords do not match")
        return self
