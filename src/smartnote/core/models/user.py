"""
User model for authentication.
"""

from sqlalchemy import Boolean, CheckConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, IdMixin, UpdatedAtMixin


class User(IdMixin, UpdatedAtMixin, BaseModel):
    """User account model with username/password auth."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        # Enforce max lengths at DB level (SQLite compatible)
        CheckConstraint("length(username) <= 50", name="ck_users_username_len"),
        CheckConstraint(
            "full_name IS NULL OR length(full_name) <= 100", name="ck_users_full_name_len"
        ),
        Index("idx_users_email", "email"),
        Index("idx_users_active", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<User(username='{self.username}')>"
