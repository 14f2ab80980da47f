# Category model - shared folders for notes
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, IdMixin


class Category(IdMixin, BaseModel):
    """Note category, shared by every user."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    color: Mapped[str] = mapped_column(String(7), default="#3498db", nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Category(name='{self.name}')>"
