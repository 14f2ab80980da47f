"""Category repository. Categories are shared, so nothing here is scoped."""

import logging
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from ..exceptions import DuplicateError, StoreError, ValidationError
from ..models.base import utcnow
from ..models.category import Category
from ..models.note import Note
from ..schemas.categories import CategoryRead
from ..schemas.common import require_color

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_COLOR = "#3498db"


def _clean_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required", field="name")
    if len(name) > 100:
        raise ValidationError("Category name is too long", field="name", value=name)
    return name


class CategoryRepository:
    """Repository for note categories."""

    def __init__(self, database):
        self.database = database

    async def _name_taken(self, session, name: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(func.count(Category.id)).where(Category.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        return bool(await session.scalar(stmt))

    async def list_all(self) -> List[CategoryRead]:
        async with self.database.transaction("list categories") as session:
            result = await session.execute(select(Category).order_by(Category.name))
            return [CategoryRead.model_validate(c) for c in result.scalars().all()]

    async def get(self, category_id: int) -> Optional[CategoryRead]:
        async with self.database.transaction("get category") as session:
            category = await session.get(Category, category_id)
            return CategoryRead.model_validate(category) if category is not None else None

    async def create(
        self, name: str, color: Optional[str] = None, description: Optional[str] = None
    ) -> CategoryRead:
        name = _clean_name(name)
        category = Category(
            name=name,
            color=require_color(color) or DEFAULT_CATEGORY_COLOR,
            description=description,
            created_at=utcnow(),
        )
        try:
            async with self.database.transaction("create category") as session:
                if await self._name_taken(session, name):
                    raise DuplicateError("Category", "name", name)
                session.add(category)
                await session.flush()
                created = CategoryRead.model_validate(category)
        except StoreError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise DuplicateError("Category", "name", name) from e
            raise

        logger.info(f"Created category {created.id} ({name})")
        return created

    async def update(
        self,
        category_id: int,
        name: Optional[str] = None,
        color: Optional[str] = None,
        description: Optional[str] = None,
    ) -> bool:
        """Change whichever of name, color and description are given."""
        values = {}
        if name is not None:
            values["name"] = _clean_name(name)
        if color is not None:
            values["color"] = require_color(color)
        if description is not None:
            values["description"] = description
        if not values:
            return await self.get(category_id) is not None

        async with self.database.transaction("update category") as session:
            if "name" in values and await self._name_taken(session, values["name"], exclude_id=category_id):
                raise DuplicateError("Category", "name", values["name"])
            result = await session.execute(
                update(Category)
                .where(Category.id == category_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    async def delete(self, category_id: int) -> bool:
        """Delete a category; its notes stay, uncategorized."""
        async with self.database.transaction("delete category") as session:
            category = await session.get(Category, category_id)
            if category is None:
                return False
            cleared = await session.execute(
                update(Note)
                .where(Note.category_id == category_id)
                .values(category_id=None, updated_at=Note.updated_at)
                .execution_options(synchronize_session=False)
            )
            await session.delete(category)

        logger.info(f"Deleted category {category_id}, {cleared.rowcount} notes uncategorized")
        return True
