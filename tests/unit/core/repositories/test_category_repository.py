"""Tests for CategoryRepository."""

import pytest

from smartnote.core.exceptions import DuplicateError, ValidationError


class TestCategories:
    async def test_create_and_get(self, category_repo):
        category = await category_repo.create("  Work ", description="Job stuff")

        assert category.name == "Work"
        assert category.color == "#3498db"
        assert (await category_repo.get(category.id)).description == "Job stuff"

    async def test_list_all_alphabetical(self, category_repo):
        for name in ("Travel", "Home", "Work"):
            await category_repo.create(name)

        assert [c.name for c in await category_repo.list_all()] == ["Home", "Travel", "Work"]

    async def test_duplicate_name(self, category_repo):
        await category_repo.create("Work")

        with pytest.raises(DuplicateError):
            await category_repo.create("Work")

    @pytest.mark.parametrize("name", ["", "   ", "x" * 101])
    async def test_invalid_name(self, category_repo, name):
        with pytest.raises(ValidationError):
            await category_repo.create(name)

    async def test_invalid_color(self, category_repo):
        with pytest.raises(ValidationError):
            await category_repo.create("Colors", color="blue")

    async def test_update(self, category_repo):
        category = await category_repo.create("Old")

        assert await category_repo.update(category.id, name="New", color="#ABCDEF") is True

        updated = await category_repo.get(category.id)
        assert (updated.name, updated.color) == ("New", "#abcdef")

    async def test_update_to_taken_name(self, category_repo):
        await category_repo.create("Taken")
        category = await category_repo.create("Free")

        with pytest.raises(DuplicateError):
            await category_repo.update(category.id, name="Taken")

    async def test_update_missing(self, category_repo):
        assert await category_repo.update(999, name="x") is False
        assert await category_repo.update(999) is False

    async def test_delete_keeps_notes(self, category_repo, notes, make_note):
        category = await category_repo.create("Temporary")
        note_id = await make_note("filed", category_id=category.id)
        before = await notes.get(note_id)

        assert await category_repo.delete(category.id) is True

        after = await notes.get(note_id)
        assert after is not None
        assert after.category_id is None
        assert after.updated_at == before.updated_at
        assert await category_repo.get(category.id) is None

    async def test_delete_missing(self, category_repo):
        assert await category_repo.delete(999) is False
