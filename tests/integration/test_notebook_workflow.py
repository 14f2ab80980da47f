"""End-to-end notebook workflows: register, log in, edit, tag, version, clean up."""

import pytest

from smartnote.core.models import NoteStatus
from smartnote.core.schemas import ContentSuggestions, NoteCreate, NoteUpdate
from smartnote.core.services import AuthService, ContentAnalyzer, NoteService


class KeywordAnalyzer(ContentAnalyzer):
    """Tiny stand-in for the text analysis helper."""

    def analyze(self, text):
        words = [w.strip(".,").lower() for w in text.split()]
        return ContentSuggestions(
            summary=text.split(".")[0],
            title=" ".join(words[:2]).title(),
            tags=sorted({w for w in words if len(w) > 6}),
        )


@pytest.fixture
async def two_users(database):
    auth = AuthService(database)
    await auth.register("ann", "annsecret")
    await auth.register("ben", "bensecret")
    ann = await auth.login("ann", "annsecret")
    ben = await auth.login("ben", "bensecret")
    return ann, ben


class TestNotebookWorkflow:
    async def test_full_editing_session(self, two_users, test_settings):
        ann, _ = two_users
        service = NoteService(ann, settings=test_settings)

        note = await service.create_note(
            NoteCreate(title="Groceries", content="milk, eggs"), tag_names=["Shopping"]
        )
        await service.save(note.id, "Groceries", "milk, eggs, bread", tag_names=["shopping", "weekly"])
        await service.save(note.id, "Groceries (sat)", "milk, eggs, bread, jam")
        await ann.notes.toggle_favorite(note.id)
        await ann.notes.update_status(note.id, NoteStatus.URGENT)

        current = await service.open(note.id)
        assert current.title == "Groceries (sat)"
        assert current.tags == ["shopping", "weekly"]
        assert current.is_favorite is True
        assert current.view_count == 1

        history = await ann.versions.list_versions(note.id, newest_first=False)
        assert [v.content for v in history] == ["milk, eggs", "milk, eggs, bread"]

        restored = await ann.versions.rollback(note.id, history[0].id)
        assert restored.content == "milk, eggs"
        assert restored.status is NoteStatus.URGENT
        assert await ann.versions.count_versions(note.id) == 3

        stats = await ann.notes.get_statistics()
        assert (stats.total, stats.urgent, stats.favorites) == (1, 1, 1)

        popular = await ann.tags.list_popular()
        assert {t.name for t in popular} == {"shopping", "weekly"}

        assert await ann.notes.delete_permanently(note.id) is True
        assert await ann.versions.list_versions(note.id) == []
        assert all(t.usage_count == 0 for t in await ann.tags.list_for_user())

    async def test_users_never_see_each_other(self, two_users):
        ann, ben = two_users
        note_id = await ann.notes.create(NoteCreate(title="Groceries", status=NoteStatus.REGULAR))

        assert await ben.notes.get(note_id) is None
        assert await ben.notes.update(note_id, NoteUpdate(title="Mine now")) is False
        assert await ben.tags.sync_note_tags(note_id, ["stolen"]) == []
        assert await ben.versions.list_versions(note_id) == []

        note = await ann.notes.get(note_id)
        assert note.title == "Groceries"
        assert note.tags == []

    async def test_tag_replace_never_duplicates_links(self, two_users):
        ann, _ = two_users
        note_id = await ann.notes.create(NoteCreate(title="n"))
        t1 = await ann.tags.find_or_create("  Work ")
        t2 = await ann.tags.find_or_create("home")

        assert (await ann.tags.find_or_create("work")).id == t1.id

        await ann.tags.replace_note_tags(note_id, [])
        assert await ann.tags.list_for_note(note_id) == []

        await ann.tags.replace_note_tags(note_id, [t1.id, t2.id])
        await ann.tags.replace_note_tags(note_id, [t1.id])

        linked = await ann.tags.list_for_note(note_id)
        assert [t.id for t in linked] == [t1.id]
        assert linked[0].usage_count == 1

    async def test_three_versions_then_rollback_to_first(self, two_users):
        ann, _ = two_users
        note_id = await ann.notes.create(NoteCreate(title="v", content="one"))
        created = []
        for content in ("one", "two", "three"):
            await ann.notes.update_content(note_id, "v", content)
            created.append(await ann.versions.create_version(note_id))

        assert [v.version_number for v in created] == [1, 2, 3]

        restored = await ann.versions.rollback(note_id, created[0].id)
        assert (restored.title, restored.content, restored.html_content) == (
            created[0].title,
            created[0].content,
            created[0].html_content,
        )

    async def test_title_truncated_to_1000(self, two_users):
        ann, _ = two_users
        note_id = await ann.notes.create(NoteCreate(title="a" * 1050))

        title = (await ann.notes.get(note_id)).title
        assert title == "a" * 997 + "..."

    async def test_suggestions_feed_summary_and_tags(self, two_users, test_settings):
        ann, _ = two_users
        service = NoteService(ann, settings=test_settings)
        note = await service.create_note(
            NoteCreate(title="Draft", content="Planning garden project. Buy seedlings tomorrow.")
        )

        await service.apply_suggestions(note.id, KeywordAnalyzer(), use_title=True)

        updated = await ann.notes.get(note.id)
        assert updated.summary == "Planning garden project"
        assert updated.title == "Planning Garden"
        assert updated.tags == ["planning", "project", "seedlings", "tomorrow"]
