"""Unit tests for model helpers that need no database."""

import pytest

from smartnote.core.models import Note, NoteStatus, Tag
from smartnote.core.models.note import TITLE_MAX_LENGTH, truncate_text
from smartnote.core.models.note_version import strip_html


class TestTruncateText:
    def test_short_text_unchanged(self):
        assert truncate_text("hello", 10) == "hello"
        assert truncate_text("x" * 10, 10) == "x" * 10

    def test_long_text_ends_with_ellipsis(self):
        result = truncate_text("x" * 1500, TITLE_MAX_LENGTH)

        assert len(result) == TITLE_MAX_LENGTH
        assert result == "x" * 997 + "..."

    def test_none_passes_through(self):
        assert truncate_text(None, 10) is None


class TestNoteStatus:
    @pytest.mark.parametrize("raw", ["URGENT", "urgent", " Urgent ", NoteStatus.URGENT])
    def test_parse_accepts_names(self, raw):
        assert NoteStatus.parse(raw) is NoteStatus.URGENT

    @pytest.mark.parametrize("raw", ["LATER", "", None, 3])
    def test_parse_rejects_others(self, raw):
        with pytest.raises(ValueError):
            NoteStatus.parse(raw)

    def test_values_are_names(self):
        assert [s.value for s in NoteStatus] == ["REGULAR", "URGENT", "IDEAS", "COMPLETED"]


class TestTagNormalization:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Work", "work"),
            ("  Machine   Learning ", "machine-learning"),
            ("C++ & Rust!", "c--rust"),
            ("to-do", "to-do"),
            ("Ünïcödé", "ünïcödé"),
            ("", ""),
            ("!!!", ""),
        ],
    )
    def test_normalize_name(self, raw, expected):
        assert Tag.normalize_name(raw) == expected

    def test_normalize_is_idempotent(self):
        once = Tag.normalize_name("  Project  Alpha #2 ")
        assert Tag.normalize_name(once) == once

    def test_normalize_caps_length(self):
        assert len(Tag.normalize_name("a" * 80)) == 50


class TestNoteModel:
    def test_tag_names_follow_tags(self):
        note = Note(title="n", tags=[Tag(name="a"), Tag(name="b")])

        assert note.tag_names == ["a", "b"]

    def test_repr_shortens_title(self):
        assert repr(Note(title="t" * 40, user_id=1)) == "<Note(title='" + "t" * 30 + "...', user_id=1)>"


class TestHtml:
    def test_strip_html(self):
        assert strip_html("<p>Hello <b>big</b>\n world</p>") == "Hello big world"
        assert strip_html(None) == ""
