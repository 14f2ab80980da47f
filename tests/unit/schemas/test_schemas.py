"""Unit tests for payload validation and read models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from smartnote.core.exceptions import ValidationError
from smartnote.core.models import NoteStatus
from smartnote.core.schemas import (
    NoteContentUpdate,
    NoteCreate,
    NoteRead,
    NoteStatistics,
    PasswordChange,
    RegisterRequest,
    TagRead,
    VersionSnapshot,
    require_color,
    validate_payload,
)


class TestNoteCreate:
    def test_defaults(self):
        note = NoteCreate()

        assert note.title == ""
        assert note.status is NoteStatus.REGULAR
        assert note.is_favorite is False
        assert note.color is None

    def test_long_title_is_truncated(self):
        note = NoteCreate(title="t" * 1200)

        assert len(note.title) == 1000
        assert note.title.endswith("...")

    def test_long_summary_is_truncated(self):
        note = NoteCreate(summary="s" * 2500)

        assert len(note.summary) == 2000
        assert note.summary == "s" * 1997 + "..."

    def test_status_name_is_coerced(self):
        assert NoteCreate(status="ideas").status is NoteStatus.IDEAS

    def test_unknown_status_rejected(self):
        with pytest.raises(PydanticValidationError):
            NoteCreate(status="someday")

    def test_bad_color_rejected(self):
        with pytest.raises(PydanticValidationError):
            NoteCreate(color="red")

    def test_color_is_lowercased(self):
        assert NoteCreate(color="#AABBCC").color == "#aabbcc"


class TestNoteContentUpdate:
    def test_only_set_fields_are_tracked(self):
        changes = NoteContentUpdate(title="a", content="b")

        assert changes.model_fields_set == {"title", "content"}

    def test_title_truncated(self):
        assert len(NoteContentUpdate(title="x" * 1001).title) == 1000


class TestValidatePayload:
    def test_converts_to_core_error(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(NoteCreate, status="LATER")

        assert exc_info.value.field == "status"

    def test_returns_model(self):
        note = validate_payload(NoteCreate, title="ok")
        assert note.title == "ok"

    def test_require_color(self):
        assert require_color(None) is None
        assert require_color("#FFFFFF") == "#ffffff"
        with pytest.raises(ValidationError):
            require_color("#fff")


class TestRegisterRequest:
    def test_valid(self):
        request = RegisterRequest(username="new.user-1", password="secret1", email=" a@b.c ")

        assert request.username == "new.user-1"
        assert request.email == "a@b.c"

    @pytest.mark.parametrize("username", ["ab", "has space", "x" * 51, "semi;colon"])
    def test_bad_usernames(self, username):
        with pytest.raises(PydanticValidationError):
            RegisterRequest(username=username, password="secret1")

    def test_short_password(self):
        with pytest.raises(PydanticValidationError):
            RegisterRequest(username="newuser", password="12345")

    def test_password_confirmation_must_match(self):
        with pytest.raises(PydanticValidationError):
            RegisterRequest(username="newuser", password="secret1", confirm_password="secret2")

    def test_blank_email_becomes_none(self):
        assert RegisterRequest(username="newuser", password="secret1", email="  ").email is None

    def test_password_change_confirmation(self):
        with pytest.raises(PydanticValidationError):
            PasswordChange(current_password="old", new_password="secret1", confirm_new_password="other")


class TestReadModels:
    def test_note_read_accepts_tag_names_alias(self):
        note = NoteRead(id=1, user_id=2, tag_names=["a", "b"])
        assert note.tags == ["a", "b"]

    def test_note_read_is_frozen(self):
        note = NoteRead(id=1, user_id=2)
        with pytest.raises(PydanticValidationError):
            note.title = "changed"

    def test_note_read_preview(self):
        assert NoteRead(id=1, user_id=1, content="z" * 300).preview == "z" * 147 + "..."

    def test_tag_read_display_name(self):
        assert TagRead(id=1, user_id=1, name="work").display_name == "#work"

    def test_statistics_by_status(self):
        stats = NoteStatistics(total=3, regular=1, urgent=2)

        assert stats.by_status()[NoteStatus.URGENT] == 2
        assert stats.by_status()[NoteStatus.COMPLETED] == 0

    def test_snapshot_title_truncated(self):
        assert len(VersionSnapshot(title="v" * 2000).title) == 1000
