"""Unit tests for the error hierarchy."""

from smartnote.core.exceptions import (
    DuplicateError,
    ErrorCode,
    NotebookError,
    NotFoundError,
    StoreError,
    StoreUnavailableError,
    ValidationError,
)


class TestErrors:
    def test_validation_error_details(self):
        error = ValidationError("Bad status", field="status", value="LATER", code=ErrorCode.INVALID_STATUS)

        assert error.code is ErrorCode.INVALID_STATUS
        assert error.details == {"field": "status", "value": "LATER"}
        assert str(error) == "[INVALID_STATUS] Bad status (field=status, value=LATER)"

    def test_default_codes(self):
        assert ValidationError("x").code is ErrorCode.VALIDATION_FAILED
        assert NotFoundError("Note", 1).code is ErrorCode.NOT_FOUND
        assert DuplicateError("Tag", "name", "work").code is ErrorCode.DUPLICATE
        assert StoreError("x").code is ErrorCode.STORE_FAILED
        assert StoreUnavailableError("x").code is ErrorCode.STORE_UNAVAILABLE

    def test_hierarchy(self):
        assert issubclass(StoreUnavailableError, StoreError)
        for cls in (ValidationError, NotFoundError, DuplicateError, StoreError):
            assert issubclass(cls, NotebookError)

    def test_not_found_message(self):
        error = NotFoundError("Note", 42)

        assert error.message == "Note '42' not found"
        assert error.entity == "Note"
        assert error.entity_id == 42

    def test_to_dict(self):
        data = DuplicateError("User", "username", "alice").to_dict()

        assert data == {
            "error": "DuplicateError",
            "code": 3001,
            "code_name": "DUPLICATE",
            "message": "User with username 'alice' already exists",
            "details": {"entity": "User", "field": "username", "value": "alice"},
        }

    def test_message_without_details(self):
        assert str(StoreError("disk full")) == "[STORE_FAILED] disk full"
