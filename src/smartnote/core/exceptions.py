"""Exception hierarchy for the SmartNote core.

Every error raised by the stores carries a machine-readable code and
a details mapping so callers can render or log it without parsing messages.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Error codes for machine-readable error identification."""

    # Validation errors (1xxx)
    VALIDATION_FAILED = 1001
    OWNER_REQUIRED = 1002
    INVALID_STATUS = 1003
    INVALID_TAG_NAME = 1004

    # Lookup errors (2xxx)
    NOT_FOUND = 2001

    # Uniqueness errors (3xxx)
    DUPLICATE = 3001

    # Storage errors (4xxx)
    STORE_FAILED = 4001
    STORE_UNAVAILABLE = 4002


class NotebookError(Exception):
    """Base exception for all SmartNote errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    default_code = ErrorCode.VALIDATION_FAILED

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"[{self.code.name}] {self.message} ({detail_str})"
        return f"[{self.code.name}] {self.message}"


class ValidationError(NotebookError):
    """Raised for malformed input, before the store is touched."""

    default_code = ErrorCode.VALIDATION_FAILED

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        code: Optional[ErrorCode] = None,
    ):
        details: Dict[str, Any] = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]
        super().__init__(message, code=code, details=details)
        self.field = field
        self.value = value


class NotFoundError(NotebookError):
    """Raised when no row matched the id and ownership filter.

    Missing rows and rows owned by another user produce the same error.
    """

    default_code = ErrorCode.NOT_FOUND

    def __init__(self, entity: str, entity_id: Any, message: Optional[str] = None):
        super().__init__(
            message or f"{entity} '{entity_id}' not found",
            details={"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class DuplicateError(NotebookError):
    """Raised when a uniqueness constraint would be violated."""

    default_code = ErrorCode.DUPLICATE

    def __init__(self, entity: str, field: str, value: Any, message: Optional[str] = None):
        super().__init__(
            message or f"{entity} with {field} '{value}' already exists",
            details={"entity": entity, "field": field, "value": str(value)[:100]},
        )
        self.entity = entity
        self.field = field
        self.value = value


class StoreError(NotebookError):
    """Raised when the backing store fails in an unanticipated way."""

    default_code = ErrorCode.STORE_FAILED

    def __init__(self, message: str, operation: Optional[str] = None, code: Optional[ErrorCode] = None):
        details = {"operation": operation} if operation else None
        super().__init__(message, code=code, details=details)
        self.operation = operation


class StoreUnavailableError(StoreError):
    """Raised when the connection to the backing store fails."""

    default_code = ErrorCode.STORE_UNAVAILABLE
