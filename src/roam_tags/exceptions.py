"""Custom exceptions for Roam Tags.

Provides a structured exception hierarchy with error codes and
machine-readable error information. Only genuinely exceptional conditions
are raised; a title that is not a tag, or a declined confirmation, is
reported as ``None`` by the caller instead.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Error codes for machine-readable error identification."""

    # Tag errors (3xxx)
    TAG_NOT_FOUND = 3001
    TAG_INVALID = 3002
    TAG_ALREADY_EXISTS = 3003
    TAG_DANGLING_REFERENCE = 3004

    # Storage errors (4xxx)
    STORAGE_READ_FAILED = 4001
    STORAGE_WRITE_FAILED = 4002

    # Configuration errors (6xxx)
    CONFIG_INVALID = 6001

    # Validation errors (7xxx)
    VALIDATION_FAILED = 7001
    PATH_TRAVERSAL_DETECTED = 7005


class RoamTagsError(Exception):
    """Base exception for all Roam Tags errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"[{self.code.name}] {self.message} ({detail_str})"
        return f"[{self.code.name}] {self.message}"


class TagNotFoundError(RoamTagsError):
    """Raised when a tag that must exist cannot be resolved to a note."""

    def __init__(self, tag: str, message: Optional[str] = None):
        super().__init__(
            message or f"No tag «{tag}»",
            code=ErrorCode.TAG_NOT_FOUND,
            details={"tag": tag}
        )
        self.tag = tag


class TagExistsError(RoamTagsError):
    """Raised when a new tag note would overwrite an existing file."""

    def __init__(self, tag: str, path: Optional[str] = None):
        details: Dict[str, Any] = {"tag": tag}
        if path:
            # Don't expose full paths in error messages
            details["path_hint"] = path.split("/")[-1]
        super().__init__(
            f"Tag file for «{tag}» already exists",
            code=ErrorCode.TAG_ALREADY_EXISTS,
            details=details
        )
        self.tag = tag
        self.path = path


class DanglingReferenceError(TagNotFoundError):
    """Raised when a tag confirmed to exist has no id to link to.

    This means the index and the filesystem disagree; inserting a link would
    leave a reference to nothing.
    """

    def __init__(self, tag: str):
        super().__init__(tag)
        self.code = ErrorCode.TAG_DANGLING_REFERENCE


class TagError(RoamTagsError):
    """Raised when a string cannot be used as a tag."""

    def __init__(
        self,
        message: str,
        tag_name: Optional[str] = None,
        code: ErrorCode = ErrorCode.TAG_INVALID
    ):
        details = {}
        if tag_name:
            details["tag_name"] = tag_name

        super().__init__(message, code=code, details=details)
        self.tag_name = tag_name


class StorageError(RoamTagsError):
    """Raised for storage/persistence errors."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        path: Optional[str] = None,
        code: ErrorCode = ErrorCode.STORAGE_READ_FAILED,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if path:
            details["path_hint"] = path.split("/")[-1] if "/" in path else path
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(message, code=code, details=details)
        self.operation = operation
        self.path = path
        self.original_error = original_error


class ConfigurationError(RoamTagsError):
    """Raised for configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        code: ErrorCode = ErrorCode.CONFIG_INVALID
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, code=code, details=details)
        self.config_key = config_key
