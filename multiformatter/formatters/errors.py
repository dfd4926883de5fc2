"""
Multi Formatter Error Hierarchy

Defines all custom exceptions used by the formatter pipeline.
This provides clear, specific error types for different failure scenarios.

Error Categories:
- Settings Errors: unreadable or invalid settings files, failed settings writes
- Formatter Errors: a formatter is unknown, fails, or times out (recovered per step)
- Document Errors: nothing to format
- Cancellation: a run was cancelled between steps
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class MultiFormatterError(Exception):
    """Base exception for all Multi Formatter errors.

    All package-specific exceptions inherit from this class,
    allowing for broad exception handling when needed.
    """
    pass


class SettingsError(MultiFormatterError):
    """Error reading, validating or writing settings.

    Raised when:
    - A settings file contains invalid YAML
    - A setting has a value of the wrong type
    - A settings file cannot be written

    Attributes:
        key: Setting key involved (if applicable)
        path: Settings file involved (if applicable)
        original_error: The underlying error
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        path: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.key = key
        self.path = path
        self.original_error = original_error


class FormatterError(MultiFormatterError):
    """Error raised by or about a single formatter.

    The pipeline treats this family as a per-step failure: it is logged
    and the remaining formatters in the chain still run.

    Attributes:
        formatter_id: Identifier of the formatter involved
    """

    def __init__(self, message: str, formatter_id: Optional[str] = None):
        super().__init__(message)
        self.formatter_id = formatter_id


class FormatterNotFoundError(FormatterError):
    """No backend is registered (or installed) for a formatter id."""
    pass


class FormatterExecutionError(FormatterError):
    """A formatter ran but failed.

    Attributes:
        exit_code: Process exit code for command formatters
        stderr: Captured error output
        original_error: The underlying exception raised by the backend
    """

    def __init__(
        self,
        message: str,
        formatter_id: Optional[str] = None,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, formatter_id=formatter_id)
        self.exit_code = exit_code
        self.stderr = stderr
        self.original_error = original_error


class FormatterTimeoutError(FormatterExecutionError):
    """A formatter did not finish within its timeout."""

    def __init__(self, message: str, formatter_id: Optional[str] = None, timeout: float = 0.0):
        super().__init__(message, formatter_id=formatter_id)
        self.timeout = timeout


class NoActiveDocumentError(MultiFormatterError):
    """There is no document to format. Informational, never fatal."""
    pass


@dataclass
class ErrorInfo:
    """Structured error information for user-friendly error reporting.

    Attributes:
        error_type: Type of error (e.g., "FormatterNotFoundError")
        message: Human-readable error message
        details: Additional context (formatter id, settings file, etc.)
        recoverable: Whether the pipeline continues after this error
        suggestion: Suggested action for the user
    """
    error_type: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    recoverable: bool = False
    suggestion: str = ""

    @classmethod
    def from_exception(cls, error: Exception) -> "ErrorInfo":
        """Create ErrorInfo from an exception.

        Args:
            error: Exception to convert

        Returns:
            ErrorInfo with details extracted from the exception
        """
        error_type = type(error).__name__
        message = str(error)
        details: Dict[str, Any] = {}
        recoverable = False
        suggestion = ""

        if isinstance(error, SettingsError):
            if error.key:
                details["key"] = error.key
            if error.path:
                details["path"] = error.path
            suggestion = "Check the settings file for YAML syntax errors and value types."

        elif isinstance(error, FormatterNotFoundError):
            if error.formatter_id:
                details["formatter_id"] = error.formatter_id
            recoverable = True
            suggestion = (
                "Register the formatter under multiformatter.commands or check "
                "that its executable is installed and on PATH."
            )

        elif isinstance(error, FormatterTimeoutError):
            if error.formatter_id:
                details["formatter_id"] = error.formatter_id
            details["timeout"] = error.timeout
            recoverable = True
            suggestion = "The formatter took too long; check it runs standalone on this file."

        elif isinstance(error, FormatterExecutionError):
            if error.formatter_id:
                details["formatter_id"] = error.formatter_id
            if error.exit_code is not None:
                details["exit_code"] = error.exit_code
            if error.stderr:
                details["stderr"] = error.stderr
            recoverable = True
            suggestion = "The remaining formatters still ran; see the formatter output above."

        elif isinstance(error, FormatterError):
            if error.formatter_id:
                details["formatter_id"] = error.formatter_id
            recoverable = True

        elif isinstance(error, NoActiveDocumentError):
            recoverable = True
            suggestion = "Open or pass a document to format."

        return cls(
            error_type=error_type,
            message=message,
            details=details,
            recoverable=recoverable,
            suggestion=suggestion,
        )
