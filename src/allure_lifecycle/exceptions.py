"""Exception classes for the report lifecycle.

Every step raises one of these kinds so callers can tell an expected empty
history apart from a filesystem fault or a failed render.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class LifecycleError(Exception):
    """Base exception class for all lifecycle errors.

    Attributes:
        message: Human-readable error message
        error_code: Optional error code for programmatic handling
        hints: Optional list of actionable suggestions
        context: Optional additional context data (paths, titles, ...)
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        hints: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.hints = hints or []
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            "message": self.message,
            "error_type": self.__class__.__name__,
        }
        if self.error_code:
            result["error_code"] = self.error_code
        if self.hints:
            result["hints"] = self.hints
        if self.context:
            result["context"] = self.context
        return result


class ReplicationError(LifecycleError):
    """Raised on any filesystem fault: missing source, conflict, permissions.

    Attributes:
        path: The path that triggered the error
        original_error: Optional underlying OSError
    """

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        hints: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        context = dict(context or {})
        if path is not None:
            context.setdefault("path", path)
        super().__init__(
            message,
            error_code="IO_ERROR",
            hints=hints,
            context=context,
        )
        self.path = path
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.original_error:
            result["original_error"] = str(self.original_error)
        return result


class HistoryEmptyError(LifecycleError):
    """Raised when a previous history directory exists but holds no files.

    A present-but-empty history directory points at a partial or corrupted
    previous report, so this is never treated as a soft skip.
    """

    def __init__(self, history_dir: str):
        super().__init__(
            f"Previous test history data was not found in {history_dir}",
            error_code="HISTORY_EMPTY",
            hints=[
                "Check that the previous report finished rendering",
                "Disable history merging to render without trend data",
            ],
            context={"path": history_dir},
        )
        self.history_dir = history_dir


class SummaryParseError(LifecycleError):
    """Raised when the summary document is missing or has the wrong shape."""

    def __init__(
        self,
        message: str,
        *,
        path: str,
        title: Optional[str] = None,
        validation_errors: Optional[List[str]] = None,
    ):
        context: Dict[str, Any] = {"path": path}
        if title is not None:
            context["title"] = title
        super().__init__(
            message,
            error_code="PARSE_ERROR",
            context=context,
        )
        self.path = path
        self.validation_errors = validation_errors or []

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.validation_errors:
            result["validation_errors"] = self.validation_errors
        return result


class RenderError(LifecycleError):
    """Raised when the external renderer exits with a non-zero code.

    The captured output is kept for diagnosis but never parsed.

    Attributes:
        command: Argument list that was launched
        returncode: Renderer exit code (None if it never started)
        stdout: Captured standard output
        stderr: Captured standard error
    """

    def __init__(
        self,
        message: str,
        *,
        command: Optional[List[str]] = None,
        returncode: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
        hints: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message,
            error_code="RENDER_ERROR",
            hints=hints,
            context=context,
        )
        self.command = list(command or [])
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.command:
            result["command"] = self.command
        if self.returncode is not None:
            result["returncode"] = self.returncode
        if self.stderr:
            result["stderr"] = self.stderr
        return result


class RendererNotFoundError(RenderError):
    """Raised when no usable allure binary can be located."""


class RequestConfigError(LifecycleError, ValueError):
    """Raised when a render request cannot be loaded or validated."""

    def __init__(self, message: str, *, path: Optional[str] = None):
        super().__init__(
            message,
            error_code="CONFIG_ERROR",
            context={"path": path} if path else None,
        )
        self.path = path


__all__ = [
    "LifecycleError",
    "ReplicationError",
    "HistoryEmptyError",
    "SummaryParseError",
    "RenderError",
    "RendererNotFoundError",
    "RequestConfigError",
]
