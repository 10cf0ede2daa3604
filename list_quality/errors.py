"""Exception hierarchy shared by the list quality engine."""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .models import CleaningResult, CleaningStep


class ListQualityError(RuntimeError):
    """Base class for every error raised by the engine."""


class ConfigurationError(ListQualityError):
    """Raised when configuration files are missing or malformed."""


class ValidationError(ListQualityError, ValueError):
    """Raised when caller supplied input is malformed."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class EmptyListError(ValidationError):
    """Raised when a list holds no leads to work on."""

    def __init__(self, list_id: str) -> None:
        super().__init__("list_id", "No leads found in this list")
        self.list_id = list_id


class NotFoundError(ListQualityError, LookupError):
    """Raised by stores when a record disappeared before it could be mutated."""

    def __init__(self, record_id: str, kind: str = "lead") -> None:
        super().__init__(f"{kind.capitalize()} '{record_id}' was not found")
        self.record_id = record_id
        self.kind = kind


class TransportError(ListQualityError):
    """Raised when a store or the scoring webhook cannot be reached."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DataError(ListQualityError):
    """Raised when the scoring webhook answers with an unexpected shape."""


class AnalysisError(ListQualityError):
    """Raised when a list could not be analysed."""


class InvalidTransition(ListQualityError):
    """Raised when a verification session is moved out of a terminal state."""


class CleaningAborted(ListQualityError):
    """Raised when a cleaning run stops on an unrecoverable error.

    Steps committed before the failure are not rolled back. ``step`` names the
    step that failed and ``partial`` holds the counters gathered so far, so the
    run can be resumed with ``Cleaner.clean(..., resume_from=step)``.
    """

    def __init__(self, step: "CleaningStep", partial: "CleaningResult", cause: BaseException) -> None:
        super().__init__(f"{step.label} failed: {cause}")
        self.step = step
        self.partial = partial


__all__ = [
    "AnalysisError",
    "CleaningAborted",
    "ConfigurationError",
    "DataError",
    "EmptyListError",
    "InvalidTransition",
    "ListQualityError",
    "NotFoundError",
    "TransportError",
    "ValidationError",
]
