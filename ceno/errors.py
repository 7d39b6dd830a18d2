"""
ceno.errors: Typed error model for the error-handling subsystem.

All errors are explicitly typed and include:
- code: the error code being handled when the failure happened (if any)
- stage: the step where the failure occurred
- payload: snapshot of relevant data
- retryable: whether the operation could reasonably be attempted again
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CenoError(Exception):
    """Base error for all ceno errors."""
    stage: str
    message: str
    code: int | None = None
    http_status: int | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    retryable: bool = False

    def __str__(self) -> str:
        if self.code is None:
            return f"[{self.stage}] {self.message}"
        return f"[{self.stage}] code={self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.__class__.__name__,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "http_status": self.http_status,
            "payload": self.payload,
            "retryable": self.retryable,
        }


@dataclass(frozen=True)
class ViewMissingError(CenoError):
    """The error page template is absent or cannot be parsed."""
    pass


@dataclass(frozen=True)
class TranslationError(CenoError):
    """A translation catalog could not be loaded."""
    pass


@dataclass(frozen=True)
class StateError(CenoError):
    """The per-request error state lacks a field a handler needs."""
    pass


@dataclass(frozen=True)
class TransportError(CenoError):
    """Network or HTTP transport error."""
    retryable: bool = True


@dataclass(frozen=True)
class ReportError(CenoError):
    """The report endpoint answered, but did not accept the report."""
    pass


@dataclass(frozen=True)
class RequestFailure(CenoError):
    """Raised by the request layer to have a failure answered with an error page."""
    report_url: str | None = None


ERROR_TYPES = {
    "ViewMissingError": ViewMissingError,
    "TranslationError": TranslationError,
    "StateError": StateError,
    "TransportError": TransportError,
    "ReportError": ReportError,
    "RequestFailure": RequestFailure,
}
