"""
ceno.state: Per-request error context.

An ErrorState is created by the request layer for a single failing request,
handed down the dispatch chain, and dropped once the response has been sent.
It is never shared between requests.
"""

from dataclasses import dataclass, field
from typing import Any

from ceno.errors import StateError


@dataclass
class ErrorState:
    request: Any = None
    response: Any = None
    message: str | None = None
    code: int | None = None
    report_url: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def setdefault_code(self, code: int) -> int:
        """Record the code unless one is already set; return the one in effect."""
        if self.code is None:
            self.code = code
        return self.code

    def setdefault_message(self, message: str) -> str:
        """Record the message unless one is already set; return the one in effect."""
        if self.message is None:
            self.message = message
        return self.message

    def require(self, name: str) -> Any:
        """Return a field a handler cannot work without."""
        value = getattr(self, name)
        if value is None:
            raise StateError(
                stage="state",
                message=f"Error state is missing '{name}'",
                code=self.code,
            )
        return value

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "report_url": self.report_url,
            "url": getattr(self.request, "url", None),
        }
