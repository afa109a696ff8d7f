"""Status, headers and body returned by the handler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _empty_headers() -> dict[str, str]:
    return {}


@dataclass
class Response:
    status: int
    headers: dict[str, str] = field(default_factory=_empty_headers)
    body: Any = None

    @classmethod
    def error(
        cls,
        status: int,
        message: str,
        issues: dict[str, list[str]] | None = None,
    ) -> Response:
        """Build a failure envelope ``{"code", "message", "issues"?}``."""
        body: dict[str, Any] = {"code": status, "message": message}
        if issues:
            body["issues"] = issues
        return cls(status=status, body=body)
