"""Transport-neutral description of an incoming request."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, urlsplit

from ..primitives.exceptions import MalformedBodyError


def _empty_mapping() -> dict[str, str]:
    return {}


@dataclass
class Request:
    """
    An HTTP-style request as seen by the handler.

    Header names are matched case-insensitively. ``body`` is either an
    already-decoded JSON value or raw ``str``/``bytes`` text.

    Usage::

        request = Request.from_url("GET", "/users?filter={age:{$gt:18}}&limit=5")
    """

    method: str
    path: str
    params: dict[str, str] = field(default_factory=_empty_mapping)
    headers: dict[str, str] = field(default_factory=_empty_mapping)
    body: Any = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.headers = {name.lower(): value for name, value in self.headers.items()}

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Request:
        parts = urlsplit(url)
        params = dict(parse_qsl(parts.query, keep_blank_values=True))
        return cls(method, parts.path, params, dict(headers or {}), body)

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def json_object(self) -> dict[str, Any]:
        """
        Return the body as a JSON object.

        Raises:
            MalformedBodyError: When the body is absent, not valid JSON or
                not an object.
        """
        body = self.body
        if isinstance(body, (bytes, str)):
            try:
                body = json.loads(body)
            except ValueError as exc:
                raise MalformedBodyError(f"invalid JSON: {exc}") from exc
        if not isinstance(body, dict):
            raise MalformedBodyError("body must be a JSON object")
        return dict(body)
