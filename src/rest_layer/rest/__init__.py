"""Transport-neutral request handling."""

from __future__ import annotations

from .errors import DOCUMENT_ISSUES, URL_ISSUES, error_response
from .handler import Handler, allowed_methods
from .request import Request
from .response import Response
from .route import Route, resolve_route

__all__ = [
    "DOCUMENT_ISSUES",
    "URL_ISSUES",
    "Handler",
    "Request",
    "Response",
    "Route",
    "allowed_methods",
    "error_response",
    "resolve_route",
]
