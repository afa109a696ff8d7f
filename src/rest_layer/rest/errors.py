"""Mapping from exceptions to failure responses."""

from __future__ import annotations

import asyncio

from ..primitives.exceptions import (
    ConflictError,
    MalformedBodyError,
    ModeNotAllowedError,
    NotConfiguredError,
    NotFoundError,
    ParentNotFoundError,
    RequestCanceledError,
    ResourceNotFoundError,
    ValidationError,
)
from .response import Response

URL_ISSUES = "URL parameters contain error(s)"
DOCUMENT_ISSUES = "Document contains error(s)"

# Most specific classes first.
ERROR_STATUS: tuple[tuple[type[BaseException], int, str], ...] = (
    (MalformedBodyError, 400, "Malformed body"),
    (ResourceNotFoundError, 404, "Resource Not Found"),
    (ParentNotFoundError, 404, "Parent Resource Not Found"),
    (NotFoundError, 404, "Not Found"),
    (ModeNotAllowedError, 405, "Invalid method"),
    (ConflictError, 409, "Conflict"),
    (RequestCanceledError, 499, "Client Closed Request"),
    (NotConfiguredError, 501, "No Storage Defined"),
    (asyncio.TimeoutError, 504, "Gateway Timeout"),
)


def error_response(exc: BaseException) -> Response:
    """Translate *exc* into a failure envelope; unknown errors become 500."""
    if isinstance(exc, ValidationError):
        return Response.error(422, exc.message, exc.issues)
    for exc_type, status, message in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return Response.error(status, message)
    return Response.error(500, "Internal Server Error")
