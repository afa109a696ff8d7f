"""Request, validation and storage exceptions for rest-layer."""

from __future__ import annotations


class RestLayerError(Exception):
    """Root exception for the entire rest-layer package."""


class ResourceBindingError(RestLayerError):
    """Raised when a resource cannot be bound to the index.

    Usage: Index raises this for duplicate or malformed resource names and
    when binding is attempted after the index has been compiled.
    """


class FilterSyntaxError(RestLayerError):
    """Raised when filter text cannot be parsed.

    Carries the character offset of the first unrecoverable token.
    """

    def __init__(self, offset: int, message: str) -> None:
        self.offset = offset
        self.message = message
        super().__init__(f"char {offset}: {message}")


class InvalidValueError(RestLayerError, ValueError):
    """Raised by field validators when a value is rejected.

    Nested validators (objects, dicts) attach their own per-field issues
    through ``issues``.
    """

    def __init__(
        self, message: str, issues: dict[str, list[str]] | None = None
    ) -> None:
        self.message = message
        self.issues = issues or {}
        super().__init__(message)


class ValidationError(RestLayerError):
    """Raised when request parameters or a document fail validation.

    Carries structured issues: ``{param_or_field: [messages]}``.
    """

    def __init__(
        self, issues: dict[str, list[str]], message: str = "Validation failed"
    ) -> None:
        self.issues = issues
        self.message = message
        super().__init__(f"{message}: {self.issues}")


class MalformedBodyError(RestLayerError):
    """Raised when a request body is not a JSON object."""


class NotConfiguredError(RestLayerError):
    """Raised when a resource is bound without a storer."""


class ModeNotAllowedError(RestLayerError):
    """Raised when the requested operation is not enabled on a resource."""

    def __init__(self, resource: str, mode: object) -> None:
        self.resource = resource
        self.mode = mode
        super().__init__(f"mode {mode!s} not allowed on resource {resource!r}")


class NotFoundError(RestLayerError):
    """Raised when a resource, parent or item cannot be found."""


class ResourceNotFoundError(NotFoundError):
    """Raised when a request path names no bound resource."""


class ParentNotFoundError(NotFoundError):
    """Raised when the parent item of a sub-resource route does not exist."""


class ConflictError(RestLayerError):
    """Raised when an optimistic concurrency check fails.

    Usage: storers raise this when the stored version token no longer
    matches the original item; the handler raises it when an ``If-Match``
    header does not match.
    """


class RequestCanceledError(RestLayerError):
    """Raised by storers that abort because the client went away."""


class StorageError(RestLayerError):
    """Opaque storage backend failure."""
