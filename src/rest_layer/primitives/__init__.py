"""Shared primitives: exception taxonomy and issue accumulation."""

from __future__ import annotations

from .exceptions import (
    ConflictError,
    FilterSyntaxError,
    InvalidValueError,
    MalformedBodyError,
    ModeNotAllowedError,
    NotConfiguredError,
    NotFoundError,
    ParentNotFoundError,
    RequestCanceledError,
    ResourceNotFoundError,
    ResourceBindingError,
    RestLayerError,
    StorageError,
    ValidationError,
)
from .validation import ValidationResult

__all__ = [
    "ConflictError",
    "FilterSyntaxError",
    "InvalidValueError",
    "MalformedBodyError",
    "ModeNotAllowedError",
    "NotConfiguredError",
    "NotFoundError",
    "ParentNotFoundError",
    "RequestCanceledError",
    "ResourceNotFoundError",
    "ResourceBindingError",
    "RestLayerError",
    "StorageError",
    "ValidationError",
    "ValidationResult",
]
