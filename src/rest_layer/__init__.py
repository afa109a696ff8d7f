"""Resource-oriented query compilation and request dispatch.

Parses a compact filter / sort / pagination language, validates it
against declarative schemas and dispatches the resulting queries to
pluggable async storers.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import MemoryStorer

# ── Primitives ──────────────────────────────────────────────────
from .primitives import (
    ConflictError,
    FilterSyntaxError,
    InvalidValueError,
    MalformedBodyError,
    ModeNotAllowedError,
    NotConfiguredError,
    NotFoundError,
    ParentNotFoundError,
    RequestCanceledError,
    ResourceBindingError,
    ResourceNotFoundError,
    RestLayerError,
    StorageError,
    ValidationError,
    ValidationResult,
)

# ── Query ───────────────────────────────────────────────────────
from .query import (
    Query,
    QueryValidator,
    SortField,
    Window,
    parse_predicate,
)

# ── Resources ───────────────────────────────────────────────────
from .resource import (
    DEFAULT_CONF,
    READ_ONLY,
    READ_WRITE,
    WRITE_ONLY,
    Conf,
    Index,
    Item,
    ItemList,
    Mode,
    Resource,
    Storer,
    new_item,
)

# ── REST ────────────────────────────────────────────────────────
from .rest import Handler, Request, Response

# ── Schema ──────────────────────────────────────────────────────
from .schema import ID_FIELD, Field, Schema

__all__ = [
    "DEFAULT_CONF",
    "ID_FIELD",
    "READ_ONLY",
    "READ_WRITE",
    "WRITE_ONLY",
    "Conf",
    "ConflictError",
    "Field",
    "FilterSyntaxError",
    "Handler",
    "Index",
    "InvalidValueError",
    "Item",
    "ItemList",
    "MalformedBodyError",
    "MemoryStorer",
    "Mode",
    "ModeNotAllowedError",
    "NotConfiguredError",
    "NotFoundError",
    "ParentNotFoundError",
    "Query",
    "QueryValidator",
    "Request",
    "RequestCanceledError",
    "Resource",
    "ResourceBindingError",
    "ResourceNotFoundError",
    "Response",
    "RestLayerError",
    "Schema",
    "SortField",
    "StorageError",
    "Storer",
    "ValidationError",
    "ValidationResult",
    "Window",
    "new_item",
    "parse_predicate",
]
