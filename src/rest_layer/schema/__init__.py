"""Declarative resource schemas and field validators."""

from __future__ import annotations

from .field import NO_DEFAULT, Field
from .presets import CREATED_FIELD, ID_FIELD, UPDATED_FIELD, new_id, now
from .schema import Schema
from .validators import (
    AnyOf,
    Array,
    Bool,
    Dict,
    FieldValidator,
    Float,
    Integer,
    Object,
    String,
    Time,
)

__all__ = [
    "CREATED_FIELD",
    "ID_FIELD",
    "NO_DEFAULT",
    "UPDATED_FIELD",
    "AnyOf",
    "Array",
    "Bool",
    "Dict",
    "Field",
    "FieldValidator",
    "Float",
    "Integer",
    "Object",
    "Schema",
    "String",
    "Time",
    "new_id",
    "now",
]
