"""
Field validator implementations.

One concrete :class:`FieldValidator` per field kind::

    from rest_layer.schema.validators import Integer, String

    String(allowed=["draft", "published"]).validate("draft")
    Integer(minimum=0).validate_query("42")
"""

from __future__ import annotations

from .base import FieldValidator
from .composite import AnyOf, Array, Dict, Object
from .scalar import Bool, Float, Integer, String
from .temporal import Time

__all__ = [
    "AnyOf",
    "Array",
    "Bool",
    "Dict",
    "FieldValidator",
    "Float",
    "Integer",
    "Object",
    "String",
    "Time",
]
