"""
Field validation strategy.

Provides the FieldValidator interface implemented by every field kind.
New kinds are added by subclassing FieldValidator; schemas and the query
validator only ever talk to this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class FieldValidator(ABC):
    """
    Strategy interface for validating and normalising a field value.

    Attributes:
        comparable: The kind supports ordering operators ($gt, $lt, ...).
        matchable: The kind supports the $regex operator.
    """

    comparable: bool = False
    matchable: bool = False

    @abstractmethod
    def validate(self, value: Any) -> Any:
        """
        Validate a document value and return its normalised form.

        Raises:
            InvalidValueError: If the value is rejected.
        """
        ...

    def validate_query(self, value: Any) -> Any:
        """
        Validate a value used in a filter expression.

        Query values may arrive as text, so kinds that can be written as
        text override this to coerce before validating.
        """
        return self.validate(value)

    @abstractmethod
    def describe(self) -> dict[str, Any]:
        """Return a JSON-schema-like description of the accepted shape."""
        ...
