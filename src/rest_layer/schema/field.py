"""Per-field constraints of a schema."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from .validators.base import FieldValidator


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


@dataclass(frozen=True)
class Field:
    """
    Immutable definition of a single schema field.

    Attributes:
        description: Free text, exported by ``describe()``.
        required: The field must be present once the document is built.
        read_only: Clients may not set or change the value; only hooks and
            defaults write it.
        filterable: The field may be referenced in ``filter``.
        sortable: The field may be referenced in ``sort``.
        default: Value used on creation when the client omits the field.
        on_init: Hook ``(value) -> value`` run when an item is created.
        on_update: Hook ``(value) -> value`` run when an item is changed.
        validator: Kind of the value; ``None`` accepts anything.
    """

    description: str = ""
    required: bool = False
    read_only: bool = False
    filterable: bool = False
    sortable: bool = False
    default: Any = NO_DEFAULT
    on_init: Callable[[Any], Any] | None = None
    on_update: Callable[[Any], Any] | None = None
    validator: FieldValidator | None = None

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    def describe(self) -> dict[str, Any]:
        shape = dict(self.validator.describe()) if self.validator is not None else {}
        if self.description:
            shape["description"] = self.description
        if self.read_only:
            shape["readOnly"] = True
        if self.has_default:
            shape["default"] = self.default
        return shape
