"""Container field kinds: Array, Object, Dict, AnyOf."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...primitives.exceptions import InvalidValueError
from .base import FieldValidator

if TYPE_CHECKING:
    from ..field import Field
    from ..schema import Schema


class Array(FieldValidator):
    """
    Lists whose items are checked against the ``values`` field.

    In a filter, a scalar compared to an array field is checked as a
    single item (the evaluator treats it as membership).
    """

    def __init__(
        self,
        *,
        values: Field | None = None,
        min_len: int | None = None,
        max_len: int | None = None,
    ) -> None:
        self.values = values
        self.min_len = min_len
        self.max_len = max_len

    @property
    def _item_validator(self) -> FieldValidator | None:
        return self.values.validator if self.values is not None else None

    def validate(self, value: Any) -> Any:
        if not isinstance(value, list | tuple):
            raise InvalidValueError("not an array")
        items = list(value)
        validator = self._item_validator
        if validator is not None:
            for idx, item in enumerate(items):
                try:
                    items[idx] = validator.validate(item)
                except InvalidValueError as exc:
                    raise InvalidValueError(
                        f"invalid value at #{idx}: {exc.message}"
                    ) from exc
        if self.min_len is not None and len(items) < self.min_len:
            raise InvalidValueError(f"has fewer items than {self.min_len}")
        if self.max_len is not None and len(items) > self.max_len:
            raise InvalidValueError(f"has more items than {self.max_len}")
        return items

    def validate_query(self, value: Any) -> Any:
        if isinstance(value, list | tuple):
            return self.validate(value)
        validator = self._item_validator
        return validator.validate_query(value) if validator is not None else value

    def describe(self) -> dict[str, Any]:
        shape: dict[str, Any] = {"type": "array"}
        if self.values is not None:
            shape["items"] = self.values.describe()
        if self.min_len is not None:
            shape["minItems"] = self.min_len
        if self.max_len is not None:
            shape["maxItems"] = self.max_len
        return shape


class Object(FieldValidator):
    """Sub-documents validated against a nested schema."""

    def __init__(self, schema: Schema) -> None:
        self.schema = schema

    def validate(self, value: Any) -> Any:
        if not isinstance(value, dict):
            raise InvalidValueError("not a dict")
        doc, result = self.schema.validate(value, {})
        if not result.is_valid:
            raise InvalidValueError("invalid object", issues=result.errors)
        return doc

    def describe(self) -> dict[str, Any]:
        return self.schema.describe()


class Dict(FieldValidator):
    """Free-form mappings with optional key and value constraints."""

    def __init__(
        self,
        *,
        keys: FieldValidator | None = None,
        values: Field | None = None,
    ) -> None:
        self.keys = keys
        self.values = values

    def validate(self, value: Any) -> Any:
        if not isinstance(value, dict):
            raise InvalidValueError("not a dict")
        value_validator = self.values.validator if self.values is not None else None
        doc: dict[str, Any] = {}
        for key, item in value.items():
            if self.keys is not None:
                try:
                    self.keys.validate(key)
                except InvalidValueError as exc:
                    raise InvalidValueError(
                        f"invalid key '{key}': {exc.message}"
                    ) from exc
            if value_validator is not None:
                try:
                    item = value_validator.validate(item)
                except InvalidValueError as exc:
                    raise InvalidValueError(
                        f"invalid value for key '{key}': {exc.message}"
                    ) from exc
            doc[key] = item
        return doc

    def describe(self) -> dict[str, Any]:
        shape: dict[str, Any] = {"type": "object"}
        if self.keys is not None:
            shape["propertyNames"] = self.keys.describe()
        if self.values is not None:
            shape["additionalProperties"] = self.values.describe()
        return shape


class AnyOf(FieldValidator):
    """Accepts a value if any of the wrapped validators accepts it."""

    def __init__(self, *validators: FieldValidator) -> None:
        if not validators:
            raise ValueError("AnyOf needs at least one validator")
        self.validators = validators
        self.comparable = all(v.comparable for v in validators)
        self.matchable = any(v.matchable for v in validators)

    def validate(self, value: Any) -> Any:
        return self._first_match(value, query=False)

    def validate_query(self, value: Any) -> Any:
        return self._first_match(value, query=True)

    def _first_match(self, value: Any, *, query: bool) -> Any:
        reasons: list[str] = []
        for validator in self.validators:
            try:
                if query:
                    return validator.validate_query(value)
                return validator.validate(value)
            except InvalidValueError as exc:
                reasons.append(exc.message)
        raise InvalidValueError(f"matches none of: {'; '.join(reasons)}")

    def describe(self) -> dict[str, Any]:
        return {"anyOf": [v.describe() for v in self.validators]}
