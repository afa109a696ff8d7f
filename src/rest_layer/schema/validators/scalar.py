"""Scalar field kinds: String, Integer, Float, Bool."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from ...primitives.exceptions import InvalidValueError
from .base import FieldValidator

if TYPE_CHECKING:
    from collections.abc import Iterable


def _check_bounds(
    value: float,
    *,
    allowed: tuple[float, ...] | None,
    minimum: float | None,
    maximum: float | None,
) -> None:
    if allowed is not None and value not in allowed:
        raise InvalidValueError("not one of the allowed values")
    if minimum is not None and value < minimum:
        raise InvalidValueError(f"is lower than {minimum}")
    if maximum is not None and value > maximum:
        raise InvalidValueError(f"is greater than {maximum}")


def _describe_bounds(
    shape: dict[str, Any],
    allowed: tuple[float, ...] | None,
    minimum: float | None,
    maximum: float | None,
) -> dict[str, Any]:
    if allowed is not None:
        shape["enum"] = list(allowed)
    if minimum is not None:
        shape["minimum"] = minimum
    if maximum is not None:
        shape["maximum"] = maximum
    return shape


class String(FieldValidator):
    """
    Text values.

    ``allowed`` turns the field into an enumerated set; ``pattern`` is
    searched with :func:`re.search`.
    """

    matchable = True

    def __init__(
        self,
        *,
        allowed: Iterable[str] | None = None,
        pattern: str | None = None,
        min_len: int | None = None,
        max_len: int | None = None,
    ) -> None:
        self.allowed = tuple(allowed) if allowed is not None else None
        self.pattern = pattern
        self.min_len = min_len
        self.max_len = max_len
        self._regex = re.compile(pattern) if pattern is not None else None

    def validate(self, value: Any) -> Any:
        if not isinstance(value, str):
            raise InvalidValueError("not a string")
        if self.allowed is not None and value not in self.allowed:
            raise InvalidValueError(f"not one of [{', '.join(self.allowed)}]")
        if self._regex is not None and not self._regex.search(value):
            raise InvalidValueError(f"does not match {self.pattern}")
        if self.min_len is not None and len(value) < self.min_len:
            raise InvalidValueError(f"is shorter than {self.min_len}")
        if self.max_len is not None and len(value) > self.max_len:
            raise InvalidValueError(f"is longer than {self.max_len}")
        return value

    def describe(self) -> dict[str, Any]:
        shape: dict[str, Any] = {"type": "string"}
        if self.allowed is not None:
            shape["enum"] = list(self.allowed)
        if self.pattern is not None:
            shape["pattern"] = self.pattern
        if self.min_len is not None:
            shape["minLength"] = self.min_len
        if self.max_len is not None:
            shape["maxLength"] = self.max_len
        return shape


class Integer(FieldValidator):
    comparable = True

    def __init__(
        self,
        *,
        allowed: Iterable[int] | None = None,
        minimum: int | None = None,
        maximum: int | None = None,
    ) -> None:
        self.allowed = tuple(allowed) if allowed is not None else None
        self.minimum = minimum
        self.maximum = maximum

    def validate(self, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise InvalidValueError("not an integer")
        if isinstance(value, float):
            if not value.is_integer():
                raise InvalidValueError("not an integer")
            value = int(value)
        _check_bounds(
            value, allowed=self.allowed, minimum=self.minimum, maximum=self.maximum
        )
        return value

    def validate_query(self, value: Any) -> Any:
        if isinstance(value, str):
            try:
                value = int(value.strip())
            except ValueError:
                raise InvalidValueError("not an integer") from None
        return self.validate(value)

    def describe(self) -> dict[str, Any]:
        return _describe_bounds(
            {"type": "integer"}, self.allowed, self.minimum, self.maximum
        )


class Float(FieldValidator):
    comparable = True

    def __init__(
        self,
        *,
        allowed: Iterable[float] | None = None,
        minimum: float | None = None,
        maximum: float | None = None,
    ) -> None:
        self.allowed = tuple(allowed) if allowed is not None else None
        self.minimum = minimum
        self.maximum = maximum

    def validate(self, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise InvalidValueError("not a float")
        value = float(value)
        _check_bounds(
            value, allowed=self.allowed, minimum=self.minimum, maximum=self.maximum
        )
        return value

    def validate_query(self, value: Any) -> Any:
        if isinstance(value, str):
            try:
                value = float(value.strip())
            except ValueError:
                raise InvalidValueError("not a float") from None
        return self.validate(value)

    def describe(self) -> dict[str, Any]:
        return _describe_bounds(
            {"type": "number"}, self.allowed, self.minimum, self.maximum
        )


class Bool(FieldValidator):
    def validate(self, value: Any) -> Any:
        if not isinstance(value, bool):
            raise InvalidValueError("not a Boolean")
        return value

    def validate_query(self, value: Any) -> Any:
        if value == "true":
            return True
        if value == "false":
            return False
        return self.validate(value)

    def describe(self) -> dict[str, Any]:
        return {"type": "boolean"}
