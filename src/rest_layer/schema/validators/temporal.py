"""Time field kind."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ...primitives.exceptions import InvalidValueError
from .base import FieldValidator

_DATETIME = TypeAdapter(datetime)


class Time(FieldValidator):
    """
    Timestamps, given as ``datetime`` objects or ISO-8601 strings.

    Naive values are taken as UTC so that stored and queried times
    always compare.
    """

    comparable = True

    def validate(self, value: Any) -> Any:
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, str):
            try:
                parsed = _DATETIME.validate_python(value)
            except PydanticValidationError:
                raise InvalidValueError("not a time") from None
        else:
            raise InvalidValueError("not a time")
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def describe(self) -> dict[str, Any]:
        return {"type": "string", "format": "date-time"}
