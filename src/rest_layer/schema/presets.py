"""Standard fields shared by most resources."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from .field import Field
from .validators import String, Time


def new_id(value: Any) -> Any:
    """``on_init`` hook keeping a client-chosen id or generating one."""
    if value is None:
        return uuid.uuid4().hex
    return value


def now(_value: Any) -> datetime:
    """``on_init`` / ``on_update`` hook returning the current UTC time."""
    return datetime.now(timezone.utc)


ID_FIELD = Field(
    description="The item's id",
    required=True,
    read_only=True,
    filterable=True,
    sortable=True,
    on_init=new_id,
    validator=String(),
)

CREATED_FIELD = Field(
    description="The time at which the item has been inserted",
    required=True,
    read_only=True,
    filterable=True,
    sortable=True,
    on_init=now,
    validator=Time(),
)

UPDATED_FIELD = Field(
    description="The time at which the item has been last updated",
    required=True,
    read_only=True,
    filterable=True,
    sortable=True,
    on_init=now,
    on_update=now,
    validator=Time(),
)
