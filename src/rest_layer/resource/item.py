"""Item — a stored document with its version token."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_etag(payload: dict[str, Any]) -> str:
    """MD5 of the canonical JSON form of *payload*."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.md5(canonical.encode("utf-8")).hexdigest()  # noqa: S324


class Item(BaseModel):
    """
    A document as exchanged with storers.

    ``etag`` is the optimistic concurrency token: storers compare the
    original's etag with the stored one before writing.
    """

    model_config = ConfigDict(frozen=True)

    id: Any
    etag: str
    updated: datetime = Field(default_factory=_utcnow)
    payload: dict[str, Any] = Field(default_factory=dict)


def new_item(payload: dict[str, Any]) -> Item:
    """Build an item from a validated payload, stamping etag and time."""
    updated = payload.get("updated")
    return Item(
        id=payload.get("id"),
        etag=compute_etag(payload),
        updated=updated if isinstance(updated, datetime) else _utcnow(),
        payload=payload,
    )


def _default_items() -> list[Item]:
    return []


@dataclass
class ItemList:
    """
    One page of a ``find``.

    Attributes:
        total: Matches before the window was applied; ``-1`` when the
            storer cannot count cheaply.
        offset: Window offset that produced the page.
        limit: Window limit, ``None`` when unlimited.
        items: The page itself.
    """

    total: int = -1
    offset: int = 0
    limit: int | None = None
    items: list[Item] = field(default_factory=_default_items)
