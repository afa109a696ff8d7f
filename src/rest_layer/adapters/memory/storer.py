"""MemoryStorer — dict-backed storer for tests and examples."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ...primitives.exceptions import ConflictError, NotFoundError
from ...query.evaluator import matches, sort_documents
from ...resource.item import Item, ItemList

if TYPE_CHECKING:
    from ...query.model import Query

logger = logging.getLogger("rest_layer.memory")


class MemoryStorer:
    """
    In-memory implementation of :class:`~rest_layer.resource.storer.Storer`.

    Items are kept in a dict keyed by id. ``latency`` (seconds) is awaited
    before each operation and between the deletions of a bulk delete, so
    tests can exercise deadlines and cancellation.
    """

    def __init__(self, items: list[Item] | None = None, *, latency: float = 0) -> None:
        self._store: dict[object, Item] = {}
        self.latency = latency
        for item in items or []:
            self._store[item.id] = item

    async def find(self, query: Query) -> ItemList:
        await self._wait()
        selected = self._select(query)
        window = query.window
        end = None if window.limit is None else window.offset + window.limit
        page = selected[window.offset : end]
        logger.debug("find: %d match(es), returning %d", len(selected), len(page))
        return ItemList(
            total=len(selected),
            offset=window.offset,
            limit=window.limit,
            items=page,
        )

    async def insert(self, items: list[Item]) -> None:
        await self._wait()
        for item in items:
            if item.id in self._store:
                raise ConflictError(f"item {item.id!r} already exists")
        for item in items:
            self._store[item.id] = item

    async def update(self, item: Item, original: Item) -> None:
        await self._wait()
        self._check_version(original)
        if item.id != original.id:
            self._store.pop(original.id)
        self._store[item.id] = item

    async def delete(self, query: Query) -> int:
        window = query.window
        end = None if window.limit is None else window.offset + window.limit
        selected = self._select(query)[window.offset : end]
        deleted = 0
        for item in selected:
            await self._wait()
            if self._store.pop(item.id, None) is not None:
                deleted += 1
        logger.debug("delete: removed %d item(s)", deleted)
        return deleted

    async def delete_item(self, item: Item) -> None:
        await self._wait()
        self._check_version(item)
        del self._store[item.id]

    # ── Internals ────────────────────────────────────────────────

    def _select(self, query: Query) -> list[Item]:
        matching = [
            item
            for item in self._store.values()
            if matches(query.predicate, item.payload)
        ]
        return sort_documents(matching, query.sort, key=_payload)

    def _check_version(self, original: Item) -> None:
        stored = self._store.get(original.id)
        if stored is None:
            raise NotFoundError(f"item {original.id!r} not found")
        if stored.etag != original.etag:
            raise ConflictError(f"item {original.id!r} has been modified")

    async def _wait(self) -> None:
        # yields even without latency so cancellation is observed
        await asyncio.sleep(self.latency)

    # ── Test helpers ─────────────────────────────────────────────

    def clear(self) -> None:
        self._store.clear()

    def ids(self) -> list[object]:
        return list(self._store)

    def __len__(self) -> int:
        return len(self._store)


def _payload(item: Item) -> dict[str, Any]:
    return item.payload
