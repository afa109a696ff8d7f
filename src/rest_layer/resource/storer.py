"""The persistence port a resource is bound to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..query.model import Query
    from .item import Item, ItemList


@runtime_checkable
class Storer(Protocol):
    """
    Async storage backend for one resource.

    Errors are reported with the package exceptions so the handler can
    map them to responses:

    - ``NotFoundError`` when the item to change no longer exists;
    - ``ConflictError`` when an id already exists on insert, or the
      original's ``etag`` does not match the stored version on
      update/delete;
    - ``RequestCanceledError`` when the storer aborts on cancellation.

    Anything else is treated as an opaque storage failure.
    """

    async def find(self, query: Query) -> ItemList:
        """Return the items selected by *query* and the pre-window total."""
        ...

    async def insert(self, items: list[Item]) -> None: ...

    async def update(self, item: Item, original: Item) -> None:
        """Replace *original* with *item* if it has not changed meanwhile."""
        ...

    async def delete(self, query: Query) -> int:
        """Delete the items selected by *query*; return how many were removed."""
        ...

    async def delete_item(self, item: Item) -> None: ...
