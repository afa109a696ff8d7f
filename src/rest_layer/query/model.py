"""
Canonical query passed to storers.

``Query`` bundles the predicate (*what* to select) with sort and window
(*how* the selection is ordered and truncated). It is built once per
request and never mutated; the ``with_*`` helpers return copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .predicate import And

if TYPE_CHECKING:
    from .predicate import Expression


@dataclass(frozen=True)
class SortField:
    name: str
    reversed: bool = False


@dataclass(frozen=True)
class Window:
    """
    Offset/limit pair.

    Attributes:
        offset: Number of matching items to skip.
        limit: Maximum number of items; ``None`` means unlimited.
    """

    offset: int = 0
    limit: int | None = None

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError("window offset must be non-negative")
        if self.limit is not None and self.limit < 0:
            raise ValueError("window limit must be non-negative")


@dataclass(frozen=True)
class Query:
    """
    Immutable aggregate of predicate, sort and window.

    Attributes:
        predicate: Filter tree; ``None`` selects everything.
        sort: Ordered sort fields; empty lets the storer use id order.
        window: Offset/limit applied after filtering and sorting.
    """

    predicate: And | None = None
    sort: tuple[SortField, ...] = ()
    window: Window = field(default_factory=Window)

    def with_predicate(self, *expressions: Expression) -> Query:
        """Return a copy whose predicate also requires *expressions*."""
        children = self.predicate.children if self.predicate is not None else ()
        return replace(self, predicate=And(children + expressions))

    def with_sort(self, sort: tuple[SortField, ...]) -> Query:
        """Return a copy with the sort replaced."""
        return replace(self, sort=sort)

    def with_window(self, window: Window) -> Query:
        """Return a copy with the window replaced."""
        return replace(self, window=window)
