"""
In-memory evaluation of predicate trees and sort orders.

Used by the memory storer and by any storer that filters documents in
Python instead of translating the tree to a backend query.
"""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import TYPE_CHECKING, Any, TypeVar

from .model import SortField
from .predicate import (
    And,
    Comparison,
    ComparisonOperator,
    Equal,
    Exists,
    Membership,
    MembershipOperator,
    NotEqual,
    Or,
    Pattern,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from .predicate import Expression

_MISSING: Any = object()
T = TypeVar("T")


def resolve_field(document: Any, path: str) -> Any:
    """
    Resolve a dot-separated path in a document.

    Returns a private sentinel when a segment is absent, so that a stored
    ``None`` and a missing key can be told apart.
    """
    current = document
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def matches(expression: Expression | None, document: dict[str, Any]) -> bool:
    """Return ``True`` when *document* satisfies *expression*."""
    if expression is None:
        return True
    match expression:
        case And(children=children):
            return all(matches(c, document) for c in children)
        case Or(children=children):
            return any(matches(c, document) for c in children)
        case Equal(field=name, value=value):
            return _equals(resolve_field(document, name), value)
        case NotEqual(field=name, value=value):
            return not _equals(resolve_field(document, name), value)
        case Comparison(field=name, op=op, value=value):
            return _compare(resolve_field(document, name), op, value)
        case Membership(field=name, op=op, values=values):
            found = any(_equals(resolve_field(document, name), v) for v in values)
            return found if op is MembershipOperator.IN else not found
        case Exists(field=name, exists=exists):
            return (resolve_field(document, name) is not _MISSING) is exists
        case Pattern(field=name, pattern=pattern):
            actual = resolve_field(document, name)
            return isinstance(actual, str) and re.search(pattern, actual) is not None
        case _:
            raise TypeError(f"unknown expression {expression!r}")


def _equals(actual: Any, expected: Any) -> bool:
    if actual is _MISSING:
        return expected is None
    if isinstance(actual, list) and not isinstance(expected, list):
        return expected in actual
    return bool(actual == expected)


_COMPARATORS: dict[ComparisonOperator, Callable[[Any, Any], bool]] = {
    ComparisonOperator.GT: lambda a, b: a > b,
    ComparisonOperator.GTE: lambda a, b: a >= b,
    ComparisonOperator.LT: lambda a, b: a < b,
    ComparisonOperator.LTE: lambda a, b: a <= b,
}


def _compare(actual: Any, op: ComparisonOperator, expected: Any) -> bool:
    if actual is _MISSING or actual is None:
        return False
    try:
        return bool(_COMPARATORS[op](actual, expected))
    except TypeError:
        return False


def _cmp_values(left: Any, right: Any) -> int:
    """Total order: missing/None first, then values; mixed kinds by type name."""
    left_missing = left is _MISSING or left is None
    right_missing = right is _MISSING or right is None
    if left_missing or right_missing:
        if left_missing and right_missing:
            return 0
        return -1 if left_missing else 1
    try:
        if left < right:
            return -1
        if left > right:
            return 1
        return 0
    except TypeError:
        left_kind, right_kind = type(left).__name__, type(right).__name__
        return (left_kind > right_kind) - (left_kind < right_kind)


def sort_documents(
    documents: list[T],
    sort: tuple[SortField, ...],
    *,
    tie_breaker: str = "id",
    key: Callable[[T], dict[str, Any]] | None = None,
) -> list[T]:
    """
    Return *documents* ordered by *sort*, ties broken by *tie_breaker*.

    *key* maps each element to the document whose fields are compared,
    e.g. ``lambda item: item.payload``.

    The tie-breaker makes the order total, so offset/limit windows are
    reproducible across calls over unchanged data.
    """
    keys = list(sort)
    if not any(k.name == tie_breaker for k in keys):
        keys.append(SortField(tie_breaker))

    def compare(left: T, right: T) -> int:
        left_doc = key(left) if key else left
        right_doc = key(right) if key else right
        for field in keys:
            result = _cmp_values(
                resolve_field(left_doc, field.name),
                resolve_field(right_doc, field.name),
            )
            if result:
                return -result if field.reversed else result
        return 0

    return sorted(documents, key=cmp_to_key(compare))
