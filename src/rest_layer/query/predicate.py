"""
Predicate tree — the parsed form of a ``filter`` parameter.

Nodes are immutable dataclasses forming a closed union
(:data:`Expression`). Consumers dispatch on it with ``match`` and end with
a ``case _`` that raises, so a new node kind cannot be silently ignored.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ComparisonOperator(str, Enum):
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"


class MembershipOperator(str, Enum):
    IN = "$in"
    NIN = "$nin"


@dataclass(frozen=True)
class Equal:
    field: str
    value: Any


@dataclass(frozen=True)
class NotEqual:
    field: str
    value: Any


@dataclass(frozen=True)
class Comparison:
    field: str
    op: ComparisonOperator
    value: Any


@dataclass(frozen=True)
class Membership:
    field: str
    op: MembershipOperator
    values: tuple[Any, ...]


@dataclass(frozen=True)
class Exists:
    field: str
    exists: bool = True


@dataclass(frozen=True)
class Pattern:
    field: str
    pattern: str


@dataclass(frozen=True)
class And:
    children: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class Or:
    children: tuple[Expression, ...] = ()


Expression = Equal | NotEqual | Comparison | Membership | Exists | Pattern | And | Or


def walk(expression: Expression) -> list[Expression]:
    """Return the leaf expressions of a tree, depth first."""
    match expression:
        case And(children=children) | Or(children=children):
            leaves: list[Expression] = []
            for child in children:
                leaves.extend(walk(child))
            return leaves
        case Equal() | NotEqual() | Comparison() | Membership() | Exists() | Pattern():
            return [expression]
        case _:
            raise TypeError(f"unknown expression {expression!r}")


def render(expression: Expression) -> str:
    """Render a tree back to filter text."""
    match expression:
        case And(children=children):
            return "{" + ", ".join(_render_member(c) for c in children) + "}"
        case _:
            return "{" + _render_member(expression) + "}"


def _render_member(expression: Expression) -> str:
    match expression:
        case Equal(field=name, value=value):
            return f"{_key(name)}: {_literal(value)}"
        case NotEqual(field=name, value=value):
            return f"{_key(name)}: {{$ne: {_literal(value)}}}"
        case Comparison(field=name, op=op, value=value):
            return f"{_key(name)}: {{{op.value}: {_literal(value)}}}"
        case Membership(field=name, op=op, values=values):
            items = ", ".join(_literal(v) for v in values)
            return f"{_key(name)}: {{{op.value}: [{items}]}}"
        case Exists(field=name, exists=exists):
            return f"{_key(name)}: {{$exists: {_literal(exists)}}}"
        case Pattern(field=name, pattern=pattern):
            return f"{_key(name)}: {{$regex: {_literal(pattern)}}}"
        case And(children=children):
            return "$and: [" + ", ".join(render(c) for c in children) + "]"
        case Or(children=children):
            return "$or: [" + ", ".join(render(c) for c in children) + "]"
        case _:
            raise TypeError(f"unknown expression {expression!r}")


def _key(name: str) -> str:
    if name and all(c.isalnum() or c in "_.-" for c in name):
        return name
    return json.dumps(name)


def _literal(value: Any) -> str:
    if hasattr(value, "isoformat"):
        return json.dumps(value.isoformat())
    return json.dumps(value)
