"""Filter language, canonical queries and their validation."""

from __future__ import annotations

from .evaluator import matches, resolve_field, sort_documents
from .model import Query, SortField, Window
from .parser import OPERATORS, FilterParser, parse_predicate
from .predicate import (
    And,
    Comparison,
    ComparisonOperator,
    Equal,
    Exists,
    Expression,
    Membership,
    MembershipOperator,
    NotEqual,
    Or,
    Pattern,
    render,
    walk,
)
from .validator import UNLIMITED, QueryValidator

__all__ = [
    "OPERATORS",
    "UNLIMITED",
    "And",
    "Comparison",
    "ComparisonOperator",
    "Equal",
    "Exists",
    "Expression",
    "FilterParser",
    "Membership",
    "MembershipOperator",
    "NotEqual",
    "Or",
    "Pattern",
    "Query",
    "QueryValidator",
    "SortField",
    "Window",
    "matches",
    "parse_predicate",
    "render",
    "resolve_field",
    "sort_documents",
    "walk",
]
