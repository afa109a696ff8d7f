"""
FilterParser — filter text -> predicate tree.

The dialect is JSON with unquoted keys::

    {status: "active", age: {$gte: 18, $lt: 65}, $or: [{a: 1}, {b: {$in: [1, 2]}}]}

Sibling keys and sibling operators combine with an implicit AND.
Parsing is purely syntactic: field names are not checked against any
schema here.
"""

from __future__ import annotations

import json
import re
from typing import Any

from ..primitives.exceptions import FilterSyntaxError
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
)

OPERATORS: frozenset[str] = frozenset(
    {"$gt", "$gte", "$lt", "$lte", "$ne", "$in", "$nin", "$exists", "$regex"}
)

_WHITESPACE = " \t\r\n"
_KEY_RE = re.compile(r"\$?[A-Za-z0-9_.\-]+")
_NUMBER_RE = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_STRING_RE = re.compile(r'"(?:[^"\\]|\\.)*"')
_LITERALS: tuple[tuple[str, Any], ...] = (
    ("true", True),
    ("false", False),
    ("null", None),
)

# nesting of predicate objects accepted before the parser gives up
MAX_DEPTH = 32


class FilterParser:
    """
    Recursive-descent parser over a single filter text.

    Fails on the first unrecoverable token with a
    :class:`FilterSyntaxError` carrying its character offset, e.g.
    ``char 0: expected '{' got 'i'``.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.depth = 0

    def parse(self) -> And:
        self._skip_ws()
        predicate = self._parse_predicate()
        self._skip_ws()
        if self.pos < len(self.text):
            raise self._unexpected("EOF")
        return predicate

    # -- grammar -------------------------------------------------------------

    def _parse_predicate(self) -> And:
        if self.depth >= MAX_DEPTH:
            raise FilterSyntaxError(self.pos, "filter nested too deeply")
        self.depth += 1
        self._expect("{")
        self._skip_ws()
        if self._consume("}"):
            self.depth -= 1
            return And(())
        children: list[Expression] = []
        while True:
            self._skip_ws()
            children.extend(self._parse_expression())
            self._skip_ws()
            if self._consume(","):
                continue
            if self._consume("}"):
                self.depth -= 1
                return And(tuple(children))
            raise self._unexpected("',' or '}'")

    def _parse_expression(self) -> list[Expression]:
        start = self.pos
        key, quoted = self._parse_key("a field name")
        self._skip_ws()
        self._expect(":")
        self._skip_ws()
        if not quoted and key == "$and":
            return [And(self._parse_predicate_list())]
        if not quoted and key == "$or":
            return [Or(self._parse_predicate_list())]
        if not quoted and key.startswith("$"):
            raise FilterSyntaxError(start, f"unexpected operator {key}")
        if self._peek() == "{":
            return self._parse_operators(key)
        return [Equal(key, self._parse_scalar())]

    def _parse_predicate_list(self) -> tuple[And, ...]:
        self._expect("[")
        predicates: list[And] = []
        while True:
            self._skip_ws()
            predicates.append(self._parse_predicate())
            self._skip_ws()
            if self._consume(","):
                continue
            if self._consume("]"):
                return tuple(predicates)
            raise self._unexpected("',' or ']'")

    def _parse_operators(self, field: str) -> list[Expression]:
        self._expect("{")
        leaves: list[Expression] = []
        while True:
            self._skip_ws()
            start = self.pos
            op, quoted = self._parse_key("an operator")
            if quoted or op not in OPERATORS:
                raise FilterSyntaxError(start, f"unknown operator {op}")
            self._skip_ws()
            self._expect(":")
            self._skip_ws()
            leaves.append(self._parse_operator_value(field, op))
            self._skip_ws()
            if self._consume(","):
                continue
            if self._consume("}"):
                return leaves
            raise self._unexpected("',' or '}'")

    def _parse_operator_value(self, field: str, op: str) -> Expression:
        start = self.pos
        if op == "$ne":
            return NotEqual(field, self._parse_scalar())
        if op in ("$in", "$nin"):
            values = self._parse_scalar_list()
            return Membership(field, MembershipOperator(op), values)
        if op == "$exists":
            flag = self._parse_scalar()
            if not isinstance(flag, bool):
                raise FilterSyntaxError(start, "$exists: expected true or false")
            return Exists(field, flag)
        if op == "$regex":
            pattern = self._parse_scalar()
            if not isinstance(pattern, str):
                raise FilterSyntaxError(start, "$regex: expected a string")
            try:
                re.compile(pattern)
            except re.error as exc:
                raise FilterSyntaxError(start, f"$regex: invalid regex: {exc}") from exc
            return Pattern(field, pattern)
        return Comparison(field, ComparisonOperator(op), self._parse_scalar())

    def _parse_scalar_list(self) -> tuple[Any, ...]:
        self._expect("[")
        self._skip_ws()
        values: list[Any] = []
        if self._consume("]"):
            return ()
        while True:
            self._skip_ws()
            values.append(self._parse_scalar())
            self._skip_ws()
            if self._consume(","):
                continue
            if self._consume("]"):
                return tuple(values)
            raise self._unexpected("',' or ']'")

    # -- tokens --------------------------------------------------------------

    def _parse_key(self, expected: str) -> tuple[str, bool]:
        if self._peek() == '"':
            return self._parse_string(), True
        match = _KEY_RE.match(self.text, self.pos)
        if match is None:
            raise self._unexpected(expected)
        self.pos = match.end()
        return match.group(), False

    def _parse_scalar(self) -> Any:
        if self._peek() == '"':
            return self._parse_string()
        match = _NUMBER_RE.match(self.text, self.pos)
        if match is not None:
            self.pos = match.end()
            token = match.group()
            if any(c in token for c in ".eE"):
                return float(token)
            return int(token)
        for literal, value in _LITERALS:
            if self.text.startswith(literal, self.pos):
                self.pos += len(literal)
                return value
        raise self._unexpected("a value")

    def _parse_string(self) -> str:
        match = _STRING_RE.match(self.text, self.pos)
        if match is None:
            raise FilterSyntaxError(self.pos, "unterminated string")
        try:
            value = json.loads(match.group())
        except json.JSONDecodeError as exc:
            raise FilterSyntaxError(self.pos, f"invalid string: {exc.msg}") from exc
        self.pos = match.end()
        return str(value)

    # -- cursor helpers ------------------------------------------------------

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _consume(self, char: str) -> bool:
        if self._peek() == char:
            self.pos += 1
            return True
        return False

    def _expect(self, char: str) -> None:
        if not self._consume(char):
            raise self._unexpected(f"'{char}'")

    def _skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def _unexpected(self, expected: str) -> FilterSyntaxError:
        got = f"'{self.text[self.pos]}'" if self.pos < len(self.text) else "EOF"
        return FilterSyntaxError(self.pos, f"expected {expected} got {got}")


def parse_predicate(text: str) -> And:
    """Parse filter *text* into a predicate tree."""
    return FilterParser(text).parse()
