"""QueryValidator — request parameters + schema -> Query or issues."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from ..primitives.exceptions import FilterSyntaxError, InvalidValueError
from ..primitives.validation import ValidationResult
from .model import Query, SortField, Window
from .parser import parse_predicate
from .predicate import (
    And,
    Comparison,
    Equal,
    Exists,
    Expression,
    Membership,
    NotEqual,
    Or,
    Pattern,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..schema.field import Field
    from ..schema.schema import Schema

logger = logging.getLogger("rest_layer.query")

UNLIMITED = "unlimited"


class QueryValidator:
    """
    Compiles ``filter``, ``sort``, ``skip``, ``limit`` and ``page``
    parameters against a schema.

    Unlike fail-fast validation, every parameter is checked and **all**
    issues are returned together, keyed by parameter name.

    Usage::

        validator = QueryValidator(schema, default_limit=20)
        query, result = validator.validate({"filter": '{age: {$gt: 18}}'})
        if not result.is_valid:
            ...  # result.errors == {"filter": [...], ...}
    """

    def __init__(self, schema: Schema, *, default_limit: int | None = None) -> None:
        self._schema = schema
        self._default_limit = default_limit

    def validate(
        self,
        params: Mapping[str, str],
        *,
        apply_default_limit: bool = True,
    ) -> tuple[Query | None, ValidationResult]:
        """
        Return ``(query, result)``; *query* is ``None`` when *result*
        holds issues.

        ``apply_default_limit=False`` leaves the window unlimited when the
        request gives no ``limit`` (bulk deletion selects every match).
        """
        result = ValidationResult.success()

        predicate: And | None = None
        raw_filter = params.get("filter")
        if raw_filter:
            predicate, issues = self.validate_filter(raw_filter)
            for issue in issues:
                result.add_error("filter", issue)

        sort: tuple[SortField, ...] = ()
        raw_sort = params.get("sort")
        if raw_sort:
            sort, issues = self.parse_sort(raw_sort)
            for issue in issues:
                result.add_error("sort", issue)

        window = self._validate_window(params, result, apply_default_limit)

        if not result.is_valid or window is None:
            logger.debug("Rejected query parameters: %s", result.errors)
            return None, result
        return Query(predicate=predicate, sort=sort, window=window), result

    # -- filter --------------------------------------------------------------

    def validate_filter(self, text: str) -> tuple[And | None, list[str]]:
        """Parse *text* and check it against the schema."""
        try:
            parsed = parse_predicate(text)
        except FilterSyntaxError as exc:
            return None, [str(exc)]
        issues: list[str] = []
        checked = self._check(parsed, issues)
        if issues:
            # an operator map yields one leaf per operator on the same field
            return None, list(dict.fromkeys(issues))
        return cast("And", checked), []

    def _check(self, expression: Expression, issues: list[str]) -> Expression:
        """Rebuild *expression* with normalised values, collecting issues."""
        match expression:
            case And(children=children):
                return And(tuple(self._check(c, issues) for c in children))
            case Or(children=children):
                return Or(tuple(self._check(c, issues) for c in children))
            case Equal(field=name, value=value):
                definition = self._filterable(name, issues)
                if definition is None:
                    return expression
                return Equal(name, self._value(definition, name, value, issues))
            case NotEqual(field=name, value=value):
                definition = self._filterable(name, issues)
                if definition is None:
                    return expression
                return NotEqual(name, self._value(definition, name, value, issues))
            case Comparison(field=name, op=op, value=value):
                definition = self._filterable(name, issues)
                if definition is None:
                    return expression
                validator = definition.validator
                if validator is not None and not validator.comparable:
                    reason = f"{op.value} not supported by this field"
                    issues.append(_invalid(name, reason))
                    return expression
                normalised = self._value(definition, name, value, issues)
                return Comparison(name, op, normalised)
            case Membership(field=name, op=op, values=values):
                definition = self._filterable(name, issues)
                if definition is None:
                    return expression
                normalised = tuple(
                    self._value(definition, name, v, issues) for v in values
                )
                return Membership(name, op, normalised)
            case Exists(field=name):
                self._filterable(name, issues)
                return expression
            case Pattern(field=name):
                definition = self._filterable(name, issues)
                if definition is None:
                    return expression
                validator = definition.validator
                if validator is not None and not validator.matchable:
                    issues.append(_invalid(name, "$regex not supported by this field"))
                return expression
            case _:
                raise TypeError(f"unknown expression {expression!r}")

    def _filterable(self, name: str, issues: list[str]) -> Field | None:
        definition = self._schema.get_field(name)
        if definition is None:
            issues.append(f"unknown query field: {name}")
            return None
        if not definition.filterable:
            issues.append(f"field is not filterable: {name}")
            return None
        return definition

    @staticmethod
    def _value(definition: Field, name: str, value: Any, issues: list[str]) -> Any:
        if value is None or definition.validator is None:
            return value
        try:
            return definition.validator.validate_query(value)
        except InvalidValueError as exc:
            issues.append(_invalid(name, exc.message))
            return value

    # -- sort ----------------------------------------------------------------

    def parse_sort(self, text: str) -> tuple[tuple[SortField, ...], list[str]]:
        """Parse ``name,-other`` into sort fields, checking sortability."""
        fields: list[SortField] = []
        issues: list[str] = []
        for part in text.split(","):
            name = part.strip()
            reverse = name.startswith("-")
            if reverse:
                name = name[1:]
            definition = self._schema.get_field(name) if name else None
            if definition is None:
                issues.append(f"invalid sort field: {name}")
            elif not definition.sortable:
                issues.append(f"field is not sortable: {name}")
            else:
                fields.append(SortField(name, reverse))
        return tuple(fields), issues

    # -- window --------------------------------------------------------------

    def _validate_window(
        self,
        params: Mapping[str, str],
        result: ValidationResult,
        apply_default_limit: bool,
    ) -> Window | None:
        skip = _int_param(params, "skip", result, minimum=0)
        page = _int_param(params, "page", result, minimum=1)

        limit: int | None = None
        raw_limit = params.get("limit")
        if raw_limit == UNLIMITED:
            limit = None
        elif raw_limit:
            limit = _int_param(params, "limit", result, minimum=0)
        elif apply_default_limit:
            limit = self._default_limit

        offset = skip or 0
        if page is not None:
            if limit is None and "limit" not in result.errors:
                result.add_error(
                    "page",
                    "cannot use 'page' parameter with no 'limit' parameter "
                    "on a resource with no default pagination size",
                )
            elif limit is not None:
                offset += (page - 1) * limit

        if not result.is_valid:
            return None
        return Window(offset=offset, limit=limit)


def _invalid(name: str, reason: str) -> str:
    return f"invalid query expression for field '{name}': {reason}"


def _int_param(
    params: Mapping[str, str],
    name: str,
    result: ValidationResult,
    *,
    minimum: int,
) -> int | None:
    raw = params.get(name)
    if not raw:
        return None
    requirement = "a positive integer" if minimum > 0 else "a non-negative integer"
    if not (raw.isascii() and raw.isdigit()):
        result.add_error(name, f"must be {requirement}")
        return None
    value = int(raw)
    if value < minimum:
        result.add_error(name, f"must be {requirement}")
        return None
    return value
