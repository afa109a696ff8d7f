"""Ordered field definitions, document preparation and validation."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from ..primitives.exceptions import InvalidValueError
from ..primitives.validation import ValidationResult
from .field import Field
from .validators.composite import Array, Dict, Object


def _default_fields() -> dict[str, Field]:
    return {}


@dataclass
class Schema:
    """
    Declarative description of a resource document.

    Usage::

        schema = Schema(fields={
            "id": ID_FIELD,
            "title": Field(required=True, filterable=True, validator=String()),
        })
        changes, base = schema.prepare(payload)
        doc, result = schema.validate(changes, base)
    """

    fields: dict[str, Field] = field(default_factory=_default_fields)
    description: str = ""

    # -- look-up -------------------------------------------------------------

    def get_field(self, name: str) -> Field | None:
        """
        Resolve a dot-separated field path.

        Traverses ``Object`` sub-schemas, ``Dict`` values (any key) and the
        item field of ``Array``.
        """
        head, _, rest = name.partition(".")
        current = self.fields.get(head)
        while current is not None and rest:
            head, _, rest = rest.partition(".")
            current = _child_field(current, head)
        return current

    def compile(self) -> None:
        """
        Check the definitions once, at bind time.

        Raises:
            ValueError: On empty or dotted field names, or an invalid default.
        """
        for name, definition in self.fields.items():
            if not name or "." in name:
                raise ValueError(f"invalid field name {name!r}")
            validator = definition.validator
            if isinstance(validator, Object):
                try:
                    validator.schema.compile()
                except ValueError as exc:
                    raise ValueError(f"{name}.{exc}") from exc
            if definition.has_default and validator is not None:
                try:
                    validator.validate(definition.default)
                except InvalidValueError as exc:
                    raise ValueError(
                        f"{name}: invalid default: {exc.message}"
                    ) from exc

    # -- documents -----------------------------------------------------------

    def prepare(
        self,
        payload: dict[str, Any],
        original: dict[str, Any] | None = None,
        *,
        replace: bool = False,
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """
        Split an incoming payload into ``(changes, base)``.

        *changes* is what the client sent. *base* is what the server
        contributes: defaults and ``on_init`` hooks for a new document, the
        stored document (or only its read-only fields when *replace*)
        followed by ``on_update`` hooks for an existing one.
        """
        changes = dict(payload)
        if original is None:
            base: dict[str, Any] = {}
            for name, definition in self.fields.items():
                if definition.on_init is not None:
                    base[name] = definition.on_init(changes.get(name))
                elif definition.has_default and name not in changes:
                    base[name] = copy.deepcopy(definition.default)
            return changes, base

        if replace:
            base = {}
            for name, value in original.items():
                definition = self.fields.get(name)
                if definition is not None and definition.read_only:
                    base[name] = value
            for name, definition in self.fields.items():
                if definition.has_default and name not in changes and name not in base:
                    base[name] = copy.deepcopy(definition.default)
        else:
            base = dict(original)
        for name, definition in self.fields.items():
            if definition.on_update is not None:
                base[name] = definition.on_update(base.get(name))
        return changes, base

    def validate(
        self, changes: dict[str, Any], base: dict[str, Any]
    ) -> tuple[dict[str, Any], ValidationResult]:
        """
        Apply *changes* over *base* and validate the resulting document.

        A ``None`` change removes the field. Every issue is collected;
        nested object issues are reported under dotted names.
        """
        result = ValidationResult.success()
        doc = dict(base)
        for name, value in changes.items():
            definition = self.fields.get(name)
            if definition is None:
                result.add_error(name, "invalid field")
                continue
            if definition.read_only and (name not in base or base[name] != value):
                result.add_error(name, "read-only")
                continue
            if value is None:
                doc.pop(name, None)
            else:
                doc[name] = value

        for name, definition in self.fields.items():
            if name in result.errors:
                continue
            if name not in doc:
                if definition.required:
                    result.add_error(name, "required")
                continue
            if definition.validator is None:
                continue
            try:
                doc[name] = definition.validator.validate(doc[name])
            except InvalidValueError as exc:
                if not exc.issues:
                    result.add_error(name, exc.message)
                for sub, messages in exc.issues.items():
                    for message in messages:
                        result.add_error(f"{name}.{sub}", message)
        return doc, result

    def describe(self) -> dict[str, Any]:
        shape: dict[str, Any] = {
            "type": "object",
            "properties": {name: f.describe() for name, f in self.fields.items()},
        }
        required = [name for name, f in self.fields.items() if f.required]
        if required:
            shape["required"] = required
        if self.description:
            shape["description"] = self.description
        return shape


def _child_field(parent: Field, name: str) -> Field | None:
    validator = parent.validator
    if isinstance(validator, Array) and validator.values is not None:
        validator = validator.values.validator
    if isinstance(validator, Object):
        return validator.schema.fields.get(name)
    if isinstance(validator, Dict):
        return validator.values if validator.values is not None else Field()
    return None
