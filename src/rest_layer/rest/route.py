"""Route — resolution of a request path against the index."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import (
    InvalidValueError,
    ResourceNotFoundError,
    ValidationError,
)
from ..query.predicate import Equal
from .errors import URL_ISSUES

if TYPE_CHECKING:
    from ..resource.index import Index, Resource


def _no_parents() -> list[tuple[Resource, Any]]:
    return []


@dataclass
class Route:
    """
    A resolved path: ``/users/42/posts/7`` gives the ``users.posts``
    resource, item id ``"7"`` and one parent ``(users, "42")``.

    Ids stay as path text until :meth:`coerce_ids` runs them through the
    ``id`` field of each schema.
    """

    resource: Resource
    resource_id: Any = None
    parents: list[tuple[Resource, Any]] = field(default_factory=_no_parents)
    is_item: bool = False

    def coerce_ids(self) -> None:
        """
        Normalise the path ids.

        Raises:
            ValidationError: When an id is rejected by its ``id`` field.
        """
        issues: dict[str, list[str]] = {}
        parents: list[tuple[Resource, Any]] = []
        for resource, raw in self.parents:
            value, message = _coerce(resource, raw)
            if message:
                issues.setdefault(f"{resource.name}.id", []).append(message)
            parents.append((resource, value))
        self.parents = parents
        if self.is_item:
            self.resource_id, message = _coerce(self.resource, self.resource_id)
            if message:
                issues.setdefault("id", []).append(message)
        if issues:
            raise ValidationError(issues, URL_ISSUES)

    @property
    def parent_id(self) -> Any:
        return self.parents[-1][1] if self.parents else None

    def scope(self) -> tuple[Equal, ...]:
        """Predicates restricting a sub-resource to its parent."""
        if not self.parents:
            return ()
        return (Equal(self.resource.parent_field, self.parent_id),)

    def parent_lookups(self) -> list[tuple[Resource, tuple[Equal, ...]]]:
        """Per parent, the predicates selecting it within its own parent."""
        lookups: list[tuple[Resource, tuple[Equal, ...]]] = []
        for position, (resource, value) in enumerate(self.parents):
            predicates = [Equal("id", value)]
            if position > 0:
                predicates.append(
                    Equal(resource.parent_field, self.parents[position - 1][1])
                )
            lookups.append((resource, tuple(predicates)))
        return lookups


def resolve_route(index: Index, path: str) -> Route:
    """
    Walk ``/name/id/name/id...`` through the index.

    Raises:
        ResourceNotFoundError: When a name segment is not bound.
    """
    segments = [segment for segment in path.strip("/").split("/") if segment]
    if not segments:
        raise ResourceNotFoundError(path)
    resource = index.get_resource(segments[0])
    if resource is None:
        raise ResourceNotFoundError(path)
    parents: list[tuple[Resource, Any]] = []
    position = 1
    while position < len(segments):
        item_id = segments[position]
        if position + 1 == len(segments):
            return Route(resource, item_id, parents, is_item=True)
        child = resource.children.get(segments[position + 1])
        if child is None:
            raise ResourceNotFoundError(path)
        parents.append((resource, item_id))
        resource = child
        position += 2
    return Route(resource, None, parents)


def _coerce(resource: Resource, raw: Any) -> tuple[Any, str]:
    definition = resource.schema.get_field("id")
    if definition is None or definition.validator is None:
        return raw, ""
    try:
        return definition.validator.validate_query(raw), ""
    except InvalidValueError as exc:
        return raw, exc.message
