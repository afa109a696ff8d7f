"""Index — registry of resources bound during startup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..primitives.exceptions import ResourceBindingError
from ..query.validator import QueryValidator
from .conf import DEFAULT_CONF, Conf

if TYPE_CHECKING:
    from ..query.model import SortField
    from ..schema.schema import Schema
    from .storer import Storer

logger = logging.getLogger("rest_layer.index")


class Resource:
    """
    A named binding of a schema, a storer and a configuration.

    Sub-resources are bound under a parent through ``bind``; ``parent_field``
    names the child field holding the parent's id.
    """

    def __init__(
        self,
        index: Index,
        name: str,
        schema: Schema,
        storer: Storer | None,
        conf: Conf,
        *,
        parent: Resource | None = None,
        parent_field: str = "",
    ) -> None:
        self._index = index
        self.name = name
        self.schema = schema
        self.storer = storer
        self.conf = conf
        self.parent = parent
        self.parent_field = parent_field
        self.children: dict[str, Resource] = {}
        self.validator = QueryValidator(
            schema, default_limit=conf.pagination_default_limit
        )
        self.default_sort: tuple[SortField, ...] = ()

    @property
    def path(self) -> str:
        """Dotted path from the root, e.g. ``users.posts``."""
        if self.parent is None:
            return self.name
        return f"{self.parent.path}.{self.name}"

    def bind(
        self,
        name: str,
        field: str,
        schema: Schema,
        storer: Storer | None = None,
        conf: Conf = DEFAULT_CONF,
    ) -> Resource:
        """Bind a sub-resource whose *field* references this resource's id."""
        self._index.check_bindable(name, self.children)
        child = Resource(
            self._index, name, schema, storer, conf, parent=self, parent_field=field
        )
        self.children[name] = child
        logger.debug("Bound sub-resource %s (parent field %s)", child.path, field)
        return child

    def __repr__(self) -> str:
        return f"Resource({self.path!r})"


class Index:
    """
    Registry of root resources.

    Populated during a bind phase, then frozen by :meth:`compile`; the
    compiled index is shared read-only by every request.

    Usage::

        index = Index()
        users = index.bind("users", user_schema, MemoryStorer(), conf)
        users.bind("posts", "user", post_schema, MemoryStorer(), conf)
        index.compile()
        index.get_resource("users.posts")
    """

    def __init__(self) -> None:
        self._resources: dict[str, Resource] = {}
        self._compiled = False

    @property
    def compiled(self) -> bool:
        return self._compiled

    def bind(
        self,
        name: str,
        schema: Schema,
        storer: Storer | None = None,
        conf: Conf = DEFAULT_CONF,
    ) -> Resource:
        """Bind a root resource under *name*."""
        self.check_bindable(name, self._resources)
        resource = Resource(self, name, schema, storer, conf)
        self._resources[name] = resource
        logger.debug(
            "Bound resource %s (storer=%s, modes=%s)",
            name,
            type(storer).__name__ if storer is not None else None,
            conf.allowed_modes,
        )
        return resource

    def check_bindable(self, name: str, siblings: dict[str, Resource]) -> None:
        if self._compiled:
            raise ResourceBindingError(
                f"cannot bind {name!r}: index is already compiled"
            )
        if not name or "." in name or "/" in name:
            raise ResourceBindingError(f"invalid resource name {name!r}")
        if name in siblings:
            raise ResourceBindingError(f"resource {name!r} is already bound")

    def get_resource(self, path: str) -> Resource | None:
        """Return the resource at a dotted *path*, or ``None``."""
        names = path.split(".")
        resource = self._resources.get(names[0])
        for name in names[1:]:
            if resource is None:
                return None
            resource = resource.children.get(name)
        return resource

    def resources(self) -> list[Resource]:
        """All bound resources, parents before their children."""
        found: list[Resource] = []
        pending = list(self._resources.values())
        while pending:
            resource = pending.pop(0)
            found.append(resource)
            pending.extend(resource.children.values())
        return found

    def compile(self) -> None:
        """
        Check every binding and freeze the index.

        Raises:
            ResourceBindingError: On an invalid schema, an unknown parent
                field or an invalid ``default_sort``.
        """
        for resource in self.resources():
            try:
                resource.schema.compile()
            except ValueError as exc:
                raise ResourceBindingError(f"{resource.path}: {exc}") from exc
            if resource.parent is not None and (
                resource.schema.get_field(resource.parent_field) is None
            ):
                raise ResourceBindingError(
                    f"{resource.path}: unknown parent field "
                    f"{resource.parent_field!r}"
                )
            if resource.conf.default_sort:
                sort, issues = resource.validator.parse_sort(resource.conf.default_sort)
                if issues:
                    raise ResourceBindingError(
                        f"{resource.path}: invalid default sort: {'; '.join(issues)}"
                    )
                resource.default_sort = sort
        self._compiled = True
        logger.info("Compiled index with %d resource(s)", len(self.resources()))
