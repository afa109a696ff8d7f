"""
Per-operation request handlers.

Each function receives a :class:`Context` whose route has been resolved,
whose resource is bound to a storer and whose mode has been checked, and
returns a :class:`Response` or raises a package exception.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import timezone
from email.utils import format_datetime
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import (
    ConflictError,
    ModeNotAllowedError,
    NotConfiguredError,
    NotFoundError,
    ParentNotFoundError,
    ValidationError,
)
from ..query.model import Query, SortField, Window
from ..query.predicate import Equal
from ..resource.conf import Mode
from ..resource.item import Item, new_item
from .errors import DOCUMENT_ISSUES, URL_ISSUES
from .response import Response

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from ..resource.index import Resource
    from ..resource.storer import Storer
    from .request import Request
    from .route import Route

logger = logging.getLogger("rest_layer.rest")


@dataclass
class Context:
    request: Request
    route: Route
    timeout: float | None = None

    @property
    def resource(self) -> Resource:
        return self.route.resource

    @property
    def storer(self) -> Storer:
        storer = self.resource.storer
        if storer is None:
            raise NotConfiguredError(self.resource.path)
        return storer

    async def run(self, awaitable: Awaitable[Any]) -> Any:
        """Await a storer call under the request deadline."""
        if self.timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, self.timeout)

    def query(self, *, apply_default_limit: bool = True) -> Query:
        """Compile the URL parameters, scoped to the parent route."""
        query, result = self.resource.validator.validate(
            self.request.params, apply_default_limit=apply_default_limit
        )
        if query is None:
            raise ValidationError(result.errors, URL_ISSUES)
        scope = self.route.scope()
        if scope:
            query = query.with_predicate(*scope)
        if not query.sort and self.resource.default_sort:
            query = query.with_sort(self.resource.default_sort)
        logger.debug("Compiled query for %s: %s", self.resource.path, query)
        return query

    async def check_parents(self) -> None:
        for resource, predicates in self.route.parent_lookups():
            if resource.storer is None:
                continue
            lookup = Query().with_predicate(*predicates).with_window(Window(limit=1))
            found = await self.run(resource.storer.find(lookup))
            if not found.items:
                raise ParentNotFoundError(resource.path)

    async def fetch(self, query: Query | None = None) -> Item | None:
        """Load the routed item, ``None`` when it does not exist."""
        lookup = (query or Query()).with_predicate(
            Equal("id", self.route.resource_id), *self.route.scope()
        )
        found = await self.run(self.storer.find(lookup.with_window(Window(limit=1))))
        return found.items[0] if found.items else None


# ── List routes ──────────────────────────────────────────────────


async def list_get(ctx: Context) -> Response:
    query = ctx.query()
    found = await ctx.run(ctx.storer.find(query))
    headers: dict[str, str] = {}
    if found.total >= 0:
        headers["X-Total"] = str(found.total)
    body = [{**item.payload, "_etag": item.etag} for item in found.items]
    return Response(200, headers, None if ctx.request.method == "HEAD" else body)


async def list_post(ctx: Context) -> Response:
    payload = ctx.request.json_object()
    changes, base = ctx.resource.schema.prepare(payload)
    _bind_parent(ctx, changes, base)
    document, result = ctx.resource.schema.validate(changes, base)
    if not result.is_valid:
        raise ValidationError(result.errors, DOCUMENT_ISSUES)
    item = new_item(document)
    await ctx.run(ctx.storer.insert([item]))
    headers = _item_headers(item)
    headers["Content-Location"] = f"/{ctx.request.path.strip('/')}/{item.id}"
    return Response(201, headers, dict(item.payload))


async def list_delete(ctx: Context) -> Response:
    query = ctx.query(apply_default_limit=False)
    if not any(sort.name == "id" for sort in query.sort):
        query = query.with_sort((*query.sort, SortField("id")))
    deleted = await ctx.run(ctx.storer.delete(query))
    return Response(204, {"X-Total": str(deleted)})


# ── Item routes ──────────────────────────────────────────────────


async def item_get(ctx: Context) -> Response:
    query = ctx.query(apply_default_limit=False)
    item = await ctx.fetch(query)
    if item is None:
        raise NotFoundError(ctx.route.resource_id)
    headers = _item_headers(item)
    if _etag_matches(ctx.request.header("If-None-Match"), item):
        return Response(304, headers)
    return Response(
        200, headers, None if ctx.request.method == "HEAD" else dict(item.payload)
    )


async def item_put(ctx: Context) -> Response:
    payload = ctx.request.json_object()
    if "id" in payload and payload["id"] != ctx.route.resource_id:
        raise ValidationError({"id": ["cannot change document ID"]}, DOCUMENT_ISSUES)
    payload["id"] = ctx.route.resource_id
    original = await ctx.fetch()
    schema = ctx.resource.schema
    if original is None:
        if not ctx.resource.conf.is_mode_allowed(Mode.CREATE):
            raise ModeNotAllowedError(ctx.resource.path, Mode.CREATE)
        if ctx.request.header("If-Match") is not None:
            raise ConflictError("If-Match given for a missing item")
        changes, base = schema.prepare(payload)
    else:
        if not ctx.resource.conf.is_mode_allowed(Mode.REPLACE):
            raise ModeNotAllowedError(ctx.resource.path, Mode.REPLACE)
        _check_if_match(ctx, original)
        changes, base = schema.prepare(payload, original.payload, replace=True)
    _bind_parent(ctx, changes, base)
    document, result = schema.validate(changes, base)
    if not result.is_valid:
        raise ValidationError(result.errors, DOCUMENT_ISSUES)
    item = new_item(document)
    if original is None:
        await ctx.run(ctx.storer.insert([item]))
        return Response(201, _item_headers(item), dict(item.payload))
    await ctx.run(ctx.storer.update(item, original))
    return Response(200, _item_headers(item), dict(item.payload))


async def item_patch(ctx: Context) -> Response:
    payload = ctx.request.json_object()
    original = await ctx.fetch()
    if original is None:
        raise NotFoundError(ctx.route.resource_id)
    _check_if_match(ctx, original)
    changes, base = ctx.resource.schema.prepare(payload, original.payload)
    _bind_parent(ctx, changes, base)
    document, result = ctx.resource.schema.validate(changes, base)
    if document.get("id") != original.id and "id" not in result.errors:
        result.add_error("id", "cannot change document ID")
    if not result.is_valid:
        raise ValidationError(result.errors, DOCUMENT_ISSUES)
    item = new_item(document)
    await ctx.run(ctx.storer.update(item, original))
    return Response(200, _item_headers(item), dict(item.payload))


async def item_delete(ctx: Context) -> Response:
    original = await ctx.fetch()
    if original is None:
        raise NotFoundError(ctx.route.resource_id)
    _check_if_match(ctx, original)
    await ctx.run(ctx.storer.delete_item(original))
    return Response(204)


# ── Helpers ──────────────────────────────────────────────────────


def _bind_parent(ctx: Context, changes: dict[str, Any], base: dict[str, Any]) -> None:
    """Force the parent field of a sub-resource document to the route's parent."""
    if not ctx.route.parents:
        return
    name = ctx.resource.parent_field
    parent_id = ctx.route.parent_id
    if name in changes and changes[name] != parent_id:
        raise ValidationError(
            {name: ["does not match the parent resource id"]}, DOCUMENT_ISSUES
        )
    base[name] = parent_id


def _item_headers(item: Item) -> dict[str, str]:
    updated = item.updated
    if updated.tzinfo is None:
        updated = updated.replace(tzinfo=timezone.utc)
    return {
        "Etag": f'W/"{item.etag}"',
        "Last-Modified": format_datetime(updated.astimezone(timezone.utc), usegmt=True),
    }


def _normalise_etag(value: str) -> str:
    value = value.strip()
    if value.startswith("W/"):
        value = value[2:]
    return value.strip('"')


def _etag_matches(header: str | None, item: Item) -> bool:
    if header is None:
        return False
    tags = {_normalise_etag(tag) for tag in header.split(",")}
    return "*" in tags or item.etag in tags


def _check_if_match(ctx: Context, original: Item) -> None:
    header = ctx.request.header("If-Match")
    if header is not None and not _etag_matches(header, original):
        raise ConflictError(f"etag mismatch for {original.id!r}")
