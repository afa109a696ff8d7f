"""Handler — dispatches requests to the bound resources of an index."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from ..primitives.exceptions import (
    ModeNotAllowedError,
    NotConfiguredError,
    RestLayerError,
)
from ..resource.conf import Mode
from . import methods
from .errors import error_response
from .response import Response
from .route import resolve_route

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..resource.index import Index, Resource
    from .request import Request

    Operation = Callable[[methods.Context], Awaitable[Response]]

logger = logging.getLogger("rest_layer.rest")

# (is_item, method) -> (required mode, operation)
ROUTES: dict[tuple[bool, str], tuple[Mode, Operation]] = {
    (False, "GET"): (Mode.LIST, methods.list_get),
    (False, "HEAD"): (Mode.LIST, methods.list_get),
    (False, "POST"): (Mode.CREATE, methods.list_post),
    (False, "DELETE"): (Mode.CLEAR, methods.list_delete),
    (True, "GET"): (Mode.READ, methods.item_get),
    (True, "HEAD"): (Mode.READ, methods.item_get),
    # REPLACE or CREATE, settled once the item has been looked up
    (True, "PUT"): (Mode.REPLACE | Mode.CREATE, methods.item_put),
    (True, "PATCH"): (Mode.UPDATE, methods.item_patch),
    (True, "DELETE"): (Mode.DELETE, methods.item_delete),
}


class Handler:
    """
    Serves :class:`Request` objects against a compiled :class:`Index`.

    Every request goes through the same stages: the route is resolved,
    the resource must be bound to a storer, the method must be allowed by
    the resource modes, and parameters and body are validated before the
    storer is called. Failures at any stage become an error envelope.

    Usage::

        handler = Handler(index, timeout=5.0)
        response = await handler.serve(Request.from_url("GET", "/users?limit=5"))
    """

    def __init__(self, index: Index, *, timeout: float | None = None) -> None:
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive")
        if not index.compiled:
            index.compile()
        self.index = index
        self.timeout = timeout

    async def serve(self, request: Request) -> Response:
        logger.info("Handling %s %s", request.method, request.path)
        start = time.perf_counter()
        try:
            response = await self._dispatch(request)
        except RestLayerError as exc:
            response = error_response(exc)
            logger.debug("%s %s rejected: %r", request.method, request.path, exc)
        except asyncio.TimeoutError as exc:
            response = error_response(exc)
            logger.warning("%s %s timed out", request.method, request.path)
        except Exception as exc:
            logger.exception("%s %s failed", request.method, request.path)
            response = error_response(exc)
        elapsed = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s -> %d in %.2fms",
            request.method,
            request.path,
            response.status,
            elapsed,
        )
        return response

    async def _dispatch(self, request: Request) -> Response:
        route = resolve_route(self.index, request.path)
        resource = route.resource
        if resource.storer is None:
            raise NotConfiguredError(resource.path)
        if request.method == "OPTIONS":
            allow = ", ".join(allowed_methods(resource, route.is_item))
            return Response(200, {"Allow": allow})
        entry = ROUTES.get((route.is_item, request.method))
        if entry is None:
            raise ModeNotAllowedError(resource.path, request.method)
        mode, operation = entry
        if not resource.conf.allowed_modes & mode:
            raise ModeNotAllowedError(resource.path, mode)
        route.coerce_ids()
        ctx = methods.Context(request, route, self.timeout)
        await ctx.check_parents()
        return await operation(ctx)


def allowed_methods(resource: Resource, is_item: bool) -> list[str]:
    """HTTP methods accepted on a list or item route of *resource*."""
    allowed = [
        method
        for (item_route, method), (mode, _) in ROUTES.items()
        if item_route is is_item and resource.conf.allowed_modes & mode
    ]
    return [*allowed, "OPTIONS"]
