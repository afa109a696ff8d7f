"""Bulk DELETE on a list route: windowing, filtering and failure modes."""

from __future__ import annotations

import pytest

from rest_layer import (
    DEFAULT_CONF,
    Handler,
    Index,
    MemoryStorer,
    Request,
    Schema,
)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("params", "total", "remaining"),
    [
        ({}, 5, []),
        ({"limit": "2"}, 2, [3, 4, 5]),
        ({"limit": "2", "skip": "1"}, 2, [1, 4, 5]),
        ({"filter": '{foo: "even"}'}, 2, [1, 3, 5]),
        ({"filter": '{foo: "odd"}'}, 3, [2, 4]),
        ({"filter": '{foo: "odd"}', "limit": "2"}, 2, [2, 4, 5]),
        ({"filter": '{foo: "odd"}', "limit": "2", "skip": "1"}, 2, [1, 2, 4]),
        ({"sort": "-id", "limit": "2"}, 2, [1, 2, 3]),
    ],
)
async def test_delete_window(
    foo_handler: Handler,
    foo_storer: MemoryStorer,
    params: dict[str, str],
    total: int,
    remaining: list[int],
) -> None:
    """The default page size is ignored; skip/limit select in id order."""
    response = await foo_handler.serve(Request("DELETE", "/foo", params=params))

    assert response.status == 204
    assert response.headers["X-Total"] == str(total)
    assert response.body is None
    assert foo_storer.ids() == remaining


@pytest.mark.asyncio
async def test_delete_invalid_filter(
    foo_handler: Handler, foo_storer: MemoryStorer
) -> None:
    """A malformed filter leaves every item untouched."""
    response = await foo_handler.serve(
        Request.from_url("DELETE", "/foo?filter=invalid")
    )

    assert response.status == 422
    assert response.body == {
        "code": 422,
        "message": "URL parameters contain error(s)",
        "issues": {"filter": ["char 0: expected '{' got 'i'"]},
    }
    assert foo_storer.ids() == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_delete_without_storage(foo_schema: Schema) -> None:
    """A resource with no storer answers 501 whatever the request."""
    index = Index()
    index.bind("foo", foo_schema, None, DEFAULT_CONF)
    handler = Handler(index)

    for request in (
        Request("DELETE", "/foo"),
        Request("DELETE", "/foo", params={"filter": "invalid"}),
        Request("GET", "/foo/1"),
        Request("POST", "/foo", body="not json"),
    ):
        response = await handler.serve(request)
        assert response.status == 501
        assert response.body == {"code": 501, "message": "No Storage Defined"}


@pytest.mark.asyncio
async def test_delete_not_allowed(foo_schema: Schema) -> None:
    index = Index()
    index.bind("foo", foo_schema, MemoryStorer(), DEFAULT_CONF)

    response = await Handler(index).serve(Request("DELETE", "/foo"))

    assert response.status == 405
    assert response.body == {"code": 405, "message": "Invalid method"}
