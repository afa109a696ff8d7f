"""Tests for Handler: routing, modes, CRUD operations and storer failures."""

from __future__ import annotations

import asyncio
import logging

import pytest

from rest_layer import (
    ID_FIELD,
    READ_ONLY,
    READ_WRITE,
    Conf,
    Field,
    Handler,
    Index,
    Item,
    MemoryStorer,
    Mode,
    Query,
    Request,
    RequestCanceledError,
    Schema,
    new_item,
)
from rest_layer.query import Equal
from rest_layer.schema import String


class FailingStorer(MemoryStorer):
    """MemoryStorer whose ``find`` raises a preset exception."""

    def __init__(self, error: BaseException) -> None:
        super().__init__()
        self.error = error

    async def find(self, query: Query):
        raise self.error


@pytest.fixture
def post_schema() -> Schema:
    return Schema(
        fields={
            "id": ID_FIELD,
            "user": Field(required=True, filterable=True, validator=String()),
            "title": Field(validator=String()),
        }
    )


@pytest.fixture
def users() -> MemoryStorer:
    return MemoryStorer(
        [
            new_item({"id": "u1", "name": "ann", "age": 30, "role": "admin"}),
            new_item({"id": "u2", "name": "bob", "age": 20, "role": "member"}),
        ]
    )


@pytest.fixture
def posts() -> MemoryStorer:
    return MemoryStorer(
        [
            new_item({"id": "p1", "user": "u1", "title": "first"}),
            new_item({"id": "p2", "user": "u2", "title": "second"}),
        ]
    )


@pytest.fixture
def handler(
    user_schema: Schema,
    post_schema: Schema,
    users: MemoryStorer,
    posts: MemoryStorer,
) -> Handler:
    index = Index()
    conf = Conf(allowed_modes=READ_WRITE, pagination_default_limit=10)
    user_resource = index.bind("users", user_schema, users, conf)
    user_resource.bind("posts", "user", post_schema, posts, conf)
    return Handler(index)


async def _stored(storer: MemoryStorer, item_id: str) -> Item:
    found = await storer.find(Query().with_predicate(Equal("id", item_id)))
    return found.items[0]


# -- Routing ----------------------------------------------------------------


@pytest.mark.asyncio
class TestRouting:
    async def test_unknown_resource(self, handler: Handler):
        response = await handler.serve(Request("GET", "/nope"))
        assert response.status == 404
        assert response.body == {"code": 404, "message": "Resource Not Found"}

    async def test_unknown_sub_resource(self, handler: Handler):
        response = await handler.serve(Request("GET", "/users/u1/nope"))
        assert response.status == 404

    async def test_unknown_method(self, handler: Handler):
        response = await handler.serve(Request("TRACE", "/users"))
        assert response.status == 405

    async def test_options_lists_allowed_methods(self, user_schema: Schema):
        index = Index()
        index.bind("users", user_schema, MemoryStorer(), Conf(allowed_modes=READ_ONLY))
        handler = Handler(index)

        response = await handler.serve(Request("OPTIONS", "/users"))

        assert response.status == 200
        assert response.headers["Allow"] == "GET, HEAD, OPTIONS"

    async def test_logs_each_request(
        self, handler: Handler, caplog: pytest.LogCaptureFixture
    ):
        with caplog.at_level(logging.INFO, logger="rest_layer.rest"):
            await handler.serve(Request("GET", "/users"))
        assert any("GET /users -> 200" in r.getMessage() for r in caplog.records)


# -- List routes ------------------------------------------------------------


@pytest.mark.asyncio
class TestList:
    async def test_get(self, handler: Handler, users: MemoryStorer):
        response = await handler.serve(Request("GET", "/users"))

        assert response.status == 200
        assert response.headers["X-Total"] == "2"
        assert [doc["id"] for doc in response.body] == ["u1", "u2"]
        stored = await _stored(users, "u1")
        assert response.body[0]["_etag"] == stored.etag

    async def test_total_is_counted_before_the_window(self, handler: Handler):
        response = await handler.serve(
            Request.from_url("GET", "/users?sort=-age&limit=1")
        )

        assert response.headers["X-Total"] == "2"
        assert [doc["id"] for doc in response.body] == ["u1"]

    async def test_filter(self, handler: Handler):
        response = await handler.serve(
            Request("GET", "/users", params={"filter": "{age: {$lt: 25}}"})
        )

        assert response.headers["X-Total"] == "1"
        assert response.body[0]["name"] == "bob"

    async def test_head_has_no_body(self, handler: Handler):
        response = await handler.serve(Request("HEAD", "/users"))
        assert response.status == 200
        assert response.headers["X-Total"] == "2"
        assert response.body is None

    async def test_url_issues(self, handler: Handler):
        response = await handler.serve(
            Request(
                "GET",
                "/users",
                params={"filter": "{nope: 1}", "sort": "role", "limit": "-1"},
            )
        )

        assert response.status == 422
        assert response.body == {
            "code": 422,
            "message": "URL parameters contain error(s)",
            "issues": {
                "filter": ["unknown query field: nope"],
                "sort": ["field is not sortable: role"],
                "limit": ["must be a non-negative integer"],
            },
        }

    async def test_deeply_nested_filter_is_rejected(self, handler: Handler):
        text = "{$and: [" * 100 + "{age: 1}" + "]}" * 100
        response = await handler.serve(
            Request("GET", "/users", params={"filter": text})
        )

        assert response.status == 422
        assert response.body["issues"] == {
            "filter": ["char 256: filter nested too deeply"]
        }

    async def test_post(self, handler: Handler, users: MemoryStorer):
        response = await handler.serve(
            Request("POST", "/users", body='{"id": "u3", "name": "cid", "age": 5}')
        )

        assert response.status == 201
        assert response.body == {"id": "u3", "name": "cid", "age": 5, "role": "member"}
        assert response.headers["Content-Location"] == "/users/u3"
        stored = await _stored(users, "u3")
        assert response.headers["Etag"] == f'W/"{stored.etag}"'
        assert response.headers["Last-Modified"].endswith("GMT")

    async def test_post_generates_an_id(self, handler: Handler, users: MemoryStorer):
        response = await handler.serve(Request("POST", "/users", body={"name": "d"}))

        assert response.status == 201
        assert len(users) == 3
        assert isinstance(response.body["id"], str)

    async def test_post_document_issues(self, handler: Handler, users: MemoryStorer):
        response = await handler.serve(
            Request("POST", "/users", body={"age": -1, "role": "boss"})
        )

        assert response.status == 422
        assert response.body == {
            "code": 422,
            "message": "Document contains error(s)",
            "issues": {
                "name": ["required"],
                "age": ["is lower than 0"],
                "role": ["not one of [member, admin]"],
            },
        }
        assert len(users) == 2

    @pytest.mark.parametrize("body", [None, "[1, 2]", "{nope", [{"name": "x"}]])
    async def test_post_malformed_body(self, handler: Handler, body):
        response = await handler.serve(Request("POST", "/users", body=body))
        assert response.status == 400
        assert response.body == {"code": 400, "message": "Malformed body"}

    async def test_post_duplicate_id(self, handler: Handler):
        response = await handler.serve(
            Request("POST", "/users", body={"id": "u1", "name": "again"})
        )
        assert response.status == 409


# -- Item routes ------------------------------------------------------------


@pytest.mark.asyncio
class TestItem:
    async def test_get(self, handler: Handler, users: MemoryStorer):
        response = await handler.serve(Request("GET", "/users/u1"))

        assert response.status == 200
        assert response.body["name"] == "ann"
        stored = await _stored(users, "u1")
        assert response.headers["Etag"] == f'W/"{stored.etag}"'

    async def test_get_not_modified(self, handler: Handler):
        first = await handler.serve(Request("GET", "/users/u1"))
        response = await handler.serve(
            Request(
                "GET",
                "/users/u1",
                headers={"if-none-match": first.headers["Etag"]},
            )
        )
        assert response.status == 304
        assert response.body is None

    async def test_get_missing(self, handler: Handler):
        response = await handler.serve(Request("GET", "/users/nope"))
        assert response.status == 404
        assert response.body == {"code": 404, "message": "Not Found"}

    async def test_get_with_filter(self, handler: Handler):
        response = await handler.serve(
            Request("GET", "/users/u1", params={"filter": '{role: "member"}'})
        )
        assert response.status == 404

    async def test_put_creates(self, handler: Handler, users: MemoryStorer):
        response = await handler.serve(
            Request("PUT", "/users/u9", body={"name": "new"})
        )

        assert response.status == 201
        assert response.body["id"] == "u9"
        assert len(users) == 3

    async def test_put_replaces(self, handler: Handler, users: MemoryStorer):
        response = await handler.serve(
            Request("PUT", "/users/u1", body={"name": "ann b"})
        )

        assert response.status == 200
        assert response.body == {"id": "u1", "name": "ann b", "role": "member"}
        stored = await _stored(users, "u1")
        assert "age" not in stored.payload

    async def test_put_cannot_change_id(self, handler: Handler):
        response = await handler.serve(
            Request("PUT", "/users/u1", body={"id": "u2", "name": "x"})
        )
        assert response.status == 422
        assert response.body["issues"] == {"id": ["cannot change document ID"]}

    async def test_put_create_needs_create_mode(self, user_schema: Schema):
        index = Index()
        conf = Conf(allowed_modes=Mode.READ | Mode.REPLACE)
        index.bind("users", user_schema, MemoryStorer(), conf)

        response = await Handler(index).serve(
            Request("PUT", "/users/u1", body={"name": "x"})
        )

        assert response.status == 405

    async def test_patch(self, handler: Handler, users: MemoryStorer):
        response = await handler.serve(
            Request("PATCH", "/users/u1", body={"age": 31})
        )

        assert response.status == 200
        assert response.body["age"] == 31
        assert response.body["role"] == "admin"
        stored = await _stored(users, "u1")
        assert stored.payload["age"] == 31

    async def test_patch_if_match(self, handler: Handler):
        current = await handler.serve(Request("GET", "/users/u1"))

        stale = await handler.serve(
            Request(
                "PATCH",
                "/users/u1",
                headers={"If-Match": 'W/"stale"'},
                body={"age": 40},
            )
        )
        fresh = await handler.serve(
            Request(
                "PATCH",
                "/users/u1",
                headers={"If-Match": current.headers["Etag"]},
                body={"age": 40},
            )
        )

        assert stale.status == 409
        assert stale.body == {"code": 409, "message": "Conflict"}
        assert fresh.status == 200

    async def test_patch_missing(self, handler: Handler):
        response = await handler.serve(
            Request("PATCH", "/users/nope", body={"age": 1})
        )
        assert response.status == 404

    async def test_patch_document_issues(self, handler: Handler):
        response = await handler.serve(
            Request("PATCH", "/users/u1", body={"age": "old"})
        )
        assert response.status == 422
        assert response.body["issues"] == {"age": ["not an integer"]}

    async def test_delete(self, handler: Handler, users: MemoryStorer):
        response = await handler.serve(Request("DELETE", "/users/u1"))

        assert response.status == 204
        assert users.ids() == ["u2"]

    async def test_delete_if_match_mismatch(
        self, handler: Handler, users: MemoryStorer
    ):
        response = await handler.serve(
            Request("DELETE", "/users/u1", headers={"If-Match": '"stale"'})
        )
        assert response.status == 409
        assert len(users) == 2

    async def test_read_only_resource(self, user_schema: Schema):
        index = Index()
        index.bind("users", user_schema, MemoryStorer(), Conf(allowed_modes=READ_ONLY))
        handler = Handler(index)

        for method in ("PUT", "PATCH", "DELETE"):
            response = await handler.serve(Request(method, "/users/u1", body={}))
            assert response.status == 405


# -- Sub-resources ----------------------------------------------------------


@pytest.mark.asyncio
class TestSubResource:
    async def test_list_is_scoped_to_parent(self, handler: Handler):
        response = await handler.serve(Request("GET", "/users/u1/posts"))

        assert response.headers["X-Total"] == "1"
        assert [doc["id"] for doc in response.body] == ["p1"]

    async def test_missing_parent(self, handler: Handler):
        response = await handler.serve(Request("GET", "/users/nope/posts"))
        assert response.status == 404
        assert response.body == {"code": 404, "message": "Parent Resource Not Found"}

    async def test_item_of_another_parent(self, handler: Handler):
        response = await handler.serve(Request("GET", "/users/u1/posts/p2"))
        assert response.status == 404

    async def test_post_fills_parent_field(
        self, handler: Handler, posts: MemoryStorer
    ):
        response = await handler.serve(
            Request("POST", "/users/u2/posts", body={"title": "third"})
        )

        assert response.status == 201
        assert response.body["user"] == "u2"
        assert len(posts) == 3

    async def test_post_with_other_parent(self, handler: Handler):
        response = await handler.serve(
            Request("POST", "/users/u2/posts", body={"user": "u1", "title": "x"})
        )

        assert response.status == 422
        assert response.body["issues"] == {
            "user": ["does not match the parent resource id"]
        }


# -- Storer failures --------------------------------------------------------


@pytest.mark.asyncio
class TestStorerFailures:
    @staticmethod
    def _handler(user_schema: Schema, storer: MemoryStorer, **options) -> Handler:
        index = Index()
        index.bind("users", user_schema, storer, Conf(allowed_modes=READ_WRITE))
        return Handler(index, **options)

    async def test_deadline(self, user_schema: Schema):
        handler = self._handler(user_schema, MemoryStorer(latency=0.5), timeout=0.01)

        response = await handler.serve(Request("GET", "/users"))

        assert response.status == 504
        assert response.body == {"code": 504, "message": "Gateway Timeout"}

    async def test_canceled_by_storer(self, user_schema: Schema):
        handler = self._handler(user_schema, FailingStorer(RequestCanceledError()))

        response = await handler.serve(Request("GET", "/users"))

        assert response.status == 499

    async def test_unknown_error(
        self, user_schema: Schema, caplog: pytest.LogCaptureFixture
    ):
        handler = self._handler(user_schema, FailingStorer(RuntimeError("boom")))

        with caplog.at_level(logging.ERROR, logger="rest_layer.rest"):
            response = await handler.serve(Request("GET", "/users"))

        assert response.status == 500
        assert any(r.exc_info for r in caplog.records)

    async def test_task_cancellation_propagates(self, user_schema: Schema):
        handler = self._handler(user_schema, FailingStorer(asyncio.CancelledError()))

        with pytest.raises(asyncio.CancelledError):
            await handler.serve(Request("GET", "/users"))

    async def test_invalid_timeout(self, user_schema: Schema):
        with pytest.raises(ValueError):
            self._handler(user_schema, MemoryStorer(), timeout=0)
