"""Shared fixtures for rest-layer tests."""

from __future__ import annotations

import pytest

from rest_layer import (
    ID_FIELD,
    READ_WRITE,
    Conf,
    Field,
    Handler,
    Index,
    Item,
    MemoryStorer,
    Schema,
    new_item,
)
from rest_layer.schema import Integer, String


@pytest.fixture
def foo_items() -> list[Item]:
    """Items 1..5 tagged alternately odd/even."""
    return [
        new_item({"id": i, "foo": "odd" if i % 2 else "even"}) for i in range(1, 6)
    ]


@pytest.fixture
def foo_schema() -> Schema:
    return Schema(
        fields={
            "id": Field(sortable=True, filterable=True),
            "foo": Field(filterable=True),
        }
    )


@pytest.fixture
def foo_storer(foo_items: list[Item]) -> MemoryStorer:
    return MemoryStorer(foo_items)


@pytest.fixture
def foo_handler(foo_schema: Schema, foo_storer: MemoryStorer) -> Handler:
    """``/foo`` bound read-write with a default page size of 2."""
    index = Index()
    index.bind(
        "foo",
        foo_schema,
        foo_storer,
        Conf(allowed_modes=READ_WRITE, pagination_default_limit=2),
    )
    return Handler(index)


@pytest.fixture
def user_schema() -> Schema:
    return Schema(
        fields={
            "id": ID_FIELD,
            "name": Field(
                required=True, filterable=True, sortable=True, validator=String()
            ),
            "age": Field(
                filterable=True, sortable=True, validator=Integer(minimum=0)
            ),
            "role": Field(
                filterable=True,
                default="member",
                validator=String(allowed=["member", "admin"]),
            ),
        }
    )
