"""Resources: configuration, items, the storer port and the index."""

from __future__ import annotations

from .conf import DEFAULT_CONF, READ_ONLY, READ_WRITE, WRITE_ONLY, Conf, Mode
from .index import Index, Resource
from .item import Item, ItemList, compute_etag, new_item
from .storer import Storer

__all__ = [
    "DEFAULT_CONF",
    "READ_ONLY",
    "READ_WRITE",
    "WRITE_ONLY",
    "Conf",
    "Index",
    "Item",
    "ItemList",
    "Mode",
    "Resource",
    "Storer",
    "compute_etag",
    "new_item",
]
