"""In-memory adapters."""

from __future__ import annotations

from .storer import MemoryStorer

__all__ = ["MemoryStorer"]
