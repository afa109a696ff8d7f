"""Per-resource configuration: allowed modes and pagination defaults."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag


class Mode(IntFlag):
    """Operations a resource may expose."""

    READ = 1
    LIST = 2
    CREATE = 4
    UPDATE = 8
    DELETE = 16
    CLEAR = 32
    REPLACE = 64


READ_ONLY = Mode.READ | Mode.LIST
WRITE_ONLY = Mode.CREATE | Mode.UPDATE | Mode.DELETE | Mode.CLEAR | Mode.REPLACE
READ_WRITE = READ_ONLY | WRITE_ONLY


@dataclass(frozen=True)
class Conf:
    """
    Immutable resource configuration.

    Attributes:
        allowed_modes: Operations the handler accepts on the resource.
        pagination_default_limit: Window limit used by list requests that
            give no ``limit``; ``None`` leaves them unlimited.
        default_sort: Sort text (``"-updated,id"``) used when a request
            gives none. Checked against the schema when the index compiles.
    """

    allowed_modes: Mode = READ_ONLY
    pagination_default_limit: int | None = None
    default_sort: str = ""

    def __post_init__(self) -> None:
        if (
            self.pagination_default_limit is not None
            and self.pagination_default_limit < 0
        ):
            raise ValueError("pagination_default_limit must be non-negative")

    def is_mode_allowed(self, mode: Mode) -> bool:
        return (self.allowed_modes & mode) == mode


DEFAULT_CONF = Conf(allowed_modes=READ_ONLY, pagination_default_limit=20)
