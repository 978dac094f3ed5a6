"""Identifier generation for stored records.

Directories assign ids to identities and roles at creation time. Ids are
opaque strings; nothing may parse them.
"""

from __future__ import annotations

import itertools
import uuid
from typing import Protocol, runtime_checkable


@runtime_checkable
class IIDGenerator(Protocol):
    """Source of new record ids."""

    def next_id(self) -> str: ...


class UUID4Generator(IIDGenerator):
    """Random UUIDv4 ids; the default for every directory."""

    def next_id(self) -> str:
        return str(uuid.uuid4())


class SequentialIDGenerator(IIDGenerator):
    """Predictable ids (``user-1``, ``user-2``, ...) for tests and fixtures.

    Not safe across processes: two instances with the same prefix hand out
    the same ids.
    """

    def __init__(self, prefix: str = "id") -> None:
        self.prefix = prefix
        self._counter = itertools.count(1)

    def next_id(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"
