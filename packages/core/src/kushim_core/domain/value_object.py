"""Immutable Value Object base class."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from typing_extensions import Self


class ValueObject(BaseModel):
    """Base class for Value Objects.

    Value objects are immutable and defined by their attributes.
    Equality is structural (all fields compared). Changes produce a new,
    re-validated instance via ``replace``.
    """

    model_config = ConfigDict(frozen=True)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.model_dump() == other.model_dump()

    def __hash__(self) -> int:
        return hash(repr(sorted(self.model_dump().items())))

    def replace(self, **changes: Any) -> Self:
        """Copy with ``changes`` applied.

        Unlike ``model_copy(update=...)`` the copy is validated, so model
        validators run against the new field values.
        """
        return self.model_validate({**self.model_dump(), **changes})
