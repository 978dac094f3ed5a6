"""Domain primitives: value objects."""

from __future__ import annotations

from .value_object import ValueObject

__all__: list[str] = ["ValueObject"]
