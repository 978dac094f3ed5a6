import pytest
from pydantic import model_validator

from kushim_core.domain.value_object import ValueObject
from kushim_core.primitives.exceptions import (
    ConcurrencyError,
    InvariantViolationError,
    OptimisticConcurrencyError,
    PersistenceError,
)
from kushim_core.primitives.id_generator import (
    IIDGenerator,
    SequentialIDGenerator,
    UUID4Generator,
)

# --- Test Models ---


class Window(ValueObject):
    start: int
    end: int

    @model_validator(mode="after")
    def _ordered(self) -> "Window":
        if self.start > self.end:
            raise InvariantViolationError("start after end")
        return self


# --- Tests ---


def test_value_object_equality_and_hash() -> None:
    """Structurally equal value objects compare and hash equal."""
    assert Window(start=1, end=2) == Window(start=1, end=2)
    assert Window(start=1, end=2) != Window(start=1, end=3)
    assert len({Window(start=1, end=2), Window(start=1, end=2)}) == 1


def test_value_object_is_frozen() -> None:
    window = Window(start=1, end=2)
    with pytest.raises(Exception):  # noqa: B017
        window.start = 5  # type: ignore[misc]


def test_replace_returns_new_instance() -> None:
    window = Window(start=1, end=2)
    moved = window.replace(end=10)

    assert moved == Window(start=1, end=10)
    assert window.end == 2


def test_replace_runs_validators() -> None:
    """replace() re-validates, unlike model_copy(update=...)."""
    with pytest.raises(InvariantViolationError):
        Window(start=1, end=2).replace(start=5)


def test_optimistic_concurrency_error() -> None:
    err = OptimisticConcurrencyError("Identity", "user-1", 3)

    assert isinstance(err, ConcurrencyError)
    assert isinstance(err, PersistenceError)
    assert err.expected_version == 3
    assert "Identity 'user-1' version conflict" in str(err)


def test_uuid_generator_is_unique() -> None:
    generator = UUID4Generator()
    assert isinstance(generator, IIDGenerator)
    assert generator.next_id() != generator.next_id()


def test_sequential_generator() -> None:
    generator = SequentialIDGenerator("user")
    assert [generator.next_id() for _ in range(3)] == ["user-1", "user-2", "user-3"]
