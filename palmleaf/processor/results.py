"""Tagged outcome of one inference task."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """The task settled with a value (which may itself be None)."""

    value: T


@dataclass(frozen=True)
class Failure:
    """The task settled with an error."""

    reason: str


TaskResult = Success[T] | Failure


def value_or_none(result: "TaskResult[T] | None") -> T | None:
    """Return the value of a successful result; None for failures and missing results."""
    if isinstance(result, Success):
        return result.value
    return None
