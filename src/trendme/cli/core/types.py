"""Core types for CLI - immutable data structures and Result type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False


@dataclass(frozen=True)
class Failure:
    """Failed result containing an error message."""

    error: str
    details: dict[str, Any] | None = None

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True


# Result type - either Success[T] or Failure
Result = Union[Success[T], Failure]


def failure_from(error: Exception) -> Failure:
    """Map an exception to a Failure, keeping the error kind when known."""
    kind = getattr(error, "kind", None)
    details: dict[str, Any] = {"type": type(error).__name__}
    if kind is not None:
        details["kind"] = getattr(kind, "value", kind)
    operation = getattr(error, "operation", None)
    if operation:
        details["operation"] = operation
    return Failure(str(error), details)
