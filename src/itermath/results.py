"""Immutable result carriers for iterative methods.

Every solver reports a value together with the error estimate of its last
step and the number of iterations it spent. Ordering compares precision
only: a result with smaller error sorts first. Equality needs both the value
and the error to match, so two results holding the same value but with
different error are not interchangeable.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, Iterator, Tuple, TypeVar

import numpy as np

T = TypeVar("T")

_DEFAULT_FORMAT = ".10g"


def _values_equal(a: Any, b: Any) -> bool:
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return bool(np.array_equal(a, b))
    return bool(a == b)


def _format_value(value: Any, spec: str) -> str:
    try:
        return format(value, spec)
    except (TypeError, ValueError):
        return str(value)


class _PrecisionOrdered:
    """Rich comparisons on the `error` attribute alone."""

    error: float

    def _comparable(self, other: object) -> bool:
        return type(other) is type(self)

    def __lt__(self, other: Any) -> bool:
        if not self._comparable(other):
            return NotImplemented
        return self.error < other.error

    def __le__(self, other: Any) -> bool:
        if not self._comparable(other):
            return NotImplemented
        return self.error <= other.error

    def __gt__(self, other: Any) -> bool:
        if not self._comparable(other):
            return NotImplemented
        return self.error > other.error

    def __ge__(self, other: Any) -> bool:
        if not self._comparable(other):
            return NotImplemented
        return self.error >= other.error


@dataclass(frozen=True, eq=False)
class ResultValue(_PrecisionOrdered, Generic[T]):
    """A computed value with its precision and iteration cost.

    Attributes:
        value: The final iterate.
        error: Error of the last recorded step (non-negative, +inf if no
            step was taken).
        iterations: Number of iterations performed.
    """

    value: T
    error: float = math.inf
    iterations: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "error", abs(float(self.error)))
        object.__setattr__(self, "iterations", abs(int(self.iterations)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResultValue):
            return NotImplemented
        return _values_equal(self.value, other.value) and self.error == other.error

    def __hash__(self) -> int:
        # array values are unhashable; equal results share their error
        return hash(self.error)

    def __format__(self, spec: str) -> str:
        spec = spec or _DEFAULT_FORMAT
        return f"res:<{_format_value(self.value, spec)}>, err:{format(self.error, spec)}"

    def __str__(self) -> str:
        return format(self, _DEFAULT_FORMAT)


@dataclass(frozen=True, eq=False)
class ResultSet(_PrecisionOrdered, Generic[T]):
    """Several values produced by one iterative process.

    All members share a single error and iteration count, e.g. the roots of a
    polynomial found simultaneously.
    """

    value: Tuple[T, ...]
    error: float = math.inf
    iterations: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", tuple(self.value))
        object.__setattr__(self, "error", abs(float(self.error)))
        object.__setattr__(self, "iterations", abs(int(self.iterations)))

    def __len__(self) -> int:
        return len(self.value)

    def __getitem__(self, index: int) -> T:
        return self.value[index]

    def __iter__(self) -> Iterator[T]:
        return iter(self.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResultSet):
            return NotImplemented
        if len(self.value) != len(other.value) or self.error != other.error:
            return False
        return all(_values_equal(a, b) for a, b in zip(self.value, other.value))

    def __hash__(self) -> int:
        # array values are unhashable; equal results share their error
        return hash(self.error)

    def __format__(self, spec: str) -> str:
        spec = spec or _DEFAULT_FORMAT
        values = ", ".join(_format_value(v, spec) for v in self.value)
        return f"res:<{values}>, err:{format(self.error, spec)}"

    def __str__(self) -> str:
        return format(self, _DEFAULT_FORMAT)
