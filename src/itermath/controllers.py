"""Iteration control shared by every iterative numerical method.

Core ideas:
- A method computes successive iterates; the controller decides when to stop.
- Each step records an error value, a dimensionless discrepancy between the
  last two iterates measured by an `ErrorMeasure`.
- Stop when the error is at or below tolerance, the error is NaN, the
  iteration budget is spent, or an observer raises the halt flag.
- Exhausting the budget is a normal return, not an exception. Callers compare
  the reported error against the tolerance to know whether they converged.

Every solve works on its own `IterationState` obtained from
`Algorithm.start()`, so one solver instance can be reused (or shared) without
leaking counts or errors between runs.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Protocol, TypeVar, runtime_checkable

import numpy as np

from .results import ResultSet, ResultValue

logger = logging.getLogger(__name__)

T = TypeVar("T")
Metric = Callable[[Any, Any], float]

DEFAULT_MAX_ITERATIONS = 1024
DEFAULT_TOLERANCE = 1e-12
MIN_ITERATIONS = 2


class ErrorMeasure(Enum):
	"""How the discrepancy between two successive iterates is scaled.

	ABSOLUTE: |curr - last|
	RELATIVE: |curr - last| / |curr|
	AUGMENTED: |curr - last| / (|curr| + 1), behaves like absolute error for
		small values and like relative error for large ones.
	"""

	ABSOLUTE = "absolute"
	RELATIVE = "relative"
	AUGMENTED = "augmented"

	def scale(self, dist: float, size: float) -> float:
		"""Turn a distance and the magnitude of the current iterate into an error."""
		dist = abs(dist)
		if self is ErrorMeasure.ABSOLUTE:
			return dist
		if self is ErrorMeasure.RELATIVE:
			size = abs(size)
			if size == 0.0:
				return 0.0 if dist == 0.0 else math.inf
			return dist / size
		return dist / (abs(size) + 1.0)


@dataclass(frozen=True)
class IterationConfig:
	"""Stopping criteria for an iterative method.

	Out-of-range settings are coerced rather than rejected: the budget is
	clamped to at least two iterations and the tolerance is made positive.
	"""

	max_iterations: int = DEFAULT_MAX_ITERATIONS
	tolerance: float = DEFAULT_TOLERANCE
	measure: ErrorMeasure = ErrorMeasure.AUGMENTED

	def __post_init__(self) -> None:
		object.__setattr__(self, "max_iterations", max(int(self.max_iterations), MIN_ITERATIONS))
		object.__setattr__(self, "tolerance", abs(float(self.tolerance)))
		object.__setattr__(self, "measure", ErrorMeasure(self.measure))


@dataclass
class StepEvent:
	"""Passed to the observer after every recorded step.

	Setting `halt` to True ends the run after this step. The flag can be
	raised but not lowered again.
	"""

	step: int
	error: float
	_halt: bool = field(default=False, repr=False)

	@property
	def halt(self) -> bool:
		return self._halt

	@halt.setter
	def halt(self, value: bool) -> None:
		self._halt = self._halt or bool(value)


class IterationObserver(Protocol):
	"""Optional lifecycle hooks. Any of the three methods may be omitted."""

	def on_start(self, state: IterationState) -> None:
		...

	def on_step(self, event: StepEvent) -> None:
		...

	def on_finish(self, state: IterationState) -> None:
		...


@runtime_checkable
class Metrizable(Protocol):
	"""A value type with a distance function and a norm."""

	def dist(self, other: Any) -> float:
		...

	def norm(self) -> float:
		...


def euclidean(a: Any, b: Any) -> float:
	"""Euclidean distance between two array-likes (vectors, matrices, scalars)."""
	return float(np.linalg.norm(np.asarray(a) - np.asarray(b)))


@dataclass
class IterationState:
	"""Convergence bookkeeping for a single logical run.

	`count` only increases during a run and `error` is +inf until the first
	step is recorded.
	"""

	max_iterations: int
	tolerance: float
	measure: ErrorMeasure = ErrorMeasure.AUGMENTED
	observer: Optional[IterationObserver] = None
	label: str = "iteration"
	count: int = 0
	error: float = math.inf
	halted: bool = False

	def _notify(self, hook: str, arg: Any) -> None:
		if self.observer is None:
			return
		method = getattr(self.observer, hook, None)
		if method is not None:
			method(arg)

	def _should_stop(self) -> bool:
		if self.halted:
			return True
		if math.isnan(self.error):
			return True
		if self.error <= self.tolerance:
			return True
		return self.count >= self.max_iterations

	def reset(self) -> None:
		"""Prepare for a new run and inform the start observer."""
		self._notify("on_start", self)
		self.count = 0
		self.error = math.inf
		self.halted = False

	def step_error(self, error: float) -> bool:
		"""Record one iteration with a precomputed error.

		Returns:
			True if no further iterations should be performed.
		"""
		self.count += 1
		self.error = abs(float(error))

		if self.observer is not None:
			event = StepEvent(self.count, self.error)
			self._notify("on_step", event)
			if event.halt:
				self.halted = True

		return self._should_stop()

	def step(self, last: Any, curr: Any) -> bool:
		"""Record one iteration between two real or complex scalars."""
		return self.step_error(self.measure.scale(abs(curr - last), abs(curr)))

	def step_metrizable(self, last: Metrizable, curr: Metrizable) -> bool:
		"""Record one iteration between two values exposing dist() and norm()."""
		return self.step_error(self.measure.scale(curr.dist(last), curr.norm()))

	def step_metric(self, last: T, curr: T, metric: Metric, zero: T) -> bool:
		"""Record one iteration using a free metric and a zero reference.

		The magnitude of the current iterate is taken as its distance to
		`zero`, so any type the metric understands can be checked.
		"""
		return self.step_error(self.measure.scale(metric(curr, last), metric(curr, zero)))

	def advance(self, steps: int = 1) -> bool:
		"""Count extra work without touching the error.

		Returns:
			True if the iteration budget is exhausted.
		"""
		self.count += max(int(steps), 1)
		return self.count >= self.max_iterations

	@property
	def converged(self) -> bool:
		return self.error <= self.tolerance

	def finish(self, value: T) -> ResultValue[T]:
		"""Package the final iterate with the current error and count."""
		self._notify("on_finish", self)
		logger.debug(
			"%s finished after %d iterations (error=%.3g, tol=%.3g)",
			self.label,
			self.count,
			self.error,
			self.tolerance,
		)
		return ResultValue(value, self.error, self.count)

	def finish_set(self, values: Iterable[T]) -> ResultSet[T]:
		"""Package several outputs that share one error and count."""
		self._notify("on_finish", self)
		logger.debug(
			"%s finished after %d iterations (error=%.3g, tol=%.3g)",
			self.label,
			self.count,
			self.error,
			self.tolerance,
		)
		return ResultSet(values, self.error, self.count)


class Algorithm:
	"""Base class for iterative methods.

	Holds the stopping criteria and an optional observer. Subclasses call
	`start()` at the top of each solve to get a fresh `IterationState`.
	"""

	def __init__(
		self,
		max_iterations: int = DEFAULT_MAX_ITERATIONS,
		tolerance: float = DEFAULT_TOLERANCE,
		measure: ErrorMeasure = ErrorMeasure.AUGMENTED,
		*,
		observer: Optional[IterationObserver] = None,
	) -> None:
		self.config = IterationConfig(max_iterations, tolerance, measure)
		self.observer = observer

	@classmethod
	def from_config(cls, config: IterationConfig, *, observer: Optional[IterationObserver] = None):
		return cls(config.max_iterations, config.tolerance, config.measure, observer=observer)

	@property
	def max_iterations(self) -> int:
		return self.config.max_iterations

	@property
	def tolerance(self) -> float:
		return self.config.tolerance

	@property
	def measure(self) -> ErrorMeasure:
		return self.config.measure

	def start(self, label: Optional[str] = None) -> IterationState:
		state = IterationState(
			max_iterations=self.config.max_iterations,
			tolerance=self.config.tolerance,
			measure=self.config.measure,
			observer=self.observer,
			label=label or type(self).__name__,
		)
		state.reset()
		return state

	def __repr__(self) -> str:
		return f"{type(self).__name__}: Max={self.max_iterations}, Tol={self.tolerance:.5g}"

	def __eq__(self, other: object) -> bool:
		if type(other) is not type(self):
			return NotImplemented
		return self.config == other.config

	def __hash__(self) -> int:
		return hash((type(self).__name__, self.config))
