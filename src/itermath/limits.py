"""Limits of sequences.

Any iterable of successive approximations (partial sums, fixed-point
iterates, refinements of a mesh) can be truncated once two consecutive
elements agree within tolerance. The same error measures and budget as the
solvers apply, so a limit is reported as a `ResultValue` like any other
iterative result.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, TypeVar

import numpy as np

from .controllers import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_TOLERANCE,
    ErrorMeasure,
    IterationConfig,
    IterationState,
    Metric,
    euclidean,
)
from .results import ResultValue

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _record(state: IterationState, last: T, curr: T, metric: Optional[Metric], zero: Optional[T]) -> bool:
    if metric is not None:
        return state.step_metric(last, curr, metric, zero)
    if hasattr(curr, "dist") and hasattr(curr, "norm"):
        return state.step_metrizable(last, curr)
    if isinstance(curr, np.ndarray):
        return state.step_metric(last, curr, euclidean, np.zeros_like(curr))
    return state.step(last, curr)


def _converge(
    source: Iterable[T],
    state: IterationState,
    metric: Optional[Metric],
    zero: Optional[T],
) -> Iterator[T]:
    it = iter(source)
    try:
        last = next(it)
    except StopIteration:
        return
    yield last

    for curr in it:
        yield curr
        if _record(state, last, curr, metric, zero):
            return
        last = curr


def _state(tolerance: float, max_iterations: int, measure: ErrorMeasure, label: str) -> IterationState:
    config = IterationConfig(max_iterations, tolerance, measure)
    state = IterationState(config.max_iterations, config.tolerance, config.measure, label=label)
    state.reset()
    return state


def converge(
    source: Iterable[T],
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    measure: ErrorMeasure = ErrorMeasure.AUGMENTED,
    metric: Optional[Metric] = None,
    zero: Optional[T] = None,
) -> Iterator[T]:
    """Yield elements of `source` until two successive ones agree.

    The element that meets the tolerance is yielded last. Infinite sources
    are cut off after `max_iterations` comparisons.

    Args:
        source: Successive approximations.
        tolerance: Largest accepted error between neighbours.
        max_iterations: Maximum number of comparisons.
        measure: How the difference is scaled.
        metric: Distance function for element types without `abs()`;
            requires `zero`. numpy arrays use the Euclidean distance when
            no metric is given.
        zero: Zero element used to measure magnitudes under `metric`.

    Raises:
        ValueError: If `metric` is given without `zero`.
    """
    if metric is not None and zero is None:
        raise ValueError("metric requires a zero reference element")
    state = _state(tolerance, max_iterations, measure, "converge")
    return _converge(source, state, metric, zero)


def limit(
    source: Iterable[T],
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    measure: ErrorMeasure = ErrorMeasure.AUGMENTED,
    metric: Optional[Metric] = None,
    zero: Optional[T] = None,
) -> ResultValue[T]:
    """Estimate the limit of a sequence.

    Returns:
        The last element examined, with the error between it and its
        predecessor and the number of comparisons made.

    Raises:
        ValueError: If the sequence is empty, or `metric` is given without
            `zero`.
    """
    if metric is not None and zero is None:
        raise ValueError("metric requires a zero reference element")
    state = _state(tolerance, max_iterations, measure, "limit")

    last = None
    seen = False
    for last in _converge(source, state, metric, zero):
        seen = True

    if not seen:
        raise ValueError("cannot take the limit of an empty sequence")
    if not state.converged:
        logger.debug("limit: stopped after %d comparisons without converging (error=%.3g)", state.count, state.error)
    return state.finish(last)
