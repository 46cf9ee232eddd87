"""Definite integration driven by the shared iteration controller.

Trapezoid, Romberg and Gauss integration refine a composite rule by doubling
the number of subintervals until two successive estimates agree within the
configured tolerance. Each method also accepts a single bound, in which case
it integrates from 0 to that bound (an antiderivative evaluated at x).

Common conventions:
- reversed bounds (a > b) integrate over (b, a) and negate the result;
- a zero-length interval returns 0 with error |b - a|, without dividing by
  the step size;
- complex path integrals split f(c(t)) * c'(t) into real and imaginary parts
  and integrate each with one of the real methods.

Adaptive Gauss-Kronrod lives in `itermath.quadrature` and is exposed here as
`Integrator.kronrod` for convenience.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional, Tuple

import numpy as np

from .controllers import DEFAULT_TOLERANCE, Algorithm, ErrorMeasure, IterationObserver, IterationState
from .quadrature import (
    GAUSS_RULES,
    KRONROD_MAX_DEPTH,
    KRONROD_THRESHOLD,
    RealFunction,
    composite_rule,
    gauss_kronrod,
    is_zero_length,
    map_infinite_bounds,
    trapezoid_sum,
)
from .results import ResultValue

logger = logging.getLogger(__name__)

ComplexFunction = Callable[[complex], complex]
Curve = Callable[[float], complex]

# Every level doubles the work, so the budget counts refinement levels.
DEFAULT_MAX_LEVELS = 20
INITIAL_SUBDIVISIONS = 4

INTEGRATION_METHODS: Tuple[str, ...] = ("trapezoid", "romberg", "gauss")


def _bounds(a: float, b: Optional[float]) -> Tuple[float, float]:
    if b is None:
        return 0.0, a
    return a, b


def _negated(res: ResultValue) -> ResultValue:
    return ResultValue(-res.value, res.error, res.iterations)


def _require_finite(name: str, a: float, b: float) -> None:
    if math.isinf(a) or math.isinf(b):
        raise ValueError(f"{name} requires finite bounds, got ({a}, {b}); use gauss or gauss_kronrod")


def combine_parts(real: ResultValue[float], imag: ResultValue[float]) -> ResultValue[complex]:
    """Merge separately integrated real and imaginary parts.

    The errors add in quadrature and the iteration count is that of the
    slower part.
    """
    return ResultValue(
        complex(real.value, imag.value),
        math.hypot(real.error, imag.error),
        max(real.iterations, imag.iterations),
    )


def _richardson(prev: np.ndarray, curr: np.ndarray, level: int) -> None:
    """Fill curr[1..level] from curr[0] and the previous row."""
    for i in range(1, level + 1):
        factor = 4.0 ** i
        curr[i] = ((factor * curr[i - 1]) - prev[i - 1]) / (factor - 1.0)


class Integrator(Algorithm):
    """Iterative quadrature of real functions of one variable."""

    def __init__(
        self,
        max_iterations: int = DEFAULT_MAX_LEVELS,
        tolerance: float = DEFAULT_TOLERANCE,
        measure: ErrorMeasure = ErrorMeasure.AUGMENTED,
        *,
        observer: Optional[IterationObserver] = None,
    ) -> None:
        super().__init__(max_iterations, tolerance, measure, observer=observer)

    def _zero_length(self, state: IterationState, a: float, b: float) -> ResultValue[float]:
        logger.debug("%s: zero-length interval [%g, %g]", state.label, a, b)
        state.error = abs(b - a)
        return state.finish(0.0)

    def trapezoid(self, f: RealFunction, a: float, b: Optional[float] = None) -> ResultValue[float]:
        """Trapezoid rule, starting at 4 subdivisions and doubling each level.

        Every level is computed from scratch.
        """
        a, b = _bounds(a, b)
        _require_finite("trapezoid", a, b)
        if a > b:
            return _negated(self.trapezoid(f, b, a))

        state = self.start("trapezoid")
        if is_zero_length(a, b):
            return self._zero_length(state, a, b)

        n = INITIAL_SUBDIVISIONS
        last = 0.0
        while True:
            trap = trapezoid_sum(f, a, b, n)
            if state.step(last, trap):
                break

            last = trap
            n = n * 2

        return state.finish(trap)

    def romberg(self, f: RealFunction, a: float, b: Optional[float] = None) -> ResultValue[float]:
        """Romberg integration.

        Builds the Richardson extrapolation table one row per level, keeping
        only two rows that swap roles each level. Row k holds
        T[i] = (4^i * T_curr[i-1] - T_prev[i-1]) / (4^i - 1).
        """
        a, b = _bounds(a, b)
        _require_finite("romberg", a, b)
        if a > b:
            return _negated(self.romberg(f, b, a))

        state = self.start("romberg")
        if is_zero_length(a, b):
            return self._zero_length(state, a, b)

        size = self.max_iterations + 2
        prev = np.zeros(size, dtype=float)
        curr = np.zeros(size, dtype=float)
        prev[0] = trapezoid_sum(f, a, b, 1)

        level = 1
        n = 2
        while True:
            curr[0] = trapezoid_sum(f, a, b, n)
            _richardson(prev, curr, level)

            estimate = float(curr[level])
            if state.step(prev[level - 1], estimate):
                break

            prev, curr = curr, prev
            level = level + 1
            n = n * 2

        return state.finish(estimate)

    def gauss(self, f: RealFunction, a: float, b: Optional[float] = None, *, points=3) -> ResultValue[float]:
        """Composite Gauss quadrature, starting at 4 subdivisions and doubling.

        Args:
            f: Integrand.
            a: Lower bound, or the upper bound of [0, a] when `b` is omitted.
            b: Upper bound.
            points: 2, 3 (default), 4 or 5 for Gauss-Legendre rules, or
                "lobatto" for the 5-point Gauss-Lobatto rule.

        Infinite bounds are mapped onto a finite interval for the
        Gauss-Legendre rules.
        """
        rule = GAUSS_RULES.get(points)
        if rule is None:
            raise ValueError(f"Unknown Gauss rule: {points!r}; expected one of {list(GAUSS_RULES)}")

        a, b = _bounds(a, b)
        if a > b:
            return _negated(self.gauss(f, b, a, points=points))

        if points == "lobatto":
            _require_finite("gauss(points='lobatto')", a, b)

        state = self.start(rule.name)
        if is_zero_length(a, b):
            return self._zero_length(state, a, b)

        g, lo, hi = map_infinite_bounds(f, a, b)
        if g is not f:
            logger.debug("%s: mapped [%g, %g] onto [%g, %g]", state.label, a, b, lo, hi)

        n = INITIAL_SUBDIVISIONS
        last = 0.0
        while True:
            curr = composite_rule(g, lo, hi, n, rule)
            if state.step(last, curr):
                break

            last = curr
            n = n * 2

        return state.finish(curr)

    def kronrod(
        self,
        f: RealFunction,
        a: float,
        b: Optional[float] = None,
        *,
        threshold: float = KRONROD_THRESHOLD,
        max_depth: int = KRONROD_MAX_DEPTH,
    ) -> float:
        """Adaptive Gauss-Kronrod quadrature; see `itermath.quadrature.gauss_kronrod`."""
        a, b = _bounds(a, b)
        return gauss_kronrod(f, a, b, threshold=threshold, max_depth=max_depth)

    def path(
        self,
        f: ComplexFunction,
        curve: Curve,
        dcurve: Curve,
        *,
        method: str = "romberg",
    ) -> ResultValue[complex]:
        """Integrate a complex function along a parametric curve c(t), t in [0, 1].

        Args:
            f: Complex integrand.
            curve: Path c(t).
            dcurve: Derivative c'(t) of the path.
            method: One of "trapezoid", "romberg" or "gauss".

        The real part and the imaginary part are two separate runs, real
        first. An observer therefore sees two start/finish cycles, and a
        `ConvergenceRecorder` keeps only the history of the imaginary part.
        """
        if method not in INTEGRATION_METHODS:
            raise ValueError(f"Unknown method: {method!r}; expected one of {', '.join(INTEGRATION_METHODS)}")
        integrate = getattr(self, method)

        def integrand(t: float) -> complex:
            return complex(f(curve(t)) * dcurve(t))

        real = integrate(lambda t: integrand(t).real, 0.0, 1.0)
        imag = integrate(lambda t: integrand(t).imag, 0.0, 1.0)
        return combine_parts(real, imag)
