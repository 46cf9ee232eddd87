"""Root finding built on the shared iteration controller.

Each method locates x with f(x) = 0 and returns a `ResultValue` carrying the
root, the error of the last step and the number of iterations used.

Bracket methods (bisection, false position, Ridders, Brent) take an interval
[low, high] that should contain a sign change of f. The bounds are swapped if
given in the wrong order. When f(low) and f(high) have the same sign no root
is guaranteed: the method returns `low` straight away with infinite error
instead of raising.

Open methods (Newton, secant) need only a starting guess and work for both
real and complex arguments. Broyden's method solves n equations in n
unknowns on numpy vectors.

Solving f(x) = y or f1(x) = f2(x) is reduced to root finding on f(x) - y or
f1(x) - f2(x) by `invert` and `intersect`.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Sequence, Tuple

import numpy as np

from .controllers import Algorithm, IterationState, euclidean
from .jacobian import JacobianLike, VectorFunction, as_vector, evaluate_system, resolve_jacobian
from .results import ResultSet, ResultValue

logger = logging.getLogger(__name__)

ScalarFunction = Callable[[float], float]

# Methods that take two starting points and can be used by invert/intersect.
TWO_POINT_METHODS: Tuple[str, ...] = ("bisection", "false_position", "ridders", "brent", "secant")


def _sign(x: float) -> float:
    if x < 0.0:
        return -1.0
    if x > 0.0:
        return 1.0
    return x


def _ordered(low: float, high: float) -> Tuple[float, float]:
    if high < low:
        return high, low
    return low, high


def _shifted(f: Callable, target) -> Callable:
    if target == 0:
        return f
    return lambda x: f(x) - target


class RootFinder(Algorithm):
    """Collection of interchangeable root-finding strategies.

    Example:
        >>> rf = RootFinder(max_iterations=256, tolerance=1e-12)
        >>> res = rf.brent(lambda x: x * x - 2.0, 0.0, 2.0)
        >>> round(res.value, 10)
        1.4142135624
    """

    def _no_sign_change(self, state: IterationState, low: float, y_low: float, y_high: float) -> ResultValue[float]:
        logger.debug("%s: no sign change in bracket (f(low)=%g, f(high)=%g)", state.label, y_low, y_high)
        return state.finish(low)

    # ------------------------- Bracket methods -------------------------

    def bisection(self, f: ScalarFunction, low: float, high: float) -> ResultValue[float]:
        """Halve the bracket each step, keeping the half with the sign change."""
        low, high = _ordered(low, high)
        y1 = f(low)
        y2 = f(high)
        state = self.start("bisection")

        if y1 * y2 > 0.0:
            return self._no_sign_change(state, low, y1, y2)

        curr = low
        while True:
            nxt = (low + high) / 2.0
            if state.step(curr, nxt):
                break

            test = f(nxt)
            if y1 * test > 0.0:
                low, y1 = nxt, test
            else:
                high, y2 = nxt, test

            curr = nxt

        return state.finish(nxt)

    def false_position(self, f: ScalarFunction, low: float, high: float) -> ResultValue[float]:
        """Weighted secant point inside the bracket, kept like bisection.

        The next point is (0.5*low*f(high) - high*f(low)) / (0.5*f(high) - f(low)),
        a regula falsi step with the weight of f(high) halved.
        """
        low, high = _ordered(low, high)
        y1 = f(low)
        y2 = f(high)
        state = self.start("false_position")

        if y1 * y2 > 0.0:
            return self._no_sign_change(state, low, y1, y2)

        curr = low
        while True:
            nxt = ((0.5 * low * y2) - (high * y1)) / ((0.5 * y2) - y1)
            if state.step(curr, nxt):
                break

            test = f(nxt)
            if y1 * test > 0.0:
                low, y1 = nxt, test
            else:
                high, y2 = nxt, test

            curr = nxt

        return state.finish(nxt)

    def ridders(self, f: ScalarFunction, low: float, high: float) -> ResultValue[float]:
        """Ridders' method: exponential fit through the bracket and its midpoint.

        Each iteration evaluates f twice (midpoint and new estimate), so the
        counter advances by two.
        """
        x1, x2 = _ordered(low, high)
        y1 = f(x1)
        y2 = f(x2)
        state = self.start("ridders")

        if y1 * y2 > 0.0:
            return self._no_sign_change(state, x1, y1, y2)

        while True:
            x3 = (x1 + x2) * 0.5
            y3 = f(x3)

            denom = math.sqrt((y3 * y3) - (y1 * y2))
            if denom == 0.0:
                # f vanishes at the midpoint and at an endpoint.
                state.step(x2, x3)
                return state.finish(x3)

            x4 = x3 + _sign(y1 - y2) * y3 * (x3 - x1) / denom
            if state.step(x2, x4):
                return state.finish(x4)

            y4 = f(x4)
            if y4 == 0.0 or state.advance(1):
                return state.finish(x4)

            # Keep whichever pairing still brackets the root.
            if y3 * y4 < 0.0:
                x1, y1 = x3, y3
            elif y2 * y4 < 0.0:
                x1, y1 = x2, y2

            x2, y2 = x4, y4

    def brent(self, f: ScalarFunction, low: float, high: float) -> ResultValue[float]:
        """Brent-Dekker method.

        x2 is always the best estimate (|f(x2)| <= |f(x1)|) and [x1, x2]
        brackets the root. A candidate comes from inverse quadratic
        interpolation when the three trailing function values are distinct,
        otherwise from the secant line. The bisection midpoint replaces the
        candidate when it falls outside [(3*x1 + x2)/4, x2], fails to halve
        the earlier step, or that step is degenerate; the flag `bisected`
        remembers which step the next comparison uses.
        """
        x1, x2 = _ordered(low, high)
        y1 = f(x1)
        y2 = f(x2)
        state = self.start("brent")

        if y1 * y2 > 0.0:
            return self._no_sign_change(state, x1, y1, y2)

        if abs(y1) < abs(y2):
            x1, x2 = x2, x1
            y1, y2 = y2, y1

        delta = self.tolerance
        x3, y3 = x1, y1
        x4 = x3
        bisected = True

        while True:
            if y2 == 0.0:
                state.step_error(0.0)
                return state.finish(x2)

            if abs(y1 - y3) > delta and abs(y2 - y3) > delta:
                # inverse quadratic interpolation
                s = (x1 * y2 * y3) / ((y1 - y2) * (y1 - y3))
                s += (x2 * y1 * y3) / ((y2 - y1) * (y2 - y3))
                s += (x3 * y1 * y2) / ((y3 - y1) * (y3 - y2))
            else:
                # secant
                s = x2 - y2 * (x2 - x1) / (y2 - y1)

            t = ((3.0 * x1) + x2) * 0.25
            outside = not (min(t, x2) < s < max(t, x2))
            prior = (x2 - x3) if bisected else (x3 - x4)
            slow = abs(s - x2) >= abs(prior) * 0.5
            degenerate = abs(prior) < delta

            bisected = outside or slow or degenerate
            if bisected:
                s = (x1 + x2) * 0.5

            if state.step(x2, s):
                return state.finish(s)

            fs = f(s)
            x4 = x3
            x3, y3 = x2, y2

            if y1 * fs < 0.0:
                x2, y2 = s, fs
            else:
                x1, y1 = s, fs

            if abs(y1) < abs(y2):
                x1, x2 = x2, x1
                y1, y2 = y2, y1

    # ------------------------- Open methods -------------------------

    def newton(self, f: Callable, df: Callable, guess, *, target=0.0) -> ResultValue:
        """Newton's method, next = curr - f(curr)/f'(curr).

        Works on floats and complex numbers alike. A vanishing derivative
        ends the run with infinite error at the current point.

        Args:
            f: Function whose root is wanted.
            df: Derivative of f.
            guess: Starting point.
            target: Solve f(x) = target instead of f(x) = 0.
        """
        g = _shifted(f, target)
        curr = guess
        state = self.start("newton")

        while True:
            slope = df(curr)
            if slope == 0:
                logger.debug("newton: zero derivative at %s", curr)
                state.step_error(math.inf)
                return state.finish(curr)

            nxt = curr - g(curr) / slope
            if state.step(curr, nxt):
                return state.finish(nxt)

            curr = nxt

    def secant(self, f: Callable, x1, x2, *, target=0.0) -> ResultValue:
        """Secant method from two starting points, no derivative needed.

        Works on floats and complex numbers. Not guaranteed to converge. When
        the two trailing function values coincide the run stops at the newer
        point, with the distance between the points as its error.
        """
        g = _shifted(f, target)
        prev = x1
        curr = x2
        state = self.start("secant")

        y_curr = g(curr)
        y_prev = g(prev)

        while True:
            if y_curr == y_prev:
                logger.debug("secant: flat secant between %s and %s", prev, curr)
                state.step(prev, curr)
                return state.finish(curr)

            nxt = (prev * y_curr - curr * y_prev) / (y_curr - y_prev)
            if state.step(curr, nxt):
                return state.finish(nxt)

            prev, curr = curr, nxt
            y_prev, y_curr = y_curr, g(curr)

    # ------------------------- Systems -------------------------

    def broyden(self, f: VectorFunction, guess, jacobian: JacobianLike | None = None) -> ResultValue[np.ndarray]:
        """Broyden's ("bad") method for n equations in n unknowns.

        Keeps an approximation B of the inverse Jacobian and corrects it by a
        rank-one update each step:

            B <- B + ((dx - B @ df) / (df @ df)) outer df

        Args:
            f: System mapping a vector of shape (n,) to shape (n,).
            guess: Starting vector.
            jacobian: Jacobian at the guess, either an (n, n) matrix or a
                callable returning one. Estimated with symmetric finite
                differences when omitted.

        Raises:
            ValueError: If the guess is not a vector, the system changes the
                dimension, or the Jacobian is not n x n.
        """
        x = as_vector(guess, name="guess")
        fx = evaluate_system(f, x)
        B = np.linalg.inv(resolve_jacobian(f, x, jacobian))
        zero = np.zeros_like(x)
        state = self.start("broyden")

        while True:
            dx = -(B @ fx)
            x_new = x + dx
            if state.step_metric(x, x_new, euclidean, zero):
                return state.finish(x_new)

            f_new = evaluate_system(f, x_new)
            df = f_new - fx
            denom = float(df @ df)
            if denom == 0.0:
                logger.debug("broyden: residual did not change, stopping")
                return state.finish(x_new)

            B = B + np.outer((dx - B @ df) / denom, df)
            x, fx = x_new, f_new

    def polynomial_roots(self, coefficients: Sequence) -> ResultSet[complex]:
        """All roots of a polynomial at once (Durand-Kerner iteration).

        Args:
            coefficients: Highest degree first, as for `numpy.polyval`.

        Returns:
            ResultSet of complex roots sharing one error and iteration count.

        Raises:
            ValueError: If the polynomial has degree less than one.
        """
        c = np.trim_zeros(np.asarray(coefficients, dtype=complex), "f")
        if c.size < 2:
            raise ValueError(f"polynomial must have degree >= 1, got coefficients {list(coefficients)}")

        c = c / c[0]
        n = c.size - 1
        roots = (0.4 + 0.9j) ** np.arange(n)
        zero = np.zeros(n, dtype=complex)
        state = self.start("durand_kerner")

        while True:
            new = roots.copy()
            for i in range(n):
                others = new[i] - np.delete(new, i)
                new[i] = new[i] - np.polyval(c, new[i]) / np.prod(others)

            if state.step_metric(roots, new, euclidean, zero):
                return state.finish_set(complex(r) for r in new)

            roots = new

    # ------------------------- Derived problems -------------------------

    def _two_point(self, method: str) -> Callable:
        if method not in TWO_POINT_METHODS:
            raise ValueError(f"Unknown method: {method!r}; expected one of {', '.join(TWO_POINT_METHODS)}")
        return getattr(self, method)

    def invert(self, f: ScalarFunction, y: float, a: float, b: float, *, method: str = "brent") -> ResultValue[float]:
        """Find x with f(x) = y using a two-point method."""
        solve = self._two_point(method)
        return solve(lambda x: f(x) - y, a, b)

    def intersect(
        self, f1: ScalarFunction, f2: ScalarFunction, a: float, b: float, *, method: str = "brent"
    ) -> ResultValue[float]:
        """Find x with f1(x) = f2(x) using a two-point method."""
        solve = self._two_point(method)
        return solve(lambda x: f1(x) - f2(x), a, b)
