"""Fixed quadrature rules and adaptive Gauss-Kronrod integration.

This module holds the building blocks used by `itermath.integrator`:

- composite rules evaluated on n equal subintervals (trapezoid, Gauss-Legendre
  with 2 to 5 points, 5-point Gauss-Lobatto);
- substitutions that map infinite bounds onto a finite interval;
- `gauss_kronrod`, a self-contained recursive integrator that bisects an
  interval wherever the 7-point Gauss and 15-point Kronrod estimates disagree.

Nodes are given on [-1, 1] and scaled by the half-width of each subinterval.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

RealFunction = Callable[[float], float]

# Adaptive Gauss-Kronrod defaults.
KRONROD_THRESHOLD = 1.0e-8
KRONROD_MAX_DEPTH = 64


@dataclass(frozen=True)
class QuadratureRule:
    """Nodes and weights of a rule on [-1, 1]."""

    name: str
    nodes: np.ndarray
    weights: np.ndarray

    @property
    def points(self) -> int:
        return int(self.nodes.shape[0])


def _symmetric_rule(name: str, center: float | None, pairs: Tuple[Tuple[float, float], ...]) -> QuadratureRule:
    """Build a rule from its (optional) center weight and +/- node pairs."""
    nodes = []
    weights = []
    if center is not None:
        nodes.append(0.0)
        weights.append(center)
    for node, weight in pairs:
        nodes.extend((node, -node))
        weights.extend((weight, weight))
    return QuadratureRule(name, np.array(nodes, dtype=float), np.array(weights, dtype=float))


GAUSS_RULES: Dict[Union[int, str], QuadratureRule] = {
    2: _symmetric_rule("gauss2", None, ((0.57735026918962576451, 1.0),)),
    3: _symmetric_rule("gauss3", 8.0 / 9.0, ((0.77459666924148337704, 5.0 / 9.0),)),
    4: _symmetric_rule(
        "gauss4",
        None,
        (
            (0.33998104358485626480, 0.65214515486254614263),
            (0.86113631159405257522, 0.34785484513745385737),
        ),
    ),
    5: _symmetric_rule(
        "gauss5",
        128.0 / 225.0,
        (
            (0.53846931010568309104, 0.47862867049936646804),
            (0.90617984593866399280, 0.23692688505618908751),
        ),
    ),
    "lobatto": _symmetric_rule(
        "lobatto5",
        64.0 / 90.0,
        (
            (0.65465367070797714380, 49.0 / 90.0),
            (1.0, 9.0 / 90.0),
        ),
    ),
}

# Kronrod abscissae; the even-indexed ones (after the center) are the 7-point
# Gauss nodes.
GK_NODES = np.array([
    0.0,
    2.0778495500789846760e-01,
    4.0584515137739716691e-01,
    5.8608723546769113029e-01,
    7.4153118559939443986e-01,
    8.6486442335976907279e-01,
    9.4910791234275852453e-01,
    9.9145537112081263921e-01,
])

GAUSS7_WEIGHTS = np.array([
    4.1795918367346938776e-01,
    3.8183005050511894495e-01,
    2.7970539148927666790e-01,
    1.2948496616886969327e-01,
])

KRONROD15_WEIGHTS = np.array([
    2.0948214108472782801e-01,
    2.0443294007529889241e-01,
    1.9035057806478540991e-01,
    1.6900472663926790283e-01,
    1.4065325971552591875e-01,
    1.0479001032225018384e-01,
    6.3092092629978553291e-02,
    2.2935322010529224964e-02,
])


def is_zero_length(a: float, b: float) -> bool:
    """True when b - a is too small to be inverted."""
    return abs(b - a) <= 1.0 / np.finfo(float).max


def trapezoid_sum(f: RealFunction, a: float, b: float, n: int) -> float:
    """Composite trapezoid rule with n subintervals (n + 1 evaluations)."""
    h = (b - a) / n
    total = f(a)
    x = a
    for _ in range(1, n):
        x = x + h
        total += 2.0 * f(x)
    total += f(b)
    return total * (h / 2.0)


def composite_rule(f: RealFunction, a: float, b: float, n: int, rule: QuadratureRule) -> float:
    """Apply `rule` on each of n equal subintervals of [a, b] and sum."""
    h = (b - a) / n
    total = 0.0
    left = a
    for _ in range(n):
        half = h / 2.0
        mid = left + half
        local = 0.0
        for node, weight in zip(rule.nodes, rule.weights):
            local += weight * f(mid + half * node)
        total += local * half
        left = left + h
    return total


def map_infinite_bounds(f: RealFunction, a: float, b: float) -> Tuple[RealFunction, float, float]:
    """Rewrite an integral with infinite bounds as one over a finite interval.

    Substitutions:
        (-inf, inf): x = t / (1 - t^2) on (-1, 1)
        (-inf, b]:   x = b - (1 - t) / t on (0, 1]
        [a, inf):    x = a + t / (1 - t) on [0, 1)

    The transformed integrands are singular at the interval ends, so only
    rules whose nodes stay strictly inside the interval may use them.
    Finite bounds are returned unchanged.
    """
    if math.isinf(a) and math.isinf(b):
        sign = 1.0 if a < b else -1.0

        def whole_line(t: float) -> float:
            t2 = t * t
            tm = 1.0 - t2
            return f(t / tm) * (1.0 + t2) / (tm * tm)

        return whole_line, -sign, sign

    if math.isinf(a):
        upper = b
        if a > 0:
            # [b, +inf) integrated backwards
            return map_infinite_bounds(lambda x: -f(x), b, a)

        def lower_tail(t: float) -> float:
            return f(upper - (1.0 - t) / t) / (t * t)

        return lower_tail, 0.0, 1.0

    if math.isinf(b):
        lower = a
        if b < 0:
            return map_infinite_bounds(lambda x: -f(x), b, a)

        def upper_tail(t: float) -> float:
            tm = 1.0 - t
            return f(lower + t / tm) / (tm * tm)

        return upper_tail, 0.0, 1.0

    return f, a, b


def _kronrod_recursive(f: RealFunction, a: float, b: float, threshold: float, max_depth: int, depth: int) -> float:
    half = (b - a) / 2.0
    mid = (b + a) / 2.0

    center = f(mid)
    gauss = center * GAUSS7_WEIGHTS[0]
    kron = center * KRONROD15_WEIGHTS[0]

    for i in range(1, 8):
        pair = f(mid + half * GK_NODES[i]) + f(mid - half * GK_NODES[i])
        kron += pair * KRONROD15_WEIGHTS[i]
        if i % 2 == 0:
            gauss += pair * GAUSS7_WEIGHTS[i // 2]

    gauss *= half
    kron *= half

    if kron != 0.0:
        err = (gauss - kron) / kron
    else:
        err = 0.0 if gauss == kron else math.inf

    if depth < max_depth and abs(err) > threshold:
        return (
            _kronrod_recursive(f, a, mid, threshold, max_depth, depth + 1)
            + _kronrod_recursive(f, mid, b, threshold, max_depth, depth + 1)
        )

    if depth >= max_depth:
        logger.debug("gauss_kronrod: depth limit reached on [%g, %g] (rel. error %.3g)", a, b, err)
    return float(kron)


def gauss_kronrod(
    f: RealFunction,
    a: float,
    b: float,
    *,
    threshold: float = KRONROD_THRESHOLD,
    max_depth: int = KRONROD_MAX_DEPTH,
) -> float:
    """Adaptive Gauss-Kronrod (G7/K15) quadrature of f over [a, b].

    The local relative error (gauss - kronrod) / kronrod decides whether an
    interval is bisected; recursion stops at `max_depth`. Reversed bounds give
    the negated integral and infinite bounds are mapped onto finite ones.
    Unlike the methods of `Integrator` this does not use an iteration budget
    and returns a plain float.

    Args:
        f: Integrand.
        a: Lower bound (may be -inf).
        b: Upper bound (may be +inf).
        threshold: Largest accepted local relative error.
        max_depth: Maximum recursion depth.
    """
    g, lo, hi = map_infinite_bounds(f, a, b)
    return _kronrod_recursive(g, lo, hi, abs(threshold), int(max_depth), 0)
