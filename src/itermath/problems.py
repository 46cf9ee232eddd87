"""Named benchmark problems for the root finders and integrators.

Root problems carry a function, its derivative, a bracket with a sign change
and the known root. Quadrature problems carry an integrand, bounds and the
exact value of the integral. Lookup is by name:

    >>> problem = load_root_problem("cubic_cosine")
    >>> problem.bracket
    (0.0, 1.5)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple


@dataclass(frozen=True)
class RootProblem:
    name: str
    f: Callable[[float], float]
    df: Callable[[float], float]
    bracket: Tuple[float, float]
    root: float
    description: str | None = None

    @property
    def guess(self) -> float:
        """Starting point for open methods: the bracket midpoint."""
        return 0.5 * (self.bracket[0] + self.bracket[1])


@dataclass(frozen=True)
class QuadratureProblem:
    name: str
    f: Callable[[float], float]
    a: float
    b: float
    exact: float
    description: str | None = None


_ROOT_PROBLEMS: Dict[str, RootProblem] = {
    p.name: p
    for p in (
        RootProblem(
            name="cubic_cosine",
            f=lambda x: math.cos(x) - x ** 3,
            df=lambda x: -math.sin(x) - 3.0 * x * x,
            bracket=(0.0, 1.5),
            root=0.8654740331016144,
            description="cos(x) - x^3",
        ),
        RootProblem(
            name="sqrt_two",
            f=lambda x: x * x - 2.0,
            df=lambda x: 2.0 * x,
            bracket=(1.0, 2.0),
            root=math.sqrt(2.0),
            description="x^2 - 2",
        ),
        RootProblem(
            name="omega",
            f=lambda x: x * math.exp(x) - 1.0,
            df=lambda x: (x + 1.0) * math.exp(x),
            bracket=(0.0, 1.0),
            root=0.5671432904097838,
            description="x e^x - 1, root is the omega constant",
        ),
        RootProblem(
            name="quadratic",
            f=lambda x: (x * x) - (2.0 * x) - 3.0,
            df=lambda x: 2.0 * (x - 1.0),
            bracket=(0.0, 4.0),
            root=3.0,
            description="x^2 - 2x - 3",
        ),
        RootProblem(
            name="logistic",
            f=lambda x: 2.0 / (1.0 + math.exp(-4.0 * (x - 2.0))) - 1.0,
            df=lambda x: 8.0 * math.exp(-4.0 * (x - 2.0)) / (1.0 + math.exp(-4.0 * (x - 2.0))) ** 2,
            bracket=(0.0, 3.0),
            root=2.0,
            description="shifted logistic curve",
        ),
        RootProblem(
            name="cubic",
            f=lambda x: x * ((x * (x - 10.0)) + 32.0) - 30.0,
            df=lambda x: (x - 4.0) * (3.0 * x - 8.0),
            bracket=(0.0, 2.5),
            root=1.64069591402822,
            description="x^3 - 10x^2 + 32x - 30",
        ),
        RootProblem(
            name="gaussian",
            f=lambda x: 2.0 * math.exp(-(x * x) / 8.0) - 1.0,
            df=lambda x: -0.5 * math.exp(-(x * x) / 8.0) * x,
            bracket=(0.0, 5.0),
            root=2.35482004503095,
            description="2 exp(-x^2/8) - 1",
        ),
    )
}


_QUADRATURE_PROBLEMS: Dict[str, QuadratureProblem] = {
    p.name: p
    for p in (
        QuadratureProblem("linear", lambda x: x, 0.0, 1.0, 0.5, "x on [0, 1]"),
        QuadratureProblem("reciprocal", lambda x: 1.0 / x, 1.0, math.e, 1.0, "1/x on [1, e]"),
        QuadratureProblem(
            "rational",
            lambda x: (1.0 + x - (x * x)) / (x * x),
            2.0,
            4.0,
            math.log(2.0) - 1.75,
            "(1 + x - x^2) / x^2 on [2, 4]",
        ),
        QuadratureProblem(
            "exp_acos",
            lambda x: math.exp(math.acos(x)),
            -1.0,
            1.0,
            0.5 * (1.0 + math.exp(math.pi)),
            "e^acos(x) on [-1, 1]",
        ),
        QuadratureProblem("sine", math.sin, 0.0, math.pi, 2.0, "sin(x) on [0, pi]"),
        QuadratureProblem("gaussian_bell", lambda x: math.exp(-x * x), -3.0, 3.0, math.sqrt(math.pi) * math.erf(3.0)),
    )
}


def list_root_problems() -> List[str]:
    return sorted(_ROOT_PROBLEMS)


def list_quadrature_problems() -> List[str]:
    return sorted(_QUADRATURE_PROBLEMS)


def load_root_problem(name: str) -> RootProblem:
    """Look up a root problem by name."""
    try:
        return _ROOT_PROBLEMS[name]
    except KeyError:
        available = ", ".join(list_root_problems())
        raise ValueError(f"Root problem '{name}' not found. Available: {available}") from None


def load_quadrature_problem(name: str) -> QuadratureProblem:
    """Look up a quadrature problem by name."""
    try:
        return _QUADRATURE_PROBLEMS[name]
    except KeyError:
        available = ", ".join(list_quadrature_problems())
        raise ValueError(f"Quadrature problem '{name}' not found. Available: {available}") from None
