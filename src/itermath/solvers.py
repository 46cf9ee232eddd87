"""Solver facade.

This module re-exports the public API from submodules so the rest of a
project can depend on one stable import path:

	from itermath import solvers

	rf = solvers.RootFinder(tolerance=1e-10)
"""

from __future__ import annotations

from .controllers import (
	Algorithm,
	ErrorMeasure,
	IterationConfig,
	IterationObserver,
	IterationState,
	Metrizable,
	StepEvent,
	euclidean,
)
from .integrator import Integrator, combine_parts
from .jacobian import finite_difference_jacobian
from .limits import converge, limit
from .quadrature import GAUSS_RULES, gauss_kronrod
from .results import ResultSet, ResultValue
from .rootfinder import RootFinder

__all__ = [
	"Algorithm",
	"ErrorMeasure",
	"IterationConfig",
	"IterationObserver",
	"IterationState",
	"Metrizable",
	"StepEvent",
	"euclidean",
	"Integrator",
	"combine_parts",
	"finite_difference_jacobian",
	"converge",
	"limit",
	"GAUSS_RULES",
	"gauss_kronrod",
	"ResultSet",
	"ResultValue",
	"RootFinder",
]
