## Tests for trapezoid, Romberg and composite Gauss integration, including
## the bound conventions (reversal, zero length, antiderivative, infinite
## bounds) and complex path integrals.

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

import math
import unittest

import pytest

from itermath.integrator import DEFAULT_MAX_LEVELS, INTEGRATION_METHODS, Integrator, combine_parts
from itermath.results import ResultValue
from itermath.visualize import ConvergenceRecorder


def integrate(method, f, a, b=None, **kwargs):
    return getattr(Integrator(**kwargs), method)(f, a, b)


class TestLinear(unittest.TestCase):
    """Integral of x over [0, 1] is 0.5 for every method."""

    def test_trapezoid(self):
        res = Integrator().trapezoid(lambda x: x, 0.0, 1.0)
        self.assertAlmostEqual(res.value, 0.5, places=12)
        self.assertEqual(res.iterations, 2)

    def test_romberg(self):
        res = Integrator().romberg(lambda x: x, 0.0, 1.0)
        self.assertAlmostEqual(res.value, 0.5, places=12)

    def test_gauss(self):
        res = Integrator().gauss(lambda x: x, 0.0, 1.0)
        self.assertAlmostEqual(res.value, 0.5, places=12)

    def test_kronrod(self):
        self.assertAlmostEqual(Integrator().kronrod(lambda x: x, 0.0, 1.0), 0.5, places=12)


def test_default_budget_counts_levels():
    assert Integrator().max_iterations == DEFAULT_MAX_LEVELS


@pytest.mark.parametrize("method", INTEGRATION_METHODS)
def test_zero_length_interval(method):
    res = integrate(method, lambda x: 1.0 / (x - 5.0), 5.0, 5.0)
    assert res.value == 0.0
    assert res.error == 0.0
    assert res.iterations == 0


def test_kronrod_zero_length_interval():
    assert Integrator().kronrod(math.exp, 5.0, 5.0) == 0.0


@pytest.mark.parametrize("method", INTEGRATION_METHODS)
def test_reversed_bounds_negate(method):
    forward = integrate(method, math.exp, 0.0, 1.0, tolerance=1e-8)
    backward = integrate(method, math.exp, 1.0, 0.0, tolerance=1e-8)
    assert backward.value == -forward.value
    assert backward.error == forward.error
    assert forward.value == pytest.approx(math.e - 1.0, rel=1e-7)


def test_kronrod_reversed_bounds_negate():
    integrator = Integrator()
    assert integrator.kronrod(math.sin, math.pi, 0.0) == pytest.approx(-2.0, rel=1e-12)


@pytest.mark.parametrize("method", INTEGRATION_METHODS)
def test_single_bound_integrates_from_zero(method):
    res = integrate(method, lambda x: 2.0 * x, 3.0, tolerance=1e-10)
    assert res.value == pytest.approx(9.0, rel=1e-9)


def test_romberg_sine():
    res = Integrator().romberg(math.sin, 0.0, math.pi)
    assert res.value == pytest.approx(2.0, abs=1e-11)
    assert res.error <= 1e-12
    assert res.iterations < DEFAULT_MAX_LEVELS


def test_trapezoid_quadratic():
    res = Integrator(tolerance=1e-8).trapezoid(lambda x: x * x, 0.0, 1.0)
    assert res.value == pytest.approx(1.0 / 3.0, abs=1e-7)


def test_budget_exhaustion_is_not_an_error():
    integrator = Integrator(max_iterations=3, tolerance=1e-15)
    res = integrator.trapezoid(math.exp, 0.0, 1.0)
    assert res.iterations == 3
    assert res.error > integrator.tolerance


@pytest.mark.parametrize("points, degree", [(2, 3), (3, 5), (4, 7), (5, 9), ("lobatto", 7)])
def test_gauss_rules_are_exact_for_polynomials(points, degree):
    res = Integrator().gauss(lambda x: x ** degree, 0.0, 1.0, points=points)
    assert res.value == pytest.approx(1.0 / (degree + 1), rel=1e-12)
    assert res.iterations == 2


def test_unknown_gauss_rule_raises():
    with pytest.raises(ValueError):
        Integrator().gauss(math.sin, 0.0, 1.0, points=7)


def test_gauss_upper_infinite_bound():
    res = Integrator().gauss(lambda x: 1.0 / (x * x), 1.0, math.inf)
    assert res.value == pytest.approx(1.0, rel=1e-10)


def test_gauss_lower_infinite_bound():
    res = Integrator().gauss(math.exp, -math.inf, 0.0)
    assert res.value == pytest.approx(1.0, rel=1e-9)


def test_gauss_whole_line():
    res = Integrator().gauss(lambda x: 1.0 / (1.0 + x * x), -math.inf, math.inf)
    assert res.value == pytest.approx(math.pi, rel=1e-9)


def test_gauss_reversed_infinite_bound():
    res = Integrator().gauss(lambda x: 1.0 / (x * x), math.inf, 1.0)
    assert res.value == pytest.approx(-1.0, rel=1e-10)


@pytest.mark.parametrize("method", ("trapezoid", "romberg"))
def test_infinite_bounds_rejected_by_newton_cotes(method):
    with pytest.raises(ValueError):
        integrate(method, math.exp, -math.inf, 0.0)


def test_lobatto_rejects_infinite_bounds():
    with pytest.raises(ValueError):
        Integrator().gauss(math.exp, -math.inf, 0.0, points="lobatto")


def test_combine_parts():
    res = combine_parts(ResultValue(1.0, 3e-3, 4), ResultValue(2.0, 4e-3, 7))
    assert res.value == 1.0 + 2.0j
    assert res.error == pytest.approx(5e-3)
    assert res.iterations == 7


@pytest.mark.parametrize("method", INTEGRATION_METHODS)
def test_path_integral_of_square_along_diagonal(method):
    direction = 1.0 + 1.0j
    res = Integrator(tolerance=1e-10).path(
        lambda z: z * z,
        lambda t: t * direction,
        lambda t: direction,
        method=method,
    )
    assert abs(res.value - (-2.0 + 2.0j) / 3.0) < 1e-8


def test_path_integral_around_unit_circle():
    res = Integrator().path(
        lambda z: 1.0 / z,
        lambda t: complex(math.cos(2 * math.pi * t), math.sin(2 * math.pi * t)),
        lambda t: 2j * math.pi * complex(math.cos(2 * math.pi * t), math.sin(2 * math.pi * t)),
    )
    assert abs(res.value - 2j * math.pi) < 1e-10


def test_path_runs_real_and_imaginary_parts_separately():
    recorder = ConvergenceRecorder()
    direction = 1.0 + 1.0j
    Integrator(observer=recorder).path(lambda z: z * z, lambda t: t * direction, lambda t: direction)
    assert recorder.runs == 2
    assert recorder.finished == 2
    assert recorder.steps[0] == 1


def test_path_unknown_method_raises():
    with pytest.raises(ValueError):
        Integrator().path(lambda z: z, lambda t: t, lambda t: 1.0, method="kronrod")


if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
