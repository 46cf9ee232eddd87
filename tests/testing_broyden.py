## Systems of equations (Broyden) and simultaneous polynomial roots
## (Durand-Kerner).

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

import unittest

import numpy as np
import pytest

from itermath.rootfinder import RootFinder
from itermath.results import ResultSet


def circle_hyperbola(v):
    x, y = v
    return np.array([x ** 2 + y ** 2 - 1.0, x ** 2 - y ** 2 - 0.5])


def circle_hyperbola_jacobian(v):
    x, y = v
    return np.array([
        [2 * x, 2 * y],
        [2 * x, -2 * y],
    ])


def parabolas(v):
    x, y = v
    return np.array([y - (x - 4.0) ** 2 - 2.0, y + (x - 3.0) ** 2 - 5.0])


class TestBroyden(unittest.TestCase):

    def test_circle_hyperbola_finite_difference_start(self):
        """
        x^2 + y^2 = 1 and x^2 - y^2 = 1/2 meet at (sqrt(3)/2, 1/2)
        """
        res = RootFinder().broyden(circle_hyperbola, [0.8, 0.6])
        np.testing.assert_allclose(res.value, [np.sqrt(3.0) / 2.0, 0.5], atol=1e-8)
        np.testing.assert_allclose(circle_hyperbola(res.value), np.zeros(2), atol=1e-8)
        self.assertGreater(res.iterations, 1)

    def test_circle_hyperbola_analytic_jacobian(self):
        res = RootFinder().broyden(circle_hyperbola, np.array([0.8, 0.6]), circle_hyperbola_jacobian)
        np.testing.assert_allclose(res.value, [0.866025403784439, 0.5], atol=1e-8)

    def test_jacobian_matrix_at_guess(self):
        guess = np.array([0.8, 0.6])
        res = RootFinder().broyden(circle_hyperbola, guess, circle_hyperbola_jacobian(guess))
        np.testing.assert_allclose(res.value, [0.866025403784439, 0.5], atol=1e-8)

    def test_parabolas(self):
        res = RootFinder().broyden(parabolas, [2.0, 4.0])
        np.testing.assert_allclose(res.value, [2.38196601125011, 4.61803398874989], atol=1e-8)


def test_wrong_jacobian_shape_raises():
    with pytest.raises(ValueError):
        RootFinder().broyden(circle_hyperbola, [0.8, 0.6], np.eye(3))


def test_wrong_jacobian_callable_shape_raises():
    with pytest.raises(ValueError):
        RootFinder().broyden(circle_hyperbola, [0.8, 0.6], lambda v: np.ones((2, 3)))


def test_guess_must_be_a_vector():
    with pytest.raises(ValueError):
        RootFinder().broyden(circle_hyperbola, [[0.8, 0.6]])


def test_system_must_keep_dimension():
    with pytest.raises(ValueError):
        RootFinder().broyden(lambda v: np.append(v, 1.0), [0.8, 0.6])


def test_broyden_result_is_hashable():
    res = RootFinder().broyden(circle_hyperbola, [0.8, 0.6])
    assert hash(res) == hash(res.error)
    assert res in {res}


def test_polynomial_roots():
    res = RootFinder().polynomial_roots([1.0, -3.0, 2.0])
    assert isinstance(res, ResultSet)
    assert len(res) == 2
    roots = sorted(res, key=lambda z: z.real)
    assert roots[0] == pytest.approx(1.0, abs=1e-10)
    assert roots[1] == pytest.approx(2.0, abs=1e-10)


def test_polynomial_roots_complex_pair():
    # x^3 - 1: one real root and a conjugate pair
    res = RootFinder().polynomial_roots([1.0, 0.0, 0.0, -1.0])
    expected = np.exp(2j * np.pi * np.arange(3) / 3)
    for z in expected:
        assert min(abs(r - z) for r in res) < 1e-10


def test_polynomial_roots_leading_zeros_and_scaling():
    res = RootFinder().polynomial_roots([0.0, 2.0, -6.0, 4.0])
    assert sorted(r.real for r in res) == pytest.approx([1.0, 2.0], abs=1e-10)


@pytest.mark.parametrize("coefficients", [[5.0], [0.0, 0.0, 3.0], []])
def test_constant_polynomial_raises(coefficients):
    with pytest.raises(ValueError):
        RootFinder().polynomial_roots(coefficients)


if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
