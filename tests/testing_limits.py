import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

import itertools
import math

import numpy as np
import pytest

from itermath.controllers import ErrorMeasure, euclidean
from itermath.limits import converge, limit


def geometric_partial_sums():
    total = 0.0
    term = 1.0
    while True:
        total += term
        yield total
        term *= 0.5


def babylonian(a, x=1.0):
    while True:
        yield x
        x = 0.5 * (x + a / x)


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    def dist(self, other):
        return math.hypot(self.x - other.x, self.y - other.y)

    def norm(self):
        return math.hypot(self.x, self.y)


def test_limit_of_geometric_series():
    res = limit(geometric_partial_sums())
    assert res.value == pytest.approx(2.0, abs=1e-11)
    assert res.error <= 1e-12
    assert res.iterations > 30


def test_limit_of_babylonian_iteration():
    res = limit(babylonian(2.0), tolerance=1e-14)
    assert res.value == pytest.approx(math.sqrt(2.0), abs=1e-14)


def test_converge_yields_until_neighbours_agree():
    seq = [1.0, 1.5, 1.75, 1.75, 1.8]
    assert list(converge(seq)) == [1.0, 1.5, 1.75, 1.75]


def test_converge_respects_budget():
    assert list(converge(itertools.count(), max_iterations=5)) == [0, 1, 2, 3, 4, 5]


def test_converge_short_sequences():
    assert list(converge([])) == []
    assert list(converge([3.0])) == [3.0]


def test_limit_of_single_element():
    res = limit([3.0])
    assert res.value == 3.0
    assert res.error == math.inf
    assert res.iterations == 0


def test_limit_of_empty_sequence_raises():
    with pytest.raises(ValueError):
        limit([])


def test_metric_without_zero_raises():
    with pytest.raises(ValueError):
        limit([np.zeros(2)], metric=euclidean)
    with pytest.raises(ValueError):
        converge([np.zeros(2)], metric=euclidean)


def test_limit_with_metric():
    seq = (np.array([0.5 ** k, 1.0 + 0.5 ** k]) for k in itertools.count())
    res = limit(seq, metric=euclidean, zero=np.zeros(2), measure=ErrorMeasure.ABSOLUTE)
    np.testing.assert_allclose(res.value, [0.0, 1.0], atol=1e-11)


def test_limit_of_metrizable_values():
    seq = (Point(1.0 + 0.5 ** k, -2.0) for k in itertools.count())
    res = limit(seq, tolerance=1e-10)
    assert res.value.x == pytest.approx(1.0, abs=1e-9)
    assert res.value.y == -2.0


def test_limit_of_complex_sequence():
    seq = ((1j / 3.0) ** k + (2.0 - 1.0j) for k in itertools.count())
    res = limit(seq)
    assert abs(res.value - (2.0 - 1.0j)) < 1e-11


def test_limit_of_vector_sequence():
    seq = (np.array([1.0, 2.0]) * (1.0 + 0.5 ** k) for k in range(200))
    res = limit(seq)
    np.testing.assert_allclose(res.value, [1.0, 2.0], atol=1e-10)
    assert res.error <= 1e-12
    assert res.iterations < 200


def test_converge_on_vectors_yields_arrays():
    seq = [np.array([1.0, 1.0]), np.array([0.5, 1.0]), np.array([0.5, 1.0]), np.array([9.0, 9.0])]
    out = list(converge(seq))
    assert len(out) == 3
    np.testing.assert_array_equal(out[-1], [0.5, 1.0])
