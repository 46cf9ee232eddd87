"""Finite-difference Jacobians and shape checks for vector systems.

A system F: R^n -> R^n is evaluated on numpy vectors. The Jacobian is
approximated column by column with symmetric (central) differences:

    J[:, j] = (F(x + h e_j) - F(x - h e_j)) / (2 h)
"""

from __future__ import annotations

from typing import Callable, Union

import numpy as np

VectorFunction = Callable[[np.ndarray], np.ndarray]
JacobianLike = Union[np.ndarray, Callable[[np.ndarray], np.ndarray]]

# Separation used for the symmetric differences.
FD_STEP = 1.0e-6


def as_vector(x, *, name: str = "x") -> np.ndarray:
    """Convert to a 1D float (or complex) array, rejecting anything else."""
    v = np.asarray(x)
    if not np.iscomplexobj(v):
        v = v.astype(float)
    if v.ndim != 1:
        raise ValueError(f"{name} must be a 1D vector, got shape {v.shape}")
    return v


def check_square(matrix: np.ndarray, n: int, *, name: str = "jacobian") -> np.ndarray:
    """Ensure `matrix` is n x n."""
    m = np.asarray(matrix, dtype=float)
    if m.shape != (n, n):
        raise ValueError(f"{name} must have shape ({n}, {n}), got {m.shape}")
    return m


def evaluate_system(f: VectorFunction, x: np.ndarray) -> np.ndarray:
    """Evaluate `f` at `x` and check it returns a vector the size of `x`."""
    y = np.asarray(f(x), dtype=float)
    if y.shape != x.shape:
        raise ValueError(f"system must map shape {x.shape} to {x.shape}, got {y.shape}")
    return y


def finite_difference_jacobian(f: VectorFunction, x, h: float = FD_STEP) -> np.ndarray:
    """Approximate the Jacobian of `f` at `x` with central differences.

    Args:
        f: Vector function of n unknowns returning n values.
        x: Point of evaluation, shape (n,).
        h: Perturbation size.

    Returns:
        J: Array of shape (n, n).
    """
    x = as_vector(x)
    n = x.shape[0]
    J = np.zeros((n, n), dtype=float)

    for j in range(n):
        x_plus = x.copy()
        x_minus = x.copy()
        x_plus[j] += h
        x_minus[j] -= h

        J[:, j] = (evaluate_system(f, x_plus) - evaluate_system(f, x_minus)) / (2.0 * h)

    return J


def resolve_jacobian(f: VectorFunction, x: np.ndarray, jacobian: JacobianLike | None) -> np.ndarray:
    """Return the Jacobian at `x` from a matrix, a callable, or finite differences."""
    n = x.shape[0]
    if jacobian is None:
        return finite_difference_jacobian(f, x)
    if callable(jacobian):
        return check_square(jacobian(x), n)
    return check_square(jacobian, n)
