"""
Covariance of least-squares estimates.

Linearising the residuals around the solution p* (J = dr/dp):

    Cov(p*) = sigma^2 * (J^T J)^+

The pseudo-inverse absorbs gauge freedoms (e.g. the scale of a homogeneous
matrix). Covariance is then propagated to the public parameterisation
q = g(p) with the first-order rule

    Cov(q) = G Cov(p) G^T,    G = dg/dp
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from ..ransac.types import FloatArray


def numeric_jacobian(
        fun: Callable[[FloatArray], FloatArray],
        x: FloatArray,
        rel_step: float = 1e-6,
) -> FloatArray:
    """Central-difference Jacobian of ``fun`` at ``x``, shape (len(fun(x)), len(x))."""
    x = np.asarray(x, dtype=np.float64)
    f0 = np.asarray(fun(x), dtype=np.float64)
    J = np.empty((f0.size, x.size), dtype=np.float64)

    for i in range(x.size):
        h = rel_step * max(1.0, abs(float(x[i])))
        step = np.zeros_like(x)
        step[i] = h
        J[:, i] = (np.asarray(fun(x + step)) - np.asarray(fun(x - step))).ravel() / (2.0 * h)
    return J


def parameter_covariance(J: FloatArray, sigma: float) -> FloatArray:
    cov = (sigma * sigma) * np.linalg.pinv(J.T @ J)
    # remove round-off asymmetry
    return 0.5 * (cov + cov.T)


def propagate_covariance(cov: FloatArray, G: FloatArray) -> FloatArray:
    out = G @ cov @ G.T
    return 0.5 * (out + out.T)
