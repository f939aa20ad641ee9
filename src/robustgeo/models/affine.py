"""
Affine model utilities ((d+1)x(d+1) homogeneous form, d = 2 or 3).

We estimate an affine transform T such that:

    [x', 1]^T  =  T @ [x, 1]^T

where, in 2D:

    T = [[a, b, tx],
         [c, d, ty],
         [0, 0,  1]]

Unknowns are the top d rows: 6 parameters in 2D, 12 in 3D.

Two kinds of correspondences are supported:
- points:      each pair gives d linear equations, d + 1 pairs are minimal
- hyperplanes: h ~ T^T h' (lines in 2D, planes in 3D); each pair gives d
               independent parallel constraints, d + 1 pairs are minimal
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..ransac.types import FloatArray, is_valid_matrix
from .homogeneous import as_homogeneous, normalize_rows, parallel_constraints, solve_linear
from .transforms import is_invertible


def theta_to_matrix(theta: FloatArray, dimension: int) -> FloatArray:
    """
    Convert parameter vector theta (top d rows, row-major) into a (d+1)x(d+1) matrix.
    """
    k = dimension + 1
    T = np.eye(k, dtype=np.float64)
    T[:dimension, :] = np.asarray(theta, dtype=np.float64).reshape(dimension, k)
    return T


def matrix_to_theta(T: FloatArray) -> FloatArray:
    return T[:-1, :].ravel().astype(np.float64)


def _accept(T: FloatArray) -> Optional[FloatArray]:
    # singular affine maps collapse the space: treat as degenerate
    if not is_valid_matrix(T, T.shape[0]) or not is_invertible(T):
        return None
    return T


# ---------- Point correspondences ----------
def fit_affine_points(pts0: FloatArray, pts1: FloatArray, rank_tol: float = 1e-10) -> Optional[FloatArray]:
    """
    Fit affine transform from N >= d + 1 point correspondences.

    Least squares: finds the top rows M minimising ||[x, 1] M^T - x'||^2.
    With exactly d + 1 pairs this is the exact minimal solve.

    Returns None if the input points are collinear (2D) / coplanar (3D) or
    the solve fails.
    """
    if pts0.shape != pts1.shape:
        raise ValueError(f"pts0 and pts1 must have same shape, got {pts0.shape} vs {pts1.shape}")
    n, d = pts0.shape
    if n < d + 1:
        return None

    # Each output coordinate is its own linear system sharing the design
    #   x'_r = sum_c M[r, c] * [x, 1]_c
    # Rank below d + 1 means the points do not span the space.
    M_T = solve_linear(as_homogeneous(pts0), pts1.astype(np.float64), rank_tol=rank_tol)
    if M_T is None:
        return None

    return _accept(theta_to_matrix(M_T.T.ravel(), d))


# ---------- Hyperplane correspondences ----------
def _hyperplane_designs(h1: FloatArray) -> tuple[FloatArray, FloatArray]:
    """
    Prediction T^T h1 as D @ theta + offset.

    (T^T h1)[c] = sum_{r<d} T[r, c] * h1[r] + T[d, c] * h1[d], and T[d, c]
    is 1 for c == d and 0 otherwise.
    """
    n, k = h1.shape
    d = k - 1
    designs = np.zeros((n, k, d * k), dtype=np.float64)
    for r in range(d):
        for c in range(k):
            designs[:, c, r * k + c] = h1[:, r]

    offsets = np.zeros((n, k), dtype=np.float64)
    offsets[:, d] = h1[:, d]
    return designs, offsets


def fit_affine_hyperplanes(h0: FloatArray, h1: FloatArray, rank_tol: float = 1e-10) -> Optional[FloatArray]:
    """
    Fit affine transform from N >= d + 1 line (2D) or plane (3D) correspondences,
    h1 ~ T^{-T} h0.
    """
    if h0.shape != h1.shape:
        raise ValueError(f"h0 and h1 must have same shape, got {h0.shape} vs {h1.shape}")
    n, k = h0.shape
    d = k - 1
    if n < d + 1:
        return None

    h0n = normalize_rows(h0)
    h1n = normalize_rows(h1)
    designs, offsets = _hyperplane_designs(h1n)
    A, b = parallel_constraints(h0n, designs, offsets)

    theta = solve_linear(A, b, rank_tol=rank_tol)
    if theta is None:
        return None
    return _accept(theta_to_matrix(theta, d))
