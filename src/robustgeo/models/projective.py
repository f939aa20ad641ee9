"""
Projective transform (homography) utilities, (d+1)x(d+1) up to scale.

DLT: every correspondence says that the observed homogeneous vector is
parallel to the predicted one. Written as parallel_constraints rows over
vec(H), the solution is the null vector of the stacked system.

- points:      x' ~ H x           (4 pairs in 2D, 5 in 3D)
- hyperplanes: h ~ H^T h'         (4 lines in 2D, 5 planes in 3D)

Points are Hartley-normalised on both sides before the solve (as in the
normalised 8-point / 4-point algorithms) and mapped back afterwards:

    H = T1^{-1} @ Hn @ T0

Matrices are returned Frobenius-normalised.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..ransac.types import FloatArray, is_valid_matrix
from .homogeneous import (
    as_homogeneous, frobenius_normalize, normalize_rows, normalizing_transform, null_vector,
    parallel_constraints,
)
from .transforms import is_invertible


def projective_sample_size(dimension: int) -> int:
    """(k^2 - 1) unknowns, d independent constraints per correspondence."""
    k = dimension + 1
    return int(np.ceil((k * k - 1) / dimension))


def _accept(H: FloatArray) -> Optional[FloatArray]:
    H = frobenius_normalize(H)
    if H is None or not is_valid_matrix(H, H.shape[0]) or not is_invertible(H):
        return None
    return H


# ---------- Point correspondences ----------
def _point_designs(x0: FloatArray) -> FloatArray:
    """(H x0)[r] = sum_c H[r, c] * x0[c] as D @ vec(H)."""
    n, k = x0.shape
    designs = np.zeros((n, k, k * k), dtype=np.float64)
    for r in range(k):
        designs[:, r, r * k:(r + 1) * k] = x0
    return designs


def fit_projective_points(pts0: FloatArray, pts1: FloatArray, rank_tol: float = 1e-10) -> Optional[FloatArray]:
    """
    Fit a homography from N >= minimal point correspondences.

    Returns None if the sample is degenerate (e.g. too many collinear points).
    """
    if pts0.shape != pts1.shape:
        raise ValueError(f"pts0 and pts1 must have same shape, got {pts0.shape} vs {pts1.shape}")
    d = pts0.shape[1]
    if pts0.shape[0] < projective_sample_size(d):
        return None

    T0 = normalizing_transform(pts0)
    T1 = normalizing_transform(pts1)
    if T0 is None or T1 is None:
        return None

    x0 = as_homogeneous(pts0) @ T0.T
    x1 = as_homogeneous(pts1) @ T1.T

    A, _ = parallel_constraints(x1, _point_designs(x0))
    h = null_vector(A, rank_tol=rank_tol)
    if h is None:
        return None

    k = d + 1
    Hn = h.reshape(k, k)
    return _accept(np.linalg.inv(T1) @ Hn @ T0)


# ---------- Hyperplane correspondences ----------
def _hyperplane_designs(h1: FloatArray) -> FloatArray:
    """(H^T h1)[c] = sum_r H[r, c] * h1[r] as D @ vec(H)."""
    n, k = h1.shape
    designs = np.zeros((n, k, k * k), dtype=np.float64)
    for r in range(k):
        for c in range(k):
            designs[:, c, r * k + c] = h1[:, r]
    return designs


def fit_projective_hyperplanes(h0: FloatArray, h1: FloatArray, rank_tol: float = 1e-10) -> Optional[FloatArray]:
    """
    Fit a homography from line (2D) or plane (3D) correspondences, h1 ~ H^{-T} h0.
    """
    if h0.shape != h1.shape:
        raise ValueError(f"h0 and h1 must have same shape, got {h0.shape} vs {h1.shape}")
    k = h0.shape[1]
    if h0.shape[0] < projective_sample_size(k - 1):
        return None

    A, _ = parallel_constraints(normalize_rows(h0), _hyperplane_designs(normalize_rows(h1)))
    h = null_vector(A, rank_tol=rank_tol)
    if h is None:
        return None
    return _accept(h.reshape(k, k))
