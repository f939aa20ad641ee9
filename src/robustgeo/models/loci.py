"""
Symmetric-form loci: conics, quadrics and their duals.

A symmetric (k x k) matrix Q has the locus v^T Q v = 0:

- Conic       (3x3): 2D points  v = [x, y, 1]          (minimal: 5)
- DualConic   (3x3): 2D lines   v = [a, b, c]          (minimal: 5)
- Quadric     (4x4): 3D points  v = [x, y, z, 1]       (minimal: 9)
- DualQuadric (4x4): planes     v = [a, b, c, d]       (minimal: 9)

v^T Q v is linear in the k(k+1)/2 upper-triangle entries of Q, so Q is the
null vector of the stacked design rows (symmetric_design). Points are
Hartley-normalised first; lines and planes are only scaled to unit norm.
Matrices are returned Frobenius-normalised.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..ransac.types import FloatArray
from .homogeneous import (
    as_homogeneous, frobenius_normalize, normalize_rows, normalizing_transform, null_vector,
    symmetric_design, symmetric_from_params,
)


def locus_sample_size(k: int) -> int:
    """Degrees of freedom of a k x k symmetric matrix up to scale."""
    return k * (k + 1) // 2 - 1


def fit_symmetric_locus(
        vectors: FloatArray,
        *,
        transform: Optional[FloatArray] = None,
        rank_tol: float = 1e-10,
) -> Optional[FloatArray]:
    """
    Symmetric Q with v^T Q v ~ 0 for every row v of ``vectors``.

    transform: optional conditioning T applied as v' = T v; the solution is
    mapped back with Q = T^T Q' T.
    """
    v = vectors if transform is None else vectors @ transform.T
    q = null_vector(symmetric_design(normalize_rows(v)), rank_tol=rank_tol)
    if q is None:
        return None

    Q = symmetric_from_params(q, vectors.shape[1])
    if transform is not None:
        Q = transform.T @ Q @ transform
    return frobenius_normalize(Q)


def fit_locus_from_points(pts: FloatArray, rank_tol: float = 1e-10) -> Optional[FloatArray]:
    """Conic (2D points) or quadric (3D points)."""
    T = normalizing_transform(pts)
    if T is None:
        return None
    return fit_symmetric_locus(as_homogeneous(pts), transform=T, rank_tol=rank_tol)


def fit_dual_locus(hyperplanes: FloatArray, rank_tol: float = 1e-10) -> Optional[FloatArray]:
    """Dual conic (2D lines) or dual quadric (planes)."""
    return fit_symmetric_locus(hyperplanes, rank_tol=rank_tol)


def signed_locus_values(Q: FloatArray, vectors: FloatArray) -> FloatArray:
    """v^T Q v with both Q and every v normalised, shape (N,)."""
    Qn = Q / np.linalg.norm(Q)
    v = normalize_rows(vectors)
    return np.einsum("ni,ij,nj->n", v, Qn, v)


def locus_residuals(Q: FloatArray, vectors: FloatArray) -> FloatArray:
    return np.abs(signed_locus_values(Q, vectors))
