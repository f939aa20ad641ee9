"""
Point models: the common point of a set of hyperplanes.

- Point2D: intersection of 2D lines [a, b, c]       (a*x + b*y + c = 0)
- Point3D: intersection of planes [a, b, c, d]      (a*x + b*y + c*z + d = 0)

Written once for dimension d: each hyperplane h = [n, c] gives one linear
equation n . p = -c. d hyperplanes with independent normals fix the point.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..ransac.types import FloatArray
from .homogeneous import solve_linear


def _unit_normal_rows(hyperplanes: FloatArray, eps: float) -> Optional[FloatArray]:
    """Scale hyperplanes so that their normals have unit length."""
    d = hyperplanes.shape[1] - 1
    norms = np.linalg.norm(hyperplanes[:, :d], axis=1)
    if np.any(norms < eps):
        # plane at infinity or all-zero row
        return None
    return hyperplanes / norms[:, None]


def fit_point_minimal(hyperplanes: FloatArray, eps: float = 1e-12, rank_tol: float = 1e-10) -> Optional[FloatArray]:
    """
    Intersect exactly d hyperplanes in d dimensions.

    Returns:
      (d,) point, or None if two hyperplanes are parallel / normals are dependent.
    """
    d = hyperplanes.shape[1] - 1
    if hyperplanes.shape != (d, d + 1):
        raise ValueError(f"fit_point_minimal expects ({d},{d + 1}) input, got {hyperplanes.shape}")
    return fit_point_least_squares(hyperplanes, eps=eps, rank_tol=rank_tol)


def fit_point_least_squares(hyperplanes: FloatArray, eps: float = 1e-12, rank_tol: float = 1e-10) -> Optional[FloatArray]:
    """
    Point minimising the sum of squared distances to N >= d hyperplanes.
    """
    h = _unit_normal_rows(hyperplanes, eps)
    if h is None:
        return None
    d = h.shape[1] - 1
    return solve_linear(h[:, :d], -h[:, d], rank_tol=rank_tol)


def signed_point_distances(point: FloatArray, hyperplanes: FloatArray) -> FloatArray:
    """Signed Euclidean distance from ``point`` to every hyperplane, shape (N,)."""
    d = hyperplanes.shape[1] - 1
    normals = hyperplanes[:, :d]
    norms = np.linalg.norm(normals, axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        return (normals @ point + hyperplanes[:, d]) / norms


def point_distances(point: FloatArray, hyperplanes: FloatArray) -> FloatArray:
    return np.abs(signed_point_distances(point, hyperplanes))


def homogeneous_point(point: FloatArray) -> FloatArray:
    """[p, 1] scaled to unit norm, the homogeneous representation of a point."""
    ph = np.append(point, 1.0)
    return ph / np.linalg.norm(ph)
