"""
Circle [cx, cy, r] and Sphere [cx, cy, cz, r] fitted to points.

The algebraic form

    |p|^2 + D . p + F = 0

is linear in (D, F), so d + 1 points in general position fix the model:
centre = -D / 2, r^2 = |centre|^2 - F.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..ransac.types import FloatArray
from .homogeneous import as_homogeneous, solve_linear


def fit_sphere_algebraic(pts: FloatArray, rank_tol: float = 1e-10) -> Optional[FloatArray]:
    """
    Fit from N >= d + 1 points.

    Returns:
      [centre..., radius], or None if the points are collinear / coplanar.
    """
    d = pts.shape[1]
    if pts.shape[0] < d + 1:
        return None

    # Work relative to the centroid for conditioning
    centroid = pts.mean(axis=0)
    local = pts - centroid

    A = as_homogeneous(local)
    b = -np.sum(local * local, axis=1)
    sol = solve_linear(A, b, rank_tol=rank_tol)
    if sol is None:
        return None

    centre = -0.5 * sol[:d]
    r2 = float(centre @ centre - sol[d])
    if not np.isfinite(r2) or r2 <= 0.0:
        return None
    return np.append(centre + centroid, np.sqrt(r2))


def signed_sphere_distances(model: FloatArray, pts: FloatArray) -> FloatArray:
    """Distance to the centre minus radius: < 0 inside, > 0 outside."""
    d = pts.shape[1]
    return np.linalg.norm(pts - model[:d], axis=1) - model[d]


def sphere_distances(model: FloatArray, pts: FloatArray) -> FloatArray:
    return np.abs(signed_sphere_distances(model, pts))
