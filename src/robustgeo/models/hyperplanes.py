"""
Hyperplane models fitted to points.

- Line2D [a, b, c] through 2D points       (minimal: 2 points)
- Plane [a, b, c, d] through 3D points     (minimal: 3 points)

Hyperplanes are kept with a unit normal, so n . p + c is directly the
signed point distance.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..ransac.types import FloatArray
from .homogeneous import as_homogeneous


def normalize_hyperplane(h: FloatArray, eps: float = 1e-12) -> Optional[FloatArray]:
    """Scale so the normal has unit length; None for a (near) zero normal."""
    h = np.asarray(h, dtype=np.float64)
    norm = float(np.linalg.norm(h[:-1]))
    if not np.isfinite(norm) or norm < eps:
        return None
    return h / norm


def fit_hyperplane_minimal(pts: FloatArray, rank_tol: float = 1e-10) -> Optional[FloatArray]:
    """
    Hyperplane through exactly d points in d dimensions.

    Returns None when points coincide (line) or are collinear (plane).
    """
    d = pts.shape[1]
    if pts.shape != (d, d):
        raise ValueError(f"fit_hyperplane_minimal expects ({d},{d}) input, got {pts.shape}")

    if d == 2:
        # cross product of the two homogeneous points
        ph = as_homogeneous(pts)
        return normalize_hyperplane(np.cross(ph[0], ph[1]))

    return fit_hyperplane_least_squares(pts, rank_tol=rank_tol)


def fit_hyperplane_least_squares(pts: FloatArray, rank_tol: float = 1e-10) -> Optional[FloatArray]:
    """
    Total least squares hyperplane: normal is the direction of least variance
    of the centred points.
    """
    if pts.shape[0] < pts.shape[1]:
        return None
    centroid = pts.mean(axis=0)
    centred = pts - centroid
    try:
        _, s, vt = np.linalg.svd(centred, full_matrices=False)
    except np.linalg.LinAlgError:
        return None

    d = pts.shape[1]
    # the points must span a (d-1)-dimensional subspace
    if s[0] <= 0.0 or s[d - 2] / s[0] < rank_tol:
        return None

    normal = vt[-1]
    return normalize_hyperplane(np.append(normal, -normal @ centroid))


def signed_hyperplane_distances(h: FloatArray, pts: FloatArray) -> FloatArray:
    d = pts.shape[1]
    return (pts @ h[:d] + h[d]) / np.linalg.norm(h[:d])


def hyperplane_distances(h: FloatArray, pts: FloatArray) -> FloatArray:
    return np.abs(signed_hyperplane_distances(h, pts))
