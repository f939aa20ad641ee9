"""
Applying homogeneous transforms and measuring correspondence errors.

A (d+1)x(d+1) matrix T maps
- points:       [x', 1]^T ~ T @ [x, 1]^T
- hyperplanes:  h' ~ T^{-T} @ h      (lines in 2D, planes in 3D)

Errors:
- point correspondences: transfer distance || T(x) - x' ||
- hyperplane correspondences: 1 - |<h'_n, T(h)_n>| on unit-norm vectors,
  0 when the transformed hyperplane coincides with the observed one.
"""

from __future__ import annotations

import numpy as np

from ..ransac.types import FloatArray
from .homogeneous import as_homogeneous, from_homogeneous, normalize_rows, sign_aligned


def is_invertible(T: FloatArray, rcond: float = 1e-12) -> bool:
    if not np.isfinite(T).all():
        return False
    s = np.linalg.svd(T, compute_uv=False)
    return bool(s[0] > 0.0 and s[-1] / s[0] > rcond)


# ---------- Apply transform ----------
def apply_transform(T: FloatArray, pts: FloatArray) -> FloatArray:
    """
    Apply a (d+1)x(d+1) transform to (N,d) points, returning (N,d) points.

    Divides by w, which is always 1 for affine / metric transforms.
    """
    d = pts.shape[1]
    if T.shape != (d + 1, d + 1):
        raise ValueError(f"Expected T shape {(d + 1, d + 1)}, got {T.shape}")
    # Each point is a row, so multiply by T^T
    return from_homogeneous(as_homogeneous(pts) @ T.T)


def transform_hyperplanes(T: FloatArray, hyperplanes: FloatArray) -> FloatArray:
    """
    h' = T^{-T} h for every row; all-nan when T is singular.
    """
    try:
        T_inv = np.linalg.inv(T)
    except np.linalg.LinAlgError:
        return np.full(hyperplanes.shape, np.nan)
    # row form: h'^T = h^T T^{-1}
    return hyperplanes @ T_inv


# ---------- Residuals ----------
def signed_transfer_errors(T: FloatArray, pts0: FloatArray, pts1: FloatArray) -> FloatArray:
    """Stacked coordinate differences T(x) - x', shape (N*d,)."""
    return (apply_transform(T, pts0) - pts1).ravel()


def transfer_errors(T: FloatArray, pts0: FloatArray, pts1: FloatArray) -> FloatArray:
    """
    Per-correspondence L2 residuals:

        e_i = || T(pts0[i]) - pts1[i] ||_2

    Returns shape (N,)
    """
    if pts0.shape != pts1.shape:
        raise ValueError(f"pts0 and pts1 must have same shape, got {pts0.shape} vs {pts1.shape}")
    return np.linalg.norm(apply_transform(T, pts0) - pts1, axis=1)


def signed_alignment_errors(T: FloatArray, h0: FloatArray, h1: FloatArray) -> FloatArray:
    """Stacked differences of unit hyperplanes, sign-matched, shape (N*(d+1),)."""
    observed = normalize_rows(h1)
    predicted = sign_aligned(observed, normalize_rows(transform_hyperplanes(T, h0)))
    return (predicted - observed).ravel()


def alignment_errors(T: FloatArray, h0: FloatArray, h1: FloatArray) -> FloatArray:
    if h0.shape != h1.shape:
        raise ValueError(f"h0 and h1 must have same shape, got {h0.shape} vs {h1.shape}")
    predicted = normalize_rows(transform_hyperplanes(T, h0))
    dots = np.abs(np.sum(predicted * normalize_rows(h1), axis=1))
    return np.maximum(1.0 - dots, 0.0)
