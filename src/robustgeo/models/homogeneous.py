"""
Homogeneous-coordinate helpers shared by every model family.

- conversions between inhomogeneous points and homogeneous rows
- Hartley normalisation (centroid at origin, mean distance sqrt(d))
- null-vector solve with a rank check, used by every DLT-style solver
- design rows for symmetric forms (conics, quadrics and their duals)
- "parallel constraint" rows: target t must be parallel to prediction D @ h
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

import numpy as np

from ..ransac.types import FloatArray


class CoordinatesType(Enum):
    INHOMOGENEOUS = "inhomogeneous"
    HOMOGENEOUS = "homogeneous"


# ---------- Conversions ----------
def as_homogeneous(pts: FloatArray) -> FloatArray:
    """
    Convert (N,d) points -> (N,d+1) homogeneous points: [x, ..., 1].
    """
    if pts.ndim != 2:
        raise ValueError(f"Expected points shape (N, d) but got {pts.shape}")
    ones = np.ones((pts.shape[0], 1), dtype=np.float64)
    return np.hstack([pts.astype(np.float64), ones])


def from_homogeneous(pts_h: FloatArray) -> FloatArray:
    """(N,d+1) -> (N,d). Points at infinity come back as inf/nan."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return pts_h[:, :-1] / pts_h[:, -1:]


def normalize_rows(v: FloatArray) -> FloatArray:
    """Scale every row to unit Euclidean norm (zero rows stay zero)."""
    norms = np.linalg.norm(v, axis=1, keepdims=True)
    return v / np.where(norms > 0.0, norms, 1.0)


def frobenius_normalize(mat: FloatArray, eps: float = 1e-300) -> Optional[FloatArray]:
    norm = float(np.linalg.norm(mat))
    if not np.isfinite(norm) or norm <= eps:
        return None
    return mat / norm


# ---------- Hartley normalisation ----------
def normalizing_transform(pts: FloatArray, eps: float = 1e-12) -> Optional[FloatArray]:
    """
    Similarity T with T @ [p, 1] centred at the origin and mean distance sqrt(d).
    Returns None when all points coincide.
    """
    d = pts.shape[1]
    centroid = pts.mean(axis=0)
    mean_dist = float(np.mean(np.linalg.norm(pts - centroid, axis=1)))
    if mean_dist < eps:
        return None

    scale = np.sqrt(d) / mean_dist
    T = np.eye(d + 1, dtype=np.float64)
    T[:d, :d] *= scale
    T[:d, d] = -scale * centroid
    return T


# ---------- Linear solves ----------
def null_vector(A: FloatArray, rank_tol: float = 1e-10) -> Optional[FloatArray]:
    """
    Unit vector h minimising ||A h||, or None if A does not have a
    one-dimensional (numerical) null space.
    """
    p = A.shape[1]
    if A.shape[0] < p - 1 or not np.isfinite(A).all():
        return None
    try:
        _, s, vt = np.linalg.svd(A, full_matrices=True)
    except np.linalg.LinAlgError:
        return None

    # rank must be exactly p - 1
    if s[0] <= 0.0 or s[p - 2] / s[0] < rank_tol:
        return None
    return vt[-1]


def solve_linear(A: FloatArray, b: FloatArray, rank_tol: float = 1e-10) -> Optional[FloatArray]:
    """
    Least-squares solution of A x = b, None unless A has full column rank.
    """
    if A.shape[0] < A.shape[1] or not (np.isfinite(A).all() and np.isfinite(b).all()):
        return None
    try:
        x, _, rank, sv = np.linalg.lstsq(A, b, rcond=None)
    except np.linalg.LinAlgError:
        return None
    if rank < A.shape[1] or sv[0] <= 0.0 or sv[-1] / sv[0] < rank_tol:
        return None
    return x


# ---------- Design rows ----------
def symmetric_design(v: FloatArray) -> FloatArray:
    """
    Rows such that row @ q == v^T Q v, q being the upper triangle of the
    symmetric matrix Q in np.triu_indices order.
    """
    k = v.shape[1]
    iu, ju = np.triu_indices(k)
    weights = np.where(iu == ju, 1.0, 2.0)
    return v[:, iu] * v[:, ju] * weights


def symmetric_from_params(q: FloatArray, k: int) -> FloatArray:
    Q = np.zeros((k, k), dtype=np.float64)
    iu, ju = np.triu_indices(k)
    Q[iu, ju] = q
    Q[ju, iu] = q
    return Q


def symmetric_params(Q: FloatArray) -> FloatArray:
    return Q[np.triu_indices(Q.shape[0])].astype(np.float64)


def parallel_constraints(
        targets: FloatArray,
        designs: FloatArray,
        offsets: Optional[FloatArray] = None,
) -> tuple[FloatArray, FloatArray]:
    """
    Linear constraints forcing each target t_n to be parallel to D_n @ h + c_n.

    For every pair of components i < j:

        t[j] * (D[i] @ h + c[i]) - t[i] * (D[j] @ h + c[j]) = 0

    targets: (N, k), designs: (N, k, p), offsets: (N, k) or None.
    Returns (A, b) with A @ h = b (b is all zeros when offsets is None).
    """
    k = targets.shape[1]
    iu, ju = np.triu_indices(k, 1)

    A = targets[:, ju, None] * designs[:, iu, :] - targets[:, iu, None] * designs[:, ju, :]
    A = A.reshape(-1, designs.shape[2])

    if offsets is None:
        return A, np.zeros(A.shape[0], dtype=np.float64)

    b = targets[:, iu] * offsets[:, ju] - targets[:, ju] * offsets[:, iu]
    return A, b.reshape(-1)


def sign_aligned(a: FloatArray, b: FloatArray) -> FloatArray:
    """Flip rows of b so that each has a non-negative dot product with a."""
    s = np.sign(np.sum(a * b, axis=1, keepdims=True))
    return b * np.where(s == 0.0, 1.0, s)
