"""
Euclidean (rotation + translation) and metric (similarity: scale + rotation
+ translation) transforms between point sets, in 2D and 3D.

Closed form (Umeyama 1991): with centred point sets X0, X1 and
Sigma = X1^T X0 / N = U S V^T,

    R = U diag(1, ..., 1, det(U V^T)) V^T
    s = trace(S D) / var(X0)            (metric only, else 1)
    t = mean(x') - s R mean(x)

Minimal sizes: 3 points in 2D and 4 in 3D; the "weak" minimums (2 and 3)
are already enough for the closed form when the points are not coincident
(2D) / collinear (3D).

Refinement parameterisations:
- 2D: [theta, (scale), tx, ty]
- 3D: [(scale), rotation vector (cv2.Rodrigues), tx, ty, tz]
Covariance is reported with the rotation as a unit quaternion [w, x, y, z].
"""

from __future__ import annotations

from typing import Optional

import cv2
import numpy as np

from ..ransac.types import FloatArray

MIN_SIZE_2D = 3
WEAK_MIN_SIZE_2D = 2
MIN_SIZE_3D = 4
WEAK_MIN_SIZE_3D = 3


def fit_similarity(
        pts0: FloatArray,
        pts1: FloatArray,
        *,
        with_scale: bool,
        rank_tol: float = 1e-10,
) -> Optional[FloatArray]:
    """
    Least-squares euclidean (with_scale=False) or metric transform x' = s R x + t.

    Returns (d+1)x(d+1) matrix, or None when the input points are degenerate.
    """
    if pts0.shape != pts1.shape:
        raise ValueError(f"pts0 and pts1 must have same shape, got {pts0.shape} vs {pts1.shape}")
    n, d = pts0.shape
    if n < d:
        return None

    mu0 = pts0.mean(axis=0)
    mu1 = pts1.mean(axis=0)
    X0 = pts0 - mu0
    X1 = pts1 - mu1

    # coincident (2D) / collinear (3D) inputs leave the rotation undetermined
    sv0 = np.linalg.svd(X0, compute_uv=False)
    if sv0[0] <= 0.0 or sv0[d - 2] / sv0[0] < rank_tol:
        return None

    var0 = float(np.sum(X0 * X0) / n)
    sigma = X1.T @ X0 / n
    try:
        U, S, Vt = np.linalg.svd(sigma)
    except np.linalg.LinAlgError:
        return None

    D = np.eye(d)
    if np.linalg.det(U) * np.linalg.det(Vt) < 0.0:
        D[-1, -1] = -1.0
    R = U @ D @ Vt

    scale = float(np.trace(np.diag(S) @ D) / var0) if with_scale else 1.0
    if not np.isfinite(scale) or scale <= 0.0:
        return None

    T = np.eye(d + 1, dtype=np.float64)
    T[:d, :d] = scale * R
    T[:d, d] = mu1 - scale * R @ mu0
    return T


def decompose_similarity(T: FloatArray) -> tuple[float, FloatArray, FloatArray]:
    """Split a euclidean / metric matrix into (scale, rotation, translation)."""
    d = T.shape[0] - 1
    A = T[:d, :d]
    scale = float(abs(np.linalg.det(A)) ** (1.0 / d))
    return scale, A / scale, T[:d, d].copy()


def compose_similarity(scale: float, R: FloatArray, t: FloatArray) -> FloatArray:
    d = R.shape[0]
    T = np.eye(d + 1, dtype=np.float64)
    T[:d, :d] = scale * R
    T[:d, d] = t
    return T


# ---------- Rotation parameterisations ----------
def rotation_2d(theta: float) -> FloatArray:
    c, s = np.cos(theta), np.sin(theta)
    return np.array([[c, -s], [s, c]], dtype=np.float64)


def rotation_angle_2d(R: FloatArray) -> float:
    return float(np.arctan2(R[1, 0], R[0, 0]))


def rotation_to_rvec(R: FloatArray) -> FloatArray:
    rvec, _ = cv2.Rodrigues(np.ascontiguousarray(R, dtype=np.float64))
    return rvec.ravel()


def rvec_to_rotation(rvec: FloatArray) -> FloatArray:
    R, _ = cv2.Rodrigues(np.asarray(rvec, dtype=np.float64).reshape(3, 1))
    return R


def rvec_to_quaternion(rvec: FloatArray) -> FloatArray:
    """Unit quaternion [w, x, y, z] of a rotation vector."""
    rvec = np.asarray(rvec, dtype=np.float64)
    angle = float(np.linalg.norm(rvec))
    if angle < 1e-12:
        # first-order expansion around identity
        return np.concatenate([[1.0], 0.5 * rvec])
    half = 0.5 * angle
    return np.concatenate([[np.cos(half)], np.sin(half) * rvec / angle])
