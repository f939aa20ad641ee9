"""
Adapter: makes euclidean / metric functions conform to the ModelFitter Protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..ransac.types import FloatArray, ModelFitter
from .metric import (
    MIN_SIZE_2D, MIN_SIZE_3D, WEAK_MIN_SIZE_2D, WEAK_MIN_SIZE_3D,
    compose_similarity, decompose_similarity, fit_similarity,
    rotation_2d, rotation_angle_2d, rotation_to_rvec, rvec_to_quaternion, rvec_to_rotation,
)
from .transforms import signed_transfer_errors, transfer_errors


def metric_minimum_size(dimension: int, weak: bool = False) -> int:
    if dimension == 2:
        return WEAK_MIN_SIZE_2D if weak else MIN_SIZE_2D
    return WEAK_MIN_SIZE_3D if weak else MIN_SIZE_3D


@dataclass(frozen=True)
class MetricFitter(ModelFitter[FloatArray]):
    """
    with_scale=False: euclidean transform, True: metric (similarity) transform.
    weak_minimum_size draws the smaller sample the closed form can still solve.
    """
    dimension: int = 2
    with_scale: bool = False
    weak_minimum_size: bool = False

    @property
    def sample_size(self) -> int:
        return metric_minimum_size(self.dimension, self.weak_minimum_size)

    def fit_minimal(self, pts0: FloatArray, pts1: FloatArray) -> Optional[FloatArray]:
        return fit_similarity(pts0, pts1, with_scale=self.with_scale)

    def residuals(self, model: FloatArray, pts0: FloatArray, pts1: FloatArray) -> FloatArray:
        return transfer_errors(model, pts0, pts1)

    def refine_residuals(self, model: FloatArray, pts0: FloatArray, pts1: FloatArray) -> FloatArray:
        return signed_transfer_errors(model, pts0, pts1)

    # ---------- Parameterisation ----------
    def to_params(self, model: FloatArray) -> FloatArray:
        scale, R, t = decompose_similarity(model)
        head = [scale] if self.with_scale else []
        if self.dimension == 2:
            # 2D keeps the angle first: [theta, (scale), tx, ty]
            return np.concatenate([[rotation_angle_2d(R)], head, t])
        return np.concatenate([head, rotation_to_rvec(R), t])

    def from_params(self, params: FloatArray) -> Optional[FloatArray]:
        params = np.asarray(params, dtype=np.float64)
        if self.dimension == 2:
            theta, rest = params[0], params[1:]
            scale, t = (rest[0], rest[1:]) if self.with_scale else (1.0, rest)
            R = rotation_2d(theta)
        else:
            scale, rest = (params[0], params[1:]) if self.with_scale else (1.0, params)
            R = rvec_to_rotation(rest[:3])
            t = rest[3:]
        if not np.isfinite(scale) or scale <= 0.0:
            return None
        return compose_similarity(float(scale), R, t)

    def covariance_params(self, model: FloatArray) -> FloatArray:
        if self.dimension == 2:
            return self.to_params(model)
        scale, R, t = decompose_similarity(model)
        head = [scale] if self.with_scale else []
        return np.concatenate([head, rvec_to_quaternion(rotation_to_rvec(R)), t])
