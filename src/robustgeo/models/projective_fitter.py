"""
Adapter: makes projective functions conform to the ModelFitter Protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..ransac.types import FloatArray, ModelFitter
from .homogeneous import frobenius_normalize
from .projective import fit_projective_hyperplanes, fit_projective_points, projective_sample_size
from .transforms import alignment_errors, signed_alignment_errors, signed_transfer_errors, transfer_errors


@dataclass(frozen=True)
class ProjectivePointFitter(ModelFitter[FloatArray]):
    dimension: int = 2

    @property
    def sample_size(self) -> int:
        return projective_sample_size(self.dimension)

    def fit_minimal(self, pts0: FloatArray, pts1: FloatArray) -> Optional[FloatArray]:
        return fit_projective_points(pts0, pts1)

    def residuals(self, model: FloatArray, pts0: FloatArray, pts1: FloatArray) -> FloatArray:
        return transfer_errors(model, pts0, pts1)

    def refine_residuals(self, model: FloatArray, pts0: FloatArray, pts1: FloatArray) -> FloatArray:
        return signed_transfer_errors(model, pts0, pts1)

    def to_params(self, model: FloatArray) -> FloatArray:
        return (model / np.linalg.norm(model)).ravel()

    def from_params(self, params: FloatArray) -> Optional[FloatArray]:
        k = self.dimension + 1
        return frobenius_normalize(np.asarray(params, dtype=np.float64).reshape(k, k))

    def covariance_params(self, model: FloatArray) -> FloatArray:
        # homogeneous entries of the unit-norm matrix
        return self.to_params(model)


@dataclass(frozen=True)
class ProjectiveHyperplaneFitter(ProjectivePointFitter):
    """Line (2D) or plane (3D) correspondences."""

    def fit_minimal(self, h0: FloatArray, h1: FloatArray) -> Optional[FloatArray]:
        return fit_projective_hyperplanes(h0, h1)

    def residuals(self, model: FloatArray, h0: FloatArray, h1: FloatArray) -> FloatArray:
        return alignment_errors(model, h0, h1)

    def refine_residuals(self, model: FloatArray, h0: FloatArray, h1: FloatArray) -> FloatArray:
        return signed_alignment_errors(model, h0, h1)
