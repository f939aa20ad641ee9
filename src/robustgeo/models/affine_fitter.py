"""
Adapter: makes affine functions conform to the ModelFitter Protocol.

This keeps the consensus engines generic and reusable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..ransac.types import FloatArray, ModelFitter
from .affine import fit_affine_hyperplanes, fit_affine_points, matrix_to_theta, theta_to_matrix
from .transforms import alignment_errors, signed_alignment_errors, signed_transfer_errors, transfer_errors


@dataclass(frozen=True)
class AffinePointFitter(ModelFitter[FloatArray]):
    dimension: int = 2

    @property
    def sample_size(self) -> int:
        return self.dimension + 1

    def fit_minimal(self, pts0: FloatArray, pts1: FloatArray) -> Optional[FloatArray]:
        return fit_affine_points(pts0, pts1)

    def residuals(self, model: FloatArray, pts0: FloatArray, pts1: FloatArray) -> FloatArray:
        return transfer_errors(model, pts0, pts1)

    def refine_residuals(self, model: FloatArray, pts0: FloatArray, pts1: FloatArray) -> FloatArray:
        return signed_transfer_errors(model, pts0, pts1)

    def to_params(self, model: FloatArray) -> FloatArray:
        return matrix_to_theta(model)

    def from_params(self, params: FloatArray) -> Optional[FloatArray]:
        return theta_to_matrix(params, self.dimension)

    def covariance_params(self, model: FloatArray) -> FloatArray:
        return matrix_to_theta(model)


@dataclass(frozen=True)
class AffineHyperplaneFitter(AffinePointFitter):
    """Line (2D) or plane (3D) correspondences."""

    def fit_minimal(self, h0: FloatArray, h1: FloatArray) -> Optional[FloatArray]:
        return fit_affine_hyperplanes(h0, h1)

    def residuals(self, model: FloatArray, h0: FloatArray, h1: FloatArray) -> FloatArray:
        return alignment_errors(model, h0, h1)

    def refine_residuals(self, model: FloatArray, h0: FloatArray, h1: FloatArray) -> FloatArray:
        return signed_alignment_errors(model, h0, h1)
