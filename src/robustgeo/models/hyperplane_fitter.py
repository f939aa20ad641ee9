"""
Adapter: makes hyperplane functions conform to the ModelFitter Protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..ransac.types import FloatArray, ModelFitter
from .hyperplanes import (
    fit_hyperplane_minimal, hyperplane_distances, normalize_hyperplane, signed_hyperplane_distances,
)


@dataclass(frozen=True)
class HyperplaneFitter(ModelFitter[FloatArray]):
    """dimension=2 fits a Line2D, dimension=3 a Plane."""
    dimension: int = 2

    @property
    def sample_size(self) -> int:
        return self.dimension

    def fit_minimal(self, pts: FloatArray) -> Optional[FloatArray]:
        return fit_hyperplane_minimal(pts)

    def residuals(self, model: FloatArray, pts: FloatArray) -> FloatArray:
        return hyperplane_distances(model, pts)

    def refine_residuals(self, model: FloatArray, pts: FloatArray) -> FloatArray:
        return signed_hyperplane_distances(model, pts)

    def to_params(self, model: FloatArray) -> FloatArray:
        return np.asarray(model, dtype=np.float64).copy()

    def from_params(self, params: FloatArray) -> Optional[FloatArray]:
        return normalize_hyperplane(params)

    def covariance_params(self, model: FloatArray) -> FloatArray:
        return normalize_hyperplane(model)
