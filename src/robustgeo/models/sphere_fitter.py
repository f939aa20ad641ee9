"""
Adapter: makes circle / sphere functions conform to the ModelFitter Protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..ransac.types import FloatArray, ModelFitter
from .spheres import fit_sphere_algebraic, signed_sphere_distances, sphere_distances


@dataclass(frozen=True)
class SphereFitter(ModelFitter[FloatArray]):
    """dimension=2 fits a Circle, dimension=3 a Sphere."""
    dimension: int = 2

    @property
    def sample_size(self) -> int:
        return self.dimension + 1

    def fit_minimal(self, pts: FloatArray) -> Optional[FloatArray]:
        return fit_sphere_algebraic(pts)

    def residuals(self, model: FloatArray, pts: FloatArray) -> FloatArray:
        return sphere_distances(model, pts)

    def refine_residuals(self, model: FloatArray, pts: FloatArray) -> FloatArray:
        return signed_sphere_distances(model, pts)

    def to_params(self, model: FloatArray) -> FloatArray:
        return np.asarray(model, dtype=np.float64).copy()

    def from_params(self, params: FloatArray) -> Optional[FloatArray]:
        model = np.asarray(params, dtype=np.float64).copy()
        # keep the radius positive
        model[-1] = abs(model[-1])
        return model

    def covariance_params(self, model: FloatArray) -> FloatArray:
        return self.to_params(model)
