"""
Adapter: makes point-from-hyperplanes functions conform to the ModelFitter Protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..ransac.types import FloatArray, ModelFitter
from .homogeneous import CoordinatesType
from .points import fit_point_minimal, homogeneous_point, point_distances, signed_point_distances


@dataclass(frozen=True)
class PointFitter(ModelFitter[FloatArray]):
    """
    dimension=2 fits a Point2D from lines, dimension=3 a Point3D from planes.
    ``coordinates`` selects the representation covariance is reported in.
    """
    dimension: int = 2
    coordinates: CoordinatesType = CoordinatesType.INHOMOGENEOUS

    @property
    def sample_size(self) -> int:
        return self.dimension

    def fit_minimal(self, hyperplanes: FloatArray) -> Optional[FloatArray]:
        return fit_point_minimal(hyperplanes)

    def residuals(self, model: FloatArray, hyperplanes: FloatArray) -> FloatArray:
        return point_distances(model, hyperplanes)

    def refine_residuals(self, model: FloatArray, hyperplanes: FloatArray) -> FloatArray:
        return signed_point_distances(model, hyperplanes)

    def to_params(self, model: FloatArray) -> FloatArray:
        return np.asarray(model, dtype=np.float64).copy()

    def from_params(self, params: FloatArray) -> Optional[FloatArray]:
        return np.asarray(params, dtype=np.float64).copy()

    def covariance_params(self, model: FloatArray) -> FloatArray:
        if self.coordinates is CoordinatesType.HOMOGENEOUS:
            return homogeneous_point(model)
        return self.to_params(model)
