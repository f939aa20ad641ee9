"""
Adapter: makes symmetric-locus functions conform to the ModelFitter Protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..ransac.types import FloatArray, ModelFitter
from .homogeneous import as_homogeneous, frobenius_normalize, symmetric_from_params, symmetric_params
from .loci import (
    fit_dual_locus, fit_locus_from_points, locus_residuals, locus_sample_size, signed_locus_values,
)


@dataclass(frozen=True)
class LocusFitter(ModelFitter[FloatArray]):
    """
    dimension=2: Conic from points, or DualConic from lines when dual=True.
    dimension=3: Quadric from points, or DualQuadric from planes when dual=True.
    """
    dimension: int = 2
    dual: bool = False

    @property
    def matrix_size(self) -> int:
        return self.dimension + 1

    @property
    def sample_size(self) -> int:
        return locus_sample_size(self.matrix_size)

    def _vectors(self, samples: FloatArray) -> FloatArray:
        return samples if self.dual else as_homogeneous(samples)

    def fit_minimal(self, samples: FloatArray) -> Optional[FloatArray]:
        if self.dual:
            return fit_dual_locus(samples)
        return fit_locus_from_points(samples)

    def residuals(self, model: FloatArray, samples: FloatArray) -> FloatArray:
        return locus_residuals(model, self._vectors(samples))

    def refine_residuals(self, model: FloatArray, samples: FloatArray) -> FloatArray:
        return signed_locus_values(model, self._vectors(samples))

    def to_params(self, model: FloatArray) -> FloatArray:
        return symmetric_params(model)

    def from_params(self, params: FloatArray) -> Optional[FloatArray]:
        return frobenius_normalize(symmetric_from_params(np.asarray(params, dtype=np.float64), self.matrix_size))

    def covariance_params(self, model: FloatArray) -> FloatArray:
        return symmetric_params(model / np.linalg.norm(model))
