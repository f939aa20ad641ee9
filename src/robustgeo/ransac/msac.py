"""
MSAC (M-estimator SAC): truncated residual cost.

Every sample pays its residual, capped at the threshold, so among models
with the same inlier count the tighter fit wins:

    score = sum_i min(r_i, threshold)      (lower = better)
"""
from __future__ import annotations

from typing import Optional, TypeVar

import numpy as np

from .core import ConsensusEngine, Hypothesis
from .settings import RobustEstimatorMethod, check_threshold
from .types import FloatArray

M = TypeVar("M")


class MSACEngine(ConsensusEngine[M]):
    method = RobustEstimatorMethod.MSAC

    def __init__(self, *, threshold: float, **kwargs):
        super().__init__(**kwargs)
        self.threshold = check_threshold(threshold)

    def _evaluate(self, model: M, residuals: FloatArray, sample_size: int) -> Optional[Hypothesis[M]]:
        capped = np.minimum(residuals, self.threshold)
        return Hypothesis(
            model=model,
            score=float(np.sum(capped)),
            inliers=residuals < self.threshold,
            residuals=residuals,
            threshold=self.threshold,
        )
