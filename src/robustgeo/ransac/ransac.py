"""
RANSAC: the candidate with the most samples under the threshold wins.
"""
from __future__ import annotations

from typing import Optional, TypeVar

import numpy as np

from .core import ConsensusEngine, Hypothesis
from .settings import RobustEstimatorMethod, check_threshold
from .types import FloatArray

M = TypeVar("M")


class RANSACEngine(ConsensusEngine[M]):
    method = RobustEstimatorMethod.RANSAC

    def __init__(self, *, threshold: float, **kwargs):
        super().__init__(**kwargs)
        self.threshold = check_threshold(threshold)

    def _evaluate(self, model: M, residuals: FloatArray, sample_size: int) -> Optional[Hypothesis[M]]:
        # Inliers are those with error < threshold
        inliers = residuals < self.threshold
        num_inliers = int(np.count_nonzero(inliers))
        if num_inliers == 0:
            return None

        # more inliers = lower score
        return Hypothesis(
            model=model,
            score=-float(num_inliers),
            inliers=inliers,
            residuals=residuals,
            threshold=self.threshold,
        )
