"""
LMedS (Least Median of Squares).

No inlier threshold is needed up front: the candidate minimising the median
of squared residuals wins. Inliers are then separated with a threshold
estimated from that median (Rousseeuw & Leroy):

    sigma     = 1.4826 * (1 + 5 / (N - m)) * sqrt(median(r^2))
    threshold = inlier_factor * sigma

Every candidate's estimated threshold covers at least half of the samples,
so the iteration bound takes the inlier ratio at the breakdown point (0.5)
instead of the ratio under that threshold.

The loop stops early once the champion's median residual drops below
stop_threshold; the same value is the floor of the estimated threshold, so
exact data does not end up with an empty inlier set.
"""
from __future__ import annotations

from typing import Optional, TypeVar

import numpy as np

from .core import ConsensusEngine, Hypothesis
from .settings import (
    DEFAULT_INLIER_FACTOR, LMEDS_BREAKDOWN_RATIO, LMEDS_ROBUST_FACTOR, MIN_STOP_THRESHOLD,
    RobustEstimatorMethod, check_threshold,
)
from .types import FloatArray

M = TypeVar("M")


def estimate_lmeds_threshold(
        median_sq_residual: float,
        *,
        num_samples: int,
        sample_size: int,
        inlier_factor: float = DEFAULT_INLIER_FACTOR,
) -> float:
    """Robust inlier threshold from the median of squared residuals."""
    dof = max(num_samples - sample_size, 1)
    sigma = LMEDS_ROBUST_FACTOR * (1.0 + 5.0 / dof) * np.sqrt(max(median_sq_residual, 0.0))
    return float(inlier_factor * sigma)


class LMedSEngine(ConsensusEngine[M]):
    method = RobustEstimatorMethod.LMEDS
    max_bound_inlier_ratio = LMEDS_BREAKDOWN_RATIO

    def __init__(self, *, stop_threshold: float, inlier_factor: float = DEFAULT_INLIER_FACTOR, **kwargs):
        super().__init__(**kwargs)
        self.stop_threshold = check_threshold(stop_threshold, name="stop_threshold", minimum=MIN_STOP_THRESHOLD)
        self.inlier_factor = check_threshold(inlier_factor, name="inlier_factor")

    def _evaluate(self, model: M, residuals: FloatArray, sample_size: int) -> Optional[Hypothesis[M]]:
        median = float(np.median(residuals * residuals))
        threshold = max(
            estimate_lmeds_threshold(
                median,
                num_samples=residuals.shape[0],
                sample_size=sample_size,
                inlier_factor=self.inlier_factor,
            ),
            self.stop_threshold,
        )
        return Hypothesis(
            model=model,
            score=median,
            inliers=residuals <= threshold,
            residuals=residuals,
            threshold=threshold,
            estimated_threshold=threshold,
        )

    def _should_stop(self, best: Hypothesis[M]) -> bool:
        return float(np.sqrt(best.score)) < self.stop_threshold
