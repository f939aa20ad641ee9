"""
PROSAC (PROgressive SAmple Consensus, Chum & Matas 2005).

Sampling follows ProsacSampler. Scoring is RANSAC's inlier count, but the
iteration bound uses the paper's termination criterion on the ranked list:

- non-randomness: the I_n inliers found among the top-n ranked samples must
  be unlikely to come from a wrong model,

      I_n >= I_min(n) = m + binom.isf(psi, n - m, beta) + 1

- maximality: among the n that pass (n = N always qualifies), pick n* with
  the highest inlier ratio and require the usual RANSAC confidence on it.
"""
from __future__ import annotations

from typing import Optional, TypeVar

import numpy as np
from scipy.stats import binom

from .core import Hypothesis, required_iterations
from .ransac import RANSACEngine
from .samplers import ProsacSampler
from .settings import PROSAC_BETA, PROSAC_PSI, RobustEstimatorMethod
from .types import FloatArray, Mask

M = TypeVar("M")


def minimum_inliers(
        num_samples: int,
        sample_size: int,
        *,
        psi: float = PROSAC_PSI,
        beta: float = PROSAC_BETA,
) -> FloatArray:
    """
    I_min(n) for n = 0..N. Entries for n <= m are +inf: a prefix no larger
    than the minimal sample says nothing about the model.
    """
    n = np.arange(num_samples + 1)
    out = np.full(num_samples + 1, np.inf, dtype=np.float64)
    valid = n > sample_size
    out[valid] = sample_size + binom.isf(psi, n[valid] - sample_size, beta) + 1
    return out


def prosac_iterations(
        inliers_ranked: Mask,
        *,
        sample_size: int,
        confidence: float,
        max_iterations: int,
        min_inliers: FloatArray,
        max_inlier_ratio: float = 1.0,
) -> int:
    """
    Iterations needed once the champion has ``inliers_ranked`` (mask in
    quality order). Prefix ratios are capped at ``max_inlier_ratio``.
    """
    counts = np.cumsum(inliers_ranked.astype(np.int64))    # counts[n-1] = I_n
    sizes = np.arange(1, counts.shape[0] + 1)

    non_random = counts >= min_inliers[1:]
    non_random[-1] = True
    ratios = np.where(non_random, np.minimum(counts / sizes, max_inlier_ratio), -1.0)

    n_star = int(np.argmax(ratios))
    return required_iterations(
        confidence=confidence,
        inlier_ratio=float(ratios[n_star]),
        sample_size=sample_size,
        max_iterations=max_iterations,
    )


class ProgressiveSamplingMixin:
    """Swaps uniform sampling and the plain bound for PROSAC's."""

    requires_quality_scores = True

    def _make_sampler(self, num_samples: int, sample_size: int, quality_scores: Optional[FloatArray]):
        self._min_inliers = minimum_inliers(num_samples, sample_size)
        return ProsacSampler(quality_scores, sample_size, self.max_iterations)

    def _iterations_needed(self, best: Hypothesis, sampler: ProsacSampler, sample_size: int) -> int:
        return prosac_iterations(
            best.inliers[sampler.order],
            sample_size=sample_size,
            confidence=self.confidence,
            max_iterations=self.max_iterations,
            min_inliers=self._min_inliers,
            max_inlier_ratio=self.max_bound_inlier_ratio,
        )


class PROSACEngine(ProgressiveSamplingMixin, RANSACEngine[M]):
    method = RobustEstimatorMethod.PROSAC
