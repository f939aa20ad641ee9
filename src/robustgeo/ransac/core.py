"""
Generic consensus loop (model-agnostic).

Consensus overview:
- Draw a *minimal* subset of samples (uniformly or progressively)
- Fit a candidate model from that subset, skip it if degenerate
- Score all samples by computing residuals against the candidate
- Keep the candidate with the best variant-specific score
  (strict improvement only, so the first model reaching a score wins)
- Shrink the iteration bound from the champion's inlier ratio

Concrete variants (ransac.py, msac.py, lmeds.py, prosac.py, promeds.py)
only decide how to sample, how to score and when to stop early.

Uses the ModelFitter Protocol from types.py.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ClassVar, Generic, Optional, TypeVar, Union
import logging
import os

import numpy as np

from .errors import LockedError, NotReadyError, RobustEstimatorError
from .samplers import UniformSampler
from .settings import (
    DEFAULT_CONFIDENCE, DEFAULT_MAX_ITERATIONS, DEFAULT_PROGRESS_DELTA,
    RobustEstimatorMethod, check_confidence, check_max_iterations, check_progress_delta,
)
from .types import (
    FloatArray, IntArray, Mask, ModelFitter, ConsensusResult, InliersData, as_sample_arrays,
)

M = TypeVar("M")
logger = logging.getLogger(__name__)
_CONSENSUS_DEBUG = os.environ.get("ROBUSTGEO_CONSENSUS_DEBUG", "0") == "1"

IterationCallback = Callable[[int], None]
ProgressCallback = Callable[[float], None]
RandomSource = Union[None, int, np.random.Generator]


def required_iterations(
        *,
        confidence: float,
        inlier_ratio: float,
        sample_size: int,
        max_iterations: Optional[int] = None,
) -> int:
    """
    Number of iterations needed so that the probability of having drawn at
    least ONE all-inlier minimal sample is >= confidence.

    inlier ratio w, minimal sample size m:
    - P(all-inliers) = w^m
    - P(not-all-inlier-for-k-times) = (1 - w^m)^k
    - 1 - (1 - w^m)^k >= p  =>  k >= log(1 - p) / log(1 - w^m)

    Edge cases:
     - w == 0  -> impossible, "infinite-ish" (clipped to max_iterations if given)
     - w == 1  -> 1 iteration is enough
    """
    # Clamp inputs to avoid log(0)
    p = float(np.clip(confidence, 1e-12, 1.0 - 1e-12))
    w = float(np.clip(inlier_ratio, 0.0, 1.0))
    m = int(sample_size)

    if m <= 0:
        raise ValueError("sample_size must be >= 1")

    if w >= 1.0:
        k = 1
    elif w <= 0.0:
        k = int(1e9)
    else:
        w_to_m = float(np.clip(w ** m, 1e-12, 1.0 - 1e-12))
        k = max(1, int(np.ceil(np.log(1.0 - p) / np.log(1.0 - w_to_m))))

    if max_iterations is not None:
        k = min(k, int(max_iterations))
    return k


# ---------- Candidate bookkeeping ----------
@dataclass(frozen=True)
class Hypothesis(Generic[M]):
    model: M
    score: float                # lower = better
    inliers: Mask
    residuals: FloatArray
    threshold: float
    estimated_threshold: Optional[float] = None

    @property
    def num_inliers(self) -> int:
        return int(np.count_nonzero(self.inliers))


class ConsensusEngine(Generic[M]):
    """
    Base consensus engine. Subclasses override:
    - _evaluate: score one candidate from its residuals
    - _make_sampler / _iterations_needed / _should_stop when needed
    """

    method: ClassVar[RobustEstimatorMethod]
    requires_quality_scores: ClassVar[bool] = False
    # upper bound on the inlier ratio fed to the iteration bound
    max_bound_inlier_ratio: ClassVar[float] = 1.0

    def __init__(
            self,
            *,
            confidence: float = DEFAULT_CONFIDENCE,
            max_iterations: int = DEFAULT_MAX_ITERATIONS,
            progress_delta: float = DEFAULT_PROGRESS_DELTA,
            rng: RandomSource = None,
            on_iteration: Optional[IterationCallback] = None,
            on_progress: Optional[ProgressCallback] = None,
    ):
        self.confidence = check_confidence(confidence)
        self.max_iterations = check_max_iterations(max_iterations)
        self.progress_delta = check_progress_delta(progress_delta)
        self.rng = rng
        self.on_iteration = on_iteration
        self.on_progress = on_progress
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    # ---------- Variant hooks ----------
    def _make_sampler(self, num_samples: int, sample_size: int, quality_scores: Optional[FloatArray]):
        return UniformSampler(num_samples, sample_size)

    def _evaluate(self, model: M, residuals: FloatArray, sample_size: int) -> Optional[Hypothesis[M]]:
        raise NotImplementedError

    def _iterations_needed(self, best: Hypothesis[M], sampler, sample_size: int) -> int:
        return required_iterations(
            confidence=self.confidence,
            inlier_ratio=min(best.num_inliers / float(best.inliers.shape[0]), self.max_bound_inlier_ratio),
            sample_size=sample_size,
            max_iterations=self.max_iterations,
        )

    def _should_stop(self, best: Hypothesis[M]) -> bool:
        return False

    # ---------- Main loop ----------
    def run(
            self,
            fitter: ModelFitter[M],
            samples: tuple,
            quality_scores: Optional[FloatArray] = None,
    ) -> ConsensusResult[M]:
        """
        Find the best model explaining ``samples``.

        Inputs:
        - fitter: minimal solver + residual function of the model family
        - samples: tuple of (N, k) arrays sharing N
        - quality_scores: (N,) array, required by PROSAC / PROMedS

        Raises:
        - LockedError if the engine is already running
        - NotReadyError if there are too few samples or missing scores
        - RobustEstimatorError if no candidate ever qualified
        """
        if self._running:
            raise LockedError("Consensus engine is already running")

        try:
            arrays = as_sample_arrays(tuple(samples))
        except ValueError as exc:
            raise NotReadyError(str(exc)) from exc

        n = arrays[0].shape[0]
        m = int(fitter.sample_size)
        if n < m:
            raise NotReadyError(f"Need at least {m} samples, got {n}")

        scores: Optional[FloatArray] = None
        if self.requires_quality_scores:
            if quality_scores is None:
                raise NotReadyError(f"{self.method.name} requires quality scores")
            scores = np.asarray(quality_scores, dtype=np.float64)
            if scores.shape != (n,):
                raise NotReadyError(f"Expected {n} quality scores, got shape {scores.shape}")

        self._running = True
        try:
            return self._run(fitter, arrays, scores)
        finally:
            self._running = False

    def _run(
            self,
            fitter: ModelFitter[M],
            arrays: tuple[FloatArray, ...],
            scores: Optional[FloatArray],
    ) -> ConsensusResult[M]:
        n = arrays[0].shape[0]
        m = int(fitter.sample_size)

        # RNG: reproducible sampling when seeded
        rng = np.random.default_rng(self.rng)
        sampler = self._make_sampler(n, m, scores)

        best: Optional[Hypothesis[M]] = None
        bound = self.max_iterations
        iteration = 0
        last_progress = 0.0

        while iteration < bound and iteration < self.max_iterations:
            sample_idx: IntArray = sampler.draw(rng)
            iteration += 1

            # None means degenerate sample: wasted iteration
            model = fitter.fit_minimal(*(a[sample_idx] for a in arrays))
            if model is not None:
                residuals = np.asarray(fitter.residuals(model, *arrays), dtype=np.float64)
                candidate = self._evaluate(model, residuals, m) if np.isfinite(residuals).all() else None

                if candidate is not None and (best is None or candidate.score < best.score):
                    best = candidate
                    needed = self._iterations_needed(best, sampler, m)
                    bound = min(bound, max(needed, iteration))
                    if _CONSENSUS_DEBUG:
                        logger.debug(
                            "[%s] better model at iteration %d: score=%.6g inliers=%d/%d bound=%d",
                            self.method.name, iteration, best.score, best.num_inliers, n, bound,
                        )

            if self.on_iteration is not None:
                self.on_iteration(iteration)

            progress = min(iteration / float(bound), 1.0)
            if self.on_progress is not None and progress - last_progress >= self.progress_delta:
                last_progress = progress
                self.on_progress(progress)

            if best is not None and self._should_stop(best):
                break

        if best is None:
            raise RobustEstimatorError(
                f"{self.method.name} found no valid model after {iteration} iterations"
            )

        logger.debug(
            "%s finished: %d iterations, %d/%d inliers", self.method.name, iteration, best.num_inliers, n
        )
        return ConsensusResult(
            model=best.model,
            inliers_data=InliersData(
                inliers=best.inliers,
                residuals=best.residuals,
                num_inliers=best.num_inliers,
                estimated_threshold=best.estimated_threshold,
            ),
            iterations=iteration,
            score=float(best.score),
            threshold=float(best.threshold),
        )
