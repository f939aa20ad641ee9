"""
Public estimator facade shared by every model family.

A RobustEstimator owns:
- the caller's sample arrays (kept by reference, never copied)
- optional quality scores (only meaningful for PROSAC / PROMedS)
- an EstimatorConfig and an optional listener
- the results of the last estimate(): inliers data and covariance, cleared
  when a new estimate() starts

estimate() pipeline:
1) check not locked and ready, then lock
2) notify listener start
3) run the consensus engine of the configured method
4) optionally refine over the inliers (falls back to the consensus model)
5) notify listener end, unlock, return / write the model

Concrete families only declare their sample layout, defaults and fitter.
"""

from __future__ import annotations

from typing import Any, ClassVar, Generic, Optional, TypeVar
import logging

import numpy as np

from ..ransac.core import RandomSource
from ..ransac.errors import LockedError, NotReadyError, RefinementError
from ..ransac.factory import create_engine
from ..ransac.settings import (
    DEFAULT_ROBUST_METHOD, MIN_STOP_THRESHOLD, RobustEstimatorMethod,
    check_confidence, check_max_iterations, check_progress_delta, check_threshold,
)
from ..ransac.types import ConsensusResult, FloatArray, InliersData, ModelFitter, as_sample_arrays
from ..refine.refiner import Refiner
from .config import EstimatorConfig, FamilyDefaults
from .listener import RobustEstimatorListener

M = TypeVar("M")
logger = logging.getLogger(__name__)


class RobustEstimator(Generic[M]):
    defaults: ClassVar[FamilyDefaults]
    # columns of every sample array, e.g. (2,) for 2D points, (3, 3) for line pairs
    sample_widths: ClassVar[tuple[int, ...]]
    # shape of the estimated model array
    model_shape: ClassVar[tuple[int, ...]]

    def __init__(
            self,
            samples: Optional[tuple] = None,
            *,
            method: RobustEstimatorMethod = DEFAULT_ROBUST_METHOD,
            quality_scores: Optional[FloatArray] = None,
            listener: Optional[RobustEstimatorListener] = None,
            config: Optional[EstimatorConfig] = None,
            rng: RandomSource = None,
            **settings: Any,
    ):
        self._method = RobustEstimatorMethod(method)
        base = config if config is not None else EstimatorConfig.for_family(self.defaults)
        self._config = base.updated(**settings)
        self._listener = listener
        self._rng = rng

        self._locked = False
        self._samples: Optional[tuple] = None
        self._quality_scores: Optional[FloatArray] = None
        self._inliers_data: Optional[InliersData] = None
        self._covariance: Optional[FloatArray] = None

        if samples is not None:
            self._set_samples(samples)
        if quality_scores is not None:
            self.quality_scores = quality_scores

    # ---------- Family hooks ----------
    def _make_fitter(self) -> ModelFitter[M]:
        raise NotImplementedError

    @property
    def minimum_size(self) -> int:
        return self.defaults.minimum_size

    # ---------- Lock ----------
    @property
    def is_locked(self) -> bool:
        return self._locked

    def _check_unlocked(self) -> None:
        if self._locked:
            raise LockedError(f"{type(self).__name__} is locked while estimating")

    # ---------- Samples ----------
    def _validate_samples(self, samples: tuple) -> None:
        if len(samples) != len(self.sample_widths):
            raise ValueError(f"Expected {len(self.sample_widths)} sample arrays, got {len(samples)}")

        lengths = []
        for s, width in zip(samples, self.sample_widths):
            if s is None:
                raise ValueError("Sample arrays must not be None")
            a = np.asarray(s, dtype=np.float64)
            if a.ndim != 2 or a.shape[1] != width:
                raise ValueError(f"Expected samples shape (N, {width}), got {a.shape}")
            lengths.append(a.shape[0])

        if len(set(lengths)) != 1:
            raise ValueError(f"Sample lists must have the same length, got {lengths}")
        if lengths[0] < self.minimum_size:
            raise ValueError(f"Need at least {self.minimum_size} samples, got {lengths[0]}")

    def _set_samples(self, samples: tuple) -> None:
        self._validate_samples(samples)
        self._samples = tuple(samples)

    @property
    def num_samples(self) -> int:
        if self._samples is None:
            return 0
        return int(np.shape(self._samples[0])[0])

    # ---------- Quality scores ----------
    @property
    def requires_quality_scores(self) -> bool:
        return self._method.uses_quality_scores

    @property
    def quality_scores(self) -> Optional[FloatArray]:
        return self._quality_scores

    @quality_scores.setter
    def quality_scores(self, scores: Optional[FloatArray]) -> None:
        self._check_unlocked()
        if not self.requires_quality_scores:
            # ignored by RANSAC / LMedS / MSAC
            return
        if scores is not None:
            a = np.asarray(scores, dtype=np.float64)
            if a.ndim != 1 or a.shape[0] < self.minimum_size:
                raise ValueError(f"Need at least {self.minimum_size} quality scores, got shape {a.shape}")
            if self._samples is not None and a.shape[0] != self.num_samples:
                raise ValueError(f"Expected {self.num_samples} quality scores, got {a.shape[0]}")
        self._quality_scores = scores

    # ---------- Configuration ----------
    @property
    def method(self) -> RobustEstimatorMethod:
        return self._method

    @property
    def config(self) -> EstimatorConfig:
        """A copy of the current settings."""
        return self._config.updated()

    @property
    def listener(self) -> Optional[RobustEstimatorListener]:
        return self._listener

    @listener.setter
    def listener(self, listener: Optional[RobustEstimatorListener]) -> None:
        self._check_unlocked()
        self._listener = listener

    @property
    def threshold(self) -> float:
        return self._config.threshold

    @threshold.setter
    def threshold(self, value: float) -> None:
        self._check_unlocked()
        self._config.threshold = check_threshold(value)

    @property
    def stop_threshold(self) -> float:
        return self._config.stop_threshold

    @stop_threshold.setter
    def stop_threshold(self, value: float) -> None:
        self._check_unlocked()
        self._config.stop_threshold = check_threshold(value, name="stop_threshold", minimum=MIN_STOP_THRESHOLD)

    @property
    def inlier_factor(self) -> float:
        return self._config.inlier_factor

    @inlier_factor.setter
    def inlier_factor(self, value: float) -> None:
        self._check_unlocked()
        self._config.inlier_factor = check_threshold(value, name="inlier_factor")

    @property
    def confidence(self) -> float:
        return self._config.confidence

    @confidence.setter
    def confidence(self, value: float) -> None:
        self._check_unlocked()
        self._config.confidence = check_confidence(value)

    @property
    def max_iterations(self) -> int:
        return self._config.max_iterations

    @max_iterations.setter
    def max_iterations(self, value: int) -> None:
        self._check_unlocked()
        self._config.max_iterations = check_max_iterations(value)

    @property
    def progress_delta(self) -> float:
        return self._config.progress_delta

    @progress_delta.setter
    def progress_delta(self, value: float) -> None:
        self._check_unlocked()
        self._config.progress_delta = check_progress_delta(value)

    @property
    def refine_result(self) -> bool:
        return self._config.refine_result

    @refine_result.setter
    def refine_result(self, value: bool) -> None:
        self._check_unlocked()
        self._config.refine_result = bool(value)

    @property
    def keep_covariance(self) -> bool:
        return self._config.keep_covariance

    @keep_covariance.setter
    def keep_covariance(self, value: bool) -> None:
        self._check_unlocked()
        self._config.keep_covariance = bool(value)

    # ---------- Results ----------
    @property
    def inliers_data(self) -> Optional[InliersData]:
        return self._inliers_data

    @property
    def covariance(self) -> Optional[FloatArray]:
        return self._covariance

    @property
    def is_ready(self) -> bool:
        if self._samples is None or self.num_samples < self.minimum_size:
            return False
        if self.requires_quality_scores:
            return self._quality_scores is not None and len(self._quality_scores) == self.num_samples
        return True

    # ---------- Estimation ----------
    def estimate(self, out: Optional[FloatArray] = None) -> FloatArray:
        """
        Robustly estimate the model.

        out: optional caller-owned array of shape ``model_shape`` that receives
        the result in place (and is returned).

        Raises:
        - LockedError if an estimation is already running
        - NotReadyError if samples (or required quality scores) are missing
        - RobustEstimatorError if no model could be found
        """
        self._check_unlocked()
        if not self.is_ready:
            raise NotReadyError(f"{type(self).__name__} is not ready")
        if out is not None and np.shape(out) != self.model_shape:
            raise ValueError(f"Expected output shape {self.model_shape}, got {np.shape(out)}")

        self._locked = True
        # results of a previous run never outlive a new attempt
        self._inliers_data = None
        self._covariance = None
        try:
            model, inliers_data, covariance = self._estimate_locked()
        finally:
            self._locked = False

        self._inliers_data = inliers_data
        self._covariance = covariance

        if out is None:
            return model
        np.copyto(out, model)
        return out

    def _estimate_locked(self) -> tuple[FloatArray, InliersData, Optional[FloatArray]]:
        listener = self._listener
        fitter = self._make_fitter()
        arrays = as_sample_arrays(self._samples)
        scores = None if self._quality_scores is None else np.asarray(self._quality_scores, dtype=np.float64)

        if listener is not None:
            listener.on_estimate_start(self)

        engine = create_engine(
            self._method,
            rng=self._rng,
            on_iteration=None if listener is None else (lambda i: listener.on_estimate_next_iteration(self, i)),
            on_progress=None if listener is None else (lambda p: listener.on_estimate_progress_change(self, p)),
            **self._config.engine_options(),
        )
        result = engine.run(fitter, arrays, scores)

        model, covariance = result.model, None
        if self._config.refine_result:
            model, covariance = self._attempt_refine(fitter, result, arrays)

        if listener is not None:
            listener.on_estimate_end(self)

        logger.debug(
            "%s/%s estimated from %d samples: %d inliers, %d iterations",
            type(self).__name__, self._method.name, arrays[0].shape[0],
            result.inliers_data.num_inliers, result.iterations,
        )
        return model, result.inliers_data, covariance

    def _attempt_refine(
            self,
            fitter: ModelFitter[M],
            result: ConsensusResult[M],
            arrays: tuple[FloatArray, ...],
    ) -> tuple[FloatArray, Optional[FloatArray]]:
        """
        Refine over the inliers; on failure keep the consensus model and drop covariance.
        """
        inliers = result.inliers_data.inliers
        # residual scale: the fixed threshold, or the LMedS estimate
        sigma = result.threshold
        try:
            refined = Refiner(fitter).refine(
                result.model,
                tuple(a[inliers] for a in arrays),
                sigma=sigma,
                keep_covariance=self._config.keep_covariance,
            )
        except RefinementError as exc:
            logger.warning("%s: refinement failed, keeping consensus model (%s)", type(self).__name__, exc)
            return result.model, None
        return refined.model, refined.covariance
