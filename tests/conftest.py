"""Shared fixtures for the robustgeo test suite."""

from __future__ import annotations

import numpy as np
import pytest

from robustgeo import LockedError


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(12345)


class CountingListener:
    """
    Counts callbacks and, from inside each one, checks that the estimator
    rejects every mutator and estimate() while it is locked.
    """

    def __init__(self, check_locked: bool = True):
        self.check_locked = check_locked
        self.start = 0
        self.end = 0
        self.iterations = 0
        self.progress: list[float] = []
        self.lock_violations: list[str] = []

    def _assert_locked(self, estimator) -> None:
        if not self.check_locked:
            return
        if not estimator.is_locked:
            self.lock_violations.append("is_locked is False inside callback")

        mutators = {
            "threshold": lambda: setattr(estimator, "threshold", 0.5),
            "stop_threshold": lambda: setattr(estimator, "stop_threshold", 0.5),
            "confidence": lambda: setattr(estimator, "confidence", 0.5),
            "max_iterations": lambda: setattr(estimator, "max_iterations", 10),
            "progress_delta": lambda: setattr(estimator, "progress_delta", 0.5),
            "refine_result": lambda: setattr(estimator, "refine_result", False),
            "keep_covariance": lambda: setattr(estimator, "keep_covariance", True),
            "listener": lambda: setattr(estimator, "listener", None),
            "quality_scores": lambda: setattr(estimator, "quality_scores", None),
            "estimate": lambda: estimator.estimate(),
        }
        for name, call in mutators.items():
            try:
                call()
            except LockedError:
                continue
            self.lock_violations.append(f"{name} did not raise LockedError")

        # read accessors keep working
        _ = (estimator.threshold, estimator.confidence, estimator.is_ready, estimator.inliers_data)

    def on_estimate_start(self, estimator) -> None:
        self.start += 1
        self._assert_locked(estimator)

    def on_estimate_end(self, estimator) -> None:
        self.end += 1
        self._assert_locked(estimator)

    def on_estimate_next_iteration(self, estimator, iteration: int) -> None:
        self.iterations += 1
        if self.iterations == 1:
            self._assert_locked(estimator)

    def on_estimate_progress_change(self, estimator, progress: float) -> None:
        self.progress.append(progress)


@pytest.fixture
def listener() -> CountingListener:
    return CountingListener()
