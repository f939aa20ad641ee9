"""
Observer interface notified synchronously during estimate().

Order per estimate() call:

    on_estimate_start -> (on_estimate_next_iteration, on_estimate_progress_change)* -> on_estimate_end

The estimator is locked while callbacks run: read accessors work,
mutators and estimate() raise LockedError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .base import RobustEstimator


class RobustEstimatorListener(Protocol):
    def on_estimate_start(self, estimator: "RobustEstimator") -> None:
        ...

    def on_estimate_end(self, estimator: "RobustEstimator") -> None:
        ...

    def on_estimate_next_iteration(self, estimator: "RobustEstimator", iteration: int) -> None:
        ...

    def on_estimate_progress_change(self, estimator: "RobustEstimator", progress: float) -> None:
        ...
