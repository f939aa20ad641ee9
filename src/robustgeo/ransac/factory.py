"""
Build a consensus engine from a RobustEstimatorMethod.
"""
from __future__ import annotations

from typing import Optional

from .core import ConsensusEngine
from .lmeds import LMedSEngine
from .msac import MSACEngine
from .promeds import PROMedSEngine
from .prosac import PROSACEngine
from .ransac import RANSACEngine
from .settings import DEFAULT_INLIER_FACTOR, RobustEstimatorMethod

ENGINES: dict[RobustEstimatorMethod, type[ConsensusEngine]] = {
    RobustEstimatorMethod.RANSAC: RANSACEngine,
    RobustEstimatorMethod.LMEDS: LMedSEngine,
    RobustEstimatorMethod.MSAC: MSACEngine,
    RobustEstimatorMethod.PROSAC: PROSACEngine,
    RobustEstimatorMethod.PROMEDS: PROMedSEngine,
}


def create_engine(
        method: RobustEstimatorMethod,
        *,
        threshold: Optional[float] = None,
        stop_threshold: Optional[float] = None,
        inlier_factor: float = DEFAULT_INLIER_FACTOR,
        **options,
) -> ConsensusEngine:
    """
    Instantiate the engine for ``method``.

    threshold is used by RANSAC / MSAC / PROSAC, stop_threshold and
    inlier_factor by LMedS / PROMedS; the other one is ignored.
    Remaining options (confidence, max_iterations, progress_delta, rng,
    on_iteration, on_progress) go to every engine.
    """
    method = RobustEstimatorMethod(method)
    engine_cls = ENGINES[method]

    if method.uses_median:
        if stop_threshold is None:
            raise ValueError(f"{method.name} requires stop_threshold")
        return engine_cls(stop_threshold=stop_threshold, inlier_factor=inlier_factor, **options)

    if threshold is None:
        raise ValueError(f"{method.name} requires threshold")
    return engine_cls(threshold=threshold, **options)
