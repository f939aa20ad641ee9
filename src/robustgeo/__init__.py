"""
robustgeo: robust estimation of geometric models.

- ransac:      consensus engines (RANSAC, MSAC, LMedS, PROSAC, PROMedS)
- models:      minimal solvers and residuals per model family
- refine:      least-squares refinement and covariance
- estimators:  public per-family facades
"""

from .ransac import (
    RobustEstimatorMethod, InliersData, ConsensusResult, create_engine,
    GeometryEstimationError, LockedError, NotReadyError, RobustEstimatorError, RefinementError,
)
from .models import CoordinatesType
from .estimators import *  # noqa: F401,F403
from .estimators import __all__ as _estimators_all

__version__ = "0.1.0"

__all__ = [
    "RobustEstimatorMethod", "InliersData", "ConsensusResult", "create_engine",
    "GeometryEstimationError", "LockedError", "NotReadyError", "RobustEstimatorError", "RefinementError",
    "CoordinatesType",
    *_estimators_all,
]
