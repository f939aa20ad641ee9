"""
Consensus package

This module provides:
- A reusable generic consensus loop with adaptive iteration bound
- RANSAC, MSAC, LMedS, PROSAC and PROMedS variants
- Uniform and progressive (PROSAC) samplers
- Typed primitives, model interface and error taxonomy
"""

from .types import (
    FloatArray, BoolArray, IntArray, Points2D, Points3D, Lines2D, Planes, Mask, Mat3x3, Mat4x4,
    ModelFitter, InliersData, ConsensusResult, as_sample_arrays, is_valid_matrix,
)

from .errors import (
    GeometryEstimationError, LockedError, NotReadyError, RobustEstimatorError, RefinementError,
)

from .settings import (
    RobustEstimatorMethod, DEFAULT_ROBUST_METHOD,
    DEFAULT_CONFIDENCE, MIN_CONFIDENCE, MAX_CONFIDENCE,
    DEFAULT_MAX_ITERATIONS, MIN_ITERATIONS,
    DEFAULT_PROGRESS_DELTA, MIN_PROGRESS_DELTA, MAX_PROGRESS_DELTA,
    MIN_THRESHOLD, MIN_STOP_THRESHOLD, DEFAULT_INLIER_FACTOR,
)

from .samplers import UniformSampler, ProsacSampler, growth_function

from .core import ConsensusEngine, Hypothesis, required_iterations

from .ransac import RANSACEngine
from .msac import MSACEngine
from .lmeds import LMedSEngine, estimate_lmeds_threshold
from .prosac import PROSACEngine, minimum_inliers, prosac_iterations
from .promeds import PROMedSEngine

from .factory import create_engine

__all__ = [
    "FloatArray", "BoolArray", "IntArray", "Points2D", "Points3D", "Lines2D", "Planes", "Mask",
    "Mat3x3", "Mat4x4", "ModelFitter", "InliersData", "ConsensusResult",
    "as_sample_arrays", "is_valid_matrix",
    "GeometryEstimationError", "LockedError", "NotReadyError", "RobustEstimatorError", "RefinementError",
    "RobustEstimatorMethod", "DEFAULT_ROBUST_METHOD",
    "DEFAULT_CONFIDENCE", "MIN_CONFIDENCE", "MAX_CONFIDENCE",
    "DEFAULT_MAX_ITERATIONS", "MIN_ITERATIONS",
    "DEFAULT_PROGRESS_DELTA", "MIN_PROGRESS_DELTA", "MAX_PROGRESS_DELTA",
    "MIN_THRESHOLD", "MIN_STOP_THRESHOLD", "DEFAULT_INLIER_FACTOR",
    "UniformSampler", "ProsacSampler", "growth_function",
    "ConsensusEngine", "Hypothesis", "required_iterations",
    "RANSACEngine", "MSACEngine", "LMedSEngine", "estimate_lmeds_threshold",
    "PROSACEngine", "minimum_inliers", "prosac_iterations", "PROMedSEngine",
    "create_engine",
]
