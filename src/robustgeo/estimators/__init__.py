"""
Public estimator facades: one class per model family, the consensus method
being a constructor argument.
"""

from .config import (
    EstimatorConfig, FamilyDefaults, DEFAULT_REFINE_RESULT, DEFAULT_KEEP_COVARIANCE,
)
from .listener import RobustEstimatorListener
from .base import RobustEstimator
from .single import (
    SingleListRobustEstimator,
    Point2DEstimator, Point3DEstimator, Line2DEstimator, PlaneEstimator,
    CircleEstimator, SphereEstimator,
    ConicEstimator, DualConicEstimator, QuadricEstimator, DualQuadricEstimator,
)
from .correspondence import (
    CorrespondenceRobustEstimator,
    Affine2DFromPointsEstimator, Affine2DFromLinesEstimator,
    Affine3DFromPointsEstimator, Affine3DFromPlanesEstimator,
    Projective2DFromPointsEstimator, Projective2DFromLinesEstimator,
    Projective3DFromPointsEstimator, Projective3DFromPlanesEstimator,
    Euclidean2DEstimator, Metric2DEstimator, Euclidean3DEstimator, Metric3DEstimator,
)

__all__ = [
    "EstimatorConfig", "FamilyDefaults", "DEFAULT_REFINE_RESULT", "DEFAULT_KEEP_COVARIANCE",
    "RobustEstimatorListener", "RobustEstimator",
    "SingleListRobustEstimator",
    "Point2DEstimator", "Point3DEstimator", "Line2DEstimator", "PlaneEstimator",
    "CircleEstimator", "SphereEstimator",
    "ConicEstimator", "DualConicEstimator", "QuadricEstimator", "DualQuadricEstimator",
    "CorrespondenceRobustEstimator",
    "Affine2DFromPointsEstimator", "Affine2DFromLinesEstimator",
    "Affine3DFromPointsEstimator", "Affine3DFromPlanesEstimator",
    "Projective2DFromPointsEstimator", "Projective2DFromLinesEstimator",
    "Projective3DFromPointsEstimator", "Projective3DFromPlanesEstimator",
    "Euclidean2DEstimator", "Metric2DEstimator", "Euclidean3DEstimator", "Metric3DEstimator",
]
