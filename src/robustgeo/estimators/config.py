"""
Estimator configuration.

- FamilyDefaults: per model family constants (minimum sample size and the
  default thresholds that make sense in that family's residual units)
- EstimatorConfig: the mutable settings of one estimator, validated on
  construction; from_mapping() builds one from plain dictionaries
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

from ..ransac.settings import (
    DEFAULT_CONFIDENCE, DEFAULT_INLIER_FACTOR, DEFAULT_MAX_ITERATIONS, DEFAULT_PROGRESS_DELTA,
    MIN_STOP_THRESHOLD, check_confidence, check_max_iterations, check_progress_delta, check_threshold,
)

DEFAULT_REFINE_RESULT = True
DEFAULT_KEEP_COVARIANCE = False


@dataclass(frozen=True)
class FamilyDefaults:
    minimum_size: int
    threshold: float
    stop_threshold: float
    weak_minimum_size: Optional[int] = None


# ---------- Per family defaults ----------
# geometric distances (point / line / plane / circle / sphere)
POINT2D_DEFAULTS = FamilyDefaults(minimum_size=2, threshold=1.0, stop_threshold=1e-3)
POINT3D_DEFAULTS = FamilyDefaults(minimum_size=3, threshold=1.0, stop_threshold=1e-3)
LINE2D_DEFAULTS = FamilyDefaults(minimum_size=2, threshold=1.0, stop_threshold=1e-3)
PLANE_DEFAULTS = FamilyDefaults(minimum_size=3, threshold=1.0, stop_threshold=1e-3)
CIRCLE_DEFAULTS = FamilyDefaults(minimum_size=3, threshold=1.0, stop_threshold=1e-3)
SPHERE_DEFAULTS = FamilyDefaults(minimum_size=4, threshold=1.0, stop_threshold=1e-3)

# algebraic locus residuals on normalised quantities
CONIC_DEFAULTS = FamilyDefaults(minimum_size=5, threshold=1e-6, stop_threshold=1e-6)
DUAL_CONIC_DEFAULTS = FamilyDefaults(minimum_size=5, threshold=1e-7, stop_threshold=1e-9)
QUADRIC_DEFAULTS = FamilyDefaults(minimum_size=9, threshold=1e-6, stop_threshold=1e-6)
DUAL_QUADRIC_DEFAULTS = FamilyDefaults(minimum_size=9, threshold=1e-7, stop_threshold=1e-9)

# point correspondences: transfer distance
AFFINE2D_POINTS_DEFAULTS = FamilyDefaults(minimum_size=3, threshold=1.0, stop_threshold=1.0)
AFFINE3D_POINTS_DEFAULTS = FamilyDefaults(minimum_size=4, threshold=1.0, stop_threshold=1.0)
PROJECTIVE2D_POINTS_DEFAULTS = FamilyDefaults(minimum_size=4, threshold=1.0, stop_threshold=1.0)
PROJECTIVE3D_POINTS_DEFAULTS = FamilyDefaults(minimum_size=5, threshold=1.0, stop_threshold=1.0)
METRIC2D_DEFAULTS = FamilyDefaults(minimum_size=3, threshold=1.0, stop_threshold=1.0, weak_minimum_size=2)
METRIC3D_DEFAULTS = FamilyDefaults(minimum_size=4, threshold=1.0, stop_threshold=1.0, weak_minimum_size=3)

# line / plane correspondences: 1 - |cos| of unit vectors
AFFINE2D_LINES_DEFAULTS = FamilyDefaults(minimum_size=3, threshold=1e-6, stop_threshold=1e-6)
AFFINE3D_PLANES_DEFAULTS = FamilyDefaults(minimum_size=4, threshold=1e-6, stop_threshold=1e-6)
PROJECTIVE2D_LINES_DEFAULTS = FamilyDefaults(minimum_size=4, threshold=1e-6, stop_threshold=1e-6)
PROJECTIVE3D_PLANES_DEFAULTS = FamilyDefaults(minimum_size=5, threshold=1e-6, stop_threshold=1e-6)


@dataclass
class EstimatorConfig:
    threshold: float = 1.0
    stop_threshold: float = 1e-3
    confidence: float = DEFAULT_CONFIDENCE
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    progress_delta: float = DEFAULT_PROGRESS_DELTA
    refine_result: bool = DEFAULT_REFINE_RESULT
    keep_covariance: bool = DEFAULT_KEEP_COVARIANCE
    inlier_factor: float = DEFAULT_INLIER_FACTOR

    def __post_init__(self):
        # Fail early: bad settings are reported where they are introduced
        self.threshold = check_threshold(self.threshold)
        self.stop_threshold = check_threshold(self.stop_threshold, name="stop_threshold", minimum=MIN_STOP_THRESHOLD)
        self.confidence = check_confidence(self.confidence)
        self.max_iterations = check_max_iterations(self.max_iterations)
        self.progress_delta = check_progress_delta(self.progress_delta)
        self.inlier_factor = check_threshold(self.inlier_factor, name="inlier_factor")
        self.refine_result = bool(self.refine_result)
        self.keep_covariance = bool(self.keep_covariance)

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def for_family(cls, defaults: FamilyDefaults, **overrides: Any) -> "EstimatorConfig":
        base = cls(threshold=defaults.threshold, stop_threshold=defaults.stop_threshold)
        return base.updated(**overrides) if overrides else base

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], defaults: Optional[FamilyDefaults] = None) -> "EstimatorConfig":
        """
        Build from a plain mapping (e.g. a parsed JSON / YAML section).
        Unknown keys are rejected.
        """
        base = cls.for_family(defaults) if defaults is not None else cls()
        return base.updated(**dict(mapping))

    def updated(self, **changes: Any) -> "EstimatorConfig":
        unknown = sorted(set(changes) - set(self.field_names()))
        if unknown:
            raise ValueError(f"Unknown estimator settings: {unknown}")
        return replace(self, **changes)

    def engine_options(self) -> dict[str, Any]:
        """Keyword arguments understood by ransac.create_engine."""
        return {
            "threshold": self.threshold,
            "stop_threshold": self.stop_threshold,
            "inlier_factor": self.inlier_factor,
            "confidence": self.confidence,
            "max_iterations": self.max_iterations,
            "progress_delta": self.progress_delta,
        }
