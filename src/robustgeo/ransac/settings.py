"""
Consensus method identifiers, default settings and their valid ranges.
"""

from __future__ import annotations

from enum import Enum


class RobustEstimatorMethod(Enum):
    RANSAC = "ransac"
    LMEDS = "lmeds"
    MSAC = "msac"
    PROSAC = "prosac"
    PROMEDS = "promeds"

    @property
    def uses_quality_scores(self) -> bool:
        return self in (RobustEstimatorMethod.PROSAC, RobustEstimatorMethod.PROMEDS)

    @property
    def uses_median(self) -> bool:
        return self in (RobustEstimatorMethod.LMEDS, RobustEstimatorMethod.PROMEDS)


DEFAULT_ROBUST_METHOD = RobustEstimatorMethod.PROMEDS

# ---------- Shared defaults ----------
DEFAULT_CONFIDENCE = 0.99
MIN_CONFIDENCE = 0.0
MAX_CONFIDENCE = 1.0

DEFAULT_MAX_ITERATIONS = 5000
MIN_ITERATIONS = 1

DEFAULT_PROGRESS_DELTA = 0.05
MIN_PROGRESS_DELTA = 0.0
MAX_PROGRESS_DELTA = 1.0

# thresholds must be strictly above these
MIN_THRESHOLD = 0.0
MIN_STOP_THRESHOLD = 0.0

DEFAULT_INLIER_FACTOR = 1.5

# Rousseeuw's consistency factor for the median of squared residuals
LMEDS_ROBUST_FACTOR = 1.4826

# Median variants assume at most half of the samples are outliers. The
# estimated threshold always covers half the data, so the inlier ratio used
# for the iteration bound is capped here.
LMEDS_BREAKDOWN_RATIO = 0.5

# PROSAC non-randomness: probability psi that I_n inliers arise by chance,
# beta = probability an outlier is consistent with a wrong model
PROSAC_PSI = 0.05
PROSAC_BETA = 0.01


# ---------- Validation ----------
def check_confidence(value: float) -> float:
    value = float(value)
    if not MIN_CONFIDENCE <= value <= MAX_CONFIDENCE:
        raise ValueError(f"confidence must be in [{MIN_CONFIDENCE}, {MAX_CONFIDENCE}], got {value}")
    return value


def check_max_iterations(value: int) -> int:
    if int(value) != value or value < MIN_ITERATIONS:
        raise ValueError(f"max_iterations must be an integer >= {MIN_ITERATIONS}, got {value}")
    return int(value)


def check_progress_delta(value: float) -> float:
    value = float(value)
    if not MIN_PROGRESS_DELTA <= value <= MAX_PROGRESS_DELTA:
        raise ValueError(f"progress_delta must be in [{MIN_PROGRESS_DELTA}, {MAX_PROGRESS_DELTA}], got {value}")
    return value


def check_threshold(value: float, *, name: str = "threshold", minimum: float = MIN_THRESHOLD) -> float:
    value = float(value)
    if not value > minimum:
        raise ValueError(f"{name} must be > {minimum}, got {value}")
    return value
