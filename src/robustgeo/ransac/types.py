"""
Shared typed primitives for the robust estimation core.

Defines:
- Typed NumPy aliases for geometry
    - Samples are (N, k) float arrays, one row per observation
    - Transforms are 3x3 / 4x4 homogeneous matrices
- Generic model protocol used by every consensus engine
- Structured consensus output containers (inliers data + result)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, Protocol, TypeAlias, TypeVar

import numpy as np
import numpy.typing as npt

# ---------- Numpy typing aliases ----------
# - float64 for geometry / matrices (more stable for linear algebra)
# - bool_ for masks

FloatArray: TypeAlias = npt.NDArray[np.float64]
BoolArray: TypeAlias = npt.NDArray[np.bool_]
IntArray: TypeAlias = npt.NDArray[np.int64]

# Inhomogeneous points.
Points2D: TypeAlias = FloatArray      # shape: (N, 2)
Points3D: TypeAlias = FloatArray      # shape: (N, 3)

# Homogeneous lines [a, b, c] and planes [a, b, c, d].
Lines2D: TypeAlias = FloatArray       # shape: (N, 3)
Planes: TypeAlias = FloatArray        # shape: (N, 4)

# Boolean inlier mask: True as inlier, False as outlier
Mask: TypeAlias = BoolArray           # shape: (N,)

# Homogeneous transform matrices.
Mat3x3: TypeAlias = FloatArray        # shape: (3, 3)
Mat4x4: TypeAlias = FloatArray        # shape: (4, 4)

# ---------- Generic model typing ----------
M = TypeVar("M")


class ModelFitter(Protocol[M]):
    """
    Interface a model family implements to be usable by the consensus engines
    and the refiner.

    Samples are passed as one or more arrays sharing their first dimension:
    a single array for single-list models (points, lines, planes) or an
    (inputs, outputs) pair for transformations.
    """

    sample_size: int

    def fit_minimal(self, *samples: FloatArray) -> Optional[M]:
        """
        Fit from exactly ``sample_size`` samples.
        Return None if the sample is degenerate (e.g. coincident points).
        """
        ...

    def residuals(self, model: M, *samples: FloatArray) -> FloatArray:
        """
        Non-negative discrepancy of every sample, shape (N,). Smaller = better.
        """
        ...

    def refine_residuals(self, model: M, *samples: FloatArray) -> FloatArray:
        """
        Signed, smooth residual vector minimised by the refiner (1-D).
        """
        ...

    def to_params(self, model: M) -> FloatArray:
        """Flatten a model into the refiner's parameter vector."""
        ...

    def from_params(self, params: FloatArray) -> Optional[M]:
        """Rebuild a model from a parameter vector, None if invalid."""
        ...

    def covariance_params(self, model: M) -> FloatArray:
        """Public parameterisation in which covariance is reported."""
        ...


# ---------- Consensus output containers ----------
@dataclass(frozen=True)
class InliersData:
    inliers: Mask                               # membership of every sample
    residuals: FloatArray                       # residual of every sample under the champion
    num_inliers: int                            # count of True values in inliers
    estimated_threshold: Optional[float] = None  # LMedS-family only


@dataclass(frozen=True)
class ConsensusResult(Generic[M]):
    model: M                    # best minimal-sample model
    inliers_data: InliersData
    iterations: int             # how many iterations were actually run
    score: float                # variant score of the champion (lower = better)
    threshold: float            # threshold used to separate inliers


# ---------- Helper Functions ----------
def as_sample_arrays(samples: tuple, *, min_rows: int = 0) -> tuple[FloatArray, ...]:
    """
    Convert sample inputs to 2-D float64 arrays with a common first dimension.
    Raises ValueError on shape mismatch.
    """
    arrays = tuple(np.asarray(s, dtype=np.float64) for s in samples)
    if not arrays:
        raise ValueError("At least one sample array is required")
    for a in arrays:
        if a.ndim != 2:
            raise ValueError(f"Expected 2-D sample array, got shape {a.shape}")
    n = arrays[0].shape[0]
    if any(a.shape[0] != n for a in arrays):
        raise ValueError(f"Sample arrays must have the same length, got {[a.shape[0] for a in arrays]}")
    if n < min_rows:
        raise ValueError(f"Expected at least {min_rows} samples, got {n}")
    return arrays


def is_valid_matrix(T: FloatArray, size: int) -> bool:
    """
    Verify a square transform matrix.
    Used for rejecting failed fits.
    """
    return isinstance(T, np.ndarray) and T.shape == (size, size) and bool(np.isfinite(T).all())
