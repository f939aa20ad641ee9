"""
Exception taxonomy of the estimation core.

Illegal arguments (bad configuration, malformed samples) are plain ValueError.
Everything specific to robust estimation derives from GeometryEstimationError.
"""

from __future__ import annotations


class GeometryEstimationError(Exception):
    """Base class of all estimation failures."""


class LockedError(GeometryEstimationError):
    """A mutator or estimate() was called while an estimation is running."""


class NotReadyError(GeometryEstimationError):
    """Estimation was requested without enough samples or required quality scores."""


class RobustEstimatorError(GeometryEstimationError):
    """The consensus loop finished without ever finding a usable model."""


class RefinementError(GeometryEstimationError):
    """Least-squares refinement did not produce a usable model."""
