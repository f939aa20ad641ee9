"""
Estimators fitting one model to a single list of observations.

| estimator              | samples        | model                        |
|------------------------|----------------|------------------------------|
| Point2DEstimator       | lines (N,3)    | point (2,)                   |
| Point3DEstimator       | planes (N,4)   | point (3,)                   |
| Line2DEstimator        | points (N,2)   | line [a, b, c] (3,)          |
| PlaneEstimator         | points (N,3)   | plane [a, b, c, d] (4,)      |
| CircleEstimator        | points (N,2)   | [cx, cy, r]                  |
| SphereEstimator        | points (N,3)   | [cx, cy, cz, r]              |
| ConicEstimator         | points (N,2)   | conic (3,3)                  |
| DualConicEstimator     | lines (N,3)    | dual conic (3,3)             |
| QuadricEstimator       | points (N,3)   | quadric (4,4)                |
| DualQuadricEstimator   | planes (N,4)   | dual quadric (4,4)           |
"""

from __future__ import annotations

from typing import ClassVar, Optional

from ..models.homogeneous import CoordinatesType
from ..models.hyperplane_fitter import HyperplaneFitter
from ..models.locus_fitter import LocusFitter
from ..models.point_fitter import PointFitter
from ..models.sphere_fitter import SphereFitter
from ..ransac.types import FloatArray
from .base import RobustEstimator
from .config import (
    CIRCLE_DEFAULTS, CONIC_DEFAULTS, DUAL_CONIC_DEFAULTS, DUAL_QUADRIC_DEFAULTS, LINE2D_DEFAULTS,
    PLANE_DEFAULTS, POINT2D_DEFAULTS, POINT3D_DEFAULTS, QUADRIC_DEFAULTS, SPHERE_DEFAULTS,
)


def _samples_alias(doc: str) -> property:
    """Family-specific name for the ``samples`` property."""
    return property(
        lambda self: self.samples,
        lambda self, value: setattr(self, "samples", value),
        doc=doc,
    )


class SingleListRobustEstimator(RobustEstimator[FloatArray]):
    def __init__(self, samples: Optional[FloatArray] = None, **kwargs):
        super().__init__(None if samples is None else (samples,), **kwargs)

    @property
    def samples(self) -> Optional[FloatArray]:
        """The caller's sample array (same object, not a copy)."""
        return None if self._samples is None else self._samples[0]

    @samples.setter
    def samples(self, value: FloatArray) -> None:
        self._check_unlocked()
        self._set_samples((value,))


# ---------- Points ----------
class _PointEstimator(SingleListRobustEstimator):
    dimension: ClassVar[int]

    def __init__(
            self,
            samples: Optional[FloatArray] = None,
            *,
            refinement_coordinates_type: CoordinatesType = CoordinatesType.INHOMOGENEOUS,
            **kwargs,
    ):
        self._coordinates_type = CoordinatesType(refinement_coordinates_type)
        super().__init__(samples, **kwargs)

    @property
    def refinement_coordinates_type(self) -> CoordinatesType:
        """Representation the covariance is reported in (size d or d + 1)."""
        return self._coordinates_type

    @refinement_coordinates_type.setter
    def refinement_coordinates_type(self, value: CoordinatesType) -> None:
        self._check_unlocked()
        self._coordinates_type = CoordinatesType(value)

    def _make_fitter(self) -> PointFitter:
        return PointFitter(dimension=self.dimension, coordinates=self._coordinates_type)


class Point2DEstimator(_PointEstimator):
    """Common intersection point of 2D lines."""
    defaults = POINT2D_DEFAULTS
    sample_widths = (3,)
    model_shape = (2,)
    dimension = 2
    lines = _samples_alias("(N, 3) lines [a, b, c]")


class Point3DEstimator(_PointEstimator):
    """Common intersection point of planes."""
    defaults = POINT3D_DEFAULTS
    sample_widths = (4,)
    model_shape = (3,)
    dimension = 3
    planes = _samples_alias("(N, 4) planes [a, b, c, d]")


# ---------- Lines / planes ----------
class Line2DEstimator(SingleListRobustEstimator):
    defaults = LINE2D_DEFAULTS
    sample_widths = (2,)
    model_shape = (3,)
    points = _samples_alias("(N, 2) points")

    def _make_fitter(self) -> HyperplaneFitter:
        return HyperplaneFitter(dimension=2)


class PlaneEstimator(SingleListRobustEstimator):
    defaults = PLANE_DEFAULTS
    sample_widths = (3,)
    model_shape = (4,)
    points = _samples_alias("(N, 3) points")

    def _make_fitter(self) -> HyperplaneFitter:
        return HyperplaneFitter(dimension=3)


# ---------- Circles / spheres ----------
class CircleEstimator(SingleListRobustEstimator):
    defaults = CIRCLE_DEFAULTS
    sample_widths = (2,)
    model_shape = (3,)
    points = _samples_alias("(N, 2) points")

    def _make_fitter(self) -> SphereFitter:
        return SphereFitter(dimension=2)


class SphereEstimator(SingleListRobustEstimator):
    defaults = SPHERE_DEFAULTS
    sample_widths = (3,)
    model_shape = (4,)
    points = _samples_alias("(N, 3) points")

    def _make_fitter(self) -> SphereFitter:
        return SphereFitter(dimension=3)


# ---------- Conics / quadrics ----------
class ConicEstimator(SingleListRobustEstimator):
    defaults = CONIC_DEFAULTS
    sample_widths = (2,)
    model_shape = (3, 3)
    points = _samples_alias("(N, 2) points")

    def _make_fitter(self) -> LocusFitter:
        return LocusFitter(dimension=2)


class DualConicEstimator(SingleListRobustEstimator):
    """Dual conic from its tangent lines."""
    defaults = DUAL_CONIC_DEFAULTS
    sample_widths = (3,)
    model_shape = (3, 3)
    lines = _samples_alias("(N, 3) lines [a, b, c]")

    def _make_fitter(self) -> LocusFitter:
        return LocusFitter(dimension=2, dual=True)


class QuadricEstimator(SingleListRobustEstimator):
    defaults = QUADRIC_DEFAULTS
    sample_widths = (3,)
    model_shape = (4, 4)
    points = _samples_alias("(N, 3) points")

    def _make_fitter(self) -> LocusFitter:
        return LocusFitter(dimension=3)


class DualQuadricEstimator(SingleListRobustEstimator):
    """Dual quadric from its tangent planes."""
    defaults = DUAL_QUADRIC_DEFAULTS
    sample_widths = (4,)
    model_shape = (4, 4)
    planes = _samples_alias("(N, 4) planes [a, b, c, d]")

    def _make_fitter(self) -> LocusFitter:
        return LocusFitter(dimension=3, dual=True)
