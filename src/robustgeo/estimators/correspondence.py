"""
Estimators fitting a transformation to (input, output) correspondences.

Points map as x' ~ T x; lines and planes map as h' ~ T^{-T} h.
Inputs and outputs are always set together so their lengths can be checked.
"""

from __future__ import annotations

from typing import Optional

from ..models.affine_fitter import AffineHyperplaneFitter, AffinePointFitter
from ..models.metric_fitter import MetricFitter, metric_minimum_size
from ..models.projective_fitter import ProjectiveHyperplaneFitter, ProjectivePointFitter
from ..ransac.types import FloatArray
from .base import RobustEstimator
from .config import (
    AFFINE2D_LINES_DEFAULTS, AFFINE2D_POINTS_DEFAULTS, AFFINE3D_PLANES_DEFAULTS, AFFINE3D_POINTS_DEFAULTS,
    METRIC2D_DEFAULTS, METRIC3D_DEFAULTS,
    PROJECTIVE2D_LINES_DEFAULTS, PROJECTIVE2D_POINTS_DEFAULTS,
    PROJECTIVE3D_PLANES_DEFAULTS, PROJECTIVE3D_POINTS_DEFAULTS,
)


class CorrespondenceRobustEstimator(RobustEstimator[FloatArray]):
    def __init__(self, inputs: Optional[FloatArray] = None, outputs: Optional[FloatArray] = None, **kwargs):
        if (inputs is None) != (outputs is None):
            raise ValueError("inputs and outputs must be provided together")
        super().__init__(None if inputs is None else (inputs, outputs), **kwargs)

    @property
    def inputs(self) -> Optional[FloatArray]:
        return None if self._samples is None else self._samples[0]

    @property
    def outputs(self) -> Optional[FloatArray]:
        return None if self._samples is None else self._samples[1]

    def set_correspondences(self, inputs: FloatArray, outputs: FloatArray) -> None:
        self._check_unlocked()
        self._set_samples((inputs, outputs))


class _PointCorrespondences(CorrespondenceRobustEstimator):
    @property
    def input_points(self) -> Optional[FloatArray]:
        return self.inputs

    @property
    def output_points(self) -> Optional[FloatArray]:
        return self.outputs

    def set_points(self, input_points: FloatArray, output_points: FloatArray) -> None:
        self.set_correspondences(input_points, output_points)


class _LineCorrespondences(CorrespondenceRobustEstimator):
    @property
    def input_lines(self) -> Optional[FloatArray]:
        return self.inputs

    @property
    def output_lines(self) -> Optional[FloatArray]:
        return self.outputs

    def set_lines(self, input_lines: FloatArray, output_lines: FloatArray) -> None:
        self.set_correspondences(input_lines, output_lines)


class _PlaneCorrespondences(CorrespondenceRobustEstimator):
    @property
    def input_planes(self) -> Optional[FloatArray]:
        return self.inputs

    @property
    def output_planes(self) -> Optional[FloatArray]:
        return self.outputs

    def set_planes(self, input_planes: FloatArray, output_planes: FloatArray) -> None:
        self.set_correspondences(input_planes, output_planes)


# ---------- Affine ----------
class Affine2DFromPointsEstimator(_PointCorrespondences):
    defaults = AFFINE2D_POINTS_DEFAULTS
    sample_widths = (2, 2)
    model_shape = (3, 3)

    def _make_fitter(self) -> AffinePointFitter:
        return AffinePointFitter(dimension=2)


class Affine2DFromLinesEstimator(_LineCorrespondences):
    defaults = AFFINE2D_LINES_DEFAULTS
    sample_widths = (3, 3)
    model_shape = (3, 3)

    def _make_fitter(self) -> AffineHyperplaneFitter:
        return AffineHyperplaneFitter(dimension=2)


class Affine3DFromPointsEstimator(_PointCorrespondences):
    defaults = AFFINE3D_POINTS_DEFAULTS
    sample_widths = (3, 3)
    model_shape = (4, 4)

    def _make_fitter(self) -> AffinePointFitter:
        return AffinePointFitter(dimension=3)


class Affine3DFromPlanesEstimator(_PlaneCorrespondences):
    defaults = AFFINE3D_PLANES_DEFAULTS
    sample_widths = (4, 4)
    model_shape = (4, 4)

    def _make_fitter(self) -> AffineHyperplaneFitter:
        return AffineHyperplaneFitter(dimension=3)


# ---------- Projective ----------
class Projective2DFromPointsEstimator(_PointCorrespondences):
    defaults = PROJECTIVE2D_POINTS_DEFAULTS
    sample_widths = (2, 2)
    model_shape = (3, 3)

    def _make_fitter(self) -> ProjectivePointFitter:
        return ProjectivePointFitter(dimension=2)


class Projective2DFromLinesEstimator(_LineCorrespondences):
    defaults = PROJECTIVE2D_LINES_DEFAULTS
    sample_widths = (3, 3)
    model_shape = (3, 3)

    def _make_fitter(self) -> ProjectiveHyperplaneFitter:
        return ProjectiveHyperplaneFitter(dimension=2)


class Projective3DFromPointsEstimator(_PointCorrespondences):
    defaults = PROJECTIVE3D_POINTS_DEFAULTS
    sample_widths = (3, 3)
    model_shape = (4, 4)

    def _make_fitter(self) -> ProjectivePointFitter:
        return ProjectivePointFitter(dimension=3)


class Projective3DFromPlanesEstimator(_PlaneCorrespondences):
    defaults = PROJECTIVE3D_PLANES_DEFAULTS
    sample_widths = (4, 4)
    model_shape = (4, 4)

    def _make_fitter(self) -> ProjectiveHyperplaneFitter:
        return ProjectiveHyperplaneFitter(dimension=3)


# ---------- Euclidean / metric ----------
class _MetricEstimator(_PointCorrespondences):
    with_scale = False

    def __init__(
            self,
            inputs: Optional[FloatArray] = None,
            outputs: Optional[FloatArray] = None,
            *,
            weak_minimum_size_allowed: bool = False,
            **kwargs,
    ):
        self._weak_minimum_size_allowed = bool(weak_minimum_size_allowed)
        super().__init__(inputs, outputs, **kwargs)

    @property
    def dimension(self) -> int:
        return self.sample_widths[0]

    @property
    def weak_minimum_size_allowed(self) -> bool:
        """Accept (and sample) one point fewer than the usual minimum."""
        return self._weak_minimum_size_allowed

    @weak_minimum_size_allowed.setter
    def weak_minimum_size_allowed(self, value: bool) -> None:
        self._check_unlocked()
        self._weak_minimum_size_allowed = bool(value)

    @property
    def minimum_size(self) -> int:
        return metric_minimum_size(self.dimension, self._weak_minimum_size_allowed)

    def _make_fitter(self) -> MetricFitter:
        return MetricFitter(
            dimension=self.dimension,
            with_scale=self.with_scale,
            weak_minimum_size=self._weak_minimum_size_allowed,
        )


class Euclidean2DEstimator(_MetricEstimator):
    defaults = METRIC2D_DEFAULTS
    sample_widths = (2, 2)
    model_shape = (3, 3)


class Metric2DEstimator(_MetricEstimator):
    defaults = METRIC2D_DEFAULTS
    sample_widths = (2, 2)
    model_shape = (3, 3)
    with_scale = True


class Euclidean3DEstimator(_MetricEstimator):
    defaults = METRIC3D_DEFAULTS
    sample_widths = (3, 3)
    model_shape = (4, 4)


class Metric3DEstimator(_MetricEstimator):
    defaults = METRIC3D_DEFAULTS
    sample_widths = (3, 3)
    model_shape = (4, 4)
    with_scale = True
