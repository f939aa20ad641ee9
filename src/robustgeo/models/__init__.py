"""
Model families: minimal solvers, residual functions and their ModelFitter adapters.

- points / point_fitter:             Point2D from lines, Point3D from planes
- hyperplanes / hyperplane_fitter:   Line2D and Plane from points
- spheres / sphere_fitter:           Circle and Sphere from points
- loci / locus_fitter:               Conic, DualConic, Quadric, DualQuadric
- affine / affine_fitter:            affine 2D / 3D from points or lines / planes
- projective / projective_fitter:    projective 2D / 3D from points or lines / planes
- metric / metric_fitter:            euclidean and metric 2D / 3D from points
"""

from .homogeneous import (
    CoordinatesType, as_homogeneous, from_homogeneous, normalize_rows, frobenius_normalize,
    normalizing_transform, null_vector, solve_linear, parallel_constraints,
)

from .points import fit_point_minimal, fit_point_least_squares, point_distances, homogeneous_point
from .point_fitter import PointFitter

from .hyperplanes import (
    fit_hyperplane_minimal, fit_hyperplane_least_squares, hyperplane_distances, normalize_hyperplane,
)
from .hyperplane_fitter import HyperplaneFitter

from .spheres import fit_sphere_algebraic, sphere_distances
from .sphere_fitter import SphereFitter

from .loci import fit_locus_from_points, fit_dual_locus, locus_residuals, locus_sample_size
from .locus_fitter import LocusFitter

from .transforms import apply_transform, transform_hyperplanes, transfer_errors, alignment_errors

from .affine import fit_affine_points, fit_affine_hyperplanes, theta_to_matrix, matrix_to_theta
from .affine_fitter import AffinePointFitter, AffineHyperplaneFitter

from .projective import fit_projective_points, fit_projective_hyperplanes, projective_sample_size
from .projective_fitter import ProjectivePointFitter, ProjectiveHyperplaneFitter

from .metric import (
    fit_similarity, decompose_similarity, compose_similarity,
    rotation_2d, rotation_to_rvec, rvec_to_rotation, rvec_to_quaternion,
)
from .metric_fitter import MetricFitter, metric_minimum_size

__all__ = [
    "CoordinatesType", "as_homogeneous", "from_homogeneous", "normalize_rows", "frobenius_normalize",
    "normalizing_transform", "null_vector", "solve_linear", "parallel_constraints",
    "fit_point_minimal", "fit_point_least_squares", "point_distances", "homogeneous_point",
    "PointFitter",
    "fit_hyperplane_minimal", "fit_hyperplane_least_squares", "hyperplane_distances", "normalize_hyperplane",
    "HyperplaneFitter",
    "fit_sphere_algebraic", "sphere_distances", "SphereFitter",
    "fit_locus_from_points", "fit_dual_locus", "locus_residuals", "locus_sample_size", "LocusFitter",
    "apply_transform", "transform_hyperplanes", "transfer_errors", "alignment_errors",
    "fit_affine_points", "fit_affine_hyperplanes", "theta_to_matrix", "matrix_to_theta",
    "AffinePointFitter", "AffineHyperplaneFitter",
    "fit_projective_points", "fit_projective_hyperplanes", "projective_sample_size",
    "ProjectivePointFitter", "ProjectiveHyperplaneFitter",
    "fit_similarity", "decompose_similarity", "compose_similarity",
    "rotation_2d", "rotation_to_rvec", "rvec_to_rotation", "rvec_to_quaternion",
    "MetricFitter", "metric_minimum_size",
]
