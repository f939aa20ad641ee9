"""Exact minimal solves, degeneracy detection and residuals of every model family."""

from __future__ import annotations

import numpy as np
import pytest

from robustgeo.models import (
    AffineHyperplaneFitter, AffinePointFitter, CoordinatesType, HyperplaneFitter, LocusFitter, MetricFitter,
    PointFitter, ProjectiveHyperplaneFitter, ProjectivePointFitter, SphereFitter,
    alignment_errors, apply_transform, fit_similarity, locus_sample_size, metric_minimum_size,
    normalizing_transform, null_vector, parallel_constraints, projective_sample_size, rvec_to_quaternion,
    rvec_to_rotation, solve_linear, transform_hyperplanes, transfer_errors,
)
from robustgeo.models.homogeneous import symmetric_design, symmetric_from_params

from synthetic import (
    _affine_matrix, _euclidean_matrix, _projective_matrix, ellipse_conic, ellipsoid_quadric,
    hyperplanes_through, random_unit_vectors,
)


def assert_same_up_to_scale(a, b, atol=1e-8):
    a = np.ravel(a) / np.linalg.norm(a)
    b = np.ravel(b) / np.linalg.norm(b)
    if a @ b < 0:
        b = -b
    np.testing.assert_allclose(a, b, atol=atol)


# ---------------------------------------------------------------------------
# Homogeneous helpers
# ---------------------------------------------------------------------------


def test_normalizing_transform(rng):
    pts = rng.uniform(-50, 80, size=(30, 2))
    T = normalizing_transform(pts)
    moved = apply_transform(T, pts)
    np.testing.assert_allclose(moved.mean(axis=0), 0.0, atol=1e-10)
    assert np.mean(np.linalg.norm(moved, axis=1)) == pytest.approx(np.sqrt(2))


def test_normalizing_transform_coincident_points():
    assert normalizing_transform(np.ones((5, 3))) is None


def test_null_vector_requires_one_dimensional_kernel():
    assert null_vector(np.zeros((4, 3))) is None
    A = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    np.testing.assert_allclose(np.abs(null_vector(A)), [0.0, 0.0, 1.0])


def test_solve_linear_rank_deficient():
    A = np.array([[1.0, 2.0], [2.0, 4.0], [3.0, 6.0]])
    assert solve_linear(A, np.ones(3)) is None


def test_symmetric_design_evaluates_quadratic_form(rng):
    v = rng.normal(size=(7, 4))
    q = rng.normal(size=10)
    Q = symmetric_from_params(q, 4)
    np.testing.assert_allclose(symmetric_design(v) @ q, np.einsum("ni,ij,nj->n", v, Q, v))


def test_parallel_constraints_vanish_for_parallel_prediction(rng):
    designs = rng.normal(size=(5, 3, 4))
    offsets = rng.normal(size=(5, 3))
    h = rng.normal(size=4)
    targets = (designs @ h + offsets) * rng.uniform(0.5, 2.0, size=(5, 1))
    A, b = parallel_constraints(targets, designs, offsets)
    assert A.shape == (15, 4)
    np.testing.assert_allclose(A @ h, b, atol=1e-10)


def test_sample_sizes():
    assert projective_sample_size(2) == 4
    assert projective_sample_size(3) == 5
    assert locus_sample_size(3) == 5
    assert locus_sample_size(4) == 9
    assert metric_minimum_size(2) == 3
    assert metric_minimum_size(2, weak=True) == 2
    assert metric_minimum_size(3) == 4
    assert metric_minimum_size(3, weak=True) == 3


# ---------------------------------------------------------------------------
# Points from hyperplanes
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("dimension", [2, 3])
def test_point_from_hyperplanes(dimension, rng):
    p = rng.uniform(-100, 100, size=dimension)
    h = hyperplanes_through(rng, p, 20)
    fitter = PointFitter(dimension)
    model = fitter.fit_minimal(h[:dimension])
    np.testing.assert_allclose(model, p, atol=1e-8)
    assert np.all(fitter.residuals(model, h) < 1e-8)


def test_point_from_parallel_lines_is_degenerate():
    lines = np.array([[1.0, 2.0, 3.0], [2.0, 4.0, -1.0]])
    assert PointFitter(2).fit_minimal(lines) is None


def test_point_homogeneous_covariance_params():
    fitter = PointFitter(3, CoordinatesType.HOMOGENEOUS)
    params = fitter.covariance_params(np.array([1.0, 2.0, 2.0]))
    assert params.shape == (4,)
    assert np.linalg.norm(params) == pytest.approx(1.0)


# ---------------------------------------------------------------------------
# Lines, planes, circles, spheres
# ---------------------------------------------------------------------------


def test_line_through_two_points():
    fitter = HyperplaneFitter(2)
    line = fitter.fit_minimal(np.array([[0.0, 1.0], [2.0, 3.0]]))
    assert_same_up_to_scale(line, [1.0, -1.0, 1.0])
    assert fitter.residuals(line, np.array([[5.0, 6.0], [0.0, 0.0]])) == pytest.approx([0.0, np.sqrt(0.5)])


def test_line_through_coincident_points_is_degenerate():
    assert HyperplaneFitter(2).fit_minimal(np.array([[3.0, 1.0], [3.0, 1.0]])) is None


def test_plane_through_points(rng):
    normal = random_unit_vectors(rng, 1, 3)[0]
    basis = np.linalg.svd(normal[None, :])[2][1:]
    pts = rng.uniform(-10, 10, size=(3, 2)) @ basis + 4.0 * normal
    plane = HyperplaneFitter(3).fit_minimal(pts)
    assert_same_up_to_scale(plane, np.append(normal, -4.0))


def test_plane_through_collinear_points_is_degenerate():
    pts = np.array([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0], [2.0, 2.0, 2.0]])
    assert HyperplaneFitter(3).fit_minimal(pts) is None


@pytest.mark.parametrize("dimension", [2, 3])
def test_sphere_through_points(dimension, rng):
    centre = rng.uniform(-20, 20, size=dimension)
    pts = centre + 7.5 * random_unit_vectors(rng, dimension + 1, dimension)
    fitter = SphereFitter(dimension)
    model = fitter.fit_minimal(pts)
    np.testing.assert_allclose(model, np.append(centre, 7.5), atol=1e-8)


def test_circle_through_collinear_points_is_degenerate():
    pts = np.array([[0.0, 0.0], [1.0, 1.0], [3.0, 3.0]])
    assert SphereFitter(2).fit_minimal(pts) is None


def test_sphere_signed_residuals():
    fitter = SphereFitter(2)
    model = np.array([0.0, 0.0, 2.0])
    pts = np.array([[1.0, 0.0], [0.0, 5.0]])
    np.testing.assert_allclose(fitter.refine_residuals(model, pts), [-1.0, 3.0])
    np.testing.assert_allclose(fitter.residuals(model, pts), [1.0, 3.0])


# ---------------------------------------------------------------------------
# Conics and quadrics
# ---------------------------------------------------------------------------


def test_conic_through_five_points(rng):
    C, sample = ellipse_conic(np.array([4.0, -2.0]), np.array([6.0, 2.5]), 0.7)
    pts = sample(rng.uniform(0, 2 * np.pi, size=20))
    fitter = LocusFitter(2)
    model = fitter.fit_minimal(pts[:5])
    assert_same_up_to_scale(model, C)
    assert np.all(fitter.residuals(model, pts) < 1e-8)
    assert fitter.to_params(model).shape == (6,)


def test_conic_through_collinear_points_is_degenerate():
    pts = np.column_stack([np.arange(5.0), 2.0 * np.arange(5.0) + 1.0])
    assert LocusFitter(2).fit_minimal(pts) is None


def test_dual_conic_from_tangent_lines(rng):
    C, sample = ellipse_conic(np.array([1.0, 1.0]), np.array([3.0, 1.0]), -0.4)
    pts = sample(rng.uniform(0, 2 * np.pi, size=12))
    lines = np.hstack([pts, np.ones((12, 1))]) @ C
    fitter = LocusFitter(2, dual=True)
    model = fitter.fit_minimal(lines[:5])
    assert_same_up_to_scale(model, np.linalg.inv(C), atol=1e-7)
    assert np.all(fitter.residuals(model, lines) < 1e-8)


def test_quadric_through_nine_points(rng):
    Q, sample = ellipsoid_quadric(np.array([0.5, 2.0, -1.0]), np.array([4.0, 2.0, 1.0]), np.array([0.1, 0.4, -0.2]))
    pts = sample(random_unit_vectors(rng, 30, 3))
    fitter = LocusFitter(3)
    model = fitter.fit_minimal(pts[:9])
    assert_same_up_to_scale(model, Q, atol=1e-6)
    assert np.all(fitter.residuals(model, pts) < 1e-8)


def test_dual_quadric_from_tangent_planes(rng):
    Q, sample = ellipsoid_quadric(np.array([0.0, 1.0, 0.0]), np.array([2.0, 3.0, 1.0]), np.array([0.3, 0.0, 0.1]))
    pts = sample(random_unit_vectors(rng, 15, 3))
    planes = np.hstack([pts, np.ones((15, 1))]) @ Q
    model = LocusFitter(3, dual=True).fit_minimal(planes[:9])
    assert_same_up_to_scale(model, np.linalg.inv(Q), atol=1e-6)


# ---------------------------------------------------------------------------
# Transformations
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("dimension", [2, 3])
def test_affine_from_points(dimension, rng):
    T = _affine_matrix(rng, dimension)
    x0 = rng.uniform(-50, 50, size=(dimension + 1, dimension))
    fitter = AffinePointFitter(dimension)
    model = fitter.fit_minimal(x0, apply_transform(T, x0))
    np.testing.assert_allclose(model, T, atol=1e-8)
    assert fitter.to_params(model).shape == (dimension * (dimension + 1),)


def test_affine_from_collinear_points_is_degenerate():
    x0 = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]])
    assert AffinePointFitter(2).fit_minimal(x0, x0 + 1.0) is None


@pytest.mark.parametrize("dimension", [2, 3])
def test_affine_from_hyperplanes(dimension, rng):
    T = _affine_matrix(rng, dimension)
    h0 = random_unit_vectors(rng, 10, dimension + 1)
    h1 = transform_hyperplanes(T, h0) * rng.uniform(0.5, 2.0, size=(10, 1))
    fitter = AffineHyperplaneFitter(dimension)
    model = fitter.fit_minimal(h0[: dimension + 1], h1[: dimension + 1])
    np.testing.assert_allclose(model, T, atol=1e-7)
    assert np.all(fitter.residuals(model, h0, h1) < 1e-10)


@pytest.mark.parametrize("dimension", [2, 3])
def test_projective_from_points(dimension, rng):
    H = _projective_matrix(rng, dimension)
    fitter = ProjectivePointFitter(dimension)
    x0 = rng.uniform(-50, 50, size=(20, dimension))
    x1 = apply_transform(H, x0)
    model = fitter.fit_minimal(x0[: fitter.sample_size], x1[: fitter.sample_size])
    assert_same_up_to_scale(model, H, atol=1e-7)
    assert np.all(fitter.residuals(model, x0, x1) < 1e-6)


def test_projective_from_collinear_points_is_degenerate():
    x0 = np.column_stack([np.arange(4.0), np.arange(4.0)])
    x1 = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    assert ProjectivePointFitter(2).fit_minimal(x0, x1) is None


@pytest.mark.parametrize("dimension", [2, 3])
def test_projective_from_hyperplanes(dimension, rng):
    H = _projective_matrix(rng, dimension)
    fitter = ProjectiveHyperplaneFitter(dimension)
    h0 = random_unit_vectors(rng, 12, dimension + 1)
    h1 = transform_hyperplanes(H, h0)
    model = fitter.fit_minimal(h0[: fitter.sample_size], h1[: fitter.sample_size])
    assert_same_up_to_scale(model, H, atol=1e-7)
    assert np.all(alignment_errors(model, h0, h1) < 1e-10)


def test_transform_hyperplanes_singular_matrix():
    out = transform_hyperplanes(np.zeros((3, 3)), np.ones((2, 3)))
    assert np.isnan(out).all()


@pytest.mark.parametrize("dimension", [2, 3])
@pytest.mark.parametrize("with_scale", [False, True])
def test_similarity_closed_form(dimension, with_scale, rng):
    T = _euclidean_matrix(rng, dimension, scale=2.5 if with_scale else 1.0)
    x0 = rng.uniform(-50, 50, size=(10, dimension))
    x1 = apply_transform(T, x0)
    model = fit_similarity(x0, x1, with_scale=with_scale)
    np.testing.assert_allclose(model, T, atol=1e-8)
    assert np.all(transfer_errors(model, x0, x1) < 1e-8)


@pytest.mark.parametrize("dimension", [2, 3])
def test_metric_weak_minimum_sample(dimension, rng):
    fitter = MetricFitter(dimension, with_scale=True, weak_minimum_size=True)
    T = _euclidean_matrix(rng, dimension, scale=0.8)
    x0 = rng.uniform(-50, 50, size=(fitter.sample_size, dimension))
    np.testing.assert_allclose(fitter.fit_minimal(x0, apply_transform(T, x0)), T, atol=1e-8)


def test_similarity_from_coincident_points_is_degenerate():
    x0 = np.ones((3, 2))
    assert fit_similarity(x0, x0, with_scale=False) is None


@pytest.mark.parametrize(
    "dimension, with_scale, size",
    [(2, False, 3), (2, True, 4), (3, False, 6), (3, True, 7)],
)
def test_metric_parameterisation(dimension, with_scale, size, rng):
    fitter = MetricFitter(dimension, with_scale=with_scale)
    T = _euclidean_matrix(rng, dimension, scale=1.3 if with_scale else 1.0)
    params = fitter.to_params(T)
    assert params.shape == (size,)
    np.testing.assert_allclose(fitter.from_params(params), T, atol=1e-10)


def test_metric_3d_covariance_params_use_quaternion(rng):
    fitter = MetricFitter(3, with_scale=True)
    T = _euclidean_matrix(rng, 3, scale=2.0)
    params = fitter.covariance_params(T)
    assert params.shape == (8,)
    assert params[0] == pytest.approx(2.0)
    assert np.linalg.norm(params[1:5]) == pytest.approx(1.0)


def test_metric_rejects_non_positive_scale():
    assert MetricFitter(2, with_scale=True).from_params(np.array([0.1, -1.0, 0.0, 0.0])) is None


def test_rvec_to_quaternion_matches_rotation():
    rvec = np.array([0.0, 0.0, np.pi / 2])
    np.testing.assert_allclose(rvec_to_quaternion(rvec), [np.cos(np.pi / 4), 0.0, 0.0, np.sin(np.pi / 4)])
    np.testing.assert_allclose(rvec_to_rotation(rvec) @ [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], atol=1e-12)
