"""End-to-end behaviour of the public estimators on contaminated synthetic data."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from robustgeo import (
    Affine2DFromPointsEstimator, CoordinatesType, Euclidean2DEstimator, EstimatorConfig, Line2DEstimator,
    LockedError, Metric3DEstimator, NotReadyError, Point2DEstimator, Point3DEstimator, RobustEstimatorError,
    RobustEstimatorMethod,
)
from robustgeo.estimators.config import LINE2D_DEFAULTS
from robustgeo.models import apply_transform

from synthetic import CASES, CASES_BY_NAME, _euclidean_matrix, _point2d, build, quality_scores_for

ALL_METHODS = list(RobustEstimatorMethod)
SCORED_METHODS = [m for m in ALL_METHODS if m.uses_quality_scores]
UNSCORED_METHODS = [m for m in ALL_METHODS if not m.uses_quality_scores]


def _ids(cases):
    return [c.name for c in cases]


# ---------------------------------------------------------------------------
# Recovery
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("method", ALL_METHODS, ids=lambda m: m.name)
@pytest.mark.parametrize("case", CASES, ids=_ids(CASES))
def test_recovers_model_despite_outliers(case, method, rng):
    estimator, samples, inliers, truth = build(case, method, rng)

    model = estimator.estimate()

    assert model.shape == estimator.model_shape
    residuals = estimator._make_fitter().residuals(model, *samples)
    assert np.all(residuals[inliers] < case.tol)

    data = estimator.inliers_data
    np.testing.assert_array_equal(data.inliers, inliers)
    assert data.num_inliers == int(inliers.sum())
    assert data.residuals.shape == (inliers.shape[0],)
    if method.uses_median:
        assert data.estimated_threshold is not None
    else:
        assert data.estimated_threshold is None
    assert estimator.covariance is None


@pytest.mark.parametrize("case", [CASES_BY_NAME[n] for n in ("point2d", "point3d", "circle", "sphere")], ids=lambda c: c.name)
def test_recovered_parameters_match_truth(case, rng):
    estimator, _, _, truth = build(case, RobustEstimatorMethod.PROMEDS, rng)
    np.testing.assert_allclose(estimator.estimate(), truth, atol=1e-6)


@pytest.mark.parametrize("case", CASES, ids=_ids(CASES))
def test_covariance_size(case, rng):
    estimator, _, _, _ = build(case, RobustEstimatorMethod.RANSAC, rng, keep_covariance=True)
    estimator.estimate()
    cov = estimator.covariance
    assert cov.shape == (case.covariance_size, case.covariance_size)
    assert np.isfinite(cov).all()
    np.testing.assert_allclose(cov, cov.T)


@pytest.mark.parametrize("estimator_cls, size", [(Point2DEstimator, 3), (Point3DEstimator, 4)])
def test_homogeneous_point_covariance(estimator_cls, size, rng):
    case = CASES_BY_NAME["point2d" if size == 3 else "point3d"]
    estimator, _, _, _ = build(
        case, RobustEstimatorMethod.MSAC, rng,
        keep_covariance=True, refinement_coordinates_type=CoordinatesType.HOMOGENEOUS,
    )
    assert isinstance(estimator, estimator_cls)
    estimator.estimate()
    assert estimator.covariance.shape == (size, size)


def test_no_covariance_without_refinement(rng):
    estimator, _, inliers, _ = build(
        CASES_BY_NAME["line2d"], RobustEstimatorMethod.RANSAC, rng, refine_result=False, keep_covariance=True,
    )
    estimator.estimate()
    assert estimator.covariance is None
    assert estimator.inliers_data.num_inliers == int(inliers.sum())


@pytest.mark.parametrize("seed", range(10))
def test_point_from_many_lines_with_lmeds(listener, seed):
    (lines,), _, point = _point2d(np.random.default_rng(seed), 600)
    estimator = Point2DEstimator(
        lines,
        method=RobustEstimatorMethod.LMEDS,
        stop_threshold=1e-6,
        listener=listener,
        rng=seed,
    )

    result = estimator.estimate()

    np.testing.assert_allclose(result, point, atol=5e-6)
    assert listener.start == 1
    assert listener.end == 1
    assert listener.iterations >= 1
    assert listener.lock_violations == []


@pytest.mark.parametrize("seed", range(10))
def test_point_from_many_lines_with_promeds(seed):
    data_rng = np.random.default_rng(seed)
    (lines,), inliers, point = _point2d(data_rng, 600)
    estimator = Point2DEstimator(
        lines,
        method=RobustEstimatorMethod.PROMEDS,
        quality_scores=data_rng.uniform(size=600),
        stop_threshold=1e-6,
        rng=seed,
    )

    result = estimator.estimate()

    np.testing.assert_allclose(result, point, atol=5e-6)
    np.testing.assert_array_equal(estimator.inliers_data.inliers, inliers)


# ---------------------------------------------------------------------------
# Listener and lock
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("method", ALL_METHODS, ids=lambda m: m.name)
@pytest.mark.parametrize("case", CASES, ids=_ids(CASES))
def test_listener_sees_locked_estimator(case, method, listener, rng):
    estimator, _, _, _ = build(case, method, rng, listener=listener, progress_delta=0.01)
    assert not estimator.is_locked

    estimator.estimate()

    assert listener.lock_violations == []
    assert listener.start == 1
    assert listener.end == 1
    assert listener.iterations >= 1
    assert listener.progress == sorted(listener.progress)
    assert all(0.0 < p <= 1.0 for p in listener.progress)
    assert not estimator.is_locked


def test_lock_released_after_failure(rng):
    # coincident points: every minimal sample is degenerate
    estimator = Line2DEstimator(np.ones((10, 2)), method="ransac", max_iterations=20, rng=0)
    with pytest.raises(RobustEstimatorError):
        estimator.estimate()
    assert not estimator.is_locked
    assert estimator.inliers_data is None


@pytest.mark.parametrize(
    "case_name, mutate",
    [
        ("line2d", lambda e: setattr(e, "points", np.zeros((5, 2)))),
        ("point2d", lambda e: setattr(e, "lines", np.zeros((5, 3)))),
        ("point2d", lambda e: setattr(e, "refinement_coordinates_type", CoordinatesType.HOMOGENEOUS)),
        ("euclidean2d", lambda e: e.set_points(np.zeros((5, 2)), np.zeros((5, 2)))),
        ("euclidean2d", lambda e: setattr(e, "weak_minimum_size_allowed", True)),
        ("affine2d_lines", lambda e: e.set_lines(np.zeros((5, 3)), np.zeros((5, 3)))),
    ],
)
def test_family_setters_raise_when_locked(case_name, mutate, rng):
    raised = []

    class MutatingListener:
        def on_estimate_start(self, estimator):
            try:
                mutate(estimator)
            except LockedError:
                raised.append(True)

        def on_estimate_end(self, estimator):
            pass

        def on_estimate_next_iteration(self, estimator, iteration):
            pass

        def on_estimate_progress_change(self, estimator, progress):
            pass

    estimator, samples, _, _ = build(
        CASES_BY_NAME[case_name], RobustEstimatorMethod.RANSAC, rng, listener=MutatingListener(),
    )
    estimator.estimate()
    assert raised == [True]
    assert estimator.num_samples == samples[0].shape[0]


# ---------------------------------------------------------------------------
# Readiness and quality scores
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("method", SCORED_METHODS, ids=lambda m: m.name)
def test_scored_methods_need_quality_scores(method, rng):
    case = CASES_BY_NAME["line2d"]
    (pts,), inliers, _ = case.make(rng, 50)
    estimator = Line2DEstimator(pts, method=method, rng=0, **case.settings)

    assert estimator.requires_quality_scores
    assert not estimator.is_ready
    with pytest.raises(NotReadyError):
        estimator.estimate()

    estimator.quality_scores = quality_scores_for(rng, inliers)
    assert estimator.is_ready
    estimator.estimate()


@pytest.mark.parametrize("method", SCORED_METHODS, ids=lambda m: m.name)
def test_quality_scores_length_checked(method, rng):
    estimator = Line2DEstimator(rng.normal(size=(20, 2)), method=method)
    with pytest.raises(ValueError):
        estimator.quality_scores = np.ones(1)
    with pytest.raises(ValueError):
        estimator.quality_scores = np.ones(19)
    estimator.quality_scores = np.ones(20)
    assert estimator.is_ready


@pytest.mark.parametrize("method", UNSCORED_METHODS, ids=lambda m: m.name)
def test_quality_scores_ignored_by_unscored_methods(method, rng):
    estimator = Line2DEstimator(rng.normal(size=(20, 2)), method=method, quality_scores=np.ones(3))
    assert not estimator.requires_quality_scores
    assert estimator.quality_scores is None
    assert estimator.is_ready


def test_not_ready_without_samples():
    estimator = Line2DEstimator(method=RobustEstimatorMethod.MSAC)
    assert not estimator.is_ready
    assert estimator.num_samples == 0
    assert estimator.inliers_data is None
    assert estimator.covariance is None
    with pytest.raises(NotReadyError):
        estimator.estimate()


# ---------------------------------------------------------------------------
# Samples
# ---------------------------------------------------------------------------


def test_samples_kept_by_reference(rng):
    pts = rng.normal(size=(10, 2))
    estimator = Line2DEstimator(pts, method="ransac")
    assert estimator.points is pts
    assert estimator.samples is pts

    other = rng.normal(size=(12, 2))
    estimator.points = other
    assert estimator.samples is other
    assert estimator.num_samples == 12


def test_correspondences_kept_by_reference(rng):
    x0, x1 = rng.normal(size=(6, 2)), rng.normal(size=(6, 2))
    estimator = Affine2DFromPointsEstimator(method="msac")
    estimator.set_points(x0, x1)
    assert estimator.input_points is x0
    assert estimator.output_points is x1
    assert estimator.inputs is x0


@pytest.mark.parametrize(
    "make",
    [
        lambda: Line2DEstimator(np.zeros((1, 2))),
        lambda: Line2DEstimator(np.zeros((5, 3))),
        lambda: Line2DEstimator(np.zeros(5)),
        lambda: Point3DEstimator(np.zeros((2, 4))),
        lambda: Affine2DFromPointsEstimator(np.zeros((5, 2)), np.zeros((4, 2))),
        lambda: Affine2DFromPointsEstimator(np.zeros((5, 2)), None),
        lambda: Affine2DFromPointsEstimator(np.zeros((2, 2)), np.zeros((2, 2))),
        lambda: Metric3DEstimator(np.zeros((3, 3)), np.zeros((3, 3))),
    ],
)
def test_invalid_samples_rejected(make):
    with pytest.raises(ValueError):
        make()


def test_invalid_samples_leave_previous_ones(rng):
    pts = rng.normal(size=(10, 2))
    estimator = Line2DEstimator(pts)
    with pytest.raises(ValueError):
        estimator.points = np.zeros((1, 2))
    assert estimator.points is pts


def test_weak_minimum_size(rng):
    T = _euclidean_matrix(rng, 2)
    x0 = rng.uniform(-50, 50, size=(2, 2))
    x1 = apply_transform(T, x0)

    with pytest.raises(ValueError):
        Euclidean2DEstimator(x0, x1)

    estimator = Euclidean2DEstimator(x0, x1, weak_minimum_size_allowed=True, method="ransac", threshold=1e-6, rng=0)
    assert estimator.minimum_size == 2
    np.testing.assert_allclose(estimator.estimate(), T, atol=1e-8)

    estimator.weak_minimum_size_allowed = False
    assert estimator.minimum_size == 3
    assert not estimator.is_ready


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "name, value",
    [
        ("threshold", 2.5),
        ("stop_threshold", 1e-4),
        ("inlier_factor", 2.0),
        ("confidence", 0.9),
        ("max_iterations", 123),
        ("progress_delta", 0.2),
        ("refine_result", False),
        ("keep_covariance", True),
    ],
)
def test_setters_round_trip(name, value):
    estimator = Line2DEstimator()
    setattr(estimator, name, value)
    assert getattr(estimator, name) == value
    assert getattr(estimator.config, name) == value


@pytest.mark.parametrize(
    "name, value",
    [
        ("threshold", 0.0),
        ("stop_threshold", -1.0),
        ("inlier_factor", 0.0),
        ("confidence", 1.5),
        ("max_iterations", 0),
        ("progress_delta", -0.01),
    ],
)
def test_setters_reject_invalid_values(name, value):
    estimator = Line2DEstimator()
    before = getattr(estimator, name)
    with pytest.raises(ValueError):
        setattr(estimator, name, value)
    assert getattr(estimator, name) == before


def test_family_defaults_and_overrides():
    estimator = Line2DEstimator()
    assert estimator.threshold == LINE2D_DEFAULTS.threshold
    assert estimator.stop_threshold == LINE2D_DEFAULTS.stop_threshold
    assert estimator.method is RobustEstimatorMethod.PROMEDS

    estimator = Line2DEstimator(config=EstimatorConfig.from_mapping({"threshold": 3.0}, LINE2D_DEFAULTS), confidence=0.5)
    assert estimator.threshold == 3.0
    assert estimator.confidence == 0.5

    with pytest.raises(ValueError):
        Line2DEstimator(treshold=1.0)
    with pytest.raises(ValueError):
        Line2DEstimator(method="bogus")


def test_config_property_is_a_copy():
    estimator = Line2DEstimator()
    cfg = estimator.config
    cfg.threshold = 99.0
    assert estimator.threshold != 99.0


# ---------------------------------------------------------------------------
# Output handling
# ---------------------------------------------------------------------------


def test_estimate_into_out_array(rng):
    estimator, _, _, _ = build(CASES_BY_NAME["conic"], RobustEstimatorMethod.MSAC, rng)
    out = np.empty((3, 3))
    assert estimator.estimate(out) is out
    assert np.linalg.norm(out) == pytest.approx(1.0)

    with pytest.raises(ValueError):
        estimator.estimate(np.empty(9))


def test_results_replaced_by_next_run(rng):
    case = CASES_BY_NAME["line2d"]
    estimator, _, _, _ = build(case, RobustEstimatorMethod.RANSAC, rng)
    estimator.estimate()
    first = estimator.inliers_data

    (pts,), inliers, _ = case.make(rng, 40)
    estimator.points = pts
    estimator.estimate()
    assert estimator.inliers_data is not first
    assert estimator.inliers_data.inliers.shape == (40,)


def test_failed_run_clears_previous_results(rng):
    estimator, _, _, _ = build(CASES_BY_NAME["line2d"], RobustEstimatorMethod.RANSAC, rng, keep_covariance=True)
    estimator.estimate()
    assert estimator.inliers_data is not None
    assert estimator.covariance is not None

    # coincident points: every minimal sample is degenerate
    estimator.points = np.ones((10, 2))
    estimator.max_iterations = 20
    with pytest.raises(RobustEstimatorError):
        estimator.estimate()
    assert estimator.inliers_data is None
    assert estimator.covariance is None


def test_refinement_failure_falls_back_with_warning(rng, caplog, monkeypatch):
    from robustgeo import RefinementError
    from robustgeo.refine import Refiner

    def fail(self, *args, **kwargs):
        raise RefinementError("forced")

    monkeypatch.setattr(Refiner, "refine", fail)
    estimator, samples, inliers, _ = build(
        CASES_BY_NAME["circle"], RobustEstimatorMethod.RANSAC, rng, keep_covariance=True,
    )
    with caplog.at_level(logging.WARNING, logger="robustgeo"):
        model = estimator.estimate()

    assert "refinement failed" in caplog.text
    assert estimator.covariance is None
    assert np.all(estimator._make_fitter().residuals(model, *samples)[inliers] < 1e-6)
