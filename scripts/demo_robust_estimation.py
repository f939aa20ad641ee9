import logging

import numpy as np

from robustgeo import (
    Affine2DFromPointsEstimator, CircleEstimator, NotReadyError, RobustEstimatorError, RobustEstimatorMethod,
)
from robustgeo.models import apply_transform


class PrintingListener:
    def on_estimate_start(self, estimator) -> None:
        print(f"  [{estimator.method.name}] start")

    def on_estimate_end(self, estimator) -> None:
        print(f"  [{estimator.method.name}] end")

    def on_estimate_next_iteration(self, estimator, iteration: int) -> None:
        pass

    def on_estimate_progress_change(self, estimator, progress: float) -> None:
        print(f"  [{estimator.method.name}] progress {progress:.0%}")


def make_affine_matches(rng: np.random.Generator) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    # True affine transform
    T_true = np.array(
        [[1.05, 0.02, 15.0],
         [-0.01, 0.98, -8.0],
         [0.0,  0.0,  1.0]],
        dtype=np.float64,
    )

    # Inliers with pixel noise
    n_in = 200
    pts0 = rng.uniform([0, 0], [640, 480], size=(n_in, 2))
    pts1 = apply_transform(T_true, pts0) + rng.normal(0.0, 0.8, size=(n_in, 2))

    # Outliers (wrong matches)
    n_out = 80
    o0 = rng.uniform([0, 0], [640, 480], size=(n_out, 2))
    o1 = rng.uniform([0, 0], [640, 480], size=(n_out, 2))

    # Matching scores: good matches tend to score higher
    scores = np.concatenate([rng.uniform(0.5, 1.0, n_in), rng.uniform(0.0, 0.7, n_out)])
    return T_true, np.vstack([pts0, o0]), np.vstack([pts1, o1]), scores


def demo_affine(rng: np.random.Generator) -> None:
    T_true, pts0, pts1, scores = make_affine_matches(rng)
    print("T_true:\n", T_true)

    for method in RobustEstimatorMethod:
        estimator = Affine2DFromPointsEstimator(
            pts0,
            pts1,
            method=method,
            quality_scores=scores,
            threshold=3.0,
            stop_threshold=0.5,
            keep_covariance=True,
            listener=PrintingListener(),
            progress_delta=0.25,
            rng=42,
        )
        try:
            T_est = estimator.estimate()
        except (NotReadyError, RobustEstimatorError) as exc:
            print(f"{method.name} failed: {exc}")
            continue

        data = estimator.inliers_data
        print(f"{method.name} T_est:\n", np.round(T_est, 4))
        print("num_inliers:", data.num_inliers, "/", pts0.shape[0])
        if data.estimated_threshold is not None:
            print("estimated_threshold:", round(data.estimated_threshold, 4))
        if estimator.covariance is not None:
            print("parameter std:", np.round(np.sqrt(np.diag(estimator.covariance)), 5))


def demo_circle(rng: np.random.Generator) -> None:
    centre, radius = np.array([120.0, -40.0]), 35.0
    t = rng.uniform(0.0, 2.0 * np.pi, 150)
    pts = centre + radius * np.column_stack([np.cos(t), np.sin(t)]) + rng.normal(0.0, 0.3, (150, 2))
    pts[:50] = rng.uniform(-200, 200, size=(50, 2))

    estimator = CircleEstimator(pts, method=RobustEstimatorMethod.MSAC, threshold=1.0, rng=0)
    cx, cy, r = estimator.estimate()
    print(f"circle true: c=({centre[0]:.2f}, {centre[1]:.2f}) r={radius:.2f}")
    print(f"circle est:  c=({cx:.2f}, {cy:.2f}) r={r:.2f}  inliers={estimator.inliers_data.num_inliers}/150")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    rng = np.random.default_rng(0)

    demo_affine(rng)
    print()
    demo_circle(rng)


if __name__ == "__main__":
    main()
