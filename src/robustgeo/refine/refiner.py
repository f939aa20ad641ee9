"""
Post-consensus refinement.

Given the consensus champion and its inliers, minimise the fitter's signed
residual vector over the model parameters with scipy.optimize.least_squares:

- "lm" (Levenberg-Marquardt) when there are at least as many residuals as
  parameters, "trf" otherwise (lm cannot handle under-determined systems)
- the result is rejected (RefinementError) when the solver fails, produces
  non-finite parameters or increases the cost

Optionally returns the covariance of the refined model, expressed in the
fitter's covariance_params representation (see covariance.py).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar
import logging

import numpy as np
from scipy.optimize import least_squares

from ..ransac.errors import RefinementError
from ..ransac.types import FloatArray, ModelFitter
from .covariance import numeric_jacobian, parameter_covariance, propagate_covariance

M = TypeVar("M")
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefinementResult(Generic[M]):
    model: M                            # refined model
    covariance: Optional[FloatArray]    # None unless requested
    initial_cost: float                 # 0.5 * sum(r^2) before refinement
    cost: float                         # 0.5 * sum(r^2) after refinement


class Refiner(Generic[M]):
    def __init__(self, fitter: ModelFitter[M], *, max_evaluations: Optional[int] = None):
        self.fitter = fitter
        self.max_evaluations = max_evaluations

    def _model(self, params: FloatArray) -> M:
        model = self.fitter.from_params(params)
        if model is None:
            raise RefinementError("Parameters do not describe a valid model")
        return model

    def _residuals(self, params: FloatArray, samples: tuple[FloatArray, ...]) -> FloatArray:
        return np.asarray(self.fitter.refine_residuals(self._model(params), *samples), dtype=np.float64)

    def refine(
            self,
            model: M,
            samples: tuple[FloatArray, ...],
            *,
            sigma: float = 1.0,
            keep_covariance: bool = False,
    ) -> RefinementResult[M]:
        """
        Refine ``model`` over ``samples`` (inliers only).

        sigma: residual standard deviation used to scale the covariance.

        Raises RefinementError if no better valid model is found.
        """
        x0 = np.asarray(self.fitter.to_params(model), dtype=np.float64)
        r0 = self._residuals(x0, samples)
        if not (np.isfinite(x0).all() and np.isfinite(r0).all()):
            raise RefinementError("Initial model gives non-finite residuals")
        initial_cost = 0.5 * float(r0 @ r0)

        method = "lm" if r0.size >= x0.size else "trf"
        try:
            result = least_squares(
                fun=self._residuals,
                x0=x0,
                method=method,
                max_nfev=self.max_evaluations,
                args=(samples,),
            )
        except (ValueError, np.linalg.LinAlgError) as exc:
            raise RefinementError(f"least_squares failed: {exc}") from exc

        if not result.success or not np.isfinite(result.x).all():
            raise RefinementError(f"least_squares did not converge: {result.message}")

        refined = self._model(result.x)
        cost = float(result.cost)
        # allow round-off when the champion was already optimal
        if not np.isfinite(cost) or cost > initial_cost * (1.0 + 1e-9) + 1e-300:
            raise RefinementError(f"Refinement increased the cost ({initial_cost:.6g} -> {cost:.6g})")

        logger.debug("Refined with %s: cost %.6g -> %.6g (%d evaluations)", method, initial_cost, cost, result.nfev)

        covariance = None
        if keep_covariance:
            covariance = self.covariance(result.x, samples, sigma=sigma)

        return RefinementResult(model=refined, covariance=covariance, initial_cost=initial_cost, cost=cost)

    def covariance(self, params: FloatArray, samples: tuple[FloatArray, ...], *, sigma: float) -> FloatArray:
        """Covariance of the model described by ``params`` in covariance_params form."""
        J = numeric_jacobian(lambda p: self._residuals(p, samples), params)
        cov_params = parameter_covariance(J, sigma)

        G = numeric_jacobian(lambda p: self.fitter.covariance_params(self._model(p)), params)
        cov = propagate_covariance(cov_params, G)
        if not np.isfinite(cov).all():
            raise RefinementError("Covariance is not finite")
        return cov
