"""
Least-squares refinement of consensus results and covariance estimation.
"""

from .covariance import numeric_jacobian, parameter_covariance, propagate_covariance
from .refiner import Refiner, RefinementResult

__all__ = [
    "numeric_jacobian", "parameter_covariance", "propagate_covariance",
    "Refiner", "RefinementResult",
]
