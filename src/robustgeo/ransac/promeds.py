"""
PROMedS: PROSAC's quality-ordered sampling and termination combined with
LMedS scoring, inlier-threshold estimation and stop threshold.
"""
from __future__ import annotations

from typing import TypeVar

from .lmeds import LMedSEngine
from .prosac import ProgressiveSamplingMixin
from .settings import RobustEstimatorMethod

M = TypeVar("M")


class PROMedSEngine(ProgressiveSamplingMixin, LMedSEngine[M]):
    method = RobustEstimatorMethod.PROMEDS
