"""
IRT model estimation module.

This module provides infrastructure for estimating Rasch-family models
using Marginal Maximum Likelihood via the EM algorithm.

Key components:
- EstimationConfig: Configuration for estimation
- RaschEstimator: Partial credit / Rasch model estimator
- IRTEstimationResult: Output from estimation
- estimate_abilities_eap: EAP ability estimation
"""

from item_analysis.irt.estimation.abilities import (
    AbilityEstimates,
    estimate_abilities_eap,
)
from item_analysis.irt.estimation.config import EstimationConfig
from item_analysis.irt.estimation.data_models import IRTEstimationResult
from item_analysis.irt.estimation.enums import ConvergenceStatus
from item_analysis.irt.estimation.estimator import RaschEstimator
from item_analysis.irt.estimation.parameters import PCMItemParameters

__all__ = [
    "AbilityEstimates",
    "ConvergenceStatus",
    "EstimationConfig",
    "IRTEstimationResult",
    "PCMItemParameters",
    "RaschEstimator",
    "estimate_abilities_eap",
]
