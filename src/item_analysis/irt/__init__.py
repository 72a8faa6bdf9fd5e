"""
IRT (Item Response Theory) module.

This module provides:
- PCM item parameters (Rasch for dichotomous items)
- Estimation infrastructure for fitting the model to a score matrix
- Ability estimation
- Diagnostic utilities for model validation
"""

from item_analysis.irt.diagnostics import (
    ExpectedScoreComparison,
    compute_expected_score_comparison,
)
from item_analysis.irt.estimation.estimator import RaschEstimator
from item_analysis.irt.estimation.parameters import PCMItemParameters
from item_analysis.irt.latent_traits import LatentTraitFit, fit_latent_traits

__all__ = [
    "ExpectedScoreComparison",
    "LatentTraitFit",
    "PCMItemParameters",
    "RaschEstimator",
    "compute_expected_score_comparison",
    "fit_latent_traits",
]
