"""
Latent trait estimation stage: fit the model, then score abilities.
"""

import logging
from dataclasses import dataclass

import numpy as np

from item_analysis.core.data_models import ScoreMatrix
from item_analysis.core.exceptions import ModelFitError
from item_analysis.irt.diagnostics import (
    ExpectedScoreComparison,
    compute_expected_score_comparison,
)
from item_analysis.irt.estimation.abilities import (
    AbilityEstimates,
    estimate_abilities_eap,
)
from item_analysis.irt.estimation.config import EstimationConfig
from item_analysis.irt.estimation.data_models import IRTEstimationResult
from item_analysis.irt.estimation.estimator import RaschEstimator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LatentTraitFit:
    """
    Fitted model, per-person abilities and model diagnostics.

    Attributes:
        model: Estimated item parameters and convergence information.
        abilities: Theta and standard error per person.
        diagnostics: Empirical vs model-expected mean scores per item.
    """

    model: IRTEstimationResult
    abilities: AbilityEstimates
    diagnostics: ExpectedScoreComparison


def fit_latent_traits(
    data: ScoreMatrix,
    config: EstimationConfig | None = None,
    rng: np.random.Generator | None = None,
) -> LatentTraitFit:
    """
    Fit the Rasch/PCM model and estimate each person's theta.

    Args:
        data: Score matrix.
        config: Estimation configuration. Uses defaults if None.
        rng: Random generator for starting values.

    Returns:
        LatentTraitFit for the converged model.

    Raises:
        ModelFitError: If the score matrix is degenerate or EM did not
            converge. No abilities are returned in that case.
    """
    config = config or EstimationConfig()

    estimator = RaschEstimator(config=config, rng=rng)
    model = estimator.fit(data)

    if not model.converged:
        raise ModelFitError(
            f"Estimation did not converge "
            f"({model.convergence_status.value} after "
            f"{model.n_iterations} iterations)"
        )

    abilities = estimate_abilities_eap(data, model, config)
    diagnostics = compute_expected_score_comparison(
        data, model, abilities.eap
    )
    logger.debug(
        f"Max |empirical - model| mean item score: "
        f"{diagnostics.max_abs_difference:.4f}"
    )

    return LatentTraitFit(
        model=model, abilities=abilities, diagnostics=diagnostics
    )
