"""
Ability estimation for IRT models.

This module provides Expected A Posteriori (EAP) ability estimation.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from item_analysis.core.data_models import ScoreMatrix
from item_analysis.irt.estimation.config import EstimationConfig
from item_analysis.irt.estimation.data_models import IRTEstimationResult
from item_analysis.irt.estimation.likelihood import compute_posteriors
from item_analysis.irt.estimation.quadrature import get_quadrature


@dataclass(frozen=True)
class AbilityEstimates:
    """
    Ability estimates for persons.

    Persons without any scored response have no estimate (NaN).

    Attributes:
        eap: Expected A Posteriori (posterior mean) estimates,
            shape (n_persons,).
        se: Standard errors (posterior standard deviation),
            shape (n_persons,).
    """

    eap: NDArray[np.float64]
    se: NDArray[np.float64]

    @property
    def n_persons(self) -> int:
        """Number of persons."""
        return len(self.eap)


def estimate_abilities_eap(
    data: ScoreMatrix,
    model: IRTEstimationResult,
    config: EstimationConfig | None = None,
) -> AbilityEstimates:
    """
    Estimate abilities using Expected A Posteriori (EAP) method.

    EAP estimates are the posterior mean of ability given the scores
    and estimated item parameters:
        θ_EAP = E[θ | scores] = Σ_q θ_q * P(θ_q | scores)

    Standard errors are the posterior standard deviation:
        SE = sqrt(E[θ² | scores] - (E[θ | scores])²)

    Args:
        data: Score matrix.
        model: Fitted IRT model with item parameters.
        config: Estimation configuration. Uses defaults if None.

    Returns:
        AbilityEstimates with EAP estimates and standard errors.
    """
    if config is None:
        config = EstimationConfig()

    quadrature = get_quadrature(config.quadrature)
    theta = quadrature.scaled_points(model.latent_sd / config.quadrature.std)

    posteriors, _ = compute_posteriors(
        data, model.item_parameters, theta, quadrature.weights
    )

    # EAP: posterior mean
    eap = posteriors @ theta

    # SE: posterior standard deviation
    variance = posteriors @ theta**2 - eap**2
    # Ensure non-negative (numerical precision)
    se = np.sqrt(np.maximum(variance, 0.0))

    unanswered = ~data.responded_mask
    eap[unanswered] = np.nan
    se[unanswered] = np.nan

    return AbilityEstimates(eap=eap, se=se)
