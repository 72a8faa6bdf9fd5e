"""
Person-by-quadrature likelihood computations shared by the EM estimator
and ability estimation.
"""

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from item_analysis.core.data_models import ScoreMatrix
from item_analysis.irt.estimation.parameters import PCMItemParameters


def compute_item_log_likelihood(
    scores: NDArray[np.int8],
    params: PCMItemParameters,
    theta: NDArray[np.float64],
    missing_mask: NDArray[np.bool_],
) -> NDArray[np.float64]:
    """
    Compute log-likelihood contribution of one item.

    Args:
        scores: Scores on this item, shape (n_persons,).
        params: PCM item parameters.
        theta: Quadrature points, shape (n_quadrature,).
        missing_mask: Boolean mask where True = missing.

    Returns:
        Log-likelihood matrix, shape (n_persons, n_quadrature).
        Missing responses contribute 0.
    """
    n_persons = len(scores)
    n_quad = len(theta)

    # Shape: (n_quadrature, n_categories)
    log_probs = np.log(params.compute_probabilities(theta) + 1e-300)

    log_lik = np.zeros((n_persons, n_quad), dtype=np.float64)

    # log_probs[:, valid_scores] gives (n_quad, n_valid); transpose it
    valid_mask = ~missing_mask
    valid_scores = scores[valid_mask].astype(np.int64)
    log_lik[valid_mask, :] = log_probs[:, valid_scores].T

    return log_lik


def compute_posteriors(
    data: ScoreMatrix,
    params: Sequence[PCMItemParameters],
    theta: NDArray[np.float64],
    weights: NDArray[np.float64],
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Posterior distribution over quadrature points for every person.

    For each person, compute:
        P(theta_q | scores) ∝ P(scores | theta_q) * P(theta_q)

    where P(theta_q) is the quadrature weight (prior).

    Args:
        data: Score matrix.
        params: Item parameters, one per column.
        theta: Quadrature points, shape (n_quadrature,).
        weights: Quadrature weights, shape (n_quadrature,).

    Returns:
        Tuple of (posteriors, log_marginal): posteriors has shape
        (n_persons, n_quadrature) and log_marginal holds each person's
        marginal log-likelihood, shape (n_persons,).
    """
    log_lik = np.zeros((data.n_persons, len(theta)), dtype=np.float64)

    # Add log prior (quadrature weights)
    log_lik += np.log(weights + 1e-300)[np.newaxis, :]

    missing_mask = data.missing_mask
    for item_idx, item_params in enumerate(params):
        log_lik += compute_item_log_likelihood(
            data.scores[:, item_idx],
            item_params,
            theta,
            missing_mask[:, item_idx],
        )

    # Log-sum-exp for numerical stability
    max_log_lik = np.max(log_lik, axis=1, keepdims=True)
    posteriors = np.exp(log_lik - max_log_lik)
    row_sums = posteriors.sum(axis=1, keepdims=True)
    posteriors = posteriors / (row_sums + 1e-300)

    log_marginal: NDArray[np.float64] = max_log_lik[:, 0] + np.log(
        row_sums[:, 0] + 1e-300
    )
    return posteriors, log_marginal
