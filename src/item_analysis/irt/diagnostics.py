"""
Diagnostic utilities for IRT model validation.

Provides functions to compare empirical item scores against
model-predicted scores.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from item_analysis.core.data_models import ScoreMatrix
from item_analysis.irt.estimation.data_models import IRTEstimationResult


@dataclass
class ExpectedScoreComparison:
    """Comparison of empirical vs model mean item scores.

    One entry per item; only persons who responded to the item count.
    """

    item_idx: NDArray[np.int64]
    empirical_mean: NDArray[np.float64]
    model_mean: NDArray[np.float64]
    difference: NDArray[np.float64]

    @property
    def max_abs_difference(self) -> float:
        if len(self.difference) == 0:
            return 0.0
        return float(np.nanmax(np.abs(self.difference)))


def compute_expected_score_comparison(
    data: ScoreMatrix,
    model: IRTEstimationResult,
    abilities: NDArray[np.float64],
) -> ExpectedScoreComparison:
    """Compare empirical vs model mean scores per item.

    Args:
        data: Score matrix with observed scores
        model: Fitted IRT model
        abilities: Estimated ability values for each person

    Returns:
        ExpectedScoreComparison with empirical and model means per item
    """
    empirical_means: list[float] = []
    model_means: list[float] = []

    valid_mask = data.valid_mask
    for item_idx, item_params in enumerate(model.item_parameters):
        responded = valid_mask[:, item_idx]
        if not responded.any():
            empirical_means.append(np.nan)
            model_means.append(np.nan)
            continue

        item_scores = data.scores[responded, item_idx].astype(np.float64)
        expected = item_params.expected_score(abilities[responded])

        empirical_means.append(float(np.mean(item_scores)))
        model_means.append(float(np.mean(expected)))

    empirical_arr = np.array(empirical_means, dtype=np.float64)
    model_arr = np.array(model_means, dtype=np.float64)

    return ExpectedScoreComparison(
        item_idx=np.arange(len(model.item_parameters), dtype=np.int64),
        empirical_mean=empirical_arr,
        model_mean=model_arr,
        difference=empirical_arr - model_arr,
    )
