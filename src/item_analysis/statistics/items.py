"""
Item-level statistics: exposures, average score and score-theta
correlation.
"""

import logging

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from item_analysis.core.data_models import (
    ItemType,
    ResponseDataset,
    ScoreMatrix,
)
from item_analysis.core.exceptions import UndefinedStatisticError
from item_analysis.statistics.correlation import (
    point_biserial_correlation,
    polyserial_correlation,
)
from item_analysis.statistics.data_models import (
    AVERAGE_CORRECT,
    ITEM_COLUMNS,
    ITEM_ID,
    ITEM_TYPE,
    MAX_SCORE,
    NUMBER_EXPOSURES,
    THETA_SCORE_CORRELATION,
)

logger = logging.getLogger(__name__)


def theta_score_correlation(
    item_type: ItemType,
    scores: NDArray[np.integer],
    theta: NDArray[np.float64],
) -> float:
    """
    Correlate item scores with theta; NaN when undefined.

    Dichotomous scores use the point-biserial correlation, polytomous
    scores the polyserial correlation.
    """
    try:
        if item_type == ItemType.DICHOTOMOUS:
            return point_biserial_correlation(scores > 0, theta)
        return polyserial_correlation(theta, scores)
    except UndefinedStatisticError as e:
        logger.debug(f"Score-theta correlation undefined: {e}")
        return np.nan


def compute_item_statistics(
    dataset: ResponseDataset,
    scores: ScoreMatrix,
    theta: NDArray[np.float64],
) -> pd.DataFrame:
    """
    Compute one row of statistics per item.

    Args:
        dataset: Raw responses with item metadata.
        scores: Scored responses aligned with dataset.
        theta: Ability estimate per person, shape (n_persons,).

    Returns:
        DataFrame with columns item_id, item_type, max_score,
        number_exposures, average_correct, theta_score_correlation.
    """
    valid_mask = scores.valid_mask
    rows: list[dict[str, object]] = []

    for item_idx, item in enumerate(dataset.items):
        responded = valid_mask[:, item_idx]
        item_scores = scores.scores[responded, item_idx].astype(np.int64)
        n_exposures = int(responded.sum())
        max_score = int(scores.max_scores[item_idx])

        if n_exposures > 0:
            average_correct = float(np.mean(item_scores)) / max_score
        else:
            average_correct = np.nan

        rows.append(
            {
                ITEM_ID: item.item_id,
                ITEM_TYPE: item.item_type.value,
                MAX_SCORE: max_score,
                NUMBER_EXPOSURES: n_exposures,
                AVERAGE_CORRECT: average_correct,
                THETA_SCORE_CORRELATION: theta_score_correlation(
                    item.item_type, item_scores, theta[responded]
                ),
            }
        )

    return pd.DataFrame(rows, columns=ITEM_COLUMNS)
