"""
Response scoring.

Dichotomous and polytomous items share one rule: treat the response and
the key as sets of selected symbols and award

    score = max(0, |response ∩ key| - |response \\ key|)

Exact-match scoring of single-symbol keys and partial credit on
multi-symbol keys both fall out of the same formula.
"""

import logging
from collections.abc import Collection

import numpy as np

from item_analysis.core.constants import MISSING_VALUE
from item_analysis.core.data_models import ResponseDataset, ScoreMatrix

logger = logging.getLogger(__name__)


def score_response(
    response: Collection[str] | None, key: Collection[str]
) -> int | None:
    """
    Score one response against an answer key.

    Args:
        response: Selected symbols, or None if the response is missing.
        key: Symbols of the correct response set.

    Returns:
        Score in [0, len(key)], or None for a missing response.
    """
    if response is None:
        return None

    selected = set(response)
    correct = set(key)
    hits = len(selected & correct)
    extras = len(selected - correct)
    return max(0, hits - extras)


def max_score(key: Collection[str]) -> int:
    """Score obtained when the response equals the key exactly."""
    return len(set(key))


def score_dataset(dataset: ResponseDataset) -> ScoreMatrix:
    """
    Score every response in a dataset.

    Args:
        dataset: Raw responses with item metadata.

    Returns:
        ScoreMatrix with MISSING_VALUE in place of missing responses.
    """
    scores = np.full(
        (dataset.n_persons, dataset.n_items), MISSING_VALUE, dtype=np.int8
    )
    max_scores = np.array(
        [max_score(item.key) for item in dataset.items], dtype=np.int64
    )

    for item_idx, item in enumerate(dataset.items):
        for person_idx in range(dataset.n_persons):
            score = score_response(
                dataset.responses[person_idx, item_idx], item.key
            )
            if score is not None:
                scores[person_idx, item_idx] = score

    n_missing = int((scores == MISSING_VALUE).sum())
    logger.debug(
        f"Scored {dataset.n_persons} persons on {dataset.n_items} items "
        f"({n_missing} missing responses)"
    )

    return ScoreMatrix(scores=scores, max_scores=max_scores)
