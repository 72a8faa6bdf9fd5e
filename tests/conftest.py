"""
Shared fixtures: seeded random generators and a partial credit model
response simulator.
"""

from collections.abc import Callable, Sequence

import numpy as np
import pytest
from numpy.typing import NDArray

from item_analysis.core.constants import MISSING_VALUE
from item_analysis.core.data_models import ScoreMatrix
from item_analysis.irt.estimation.gradients import compute_pcm_probabilities

SEED = 42

ScoreSimulator = Callable[..., ScoreMatrix]


def simulate_pcm_scores(
    steps: Sequence[Sequence[float]],
    abilities: NDArray[np.float64],
    rng: np.random.Generator,
    missing_rate: float = 0.0,
) -> ScoreMatrix:
    """
    Draw a score matrix from the partial credit model.

    Args:
        steps: Step difficulties per item; len(steps[i]) is the item's
            max score.
        abilities: True abilities, shape (n_persons,).
        rng: Random number generator.
        missing_rate: Probability that a score is replaced by missing.

    Returns:
        ScoreMatrix with shape (n_persons, n_items).
    """
    n_persons = len(abilities)
    scores = np.zeros((n_persons, len(steps)), dtype=np.int8)

    for item_idx, item_steps in enumerate(steps):
        probs = compute_pcm_probabilities(
            abilities, np.asarray(item_steps, dtype=np.float64)
        )
        cumulative = probs.cumsum(axis=1)
        draws = rng.random(n_persons)[:, np.newaxis]
        sampled = (draws > cumulative).sum(axis=1)
        scores[:, item_idx] = np.minimum(sampled, len(item_steps))

    if missing_rate > 0.0:
        scores[rng.random(scores.shape) < missing_rate] = MISSING_VALUE

    return ScoreMatrix(
        scores=scores,
        max_scores=np.array([len(s) for s in steps], dtype=np.int64),
    )


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(SEED)


@pytest.fixture
def pcm_simulator() -> ScoreSimulator:
    return simulate_pcm_scores
