"""
Correlation estimators between theta and item/option scores.

Theta is always the continuous variable. Dichotomous indicators use the
point-biserial (Pearson) correlation; ordered polytomous scores use the
two-step polyserial estimator of Olsson, Drasgow & Dorans (1982):

    r_ps = r_xy * s_y / Σ_j φ(τ_j)

where r_xy is the Pearson correlation between theta and the score ranks,
s_y the standard deviation of the ranks, and τ_j the normal thresholds at
the cumulative proportions of the score levels.
"""

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from item_analysis.core.exceptions import UndefinedStatisticError


def pearson_correlation(
    x: NDArray[np.floating], y: NDArray[np.floating]
) -> float:
    """
    Pearson correlation between two equally long samples.

    Raises:
        UndefinedStatisticError: If fewer than 2 observations, or either
            variable has zero variance.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape != y.shape:
        raise ValueError(f"Shape mismatch: {x.shape} vs {y.shape}")
    if len(x) < 2:
        raise UndefinedStatisticError(
            f"Correlation needs at least 2 observations, got {len(x)}"
        )
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        raise UndefinedStatisticError("Correlation with zero variance")

    result = stats.pearsonr(x, y)
    return float(result.statistic)


def point_biserial_correlation(
    indicator: NDArray[np.bool_], theta: NDArray[np.floating]
) -> float:
    """Correlation of a 0/1 indicator with theta."""
    return pearson_correlation(indicator.astype(np.float64), theta)


def polyserial_correlation(
    theta: NDArray[np.floating], scores: NDArray[np.integer]
) -> float:
    """
    Two-step polyserial correlation of theta with an ordinal score.

    Only observed score levels count as categories; they are ranked
    0..L-1 before computing moments. The estimate is clipped to [-1, 1].

    Raises:
        UndefinedStatisticError: If fewer than 2 score levels are observed
            or theta has zero variance.
    """
    levels = np.unique(scores)
    if len(levels) < 2:
        raise UndefinedStatisticError(
            "Polyserial correlation needs at least 2 score levels"
        )
    ranks = np.searchsorted(levels, scores).astype(np.float64)

    r_xy = pearson_correlation(theta, ranks)

    proportions = np.bincount(ranks.astype(np.int64)) / len(ranks)
    thresholds = stats.norm.ppf(np.cumsum(proportions)[:-1])
    density_sum = float(np.sum(stats.norm.pdf(thresholds)))

    r_ps = r_xy * float(np.std(ranks)) / density_sum
    return float(np.clip(r_ps, -1.0, 1.0))
