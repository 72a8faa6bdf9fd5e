"""
Option-level statistics.

Every distinct observed response value of an item is one option. Its
correlation is the point-biserial of "chose exactly this value" against
theta over all respondents of the item, so each option is computed
independently against the same reference group.
"""

import logging

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from item_analysis.core.data_models import Item, ResponseDataset
from item_analysis.core.exceptions import UndefinedStatisticError
from item_analysis.core.utils import format_value
from item_analysis.statistics.correlation import point_biserial_correlation
from item_analysis.statistics.data_models import (
    AVG_THETA,
    CORRELATION,
    ITEM_ID,
    KEYED,
    OPTION_COLUMNS,
    RELATIVE_FREQ,
    RESPONSE_COUNT,
    SD_THETA,
    VALUE,
    Keying,
)

logger = logging.getLogger(__name__)

_ITEM_ORDER = "_item_order"


def _item_option_rows(
    item: Item,
    responses: NDArray[np.object_],
    theta: NDArray[np.float64],
) -> list[dict[str, object]]:
    """Statistics for each distinct response value of one item."""
    responded = np.array([r is not None for r in responses], dtype=np.bool_)
    n_exposures = int(responded.sum())
    if n_exposures == 0:
        return []

    labels = np.array(
        [format_value(r) for r in responses[responded]], dtype=object
    )
    item_theta = theta[responded]
    key_label = format_value(item.key)

    rows: list[dict[str, object]] = []
    for label in sorted(set(labels.tolist())):
        chose = labels == label
        count = int(chose.sum())
        chosen_theta = item_theta[chose]

        try:
            correlation = point_biserial_correlation(chose, item_theta)
        except UndefinedStatisticError as e:
            logger.debug(
                f"Option {label!r} of item {item.item_id!r}: "
                f"correlation undefined ({e})"
            )
            correlation = np.nan

        rows.append(
            {
                ITEM_ID: item.item_id,
                VALUE: label,
                KEYED: (
                    Keying.KEY.value
                    if label == key_label
                    else Keying.DISTRACTOR.value
                ),
                RESPONSE_COUNT: count,
                RELATIVE_FREQ: count / n_exposures,
                AVG_THETA: float(np.mean(chosen_theta)),
                SD_THETA: (
                    float(np.std(chosen_theta, ddof=1))
                    if count > 1
                    else np.nan
                ),
                CORRELATION: correlation,
            }
        )
    return rows


def compute_option_statistics(
    dataset: ResponseDataset,
    theta: NDArray[np.float64],
) -> pd.DataFrame:
    """
    Compute one row of statistics per (item, distinct response value).

    Args:
        dataset: Raw responses with item metadata.
        theta: Ability estimate per person, shape (n_persons,).

    Returns:
        DataFrame with columns item_id, value, keyed, response_count,
        relative_freq, avg_theta, sd_theta, correlation. Rows follow item
        order, then descending response_count, then value.
    """
    rows: list[dict[str, object]] = []
    for item_idx, item in enumerate(dataset.items):
        item_rows = _item_option_rows(
            item, dataset.responses[:, item_idx], theta
        )
        for row in item_rows:
            row[_ITEM_ORDER] = item_idx
        rows.extend(item_rows)

    if not rows:
        return pd.DataFrame(columns=OPTION_COLUMNS)

    table = pd.DataFrame(rows)
    table = table.sort_values(
        [_ITEM_ORDER, RESPONSE_COUNT, VALUE],
        ascending=[True, False, True],
        kind="stable",
    )
    return table[OPTION_COLUMNS].reset_index(drop=True)
