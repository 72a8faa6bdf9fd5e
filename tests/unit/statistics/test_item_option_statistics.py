"""
Tests for the item and option statistics tables.
"""

import numpy as np
import pandas as pd

from item_analysis.core.data_models import Item, ItemType, ResponseDataset
from item_analysis.scoring.scorer import score_dataset
from item_analysis.statistics.data_models import ITEM_COLUMNS, OPTION_COLUMNS
from item_analysis.statistics.items import compute_item_statistics
from item_analysis.statistics.options import compute_option_statistics


def _dataset(
    items: list[Item], raw: list[list[str | None]]
) -> ResponseDataset:
    frame = pd.DataFrame(
        raw, columns=[item.item_id for item in items], dtype=object
    )
    frame.insert(0, "person_id", [f"p{i}" for i in range(len(raw))])
    return ResponseDataset.from_frame(frame, items)


ITEMS = [
    Item(item_id="Q1", item_type=ItemType.DICHOTOMOUS, key="A"),
    Item(item_id="Q2", item_type=ItemType.POLYTOMOUS, key="AB"),
]

RAW: list[list[str | None]] = [
    ["B", "C"],
    ["B", "A"],
    ["A", "A"],
    [None, "AB"],
    ["A", "AB"],
    ["C", None],
]

THETA = np.array([-1.5, -0.5, 0.2, 0.6, 1.0, -1.0])


class TestItemStatistics:
    def test_columns_and_values(self) -> None:
        dataset = _dataset(ITEMS, RAW)
        scores = score_dataset(dataset)

        table = compute_item_statistics(dataset, scores, THETA)

        assert list(table.columns) == ITEM_COLUMNS
        assert table["item_id"].tolist() == ["Q1", "Q2"]
        assert table["item_type"].tolist() == ["dichotomous", "polytomous"]
        assert table["max_score"].tolist() == [1, 2]
        assert table["number_exposures"].tolist() == [5, 5]
        # Q1: 2 of 5 correct; Q2: scores 0, 1, 1, 2, 2 out of 2
        np.testing.assert_allclose(table["average_correct"], [0.4, 0.6])

    def test_dichotomous_uses_point_biserial(self) -> None:
        dataset = _dataset(ITEMS, RAW)
        scores = score_dataset(dataset)

        table = compute_item_statistics(dataset, scores, THETA)

        responded = np.array([True, True, True, False, True, True])
        correct = np.array([0, 0, 1, 1, 0])
        expected = np.corrcoef(correct, THETA[responded])[0, 1]
        np.testing.assert_allclose(
            table.loc[0, "theta_score_correlation"], expected
        )
        assert table.loc[1, "theta_score_correlation"] > 0

    def test_undefined_correlation_is_nan(self) -> None:
        """An item everyone got right has no score-theta correlation."""
        items = [Item(item_id="Q1", item_type=ItemType.DICHOTOMOUS, key="A")]
        dataset = _dataset(items, [["A"], ["A"], ["A"]])
        scores = score_dataset(dataset)

        table = compute_item_statistics(
            dataset, scores, np.array([-1.0, 0.0, 1.0])
        )

        assert np.isnan(table.loc[0, "theta_score_correlation"])
        assert table.loc[0, "average_correct"] == 1.0

    def test_unexposed_item(self) -> None:
        items = [Item(item_id="Q1", item_type=ItemType.DICHOTOMOUS, key="A")]
        dataset = _dataset(items, [[None], [None]])
        scores = score_dataset(dataset)

        table = compute_item_statistics(dataset, scores, np.zeros(2))

        assert table.loc[0, "number_exposures"] == 0
        assert np.isnan(table.loc[0, "average_correct"])


class TestOptionStatistics:
    def test_columns_and_ordering(self) -> None:
        dataset = _dataset(ITEMS, RAW)

        table = compute_option_statistics(dataset, THETA)

        assert list(table.columns) == OPTION_COLUMNS
        q1 = table[table["item_id"] == "Q1"]
        # Most frequent first, ties broken by value
        assert q1["value"].tolist() == ["A", "B", "C"]
        assert q1["response_count"].tolist() == [2, 2, 1]
        assert table["item_id"].tolist()[:3] == ["Q1", "Q1", "Q1"]

    def test_missing_responses_excluded(self) -> None:
        dataset = _dataset(ITEMS, RAW)

        table = compute_option_statistics(dataset, THETA)

        for item_id in ("Q1", "Q2"):
            rows = table[table["item_id"] == item_id]
            assert rows["response_count"].sum() == 5
            np.testing.assert_allclose(rows["relative_freq"].sum(), 1.0)

    def test_keyed_option_label(self) -> None:
        """Only the value equal to the full key is keyed."""
        dataset = _dataset(ITEMS, RAW)

        table = compute_option_statistics(dataset, THETA)

        keyed = table[table["keyed"] == "key"]
        assert keyed["value"].tolist() == ["A", "AB"]
        q2_a = table[(table["item_id"] == "Q2") & (table["value"] == "A")]
        assert q2_a["keyed"].item() == "distractor"

    def test_theta_summaries(self) -> None:
        dataset = _dataset(ITEMS, RAW)

        table = compute_option_statistics(dataset, THETA).set_index(
            ["item_id", "value"]
        )

        np.testing.assert_allclose(
            table.loc[("Q1", "A"), "avg_theta"], (0.2 + 1.0) / 2
        )
        np.testing.assert_allclose(
            table.loc[("Q1", "A"), "sd_theta"],
            np.std([0.2, 1.0], ddof=1),
        )
        assert np.isnan(table.loc[("Q1", "C"), "sd_theta"])

    def test_correlation_against_item_respondents(self) -> None:
        """Each option is correlated over all respondents of the item."""
        dataset = _dataset(ITEMS, RAW)

        table = compute_option_statistics(dataset, THETA).set_index(
            ["item_id", "value"]
        )

        responded = np.array([True, True, True, False, True, True])
        chose_b = np.array([1, 1, 0, 0, 0])
        expected = np.corrcoef(chose_b, THETA[responded])[0, 1]
        np.testing.assert_allclose(
            table.loc[("Q1", "B"), "correlation"], expected
        )

    def test_unanimous_option_has_nan_correlation(self) -> None:
        items = [Item(item_id="Q1", item_type=ItemType.DICHOTOMOUS, key="A")]
        dataset = _dataset(items, [["A"], ["A"]])

        table = compute_option_statistics(dataset, np.array([-1.0, 1.0]))

        assert table.loc[0, "relative_freq"] == 1.0
        assert np.isnan(table.loc[0, "correlation"])

    def test_no_responses_gives_empty_table(self) -> None:
        items = [Item(item_id="Q1", item_type=ItemType.DICHOTOMOUS, key="A")]
        dataset = _dataset(items, [[None], [None]])

        table = compute_option_statistics(dataset, np.zeros(2))

        assert table.empty
        assert list(table.columns) == OPTION_COLUMNS
