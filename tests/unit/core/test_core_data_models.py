"""
Tests for item metadata, response datasets and score matrices.
"""

import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from item_analysis.core.constants import MISSING_VALUE
from item_analysis.core.data_models import (
    Item,
    ItemType,
    ResponseDataset,
    ScoreMatrix,
    is_missing,
    split_symbols,
)
from item_analysis.core.exceptions import MalformedResponseError


class TestSplitSymbols:
    def test_sorted_and_unique(self) -> None:
        """Symbols should come back sorted with duplicates removed."""
        assert split_symbols("DBA") == ("A", "B", "D")
        assert split_symbols("AAB") == ("A", "B")

    def test_separators_ignored(self) -> None:
        """Commas, semicolons, pipes and whitespace separate symbols."""
        assert split_symbols("C, A;B|D") == ("A", "B", "C", "D")

    def test_empty(self) -> None:
        assert split_symbols("") == ()


class TestIsMissing:
    @pytest.mark.parametrize("raw", [None, "", "  ", "*", np.nan])
    def test_missing(self, raw: object) -> None:
        assert is_missing(raw)

    def test_custom_marker(self) -> None:
        assert is_missing("-", missing_marker="-")
        assert not is_missing("*", missing_marker="-")

    def test_present(self) -> None:
        assert not is_missing("A")


class TestItem:
    def test_key_string_is_split(self) -> None:
        item = Item(item_id="Q1", item_type="polytomous", key="DCA")
        assert item.key == ("A", "C", "D")
        assert item.max_score == 3

    def test_dichotomous_needs_single_key_symbol(self) -> None:
        """A dichotomous item with a multi-symbol key is rejected."""
        with pytest.raises(ValidationError):
            Item(item_id="Q1", item_type="dichotomous", key="AB")

    def test_empty_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Item(item_id="Q1", item_type="dichotomous", key="")

    def test_key_must_be_valid_option(self) -> None:
        with pytest.raises(ValidationError):
            Item(
                item_id="Q1",
                item_type="dichotomous",
                key="E",
                options="ABCD",
            )

    def test_is_frozen(self) -> None:
        item = Item(item_id="Q1", item_type="dichotomous", key="A")
        with pytest.raises(ValidationError):
            item.key = ("B",)  # type: ignore[misc]


class TestParseResponse:
    def test_missing_returns_none(self) -> None:
        item = Item(item_id="Q1", item_type="dichotomous", key="A")
        assert item.parse_response(None) is None
        assert item.parse_response("*") is None
        assert item.parse_response("") is None

    def test_polytomous_response_normalised(self) -> None:
        item = Item(item_id="Q1", item_type="polytomous", key="AC")
        assert item.parse_response("C,A") == ("A", "C")

    def test_invalid_symbol_raises(self) -> None:
        """Symbols outside the option alphabet are malformed."""
        item = Item(
            item_id="Q1", item_type="dichotomous", key="A", options="ABCD"
        )
        with pytest.raises(MalformedResponseError) as exc_info:
            item.parse_response("Z", person_id="p7")

        assert exc_info.value.item_id == "Q1"
        assert exc_info.value.person_id == "p7"
        assert exc_info.value.raw == "Z"

    def test_non_alphanumeric_raises_without_options(self) -> None:
        item = Item(item_id="Q1", item_type="dichotomous", key="A")
        with pytest.raises(MalformedResponseError):
            item.parse_response("?")

    def test_multiple_symbols_on_dichotomous_raises(self) -> None:
        item = Item(item_id="Q1", item_type="dichotomous", key="A")
        with pytest.raises(MalformedResponseError):
            item.parse_response("AB")

    def test_separators_only_is_empty_response(self) -> None:
        """Blank is missing, but a bare separator is an empty answer."""
        item = Item(item_id="Q1", item_type="polytomous", key="AB")
        assert item.parse_response(",") == ()
        assert item.parse_response(" ") is None

    def test_whole_number_float(self) -> None:
        item = Item(item_id="Q1", item_type="dichotomous", key="1")
        assert item.parse_response(1.0) == ("1",)
        assert item.parse_response(np.float64(3.0)) == ("3",)

    def test_fractional_float_raises(self) -> None:
        item = Item(item_id="Q1", item_type="dichotomous", key="1")
        with pytest.raises(MalformedResponseError):
            item.parse_response(1.5)


class TestResponseDataset:
    @staticmethod
    def _items() -> list[Item]:
        return [
            Item(item_id="Q1", item_type=ItemType.DICHOTOMOUS, key="A"),
            Item(item_id="Q2", item_type=ItemType.POLYTOMOUS, key="BC"),
        ]

    def test_from_frame(self) -> None:
        frame = pd.DataFrame(
            {
                "person_id": ["p1", "p2", "p3"],
                "Q1": ["A", "*", "B"],
                "Q2": ["CB", "B", None],
            }
        )
        dataset = ResponseDataset.from_frame(frame, self._items())

        assert dataset.n_persons == 3
        assert dataset.n_items == 2
        assert dataset.item_ids == ["Q1", "Q2"]
        assert dataset.responses[0, 1] == ("B", "C")
        np.testing.assert_array_equal(
            dataset.missing_mask,
            [[False, False], [True, False], [False, True]],
        )

    def test_numeric_column_with_gaps(self) -> None:
        """Numeric codes with a missing cell arrive as a float column."""
        frame = pd.DataFrame({"person_id": ["p1", "p2"], "Q1": [1, np.nan]})
        item = Item(item_id="Q1", item_type="dichotomous", key="1")

        dataset = ResponseDataset.from_frame(frame, [item])

        assert frame["Q1"].dtype == np.float64
        assert dataset.responses[0, 0] == ("1",)
        assert dataset.responses[1, 0] is None

    def test_missing_item_column(self) -> None:
        frame = pd.DataFrame({"person_id": ["p1"], "Q1": ["A"]})
        with pytest.raises(ValueError, match="Q2"):
            ResponseDataset.from_frame(frame, self._items())

    def test_missing_person_column(self) -> None:
        frame = pd.DataFrame({"id": ["p1"], "Q1": ["A"], "Q2": ["B"]})
        with pytest.raises(ValueError, match="person_id"):
            ResponseDataset.from_frame(frame, self._items())

    def test_malformed_response_propagates(self) -> None:
        frame = pd.DataFrame(
            {"person_id": ["p1"], "Q1": ["AB"], "Q2": ["B"]}
        )
        with pytest.raises(MalformedResponseError):
            ResponseDataset.from_frame(frame, self._items())

    def test_duplicate_person_ids_rejected(self) -> None:
        responses = np.empty((2, 1), dtype=object)
        with pytest.raises(ValueError, match="unique"):
            ResponseDataset(
                person_ids=np.array(["p1", "p1"]),
                items=(self._items()[0],),
                responses=responses,
            )


class TestScoreMatrix:
    def test_masks_and_counts(self) -> None:
        scores = np.array(
            [[0, 2], [1, MISSING_VALUE], [MISSING_VALUE, MISSING_VALUE]],
            dtype=np.int8,
        )
        data = ScoreMatrix(scores=scores, max_scores=np.array([1, 2]))

        assert data.n_persons == 3
        assert data.n_items == 2
        np.testing.assert_array_equal(
            data.responded_mask, [True, True, False]
        )
        np.testing.assert_array_equal(data.item_score_counts(0), [1, 1])
        np.testing.assert_array_equal(data.item_score_counts(1), [0, 0, 1])

    def test_score_above_max_rejected(self) -> None:
        with pytest.raises(ValueError, match="exceed"):
            ScoreMatrix(
                scores=np.array([[2]], dtype=np.int8),
                max_scores=np.array([1]),
            )

    def test_negative_score_rejected(self) -> None:
        with pytest.raises(ValueError, match=">= 0"):
            ScoreMatrix(
                scores=np.array([[-2]], dtype=np.int8),
                max_scores=np.array([1]),
            )

    def test_max_scores_shape_checked(self) -> None:
        with pytest.raises(ValueError, match="max_scores"):
            ScoreMatrix(
                scores=np.zeros((2, 2), dtype=np.int8),
                max_scores=np.array([1]),
            )
