"""
Data models for item analysis input.

This module defines the data structures for:
- Item: item metadata (type, key, valid symbols)
- ResponseDataset: raw responses of every person to every item
- ScoreMatrix: scored responses, input for IRT estimation
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from item_analysis.core.constants import (
    MISSING_CHAR,
    MISSING_VALUE,
    SYMBOL_SEPARATORS,
)
from item_analysis.core.exceptions import MalformedResponseError


class ItemType(StrEnum):
    DICHOTOMOUS = "dichotomous"
    POLYTOMOUS = "polytomous"


def split_symbols(raw: str) -> tuple[str, ...]:
    """Split a raw string into its sorted, de-duplicated symbols."""
    return tuple(sorted({c for c in raw if c not in SYMBOL_SEPARATORS}))


def cell_text(raw: Any) -> str:
    """Text of a response cell. Whole-number floats, which pandas produces
    for numeric columns with gaps, lose their trailing ".0"."""
    if isinstance(raw, (float, np.floating)) and float(raw).is_integer():
        return str(int(raw))
    return str(raw)


def is_missing(raw: Any, missing_marker: str = MISSING_CHAR) -> bool:
    """Whether a raw response cell denotes a missing response.

    None, NaN, the missing marker and blank strings are missing. A cell
    holding only separators (e.g. ",") is an empty response, not missing.
    """
    if raw is None:
        return True
    if isinstance(raw, str):
        return raw.strip() in ("", missing_marker)
    return bool(pd.isna(raw))


class Item(BaseModel):
    """
    Metadata for one test item.

    Attributes:
        item_id: Unique identifier for the item.
        item_type: Dichotomous (single-symbol key) or polytomous
            (multi-symbol key, partial credit).
        key: Sorted symbols of the correct response set.
        options: Valid response symbols. If None, any alphanumeric
            single-character symbol is accepted.
    """

    model_config = ConfigDict(frozen=True)

    item_id: str
    item_type: ItemType
    key: tuple[str, ...]
    options: tuple[str, ...] | None = None

    @field_validator("key", "options", mode="before")
    @classmethod
    def _split_symbol_strings(cls, value: Any) -> Any:
        if isinstance(value, str):
            return split_symbols(value)
        if isinstance(value, Sequence):
            return tuple(sorted(set(value)))
        return value

    @model_validator(mode="after")
    def _validate_key(self) -> "Item":
        if len(self.key) == 0:
            raise ValueError(f"Item {self.item_id!r} has an empty key")
        if self.item_type == ItemType.DICHOTOMOUS and len(self.key) != 1:
            raise ValueError(
                f"Dichotomous item {self.item_id!r} must have exactly one "
                f"key symbol, got {self.key}"
            )
        invalid = [s for s in self.key if not self.is_valid_symbol(s)]
        if invalid:
            raise ValueError(
                f"Key symbols {invalid} of item {self.item_id!r} "
                f"are not valid options"
            )
        return self

    @property
    def max_score(self) -> int:
        """Highest attainable score: the number of key symbols."""
        return len(self.key)

    def is_valid_symbol(self, symbol: str) -> bool:
        if self.options is not None:
            return symbol in self.options
        return len(symbol) == 1 and symbol.isalnum()

    def parse_response(
        self,
        raw: Any,
        person_id: str = "",
        missing_marker: str = MISSING_CHAR,
    ) -> tuple[str, ...] | None:
        """
        Normalise a raw response cell into a sorted symbol tuple.

        A blank cell is missing. A cell of separators only, such as ",",
        is a non-missing empty response and scores 0.

        Args:
            raw: Raw cell value (string, number, None or NaN).
            person_id: Identifier used in error messages.
            missing_marker: String denoting a missing response.

        Returns:
            Sorted tuple of selected symbols, or None if missing.

        Raises:
            MalformedResponseError: If a symbol is outside the valid
                alphabet, or a dichotomous response selects several symbols.
        """
        if is_missing(raw, missing_marker):
            return None

        text = cell_text(raw)
        symbols = split_symbols(text)

        if self.item_type == ItemType.DICHOTOMOUS and len(symbols) > 1:
            raise MalformedResponseError(self.item_id, person_id, text)
        if not all(self.is_valid_symbol(s) for s in symbols):
            raise MalformedResponseError(self.item_id, person_id, text)

        return symbols


@dataclass(frozen=True)
class ResponseDataset:
    """
    Raw responses for one test administration.

    Attributes:
        person_ids: External person identifiers, shape (n_persons,).
            The row position is the person's ordinal id.
        items: Item metadata, one per column.
        responses: Object array of shape (n_persons, n_items). Each entry
            is a sorted tuple of symbols, or None when missing.
    """

    person_ids: NDArray[np.str_]
    items: tuple[Item, ...]
    responses: NDArray[np.object_]

    def __post_init__(self) -> None:
        if self.responses.ndim != 2:
            raise ValueError(
                f"responses must be 2D, got shape {self.responses.shape}"
            )
        if self.person_ids.shape[0] != self.responses.shape[0]:
            raise ValueError("# person IDs inconsistent with responses shape")
        if len(self.items) != self.responses.shape[1]:
            raise ValueError("# items inconsistent with responses shape")
        if len(set(self.person_ids.tolist())) != len(self.person_ids):
            raise ValueError("person IDs must be unique")
        if len({item.item_id for item in self.items}) != len(self.items):
            raise ValueError("item IDs must be unique")

    @property
    def n_persons(self) -> int:
        """Number of persons (rows)."""
        return self.responses.shape[0]

    @property
    def n_items(self) -> int:
        """Number of items (columns)."""
        return self.responses.shape[1]

    @property
    def item_ids(self) -> list[str]:
        return [item.item_id for item in self.items]

    @property
    def missing_mask(self) -> NDArray[np.bool_]:
        """Boolean mask where True indicates missing response."""
        is_none = np.vectorize(lambda r: r is None, otypes=[np.bool_])
        result: NDArray[np.bool_] = is_none(self.responses)
        return result

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        items: Sequence[Item],
        person_column: str = "person_id",
        missing_marker: str = MISSING_CHAR,
    ) -> "ResponseDataset":
        """
        Build a dataset from a wide table of raw responses.

        Args:
            frame: One row per person; a person identifier column plus
                one column per item, named by item_id.
            items: Item metadata for the columns to analyse.
            person_column: Name of the person identifier column.
            missing_marker: String denoting a missing response.

        Raises:
            ValueError: If a column is missing from the table.
            MalformedResponseError: If any response is malformed.
        """
        if person_column not in frame.columns:
            raise ValueError(f"Table must have '{person_column}' column")
        absent = [i.item_id for i in items if i.item_id not in frame.columns]
        if absent:
            raise ValueError(f"No response column for items: {absent}")

        person_ids = frame[person_column].astype(str).to_numpy(dtype=np.str_)
        responses = np.empty((len(frame), len(items)), dtype=object)

        for item_idx, item in enumerate(items):
            column = frame[item.item_id].tolist()
            for person_idx, raw in enumerate(column):
                responses[person_idx, item_idx] = item.parse_response(
                    raw,
                    person_id=str(person_ids[person_idx]),
                    missing_marker=missing_marker,
                )

        return cls(
            person_ids=person_ids,
            items=tuple(items),
            responses=responses,
        )


@dataclass(frozen=True)
class ScoreMatrix:
    """
    Scored responses for IRT estimation.

    Attributes:
        scores: Array of shape (n_persons, n_items) containing scores
            0..max_score. Missing responses are indicated by MISSING_VALUE.
        max_scores: Highest attainable score per item, shape (n_items,).
    """

    scores: NDArray[np.int8]
    max_scores: NDArray[np.int64]

    def __post_init__(self) -> None:
        """Validate score matrix."""
        if self.scores.ndim != 2:
            raise ValueError(
                f"scores must be 2D, got shape {self.scores.shape}"
            )
        if self.max_scores.shape != (self.scores.shape[1],):
            raise ValueError(
                f"max_scores must have shape ({self.scores.shape[1]},), "
                f"got {self.max_scores.shape}"
            )
        if np.any(self.max_scores < 1):
            raise ValueError("max_scores must be >= 1")

        valid = self.valid_mask
        if np.any(self.scores[valid] < 0):
            raise ValueError("Scores must be >= 0")
        exceeds = valid & (self.scores > self.max_scores[np.newaxis, :])
        if np.any(exceeds):
            raise ValueError("Scores must not exceed the item max score")

    @property
    def n_persons(self) -> int:
        """Number of persons (rows)."""
        return self.scores.shape[0]

    @property
    def n_items(self) -> int:
        """Number of items (columns)."""
        return self.scores.shape[1]

    @property
    def missing_mask(self) -> NDArray[np.bool_]:
        """Boolean mask where True indicates missing response."""
        result: NDArray[np.bool_] = self.scores == MISSING_VALUE
        return result

    @property
    def valid_mask(self) -> NDArray[np.bool_]:
        """Boolean mask where True indicates valid (non-missing) response."""
        result: NDArray[np.bool_] = self.scores != MISSING_VALUE
        return result

    @property
    def responded_mask(self) -> NDArray[np.bool_]:
        """Persons with at least one non-missing score."""
        result: NDArray[np.bool_] = self.valid_mask.any(axis=1)
        return result

    def item_score_counts(self, item_idx: int) -> NDArray[np.int64]:
        """
        Count scores for each level of an item (excluding missing).

        Args:
            item_idx: Index of the item.

        Returns:
            Array of shape (max_score + 1,) with counts per score level.
        """
        item_scores = self.scores[:, item_idx]
        valid = item_scores[item_scores != MISSING_VALUE]
        counts = np.bincount(
            valid.astype(np.int64),
            minlength=int(self.max_scores[item_idx]) + 1,
        )
        return counts.astype(np.int64)
