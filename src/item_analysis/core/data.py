"""
CSV loading utilities for item analysis input data.
"""

from pathlib import Path

import pandas as pd

from item_analysis.core.constants import MISSING_CHAR
from item_analysis.core.data_models import Item, ResponseDataset

ITEM_COLUMNS = ("item_id", "item_type", "key")
RESPONSE_TIME_COLUMNS = ("item_id", "average_time")


def items_from_frame(frame: pd.DataFrame) -> list[Item]:
    """Build Item metadata from a table with item_id, item_type, key
    and an optional options column."""
    for column in ITEM_COLUMNS:
        if column not in frame.columns:
            raise ValueError(f"Item table must have '{column}' column")

    has_options = "options" in frame.columns
    items: list[Item] = []
    for row in frame.itertuples(index=False):
        options = getattr(row, "options") if has_options else None
        if options is not None and pd.isna(options):
            options = None
        items.append(
            Item(
                item_id=str(row.item_id),
                item_type=str(row.item_type).strip().lower(),
                key=str(row.key),
                options=options,
            )
        )
    return items


def load_items_csv(path: Path) -> list[Item]:
    """Load item metadata from a CSV file.

    Expected CSV columns:
        - item_id: unique identifier for each item
        - item_type: "dichotomous" or "polytomous"
        - key: correct response symbols (e.g., "B" or "ACD")
        - options (optional): valid response symbols (e.g., "ABCDE")

    Raises:
        ValueError: If CSV format is invalid.
    """
    frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    frame = frame.replace({"": None})
    return items_from_frame(frame)


def load_responses_csv(
    path: Path,
    items: list[Item],
    person_column: str = "person_id",
    missing_marker: str = MISSING_CHAR,
) -> ResponseDataset:
    """Load a wide CSV of raw responses into a ResponseDataset.

    Expected CSV columns:
        - person_column: unique identifier for each person
        - one column per item_id holding the raw response; empty cells
          and missing_marker denote missing responses

    Raises:
        ValueError: If CSV format is invalid or data is inconsistent.
        MalformedResponseError: If a response uses invalid symbols.
    """
    frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    return ResponseDataset.from_frame(
        frame,
        items,
        person_column=person_column,
        missing_marker=missing_marker,
    )


def load_response_times_csv(path: Path) -> pd.Series:
    """Load per-item average response times.

    Expected CSV columns:
        - item_id
        - average_time: numeric average response time

    Returns:
        Series of average times indexed by item_id.
    """
    frame = pd.read_csv(path, dtype={"item_id": str})
    for column in RESPONSE_TIME_COLUMNS:
        if column not in frame.columns:
            raise ValueError(
                f"Response time table must have '{column}' column"
            )
    if frame["item_id"].duplicated().any():
        raise ValueError("Response time table has duplicate item IDs")

    times: pd.Series = frame.set_index("item_id")["average_time"].astype(
        float
    )
    return times
