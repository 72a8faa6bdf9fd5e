"""
Core shared types and utilities for item analysis.

This module provides foundational components used across the scoring,
estimation, statistics and flagging stages.
"""

from item_analysis.core.data_models import (
    Item,
    ItemType,
    ResponseDataset,
    ScoreMatrix,
)
from item_analysis.core.exceptions import (
    ItemAnalysisError,
    MalformedResponseError,
    ModelFitError,
    UndefinedStatisticError,
)
from item_analysis.core.utils import format_value, get_rng

__all__ = [
    "Item",
    "ItemAnalysisError",
    "ItemType",
    "MalformedResponseError",
    "ModelFitError",
    "ResponseDataset",
    "ScoreMatrix",
    "UndefinedStatisticError",
    "format_value",
    "get_rng",
]
