"""
Scoring engine: converts raw responses and answer keys into scores.
"""

from item_analysis.scoring.scorer import (
    max_score,
    score_dataset,
    score_response,
)

__all__ = [
    "max_score",
    "score_dataset",
    "score_response",
]
