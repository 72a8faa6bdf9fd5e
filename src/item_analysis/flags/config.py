"""
Thresholds used by the item flag rules.
"""

from dataclasses import dataclass

DEFAULT_LOW_KEY_CORRELATION = 0.0
DEFAULT_LOW_KEY_AVERAGE_CORRECT = 0.65
DEFAULT_SEVERE_KEY_CORRELATION = -0.15
DEFAULT_DISTRACTOR_CORRELATION = 0.05
DEFAULT_MIN_DISTRACTOR_COUNT = 5
DEFAULT_KEY_PROPORTION = 0.25
DEFAULT_KEY_CORRELATION = 0.10
DEFAULT_DISTRACTOR_SHARE = 0.5
DEFAULT_SLOW_RESPONSE_TIME = 120.0


@dataclass(frozen=True)
class FlagThresholds:
    """
    Thresholds for the flag rules. All comparisons are strict.

    Attributes:
        low_key_correlation: Keyed-option correlation below which a hard
            item is flagged (low_keyed_correlation).
        low_key_average_correct: Average score below which a negative
            keyed correlation flags the item (low_keyed_correlation).
        severe_key_correlation: Keyed-option correlation that flags the
            item on its own (low_keyed_correlation).
        distractor_correlation: Distractor correlation above which a
            distractor is suspicious (high_distractor_correlation).
        min_distractor_count: A distractor must be chosen more often than
            this to count in distractor correlation rules.
        key_proportion: Keyed-option relative frequency below which the
            key is rarely chosen.
        key_correlation: Keyed-option correlation below which the key
            discriminates poorly.
        distractor_share: Distractor relative frequency above which a
            distractor dominates the item.
        slow_response_time: Average response time above which the item is
            slow (same units as the supplied times).
    """

    low_key_correlation: float = DEFAULT_LOW_KEY_CORRELATION
    low_key_average_correct: float = DEFAULT_LOW_KEY_AVERAGE_CORRECT
    severe_key_correlation: float = DEFAULT_SEVERE_KEY_CORRELATION
    distractor_correlation: float = DEFAULT_DISTRACTOR_CORRELATION
    min_distractor_count: int = DEFAULT_MIN_DISTRACTOR_COUNT
    key_proportion: float = DEFAULT_KEY_PROPORTION
    key_correlation: float = DEFAULT_KEY_CORRELATION
    distractor_share: float = DEFAULT_DISTRACTOR_SHARE
    slow_response_time: float = DEFAULT_SLOW_RESPONSE_TIME
