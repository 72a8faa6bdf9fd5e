"""
Flag rule predicates.

Each rule inspects the statistics of one item and answers whether the item
should be flagged. A statistic that is missing (NaN, no keyed option, no
response time) never flags: the predicate returns False.
"""

import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from item_analysis.flags.config import FlagThresholds


class FlagRule(StrEnum):
    LOW_KEYED_CORRELATION = "low_keyed_correlation"
    HIGH_DISTRACTOR_CORRELATION = "high_distractor_correlation"
    DISTRACTOR_EXCEEDS_KEY = "distractor_exceeds_key"
    LOW_PROPORTION_LOW_CORRELATION_KEY = "low_proportion_low_correlation_key"
    HIGH_DISTRACTOR_SHARE_LOW_KEY_CORRELATION = (
        "high_distractor_share_low_key_correlation"
    )
    SLOW_RESPONSE = "slow_response"


@dataclass(frozen=True)
class OptionEvidence:
    value: str
    response_count: int
    relative_freq: float
    correlation: float


@dataclass(frozen=True)
class ItemEvidence:
    """
    Statistics of one item as seen by the flag rules.

    Attributes:
        item_id: Item identifier.
        average_correct: Mean score / max score (NaN if unexposed).
        key: Statistics of the keyed option, None if nobody chose it.
        distractors: Statistics of every observed distractor.
        response_time: Average response time, None if not supplied.
    """

    item_id: str
    average_correct: float
    key: OptionEvidence | None
    distractors: tuple[OptionEvidence, ...]
    response_time: float | None = None

    @property
    def key_correlation(self) -> float | None:
        if self.key is None or not is_defined(self.key.correlation):
            return None
        return self.key.correlation


RulePredicate = Callable[[ItemEvidence, FlagThresholds], bool]


def is_defined(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def low_keyed_correlation(
    evidence: ItemEvidence, thresholds: FlagThresholds
) -> bool:
    """Key correlates negatively with theta on a hard item, or strongly
    negatively on any item."""
    key_corr = evidence.key_correlation
    if key_corr is None:
        return False

    hard_item = is_defined(evidence.average_correct) and (
        evidence.average_correct < thresholds.low_key_average_correct
    )
    return (
        key_corr < thresholds.low_key_correlation and hard_item
    ) or key_corr < thresholds.severe_key_correlation


def high_distractor_correlation(
    evidence: ItemEvidence, thresholds: FlagThresholds
) -> bool:
    """A frequently chosen distractor correlates positively with theta."""
    return any(
        d.response_count > thresholds.min_distractor_count
        and is_defined(d.correlation)
        and d.correlation > thresholds.distractor_correlation
        for d in evidence.distractors
    )


def distractor_exceeds_key(
    evidence: ItemEvidence, thresholds: FlagThresholds
) -> bool:
    """A frequently chosen distractor correlates more strongly with theta
    than the key."""
    key_corr = evidence.key_correlation
    if key_corr is None:
        return False
    return any(
        d.response_count > thresholds.min_distractor_count
        and is_defined(d.correlation)
        and d.correlation > key_corr
        for d in evidence.distractors
    )


def low_proportion_low_correlation_key(
    evidence: ItemEvidence, thresholds: FlagThresholds
) -> bool:
    """The key is rarely chosen and barely discriminates."""
    key_corr = evidence.key_correlation
    if key_corr is None or evidence.key is None:
        return False
    return (
        evidence.key.relative_freq < thresholds.key_proportion
        and key_corr < thresholds.key_correlation
    )


def high_distractor_share_low_key_correlation(
    evidence: ItemEvidence, thresholds: FlagThresholds
) -> bool:
    """A distractor is chosen by most examinees while the key barely
    discriminates."""
    key_corr = evidence.key_correlation
    if key_corr is None or key_corr >= thresholds.key_correlation:
        return False
    return any(
        d.relative_freq > thresholds.distractor_share
        for d in evidence.distractors
    )


def slow_response(evidence: ItemEvidence, thresholds: FlagThresholds) -> bool:
    """Examinees spend too long on the item."""
    if not is_defined(evidence.response_time):
        return False
    assert evidence.response_time is not None
    return evidence.response_time > thresholds.slow_response_time


RULE_REGISTRY: dict[FlagRule, RulePredicate] = {
    FlagRule.LOW_KEYED_CORRELATION: low_keyed_correlation,
    FlagRule.HIGH_DISTRACTOR_CORRELATION: high_distractor_correlation,
    FlagRule.DISTRACTOR_EXCEEDS_KEY: distractor_exceeds_key,
    FlagRule.LOW_PROPORTION_LOW_CORRELATION_KEY: (
        low_proportion_low_correlation_key
    ),
    FlagRule.HIGH_DISTRACTOR_SHARE_LOW_KEY_CORRELATION: (
        high_distractor_share_low_key_correlation
    ),
    FlagRule.SLOW_RESPONSE: slow_response,
}
