"""
Sample-size tiers selecting which flag rules apply.

Correlation-based rules are unreliable in small samples, so fewer rules
apply to small administrations.
"""

from dataclasses import dataclass

from item_analysis.flags.rules import FlagRule


@dataclass(frozen=True)
class RuleTier:
    """
    Rules active for a range of examinee counts.

    Attributes:
        min_examinees: Smallest examinee count in the tier (inclusive).
        max_examinees: Largest examinee count in the tier (inclusive),
            None for no upper limit.
        rules: Rules evaluated in this tier.
    """

    min_examinees: int
    max_examinees: int | None
    rules: tuple[FlagRule, ...]

    def contains(self, n_examinees: int) -> bool:
        if n_examinees < self.min_examinees:
            return False
        return self.max_examinees is None or n_examinees <= self.max_examinees


RULE_TIERS: tuple[RuleTier, ...] = (
    RuleTier(
        min_examinees=0,
        max_examinees=14,
        rules=(FlagRule.LOW_PROPORTION_LOW_CORRELATION_KEY,),
    ),
    RuleTier(
        min_examinees=15,
        max_examinees=49,
        rules=(
            FlagRule.LOW_KEYED_CORRELATION,
            FlagRule.LOW_PROPORTION_LOW_CORRELATION_KEY,
            FlagRule.SLOW_RESPONSE,
        ),
    ),
    RuleTier(
        min_examinees=50,
        max_examinees=None,
        rules=tuple(FlagRule),
    ),
)


def active_rules(
    n_examinees: int, tiers: tuple[RuleTier, ...] = RULE_TIERS
) -> tuple[FlagRule, ...]:
    """
    Rules to evaluate for a run with n_examinees examinees.

    Raises:
        ValueError: If n_examinees is negative or falls in no tier.
    """
    if n_examinees < 0:
        raise ValueError(f"n_examinees must be >= 0, got {n_examinees}")
    for tier in tiers:
        if tier.contains(n_examinees):
            return tier.rules
    raise ValueError(f"No rule tier covers {n_examinees} examinees")
