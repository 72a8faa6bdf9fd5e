"""
Flag rule engine: rule registry, sample-size tiers and aggregation.
"""

from item_analysis.flags.config import FlagThresholds
from item_analysis.flags.engine import (
    FlagReport,
    FlagValue,
    build_item_evidence,
    evaluate_flags,
)
from item_analysis.flags.rules import (
    RULE_REGISTRY,
    FlagRule,
    ItemEvidence,
    OptionEvidence,
)
from item_analysis.flags.tiers import RULE_TIERS, RuleTier, active_rules

__all__ = [
    "RULE_REGISTRY",
    "RULE_TIERS",
    "FlagReport",
    "FlagRule",
    "FlagThresholds",
    "FlagValue",
    "ItemEvidence",
    "OptionEvidence",
    "RuleTier",
    "active_rules",
    "build_item_evidence",
    "evaluate_flags",
]
