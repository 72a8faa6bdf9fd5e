"""
Flag rule engine: evaluate the active rules for every item and collect
the items that raised at least one flag.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

import pandas as pd

from item_analysis.flags.config import FlagThresholds
from item_analysis.flags.rules import (
    RULE_REGISTRY,
    FlagRule,
    ItemEvidence,
    OptionEvidence,
    RulePredicate,
)
from item_analysis.flags.tiers import active_rules
from item_analysis.statistics.data_models import (
    AVERAGE_CORRECT,
    CORRELATION,
    ITEM_ID,
    KEYED,
    RELATIVE_FREQ,
    RESPONSE_COUNT,
    VALUE,
    Keying,
)

logger = logging.getLogger(__name__)


class FlagValue(StrEnum):
    FLAG = "flag"
    NORMAL = "normal"


@dataclass(frozen=True)
class FlagReport:
    """
    Flag outcomes of one run.

    Attributes:
        n_examinees: Number of examinees the rule tier was chosen for.
        rules: Rules evaluated in this run, in column order.
        evaluations: One row per item (indexed by item_id), one column per
            evaluated rule, values "flag" or "normal".
    """

    n_examinees: int
    rules: tuple[FlagRule, ...]
    evaluations: pd.DataFrame

    @property
    def flagged(self) -> pd.DataFrame:
        """Items with at least one flag; same columns as evaluations."""
        if self.evaluations.empty:
            return self.evaluations
        any_flag = (self.evaluations == FlagValue.FLAG.value).any(axis=1)
        return self.evaluations[any_flag]

    @property
    def flagged_item_ids(self) -> list[str]:
        return [str(item_id) for item_id in self.flagged.index]


def _option_evidence(row: pd.Series) -> OptionEvidence:
    return OptionEvidence(
        value=str(row[VALUE]),
        response_count=int(row[RESPONSE_COUNT]),
        relative_freq=float(row[RELATIVE_FREQ]),
        correlation=float(row[CORRELATION]),
    )


def build_item_evidence(
    item_stats: pd.DataFrame,
    option_stats: pd.DataFrame,
    response_times: Mapping[str, float] | pd.Series | None = None,
) -> list[ItemEvidence]:
    """
    Bundle the item row, its option rows and its response time per item.

    Args:
        item_stats: Item statistics table.
        option_stats: Option statistics table.
        response_times: Average response time per item_id.

    Returns:
        One ItemEvidence per row of item_stats, in the same order.
    """
    times: dict[str, float] = (
        {} if response_times is None else dict(response_times.items())
    )
    options_by_item = {
        str(item_id): group
        for item_id, group in option_stats.groupby(ITEM_ID, sort=False)
    }

    evidence: list[ItemEvidence] = []
    for _, item_row in item_stats.iterrows():
        item_id = str(item_row[ITEM_ID])
        options = options_by_item.get(item_id)

        key: OptionEvidence | None = None
        distractors: list[OptionEvidence] = []
        if options is not None:
            for _, option_row in options.iterrows():
                if option_row[KEYED] == Keying.KEY.value:
                    key = _option_evidence(option_row)
                else:
                    distractors.append(_option_evidence(option_row))

        response_time = times.get(item_id)
        evidence.append(
            ItemEvidence(
                item_id=item_id,
                average_correct=float(item_row[AVERAGE_CORRECT]),
                key=key,
                distractors=tuple(distractors),
                response_time=(
                    float(response_time) if response_time is not None else None
                ),
            )
        )
    return evidence


def evaluate_flags(
    item_stats: pd.DataFrame,
    option_stats: pd.DataFrame,
    n_examinees: int,
    response_times: Mapping[str, float] | pd.Series | None = None,
    thresholds: FlagThresholds | None = None,
    registry: Mapping[FlagRule, RulePredicate] = RULE_REGISTRY,
) -> FlagReport:
    """
    Evaluate the rules active for n_examinees on every item.

    Rules outside the active tier are neither evaluated nor reported.

    Args:
        item_stats: Item statistics table.
        option_stats: Option statistics table.
        n_examinees: Number of examinees in the run.
        response_times: Average response time per item_id.
        thresholds: Rule thresholds. Uses defaults if None.
        registry: Predicate for each rule.

    Returns:
        FlagReport with the full evaluation table.
    """
    thresholds = thresholds or FlagThresholds()
    rules = active_rules(n_examinees)
    logger.info(
        f"n={n_examinees}: evaluating rules {[rule.value for rule in rules]}"
    )

    evidence = build_item_evidence(item_stats, option_stats, response_times)

    records: dict[str, list[str]] = {rule.value: [] for rule in rules}
    for rule in rules:
        predicate = registry[rule]
        for item_evidence in evidence:
            outcome = (
                FlagValue.FLAG
                if predicate(item_evidence, thresholds)
                else FlagValue.NORMAL
            )
            records[rule.value].append(outcome.value)

    evaluations = pd.DataFrame(
        records,
        index=pd.Index([e.item_id for e in evidence], name=ITEM_ID),
        columns=[rule.value for rule in rules],
    )
    report = FlagReport(
        n_examinees=n_examinees, rules=rules, evaluations=evaluations
    )
    logger.info(f"{len(report.flagged)} of {len(evidence)} items flagged")
    return report
