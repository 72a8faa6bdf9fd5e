"""
End-to-end item analysis: scoring, latent trait estimation, item/option
statistics and flagging, run as one batch.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np
import pandas as pd

from item_analysis.analysis.settings import AnalysisSettings
from item_analysis.core.data_models import ResponseDataset, ScoreMatrix
from item_analysis.core.utils import get_rng
from item_analysis.flags.config import FlagThresholds
from item_analysis.flags.engine import FlagReport, evaluate_flags
from item_analysis.irt.estimation.config import EstimationConfig
from item_analysis.irt.latent_traits import LatentTraitFit, fit_latent_traits
from item_analysis.scoring.scorer import score_dataset
from item_analysis.statistics.items import compute_item_statistics
from item_analysis.statistics.options import compute_option_statistics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemAnalysisReport:
    """
    Everything derived in one run.

    Attributes:
        scores: Scored responses.
        fit: Fitted model, abilities and model diagnostics.
        item_statistics: One row per item.
        option_statistics: One row per (item, observed response value).
        flags: Rule evaluations and flagged items.
    """

    scores: ScoreMatrix
    fit: LatentTraitFit
    item_statistics: pd.DataFrame
    option_statistics: pd.DataFrame
    flags: FlagReport

    @property
    def flagged_items(self) -> pd.DataFrame:
        return self.flags.flagged

    def abilities_frame(self, person_ids: np.ndarray) -> pd.DataFrame:
        """Theta and standard error per person."""
        return pd.DataFrame(
            {
                "person_id": person_ids,
                "theta": self.fit.abilities.eap,
                "se": self.fit.abilities.se,
            }
        )


class ItemAnalysisPipeline:
    """
    Run the four analysis stages in order.

    A malformed dataset or a model that fails to fit aborts the run:
    MalformedResponseError and ModelFitError propagate to the caller and
    no partial report is produced.
    """

    def __init__(
        self,
        estimation_config: EstimationConfig | None = None,
        thresholds: FlagThresholds | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.estimation_config = estimation_config or EstimationConfig()
        self.thresholds = thresholds or FlagThresholds()
        self.rng = rng

    @classmethod
    def from_settings(
        cls,
        settings: AnalysisSettings,
        thresholds: FlagThresholds | None = None,
    ) -> "ItemAnalysisPipeline":
        return cls(
            estimation_config=settings.to_estimation_config(),
            thresholds=thresholds,
            rng=get_rng(settings.random_seed),
        )

    def run(
        self,
        dataset: ResponseDataset,
        response_times: Mapping[str, float] | pd.Series | None = None,
    ) -> ItemAnalysisReport:
        logger.info(
            f"Scoring {dataset.n_persons} persons on {dataset.n_items} items"
        )
        scores = score_dataset(dataset)

        logger.info("Fitting latent trait model")
        fit = fit_latent_traits(
            scores, config=self.estimation_config, rng=self.rng
        )
        theta = fit.abilities.eap

        logger.info("Computing item and option statistics")
        item_statistics = compute_item_statistics(dataset, scores, theta)
        option_statistics = compute_option_statistics(dataset, theta)

        logger.info("Evaluating flag rules")
        flags = evaluate_flags(
            item_statistics,
            option_statistics,
            n_examinees=dataset.n_persons,
            response_times=response_times,
            thresholds=self.thresholds,
        )

        return ItemAnalysisReport(
            scores=scores,
            fit=fit,
            item_statistics=item_statistics,
            option_statistics=option_statistics,
            flags=flags,
        )
