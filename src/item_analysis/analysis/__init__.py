from item_analysis.analysis.pipeline import (
    ItemAnalysisPipeline,
    ItemAnalysisReport,
)
from item_analysis.analysis.settings import AnalysisSettings

__all__ = [
    "AnalysisSettings",
    "ItemAnalysisPipeline",
    "ItemAnalysisReport",
]
