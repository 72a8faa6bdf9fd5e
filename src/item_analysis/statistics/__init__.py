"""
Item and option statistics engine.
"""

from item_analysis.statistics.correlation import (
    pearson_correlation,
    point_biserial_correlation,
    polyserial_correlation,
)
from item_analysis.statistics.data_models import Keying
from item_analysis.statistics.items import compute_item_statistics
from item_analysis.statistics.options import compute_option_statistics

__all__ = [
    "Keying",
    "compute_item_statistics",
    "compute_option_statistics",
    "pearson_correlation",
    "point_biserial_correlation",
    "polyserial_correlation",
]
