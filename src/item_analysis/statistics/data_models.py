"""
Column layout of the item and option statistics tables.
"""

from enum import StrEnum


class Keying(StrEnum):
    KEY = "key"
    DISTRACTOR = "distractor"


# Item table
ITEM_ID = "item_id"
ITEM_TYPE = "item_type"
MAX_SCORE = "max_score"
NUMBER_EXPOSURES = "number_exposures"
AVERAGE_CORRECT = "average_correct"
THETA_SCORE_CORRELATION = "theta_score_correlation"

ITEM_COLUMNS = [
    ITEM_ID,
    ITEM_TYPE,
    MAX_SCORE,
    NUMBER_EXPOSURES,
    AVERAGE_CORRECT,
    THETA_SCORE_CORRELATION,
]

# Option table
VALUE = "value"
KEYED = "keyed"
RESPONSE_COUNT = "response_count"
RELATIVE_FREQ = "relative_freq"
AVG_THETA = "avg_theta"
SD_THETA = "sd_theta"
CORRELATION = "correlation"

OPTION_COLUMNS = [
    ITEM_ID,
    VALUE,
    KEYED,
    RESPONSE_COUNT,
    RELATIVE_FREQ,
    AVG_THETA,
    SD_THETA,
    CORRELATION,
]
