"""Sentinel values shared across the package."""

# Score code for a missing response in a ScoreMatrix
MISSING_VALUE = -1

# Marker for a missing response in raw input data
MISSING_CHAR = "*"

# Characters ignored when splitting a raw response into symbols
SYMBOL_SEPARATORS = frozenset(",;| \t")
