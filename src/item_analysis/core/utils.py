"""
Core utility functions shared across item analysis modules.
"""

import numpy as np
from numpy.random import Generator


def get_rng(seed: int | None = None) -> Generator:
    """
    Create a numpy random Generator with optional seed.

    Args:
        seed: Random seed for reproducibility. If None, uses entropy.

    Returns:
        A numpy random Generator instance.
    """
    return np.random.default_rng(seed)


def format_value(symbols: tuple[str, ...]) -> str:
    """Canonical string label for a (sorted) response symbol tuple."""
    return "".join(symbols)
