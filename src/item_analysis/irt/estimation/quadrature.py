"""
Quadrature grid over the normal ability distribution.

The marginal likelihood integrates over theta ~ N(mean, std^2); the EM
estimator and EAP scoring evaluate that integral as a weighted sum over a
fixed Gauss-Hermite grid.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from item_analysis.irt.estimation.config import QuadratureConfig


@dataclass(frozen=True)
class GaussHermiteQuadrature:
    """
    Theta grid with prior weights.

    Attributes:
        points: Theta values, shape (n_points,).
        weights: Prior mass at each point, shape (n_points,), summing to 1.
        mean: Centre of the ability distribution the grid was built for.
    """

    points: NDArray[np.float64]
    weights: NDArray[np.float64]
    mean: float = 0.0

    @property
    def n_points(self) -> int:
        return len(self.points)

    def scaled_points(self, sd_multiplier: float) -> NDArray[np.float64]:
        """Points stretched about the mean by sd_multiplier."""
        result: NDArray[np.float64] = self.mean + sd_multiplier * (
            self.points - self.mean
        )
        return result


def get_quadrature(config: QuadratureConfig) -> GaussHermiteQuadrature:
    """
    Build the quadrature grid for N(config.mean, config.std^2).

    numpy's hermgauss integrates against exp(-x^2). Substituting
    x = z / sqrt(2) turns that into an expectation under the standard
    normal, so nodes are multiplied by sqrt(2) and weights divided by
    sqrt(pi) before shifting and scaling to the configured distribution.
    """
    nodes, raw_weights = np.polynomial.hermite.hermgauss(config.n_points)

    standard_nodes = np.sqrt(2.0) * nodes
    weights = raw_weights / np.sqrt(np.pi)
    # Renormalise away the floating point drift from exactly 1
    weights = weights / weights.sum()

    return GaussHermiteQuadrature(
        points=(config.mean + config.std * standard_nodes).astype(np.float64),
        weights=weights.astype(np.float64),
        mean=config.mean,
    )
