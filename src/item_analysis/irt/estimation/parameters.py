"""
PCM item parameter representation.

The partial credit model (Masters, 1982) parameterization:
    P(X=k | θ) = exp(k*θ - Σ_{h<=k} d_h) / Σ_j exp(j*θ - Σ_{h<=j} d_h)

An item scored 0..m has m step difficulties d_1..d_m. A dichotomous item
has a single step, which is its Rasch difficulty. All items share a unit
slope, so the model stays in the Rasch family.
"""

from typing import Self

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, model_validator

from item_analysis.irt.estimation.gradients import compute_pcm_probabilities


class PCMItemParameters(BaseModel):
    """
    Parameters for one item under the partial credit model.

    Attributes:
        item_id: Column index of the item in the score matrix.
        steps: Step difficulties (d_1..d_m), one per score level above 0.
            Tuple of length m where m = max_score.
    """

    item_id: int
    steps: tuple[float, ...]

    @model_validator(mode="after")
    def _validate_num_steps(self) -> "PCMItemParameters":
        if len(self.steps) < 1:
            raise ValueError("Must have at least 1 step (2 score levels)")
        return self

    @property
    def max_score(self) -> int:
        """Highest score level of the item."""
        return len(self.steps)

    @property
    def n_categories(self) -> int:
        """Number of score levels (0..max_score)."""
        return len(self.steps) + 1

    @property
    def location(self) -> float:
        """Overall item difficulty: mean of the step difficulties."""
        return float(np.mean(self.steps))

    def compute_probabilities(
        self, theta: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        """
        Compute PCM probabilities for all score levels at given theta values.

        Args:
            theta: Ability values, shape (n_theta,).

        Returns:
            Probabilities, shape (n_theta, n_categories).
        """
        probs: NDArray[np.float64] = compute_pcm_probabilities(
            np.asarray(theta, dtype=np.float64), self.to_array()
        )
        return probs

    def expected_score(
        self, theta: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        """Model-expected item score at each theta, shape (n_theta,)."""
        probs = self.compute_probabilities(theta)
        levels = np.arange(self.n_categories, dtype=np.float64)
        result: NDArray[np.float64] = probs @ levels
        return result

    def to_array(self) -> NDArray[np.float64]:
        """Flatten step difficulties to a 1D array for optimization."""
        return np.array(self.steps, dtype=np.float64)

    @classmethod
    def from_array(cls, item_id: int, arr: NDArray[np.float64]) -> Self:
        """Reconstruct parameters from a flattened array."""
        return cls(item_id=item_id, steps=tuple(float(d) for d in arr))
