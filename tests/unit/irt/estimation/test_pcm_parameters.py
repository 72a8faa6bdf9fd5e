"""
Tests for PCM item parameters.
"""

import numpy as np
import pytest
from pydantic import ValidationError

from item_analysis.irt.estimation.parameters import PCMItemParameters


class TestPCMItemParameters:
    def test_requires_a_step(self) -> None:
        with pytest.raises(ValidationError):
            PCMItemParameters(item_id=0, steps=())

    def test_derived_properties(self) -> None:
        params = PCMItemParameters(item_id=3, steps=(-1.0, 0.0, 2.5))

        assert params.max_score == 3
        assert params.n_categories == 4
        np.testing.assert_allclose(params.location, 0.5)

    def test_array_round_trip(self) -> None:
        params = PCMItemParameters(item_id=1, steps=(0.25, -0.75))
        restored = PCMItemParameters.from_array(1, params.to_array())
        assert restored == params

    def test_zero_steps_are_uniform_at_zero(self) -> None:
        """Zero steps give equal probability to every level at θ=0."""
        params = PCMItemParameters(item_id=0, steps=(0.0, 0.0, 0.0))
        probs = params.compute_probabilities(np.array([0.0]))

        np.testing.assert_allclose(probs[0], np.full(4, 0.25))

    def test_expected_score_bounds(self) -> None:
        params = PCMItemParameters(item_id=0, steps=(0.0, 1.0))
        expected = params.expected_score(np.array([-30.0, 0.0, 30.0]))

        np.testing.assert_allclose(expected[0], 0.0, atol=1e-8)
        np.testing.assert_allclose(expected[2], 2.0, atol=1e-8)
        assert 0.0 < expected[1] < 2.0
