"""
Tests for point-biserial and polyserial correlations.
"""

import numpy as np
import pytest

from item_analysis.core.exceptions import UndefinedStatisticError
from item_analysis.statistics.correlation import (
    pearson_correlation,
    point_biserial_correlation,
    polyserial_correlation,
)


class TestPearsonCorrelation:
    def test_matches_numpy(self) -> None:
        rng = np.random.default_rng(0)
        x = rng.standard_normal(50)
        y = x + rng.standard_normal(50)

        np.testing.assert_allclose(
            pearson_correlation(x, y), np.corrcoef(x, y)[0, 1], rtol=1e-10
        )

    def test_too_few_observations(self) -> None:
        with pytest.raises(UndefinedStatisticError):
            pearson_correlation(np.array([1.0]), np.array([2.0]))

    def test_zero_variance(self) -> None:
        with pytest.raises(UndefinedStatisticError):
            pearson_correlation(np.array([1.0, 2.0]), np.array([3.0, 3.0]))

    def test_shape_mismatch(self) -> None:
        with pytest.raises(ValueError):
            pearson_correlation(np.zeros(3), np.zeros(4))


class TestPointBiserialCorrelation:
    def test_known_value(self) -> None:
        """Indicator perfectly separating low and high theta."""
        indicator = np.array([False, False, True, True])
        theta = np.array([-1.0, -1.0, 1.0, 1.0])

        np.testing.assert_allclose(
            point_biserial_correlation(indicator, theta), 1.0
        )

    def test_sign(self) -> None:
        indicator = np.array([True, True, False, False, False])
        theta = np.array([-2.0, -1.0, 0.0, 1.0, 2.0])

        assert point_biserial_correlation(indicator, theta) < 0

    def test_everyone_chose_option(self) -> None:
        """An option chosen by every respondent has no correlation."""
        with pytest.raises(UndefinedStatisticError):
            point_biserial_correlation(
                np.ones(5, dtype=bool), np.linspace(-1, 1, 5)
            )


class TestPolyserialCorrelation:
    def test_recovers_latent_correlation(self) -> None:
        """Cutting one of two correlated normals recovers their
        correlation."""
        rng = np.random.default_rng(11)
        rho = 0.6
        n = 20000
        theta = rng.standard_normal(n)
        latent = rho * theta + np.sqrt(1 - rho**2) * rng.standard_normal(n)
        scores = np.digitize(latent, [-0.8, 0.0, 0.9])

        estimate = polyserial_correlation(theta, scores)

        assert abs(estimate - rho) < 0.05

    def test_exceeds_pearson_on_coarse_scores(self) -> None:
        """Coarsening attenuates the Pearson correlation; the polyserial
        estimate corrects for it."""
        rng = np.random.default_rng(3)
        theta = rng.standard_normal(5000)
        latent = 0.7 * theta + np.sqrt(1 - 0.49) * rng.standard_normal(5000)
        scores = np.digitize(latent, [0.0, 1.0])

        pearson = pearson_correlation(theta, scores.astype(np.float64))
        assert polyserial_correlation(theta, scores) > pearson

    def test_unobserved_levels_ignored(self) -> None:
        """Only observed score levels count as categories."""
        theta = np.array([-1.0, -0.5, 0.5, 1.0])
        gapped = np.array([0, 0, 3, 3])
        dense = np.array([0, 0, 1, 1])

        np.testing.assert_allclose(
            polyserial_correlation(theta, gapped),
            polyserial_correlation(theta, dense),
        )

    def test_clipped_to_unit_interval(self) -> None:
        theta = np.array([-2.0, -1.0, 1.0, 2.0])
        scores = np.array([0, 0, 1, 1])

        assert polyserial_correlation(theta, scores) <= 1.0

    def test_single_level_undefined(self) -> None:
        with pytest.raises(UndefinedStatisticError):
            polyserial_correlation(np.linspace(-1, 1, 4), np.full(4, 2))
