"""
Tests for Gauss-Hermite quadrature over the ability distribution.
"""

import numpy as np
import pytest

from item_analysis.irt.estimation.config import QuadratureConfig
from item_analysis.irt.estimation.quadrature import get_quadrature


def _moments(points: np.ndarray, weights: np.ndarray) -> tuple[float, float]:
    mean = float(np.sum(points * weights))
    variance = float(np.sum(points**2 * weights)) - mean**2
    return mean, variance


class TestGaussHermiteQuadrature:
    def test_default_has_41_points(self) -> None:
        quad = get_quadrature(QuadratureConfig())

        assert quad.n_points == 41
        np.testing.assert_allclose(quad.weights.sum(), 1.0, rtol=1e-10)
        assert (quad.weights > 0).all()

    def test_standard_normal_moments(self) -> None:
        """Weighted points reproduce the N(0, 1) mean and variance."""
        quad = get_quadrature(QuadratureConfig())
        mean, variance = _moments(quad.points, quad.weights)

        np.testing.assert_allclose(mean, 0.0, atol=1e-10)
        np.testing.assert_allclose(variance, 1.0, rtol=1e-6)

    def test_shifted_and_scaled(self) -> None:
        quad = get_quadrature(QuadratureConfig(mean=1.5, std=2.0))
        mean, variance = _moments(quad.points, quad.weights)

        np.testing.assert_allclose(mean, 1.5, rtol=1e-8)
        np.testing.assert_allclose(variance, 4.0, rtol=1e-6)
        assert quad.mean == 1.5

    @pytest.mark.parametrize("n_points", [11, 21, 61])
    def test_point_counts(self, n_points: int) -> None:
        quad = get_quadrature(QuadratureConfig(n_points=n_points))

        assert len(quad.points) == n_points
        assert len(quad.weights) == n_points

    def test_fourth_moment(self) -> None:
        """E[X^4] of a standard normal is 3."""
        quad = get_quadrature(QuadratureConfig(n_points=21))
        np.testing.assert_allclose(
            np.sum(quad.points**4 * quad.weights), 3.0, rtol=1e-8
        )


class TestScaledPoints:
    def test_unit_multiplier_is_identity(self) -> None:
        quad = get_quadrature(QuadratureConfig(mean=0.5))
        np.testing.assert_allclose(quad.scaled_points(1.0), quad.points)

    def test_multiplier_stretches_about_mean(self) -> None:
        """Scaling by s multiplies the variance by s^2, keeping the mean."""
        quad = get_quadrature(QuadratureConfig(mean=0.5))
        mean, variance = _moments(quad.scaled_points(1.5), quad.weights)

        np.testing.assert_allclose(mean, 0.5, rtol=1e-8)
        np.testing.assert_allclose(variance, 2.25, rtol=1e-6)
