"""
Rasch / partial credit model estimator using the MML-EM algorithm.

Dichotomous items follow the Rasch (1PL) model and polytomous items the
partial credit model; both share one unidimensional latent trait.
"""

import logging

import numpy as np
from numpy.typing import NDArray
from scipy.optimize import minimize, minimize_scalar

from item_analysis.core.data_models import ScoreMatrix
from item_analysis.core.exceptions import ModelFitError
from item_analysis.core.utils import get_rng
from item_analysis.irt.estimation.config import EstimationConfig
from item_analysis.irt.estimation.data_models import (
    EStepResult,
    IRTEstimationResult,
)
from item_analysis.irt.estimation.enums import ConvergenceStatus
from item_analysis.irt.estimation.gradients import (
    compute_pcm_probabilities,
    pcm_negative_expected_log_likelihood,
    pcm_negative_expected_log_likelihood_gradient,
)
from item_analysis.irt.estimation.likelihood import compute_posteriors
from item_analysis.irt.estimation.parameters import PCMItemParameters
from item_analysis.irt.estimation.quadrature import (
    GaussHermiteQuadrature,
    get_quadrature,
)

logger = logging.getLogger(__name__)

# Standard deviation of the random jitter added to starting values
INITIAL_STEP_JITTER = 0.01

# Minimum number of persons with at least one response
MIN_RESPONDING_PERSONS = 2


class RaschEstimator:
    """
    Partial credit model estimator using MML-EM.

    The PCM probability model:
        P(X=k | θ) = exp(k*θ - Σ_{h<=k} d_h) / Σ_j exp(j*θ - Σ_{h<=j} d_h)

    Identification: the ability distribution is N(mean, sd^2) with the mean
    fixed; sd is fixed unless config.estimate_latent_sd is set.

    Uses L-BFGS-B for M-step optimization with analytical gradients.
    """

    def __init__(
        self,
        config: EstimationConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        """Initialize PCM estimator."""
        self.config = config or EstimationConfig()
        if rng is None:
            self.rng = get_rng()
        else:
            self.rng = rng

        self._quadrature = get_quadrature(self.config.quadrature)
        # Multiplier on config.quadrature.std
        self._sd_multiplier = 1.0

    @property
    def quadrature(self) -> GaussHermiteQuadrature:
        """Access quadrature points and weights."""
        return self._quadrature

    @property
    def theta_points(self) -> NDArray[np.float64]:
        """Quadrature points at the current latent standard deviation."""
        return self._quadrature.scaled_points(self._sd_multiplier)

    def _check_convergence(self, current_ll: float, prev_ll: float) -> bool:
        """
        Check if EM has converged based on log-likelihood change.

        Args:
            current_ll: Current log-likelihood.
            prev_ll: Previous log-likelihood.

        Returns:
            True if converged.
        """
        if prev_ll == -np.inf:
            return False

        # Relative change in log-likelihood
        rel_change = abs(current_ll - prev_ll) / (abs(prev_ll) + 1e-10)
        return bool(rel_change < self.config.convergence.em_tolerance)

    @staticmethod
    def _validate_data(data: ScoreMatrix) -> None:
        """
        Reject score matrices on which the model is not identified.

        Raises:
            ModelFitError: If there are no items, too few responding
                persons, or an item whose scores do not vary.
        """
        if data.n_items == 0:
            raise ModelFitError("Score matrix has no items")

        n_responding = int(data.responded_mask.sum())
        if n_responding < MIN_RESPONDING_PERSONS:
            raise ModelFitError(
                f"Need at least {MIN_RESPONDING_PERSONS} persons with "
                f"responses, got {n_responding}"
            )

        for item_idx in range(data.n_items):
            counts = data.item_score_counts(item_idx)
            if np.count_nonzero(counts) < 2:
                raise ModelFitError(
                    f"Item column {item_idx} has zero score variance "
                    f"(score counts {counts.tolist()})"
                )

    def _e_step(
        self,
        data: ScoreMatrix,
        params: list[PCMItemParameters],
    ) -> EStepResult:
        """
        E-step: compute posterior distribution over abilities.

        Args:
            data: Score matrix.
            params: Current item parameters.

        Returns:
            EStepResult with posteriors and marginal log-likelihood.
        """
        posteriors, log_marginal = compute_posteriors(
            data, params, self.theta_points, self._quadrature.weights
        )
        return EStepResult(
            posteriors=posteriors, log_likelihood=float(np.sum(log_marginal))
        )

    def fit(self, data: ScoreMatrix) -> IRTEstimationResult:
        """
        Fit the PCM to a score matrix using MML-EM.

        Args:
            data: Score matrix with one column per item.

        Returns:
            IRTEstimationResult with estimated parameters and fit statistics.

        Raises:
            ModelFitError: If the score matrix is degenerate or the
                likelihood becomes non-finite.
        """
        self._validate_data(data)

        self._sd_multiplier = 1.0
        params = self._initialize(data)

        prev_ll = -np.inf
        convergence_status = ConvergenceStatus.MAX_ITERATIONS
        n_iterations = self.config.convergence.max_em_iterations

        for iteration in range(self.config.convergence.max_em_iterations):
            e_result = self._e_step(data, params)
            logger.debug(
                f"Iteration {iteration + 1}: "
                f"LL = {e_result.log_likelihood:.4f}"
            )

            if not np.isfinite(e_result.log_likelihood):
                convergence_status = ConvergenceStatus.FAILED
                n_iterations = iteration + 1
                break

            if self._check_convergence(e_result.log_likelihood, prev_ll):
                convergence_status = ConvergenceStatus.CONVERGED
                n_iterations = iteration + 1
                break

            prev_ll = e_result.log_likelihood
            params = self._m_step(data, e_result.posteriors, params)

        if convergence_status == ConvergenceStatus.FAILED:
            raise ModelFitError(
                f"Non-finite log-likelihood after {n_iterations} iterations"
            )

        logger.info(
            f"EM finished: {convergence_status.value} after "
            f"{n_iterations} iterations (LL={e_result.log_likelihood:.4f})"
        )

        return IRTEstimationResult(
            item_parameters=tuple(params),
            latent_sd=self._sd_multiplier * self.config.quadrature.std,
            log_likelihood=e_result.log_likelihood,
            n_iterations=n_iterations,
            convergence_status=convergence_status,
            model_version=self.config.model_version,
        )

    @staticmethod
    def _expected_counts(
        scores: NDArray[np.int8],
        missing_mask: NDArray[np.bool_],
        posteriors: NDArray[np.float64],
        max_score: int,
    ) -> NDArray[np.float64]:
        """
        Posterior-weighted score counts at each quadrature point.

        Returns:
            Array of shape (n_quadrature, max_score + 1).
        """
        valid_mask = ~missing_mask
        valid_scores = scores[valid_mask].astype(np.int64)
        n_valid = len(valid_scores)

        indicators = np.zeros((n_valid, max_score + 1), dtype=np.float64)
        indicators[np.arange(n_valid), valid_scores] = 1.0

        counts: NDArray[np.float64] = (
            posteriors[valid_mask, :].T @ indicators
        )
        return counts

    def _m_step(
        self,
        data: ScoreMatrix,
        posteriors: NDArray[np.float64],
        current_params: list[PCMItemParameters],
    ) -> list[PCMItemParameters]:
        """
        M-step: optimize item parameters (and the latent SD) given
        posteriors.

        Args:
            data: Score matrix.
            posteriors: Posterior weights from E-step.
            current_params: Current parameter estimates.

        Returns:
            Updated parameter estimates.
        """
        missing_mask = data.missing_mask
        expected_counts = [
            self._expected_counts(
                data.scores[:, item_idx],
                missing_mask[:, item_idx],
                posteriors,
                current.max_score,
            )
            for item_idx, current in enumerate(current_params)
        ]

        if self.config.estimate_latent_sd:
            self._sd_multiplier = self._optimize_sd_multiplier(
                current_params, expected_counts
            )

        theta = self.theta_points
        return [
            self._optimize_item(item_idx, current, theta, counts)
            for item_idx, (current, counts) in enumerate(
                zip(current_params, expected_counts, strict=True)
            )
        ]

    def _optimize_item(
        self,
        item_idx: int,
        current: PCMItemParameters,
        theta: NDArray[np.float64],
        expected_counts: NDArray[np.float64],
    ) -> PCMItemParameters:
        """
        Optimize step difficulties for one item using L-BFGS-B.

        Args:
            item_idx: Index of the item.
            current: Current parameter estimates.
            theta: Quadrature points, shape (n_quadrature,).
            expected_counts: Expected counts, shape
                (n_quadrature, max_score + 1).

        Returns:
            Optimized PCMItemParameters.
        """
        if expected_counts.sum() <= 0.0:
            return current

        bounds = [self.config.bounds.step] * current.max_score

        result = minimize(
            fun=pcm_negative_expected_log_likelihood,
            x0=current.to_array(),
            args=(theta, expected_counts),
            method="L-BFGS-B",
            jac=pcm_negative_expected_log_likelihood_gradient,
            bounds=bounds,
            options={
                "maxiter": self.config.convergence.max_lbfgs_iterations,
                "ftol": self.config.convergence.lbfgs_tolerance,
            },
        )

        return PCMItemParameters.from_array(item_idx, result.x)

    def _optimize_sd_multiplier(
        self,
        params: list[PCMItemParameters],
        expected_counts: list[NDArray[np.float64]],
    ) -> float:
        """
        Optimize the latent standard deviation with item parameters fixed.

        The expected log-likelihood summed over all items is maximised
        over the scale of the quadrature points.
        """

        def objective(multiplier: float) -> float:
            theta = self._quadrature.scaled_points(multiplier)
            total = 0.0
            for item_params, counts in zip(
                params, expected_counts, strict=True
            ):
                probs = compute_pcm_probabilities(theta, item_params.to_array())
                total += float(np.sum(counts * np.log(probs + 1e-300)))
            return -total

        result = minimize_scalar(
            objective,
            bounds=self.config.bounds.latent_sd,
            method="bounded",
        )
        return float(result.x)

    def _initialize(self, data: ScoreMatrix) -> list[PCMItemParameters]:
        """
        Initialize step difficulties from observed score frequencies.

        At θ=0 the PCM gives log(P_{k-1} / P_k) = d_k, so adjacent
        category proportions (with additive smoothing) give starting steps.

        Args:
            data: Score matrix.

        Returns:
            List of initial PCMItemParameters.
        """
        params = []
        low, high = self.config.bounds.step

        for item_idx in range(data.n_items):
            max_score = int(data.max_scores[item_idx])
            counts = data.item_score_counts(item_idx).astype(np.float64)

            smoothed = counts + 0.5
            steps = np.log(smoothed[:-1]) - np.log(smoothed[1:])
            steps += self.rng.normal(0.0, INITIAL_STEP_JITTER, size=max_score)
            steps = np.clip(steps, low, high)

            params.append(PCMItemParameters.from_array(item_idx, steps))

        return params
