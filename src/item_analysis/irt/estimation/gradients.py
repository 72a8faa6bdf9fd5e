"""
Analytical gradients for partial credit model (PCM) estimation.

For an item with max score m and step difficulties d_1..d_m, the PCM
probability of score k (k = 0..m) is:
    P(X=k | θ) = exp(k*θ - Σ_{h<=k} d_h) / Σ_j exp(j*θ - Σ_{h<=j} d_h)

With m = 1 this is the dichotomous Rasch model.

The M-step works on expected counts r_qk = Σ_i w_iq * I[X_i=k], the
posterior-weighted number of persons at quadrature point q with score k.
The expected complete-data log-likelihood of one item is:
    Q = Σ_q Σ_k r_qk * log P(X=k | θ_q)

Gradient:
    ∂Q / ∂d_h = Σ_q (n_q * S_qh - R_qh)

where n_q = Σ_k r_qk, R_qh = Σ_{k>=h} r_qk and S_qh = Σ_{k>=h} P(X=k | θ_q).
"""

import numpy as np
from numba import njit  # type: ignore
from numpy.typing import NDArray


@njit  # type: ignore
def compute_pcm_probabilities(
    theta: NDArray[np.float64],
    steps: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Compute PCM category probabilities at given theta values.

    Args:
        theta: Ability values, shape (n_theta,).
        steps: Step difficulties, shape (max_score,).

    Returns:
        Probabilities, shape (n_theta, max_score + 1).
    """
    n_theta = theta.shape[0]
    n_categories = steps.shape[0] + 1
    probs = np.empty((n_theta, n_categories), dtype=np.float64)
    logits = np.empty(n_categories, dtype=np.float64)

    for q in range(n_theta):
        logits[0] = 0.0
        cumulative = 0.0
        for k in range(1, n_categories):
            cumulative += steps[k - 1]
            logits[k] = k * theta[q] - cumulative

        # Log-sum-exp trick for stability
        max_logit = logits[0]
        for k in range(1, n_categories):
            if logits[k] > max_logit:
                max_logit = logits[k]

        total = 0.0
        for k in range(n_categories):
            probs[q, k] = np.exp(logits[k] - max_logit)
            total += probs[q, k]
        for k in range(n_categories):
            probs[q, k] /= total

    return probs


@njit  # type: ignore
def pcm_negative_expected_log_likelihood(
    steps: NDArray[np.float64],
    theta: NDArray[np.float64],
    expected_counts: NDArray[np.float64],
) -> float:
    """
    Compute negative expected complete-data log-likelihood for one item.

    This is the objective function for M-step optimization.

    Args:
        steps: Step difficulties, shape (max_score,).
        theta: Quadrature points, shape (n_quadrature,).
        expected_counts: Expected counts r_qk, shape
            (n_quadrature, max_score + 1).

    Returns:
        Negative expected log-likelihood (to minimize).
    """
    probs = compute_pcm_probabilities(theta, steps)
    n_quad, n_categories = expected_counts.shape

    total = 0.0
    for q in range(n_quad):
        for k in range(n_categories):
            if expected_counts[q, k] > 0.0:
                total += expected_counts[q, k] * np.log(probs[q, k] + 1e-300)
    return -total


@njit  # type: ignore
def pcm_negative_expected_log_likelihood_gradient(
    steps: NDArray[np.float64],
    theta: NDArray[np.float64],
    expected_counts: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Gradient of the negative expected log-likelihood w.r.t. step difficulties.

    Args:
        steps: Step difficulties, shape (max_score,).
        theta: Quadrature points, shape (n_quadrature,).
        expected_counts: Expected counts r_qk, shape
            (n_quadrature, max_score + 1).

    Returns:
        Gradient, shape (max_score,).
    """
    probs = compute_pcm_probabilities(theta, steps)
    n_quad, n_categories = expected_counts.shape
    n_steps = n_categories - 1

    grad = np.zeros(n_steps, dtype=np.float64)
    for q in range(n_quad):
        n_q = 0.0
        for k in range(n_categories):
            n_q += expected_counts[q, k]

        # Walk categories from the top, accumulating tail sums
        observed_tail = 0.0
        model_tail = 0.0
        for k in range(n_categories - 1, 0, -1):
            observed_tail += expected_counts[q, k]
            model_tail += probs[q, k]
            # ∂(-Q)/∂d_k = R_qk - n_q * S_qk
            grad[k - 1] += observed_tail - n_q * model_tail

    return grad
