"""
Settings for fitting the Rasch / partial credit model.

Grouped as quadrature grid, EM stopping rules, optimiser bounds and the
top-level EstimationConfig that bundles them.
"""

from dataclasses import dataclass, field

import toml

from item_analysis.core.paths import get_project_root_dir

# Optimiser bounds
DEFAULT_STEP_BOUNDS = (-10.0, 10.0)
DEFAULT_LATENT_SD_BOUNDS = (0.1, 10.0)

# EM and M-step stopping rules
DEFAULT_MAX_EM_ITERATIONS = 500
DEFAULT_EM_TOLERANCE = 1e-7
DEFAULT_MAX_LBFGS_ITERATIONS = 100
DEFAULT_LBFGS_TOLERANCE = 1e-10

# 41 points, as in IRTPRO and flexMIRT
DEFAULT_QUADRATURE_POINTS = 41


def _get_project_version() -> str:
    pyproject = get_project_root_dir() / "pyproject.toml"
    with open(pyproject) as f:
        version = toml.load(f).get("project", {}).get("version")

    if not isinstance(version, str) or not version:
        raise ValueError(f"No project version in {pyproject}")
    return version


@dataclass(frozen=True)
class QuadratureConfig:
    """
    Attributes:
        n_points: Number of Gauss-Hermite nodes.
        mean: Mean of the ability distribution. Fixed; it anchors the
            theta scale.
        std: Standard deviation of the ability distribution, or its
            starting value when the SD is estimated.
    """

    n_points: int = DEFAULT_QUADRATURE_POINTS
    mean: float = 0.0
    std: float = 1.0


@dataclass(frozen=True)
class ConvergenceConfig:
    """
    Attributes:
        max_em_iterations: EM iteration cap. Hitting it counts as a
            failure to converge.
        em_tolerance: EM stops once the relative change of the marginal
            log-likelihood falls below this value.
        max_lbfgs_iterations: Iteration cap of each per-item M-step.
        lbfgs_tolerance: ftol passed to L-BFGS-B.
    """

    max_em_iterations: int = DEFAULT_MAX_EM_ITERATIONS
    em_tolerance: float = DEFAULT_EM_TOLERANCE
    max_lbfgs_iterations: int = DEFAULT_MAX_LBFGS_ITERATIONS
    lbfgs_tolerance: float = DEFAULT_LBFGS_TOLERANCE


@dataclass(frozen=True)
class ParameterBounds:
    """
    Box constraints used by the optimisers.

    Attributes:
        step: (min, max) for every step difficulty.
        latent_sd: (min, max) multiplier on QuadratureConfig.std when the
            latent SD is estimated.
    """

    step: tuple[float, float] = DEFAULT_STEP_BOUNDS
    latent_sd: tuple[float, float] = DEFAULT_LATENT_SD_BOUNDS


@dataclass(frozen=True)
class EstimationConfig:
    """
    Everything the estimator needs.

    Attributes:
        quadrature: Quadrature grid settings.
        convergence: Stopping rules.
        bounds: Optimiser bounds.
        estimate_latent_sd: Estimate the SD of the ability distribution
            along with the items instead of holding it at quadrature.std.
        model_version: Package version stamped on every fitted model.
    """

    quadrature: QuadratureConfig = QuadratureConfig()
    convergence: ConvergenceConfig = ConvergenceConfig()
    bounds: ParameterBounds = ParameterBounds()
    estimate_latent_sd: bool = False
    model_version: str = field(default_factory=_get_project_version)
