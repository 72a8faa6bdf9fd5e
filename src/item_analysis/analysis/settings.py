from pydantic_settings import BaseSettings

from item_analysis.core.constants import MISSING_CHAR
from item_analysis.irt.estimation.config import (
    DEFAULT_EM_TOLERANCE,
    DEFAULT_MAX_EM_ITERATIONS,
    DEFAULT_QUADRATURE_POINTS,
    ConvergenceConfig,
    EstimationConfig,
    QuadratureConfig,
)

ITEM_ANALYSIS_ENV_PREFIX = "ITEM_ANALYSIS_"


class AnalysisSettings(BaseSettings):
    model_config = {"env_prefix": ITEM_ANALYSIS_ENV_PREFIX}

    random_seed: int | None = None
    quadrature_points: int = DEFAULT_QUADRATURE_POINTS
    max_em_iterations: int = DEFAULT_MAX_EM_ITERATIONS
    em_tolerance: float = DEFAULT_EM_TOLERANCE
    estimate_latent_sd: bool = False
    missing_marker: str = MISSING_CHAR

    def to_estimation_config(self) -> EstimationConfig:
        return EstimationConfig(
            quadrature=QuadratureConfig(n_points=self.quadrature_points),
            convergence=ConvergenceConfig(
                max_em_iterations=self.max_em_iterations,
                em_tolerance=self.em_tolerance,
            ),
            estimate_latent_sd=self.estimate_latent_sd,
        )
