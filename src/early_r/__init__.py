# src/early_r/__init__.py
"""
early_r: estimate the reproduction number of an early outbreak from daily
incidence and a gamma serial interval, sample from its likelihood and project
incidence forward.
"""
from .version_info import VERSION as __version__  # noqa: F401

from .errors import (  # noqa: F401
    DegenerateLikelihoodError,
    InvalidInputError,
    InvalidParameterError,
)
from .incidence import IncidenceSeries  # noqa: F401
from .simulate.calculate_serial_weights import (  # noqa: F401
    MEAN_SI_DAYS,
    SD_SI_DAYS,
    SerialInterval,
    compute_serial_weights,
)
from .analytic.infectivity import overall_infectivity  # noqa: F401
from .analytic.likelihood import (  # noqa: F401
    EstimationConfig,
    LikelihoodProfile,
    REstimateResult,
    estimate,
    run_estimation,
)
from .analytic.sample_r import sample, summarise_samples  # noqa: F401
from .simulate.batch_processing import project  # noqa: F401
from .simulate.project_paths import ProjectionConfig, project_from_estimate  # noqa: F401
