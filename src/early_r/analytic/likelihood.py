# src/early_r/analytic/likelihood.py
"""
Maximum-likelihood estimation of R from early incidence.

The Poisson renewal log-likelihood is evaluated on a uniform grid of R values;
normalising it gives a discrete posterior for R under a flat prior, which is
what the sampler draws from.
"""

# Store type annotations as strings instead of evaluating them immediately.
from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Optional, Tuple

import numpy as np
import pandas as pd
from scipy.special import gammaln, xlogy

from ..errors import DegenerateLikelihoodError, InvalidInputError
from ..incidence import IncidenceLike, IncidenceSeries, as_incidence
from ..simulate.calculate_serial_weights import (
    DEFAULT_TOLERANCE,
    MEAN_SI_DAYS,
    SD_SI_DAYS,
    SerialInterval,
)
from .infectivity import estimation_window, overall_infectivity

logger = logging.getLogger(__name__)

# defaults
DEFAULT_R_MAX = 30.0
DEFAULT_GRID_STEP = 0.01


@dataclass
class EstimationConfig:
    si_mean: float = MEAN_SI_DAYS
    si_sd: float = SD_SI_DAYS
    R_grid_max: float = DEFAULT_R_MAX
    grid_step: float = DEFAULT_GRID_STEP
    si_tolerance: float = DEFAULT_TOLERANCE


def make_R_grid(R_max=DEFAULT_R_MAX, step=DEFAULT_GRID_STEP):
    """Uniform grid 0, step, 2*step, ... up to R_max."""
    if not math.isfinite(R_max) or R_max <= 0:
        raise InvalidInputError(f"R_grid_max must be > 0, got {R_max}")
    if not math.isfinite(step) or step <= 0:
        raise InvalidInputError(f"grid_step must be > 0, got {step}")
    if step > R_max:
        raise InvalidInputError(f"grid_step ({step}) must be <= R_grid_max ({R_max})")
    # small slack so that e.g. 30 / 0.01 keeps its last point
    n = int(math.floor(R_max / step + 1e-9))
    return np.arange(n + 1, dtype=float) * step


def log_likelihood_grid(incidence, infectivity, R_grid, window=None):
    """Poisson renewal log-likelihood for every R on the grid; uses gammaln for factorials.

    Days with zero expected cases contribute 0 if nothing was observed and
    -inf otherwise.

    Returns an array of float vals, one per grid point.
    """
    I = np.asarray(incidence, dtype=float)
    lam = np.asarray(infectivity, dtype=float)
    if window is not None:
        I, lam = I[window], lam[window]

    R = np.asarray(R_grid, dtype=float)
    if I.size == 0:
        return np.zeros(R.shape, dtype=float)

    mu = np.outer(R, lam)
    with np.errstate(divide="ignore"):
        terms = xlogy(I, mu) - mu - gammaln(I + 1.0)
    return terms.sum(axis=1)


def normalise_loglik(loglik):
    """exp(loglik - max), scaled to sum to one; all zeros if nothing is finite."""
    loglik = np.asarray(loglik, dtype=float)
    if not np.any(np.isfinite(loglik)):
        return np.zeros_like(loglik)
    rel = np.exp(loglik - np.max(loglik))
    return rel / rel.sum()


def _read_only(arr):
    arr = np.array(arr, dtype=float)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class LikelihoodProfile:
    """Likelihood of R over a uniform grid.

    Attributes:
        R_grid (np.ndarray): candidate R values, increasing and equally spaced
        loglik (np.ndarray): unnormalised log-likelihood at each grid value
        likelihood (np.ndarray): normalised likelihood, sums to one
            (all zeros when the profile is degenerate)
    """
    R_grid: np.ndarray
    loglik: np.ndarray
    likelihood: np.ndarray

    @classmethod
    def from_loglik(cls, R_grid, loglik) -> "LikelihoodProfile":
        return cls(
            R_grid=_read_only(R_grid),
            loglik=_read_only(loglik),
            likelihood=_read_only(normalise_loglik(loglik)),
        )

    def __len__(self):
        return int(self.R_grid.size)

    @property
    def step(self) -> float:
        if len(self) < 2:
            return 0.0
        return float(self.R_grid[1] - self.R_grid[0])

    @property
    def is_degenerate(self) -> bool:
        return not np.any(self.likelihood > 0)

    @property
    def ml_index(self) -> Optional[int]:
        if self.is_degenerate:
            return None
        return int(np.argmax(self.loglik))

    @property
    def R_ml(self) -> float:
        idx = self.ml_index
        return float("nan") if idx is None else float(self.R_grid[idx])

    def density(self) -> np.ndarray:
        """Likelihood rescaled to integrate to ~1 with the grid spacing."""
        return self.likelihood / self.step if self.step > 0 else self.likelihood.copy()

    def credible_interval(self, level=0.95) -> Tuple[float, float]:
        """Equal-tailed interval read off the cumulative grid likelihood."""
        if not (0 < level < 1):
            raise InvalidInputError(f"level must be in (0, 1), got {level}")
        if self.is_degenerate:
            raise DegenerateLikelihoodError("likelihood is zero on the whole R grid")
        cdf = np.cumsum(self.likelihood)
        tail = 0.5 * (1.0 - level)
        lo = int(np.searchsorted(cdf, tail, side="left"))
        hi = int(np.searchsorted(cdf, 1.0 - tail, side="left"))
        hi = min(hi, len(self) - 1)
        return float(self.R_grid[lo]), float(self.R_grid[hi])

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"R": self.R_grid, "loglik": self.loglik, "likelihood": self.likelihood})


@dataclass(frozen=True, eq=False)
class REstimateResult:
    """Outcome of ``estimate``.

    ``infectivity`` is the unscaled force of infection Lambda(t) over the whole
    series; ``lambdas`` is that scaled by the ML estimate of R.
    """
    incidence: IncidenceSeries
    si: SerialInterval
    profile: LikelihoodProfile
    infectivity: np.ndarray

    @property
    def ml_index(self) -> Optional[int]:
        return self.profile.ml_index

    @property
    def R_ml(self) -> float:
        return self.profile.R_ml

    @property
    def R_grid(self) -> np.ndarray:
        return self.profile.R_grid

    @property
    def likelihood(self) -> np.ndarray:
        return self.profile.likelihood

    @property
    def lambdas(self) -> np.ndarray:
        return self.R_ml * self.infectivity

    @property
    def dates(self) -> pd.Index:
        return self.incidence.dates

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "incidence": self.incidence.counts,
                "infectivity": self.infectivity,
                "lambda": self.lambdas,
            },
            index=self.dates,
        )

    def __repr__(self):
        return (
            f"REstimateResult(R_ml={self.R_ml:.3f}, days={len(self.incidence)}, "
            f"si=Gamma(mean={self.si.mean}, sd={self.si.std}), grid=[0, {self.R_grid[-1]:g}])"
        )


def estimate(
    incidence: IncidenceLike,
    si_mean: Optional[float] = None,
    si_sd: Optional[float] = None,
    R_grid_max: float = DEFAULT_R_MAX,
    grid_step: float = DEFAULT_GRID_STEP,
    si: Optional[SerialInterval] = None,
    si_tolerance: float = DEFAULT_TOLERANCE,
) -> REstimateResult:
    """
    Estimate R by maximum likelihood over a grid.

    Args:
        incidence: IncidenceSeries or sequence of daily counts, running up to
            the date of estimation (trailing zero days included)
        si_mean, si_sd: serial interval mean and sd in days
        R_grid_max: largest R on the grid
        grid_step: grid resolution
        si: pre-computed SerialInterval, used instead of si_mean / si_sd
        si_tolerance: tail mass dropped when discretising the serial interval
    Returns:
        REstimateResult
    Raises:
        InvalidInputError, InvalidParameterError
    """
    series = as_incidence(incidence)

    if si is None:
        if si_mean is None or si_sd is None:
            raise InvalidInputError("either si_mean and si_sd or si must be provided")
        si = SerialInterval.from_gamma(si_mean, si_sd, tolerance=si_tolerance)

    R_grid = make_R_grid(R_grid_max, grid_step)

    infectivity = overall_infectivity(series.counts, si.w)
    window = estimation_window(series.counts)
    logger.debug("Estimation window: %d of %d days", int(window.sum()), len(series))

    loglik = log_likelihood_grid(series.counts, infectivity, R_grid, window=window)
    profile = LikelihoodProfile.from_loglik(R_grid, loglik)

    if profile.is_degenerate:
        logger.warning(
            "Likelihood is zero for every R in [0, %g]: observed cases cannot be "
            "explained by the serial interval", R_grid[-1]
        )
    else:
        logger.info("ML estimate of R: %.3f", profile.R_ml)

    return REstimateResult(
        incidence=series,
        si=si,
        profile=profile,
        infectivity=_read_only(infectivity),
    )


def run_estimation(incidence: IncidenceLike, cfg: EstimationConfig) -> REstimateResult:
    """Wrap estimate for callers holding an EstimationConfig."""
    return estimate(
        incidence,
        si_mean=cfg.si_mean,
        si_sd=cfg.si_sd,
        R_grid_max=cfg.R_grid_max,
        grid_step=cfg.grid_step,
        si_tolerance=cfg.si_tolerance,
    )
