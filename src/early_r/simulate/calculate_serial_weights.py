# src/early_r/simulate/calculate_serial_weights.py
# This will compute discrete-time serial interval weights w_k
# from a continuous gamma distribution g(u)
from dataclasses import dataclass
from functools import lru_cache
import logging
import math

import numpy as np
from scipy.stats import gamma

from ..errors import InvalidParameterError

logger = logging.getLogger(__name__)

# Ebola serial interval (days)
MEAN_SI_DAYS = 15.3
SD_SI_DAYS = 9.3
DEFAULT_TOLERANCE = 1e-4


def gamma_shape_rate(mean, std):
    """Shape and rate of the gamma distribution with the given mean and std."""
    var = std ** 2
    return mean ** 2 / var, mean / var


@lru_cache(maxsize=64)
def compute_serial_weights(mean, std, tolerance=DEFAULT_TOLERANCE):
    """Calculates daily weights
    This function takes the mean and std of a disease's serial interval, and
    discretises the corresponding Gamma distribution onto integer day lags.
    Lag k gets the mass between k - 0.5 and k + 0.5 (lag 0 gets [0, 0.5]).
    The sequence stops at the first lag K where the mass beyond K + 0.5 drops
    below ``tolerance``.
    Args:
        mean (float): serial interval mean in days, e.g. 15.3 for Ebola
        std (float): serial interval std in days, e.g. 9.3 for Ebola
        tolerance (float): tail mass allowed to be dropped
    Returns:
        w (nparray(K + 1,)): read-only array indexed by lag, summing to
        between 1 - tolerance and 1
    Raises:
        InvalidParameterError
    """
    if not (mean > 0) or not math.isfinite(mean):
        raise InvalidParameterError(f"serial interval mean must be > 0, got {mean}")
    if not (std > 0) or not math.isfinite(std):
        raise InvalidParameterError(f"serial interval std must be > 0, got {std}")
    if not (0 < tolerance < 1):
        raise InvalidParameterError(f"tolerance must be in (0, 1), got {tolerance}")

    shape, rate = gamma_shape_rate(mean, std)
    g = gamma(a=shape, scale=1.0 / rate)

    # Cutoff: first half-integer edge with survival < tolerance
    k_max = int(math.ceil(g.isf(tolerance) - 0.5))
    k_max = max(k_max, 0)
    edges = np.arange(k_max + 1) + 0.5
    # sf() keeps precision in the tail; walk forward if isf() landed just short
    while g.sf(edges[-1]) >= tolerance:
        edges = np.append(edges, edges[-1] + 1.0)

    cdf = g.cdf(edges)
    w = np.diff(np.concatenate(([0.0], cdf)))
    # Remove any -ve rounding noise
    w[w < 0.0] = 0.0
    w.flags.writeable = False

    logger.debug("Serial interval (mean=%s, std=%s): %d lags, mass %.6f", mean, std, w.size, w.sum())
    return w


@dataclass(frozen=True, eq=False)
class SerialInterval:
    """Discretised gamma serial interval.

    ``w[k]`` is the probability that the serial interval is k days.
    """
    mean: float
    std: float
    w: np.ndarray
    tolerance: float = DEFAULT_TOLERANCE

    def __post_init__(self):
        if not (self.mean > 0) or not math.isfinite(self.mean):
            raise InvalidParameterError(f"serial interval mean must be > 0, got {self.mean}")
        if not (self.std > 0) or not math.isfinite(self.std):
            raise InvalidParameterError(f"serial interval std must be > 0, got {self.std}")

        w = np.array(self.w, dtype=float)
        if w.ndim != 1 or w.size == 0:
            raise InvalidParameterError("serial interval weights must be a non-empty 1D sequence")
        if not np.all(np.isfinite(w)) or np.any(w < 0):
            raise InvalidParameterError("serial interval weights must be finite and >= 0")
        if w.sum() > 1.0 + 1e-9:
            raise InvalidParameterError(f"serial interval weights sum to {w.sum():.6f} > 1")
        w.flags.writeable = False
        object.__setattr__(self, "w", w)

    @classmethod
    def from_gamma(cls, mean=MEAN_SI_DAYS, std=SD_SI_DAYS, tolerance=DEFAULT_TOLERANCE):
        w = compute_serial_weights(float(mean), float(std), float(tolerance))
        return cls(mean=float(mean), std=float(std), w=w, tolerance=float(tolerance))

    def __len__(self):
        return int(self.w.size)

    @property
    def max_lag(self):
        return len(self) - 1

    def pmf(self, lags):
        """Mass at the given integer lags; zero outside the truncated support."""
        lags = np.asarray(lags, dtype=int)
        out = np.zeros(lags.shape, dtype=float)
        inside = (lags >= 0) & (lags < len(self))
        out[inside] = self.w[lags[inside]]
        return out
