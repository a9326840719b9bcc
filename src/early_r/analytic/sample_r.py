# src/early_r/analytic/sample_r.py
"""
Draw R values from the likelihood profile of an estimate.

Draws are taken from the grid with replacement, with probability equal to the
normalised likelihood, i.e. from the posterior of R under a flat prior.
"""

from __future__ import annotations

import logging
from typing import Dict, Sequence, Union

import numpy as np
from numpy.random import Generator, default_rng

from ..errors import DegenerateLikelihoodError, InvalidInputError
from .likelihood import LikelihoodProfile, REstimateResult

logger = logging.getLogger(__name__)


def _as_rng(seed: Union[None, int, Generator]) -> Generator:
    if isinstance(seed, Generator):
        return seed
    return default_rng(seed)


def sample(
    result: Union[REstimateResult, LikelihoodProfile],
    n: int,
    seed: Union[None, int, Generator] = None,
) -> np.ndarray:
    """Sample n values of R from an estimate's likelihood profile.

    Args:
        result: REstimateResult (or its LikelihoodProfile)
        n: number of draws, > 0
        seed: int seed or numpy Generator; the same int seed gives the same draws
    Returns:
        np.ndarray shape (n,) of grid values
    Raises:
        InvalidInputError, DegenerateLikelihoodError
    """
    profile = result.profile if isinstance(result, REstimateResult) else result

    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise InvalidInputError(f"n must be an integer, got {n!r}")
    if n <= 0:
        raise InvalidInputError(f"n must be > 0, got {n}")
    if profile.is_degenerate:
        raise DegenerateLikelihoodError("likelihood is zero on the whole R grid; cannot sample R")

    rng = _as_rng(seed)
    # Renormalise in float64 so choice() accepts the weights
    p = profile.likelihood / profile.likelihood.sum()
    draws = rng.choice(profile.R_grid, size=int(n), replace=True, p=p)
    logger.debug("Drew %d R values (mean %.3f)", n, float(draws.mean()))
    return draws


def summarise_samples(R_samples: Sequence[float], quantiles=(0.025, 0.25, 0.5, 0.75, 0.975)) -> Dict[str, float]:
    """Mean, sd and quantiles of a sample of R values."""
    arr = np.asarray(R_samples, dtype=float)
    if arr.size == 0:
        raise InvalidInputError("cannot summarise an empty sample")
    out = {"n": int(arr.size), "mean": float(arr.mean()), "sd": float(arr.std(ddof=1)) if arr.size > 1 else 0.0}
    for q in quantiles:
        out[f"q{q:g}"] = float(np.quantile(arr, q))
    return out
