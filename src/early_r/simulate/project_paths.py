# src/early_r/simulate/project_paths.py
"""
Glue between an R estimate and the projection routines: sample R from the
estimate's likelihood, then project forward from the observed incidence.
"""

from dataclasses import dataclass
from typing import Optional
import logging

import numpy as np
import pandas as pd
from numpy.random import default_rng

# Import API
from ..analytic.likelihood import REstimateResult
from ..analytic.sample_r import sample
from .batch_processing import project, write_projections_csv

# Start logger
logger = logging.getLogger(__name__)


@dataclass
class ProjectionConfig:
    n_days: int = 14
    n_sim: int = 1000
    n_R: int = 1000
    seed: Optional[int] = None
    fix_R_within: bool = True
    model: str = "poisson"
    size: Optional[float] = None
    out_path: Optional[str] = None
    use_tempfile: bool = False


def projection_dates(result: REstimateResult, n_days: int) -> Optional[pd.DatetimeIndex]:
    """Calendar dates of the projected days, or None for an undated series."""
    last = result.incidence.last_date
    if last is None:
        return None
    return pd.date_range(last + pd.Timedelta(days=1), periods=n_days, freq="D")


def project_from_estimate(result: REstimateResult, cfg: ProjectionConfig):
    """Sample R from ``result`` and project ``cfg.n_days`` ahead.

    Returns a DataFrame with one row per projected day and one column per
    simulation, plus the sampled R values. Writes a CSV when
    ``cfg.out_path`` is set or ``cfg.use_tempfile`` is True.
    """
    # One generator for both the R sample and the projections
    rng = default_rng(cfg.seed)
    R_sample = sample(result, cfg.n_R, seed=rng)

    trajectories, R_draws = project(
        R_values=R_sample,
        w=result.si.w,
        incidence=result.incidence,
        n_days=cfg.n_days,
        n_sim=cfg.n_sim,
        seed=rng,
        fix_R_within=cfg.fix_R_within,
        model=cfg.model,
        size=cfg.size,
    )

    dates = projection_dates(result, cfg.n_days)
    index = dates if dates is not None else pd.RangeIndex(1, cfg.n_days + 1, name="day")
    frame = pd.DataFrame(
        trajectories.T,
        index=index,
        columns=[f"sim_{i}" for i in range(1, cfg.n_sim + 1)],
    )

    if cfg.out_path is not None or cfg.use_tempfile:
        day_labels = None if dates is None else [d.date().isoformat() for d in dates]
        write_projections_csv(
            trajectories,
            R_draws,
            out_path=cfg.out_path,
            use_tempfile=cfg.use_tempfile,
            dates=day_labels,
        )

    logger.info(
        "Projected %d days x %d simulations (median total %.1f cases)",
        cfg.n_days, cfg.n_sim, float(np.median(trajectories.sum(axis=1))),
    )
    return frame, R_sample
