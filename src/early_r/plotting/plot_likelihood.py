# src/early_r/plotting/plot_likelihood.py
from pathlib import Path
from typing import Optional, Tuple
import logging

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection

from ..analytic.likelihood import REstimateResult
from ..errors import DegenerateLikelihoodError

logger = logging.getLogger(__name__)


def plot_R_likelihood(
    result: REstimateResult,
    save_path: str = "figs/R_likelihood.png",
    level: Optional[float] = 0.95,
    R_limit: Optional[float] = None,
    figsize: Tuple[int, int] = (8, 5),
):
    """
    Plot the normalised likelihood of R:
    - the ML estimate as a vertical line
    - an equal-tailed interval as a shaded band (level=None to skip)
    R_limit crops the x axis; by default it stops where the curve has died out.
    """
    profile = result.profile
    if profile.is_degenerate:
        raise DegenerateLikelihoodError("Cannot plot a degenerate likelihood")

    R = profile.R_grid
    lik = profile.likelihood

    if R_limit is None:
        # last grid point carrying non-negligible mass, with some headroom
        visible = np.flatnonzero(lik > lik.max() * 1e-4)
        R_limit = min(R[-1], R[visible[-1]] * 1.2 + profile.step)

    fig, ax = plt.subplots(figsize=figsize)
    ax.plot(R, lik, color="#1f77b4", linewidth=2.0, label="likelihood")

    if level is not None:
        lo, hi = profile.credible_interval(level)
        band = (R >= lo) & (R <= hi)
        ax.fill_between(R[band], 0, lik[band], color="#7f8fa6", alpha=0.3,
                        label=f"{int(round(level * 100))}% interval [{lo:.2f}, {hi:.2f}]")

    ax.axvline(result.R_ml, color="red", linestyle="--", linewidth=1.5, label=f"ML R = {result.R_ml:.2f}")

    ax.set_xlabel("Reproduction number (R)")
    ax.set_ylabel("Normalised likelihood")
    ax.set_title(f"Likelihood of R ({len(result.incidence)} days of incidence)")
    ax.set_xlim(0, R_limit)
    ax.set_ylim(bottom=0)
    ax.grid(alpha=0.25)
    ax.legend(loc="upper right", fontsize="small")
    Path(save_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved likelihood plot to %s", save_path)
    return Path(save_path)


def plot_projections(
    observed: pd.Series,
    projections: pd.DataFrame,
    save_path: str = "figs/projections.png",
    max_lines: int = 200,
    quantiles: Optional[Tuple[float, float]] = (0.10, 0.90),
    figsize: Tuple[int, int] = (10, 6),
):
    """
    Observed incidence as bars followed by projected trajectories:
    - up to max_lines simulations drawn with a LineCollection
    - median and a quantile ribbon across all simulations
    ``observed`` and ``projections`` are indexed by day offset or date.
    """
    n_obs = len(observed)
    x_obs = np.arange(n_obs)
    x_proj = np.arange(n_obs, n_obs + len(projections))
    arr = projections.to_numpy(dtype=float).T  # (n_sim, n_days)

    segs = [np.column_stack([x_proj, row]) for row in arr[:max_lines]]
    lc = LineCollection(segs, linewidths=0.9, colors=(0.3, 0.3, 0.3, 0.25), zorder=1)

    fig, ax = plt.subplots(figsize=figsize)
    ax.bar(x_obs, observed.to_numpy(), color="#1f77b4", alpha=0.8, label="observed")
    ax.add_collection(lc)
    ax.autoscale()
    ax.plot(x_proj, np.median(arr, axis=0), color="red", linewidth=2.0, label="median projection")

    if quantiles:
        q_lo = np.quantile(arr, quantiles[0], axis=0)
        q_hi = np.quantile(arr, quantiles[1], axis=0)
        ax.fill_between(x_proj, q_lo, q_hi, color="#7f8fa6", alpha=0.3,
                        label=f"{int(quantiles[0] * 100)}-{int(quantiles[1] * 100)}%")

    ax.set_xlabel("Day")
    ax.set_ylabel("Daily incidence")
    ax.set_title(f"Projected incidence: {arr.shape[0]} simulations")
    ax.set_ylim(bottom=0)
    ax.grid(alpha=0.25)
    ax.legend(loc="upper left", fontsize="small")
    Path(save_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved projection plot to %s", save_path)
    return Path(save_path)
