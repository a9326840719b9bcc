# src/early_r/simulate/batch_processing.py
#
# Calls `simulate_trajectory` as many times as needed to project a
# user-defined number of future incidence paths, and optionally writes them
# to a CSV with headers sim_id, R_draw, day_1..day_n, cumulative_cases.

import csv
import logging
import tempfile
from pathlib import Path

import numpy as np
from numpy.random import Generator, default_rng

from ..errors import InvalidInputError
from ..incidence import as_incidence
from .generate_single_trajectory import check_model, simulate_trajectory

logger = logging.getLogger(__name__)


def default_csv_path(use_tempfile=True):
    """Define the filepath of csv


    """
    if use_tempfile:
        tf = tempfile.NamedTemporaryFile(prefix="projected_cases_", suffix=".csv")
        p = Path(tf.name)
        tf.close()
        return p
    else:
        return Path("projected_cases.csv")


def check_R_values(R_values):
    R_arr = np.atleast_1d(np.asarray(R_values, dtype=float))
    if R_arr.ndim != 1 or R_arr.size == 0:
        raise InvalidInputError("R values must be a non-empty 1D sequence")
    if not np.all(np.isfinite(R_arr)) or np.any(R_arr < 0):
        raise InvalidInputError("R values must be finite and >= 0")
    return R_arr


def project(
    R_values,
    w,
    incidence,
    n_days,
    n_sim=100,
    seed=None,
    fix_R_within=True,
    model="poisson",
    size=None,
):
    """Project future daily incidence.

    Args:
        R_values: sampled R values (e.g. from ``sample``); each simulation draws from these
        w: serial interval mass indexed by lag
        incidence: observed history (IncidenceSeries or daily counts)
        n_days: number of future days
        n_sim: number of simulated trajectories
        seed: int seed or numpy Generator
        fix_R_within: keep one R per trajectory (True) or redraw it every day
        model: "poisson" or "negbin"
        size: negative binomial dispersion, required for "negbin"
    Returns:
        trajectories (np.ndarray (n_sim, n_days)), R_draws (np.ndarray (n_sim,))
        where R_draws is the R each trajectory used (its daily mean when
        fix_R_within is False)
    """
    if n_days < 1:
        raise InvalidInputError(f"n_days must be >= 1, got {n_days}")
    if n_sim < 1:
        raise InvalidInputError(f"n_sim must be >= 1, got {n_sim}")
    check_model(model, size)
    R_arr = check_R_values(R_values)
    history = as_incidence(incidence).counts

    rng = seed if isinstance(seed, Generator) else default_rng(seed)

    # define ND array for all trajectories
    trajectories = np.zeros((n_sim, n_days), dtype=int)
    R_draws = np.zeros(n_sim, dtype=float)

    for sim_id in range(n_sim):
        result = simulate_trajectory(
            w=w,
            history=history,
            n_days=n_days,
            R_values=R_arr,
            rng=rng,
            fix_R_within=fix_R_within,
            model=model,
            size=size,
        )
        trajectories[sim_id, :] = result["trajectory"]
        R_used = result["R"]
        R_draws[sim_id] = float(R_used[0]) if fix_R_within else float(R_used.mean())

    logger.debug("Projected %d trajectories over %d days", n_sim, n_days)
    return trajectories, R_draws


def write_projections_csv(trajectories, R_draws, out_path=None, use_tempfile=True, dates=None):
    """Write projected trajectories, one row per simulation.

    ``dates`` (optional) replaces the day_1..day_n column names.
    """
    trajectories = np.asarray(trajectories, dtype=int)
    n_sim, n_days = trajectories.shape

    # Do file pathing
    if out_path is None:
        csv_path = default_csv_path(use_tempfile=use_tempfile)
    else:
        csv_path = Path(out_path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    if dates is None:
        day_cols = [f"day_{d}" for d in range(1, n_days + 1)]
    else:
        day_cols = [str(d) for d in dates]
        if len(day_cols) != n_days:
            raise InvalidInputError("dates must have one entry per projected day")

    # Setup csv headers
    header = ["sim_id", "R_draw"] + day_cols + ["cumulative_cases"]

    with csv_path.open("w", newline="") as fh:
        writer = csv.writer(fh)
        writer.writerow(header)
        for sim_id in range(n_sim):
            traj = trajectories[sim_id]
            row = [sim_id + 1, float(R_draws[sim_id]), *traj.tolist(), int(traj.sum())]
            writer.writerow(row)

    logger.info("Projections written to: %s", csv_path)
    return csv_path
