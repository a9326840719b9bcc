#!/usr/bin/env python3
# src/early_r/runner.py: concise runner
#
#   python -m early_r.runner estimate --incidence "1,0,1,0,0,0,1,1,0,2,1,1"
#   python -m early_r.runner sample --onsets 2024-01-01,2024-01-03 --last-date 2024-02-01 -N 1000
#   python -m early_r.runner project --incidence "1,0,2,1" --n-days 14 --n-sim 500 --out data/proj.csv
#   python -m early_r.runner plot --incidence "1,0,2,1" --out figs/R_likelihood.png

import argparse
import csv
import logging
import re
import sys
import time
from pathlib import Path
from typing import List, Optional

from .analytic.likelihood import DEFAULT_GRID_STEP, DEFAULT_R_MAX, EstimationConfig, run_estimation
from .analytic.sample_r import sample, summarise_samples
from .errors import InvalidInputError
from .incidence import IncidenceSeries
from .simulate.calculate_serial_weights import MEAN_SI_DAYS, SD_SI_DAYS
from .simulate.project_paths import ProjectionConfig, project_from_estimate

logger = logging.getLogger(__name__)


# Parser for incidence like 1,2,3
def parse_int_list(s: Optional[str]) -> List[int]:
    if not s:
        return []
    return [int(x) for x in re.split(r"[,\s;]+", s.strip()) if x]


# Parser for onset dates like 2024-01-01,2024-01-03
def parse_date_list(s: Optional[str]) -> List[str]:
    if not s:
        return []
    return [x for x in re.split(r"[,\s;]+", s.strip()) if x]


def add_data_args(p: argparse.ArgumentParser):
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--incidence", type=str, metavar="LIST",
                     help="Daily case counts up to today, comma/space separated")
    src.add_argument("--onsets", type=str, metavar="DATES",
                     help="Symptom onset dates (YYYY-MM-DD), comma/space separated")
    p.add_argument("--last-date", type=str, default=None, metavar="DATE",
                   help="Date of estimation when using --onsets (default: last onset)")
    p.add_argument("--si-mean", type=float, default=MEAN_SI_DAYS, metavar="DAYS",
                   help=f"Serial interval mean (default: {MEAN_SI_DAYS})")
    p.add_argument("--si-sd", type=float, default=SD_SI_DAYS, metavar="DAYS",
                   help=f"Serial interval std (default: {SD_SI_DAYS})")
    p.add_argument("--r-max", type=float, default=DEFAULT_R_MAX, metavar="R_MAX",
                   help=f"Upper bound of the R grid (default: {DEFAULT_R_MAX})")
    p.add_argument("--grid-step", type=float, default=DEFAULT_GRID_STEP, metavar="STEP",
                   help=f"R grid resolution (default: {DEFAULT_GRID_STEP})")


def load_incidence(args) -> IncidenceSeries:
    if args.onsets is not None:
        return IncidenceSeries.from_dates(parse_date_list(args.onsets), last_date=args.last_date)
    if args.last_date is not None:
        raise InvalidInputError("--last-date only applies to --onsets; pad --incidence with zero days instead")
    return IncidenceSeries(counts=parse_int_list(args.incidence))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Early outbreak R estimation")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    # ---------- estimate ----------
    est_p = sub.add_parser("estimate", help="Maximum-likelihood estimate of R")
    add_data_args(est_p)
    est_p.add_argument("--level", type=float, default=0.95,
                       help="Level of the reported likelihood interval (default: 0.95)")

    # ---------- sample ----------
    smp_p = sub.add_parser("sample", help="Sample R from its likelihood")
    add_data_args(smp_p)
    smp_p.add_argument("-N", "--num", dest="N", type=int, default=1000, metavar="N",
                       help="Number of R values to draw (default: 1000)")
    smp_p.add_argument("--seed", type=int, default=None, metavar="SEED",
                       help="RNG seed for reproducibility")
    smp_p.add_argument("--out", default=None, metavar="PATH",
                       help="Write the sampled values to this CSV")

    # ---------- project ----------
    prj_p = sub.add_parser("project", help="Project future incidence")
    add_data_args(prj_p)
    prj_p.add_argument("--n-days", type=int, default=14, help="Days to project (default: 14)")
    prj_p.add_argument("--n-sim", type=int, default=1000, help="Number of simulations (default: 1000)")
    prj_p.add_argument("--n-r", type=int, default=1000, help="Number of R values sampled (default: 1000)")
    prj_p.add_argument("--seed", type=int, default=None)
    prj_p.add_argument("--model", choices=["poisson", "negbin"], default="poisson")
    prj_p.add_argument("--size", type=float, default=None, help="Negative binomial dispersion")
    prj_p.add_argument("--vary-r", action="store_true", help="Redraw R every day instead of once per simulation")
    prj_p.add_argument("--out", default=None, metavar="PATH", help="Output CSV path")
    prj_p.add_argument("--plot", default=None, metavar="PATH", help="Save a projection plot to this PNG")

    # ---------- plot ----------
    plot_p = sub.add_parser("plot", help="Plot the likelihood of R")
    add_data_args(plot_p)
    plot_p.add_argument("--out", default="figs/R_likelihood.png", metavar="PATH")
    plot_p.add_argument("--level", type=float, default=0.95)

    return p


def run(args) -> None:
    incidence = load_incidence(args)
    cfg = EstimationConfig(
        si_mean=args.si_mean,
        si_sd=args.si_sd,
        R_grid_max=args.r_max,
        grid_step=args.grid_step,
    )
    result = run_estimation(incidence, cfg)

    if args.cmd == "estimate":
        print(result)
        if not result.profile.is_degenerate:
            lo, hi = result.profile.credible_interval(args.level)
            print(f"R_ml = {result.R_ml:.3f}  ({args.level:.0%} interval: {lo:.3f} - {hi:.3f})")

    elif args.cmd == "sample":
        R_sample = sample(result, args.N, seed=args.seed)
        for k, v in summarise_samples(R_sample).items():
            print(f"  {k}: {v}")
        if args.out:
            out = Path(args.out)
            out.parent.mkdir(parents=True, exist_ok=True)
            with out.open("w", newline="") as fh:
                writer = csv.writer(fh)
                writer.writerow(["draw", "R"])
                writer.writerows(enumerate(R_sample.tolist(), start=1))
            print("Samples ->", out)

    elif args.cmd == "project":
        pcfg = ProjectionConfig(
            n_days=args.n_days,
            n_sim=args.n_sim,
            n_R=args.n_r,
            seed=args.seed,
            fix_R_within=not args.vary_r,
            model=args.model,
            size=args.size,
            out_path=args.out,
        )
        frame, _ = project_from_estimate(result, pcfg)
        summary = frame.quantile([0.1, 0.5, 0.9], axis=1).T
        summary.columns = ["q10", "median", "q90"]
        print(summary.to_string())
        if args.out:
            print("Projections ->", args.out)
        if args.plot:
            from .plotting.plot_likelihood import plot_projections
            path = plot_projections(result.incidence.to_series(), frame, save_path=args.plot)
            print("Projection plot ->", path)

    elif args.cmd == "plot":
        from .plotting.plot_likelihood import plot_R_likelihood
        path = plot_R_likelihood(result, save_path=args.out, level=args.level)
        print("Likelihood plot ->", path)


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    t0 = time.perf_counter()

    try:
        run(args)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    logger.info("Done in %.2fs", time.perf_counter() - t0)
    return 0


if __name__ == "__main__":
    sys.exit(main())
