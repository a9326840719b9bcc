import numpy as np
import pandas as pd
import pytest

from early_r.analytic.likelihood import estimate
from early_r.errors import DegenerateLikelihoodError
from early_r.plotting.plot_likelihood import plot_projections, plot_R_likelihood
from early_r.simulate.calculate_serial_weights import SerialInterval

WORKED_EXAMPLE = [1, 0, 1, 0, 0, 0, 1, 1, 0, 2, 1, 1] + [0] * 34


def test_plot_R_likelihood_writes_png(tmp_path):
    res = estimate(WORKED_EXAMPLE, si_mean=15.3, si_sd=9.3)
    out = tmp_path / "figs" / "R.png"
    path = plot_R_likelihood(res, save_path=str(out))
    assert path == out
    assert out.exists() and out.stat().st_size > 0


def test_plot_R_likelihood_without_interval(tmp_path):
    res = estimate(WORKED_EXAMPLE, si_mean=15.3, si_sd=9.3)
    out = tmp_path / "R.png"
    plot_R_likelihood(res, save_path=str(out), level=None, R_limit=3.0)
    assert out.exists()


def test_plot_degenerate_likelihood_raises(tmp_path):
    si = SerialInterval(mean=1.0, std=0.1, w=np.array([0.0, 1.0]))
    res = estimate([1, 0, 1], si=si)
    with pytest.raises(DegenerateLikelihoodError):
        plot_R_likelihood(res, save_path=str(tmp_path / "R.png"))


def test_plot_projections_writes_png(tmp_path):
    observed = pd.Series(WORKED_EXAMPLE)
    rng = np.random.default_rng(0)
    projections = pd.DataFrame(rng.poisson(1.0, size=(10, 30)))
    out = tmp_path / "proj.png"
    plot_projections(observed, projections, save_path=str(out), max_lines=15)
    assert out.exists()
