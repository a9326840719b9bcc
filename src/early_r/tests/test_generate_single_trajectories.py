import numpy as np
import pytest

from early_r.errors import InvalidInputError, InvalidParameterError
from early_r.simulate.generate_single_trajectory import (
    draw_cases,
    draw_R,
    simulate_trajectory,
)


def test_zero_R_gives_no_new_cases():
    """
    With R=0 nothing is ever transmitted, whatever the history.
    """
    w = [0.0, 1.0]  # all weight at lag 1
    res = simulate_trajectory(
        w=w,
        history=[3, 1],
        n_days=5,
        R_values=[0.0],
        rng=np.random.default_rng(123),
    )

    traj = res["trajectory"]
    assert traj.shape == (5,)
    assert np.all(traj == 0)
    assert res["cumulative"] == 0
    assert np.all(res["R"] == 0.0)


def test_history_is_not_mutated():
    history = [5, 2, 0]
    simulate_trajectory(
        w=[0.0, 0.5, 0.5],
        history=history,
        n_days=4,
        R_values=[1.5],
        rng=np.random.default_rng(1),
    )
    assert history == [5, 2, 0]


def test_empty_history_produces_nothing():
    res = simulate_trajectory(w=[0.0, 1.0], history=[], n_days=3, R_values=[2.0], rng=np.random.default_rng(0))
    assert np.all(res["trajectory"] == 0)


def test_R_fixed_within_trajectory():
    res = simulate_trajectory(
        w=[0.0, 1.0],
        history=[1],
        n_days=10,
        R_values=np.linspace(0.5, 3.0, 20),
        rng=np.random.default_rng(5),
        fix_R_within=True,
    )
    assert np.unique(res["R"]).size == 1


def test_R_redrawn_every_day():
    res = simulate_trajectory(
        w=[0.0, 1.0],
        history=[1],
        n_days=50,
        R_values=[0.0, 5.0],
        rng=np.random.default_rng(5),
        fix_R_within=False,
    )
    assert set(np.unique(res["R"]).tolist()) == {0.0, 5.0}


def test_poisson_mean_follows_renewal_equation():
    """
    With all serial interval mass at lag 1, day-1 cases are Poisson(R * I_last).
    """
    rng = np.random.default_rng(2024)
    day1 = [
        simulate_trajectory(w=[0.0, 1.0], history=[10], n_days=1, R_values=[2.0], rng=rng)["trajectory"][0]
        for _ in range(2000)
    ]
    assert np.mean(day1) == pytest.approx(20.0, abs=0.5)


def test_negbin_mean_and_overdispersion():
    rng = np.random.default_rng(2024)
    draws = np.array([draw_cases(20.0, rng, model="negbin", size=2.0) for _ in range(4000)])
    assert draws.mean() == pytest.approx(20.0, abs=1.5)
    # variance lam + lam^2 / size = 220, far above Poisson
    assert draws.var() > 100


def test_draw_cases_zero_mean():
    rng = np.random.default_rng(0)
    assert draw_cases(0.0, rng) == 0
    assert draw_cases(0.0, rng, model="negbin", size=1.0) == 0


def test_draw_R_single_value():
    rng = np.random.default_rng(0)
    assert draw_R(1.7, rng) == 1.7
    assert draw_R([2.5], rng) == 2.5
    assert draw_R([1.0, 2.0], rng) in (1.0, 2.0)


def test_invalid_horizon():
    with pytest.raises(InvalidInputError):
        simulate_trajectory(w=[0.0, 1.0], history=[1], n_days=0, R_values=[1.0])


@pytest.mark.parametrize("model,size", [("negbin", None), ("negbin", 0.0), ("negbin", -1.0), ("binomial", None)])
def test_invalid_model(model, size):
    with pytest.raises(InvalidParameterError):
        simulate_trajectory(w=[0.0, 1.0], history=[1], n_days=3, R_values=[1.0], model=model, size=size)
