# src/early_r/simulate/generate_single_trajectory.py
# ###
# Forward projection of one incidence trajectory with the renewal method.
#
# Future expected incidence on day t is R * sum_s I_{t-s} w_s, where I runs
# over the observed history followed by the days already simulated. Counts are
# drawn as Poisson, or negative binomial with dispersion `size`.
# ###

import numpy as np
from numpy.random import default_rng

from ..errors import InvalidInputError, InvalidParameterError

MODELS = ("poisson", "negbin")


def draw_R(R_values, rng):
    """Pick one R from a sample of R values

    """
    R_arr = np.asarray(R_values, dtype=float)
    if R_arr.ndim == 0:
        return float(R_arr)
    if R_arr.size == 1:
        return float(R_arr[0])
    return float(rng.choice(R_arr))


def draw_cases(lam, rng, model="poisson", size=None):
    """Draw a daily count with mean lam

    """
    if lam <= 0.0:
        return 0
    if model == "poisson":
        return int(rng.poisson(lam))
    # negative binomial with mean lam and variance lam + lam^2 / size
    return int(rng.negative_binomial(size, size / (size + lam)))


def check_model(model, size):
    if model not in MODELS:
        raise InvalidParameterError(f"model must be one of {MODELS}, got {model!r}")
    if model == "negbin":
        if size is None or not (size > 0) or not np.isfinite(size):
            raise InvalidParameterError(f"negbin model needs a dispersion size > 0, got {size}")


def simulate_trajectory(w, history, n_days, R_values, rng=None, fix_R_within=True, model="poisson", size=None):
    """Simulate n_days of incidence following the observed history


    result : dict with keys:
        - "trajectory" : np.ndarray shape (n_days,), simulated daily counts
        - "R"          : np.ndarray shape (n_days,), R used on each day
        - "cumulative" : int, total simulated cases
    """

    # Horizon check
    if n_days < 1:
        raise InvalidInputError("n_days must be >= 1")
    check_model(model, size)

    # Convert weights to array (indexed by lag, lag 0 ignored)
    w_arr = np.asarray(w, dtype=float)

    if w_arr.ndim != 1:
        raise InvalidParameterError("w is not a 1D sequence of weights")

    max_support = w_arr.size - 1

    # Select rng from np.random
    if rng is None:
        rng = default_rng()

    past_cases = np.asarray(history, dtype=int)
    T0 = past_cases.size

    # History followed by the days to simulate
    cases = np.zeros(T0 + n_days, dtype=int)
    cases[:T0] = past_cases
    R_used = np.zeros(n_days, dtype=float)

    R = draw_R(R_values, rng) if fix_R_within else None

    for t in range(T0, T0 + n_days):
        max_lag = min(max_support, t)
        if max_lag <= 0:
            lam_base = 0.0
        else:
            past = cases[t - max_lag : t]            # I_{t-max_lag}..I_{t-1}
            ws = w_arr[1 : max_lag + 1]             # w_1..w_maxlag
            lam_base = float(np.dot(ws, past[::-1]))  # align w_s with I_{t-s}

        if not fix_R_within:
            R = draw_R(R_values, rng)
        R_used[t - T0] = R

        cases[t] = draw_cases(R * lam_base, rng, model=model, size=size)

    trajectory = cases[T0:]
    return {
        "trajectory": trajectory,
        "R": R_used,
        "cumulative": int(trajectory.sum()),
    }
