# src/early_r/analytic/infectivity.py
"""
Force of infection for the renewal model.

    Lambda(t) = sum_{s=1}^{min(t, L)} I(t - s) * w(s)

Cases before the start of the series are taken to be zero.
"""

import numpy as np


def overall_infectivity(incidence, w):
    """Unscaled force of infection on each day of ``incidence``.

    Args:
        incidence (array-like): daily counts I_0..I_{T-1}
        w (array-like): serial interval mass indexed by lag (w[0] is ignored)
    Returns:
        np.ndarray shape (T,), Lambda(t); Lambda(0) is always 0
    """
    I = np.asarray(incidence, dtype=float)
    w_arr = np.asarray(w, dtype=float)
    T = I.size
    if T == 0:
        return np.zeros(0, dtype=float)

    # Drop lag 0 and keep only lags that can reach back into the series
    lagged = np.zeros(min(w_arr.size, T), dtype=float)
    lagged[1:] = w_arr[1:lagged.size]
    # full convolution: entry t is sum_s I[t - s] * lagged[s]
    return np.convolve(I, lagged)[:T]


def estimation_window(incidence):
    """Boolean mask of days that enter the likelihood.

    These are the days strictly after the first non-zero count: before it every
    term is trivially zero, and the first case itself has no observed history.
    """
    I = np.asarray(incidence)
    mask = np.zeros(I.shape, dtype=bool)
    nonzero = np.flatnonzero(I > 0)
    if nonzero.size:
        mask[nonzero[0] + 1:] = True
    return mask
