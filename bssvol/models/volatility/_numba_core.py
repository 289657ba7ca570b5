# bssvol/models/volatility/_numba_core.py
"""
Numba-accelerated loops for the volatility estimators.

These kernels walk the observed path once per call: the running sum of
absolute power increments behind the accumulated volatility estimate, and the
two power-variation sums at lags one and two behind the change-of-frequency
smoothness estimator.
"""

import logging
from typing import Tuple

import numpy as np
from numba import njit

logger = logging.getLogger("bssvol.models.volatility._numba_core")


@njit(cache=True)
def _accumulated_power_variation_core(y: np.ndarray, p: float) -> np.ndarray:
    """
    Inclusive running sum of |Y[i+1] - Y[i]|^p.

    Args:
        y: Observed path, length m >= 2
        p: Power

    Returns:
        Array of length m - 1
    """
    m = y.shape[0]
    out = np.empty(m - 1)
    total = 0.0
    for i in range(m - 1):
        total += np.abs(y[i + 1] - y[i]) ** p
        out[i] = total
    return out


@njit(cache=True)
def _change_of_frequency_sums(y: np.ndarray, p: float) -> Tuple[float, float]:
    """
    Power variations of the path at lag two and lag one.

    Returns:
        (sum |Y[i+2] - Y[i]|^p, sum |Y[i+1] - Y[i]|^p)
    """
    m = y.shape[0]
    coarse = 0.0
    fine = 0.0
    for i in range(m - 1):
        fine += np.abs(y[i + 1] - y[i]) ** p
        if i + 2 < m:
            coarse += np.abs(y[i + 2] - y[i]) ** p
    return coarse, fine
