# bssvol/models/simulation/_numba_core.py
"""
Numba-accelerated recursions for the path simulators.
"""

import logging

import numpy as np
from numba import njit

logger = logging.getLogger("bssvol.models.simulation._numba_core")


@njit(cache=True)
def _ou_recursion(x0: float, decay: float, scale: float, shocks: np.ndarray) -> np.ndarray:
    """
    Exact AR(1) recursion of an Ornstein-Uhlenbeck process on a regular grid.

    Args:
        x0: Initial value
        decay: exp(-theta * dt)
        scale: Conditional standard deviation of one step
        shocks: Standard normal draws, one per step

    Returns:
        Path of length len(shocks) + 1 starting at x0
    """
    m = shocks.shape[0]
    x = np.empty(m + 1)
    x[0] = x0
    for i in range(m):
        x[i + 1] = decay * x[i] + scale * shocks[i]
    return x


@njit(cache=True)
def _hybrid_near_sum(near: np.ndarray, weights: np.ndarray, num_past: int, num_steps: int) -> np.ndarray:
    """
    Near-origin part of the hybrid scheme.

    Args:
        near: Volatility-scaled Wiener integrals, shape (cells, kappa); column
            k - 1 holds the integral feeding the observation k cells ahead
        weights: Slowly varying factor L(k / n) for k = 1..kappa
        num_past: Number of pre-sample cells
        num_steps: Number of in-sample cells N

    Returns:
        Array of length N + 1
    """
    kappa = weights.shape[0]
    out = np.zeros(num_steps + 1)
    for i in range(num_steps + 1):
        c = i + num_past
        total = 0.0
        for k in range(1, kappa + 1):
            if k > c:
                break
            total += weights[k - 1] * near[c - k, k - 1]
        out[i] = total
    return out
