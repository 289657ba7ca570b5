# bssvol/models/simulation/ornstein_uhlenbeck.py
"""
Exponentiated Ornstein-Uhlenbeck volatility process.

X solves dX_t = -theta X_t dt + beta dW_t and sigma_t = exp(X_t). The path is
simulated with the exact Gaussian transition on the grid k / n, started from
the stationary distribution N(0, beta^2 / (2 theta)), so sigma is stationary
from time zero.
"""

import logging

import numpy as np

from ...core.parameters import validate_non_negative, validate_positive
from ...core.types import RandomStateLike
from ._numba_core import _ou_recursion
from ._random import make_rng, validate_grid

logger = logging.getLogger("bssvol.models.simulation.ornstein_uhlenbeck")


def exponentiated_ornstein_uhlenbeck(N: int,
                                     n: int,
                                     T: float,
                                     theta: float,
                                     beta: float,
                                     random_state: RandomStateLike = None) -> np.ndarray:
    """Simulate exp(X) for a stationary Ornstein-Uhlenbeck process X.

    Args:
        N: Number of steps, must equal n * T
        n: Steps per unit time
        T: Time horizon
        theta: Mean-reversion speed, strictly positive
        beta: Diffusion coefficient, non-negative
        random_state: Seed or Generator (None reads ``core.random_seed``)

    Returns:
        np.ndarray: Strictly positive volatility path of length N + 1

    Raises:
        ParameterError: If any argument is invalid or N differs from n * T
    """
    N, n, T = validate_grid(N, n, T)
    theta = float(validate_positive(theta, "theta"))
    beta = float(validate_non_negative(beta, "beta"))
    rng = make_rng(random_state)

    dt = 1.0 / n
    decay = np.exp(-theta * dt)
    stationary_sd = beta / np.sqrt(2.0 * theta)
    step_sd = stationary_sd * np.sqrt(-np.expm1(-2.0 * theta * dt))

    x0 = stationary_sd * rng.standard_normal()
    x = _ou_recursion(x0, decay, step_sd, rng.standard_normal(N))

    logger.debug(f"Simulated exponentiated OU path: N={N}, theta={theta}, beta={beta}")
    return np.exp(x)
