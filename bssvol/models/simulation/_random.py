# bssvol/models/simulation/_random.py
"""Random generator and grid helpers shared by the simulators."""

import numpy as np

from ...core.config import get_config
from ...core.exceptions import raise_parameter_error
from ...core.parameters import validate_positive
from ...core.types import RandomStateLike
from ...core.validation import validate_sampling_rate


def make_rng(random_state: RandomStateLike = None) -> np.random.Generator:
    """Return a Generator, seeding from ``core.random_seed`` when none is given."""
    if isinstance(random_state, np.random.Generator):
        return random_state
    if random_state is None:
        random_state = get_config("core", "random_seed")
    return np.random.default_rng(random_state)


def validate_grid(N: int, n: int, T: float):
    """Validate the simulation grid and check N = n * T.

    The grid is N steps of width 1/n covering [0, T], so the three values are
    tied together. Calls in which T does not equal N / n, such as N=10000,
    n=100, T=1.0, are rejected rather than reinterpreted; pass T = N / n.

    Returns:
        Tuple[int, int, float]: The validated (N, n, T)

    Raises:
        ParameterError: If any value is invalid or N differs from n * T
    """
    N = validate_sampling_rate(N, "N")
    n = validate_sampling_rate(n, "n")
    T = float(validate_positive(T, "T"))

    if abs(N - n * T) > 1e-9 * max(1.0, N):
        raise_parameter_error(
            f"N must equal n * T, got N={N}, n={n}, T={T}; "
            f"use T={N / n} for {N} steps at rate {n}",
            param_name="N",
            param_value=N,
            constraint=f"N == n * T == {n * T}"
        )
    return N, n, T
