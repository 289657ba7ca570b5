# bssvol/utils/correlation.py
"""
Empirical autocorrelation helpers.

Thin wrappers around ``statsmodels.tsa.stattools.acf`` that validate the lag
count against the sample length and drop the trivial lag-0 value, so callers
receive the autocorrelation at lags 1..nlags only.
"""

import logging
from typing import Optional

import numpy as np
from statsmodels.tsa.stattools import acf

from ..core.exceptions import raise_data_error, raise_parameter_error

logger = logging.getLogger("bssvol.utils.correlation")


def max_available_lag(length: int, nlags: Optional[int]) -> int:
    """Cap a requested lag count at ``length - 1``.

    Args:
        length: Sample length
        nlags: Requested number of lags, or None/0 for ``length - 1``

    Returns:
        int: Number of lags that can be estimated
    """
    available = length - 1
    if nlags is None or nlags == 0:
        return available
    if nlags < 0:
        raise_parameter_error(
            f"nlags must be non-negative, got {nlags}",
            param_name="nlags",
            param_value=nlags,
            constraint="nlags >= 0"
        )
    if nlags > available:
        logger.debug(f"Requested {nlags} lags, only {available} available")
    return int(min(nlags, available))


def empirical_acf(x: np.ndarray, nlags: Optional[int] = None) -> np.ndarray:
    """Sample autocorrelation of ``x`` at lags 1..nlags.

    Args:
        x: 1-D series with at least two observations
        nlags: Number of lags (None or 0 for ``len(x) - 1``, capped there)

    Returns:
        np.ndarray: Autocorrelations, length ``nlags``

    Raises:
        DataError: If the series is too short or has zero variance
    """
    x = np.asarray(x, dtype=np.float64)
    if x.shape[0] < 2:
        raise_data_error(
            "At least two observations are required to estimate an autocorrelation",
            data_name="x",
            issue=f"insufficient length: {x.shape[0]} < 2"
        )
    if np.var(x) == 0.0:
        raise_data_error(
            "Autocorrelation is undefined for a constant series",
            data_name="x",
            issue="zero variance"
        )

    lags = max_available_lag(x.shape[0], nlags)
    return acf(x, nlags=lags, fft=True)[1:]


def increments_acf(y: np.ndarray, nlags: Optional[int] = None) -> np.ndarray:
    """Sample autocorrelation of the first differences of ``y``."""
    return empirical_acf(np.diff(np.asarray(y, dtype=np.float64)), nlags)
