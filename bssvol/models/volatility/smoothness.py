# bssvol/models/volatility/smoothness.py
"""
Change-of-frequency estimator of the roughness index alpha.

Comparing the p-th power variation of a BSS path at lag two with the one at
lag one identifies the local scaling exponent of the increments: for a
process whose increment standard deviation scales as h^(alpha + 1/2),

    sum |Y[i+2] - Y[i]|^p / sum |Y[i+1] - Y[i]|^p  ->  2^(p (alpha + 1/2)).

The estimator needs no kernel model and is unaffected by the volatility
process, which makes it the starting point for the kernel fits.
"""

import logging

import numpy as np

from ...core.exceptions import STAGE_FITTING, raise_estimation_error
from ...core.types import PathLike
from ...core.validation import validate_path, validate_power
from ._numba_core import _change_of_frequency_sums

logger = logging.getLogger("bssvol.models.volatility.smoothness")


def bss_alpha_fit(y: PathLike, p: float = 2) -> float:
    """Estimate the roughness index alpha with the change-of-frequency method.

    Args:
        y: Observed path, at least three observations
        p: Power used in the power variations

    Returns:
        float: alpha = log(COF) / (p log 2) - 1/2

    Raises:
        DataError: If the path is invalid or shorter than three observations
        ParameterError: If p is invalid
        EstimationError: If the ratio is undefined (constant path)
    """
    values, _ = validate_path(y, min_length=3)
    p = validate_power(p)

    coarse, fine = _change_of_frequency_sums(values, p)

    if fine == 0.0 or coarse == 0.0:
        raise_estimation_error(
            "Change-of-frequency ratio is undefined for a path without variation",
            stage=STAGE_FITTING,
            estimator="bss_alpha_fit",
            issue="zero power variation",
            context={"lag-2 variation": coarse, "lag-1 variation": fine}
        )

    alpha = float(np.log(coarse / fine) / (p * np.log(2.0)) - 0.5)

    if not np.isfinite(alpha):
        raise_estimation_error(
            "Change-of-frequency estimate is not finite",
            stage=STAGE_FITTING,
            estimator="bss_alpha_fit",
            context={"lag-2 variation": coarse, "lag-1 variation": fine}
        )

    logger.debug(f"Change-of-frequency alpha estimate: {alpha:.6f}")
    return alpha
