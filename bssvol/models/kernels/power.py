# bssvol/models/kernels/power.py
"""
Power kernel g(x) = x^alpha (1 + x)^(-beta - alpha).

The power kernel behaves like the gamma kernel near the origin but decays
polynomially, giving the BSS process long memory for beta < 1. Its squared
L2 norm is the Beta function B(2 alpha + 1, 2 beta - 1); the autocovariance
has no closed form and is computed with scipy.integrate.quad, using the
algebraic weight on [0, 1] to absorb the x^alpha singularity.
"""

import logging
import warnings
from typing import Optional, Tuple, Union

import numpy as np
from scipy import integrate, special

from ...core.config import get_numerical_config
from ...core.exceptions import STAGE_FORMULA, raise_estimation_error, warn_numeric
from ...core.parameters import (
    PowerKernelParameters, validate_range, validate_smoothness
)
from ...core.results import KernelFitResult
from ...core.types import PathLike
from ...core.validation import validate_path, validate_sampling_rate
from ._acf_fit import fit_kernel_acf

logger = logging.getLogger("bssvol.models.kernels.power")

ALPHA_BOUNDS = (-0.4999, 0.4999)
BETA_BOUNDS = (0.5001, 50.0)
BETA_STARTS = (0.75, 1.5, 5.0)


def _validate(alpha: float, beta: float) -> None:
    validate_smoothness(alpha)
    validate_range(beta, "beta", 0.5, None, inclusive=False)


def _g(x, alpha: float, beta: float):
    return np.power(x, alpha) * np.power(1.0 + x, -beta - alpha)


def power_kernel(x: Union[float, np.ndarray], alpha: float, beta: float) -> np.ndarray:
    """Evaluate the power kernel x^alpha (1 + x)^(-beta - alpha) for x >= 0.

    Args:
        x: Points at which to evaluate the kernel
        alpha: Roughness index in (-1/2, 1/2)
        beta: Tail index, greater than 1/2

    Returns:
        np.ndarray: Kernel values (inf at x = 0 for negative alpha)
    """
    _validate(alpha, beta)
    x = np.asarray(x, dtype=np.float64)
    with np.errstate(divide="ignore"):
        return _g(x, alpha, beta)


def power_kernel_l2_norm(alpha: float, beta: float) -> float:
    """Squared L2 norm of the power kernel, B(2 alpha + 1, 2 beta - 1)."""
    return float(special.beta(2 * alpha + 1, 2 * beta - 1))


def _quad(func, lower: float, upper: float, operation: str, limit: int, **kwargs) -> float:
    """scipy.integrate.quad with its IntegrationWarning reissued as a NumericWarning."""
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        value, abserr = integrate.quad(func, lower, upper, limit=limit, **kwargs)
    for record in caught:
        if issubclass(record.category, integrate.IntegrationWarning):
            warn_numeric(
                f"Power kernel integral may be inaccurate: {str(record.message).strip()}",
                operation=operation,
                value=value,
                context={"interval": (lower, upper), "abserr": abserr}
            )
        else:
            warnings.warn(record.message, stacklevel=2)
    return value


def _power_covariance(h: float, alpha: float, beta: float, limit: int) -> float:
    """int_0^inf g(x) g(x + h) dx for h > 0."""
    def rest(x):
        # Integrand without the x^alpha factor carried by the quad weight
        return np.power(1.0 + x, -beta - alpha) * _g(x + h, alpha, beta)

    near = _quad(rest, 0.0, 1.0, "power kernel covariance", limit,
                 weight="alg", wvar=(alpha, 0.0))
    far = _quad(lambda x: _g(x, alpha, beta) * _g(x + h, alpha, beta),
                1.0, np.inf, "power kernel covariance", limit)
    return near + far


def _power_correlation(h: np.ndarray, alpha: float, beta: float) -> np.ndarray:
    # Unvalidated form used inside the optimizer
    limit = get_numerical_config().quad_limit
    c0 = power_kernel_l2_norm(alpha, beta)
    out = np.ones(h.shape, dtype=np.float64)
    for i, lag in enumerate(np.abs(h)):
        if lag > 0:
            out[i] = _power_covariance(float(lag), alpha, beta, limit) / c0
    return out


def power_kernel_correlation(h: Union[float, np.ndarray], alpha: float, beta: float) -> np.ndarray:
    """Autocorrelation of a power-kernel BSS process at lag h.

    Args:
        h: Time lag(s); rho is symmetric in h and rho(0) = 1
        alpha: Roughness index in (-1/2, 1/2)
        beta: Tail index, greater than 1/2

    Returns:
        np.ndarray: Autocorrelation values with the shape of h
    """
    _validate(alpha, beta)
    h = np.asarray(h, dtype=np.float64)
    return _power_correlation(np.atleast_1d(h).ravel(), alpha, beta).reshape(h.shape)


def power_kernel_tau(n: int, alpha: float, beta: float) -> float:
    """Scale factor of a power-kernel BSS process at sampling rate n.

    tau_n^2 = 2 (||g||^2 - c(1/n)) is evaluated as
    int_0^(1/n) g^2 + int_0^inf (g(x + 1/n) - g(x))^2, which avoids the
    cancellation between two nearly equal integrals for large n.

    Raises:
        ParameterError: If n, alpha or beta are outside their domains
        EstimationError: If the formula does not evaluate to a positive finite number
    """
    n = validate_sampling_rate(n)
    _validate(alpha, beta)
    limit = get_numerical_config().quad_limit
    delta = 1.0 / n

    head = _quad(lambda x: np.power(1.0 + x, -2 * beta - 2 * alpha),
                 0.0, delta, "power kernel tau", limit, weight="alg", wvar=(2 * alpha, 0.0))

    def sq_diff(x):
        return (_g(x + delta, alpha, beta) - _g(x, alpha, beta)) ** 2

    body = 0.0
    for lower, upper in ((0.0, delta), (delta, 1.0), (1.0, np.inf)):
        if upper <= lower:
            continue
        body += _quad(sq_diff, lower, upper, "power kernel tau", limit)

    tau_sq = head + body
    tau = float(np.sqrt(tau_sq)) if tau_sq > 0 else np.nan

    if not np.isfinite(tau) or tau <= 0:
        raise_estimation_error(
            "Power kernel scale factor is not a positive finite number",
            stage=STAGE_FORMULA,
            estimator="power_kernel_tau",
            context={"n": n, "alpha": alpha, "beta": beta, "tau^2": tau_sq}
        )
    return tau


def fit_power_kernel(y: PathLike, n: int, num_lags: Optional[int] = None) -> KernelFitResult:
    """Fit (alpha, beta) by least squares on the autocorrelation of Y.

    Raises:
        DataError: If the path is invalid
        ParameterError: If n is invalid
        EstimationError: If the fit does not produce a finite solution
    """
    # Imported here to avoid a circular import with the volatility package
    from ..volatility.smoothness import bss_alpha_fit

    values, _ = validate_path(y)
    n = validate_sampling_rate(n)

    alpha0 = float(np.clip(bss_alpha_fit(values), -0.45, 0.45))
    starts = [(alpha0, beta0) for beta0 in BETA_STARTS]

    result = fit_kernel_acf(
        values, n, "power", _power_correlation, PowerKernelParameters,
        starts, [ALPHA_BOUNDS, BETA_BOUNDS], num_lags
    )
    logger.debug(f"Power kernel fit: {result.parameters}")
    return result


def power_kernel_bss_fit(y: PathLike, n: int, num_lags: Optional[int] = None) -> Tuple[float, float]:
    """Fit a power-kernel BSS model to an observed path.

    Returns:
        Tuple[float, float]: The fitted (alpha, beta)
    """
    return fit_power_kernel(y, n, num_lags).values
