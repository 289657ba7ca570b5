# bssvol/models/volatility/scale.py
"""
Scale factors and normalizing constants for power variations of BSS paths.

The realized p-th power variation of a BSS path sampled at rate n converges to
the accumulated volatility once each increment is divided by the scale factor
tau_n of the Gaussian core and the sum is divided by the absolute moment m_p
of a standard normal variable. This module provides

- the non-parametric estimate of tau_n, which only uses the path,
- the moment constant m_p,
- the constant K_p of the central limit theorem for the power variation,
- the dispatch from a (method, kernel) pair to the routine producing tau_n.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union

import numpy as np
from scipy import special

from ...core.config import get_estimation_config
from ...core.exceptions import (
    DataError, EstimationError, ParameterError, STAGE_FITTING, STAGE_FORMULA,
    raise_estimation_error
)
from ...core.results import KernelFitResult
from ...core.types import Kernel, Method, PathLike
from ...core.validation import (
    resolve_route, validate_path, validate_power, validate_sampling_rate
)
from ...utils.correlation import increments_acf, max_available_lag
from ..kernels.gamma import fit_gamma_kernel, gamma_kernel_tau, gamma_kernel_tau_asymptotic
from ..kernels.power import fit_power_kernel, power_kernel_tau
from .smoothness import bss_alpha_fit

logger = logging.getLogger("bssvol.models.volatility.scale")


def moment_constant(p: float) -> float:
    """Absolute moment E|Z|^p of a standard normal variable.

    m_p = 2^(p/2) Gamma((p + 1)/2) / sqrt(pi), so m_1 = sqrt(2/pi) and m_2 = 1.
    Evaluated on the log scale so large powers do not overflow the gamma function.

    Raises:
        ParameterError: If p is not a positive finite number
    """
    p = validate_power(p)
    return float(np.exp(0.5 * p * np.log(2.0) + special.gammaln(0.5 * (p + 1))
                        - 0.5 * np.log(np.pi)))


def tau_nonparametric_estimate(y: PathLike) -> float:
    """Non-parametric estimate of the scale factor tau_n.

    tau_n is the root mean squared increment of the path. Dividing the power
    variation by it makes the accumulated volatility estimate relative to
    E[sigma^2]: for p = 2 the final value equals the observation span
    (len(Y) - 1) / n, and rescaling the path leaves the estimate unchanged.

    Raises:
        DataError: If the path is invalid
        EstimationError: If every increment is zero
    """
    values, _ = validate_path(y)

    mean_square = float(np.mean(np.diff(values) ** 2))
    if mean_square == 0.0:
        raise_estimation_error(
            "Non-parametric scale factor is undefined for a constant path",
            stage=STAGE_FITTING,
            estimator="tau_nonparametric_estimate",
            issue="zero mean squared increment"
        )

    tau = float(np.sqrt(mean_square))
    logger.debug(f"Non-parametric scale factor: {tau:.6e}")
    return tau


def estimate_k(y: PathLike,
               p: float,
               n: Optional[int] = None,
               max_lag: Optional[int] = None) -> float:
    """Estimate the constant K_p of the power-variation central limit theorem.

    K_p = sqrt(lambda_p) / m_p with

        lambda_p = (m_(2p) - m_p^2)
                   + 2 sum_(k=1..L) m_p^2 (2F1(-p/2, -p/2; 1/2; r_k^2) - 1),

    where r_k is the empirical autocorrelation of the increments of Y. The
    hypergeometric term is the covariance of |X|^p and |Y|^p for standard
    normals with correlation r_k.

    Args:
        y: Observed path
        p: Power
        n: Sampling rate. When given, K_p is divided by sqrt(n) so that it
            directly scales the standard error of the accumulated estimate.
        max_lag: Truncation lag L (None reads ``estimation.k_max_lag``),
            capped at the number of available increment lags

    Returns:
        float: The estimate of K_p

    Raises:
        DataError: If the path is invalid
        ParameterError: If p, n or max_lag is invalid
        EstimationError: If the autocorrelation of the increments is undefined
    """
    values, _ = validate_path(y)
    p = validate_power(p)
    if n is not None:
        n = validate_sampling_rate(n)
    if max_lag is None:
        max_lag = get_estimation_config().k_max_lag
    if isinstance(max_lag, bool) or not isinstance(max_lag, (int, np.integer)) or max_lag < 0:
        raise ParameterError(
            f"max_lag must be a non-negative integer, got {max_lag!r}",
            param_name="max_lag",
            param_value=max_lag,
            constraint="integer >= 0"
        )

    m_p = moment_constant(p)
    m_2p = moment_constant(2 * p)
    lambda_p = m_2p - m_p ** 2

    lags = max_available_lag(values.shape[0] - 1, max_lag) if max_lag > 0 else 0
    if lags > 0:
        try:
            r = increments_acf(values, lags)
        except DataError as e:
            raise_estimation_error(
                f"K_p is undefined: {e.message}",
                stage=STAGE_FORMULA,
                estimator="estimate_k",
                issue=e.issue
            )
        lambda_p += 2.0 * np.sum(m_p ** 2 * (special.hyp2f1(-p / 2, -p / 2, 0.5, r ** 2) - 1.0))

    k_p = float(np.sqrt(lambda_p) / m_p)
    if n is not None:
        k_p /= np.sqrt(n)

    if not np.isfinite(k_p) or k_p < 0:
        raise_estimation_error(
            "K_p is not a non-negative finite number",
            stage=STAGE_FORMULA,
            estimator="estimate_k",
            context={"p": p, "lambda_p": lambda_p, "lags": lags}
        )

    logger.debug(f"K_{p} estimate with {lags} lags: {k_p:.6e}")
    return k_p


@dataclass(frozen=True)
class ScaleFactor:
    """Scale factor tau_n together with the route that produced it.

    Attributes:
        tau: Positive finite scale factor
        method: Method that produced tau
        kernel: Kernel requested by the caller
        parameters: Kernel parameters used by the formula, if any
        fit: Full kernel fit diagnostics for the 'acf' method
    """

    tau: float
    method: Method
    kernel: Kernel
    parameters: Optional[Dict[str, float]] = None
    fit: Optional[KernelFitResult] = None


def _check_tau(tau: float, estimator: str) -> float:
    if not np.isfinite(tau) or tau <= 0:
        raise_estimation_error(
            f"Scale factor from {estimator} is not a positive finite number",
            stage=STAGE_FORMULA,
            estimator=estimator,
            context={"tau": tau}
        )
    return float(tau)


def resolve_scale_factor(y: PathLike,
                         n: int,
                         method: Union[str, Method] = Method.NONPARAMETRIC,
                         kernel: Union[str, Kernel] = Kernel.GAMMA,
                         num_lags: Optional[int] = None) -> ScaleFactor:
    """Compute tau_n with exactly one procedure selected by (method, kernel).

    - cof: alpha from the change-of-frequency estimator, then the asymptotic
      gamma-kernel formula. Only the gamma kernel is defined.
    - acf: kernel parameters fitted to the autocorrelation of Y, then the
      exact scale factor of the fitted kernel.
    - nonparametric: the non-parametric estimate; n and kernel are ignored.

    Args:
        y: Observed path
        n: Sampling rate
        method: Scale-factor method
        kernel: Kernel family
        num_lags: Autocorrelation lags for the 'acf' fits

    Returns:
        ScaleFactor: tau_n and the parameters behind it

    Raises:
        ConfigurationError: If the selectors are unknown or unsupported
        DataError: If the path is invalid
        ParameterError: If n is invalid
        EstimationError: If the selected collaborator fails
    """
    method, kernel = resolve_route(method, kernel)
    values, _ = validate_path(y)
    n = validate_sampling_rate(n)

    if method is Method.NONPARAMETRIC:
        tau = _check_tau(tau_nonparametric_estimate(values), "tau_nonparametric_estimate")
        logger.debug(f"Route nonparametric: tau={tau:.6e}")
        return ScaleFactor(tau=tau, method=method, kernel=kernel)

    if method is Method.COF:
        alpha = bss_alpha_fit(values)
        try:
            tau = gamma_kernel_tau_asymptotic(n, alpha)
        except ParameterError as e:
            raise EstimationError(
                f"Fitted alpha={alpha:.4f} is outside the gamma kernel domain",
                stage=STAGE_FORMULA,
                estimator="gamma_kernel_tau_asymptotic",
                issue=e.message
            ) from e
        tau = _check_tau(tau, "gamma_kernel_tau_asymptotic")
        logger.debug(f"Route cof/gamma: alpha={alpha:.6f}, tau={tau:.6e}")
        return ScaleFactor(tau=tau, method=method, kernel=kernel,
                           parameters={"alpha": alpha})

    if kernel is Kernel.GAMMA:
        fit = fit_gamma_kernel(values, n, num_lags)
        alpha, lam = fit.values
        tau = _check_tau(gamma_kernel_tau(n, alpha, lam), "gamma_kernel_tau")
        logger.debug(f"Route acf/gamma: alpha={alpha:.6f}, lambda={lam:.6f}, tau={tau:.6e}")
        return ScaleFactor(tau=tau, method=method, kernel=kernel,
                           parameters={"alpha": alpha, "lambda": lam}, fit=fit)

    fit = fit_power_kernel(values, n, num_lags)
    alpha, beta = fit.values
    tau = _check_tau(power_kernel_tau(n, alpha, beta), "power_kernel_tau")
    logger.debug(f"Route acf/power: alpha={alpha:.6f}, beta={beta:.6f}, tau={tau:.6e}")
    return ScaleFactor(tau=tau, method=method, kernel=kernel,
                       parameters={"alpha": alpha, "beta": beta}, fit=fit)
