# bssvol/models/kernels/gamma.py
"""
Gamma kernel g(x) = x^alpha exp(-lambda x).

The gamma kernel is the standard choice for Brownian semistationary models of
turbulence and electricity prices. Its autocorrelation has a closed form in
terms of the modified Bessel function of the second kind,

    rho(h) = 2^(1/2 - alpha) / Gamma(alpha + 1/2) (lambda h)^(alpha + 1/2) K_(alpha + 1/2)(lambda h),

and so does the squared L2 norm, Gamma(2 alpha + 1) / (2 lambda)^(2 alpha + 1).
Both give the exact scale factor tau_n = sqrt(E[(G_(1/n) - G_0)^2]) of the
Gaussian core. The asymptotic scale factor depends on alpha only and is the
one used together with the change-of-frequency smoothness estimate.
"""

import logging
from typing import Optional, Tuple, Union

import numpy as np
from scipy import special

from ...core.exceptions import STAGE_FORMULA, raise_estimation_error
from ...core.parameters import (
    GammaKernelParameters, validate_positive, validate_smoothness
)
from ...core.results import KernelFitResult
from ...core.types import PathLike
from ...core.validation import validate_path, validate_sampling_rate
from ._acf_fit import fit_kernel_acf

logger = logging.getLogger("bssvol.models.kernels.gamma")

ALPHA_BOUNDS = (-0.4999, 0.4999)
LAMBDA_BOUNDS = (1e-4, 1e3)
LAMBDA_STARTS = (0.1, 1.0, 10.0)


def gamma_kernel(x: Union[float, np.ndarray], alpha: float, lam: float) -> np.ndarray:
    """Evaluate the gamma kernel x^alpha exp(-lam x) for x >= 0.

    Args:
        x: Points at which to evaluate the kernel
        alpha: Roughness index in (-1/2, 1/2)
        lam: Decay rate, strictly positive

    Returns:
        np.ndarray: Kernel values (inf at x = 0 for negative alpha)
    """
    validate_smoothness(alpha)
    validate_positive(lam, "lam")
    x = np.asarray(x, dtype=np.float64)
    with np.errstate(divide="ignore"):
        return np.power(x, alpha) * np.exp(-lam * x)


def gamma_kernel_l2_norm(alpha: float, lam: float) -> float:
    """Squared L2 norm of the gamma kernel, Gamma(2 alpha + 1) / (2 lam)^(2 alpha + 1)."""
    return float(np.exp(special.gammaln(2 * alpha + 1) - (2 * alpha + 1) * np.log(2 * lam)))


def _gamma_correlation(h: np.ndarray, alpha: float, lam: float) -> np.ndarray:
    # Unvalidated form used inside the optimizer; kve avoids underflow of K_nu
    nu = alpha + 0.5
    x = lam * np.abs(h)
    out = np.ones_like(x, dtype=np.float64)
    pos = x > 0
    xp = x[pos]
    log_rho = ((0.5 - alpha) * np.log(2.0) - special.gammaln(nu)
               + nu * np.log(xp) + np.log(special.kve(nu, xp)) - xp)
    out[pos] = np.exp(log_rho)
    return out


def gamma_kernel_correlation(h: Union[float, np.ndarray], alpha: float, lam: float) -> np.ndarray:
    """Autocorrelation of a gamma-kernel BSS process at lag h.

    Args:
        h: Time lag(s); rho is symmetric in h and rho(0) = 1
        alpha: Roughness index in (-1/2, 1/2)
        lam: Decay rate, strictly positive

    Returns:
        np.ndarray: Autocorrelation values with the shape of h
    """
    validate_smoothness(alpha)
    validate_positive(lam, "lam")
    h = np.asarray(h, dtype=np.float64)
    return _gamma_correlation(np.atleast_1d(h), alpha, lam).reshape(h.shape)


def gamma_kernel_tau(n: int, alpha: float, lam: float) -> float:
    """Exact scale factor of a gamma-kernel BSS process at sampling rate n.

    tau_n = sqrt(2 ||g||^2 (1 - rho(1/n)))

    Raises:
        ParameterError: If n, alpha or lam are outside their domains
        EstimationError: If the formula does not evaluate to a positive finite number
    """
    n = validate_sampling_rate(n)
    validate_smoothness(alpha)
    validate_positive(lam, "lam")

    rho = _gamma_correlation(np.array([1.0 / n]), alpha, lam)[0]
    tau_sq = 2.0 * gamma_kernel_l2_norm(alpha, lam) * (1.0 - rho)
    tau = float(np.sqrt(tau_sq)) if tau_sq > 0 else np.nan

    if not np.isfinite(tau) or tau <= 0:
        raise_estimation_error(
            "Gamma kernel scale factor is not a positive finite number",
            stage=STAGE_FORMULA,
            estimator="gamma_kernel_tau",
            context={"n": n, "alpha": alpha, "lambda": lam, "tau^2": tau_sq}
        )
    return tau


def gamma_kernel_tau_asymptotic(n: int, alpha: float) -> float:
    """Leading-order scale factor of a gamma-kernel BSS process.

    tau_n^2 ~ Gamma(2a + 1) Gamma(1/2 - a) / Gamma(a + 3/2) 2^(-4a - 1) n^(-2a - 1)

    The decay rate only enters at higher order, so alpha alone suffices.

    Raises:
        ParameterError: If n or alpha are outside their domains
        EstimationError: If the formula does not evaluate to a positive finite number
    """
    n = validate_sampling_rate(n)
    validate_smoothness(alpha)

    log_tau_sq = (special.gammaln(2 * alpha + 1) + special.gammaln(0.5 - alpha)
                  - special.gammaln(alpha + 1.5)
                  - (4 * alpha + 1) * np.log(2.0) - (2 * alpha + 1) * np.log(n))
    tau = float(np.exp(0.5 * log_tau_sq))

    if not np.isfinite(tau) or tau <= 0:
        raise_estimation_error(
            "Asymptotic gamma kernel scale factor is not a positive finite number",
            stage=STAGE_FORMULA,
            estimator="gamma_kernel_tau_asymptotic",
            context={"n": n, "alpha": alpha}
        )
    return tau


def fit_gamma_kernel(y: PathLike, n: int, num_lags: Optional[int] = None) -> KernelFitResult:
    """Fit (alpha, lambda) by least squares on the autocorrelation of Y.

    The roughness index starts from the change-of-frequency estimate and the
    decay rate from several orders of magnitude.

    Args:
        y: Observed path
        n: Sampling rate
        num_lags: Number of lags to match (None reads ``estimation.acf_num_lags``)

    Returns:
        KernelFitResult: Fitted GammaKernelParameters with diagnostics

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
    starts = [(alpha0, lam0) for lam0 in LAMBDA_STARTS]

    result = fit_kernel_acf(
        values, n, "gamma", _gamma_correlation, GammaKernelParameters,
        starts, [ALPHA_BOUNDS, LAMBDA_BOUNDS], num_lags
    )
    logger.debug(f"Gamma kernel fit: {result.parameters}")
    return result


def gamma_kernel_bss_fit(y: PathLike, n: int, num_lags: Optional[int] = None) -> Tuple[float, float]:
    """Fit a gamma-kernel BSS model to an observed path.

    Returns:
        Tuple[float, float]: The fitted (alpha, lambda)
    """
    return fit_gamma_kernel(y, n, num_lags).values
