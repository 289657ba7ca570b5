# bssvol/models/simulation/hybrid.py
"""
Hybrid-scheme simulation of gamma-kernel Brownian semistationary processes.

The process Y_t = int_(-inf)^t g(t - s) sigma_s dW_s with the gamma kernel
g(x) = x^alpha exp(-lambda x) is discretized on cells of width 1/n. The
kernel is singular at the origin for negative alpha, so the first kappa cells
behind each observation keep the power function exactly and only the
slowly varying factor exp(-lambda x) is frozen:

    Y_i = sum_(k=1..kappa) exp(-lambda k / n) sigma_(i-k) W_(i-k, k)
          + sum_(k>kappa) g(b_k / n) sigma_(i-k) (W_((i-k+1)/n) - W_((i-k)/n)),

where W_(j, k) = int_(j/n)^((j+1)/n) ((j + k)/n - s)^alpha dW_s. Within a cell
the increment and the kappa Wiener integrals are jointly Gaussian with a
known covariance. The evaluation points b_k minimize the asymptotic mean
squared error of the Riemann sum. The far sum is a convolution and is
computed with scipy.signal.fftconvolve.
"""

import logging
from typing import Optional

import numpy as np
from scipy import integrate, linalg, signal

from ...core.config import get_numerical_config, get_simulation_config
from ...core.exceptions import NumericError, raise_data_error, raise_parameter_error
from ...core.parameters import validate_positive, validate_smoothness
from ...core.results import BSSSimulationResult
from ...core.types import RandomStateLike, Vector
from ...core.validation import validate_path
from ._numba_core import _hybrid_near_sum
from ._random import make_rng, validate_grid

logger = logging.getLogger("bssvol.models.simulation.hybrid")

# Below this |alpha| the optimal points use their alpha -> 0 limit
_ALPHA_ZERO = 1e-8


def hybrid_covariance(kappa: int, alpha: float, n: int) -> np.ndarray:
    """Covariance of (dW, W_(j,1), ..., W_(j,kappa)) within one cell.

    Args:
        kappa: Number of exact near-origin terms
        alpha: Roughness index in (-1/2, 1/2)
        n: Cells per unit time

    Returns:
        np.ndarray: Symmetric (kappa + 1) x (kappa + 1) covariance matrix
    """
    limit = get_numerical_config().quad_limit
    cov = np.empty((kappa + 1, kappa + 1))
    cov[0, 0] = 1.0 / n

    for k in range(1, kappa + 1):
        cov[0, k] = cov[k, 0] = (k ** (alpha + 1) - (k - 1) ** (alpha + 1)) / ((alpha + 1) * n ** (alpha + 1))
        cov[k, k] = (k ** (2 * alpha + 1) - (k - 1) ** (2 * alpha + 1)) / ((2 * alpha + 1) * n ** (2 * alpha + 1))

    for j in range(1, kappa + 1):
        for k in range(j + 1, kappa + 1):
            if j == 1:
                # (1 - u)^alpha is carried by the quad weight
                value, _ = integrate.quad(lambda u: (k - u) ** alpha, 0.0, 1.0,
                                          weight="alg", wvar=(0.0, alpha), limit=limit)
            else:
                value, _ = integrate.quad(lambda u: (j - u) ** alpha * (k - u) ** alpha,
                                          0.0, 1.0, limit=limit)
            cov[j, k] = cov[k, j] = value / n ** (2 * alpha + 1)

    return cov


def optimal_discretization_points(k: np.ndarray, alpha: float) -> np.ndarray:
    """Evaluation points b_k of the Riemann sum for cells k >= 1.

    b_k = ((k^(alpha+1) - (k-1)^(alpha+1)) / (alpha + 1))^(1/alpha), with the
    limit exp(k log k - (k-1) log(k-1) - 1) at alpha = 0.
    """
    k = np.asarray(k, dtype=np.float64)
    km1 = k - 1.0
    if abs(alpha) < _ALPHA_ZERO:
        with np.errstate(divide="ignore", invalid="ignore"):
            km1_log = np.where(km1 > 0, km1 * np.log(np.where(km1 > 0, km1, 1.0)), 0.0)
        return np.exp(k * np.log(k) - km1_log - 1.0)
    return ((k ** (alpha + 1) - km1 ** (alpha + 1)) / (alpha + 1)) ** (1.0 / alpha)


def _cell_factor(cov: np.ndarray) -> np.ndarray:
    """Matrix F with F F' = cov, from Cholesky or a clipped eigendecomposition.

    At alpha = 0 every Wiener integral in a cell equals the cell increment and
    the covariance is singular, so positive semi-definite matrices are
    factored through their eigenvalues instead.
    """
    try:
        return linalg.cholesky(cov, lower=True)
    except linalg.LinAlgError as e:
        eigval, eigvec = linalg.eigh(cov)
        tol = 1e-10 * max(float(np.max(np.abs(eigval))), np.finfo(float).tiny)
        if eigval[0] < -tol:
            raise NumericError(
                "Hybrid scheme covariance is not positive semi-definite",
                operation="cholesky",
                values=cov,
                error_type="indefinite matrix",
                context={"Smallest eigenvalue": float(eigval[0])}
            ) from e
        logger.debug("Singular cell covariance, factoring by eigendecomposition")
        return eigvec * np.sqrt(np.clip(eigval, 0.0, None))


def _validate_sigma(sigma: Optional[Vector], N: int) -> np.ndarray:
    if sigma is None:
        return np.ones(N + 1)
    values, _ = validate_path(sigma, data_name="sigma")
    if values.shape[0] != N + 1:
        raise_data_error(
            f"sigma must have length N + 1 = {N + 1}, got {values.shape[0]}",
            data_name="sigma",
            issue="length mismatch"
        )
    if np.any(values < 0):
        raise_data_error(
            "sigma must be non-negative",
            data_name="sigma",
            issue="negative values",
            index=int(np.flatnonzero(values < 0)[0])
        )
    return values


def gamma_kernel_bss(N: int,
                     n: int,
                     T: float,
                     kappa: Optional[int],
                     alpha: float,
                     lam: float,
                     sigma: Optional[Vector] = None,
                     random_state: RandomStateLike = None,
                     num_past: Optional[int] = None) -> BSSSimulationResult:
    """Simulate a gamma-kernel BSS process with the hybrid scheme.

    Args:
        N: Number of steps, must equal n * T
        n: Steps per unit time
        T: Time horizon
        kappa: Number of near-origin cells simulated exactly (0 gives the
            plain Riemann-sum scheme, None reads ``simulation.hybrid_kappa``)
        alpha: Roughness index in (-1/2, 1/2)
        lam: Decay rate, strictly positive
        sigma: Volatility path of length N + 1 (None for unit volatility).
            Pre-sample cells use sigma[0].
        random_state: Seed or Generator (None reads ``core.random_seed``)
        num_past: Number of pre-sample cells in the Riemann sum (None reads
            ``simulation.num_past``; 0 uses N)

    Returns:
        BSSSimulationResult: Path of length N + 1 with the volatility and times

    Raises:
        ParameterError: If any scalar argument is invalid or N differs from n * T
        DataError: If sigma is invalid
        NumericError: If the cell covariance is not positive semi-definite
    """
    N, n, T = validate_grid(N, n, T)
    validate_smoothness(alpha)
    validate_positive(lam, "lam")
    if kappa is None:
        kappa = get_simulation_config().hybrid_kappa
    if isinstance(kappa, bool) or not isinstance(kappa, (int, np.integer)) or kappa < 0:
        raise_parameter_error(
            f"kappa must be a non-negative integer, got {kappa!r}",
            param_name="kappa", param_value=kappa, constraint="integer >= 0"
        )
    if num_past is None:
        num_past = get_simulation_config().num_past
    if isinstance(num_past, bool) or not isinstance(num_past, (int, np.integer)) or num_past < 0:
        raise_parameter_error(
            f"num_past must be a non-negative integer, got {num_past!r}",
            param_name="num_past", param_value=num_past, constraint="integer >= 0"
        )
    num_past = int(num_past) if num_past > 0 else N
    kappa = int(min(kappa, N + num_past))

    sigma = _validate_sigma(sigma, N)
    rng = make_rng(random_state)

    cells = N + num_past
    cell_sigma = np.concatenate([np.full(num_past, sigma[0]), sigma[:N]])

    factor = _cell_factor(hybrid_covariance(kappa, alpha, n))
    draws = rng.standard_normal((cells, kappa + 1)) @ factor.T
    increments = cell_sigma * draws[:, 0]

    # Far part: Riemann sum with the kernel evaluated at b_k / n
    far_weights = np.zeros(cells + 1)
    if cells > kappa:
        k = np.arange(kappa + 1, cells + 1, dtype=np.float64)
        x = optimal_discretization_points(k, alpha) / n
        far_weights[kappa + 1:] = x ** alpha * np.exp(-lam * x)
    far = signal.fftconvolve(increments, far_weights)[num_past:num_past + N + 1]

    # Near part: exact Wiener integrals for the first kappa cells
    if kappa > 0:
        near_weights = np.exp(-lam * np.arange(1, kappa + 1) / n)
        near_draws = cell_sigma[:, None] * draws[:, 1:]
        near = _hybrid_near_sum(np.ascontiguousarray(near_draws), near_weights, num_past, N)
    else:
        near = np.zeros(N + 1)

    bss = near + far
    logger.debug(
        f"Simulated gamma-kernel BSS path: N={N}, n={n}, alpha={alpha}, "
        f"lambda={lam}, kappa={kappa}, pre-sample cells={num_past}"
    )

    return BSSSimulationResult(
        model_name="Gamma kernel BSS (hybrid scheme)",
        bss=bss,
        sigma=sigma,
        times=np.arange(N + 1) / n,
        n=n,
        T=T,
        alpha=float(alpha),
        lam=float(lam),
        kappa=kappa,
    )
