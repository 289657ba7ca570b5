# bssvol/models/kernels/_acf_fit.py
"""
Least-squares fit of a parametric kernel autocorrelation to the empirical
autocorrelation of an observed path.

The objective is the sum of squared differences between the sample
autocorrelation of Y at lags 1..L and the model autocorrelation rho(k/n) at
the same lags. The configured bounded optimizer is run from several starting
points; when none of them converges, the unbounded alternatives (Powell,
Nelder-Mead) are tried in the transformed parameter space before settling for
the best finite solution with a ConvergenceWarning.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple, Type

import numpy as np
from scipy import optimize

from ...core.config import get_estimation_config, get_numerical_config
from ...core.exceptions import (
    DataError, ParameterError, STAGE_FITTING, raise_estimation_error, warn_convergence
)
from ...core.parameters import ParameterBase
from ...core.results import KernelFitResult
from ...utils.correlation import empirical_acf, max_available_lag

logger = logging.getLogger("bssvol.models.kernels.acf_fit")

ALTERNATIVE_METHODS = ["L-BFGS-B", "Powell", "Nelder-Mead"]

# Objective value returned where the model autocorrelation is not finite
_PENALTY = 1e10


def resolve_num_lags(length: int, n: int, num_lags: Optional[int]) -> int:
    """Number of autocorrelation lags matched by a kernel fit.

    ``num_lags=None`` reads ``estimation.acf_num_lags`` from the configuration,
    where 0 means one unit of time (``n`` lags). The result is capped at
    ``length - 1``.
    """
    if num_lags is None:
        num_lags = get_estimation_config().acf_num_lags
    if isinstance(num_lags, bool) or not isinstance(num_lags, (int, np.integer)) or num_lags < 0:
        raise ParameterError(
            f"num_lags must be a non-negative integer, got {num_lags!r}",
            param_name="num_lags",
            param_value=num_lags,
            constraint="integer >= 0"
        )
    if num_lags == 0:
        num_lags = n
    return max_available_lag(length, int(num_lags))


def fit_kernel_acf(
    y: np.ndarray,
    n: int,
    kernel: str,
    correlation: Callable[[np.ndarray, float, float], np.ndarray],
    param_cls: Type[ParameterBase],
    start_points: Sequence[Tuple[float, float]],
    bounds: Sequence[Tuple[float, float]],
    num_lags: Optional[int] = None,
) -> KernelFitResult:
    """Fit a two-parameter kernel by least squares on the autocorrelation.

    Args:
        y: Validated observed path
        n: Validated sampling rate
        kernel: Kernel family name, used in messages and the result
        correlation: Model autocorrelation ``rho(h, a, b)`` vectorized over h
        param_cls: Parameter container for the kernel family
        start_points: Starting points in the constrained space
        bounds: Box constraints for the bounded optimizer
        num_lags: Number of lags to match (None reads the configuration)

    Returns:
        KernelFitResult: The fitted parameters and optimizer diagnostics

    Raises:
        EstimationError: If the autocorrelation cannot be estimated or no
            starting point yields a finite objective
    """
    numerical = get_numerical_config()
    lags = resolve_num_lags(y.shape[0], n, num_lags)

    try:
        target = empirical_acf(y, lags)
    except DataError as e:
        raise_estimation_error(
            f"Cannot fit the {kernel} kernel: {e.message}",
            stage=STAGE_FITTING,
            estimator=f"{kernel}_kernel_bss_fit",
            issue=e.issue
        )

    h = np.arange(1, lags + 1) / n

    def objective(theta: np.ndarray) -> float:
        with np.errstate(all="ignore"):
            model = correlation(h, theta[0], theta[1])
        value = float(np.sum((model - target) ** 2))
        return value if np.isfinite(value) else _PENALTY

    def transformed_objective(z: np.ndarray) -> float:
        return objective(param_cls.inverse_transform(z).to_array())

    options = {"maxiter": numerical.max_iterations}
    primary = numerical.optimization_method

    results: List[Tuple[optimize.OptimizeResult, str]] = []
    for start in start_points:
        x0 = np.clip(np.asarray(start, dtype=np.float64),
                     [b[0] for b in bounds], [b[1] for b in bounds])
        res = optimize.minimize(
            objective, x0, method=primary, bounds=bounds,
            options=options, tol=numerical.optimization_tol
        )
        logger.debug(
            f"{kernel} fit from {x0}: x={res.x}, fun={res.fun:.3e}, success={res.success}"
        )
        if np.all(np.isfinite(res.x)) and np.isfinite(res.fun) and res.fun < _PENALTY:
            results.append((res, primary))

    if not results:
        raise_estimation_error(
            f"No starting point produced a finite objective for the {kernel} kernel",
            stage=STAGE_FITTING,
            estimator=f"{kernel}_kernel_bss_fit",
            issue="non-finite objective",
            context={"Lags": lags, "Starts": list(start_points)}
        )

    best, best_method = min(results, key=lambda item: item[0].fun)

    if not any(res.success for res, _ in results):
        # Try alternative optimization methods in the unconstrained space
        z0 = param_cls.from_array(best.x).transform()
        for method in ALTERNATIVE_METHODS:
            if method == primary:
                continue
            logger.info(f"Trying alternative optimization method: {method}")
            alt = optimize.minimize(
                transformed_objective, z0, method=method,
                options=options, tol=numerical.optimization_tol
            )
            if alt.success and np.isfinite(alt.fun) and alt.fun <= best.fun:
                logger.info(f"Converged using alternative method: {method}")
                alt.x = param_cls.inverse_transform(alt.x).to_array()
                best, best_method = alt, method
                break
    else:
        converged = [(res, m) for res, m in results if res.success]
        best, best_method = min(converged, key=lambda item: item[0].fun)

    iterations = int(getattr(best, "nit", getattr(best, "nfev", 0)))
    if not best.success:
        warn_convergence(
            f"{kernel} kernel fit did not converge: {best.message}",
            iterations=iterations,
            final_value=float(best.fun)
        )

    params = param_cls.from_array(best.x)
    with np.errstate(all="ignore"):
        fitted = correlation(h, *params.to_array())

    return KernelFitResult(
        model_name=f"{kernel.capitalize()} kernel ACF fit",
        kernel=kernel,
        parameters=params,
        objective_value=float(best.fun),
        converged=bool(best.success),
        iterations=iterations,
        optimizer=best_method,
        num_lags=lags,
        empirical_acf=target,
        fitted_acf=fitted,
    )
