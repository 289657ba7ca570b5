# bssvol/models/volatility/confidence.py
"""
Pointwise confidence intervals for the accumulated volatility.

The central limit theorem for the normalized power variation gives, at each
time point,

    half_width = z * K_p * sqrt(A_2p),

where z is the two-sided normal quantile, K_p the long-run standard deviation
constant of |increment|^p and A_2p the accumulated 2p-th power volatility
estimate. The interval is centred on the accumulated p-th power estimate and
is not clamped at zero.

By default both internal estimates use the non-parametric scale factor
whatever method and kernel the caller names; the selectors are still
validated. Setting ``pin_nonparametric=False`` forwards them instead.
"""

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Union

import numpy as np
import pandas as pd
from scipy import stats

from ...core.base import ModelBase
from ...core.config import get_estimation_config
from ...core.results import AccumulatedVolatilityResult, ConfidenceIntervalResult
from ...core.types import ConfidenceBand, Kernel, Method, PathLike
from ...core.validation import (
    validate_confidence_level, validate_sampling_rate
)
from .accumulated import AccumulatedVolatilityConfig, AccumulatedVolatilityEstimator
from .scale import estimate_k

logger = logging.getLogger("bssvol.models.volatility.confidence")


@dataclass
class ConfidenceIntervalConfig(AccumulatedVolatilityConfig):
    """Configuration of the confidence interval estimator.

    Attributes:
        confidence_level: Two-sided coverage in (0, 1)
        pin_nonparametric: Use the non-parametric method for both internal
            estimates regardless of ``method``/``kernel``
        k_max_lag: Truncation lag for K_p (None reads the configuration)
    """

    confidence_level: float = field(default_factory=lambda: get_estimation_config().confidence_level)
    pin_nonparametric: bool = field(
        default_factory=lambda: get_estimation_config().pin_ci_to_nonparametric
    )
    k_max_lag: Optional[int] = None

    def validate(self) -> None:
        super().validate()
        self.confidence_level = validate_confidence_level(self.confidence_level)

    def internal_route(self) -> Tuple[Method, Kernel]:
        """Method and kernel used for the two internal estimates."""
        if self.pin_nonparametric:
            return Method.NONPARAMETRIC, Kernel.GAMMA
        return self.method, self.kernel

    def estimator_config(self, p: float) -> AccumulatedVolatilityConfig:
        method, kernel = self.internal_route()
        return AccumulatedVolatilityConfig(p=p, method=method, kernel=kernel,
                                           num_lags=self.num_lags)


def normal_quantile(confidence_level: float) -> float:
    """Two-sided standard normal quantile Phi^-1(0.5 + 0.5 * level)."""
    return float(stats.norm.ppf(0.5 + 0.5 * confidence_level))


class AccumulatedVolatilityCI(ModelBase[ConfidenceIntervalConfig, ConfidenceIntervalResult]):
    """Pointwise confidence intervals for the accumulated volatility of a BSS path."""

    def __init__(self, config: Optional[ConfidenceIntervalConfig] = None,
                 name: str = "AccumulatedVolatilityCI"):
        super().__init__(config if config is not None else ConfidenceIntervalConfig(), name=name)

    def _estimate(self, values: np.ndarray, n: int, p: float) -> AccumulatedVolatilityResult:
        return AccumulatedVolatilityEstimator(self._config.estimator_config(p)).fit(values, n)

    def _assemble(self,
                  n: int,
                  index: Optional[pd.Index],
                  k_p: float,
                  mean: AccumulatedVolatilityResult,
                  var_term: AccumulatedVolatilityResult) -> ConfidenceIntervalResult:
        config = self._config
        z = normal_quantile(config.confidence_level)
        half_width = z * k_p * np.sqrt(var_term.estimate)
        method, kernel = config.internal_route()

        logger.debug(
            f"Confidence interval at level {config.confidence_level}: z={z:.6f}, "
            f"K_p={k_p:.6e}, route={method.value}/{kernel.value}"
        )

        result = ConfidenceIntervalResult(
            model_name=self._name,
            lower=mean.estimate - half_width,
            upper=mean.estimate + half_width,
            mean=mean.estimate,
            half_width=half_width,
            variance_term=var_term.estimate,
            z=z,
            k_p=k_p,
            confidence_level=config.confidence_level,
            n=n,
            p=config.p,
            method=method.value,
            kernel=kernel.value,
            pinned=config.pin_nonparametric,
            index=index[1:] if index is not None else None,
        )
        self._results = result
        self._fitted = True
        return result

    def fit(self, data: PathLike, n: int, **kwargs: Any) -> ConfidenceIntervalResult:
        """Estimate the pointwise confidence interval.

        Args:
            data: Observed path, length >= 2
            n: Sampling rate

        Returns:
            ConfidenceIntervalResult: Bounds, centre, half-width and constants

        Raises:
            DataError: If the path is invalid
            ParameterError: If n is invalid
            EstimationError: If K_p or either internal estimate fails
        """
        values, index = self.validate_data(data)
        n = validate_sampling_rate(n)
        p = self._config.p

        k_p = estimate_k(values, p, n, self._config.k_max_lag)
        mean = self._estimate(values, n, p)
        var_term = self._estimate(values, n, 2 * p)

        return self._assemble(n, index, k_p, mean, var_term)

    async def fit_async(self, data: PathLike, n: int, **kwargs: Any) -> ConfidenceIntervalResult:
        """Asynchronously estimate the confidence interval.

        K_p and the two accumulated estimates are independent and run
        concurrently in the default executor.
        """
        values, index = self.validate_data(data)
        n = validate_sampling_rate(n)
        p = self._config.p

        loop = asyncio.get_running_loop()
        k_p, mean, var_term = await asyncio.gather(
            loop.run_in_executor(None, functools.partial(
                estimate_k, values, p, n, self._config.k_max_lag)),
            loop.run_in_executor(None, self._estimate, values, n, p),
            loop.run_in_executor(None, self._estimate, values, n, 2 * p),
        )

        return self._assemble(n, index, k_p, mean, var_term)


def estimate_accumulated_volatility_ci(y: PathLike,
                                       n: int,
                                       p: float = 2,
                                       method: Union[str, Method] = "nonparametric",
                                       kernel: Union[str, Kernel] = "gamma",
                                       confidence_level: Optional[float] = None,
                                       pin_nonparametric: Optional[bool] = None) -> ConfidenceBand:
    """Pointwise confidence interval for the accumulated p-th power volatility.

    Args:
        y: Observed path, length >= 2 and finite
        n: Sampling rate
        p: Power
        method: Scale-factor method, validated; only used for the internal
            estimates when ``pin_nonparametric`` is False
        kernel: Kernel family, validated likewise
        confidence_level: Two-sided coverage in (0, 1); None reads
            ``estimation.confidence_level`` (0.95 by default)
        pin_nonparametric: Use the non-parametric method for both internal
            estimates; None reads ``estimation.pin_ci_to_nonparametric``
            (True by default)

    Returns:
        ConfidenceBand: ``{'lower': ..., 'upper': ...}``, each of length
            len(y) - 1 with lower <= upper

    Raises:
        ConfigurationError: For unknown selectors or the (cof, power) pair
        DataError: If the path is invalid
        ParameterError: If n, p or confidence_level is invalid
        EstimationError: If K_p or either internal estimate fails
    """
    estimation = get_estimation_config()
    if confidence_level is None:
        confidence_level = estimation.confidence_level
    if pin_nonparametric is None:
        pin_nonparametric = estimation.pin_ci_to_nonparametric
    config = ConfidenceIntervalConfig(
        p=p, method=method, kernel=kernel,
        confidence_level=confidence_level, pin_nonparametric=pin_nonparametric
    )
    return AccumulatedVolatilityCI(config).fit(y, n).as_dict()
