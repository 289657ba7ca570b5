# bssvol/models/volatility/accumulated.py
"""
Accumulated volatility estimator for Brownian semistationary processes.

For a BSS process Y observed at rate n, the normalized realized power variation

    (1 / n) sum_(i <= k) |Y[i+1] - Y[i]|^p / (tau_n^p m_p)

estimates the accumulated p-th power volatility from 0 to (k+1)/n. The scale
factor tau_n is obtained once for the whole path from one of three routes
(change-of-frequency, autocorrelation fit or non-parametric); the running sum
is then a single pass over the increments.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import numpy as np
import pandas as pd

from ...core.base import ModelBase
from ...core.config import get_estimation_config
from ...core.exceptions import (
    BSSError, STAGE_ACCUMULATION, raise_estimation_error, raise_parameter_error
)
from ...core.parameters import ParameterBase
from ...core.results import AccumulatedVolatilityResult
from ...core.types import Kernel, Method, PathLike, TimeSeriesData
from ...core.validation import (
    resolve_route, validate_path, validate_power, validate_sampling_rate
)
from ._numba_core import _accumulated_power_variation_core
from .scale import moment_constant, resolve_scale_factor

logger = logging.getLogger("bssvol.models.volatility.accumulated")


@dataclass
class AccumulatedVolatilityConfig(ParameterBase):
    """Configuration of the accumulated volatility estimator.

    Defaults come from the ``estimation`` section of the configuration manager.

    Attributes:
        p: Power applied to the absolute increments
        method: Scale-factor method ('acf', 'cof' or 'nonparametric')
        kernel: Kernel family ('gamma' or 'power'), ignored by 'nonparametric'
        num_lags: Autocorrelation lags for the 'acf' fits (None reads the
            configuration)
    """

    p: float = field(default_factory=lambda: get_estimation_config().default_power)
    method: Union[str, Method] = field(default_factory=lambda: get_estimation_config().default_method)
    kernel: Union[str, Kernel] = field(default_factory=lambda: get_estimation_config().default_kernel)
    num_lags: Optional[int] = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate the configuration and parse the selectors.

        Raises:
            ParameterError: If p is invalid
            ConfigurationError: If method/kernel are unknown or unsupported
        """
        self.p = validate_power(self.p)
        self.method, self.kernel = resolve_route(self.method, self.kernel)


def _accumulate(values: np.ndarray, n: int, p: float, tau: float) -> np.ndarray:
    running = _accumulated_power_variation_core(values, p)
    with np.errstate(over="ignore", invalid="ignore"):
        estimate = running / n / tau ** p / moment_constant(p)

    if not np.all(np.isfinite(estimate)):
        first = int(np.flatnonzero(~np.isfinite(estimate))[0])
        raise_estimation_error(
            "Accumulated volatility estimate contains non-finite values",
            stage=STAGE_ACCUMULATION,
            estimator="normalized_power_variation",
            issue="overflow or invalid value",
            context={"First index": first, "p": p, "tau": tau}
        )
    return estimate


def normalized_power_variation(y: PathLike, n: int, p: float, tau: float) -> TimeSeriesData:
    """Accumulated volatility estimate for a known scale factor.

    Args:
        y: Observed path, length >= 2
        n: Sampling rate
        p: Power
        tau: Positive finite scale factor

    Returns:
        TimeSeriesData: Array of length len(y) - 1, or a Series indexed by
            ``y.index[1:]`` when y is a Series

    Raises:
        DataError: If the path is invalid
        ParameterError: If n, p or tau are invalid
        EstimationError: If the result contains non-finite values
    """
    values, index = validate_path(y)
    n = validate_sampling_rate(n)
    p = validate_power(p)
    if isinstance(tau, bool) or not np.isfinite(tau) or tau <= 0:
        raise_parameter_error(
            f"tau must be a positive finite number, got {tau!r}",
            param_name="tau",
            param_value=tau,
            constraint="0 < tau < inf"
        )

    estimate = _accumulate(values, n, p, float(tau))
    if index is not None:
        return pd.Series(estimate, index=index[1:], name="accumulated_volatility")
    return estimate


class AccumulatedVolatilityEstimator(ModelBase[AccumulatedVolatilityConfig, AccumulatedVolatilityResult]):
    """Estimator of the accumulated p-th power volatility of a BSS path.

    Example:
        >>> estimator = AccumulatedVolatilityEstimator(
        ...     AccumulatedVolatilityConfig(p=2, method="acf", kernel="gamma"))
        >>> result = estimator.fit(y, n=100)
        >>> result.estimate[-1]
    """

    def __init__(self, config: Optional[AccumulatedVolatilityConfig] = None,
                 name: str = "AccumulatedVolatility"):
        super().__init__(config if config is not None else AccumulatedVolatilityConfig(), name=name)

    def fit(self, data: PathLike, n: int, **kwargs: Any) -> AccumulatedVolatilityResult:
        """Estimate the accumulated volatility of an observed path.

        Args:
            data: Observed path (sequence, array or Series), length >= 2
            n: Sampling rate (observations per unit time)

        Returns:
            AccumulatedVolatilityResult: Estimate, scale factor and route details

        Raises:
            DataError: If the path is invalid
            ParameterError: If n is invalid
            EstimationError: If the scale factor or the accumulation fails
        """
        values, index = self.validate_data(data)
        n = validate_sampling_rate(n)
        config = self._config

        try:
            scale = resolve_scale_factor(values, n, config.method, config.kernel, config.num_lags)
            estimate = _accumulate(values, n, config.p, scale.tau)
        except BSSError as e:
            logger.error(f"Estimation failed: {e.message}")
            raise

        logger.debug(
            f"Accumulated volatility via {scale.method.value}/{scale.kernel.value}: "
            f"tau={scale.tau:.6e}, final value={estimate[-1]:.6e}"
        )

        result = AccumulatedVolatilityResult(
            model_name=self._name,
            estimate=estimate,
            n=n,
            p=config.p,
            method=scale.method.value,
            kernel=scale.kernel.value,
            tau=scale.tau,
            moment_constant=moment_constant(config.p),
            kernel_parameters=scale.parameters,
            index=index[1:] if index is not None else None,
        )

        self._results = result
        self._fitted = True
        return result


def estimate_accumulated_volatility(y: PathLike,
                                    n: int,
                                    p: float = 2,
                                    method: Union[str, Method] = "nonparametric",
                                    kernel: Union[str, Kernel] = "gamma") -> TimeSeriesData:
    """Estimate the accumulated p-th power volatility process of a BSS path.

    Args:
        y: Observed path, length >= 2 and finite
        n: Sampling rate (observations per unit time)
        p: Power, default 2 for the accumulated squared volatility
        method: 'acf', 'cof' or 'nonparametric' (default). The non-parametric
            estimate is relative to E[sigma^2].
        kernel: 'gamma' (default) or 'power'; ignored by 'nonparametric'

    Returns:
        TimeSeriesData: Non-decreasing estimate of length len(y) - 1; element k
            estimates the accumulated volatility from 0 to (k + 1)/n. A Series
            indexed by ``y.index[1:]`` when y is a Series.

    Raises:
        ConfigurationError: For unknown selectors or the (cof, power) pair
        DataError: If the path is invalid
        ParameterError: If n or p is invalid
        EstimationError: If the scale factor or the accumulation fails
    """
    config = AccumulatedVolatilityConfig(p=p, method=method, kernel=kernel)
    return AccumulatedVolatilityEstimator(config).fit(y, n).as_output()
