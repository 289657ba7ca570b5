"""
Accumulated volatility estimation for Brownian semistationary processes.

Provides the accumulated volatility estimator, its pointwise confidence
interval, and the collaborators they rely on: the change-of-frequency
roughness estimator, the non-parametric scale factor, the moment constant
m_p and the K_p constant.
"""

import logging

logger = logging.getLogger("bssvol.models.volatility")

from .smoothness import bss_alpha_fit
from .scale import (
    ScaleFactor,
    estimate_k,
    moment_constant,
    resolve_scale_factor,
    tau_nonparametric_estimate,
)
from .accumulated import (
    AccumulatedVolatilityConfig,
    AccumulatedVolatilityEstimator,
    estimate_accumulated_volatility,
    normalized_power_variation,
)
from .confidence import (
    AccumulatedVolatilityCI,
    ConfidenceIntervalConfig,
    estimate_accumulated_volatility_ci,
    normal_quantile,
)

__all__ = [
    'bss_alpha_fit',
    'ScaleFactor', 'estimate_k', 'moment_constant', 'resolve_scale_factor',
    'tau_nonparametric_estimate',
    'AccumulatedVolatilityConfig', 'AccumulatedVolatilityEstimator',
    'estimate_accumulated_volatility', 'normalized_power_variation',
    'AccumulatedVolatilityCI', 'ConfidenceIntervalConfig',
    'estimate_accumulated_volatility_ci', 'normal_quantile',
]
