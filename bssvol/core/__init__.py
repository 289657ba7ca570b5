"""
bssvol core module

Base classes, parameter containers, result objects, selector enums, boundary
validation, the exception hierarchy and configuration management shared by
the estimators and simulators.
"""

import logging

logger = logging.getLogger("bssvol.core")

from .base import ModelBase

from .config import (
    ConfigManager,
    get_config,
    set_config,
    reset_config,
    save_config,
    get_config_manager,
)

from .exceptions import (
    BSSError,
    ParameterError,
    DataError,
    ConfigurationError,
    EstimationError,
    NumericError,
    BSSWarning,
    ConvergenceWarning,
    NumericWarning,
    STAGE_FITTING,
    STAGE_FORMULA,
    STAGE_ACCUMULATION,
)

from .parameters import (
    ParameterBase,
    GammaKernelParameters,
    PowerKernelParameters,
)

from .results import (
    ModelResult,
    KernelFitResult,
    AccumulatedVolatilityResult,
    ConfidenceIntervalResult,
    BSSSimulationResult,
)

from .types import Method, Kernel, SUPPORTED_ROUTES

from .validation import (
    validate_path,
    validate_sampling_rate,
    validate_power,
    validate_confidence_level,
    resolve_route,
)

__all__ = [
    'ModelBase',
    'ConfigManager', 'get_config', 'set_config', 'reset_config', 'save_config',
    'get_config_manager',
    'BSSError', 'ParameterError', 'DataError', 'ConfigurationError',
    'EstimationError', 'NumericError', 'BSSWarning', 'ConvergenceWarning',
    'NumericWarning', 'STAGE_FITTING', 'STAGE_FORMULA', 'STAGE_ACCUMULATION',
    'ParameterBase', 'GammaKernelParameters', 'PowerKernelParameters',
    'ModelResult', 'KernelFitResult', 'AccumulatedVolatilityResult',
    'ConfidenceIntervalResult', 'BSSSimulationResult',
    'Method', 'Kernel', 'SUPPORTED_ROUTES',
    'validate_path', 'validate_sampling_rate', 'validate_power',
    'validate_confidence_level', 'resolve_route',
]
