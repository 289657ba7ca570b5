# bssvol/__init__.py
"""
bssvol - Accumulated volatility estimation for Brownian semistationary processes

Estimates the accumulated (power) volatility process of a BSS process from a
single discretely observed path and produces pointwise confidence intervals
around the estimate. The scale factor of the power variation can come from
the change-of-frequency estimator, a least-squares fit of a gamma or power
kernel autocorrelation, or a non-parametric estimate. Simulators for
exponentiated Ornstein-Uhlenbeck volatility and gamma-kernel BSS paths are
included for experimentation.
"""

import os
import logging
import importlib
import warnings
from typing import Union

from .version import __version__, __title__, __description__, __license__, __dependencies__

# Set up package-wide logger
logger = logging.getLogger("bssvol")
logger.setLevel(logging.INFO)
_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logger.addHandler(_handler)


def _check_dependencies() -> None:
    """
    Check that the required dependencies are importable.

    Raises:
        ImportError: If a required package is missing
    """
    missing = []
    for package in __dependencies__:
        try:
            importlib.import_module(package)
        except ImportError:
            missing.append(package)

    if missing:
        logger.error(f"Required packages missing: {', '.join(missing)}")
        raise ImportError(
            f"bssvol requires the following packages: {', '.join(missing)}. "
            f"Please install them with pip."
        )


_check_dependencies()

from . import core
from . import models
from . import utils

from .core.config import get_logging_config, get_config, set_config, reset_config, save_config
from .core.exceptions import (
    BSSError, ConfigurationError, DataError, EstimationError, ParameterError,
    NumericError, ConvergenceWarning, NumericWarning
)
from .core.results import (
    AccumulatedVolatilityResult, BSSSimulationResult, ConfidenceIntervalResult, KernelFitResult
)
from .core.types import Kernel, Method
from .models.kernels import (
    gamma_kernel, gamma_kernel_correlation, gamma_kernel_tau, gamma_kernel_tau_asymptotic,
    gamma_kernel_bss_fit, fit_gamma_kernel,
    power_kernel, power_kernel_correlation, power_kernel_tau, power_kernel_bss_fit,
    fit_power_kernel,
)
from .models.simulation import exponentiated_ornstein_uhlenbeck, gamma_kernel_bss
from .models.volatility import (
    AccumulatedVolatilityCI,
    AccumulatedVolatilityConfig,
    AccumulatedVolatilityEstimator,
    ConfidenceIntervalConfig,
    ScaleFactor,
    bss_alpha_fit,
    estimate_accumulated_volatility,
    estimate_accumulated_volatility_ci,
    estimate_k,
    moment_constant,
    normalized_power_variation,
    resolve_scale_factor,
    tau_nonparametric_estimate,
)


def _configure_logging() -> None:
    """
    Apply the logging section of the configuration to the package logger.

    ``BSSVOL_LOG_LEVEL`` takes precedence over the configured level.
    """
    try:
        settings = get_logging_config()
    except Exception as e:
        logger.warning(f"Failed to load logging configuration: {e}")
        return

    level = os.environ.get("BSSVOL_LOG_LEVEL", settings.log_level).upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        warnings.warn(f"Unknown log level {level!r}, using INFO", UserWarning)
        level = "INFO"
    logger.setLevel(getattr(logging, level))

    formatter = logging.Formatter(settings.log_format, settings.log_date_format)
    _handler.setFormatter(formatter)
    if not settings.console_logging:
        logger.removeHandler(_handler)

    if settings.file_logging and settings.log_file is not None:
        file_handler = logging.FileHandler(settings.log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)


_configure_logging()


def get_version() -> str:
    """Return the version of bssvol."""
    return __version__


def set_log_level(level: Union[str, int]) -> None:
    """
    Set the logging level for bssvol.

    Args:
        level: Logging level, either as string ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
              or as an integer constant from the logging module
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)
    logger.info(f"Log level set to {logging.getLevelName(level)}")


__all__ = [
    # Estimators
    'estimate_accumulated_volatility',
    'estimate_accumulated_volatility_ci',
    'normalized_power_variation',
    'AccumulatedVolatilityEstimator',
    'AccumulatedVolatilityConfig',
    'AccumulatedVolatilityCI',
    'ConfidenceIntervalConfig',
    # Scale factors and constants
    'resolve_scale_factor',
    'ScaleFactor',
    'tau_nonparametric_estimate',
    'moment_constant',
    'estimate_k',
    'bss_alpha_fit',
    # Kernels
    'gamma_kernel',
    'gamma_kernel_correlation',
    'gamma_kernel_tau',
    'gamma_kernel_tau_asymptotic',
    'gamma_kernel_bss_fit',
    'fit_gamma_kernel',
    'power_kernel',
    'power_kernel_correlation',
    'power_kernel_tau',
    'power_kernel_bss_fit',
    'fit_power_kernel',
    # Simulation
    'exponentiated_ornstein_uhlenbeck',
    'gamma_kernel_bss',
    # Types and results
    'Method',
    'Kernel',
    'AccumulatedVolatilityResult',
    'ConfidenceIntervalResult',
    'KernelFitResult',
    'BSSSimulationResult',
    # Errors
    'BSSError',
    'ConfigurationError',
    'DataError',
    'EstimationError',
    'ParameterError',
    'NumericError',
    'ConvergenceWarning',
    'NumericWarning',
    # Configuration and package utilities
    'get_config',
    'set_config',
    'reset_config',
    'save_config',
    'get_version',
    'set_log_level',
    '__version__',
]
