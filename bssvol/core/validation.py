# bssvol/core/validation.py

"""
Boundary validation for bssvol.

Every public estimator entry point checks its inputs here before doing any
computation: the observed path must be a finite 1-D sequence of length at least
two, the sampling rate a positive integer, the power a positive finite number
and the confidence level strictly between 0 and 1. Method and kernel selectors
are parsed into closed enumerations and the unsupported (cof, power) route is
rejected up front.
"""

import numbers
from typing import Optional, Tuple, Union

import numpy as np
import pandas as pd

from .exceptions import (
    ConfigurationError, raise_data_error, raise_parameter_error
)
from .types import Kernel, Method, PathLike, SUPPORTED_ROUTES


def validate_path(
    path: PathLike,
    data_name: str = "Y",
    min_length: int = 2
) -> Tuple[np.ndarray, Optional[pd.Index]]:
    """Validate an observed path and convert it to a float array.

    Args:
        path: Observed path as a sequence, NumPy array or pandas Series
        data_name: Name of the path for error messages
        min_length: Minimum required length

    Returns:
        Tuple[np.ndarray, Optional[pd.Index]]: The path as a float64 array and,
            if the input was a Series, its index

    Raises:
        DataError: If the path is not 1-D, too short or contains NaN/inf values
    """
    if path is None:
        raise_data_error(f"{data_name} cannot be None", data_name=data_name, issue="missing")

    index = None
    if isinstance(path, pd.DataFrame):
        if path.shape[1] != 1:
            raise_data_error(
                f"{data_name} must be a single column, got {path.shape[1]} columns",
                data_name=data_name,
                issue="not one-dimensional"
            )
        path = path.iloc[:, 0]
    if isinstance(path, pd.Series):
        index = path.index
        values = path.to_numpy()
    else:
        values = np.asarray(path)

    if np.iscomplexobj(values):
        raise_data_error(
            f"{data_name} must contain real numbers",
            data_name=data_name,
            issue="complex values"
        )
    if values.dtype == object or not np.issubdtype(values.dtype, np.number):
        try:
            values = values.astype(np.float64)
        except (TypeError, ValueError):
            raise_data_error(
                f"{data_name} must contain real numbers",
                data_name=data_name,
                issue=f"unsupported dtype {values.dtype}"
            )

    if values.ndim != 1:
        raise_data_error(
            f"{data_name} must be 1-dimensional, got shape {values.shape}",
            data_name=data_name,
            issue="not one-dimensional"
        )

    if values.shape[0] < min_length:
        raise_data_error(
            f"{data_name} is too short (length {values.shape[0]}), "
            f"minimum required length is {min_length}",
            data_name=data_name,
            issue=f"insufficient length: {values.shape[0]} < {min_length}"
        )

    values = values.astype(np.float64, copy=False)

    bad = ~np.isfinite(values)
    if bad.any():
        first = int(np.flatnonzero(bad)[0])
        issue = "contains NaN values" if np.isnan(values[first]) else "contains infinite values"
        raise_data_error(
            f"{data_name} {issue}",
            data_name=data_name,
            issue=issue,
            index=first
        )

    return values, index


def validate_sampling_rate(n: Union[int, float], param_name: str = "n") -> int:
    """Validate a sampling rate (observations per unit time).

    Integral floats such as ``100.0`` are accepted and converted.

    Raises:
        ParameterError: If n is not a positive integer
    """
    if isinstance(n, bool) or not isinstance(n, numbers.Real):
        raise_parameter_error(
            f"{param_name} must be a positive integer, got {type(n).__name__}",
            param_name=param_name,
            param_value=n,
            constraint="positive integer"
        )
    if not np.isfinite(n) or float(n) != int(n) or n <= 0:
        raise_parameter_error(
            f"{param_name} must be a positive integer, got {n}",
            param_name=param_name,
            param_value=n,
            constraint="positive integer"
        )
    return int(n)


def validate_power(p: float, param_name: str = "p") -> float:
    """Validate the power applied to absolute increments.

    Raises:
        ParameterError: If p is not a positive finite real number
    """
    if isinstance(p, bool) or not isinstance(p, numbers.Real) or not np.isfinite(p) or p <= 0:
        raise_parameter_error(
            f"{param_name} must be a positive finite number, got {p!r}",
            param_name=param_name,
            param_value=p,
            constraint="0 < p < inf"
        )
    return float(p)


def validate_confidence_level(confidence_level: float,
                              param_name: str = "confidence_level") -> float:
    """Validate a two-sided confidence level.

    Raises:
        ParameterError: If the level is not strictly between 0 and 1
    """
    if isinstance(confidence_level, bool) or not isinstance(confidence_level, numbers.Real) \
            or not np.isfinite(confidence_level) or not 0.0 < confidence_level < 1.0:
        raise_parameter_error(
            f"{param_name} must be strictly between 0 and 1, got {confidence_level!r}",
            param_name=param_name,
            param_value=confidence_level,
            constraint="0 < confidence_level < 1"
        )
    return float(confidence_level)


def resolve_route(method: Union[str, Method], kernel: Union[str, Kernel]) -> Tuple[Method, Kernel]:
    """Parse the method and kernel selectors and check the pair is supported.

    Returns:
        Tuple[Method, Kernel]: The parsed selectors

    Raises:
        ConfigurationError: If either selector is unknown, or for the
            change-of-frequency method with the power kernel
    """
    parsed_method = Method.parse(method)
    parsed_kernel = Kernel.parse(kernel)

    if (parsed_method, parsed_kernel) not in SUPPORTED_ROUTES:
        raise ConfigurationError(
            f"Method '{parsed_method.value}' is not defined for the "
            f"'{parsed_kernel.value}' kernel",
            setting="kernel",
            value=parsed_kernel.value,
            valid_options=[k.value for m, k in SUPPORTED_ROUTES if m is parsed_method],
            issue="unsupported method/kernel combination"
        )

    return parsed_method, parsed_kernel
