# bssvol/core/types.py

"""
Core type annotations and selector enums for bssvol.

The method and kernel selectors are closed enumerations. Strings supplied by
callers are parsed once at the boundary with ``Method.parse`` / ``Kernel.parse``,
and unrecognized values are rejected with a ConfigurationError instead of
falling through to a default estimator.
"""

from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Literal, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .exceptions import ConfigurationError

# NumPy array type aliases
Vector = np.ndarray  # 1D array

# Observed BSS paths may arrive as plain sequences, arrays or pandas series
PathLike = Union[Sequence[float], np.ndarray, pd.Series]
TimeSeriesData = Union[np.ndarray, pd.Series]

# Kernel parameter pairs returned by the model fits
KernelFit = Tuple[float, float]

# Confidence interval mapping returned by the interval estimator
ConfidenceBand = Dict[str, TimeSeriesData]

# Random state accepted by the simulators
RandomStateLike = Union[None, int, np.random.Generator]

# Logging levels
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# File path types
FilePath = Union[str, Path]

# Optimization types
ObjectiveFunction = Callable[[np.ndarray], float]


class Method(str, Enum):
    """Scale-factor estimation method."""

    ACF = "acf"
    COF = "cof"
    NONPARAMETRIC = "nonparametric"

    @classmethod
    def parse(cls, value: Union[str, "Method"]) -> "Method":
        """Parse a method selector.

        Args:
            value: A Method member or one of 'acf', 'cof', 'nonparametric'
                (case-insensitive)

        Returns:
            Method: The parsed selector

        Raises:
            ConfigurationError: If the value is not a recognized method
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ConfigurationError(
            f"Unknown estimation method: {value!r}",
            setting="method",
            value=value,
            valid_options=[m.value for m in cls]
        )


class Kernel(str, Enum):
    """Parametric kernel family used by the 'acf' and 'cof' methods."""

    GAMMA = "gamma"
    POWER = "power"

    @classmethod
    def parse(cls, value: Union[str, "Kernel"]) -> "Kernel":
        """Parse a kernel selector.

        Args:
            value: A Kernel member or one of 'gamma', 'power' (case-insensitive)

        Returns:
            Kernel: The parsed selector

        Raises:
            ConfigurationError: If the value is not a recognized kernel
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ConfigurationError(
            f"Unknown kernel: {value!r}",
            setting="kernel",
            value=value,
            valid_options=[k.value for k in cls]
        )


# (method, kernel) pairs with an implemented scale-factor route.
# The non-parametric route ignores the kernel.
SUPPORTED_ROUTES: List[Tuple[Method, Kernel]] = [
    (Method.COF, Kernel.GAMMA),
    (Method.ACF, Kernel.GAMMA),
    (Method.ACF, Kernel.POWER),
    (Method.NONPARAMETRIC, Kernel.GAMMA),
    (Method.NONPARAMETRIC, Kernel.POWER),
]
