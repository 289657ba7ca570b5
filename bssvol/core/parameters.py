# bssvol/core/parameters.py

"""
Parameter containers and validation helpers for bssvol.

Kernel parameters are held in small dataclasses that validate their domain on
construction and convert to and from the flat arrays used by the optimizers.
The ``transform``/``inverse_transform`` pair maps the constrained parameters to
an unconstrained space, which the kernel fits use when they fall back to
optimizers that do not accept bounds.
"""

import math
from dataclasses import dataclass, asdict, is_dataclass
from typing import Any, Dict, Optional, Type, TypeVar

import numpy as np

from .exceptions import ParameterError

P = TypeVar('P', bound='ParameterBase')

# Open smoothness interval for both kernel families
ALPHA_LOWER = -0.5
ALPHA_UPPER = 0.5


class ParameterBase:
    """Base class for all parameter containers."""

    def validate(self) -> None:
        """Validate parameter constraints.

        Raises:
            ParameterError: If parameter constraints are violated
        """
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to a dictionary.

        Returns:
            Dict[str, Any]: Dictionary representation of parameters
        """
        if is_dataclass(self):
            return asdict(self)
        return {k: v for k, v in self.__dict__.items() if not k.startswith('_')}

    def to_array(self) -> np.ndarray:
        raise NotImplementedError("to_array must be implemented by subclass")

    @classmethod
    def from_array(cls: Type[P], array: np.ndarray, **kwargs: Any) -> P:
        raise NotImplementedError("from_array must be implemented by subclass")

    def transform(self) -> np.ndarray:
        raise NotImplementedError("transform must be implemented by subclass")

    @classmethod
    def inverse_transform(cls: Type[P], array: np.ndarray, **kwargs: Any) -> P:
        raise NotImplementedError("inverse_transform must be implemented by subclass")

    def copy(self: P) -> P:
        """Create a copy of the parameter object."""
        return type(self)(**self.to_dict())


def validate_positive(value: float, param_name: str) -> float:
    """Validate that a parameter is positive and finite.

    Args:
        value: Parameter value to validate
        param_name: Name of the parameter for error messages

    Returns:
        float: The validated parameter value

    Raises:
        ParameterError: If the parameter is not positive
    """
    if not np.isfinite(value) or value <= 0:
        raise ParameterError(
            f"Parameter {param_name} must be positive and finite, got {value}",
            param_name=param_name,
            param_value=value,
            constraint="0 < value < inf"
        )
    return value


def validate_non_negative(value: float, param_name: str) -> float:
    """Validate that a parameter is non-negative.

    Raises:
        ParameterError: If the parameter is negative
    """
    if not np.isfinite(value) or value < 0:
        raise ParameterError(
            f"Parameter {param_name} must be non-negative, got {value}",
            param_name=param_name,
            param_value=value,
            constraint="value >= 0"
        )
    return value


def validate_range(value: float, param_name: str,
                   min_value: Optional[float] = None,
                   max_value: Optional[float] = None,
                   inclusive: bool = True) -> float:
    """Validate that a parameter is within a specified range.

    Args:
        value: Parameter value to validate
        param_name: Name of the parameter for error messages
        min_value: Minimum allowed value
        max_value: Maximum allowed value
        inclusive: Whether the bounds themselves are allowed

    Returns:
        float: The validated parameter value

    Raises:
        ParameterError: If the parameter is outside the specified range
    """
    lo_bracket, hi_bracket = ("[", "]") if inclusive else ("(", ")")
    constraint = f"{lo_bracket}{min_value}, {max_value}{hi_bracket}"

    if not np.isfinite(value):
        raise ParameterError(
            f"Parameter {param_name} must be finite, got {value}",
            param_name=param_name, param_value=value, constraint=constraint
        )
    if min_value is not None and (value < min_value or (not inclusive and value == min_value)):
        raise ParameterError(
            f"Parameter {param_name} must be in {constraint}, got {value}",
            param_name=param_name, param_value=value, constraint=constraint
        )
    if max_value is not None and (value > max_value or (not inclusive and value == max_value)):
        raise ParameterError(
            f"Parameter {param_name} must be in {constraint}, got {value}",
            param_name=param_name, param_value=value, constraint=constraint
        )
    return value


def validate_smoothness(value: float, param_name: str = "alpha") -> float:
    """Validate a roughness index alpha in (-1/2, 1/2)."""
    return validate_range(value, param_name, ALPHA_LOWER, ALPHA_UPPER, inclusive=False)


# Maps between constrained and unconstrained parameter spaces

def transform_smoothness(value: float) -> float:
    """Map alpha in (-1/2, 1/2) to the real line."""
    return float(np.arctanh(2.0 * value))


def inverse_transform_smoothness(value: float) -> float:
    # tanh rounds to exactly 1.0 beyond ~19
    return float(0.5 * np.tanh(np.clip(value, -15.0, 15.0)))


def transform_positive(value: float, lower: float = 0.0) -> float:
    """Map a value in (lower, inf) to the real line."""
    return math.log(value - lower)


def inverse_transform_positive(value: float, lower: float = 0.0) -> float:
    return lower + math.exp(min(max(value, -30.0), 700.0))


@dataclass
class GammaKernelParameters(ParameterBase):
    """Parameters of the gamma kernel g(x) = x^alpha exp(-lam x).

    Attributes:
        alpha: Roughness index in (-1/2, 1/2)
        lam: Decay rate, strictly positive
    """

    alpha: float
    lam: float

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        validate_smoothness(self.alpha, "alpha")
        validate_positive(self.lam, "lam")

    def to_array(self) -> np.ndarray:
        return np.array([self.alpha, self.lam])

    @classmethod
    def from_array(cls, array: np.ndarray, **kwargs: Any) -> 'GammaKernelParameters':
        if len(array) != 2:
            raise ParameterError(
                f"Gamma kernel parameters require 2 values, got {len(array)}",
                param_name="array",
                param_value=len(array)
            )
        return cls(alpha=float(array[0]), lam=float(array[1]))

    def transform(self) -> np.ndarray:
        return np.array([transform_smoothness(self.alpha), transform_positive(self.lam)])

    @classmethod
    def inverse_transform(cls, array: np.ndarray, **kwargs: Any) -> 'GammaKernelParameters':
        return cls(alpha=inverse_transform_smoothness(array[0]),
                   lam=inverse_transform_positive(array[1]))


@dataclass
class PowerKernelParameters(ParameterBase):
    """Parameters of the power kernel g(x) = x^alpha (1 + x)^(-beta - alpha).

    Attributes:
        alpha: Roughness index in (-1/2, 1/2)
        beta: Tail index, greater than 1/2 so that g is square integrable
    """

    alpha: float
    beta: float

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        validate_smoothness(self.alpha, "alpha")
        validate_range(self.beta, "beta", 0.5, None, inclusive=False)

    def to_array(self) -> np.ndarray:
        return np.array([self.alpha, self.beta])

    @classmethod
    def from_array(cls, array: np.ndarray, **kwargs: Any) -> 'PowerKernelParameters':
        if len(array) != 2:
            raise ParameterError(
                f"Power kernel parameters require 2 values, got {len(array)}",
                param_name="array",
                param_value=len(array)
            )
        return cls(alpha=float(array[0]), beta=float(array[1]))

    def transform(self) -> np.ndarray:
        return np.array([transform_smoothness(self.alpha),
                         transform_positive(self.beta, lower=0.5)])

    @classmethod
    def inverse_transform(cls, array: np.ndarray, **kwargs: Any) -> 'PowerKernelParameters':
        return cls(alpha=inverse_transform_smoothness(array[0]),
                   beta=inverse_transform_positive(array[1], lower=0.5))
