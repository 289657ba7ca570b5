'''
Result containers for bssvol.

Dataclass-based result objects storing the outputs of the estimators and
simulators together with the settings that produced them. Every container
supports a text summary, dictionary/JSON export and conversion to a pandas
DataFrame.
'''

import json
from dataclasses import dataclass, field, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
import pandas as pd

from .parameters import ParameterBase


def _to_serializable(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, (pd.Series, pd.Index, list, tuple)):
        return [_to_serializable(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, dict):
        return {k: _to_serializable(v) for k, v in value.items()}
    return value


@dataclass
class ModelResult:
    """Base class for all result objects.

    Attributes:
        model_name: Name of the estimator or simulator that produced the result
        creation_time: Timestamp when the result was created
        metadata: Additional metadata about the result
    """

    model_name: str
    creation_time: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.metadata, dict):
            self.metadata = dict(self.metadata)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result object to a JSON-friendly dictionary.

        Returns:
            Dict[str, Any]: Dictionary representation of the result object
        """
        return {key: _to_serializable(value) for key, value in asdict(self).items()}

    def to_json(self, path: Optional[Union[str, Path]] = None, **kwargs: Any) -> Optional[str]:
        """Convert the result object to JSON.

        Args:
            path: Path to save the JSON file (if None, returns the JSON string)
            **kwargs: Additional keyword arguments for json.dump/dumps

        Returns:
            Optional[str]: JSON string if path is None, None otherwise
        """
        result_dict = self.to_dict()

        if path is None:
            return json.dumps(result_dict, **kwargs)

        with open(path, 'w') as f:
            json.dump(result_dict, f, **kwargs)

        return None

    def summary(self) -> str:
        """Generate a text summary of the result.

        Returns:
            str: A formatted string containing the result summary
        """
        header = f"Model: {self.model_name}\n"
        header += "=" * (len(header) - 1) + "\n\n"

        timestamp = f"Created: {self.creation_time.strftime('%Y-%m-%d %H:%M:%S')}\n\n"

        metadata_str = ""
        if self.metadata:
            metadata_str = "Metadata:\n"
            for key, value in self.metadata.items():
                metadata_str += f"  {key}: {value}\n"
            metadata_str += "\n"

        return header + timestamp + metadata_str

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model_name='{self.model_name}')"


def _series_stats(name: str, values: np.ndarray) -> str:
    text = f"{name}:\n"
    text += f"  Length: {len(values)}\n"
    if len(values) > 0:
        text += f"  First: {values[0]:.6f}\n"
        text += f"  Last: {values[-1]:.6f}\n"
    return text


@dataclass
class KernelFitResult(ModelResult):
    """Result of fitting a parametric kernel to the empirical autocorrelation.

    Attributes:
        kernel: Kernel family name ('gamma' or 'power')
        parameters: Fitted kernel parameters
        objective_value: Sum of squared autocorrelation residuals at the optimum
        converged: Whether the optimizer reported success
        iterations: Number of optimizer iterations
        optimizer: Name of the scipy.optimize method that produced the optimum
        num_lags: Number of autocorrelation lags matched
        empirical_acf: Empirical autocorrelation at lags 1..num_lags
        fitted_acf: Model autocorrelation at the fitted parameters
    """

    kernel: str = ""
    parameters: Optional[ParameterBase] = None
    objective_value: float = np.nan
    converged: bool = False
    iterations: int = 0
    optimizer: str = ""
    num_lags: int = 0
    empirical_acf: Optional[np.ndarray] = None
    fitted_acf: Optional[np.ndarray] = None

    @property
    def values(self) -> tuple:
        """Fitted parameters as a plain (alpha, second parameter) tuple."""
        return tuple(float(v) for v in self.parameters.to_array())

    def summary(self) -> str:
        base_summary = super().summary()

        fit_info = f"Kernel: {self.kernel}\n"
        if self.parameters is not None:
            for name, value in self.parameters.to_dict().items():
                fit_info += f"  {name}: {value:.6f}\n"
        fit_info += f"Optimizer: {self.optimizer}\n"
        fit_info += f"Converged: {'Yes' if self.converged else 'No'}\n"
        fit_info += f"Iterations: {self.iterations}\n"
        fit_info += f"Objective: {self.objective_value:.6e}\n"
        fit_info += f"Lags matched: {self.num_lags}\n\n"

        return base_summary + fit_info

    def to_dataframe(self) -> pd.DataFrame:
        """Empirical and fitted autocorrelations indexed by lag."""
        lags = np.arange(1, self.num_lags + 1)
        return pd.DataFrame(
            {"empirical_acf": self.empirical_acf, "fitted_acf": self.fitted_acf},
            index=pd.Index(lags, name="lag")
        )


@dataclass
class AccumulatedVolatilityResult(ModelResult):
    """Result container for the accumulated volatility estimator.

    Attributes:
        estimate: Accumulated p-th power volatility, one value per increment
        n: Sampling rate (observations per unit time)
        p: Power applied to the absolute increments
        method: Scale-factor method used
        kernel: Kernel family used (ignored by the non-parametric method)
        tau: Scale factor applied over the whole path
        moment_constant: Absolute moment m_p of a standard normal variable
        kernel_parameters: Fitted kernel parameters, if the method fitted any
        index: Index of the observed path without its first label, when the
            path was a pandas Series
    """

    estimate: np.ndarray = field(default_factory=lambda: np.empty(0))
    n: int = 0
    p: float = 2.0
    method: str = ""
    kernel: str = ""
    tau: float = np.nan
    moment_constant: float = np.nan
    kernel_parameters: Optional[Dict[str, float]] = None
    index: Optional[pd.Index] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.estimate, np.ndarray):
            self.estimate = np.asarray(self.estimate, dtype=np.float64)

    def to_series(self) -> pd.Series:
        """Return the estimate as a pandas Series."""
        return pd.Series(self.estimate, index=self.index, name="accumulated_volatility")

    def as_output(self) -> Union[np.ndarray, pd.Series]:
        """Return the estimate in the container type of the observed path."""
        if self.index is not None:
            return self.to_series()
        return self.estimate

    def summary(self) -> str:
        base_summary = super().summary()

        method_info = "Estimation Method:\n"
        method_info += f"  Method: {self.method}\n"
        method_info += f"  Kernel: {self.kernel}\n"
        method_info += f"  Sampling rate n: {self.n}\n"
        method_info += f"  Power p: {self.p}\n"
        method_info += f"  Scale factor tau: {self.tau:.6e}\n"
        method_info += f"  Moment constant m_p: {self.moment_constant:.6f}\n"
        if self.kernel_parameters:
            for name, value in self.kernel_parameters.items():
                method_info += f"  {name}: {value:.6f}\n"
        method_info += "\n"

        return base_summary + method_info + _series_stats("Accumulated Volatility", self.estimate) + "\n"

    def to_dataframe(self) -> pd.DataFrame:
        """Convert the estimate to a pandas DataFrame."""
        return pd.DataFrame({"accumulated_volatility": self.estimate}, index=self.index)


@dataclass
class ConfidenceIntervalResult(ModelResult):
    """Result container for pointwise confidence intervals.

    Attributes:
        lower: Lower bound, mean - half_width (not clamped at zero)
        upper: Upper bound, mean + half_width
        mean: Accumulated p-th power volatility estimate
        half_width: z * K_p * sqrt(variance term)
        variance_term: Accumulated 2p-th power volatility estimate
        z: Two-sided standard normal quantile
        k_p: Long-run variance constant K_p
        confidence_level: Nominal coverage in (0, 1)
        n: Sampling rate
        p: Power
        method: Method used for the internal estimates
        kernel: Kernel used for the internal estimates
        pinned: Whether the internal estimates were pinned to the
            non-parametric method
        index: Index of the observed path without its first label, when the
            path was a pandas Series
    """

    lower: np.ndarray = field(default_factory=lambda: np.empty(0))
    upper: np.ndarray = field(default_factory=lambda: np.empty(0))
    mean: np.ndarray = field(default_factory=lambda: np.empty(0))
    half_width: np.ndarray = field(default_factory=lambda: np.empty(0))
    variance_term: np.ndarray = field(default_factory=lambda: np.empty(0))
    z: float = np.nan
    k_p: float = np.nan
    confidence_level: float = 0.95
    n: int = 0
    p: float = 2.0
    method: str = ""
    kernel: str = ""
    pinned: bool = True
    index: Optional[pd.Index] = None

    def as_dict(self) -> Dict[str, Union[np.ndarray, pd.Series]]:
        """Return the ``{'lower': ..., 'upper': ...}`` mapping.

        Bounds are pandas Series when the observed path was a Series.
        """
        if self.index is not None:
            return {
                "lower": pd.Series(self.lower, index=self.index, name="lower"),
                "upper": pd.Series(self.upper, index=self.index, name="upper"),
            }
        return {"lower": self.lower, "upper": self.upper}

    def summary(self) -> str:
        base_summary = super().summary()

        ci_info = "Confidence Interval:\n"
        ci_info += f"  Confidence level: {self.confidence_level}\n"
        ci_info += f"  z: {self.z:.6f}\n"
        ci_info += f"  K_p: {self.k_p:.6e}\n"
        ci_info += f"  Method: {self.method}{' (pinned)' if self.pinned else ''}\n"
        ci_info += f"  Kernel: {self.kernel}\n"
        ci_info += f"  Sampling rate n: {self.n}\n"
        ci_info += f"  Power p: {self.p}\n\n"

        return (base_summary + ci_info + _series_stats("Lower", self.lower)
                + _series_stats("Upper", self.upper) + "\n")

    def to_dataframe(self) -> pd.DataFrame:
        """Convert the interval to a DataFrame with lower/mean/upper columns."""
        return pd.DataFrame(
            {"lower": self.lower, "mean": self.mean, "upper": self.upper},
            index=self.index
        )


@dataclass
class BSSSimulationResult(ModelResult):
    """Result container for simulated Brownian semistationary paths.

    Attributes:
        bss: Simulated BSS path of length N + 1, starting at time 0
        sigma: Volatility path used for the simulation, length N + 1
        times: Observation times k / n for k = 0..N
        n: Sampling rate
        T: Time horizon
        alpha: Gamma kernel roughness index
        lam: Gamma kernel decay rate
        kappa: Number of near-origin cells simulated exactly
    """

    bss: np.ndarray = field(default_factory=lambda: np.empty(0))
    sigma: np.ndarray = field(default_factory=lambda: np.empty(0))
    times: np.ndarray = field(default_factory=lambda: np.empty(0))
    n: int = 0
    T: float = 0.0
    alpha: float = np.nan
    lam: float = np.nan
    kappa: int = 0

    def summary(self) -> str:
        base_summary = super().summary()

        sim_info = "Simulation Settings:\n"
        sim_info += f"  n: {self.n}\n"
        sim_info += f"  T: {self.T}\n"
        sim_info += f"  alpha: {self.alpha}\n"
        sim_info += f"  lambda: {self.lam}\n"
        sim_info += f"  kappa: {self.kappa}\n\n"

        return base_summary + sim_info + _series_stats("BSS Path", self.bss) + "\n"

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            {"bss": self.bss, "sigma": self.sigma},
            index=pd.Index(self.times, name="time")
        )
