'''
Abstract base class for the bssvol estimators.

Estimators are configured once through a dataclass configuration and then
fitted to an observed path sampled at ``n`` points per unit time. The base
class holds the shared state (name, fitted flag, last result), the
configuration property and an ``asyncio`` wrapper around ``fit``.
'''

import abc
import asyncio
import functools
from typing import Any, Generic, Optional, Tuple, TypeVar, cast

import numpy as np
import pandas as pd

from .types import PathLike
from .validation import validate_path

C = TypeVar('C')  # Generic type for configuration
R = TypeVar('R')  # Generic type for results


class ModelBase(abc.ABC, Generic[C, R]):
    """Abstract base class for all estimators in bssvol.

    Type Parameters:
        C: The configuration type for this estimator
        R: The result type for this estimator
    """

    def __init__(self, config: C, name: str = "Model"):
        """Initialize the estimator.

        Args:
            config: Estimator configuration
            name: A descriptive name for the estimator
        """
        self._name = name
        self._config = config
        self._fitted = False
        self._results: Optional[R] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> C:
        """Get the estimator configuration."""
        return self._config

    @config.setter
    def config(self, config: C) -> None:
        """Set the estimator configuration.

        Raises:
            TypeError: If config has a different type than the current one
        """
        if not isinstance(config, type(self._config)):
            raise TypeError(
                f"config must be a {type(self._config).__name__}, got {type(config).__name__}"
            )
        self._config = config
        self._fitted = False

    @property
    def fitted(self) -> bool:
        return self._fitted

    @property
    def results(self) -> Optional[R]:
        """Get the results of the last fit.

        Raises:
            RuntimeError: If the estimator has not been fitted
        """
        if not self._fitted:
            raise RuntimeError("Model has not been fitted. Call fit() first.")
        return self._results

    @abc.abstractmethod
    def fit(self, data: PathLike, n: int, **kwargs: Any) -> R:
        """Fit the estimator to an observed path.

        Args:
            data: Observed path
            n: Sampling rate (observations per unit time)
            **kwargs: Additional keyword arguments for fitting

        Returns:
            R: The estimation results
        """
        pass

    async def fit_async(self, data: PathLike, n: int, **kwargs: Any) -> R:
        """Asynchronously fit the estimator.

        Runs ``fit`` in the event loop's default executor so the caller's loop
        is not blocked by the numerical work.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, functools.partial(self.fit, data, n, **kwargs)
        )

    def validate_data(self, data: PathLike) -> Tuple[np.ndarray, Optional[pd.Index]]:
        """Validate an observed path.

        Returns:
            Tuple[np.ndarray, Optional[pd.Index]]: The path as a float array and
                its index if it was a pandas Series

        Raises:
            DataError: If the path is invalid
        """
        return validate_path(data)

    def summary(self) -> str:
        if not self._fitted:
            return f"Model: {self._name} (not fitted)"

        if self._results is None:
            return f"Model: {self._name} (fitted, but no results available)"

        if hasattr(self._results, "summary") and callable(getattr(self._results, "summary")):
            return cast(Any, self._results).summary()

        return f"Model: {self._name} (fitted)"

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self._name}', fitted={self._fitted})"
