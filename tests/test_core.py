# tests/test_core.py

"""
Tests for the core building blocks: exceptions, selectors, path validation,
kernel parameter containers and result serialization.
"""

import json

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose, assert_array_equal
from hypothesis import HealthCheck, given, settings, strategies as st

from bssvol.core.exceptions import (
    BSSError, ConfigurationError, ConvergenceWarning, DataError, EstimationError,
    NumericError, ParameterError, STAGE_ACCUMULATION, STAGE_FITTING,
    warn_convergence
)
from bssvol.core.parameters import (
    GammaKernelParameters, PowerKernelParameters, inverse_transform_smoothness,
    transform_smoothness, validate_smoothness
)
from bssvol.core.results import AccumulatedVolatilityResult, KernelFitResult
from bssvol.core.types import Kernel, Method, SUPPORTED_ROUTES
from bssvol.core.validation import (
    resolve_route, validate_confidence_level, validate_path, validate_sampling_rate
)
from bssvol.models.volatility import AccumulatedVolatilityEstimator


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self):
        """Every bssvol error derives from BSSError."""
        for cls in (ConfigurationError, DataError, EstimationError, NumericError, ParameterError):
            assert issubclass(cls, BSSError)

    def test_estimation_stage_prefix(self):
        """EstimationError prefixes its message with the stage."""
        error = EstimationError("sum overflowed", stage=STAGE_ACCUMULATION, estimator="accumulate")

        assert error.stage == STAGE_ACCUMULATION
        assert error.message.startswith("[accumulation] sum overflowed")
        assert "Estimator: accumulate" in str(error)

    def test_context_in_message(self):
        """Context entries are listed in the message."""
        error = ParameterError("bad n", param_name="n", param_value=-1, constraint="n > 0")
        text = str(error)

        assert "Parameter: n" in text
        assert "Constraint: n > 0" in text
        assert "Location:" in text

    def test_convergence_warning(self):
        """warn_convergence issues a ConvergenceWarning."""
        with pytest.warns(ConvergenceWarning, match="did not converge"):
            warn_convergence("fit did not converge", iterations=10, final_value=0.5)

    def test_stage_constants(self):
        """Stage names are stable strings."""
        assert STAGE_FITTING == "scale-factor fitting"
        assert STAGE_ACCUMULATION == "accumulation"


class TestSelectors:
    """Tests for method and kernel parsing."""

    def test_parse(self):
        """Strings are parsed case-insensitively and members pass through."""
        assert Method.parse(" ACF ") is Method.ACF
        assert Method.parse(Method.COF) is Method.COF
        assert Kernel.parse("Power") is Kernel.POWER

    @pytest.mark.parametrize("value", ["garch", "", None, 3])
    def test_unknown(self, value):
        """Unknown selectors are configuration errors."""
        with pytest.raises(ConfigurationError):
            Method.parse(value)
        with pytest.raises(ConfigurationError):
            Kernel.parse(value)

    def test_supported_routes(self):
        """Every pair except (cof, power) is supported."""
        assert len(SUPPORTED_ROUTES) == 5
        for method in Method:
            for kernel in Kernel:
                if (method, kernel) == (Method.COF, Kernel.POWER):
                    with pytest.raises(ConfigurationError):
                        resolve_route(method, kernel)
                else:
                    assert resolve_route(method.value, kernel.value) == (method, kernel)


class TestValidation:
    """Tests for input validation."""

    def test_path_conversion(self):
        """Lists and integer arrays become float64 arrays without an index."""
        values, index = validate_path([1, 2, 3])
        assert values.dtype == np.float64
        assert index is None

    def test_series_and_frame(self):
        """Series and single-column frames keep their index."""
        index = pd.date_range("2024-01-01", periods=3, freq="h")
        values, out_index = validate_path(pd.Series([1.0, 2.0, 3.0], index=index))
        assert_array_equal(values, [1.0, 2.0, 3.0])
        assert out_index.equals(index)

        values, out_index = validate_path(pd.DataFrame({"y": [1.0, 2.0, 3.0]}, index=index))
        assert out_index.equals(index)
        with pytest.raises(DataError):
            validate_path(pd.DataFrame({"a": [1.0, 2.0], "b": [3.0, 4.0]}))

    @pytest.mark.parametrize("path", [None, ["a", "b"], [1 + 2j, 3.0], [[1.0, 2.0]]])
    def test_invalid_paths(self, path):
        """Missing, non-numeric, complex or 2-D paths are data errors."""
        with pytest.raises(DataError):
            validate_path(path)

    def test_sampling_rate(self):
        """Integral floats are accepted; bools and fractions are not."""
        assert validate_sampling_rate(100.0) == 100
        assert validate_sampling_rate(np.int64(5)) == 5
        for bad in (True, 0.5, -3, np.nan, "10"):
            with pytest.raises(ParameterError):
                validate_sampling_rate(bad)

    def test_confidence_level(self):
        """The level must lie strictly inside (0, 1)."""
        assert validate_confidence_level(0.5) == 0.5
        for bad in (0, 1, 2.0, False):
            with pytest.raises(ParameterError):
                validate_confidence_level(bad)


class TestKernelParameters:
    """Tests for the kernel parameter containers."""

    def test_domain(self):
        """Parameters are validated on construction."""
        GammaKernelParameters(alpha=-0.49, lam=0.01)
        PowerKernelParameters(alpha=0.49, beta=0.51)
        with pytest.raises(ParameterError):
            GammaKernelParameters(alpha=0.5, lam=1.0)
        with pytest.raises(ParameterError):
            GammaKernelParameters(alpha=0.1, lam=0.0)
        with pytest.raises(ParameterError):
            PowerKernelParameters(alpha=0.1, beta=0.5)
        with pytest.raises(ParameterError):
            validate_smoothness(-0.5)

    def test_array_conversion(self):
        """to_array and from_array are inverse operations."""
        params = GammaKernelParameters(alpha=0.2, lam=3.0)
        assert_array_equal(params.to_array(), [0.2, 3.0])
        assert GammaKernelParameters.from_array(params.to_array()) == params
        with pytest.raises(ParameterError):
            GammaKernelParameters.from_array(np.array([0.1]))

    def test_copy_and_dict(self):
        """Copies are equal but independent."""
        params = PowerKernelParameters(alpha=-0.1, beta=2.0)
        clone = params.copy()
        assert clone == params and clone is not params
        assert params.to_dict() == {"alpha": -0.1, "beta": 2.0}

    @given(st.floats(min_value=-0.499, max_value=0.499), st.floats(min_value=1e-3, max_value=1e3))
    @settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_gamma_transform_inverse(self, alpha, lam):
        """The unconstrained map is inverted by inverse_transform."""
        params = GammaKernelParameters(alpha=alpha, lam=lam)
        restored = GammaKernelParameters.inverse_transform(params.transform())
        assert_allclose(restored.to_array(), params.to_array(), rtol=1e-8, atol=1e-12)

    @given(st.floats(min_value=-1e6, max_value=1e6, allow_nan=False))
    @settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_inverse_transform_stays_in_domain(self, z):
        """Any real input maps into a valid parameter set."""
        params = PowerKernelParameters.inverse_transform(np.array([z, z]))
        assert -0.5 < params.alpha < 0.5
        assert params.beta > 0.5

    def test_smoothness_transform(self):
        """alpha = 0 maps to the origin."""
        assert transform_smoothness(0.0) == 0.0
        assert inverse_transform_smoothness(0.0) == 0.0


class TestResults:
    """Tests for result containers and the estimator base class."""

    def test_to_json(self, series_path):
        """Results with a datetime index serialize to JSON."""
        result = AccumulatedVolatilityEstimator().fit(series_path, 100)
        payload = json.loads(result.to_json())

        assert payload["method"] == "nonparametric"
        assert len(payload["estimate"]) == len(series_path) - 1
        assert len(payload["index"]) == len(series_path) - 1

    def test_to_json_file(self, tmp_path):
        """to_json writes to a file when given a path."""
        result = AccumulatedVolatilityResult(model_name="test", estimate=np.array([1.0, 2.0]), n=1, p=2.0)
        target = tmp_path / "result.json"

        assert result.to_json(target) is None
        assert json.loads(target.read_text())["estimate"] == [1.0, 2.0]

    def test_output_container(self):
        """as_output follows the container type of the observed path."""
        plain = AccumulatedVolatilityResult(model_name="test", estimate=[1.0, 2.0])
        assert isinstance(plain.as_output(), np.ndarray)

        indexed = AccumulatedVolatilityResult(model_name="test", estimate=[1.0, 2.0],
                                              index=pd.Index([1, 2]))
        assert isinstance(indexed.as_output(), pd.Series)

    def test_kernel_fit_values(self):
        """KernelFitResult.values returns plain floats."""
        result = KernelFitResult(model_name="fit", kernel="gamma",
                                 parameters=GammaKernelParameters(alpha=0.1, lam=2.0))
        assert result.values == (0.1, 2.0)
        assert "lam: 2.000000" in result.summary()

    def test_unfitted_estimator(self):
        """Results are unavailable before fitting."""
        estimator = AccumulatedVolatilityEstimator()
        with pytest.raises(RuntimeError):
            estimator.results
        assert "not fitted" in estimator.summary()
        assert "fitted=False" in repr(estimator)

    def test_config_setter_type_checked(self):
        """The configuration can only be replaced by one of the same type."""
        estimator = AccumulatedVolatilityEstimator()
        with pytest.raises(TypeError):
            estimator.config = {"p": 2}

