# tests/test_accumulated_volatility.py

"""
Tests for the accumulated volatility estimator.

Covers the normalized power variation for a known scale factor, the three
scale-factor routes (change-of-frequency, autocorrelation fit and
non-parametric), selector validation, input validation, the stage reported by
estimation failures, and pandas Series handling.
"""

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose, assert_array_equal
from hypothesis import HealthCheck, given, strategies as st, settings, assume

from bssvol.models.volatility import (
    AccumulatedVolatilityConfig, AccumulatedVolatilityEstimator,
    estimate_accumulated_volatility, moment_constant, normalized_power_variation
)
from bssvol.core.config import set_config
from bssvol.core.exceptions import (
    ConfigurationError, DataError, EstimationError, ParameterError,
    STAGE_ACCUMULATION, STAGE_FITTING, STAGE_FORMULA
)
from bssvol.core.results import AccumulatedVolatilityResult
from bssvol.core.types import Kernel, Method


class TestMomentConstant:
    """Tests for the absolute normal moment m_p."""

    def test_known_values(self):
        """m_1, m_2 and m_4 match the closed forms."""
        assert_allclose(moment_constant(1), np.sqrt(2 / np.pi), rtol=1e-12)
        assert_allclose(moment_constant(2), 1.0, rtol=1e-12)
        assert_allclose(moment_constant(4), 3.0, rtol=1e-12)

    def test_large_power_is_finite(self):
        """Large powers do not overflow."""
        assert np.isfinite(moment_constant(150))

    @pytest.mark.parametrize("p", [0, -1, np.nan, np.inf])
    def test_invalid_power(self, p):
        """Non-positive or non-finite powers are rejected."""
        with pytest.raises(ParameterError):
            moment_constant(p)


class TestNormalizedPowerVariation:
    """Tests for the accumulation with a known scale factor."""

    def test_hand_computed_values(self):
        """Squared increments are summed and normalized by n and tau."""
        result = normalized_power_variation([0.0, 1.0, 1.0, 3.0], 1, 2, 1.0)
        assert_allclose(result, [1.0, 1.0, 5.0])

    def test_scaling_by_n_and_tau(self):
        """The estimate scales as 1 / (n tau^p)."""
        y = [0.0, 1.0, 1.0, 3.0]
        base = normalized_power_variation(y, 1, 2, 1.0)
        scaled = normalized_power_variation(y, 4, 2, 0.5)
        assert_allclose(scaled, base / 4 / 0.25)

    def test_power_one(self):
        """p = 1 divides by m_1."""
        result = normalized_power_variation([0.0, 2.0, 1.0], 1, 1, 1.0)
        assert_allclose(result, np.array([2.0, 3.0]) / np.sqrt(2 / np.pi))

    @pytest.mark.parametrize("tau", [0.0, -1.0, np.nan, np.inf])
    def test_invalid_tau(self, tau):
        """tau must be positive and finite."""
        with pytest.raises(ParameterError):
            normalized_power_variation([0.0, 1.0, 2.0], 10, 2, tau)

    def test_series_input(self):
        """Series input returns a Series on index[1:]."""
        index = pd.date_range("2024-01-01", periods=4, freq="D")
        y = pd.Series([0.0, 1.0, 1.0, 3.0], index=index)
        result = normalized_power_variation(y, 1, 2, 1.0)

        assert isinstance(result, pd.Series)
        assert result.index.equals(index[1:])
        assert_allclose(result.values, [1.0, 1.0, 5.0])


class TestNonparametricRoute:
    """Tests for the default non-parametric scale factor."""

    def test_hand_computed_estimate(self, small_path):
        """Matches cumsum(diff^2) / mean(diff^2) for n = 1."""
        result = estimate_accumulated_volatility(small_path, 1, 2, "nonparametric")
        assert_allclose(result, [0.5, 1.0, 3.0], rtol=1e-12)

    def test_final_value_is_span(self, brownian_path):
        """For p = 2 the estimate ends at the observation span (len(Y) - 1) / n."""
        result = estimate_accumulated_volatility(brownian_path, 100)
        assert_allclose(result[-1], 100.0, rtol=1e-10)

    def test_scale_free_any_power(self, brownian_path):
        """Rescaling the path leaves the estimate unchanged for every p."""
        for p in (1.0, 2.0, 3.0):
            base = estimate_accumulated_volatility(brownian_path, 100, p)
            scaled = estimate_accumulated_volatility(7.5 * brownian_path, 100, p)
            assert_allclose(scaled, base, rtol=1e-10)

    def test_length_and_monotone(self, brownian_path):
        """The estimate has one value per increment and never decreases."""
        result = estimate_accumulated_volatility(brownian_path, 100)

        assert result.shape == (len(brownian_path) - 1,)
        assert np.all(result >= 0)
        assert np.all(np.diff(result) >= 0)

    def test_kernel_is_ignored(self, brownian_path):
        """The kernel selector does not change the non-parametric estimate."""
        gamma = estimate_accumulated_volatility(brownian_path, 100, kernel="gamma")
        power = estimate_accumulated_volatility(brownian_path, 100, kernel="power")
        assert_array_equal(gamma, power)

    def test_selector_case_insensitive(self, small_path):
        """Selectors are parsed case-insensitively."""
        upper = estimate_accumulated_volatility(small_path, 1, method="NonParametric", kernel="GAMMA")
        lower = estimate_accumulated_volatility(small_path, 1)
        assert_array_equal(upper, lower)

    def test_constant_path(self, constant_path):
        """A constant path has no scale factor."""
        with pytest.raises(EstimationError) as excinfo:
            estimate_accumulated_volatility(constant_path, 10)
        assert excinfo.value.stage == STAGE_FITTING

    @given(st.lists(st.floats(min_value=-100, max_value=100), min_size=3, max_size=60),
           st.sampled_from([1.0, 1.5, 2.0, 3.0]))
    @settings(max_examples=50, deadline=None,
              suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_monotone_property(self, values, p):
        """The accumulated estimate is non-decreasing for any valid path."""
        y = np.asarray(values)
        assume(np.ptp(y) > 1e-3)
        result = estimate_accumulated_volatility(y, 10, p)

        assert len(result) == len(y) - 1
        assert np.all(np.diff(result) >= 0)


class TestChangeOfFrequencyRoute:
    """Tests for the change-of-frequency route."""

    def test_brownian_motion(self, brownian_path):
        """For Brownian motion the estimate grows like time."""
        result = estimate_accumulated_volatility(brownian_path, 100, 2, "cof", "gamma")

        assert np.all(np.diff(result) >= 0)
        assert_allclose(result[-1], 100.0, rtol=0.3)

    def test_power_kernel_rejected(self, brownian_path):
        """The change-of-frequency route only exists for the gamma kernel."""
        with pytest.raises(ConfigurationError):
            estimate_accumulated_volatility(brownian_path, 100, 2, "cof", "power")

    def test_alpha_outside_domain(self):
        """A fitted alpha outside (-1/2, 1/2) is reported at formula evaluation."""
        y = np.cumsum(np.tile([1.0, -0.5], 50))
        with pytest.raises(EstimationError) as excinfo:
            estimate_accumulated_volatility(y, 10, 2, "cof", "gamma")

        assert excinfo.value.stage == STAGE_FORMULA
        assert "[formula evaluation]" in str(excinfo.value)

    def test_constant_path(self, constant_path):
        """A constant path has no change-of-frequency ratio."""
        with pytest.raises(EstimationError) as excinfo:
            estimate_accumulated_volatility(constant_path, 10, 2, "cof")
        assert excinfo.value.stage == STAGE_FITTING


class TestAutocorrelationRoute:
    """Tests for the autocorrelation-fit routes."""

    @pytest.mark.slow
    def test_gamma_kernel(self, bss_path):
        """The gamma-kernel fit produces a valid accumulated estimate."""
        result = estimate_accumulated_volatility(bss_path, 100, 2, "acf", "gamma")

        assert result.shape == (len(bss_path) - 1,)
        assert np.all(np.isfinite(result))
        assert np.all(result >= 0)
        assert np.all(np.diff(result) >= 0)

    @pytest.mark.slow
    def test_power_kernel(self, bss_path):
        """The power-kernel fit works with a configured lag count."""
        set_config("estimation", "acf_num_lags", 10)
        result = estimate_accumulated_volatility(bss_path[:2001], 100, 2, "acf", "power")

        assert result.shape == (2000,)
        assert np.all(np.isfinite(result))
        assert np.all(np.diff(result) >= 0)

    @pytest.mark.slow
    def test_estimator_records_fit(self, bss_path):
        """The estimator result carries the fitted kernel parameters."""
        config = AccumulatedVolatilityConfig(p=2, method="acf", kernel="gamma", num_lags=20)
        result = AccumulatedVolatilityEstimator(config).fit(bss_path, 100)

        assert result.method == "acf"
        assert result.kernel == "gamma"
        assert set(result.kernel_parameters) == {"alpha", "lambda"}
        assert -0.5 < result.kernel_parameters["alpha"] < 0.5
        assert result.kernel_parameters["lambda"] > 0
        assert result.tau > 0


class TestSelectorsAndInputs:
    """Tests for selector and input validation."""

    @pytest.mark.parametrize("method,kernel", [
        ("bogus", "gamma"),
        ("acf", "bogus"),
        ("cof", "power"),
    ])
    def test_invalid_selectors(self, brownian_path, method, kernel):
        """Unknown selectors and the (cof, power) pair are configuration errors."""
        with pytest.raises(ConfigurationError):
            estimate_accumulated_volatility(brownian_path, 100, 2, method, kernel)

    def test_enum_selectors(self, small_path):
        """Enum members are accepted as selectors."""
        result = estimate_accumulated_volatility(small_path, 1, 2, Method.NONPARAMETRIC, Kernel.POWER)
        assert len(result) == 3

    @pytest.mark.parametrize("y", [
        [1.0],
        [],
        [0.0, np.nan, 1.0],
        [0.0, np.inf, 1.0],
        np.ones((3, 2)),
    ])
    def test_invalid_path(self, y):
        """Short, non-finite or multi-dimensional paths are data errors."""
        with pytest.raises(DataError):
            estimate_accumulated_volatility(y, 10)

    @pytest.mark.parametrize("n", [0, -5, 2.5, True])
    def test_invalid_sampling_rate(self, small_path, n):
        """n must be a positive integer."""
        with pytest.raises(ParameterError):
            estimate_accumulated_volatility(small_path, n)

    @pytest.mark.parametrize("p", [0, -2, np.nan])
    def test_invalid_power(self, small_path, p):
        """p must be positive and finite."""
        with pytest.raises(ParameterError):
            estimate_accumulated_volatility(small_path, 1, p)

    def test_nan_index_reported(self):
        """The first non-finite observation is located in the error."""
        with pytest.raises(DataError) as excinfo:
            estimate_accumulated_volatility([0.0, 1.0, np.nan, 2.0], 10)
        assert excinfo.value.index == 2

    def test_overflow_is_accumulation_error(self):
        """Overflow in the running sum is reported at the accumulation stage."""
        with pytest.raises(EstimationError) as excinfo:
            estimate_accumulated_volatility([0.0, 1e10], 1, 100)

        assert excinfo.value.stage == STAGE_ACCUMULATION
        assert str(excinfo.value).startswith("[accumulation]")


class TestEstimatorClass:
    """Tests for AccumulatedVolatilityEstimator and its result."""

    def test_fit_result(self, brownian_path):
        """fit returns a populated result and marks the estimator fitted."""
        estimator = AccumulatedVolatilityEstimator()
        assert not estimator.fitted

        result = estimator.fit(brownian_path, 100)

        assert isinstance(result, AccumulatedVolatilityResult)
        assert estimator.fitted
        assert estimator.results is result
        assert result.n == 100
        assert result.p == 2.0
        assert result.method == "nonparametric"
        assert result.moment_constant == pytest.approx(1.0)
        assert result.kernel_parameters is None

    def test_defaults_follow_configuration(self):
        """Unset configuration fields read the estimation section."""
        set_config("estimation", "default_power", 1.0)
        config = AccumulatedVolatilityConfig()

        assert config.p == 1.0
        assert config.method is Method.NONPARAMETRIC
        assert config.kernel is Kernel.GAMMA

    def test_invalid_config(self):
        """Configuration objects validate on construction."""
        with pytest.raises(ConfigurationError):
            AccumulatedVolatilityConfig(method="cof", kernel="power")
        with pytest.raises(ParameterError):
            AccumulatedVolatilityConfig(p=-1)

    def test_series_round_trip(self, series_path):
        """A Series path yields a Series estimate on index[1:]."""
        result = estimate_accumulated_volatility(series_path, 100)

        assert isinstance(result, pd.Series)
        assert result.index.equals(series_path.index[1:])
        assert_allclose(result.values, estimate_accumulated_volatility(series_path.values, 100))

    def test_dataframe_and_summary(self, series_path):
        """The result exports a DataFrame and a readable summary."""
        result = AccumulatedVolatilityEstimator().fit(series_path, 100)
        frame = result.to_dataframe()

        assert len(frame) == len(series_path) - 1
        assert frame.index.equals(series_path.index[1:])
        assert "nonparametric" in result.summary()
