# tests/test_config.py

"""
Tests for the configuration manager: defaults, runtime changes, the user
configuration file, environment overrides and the estimators that read them.
"""

import json

import numpy as np
import pytest
from numpy.testing import assert_allclose

from bssvol.core.config import (
    BSSConfig, get_config, get_config_manager, get_estimation_config,
    reset_config, save_config, set_config
)
from bssvol.core.exceptions import ConfigurationError
from bssvol.models.volatility import estimate_k


class TestDefaults:
    """Tests for the built-in defaults."""

    def test_estimation_defaults(self):
        """The estimation section carries the documented defaults."""
        estimation = get_estimation_config()

        assert estimation.default_method == "nonparametric"
        assert estimation.default_kernel == "gamma"
        assert estimation.default_power == 2.0
        assert estimation.acf_num_lags == 0
        assert estimation.k_max_lag == 50
        assert estimation.confidence_level == 0.95
        assert estimation.pin_ci_to_nonparametric is True

    def test_other_sections(self):
        """Numerical, simulation and core defaults."""
        assert get_config("numerical", "optimization_method") == "L-BFGS-B"
        assert get_config("numerical", "quad_limit") == 200
        assert get_config("simulation", "hybrid_kappa") == 3
        assert get_config("core", "random_seed") is None

    def test_missing_option_default(self):
        """Unknown options return the supplied default."""
        assert get_config("estimation", "no_such_option", "fallback") == "fallback"
        assert get_config("no_such_section", "k_max_lag") is None

    def test_full_config(self):
        """The full configuration object has one attribute per section."""
        config = get_config_manager().get_full_config()
        assert isinstance(config, BSSConfig)
        assert get_config_manager().get_sections() == [
            "core", "numerical", "estimation", "simulation", "logging"
        ]


class TestRuntimeChanges:
    """Tests for set_config and reset_config."""

    def test_set_and_get(self):
        """Values are converted to the option's type."""
        set_config("estimation", "k_max_lag", "12")
        set_config("estimation", "confidence_level", 0.9)
        set_config("estimation", "pin_ci_to_nonparametric", "false")

        assert get_config("estimation", "k_max_lag") == 12
        assert get_config("estimation", "confidence_level") == 0.9
        assert get_config("estimation", "pin_ci_to_nonparametric") is False

    def test_modified_options(self):
        """Runtime changes are tracked by key."""
        set_config("simulation", "num_past", 100)
        assert get_config_manager().get_modified_options() == {"simulation.num_past": 100}

    def test_reset_option_and_section(self):
        """Options and sections can be restored to their defaults."""
        set_config("estimation", "k_max_lag", 5)
        set_config("estimation", "acf_num_lags", 7)

        reset_config("estimation", "k_max_lag")
        assert get_config("estimation", "k_max_lag") == 50
        assert get_config("estimation", "acf_num_lags") == 7

        reset_config("estimation")
        assert get_config("estimation", "acf_num_lags") == 0

    def test_reset_all(self):
        """reset_config() restores every section."""
        set_config("numerical", "max_iterations", 10)
        reset_config()
        assert get_config("numerical", "max_iterations") == 500

    @pytest.mark.parametrize("section,option", [
        ("no_such_section", "k_max_lag"),
        ("estimation", "no_such_option"),
    ])
    def test_unknown_keys(self, section, option):
        """Unknown sections and options are configuration errors."""
        with pytest.raises(ConfigurationError):
            set_config(section, option, 1)

    def test_unconvertible_value(self):
        """Values that cannot be converted are configuration errors."""
        with pytest.raises(ConfigurationError):
            set_config("estimation", "k_max_lag", "many")

    def test_reset_unknown_section(self):
        """Resetting an unknown section is a configuration error."""
        with pytest.raises(ConfigurationError):
            reset_config("no_such_section")

    def test_estimator_reads_configuration(self, brownian_path):
        """k_max_lag = 0 removes the correlation terms from K_p."""
        set_config("estimation", "k_max_lag", 0)
        assert_allclose(estimate_k(brownian_path, 2), np.sqrt(2), rtol=1e-12)


class TestUserFileAndEnvironment:
    """Tests for the user configuration file and environment overrides."""

    def test_config_file_location(self, isolated_config):
        """BSSVOL_CONFIG_DIR selects the configuration directory."""
        assert get_config_manager().get_config_file() == isolated_config / "bssvol_config.json"

    def test_no_directory_created_on_read(self, isolated_config):
        """Reading the configuration never writes to the filesystem."""
        get_config("estimation", "k_max_lag")
        assert not isolated_config.exists()

    def test_save_and_reload(self, isolated_config):
        """save_config writes JSON that is read back after a reset."""
        set_config("estimation", "k_max_lag", 9)
        save_config()

        config_file = isolated_config / "bssvol_config.json"
        with open(config_file) as f:
            saved = json.load(f)
        assert saved["estimation"]["k_max_lag"] == 9

        reset_config()
        assert get_config("estimation", "k_max_lag") == 9

    def test_user_file(self, isolated_config):
        """Options in the user file override the defaults."""
        isolated_config.mkdir(parents=True)
        with open(isolated_config / "bssvol_config.json", "w") as f:
            json.dump({"estimation": {"acf_num_lags": 25}, "bogus": {"x": 1}}, f)

        reset_config()
        assert get_config("estimation", "acf_num_lags") == 25

    def test_malformed_user_file(self, isolated_config):
        """A malformed user file is ignored."""
        isolated_config.mkdir(parents=True)
        (isolated_config / "bssvol_config.json").write_text("{not json")

        reset_config()
        assert get_config("estimation", "k_max_lag") == 50

    def test_environment_overrides(self, monkeypatch):
        """BSSVOL_<SECTION>_<OPTION> variables override the defaults."""
        monkeypatch.setenv("BSSVOL_ESTIMATION_K_MAX_LAG", "7")
        monkeypatch.setenv("BSSVOL_CORE_RANDOM_SEED", "42")
        monkeypatch.setenv("BSSVOL_ESTIMATION_PIN_CI_TO_NONPARAMETRIC", "no")
        reset_config()

        assert get_config("estimation", "k_max_lag") == 7
        assert get_config("core", "random_seed") == 42
        assert get_config("estimation", "pin_ci_to_nonparametric") is False

    def test_environment_beats_file(self, isolated_config, monkeypatch):
        """Environment overrides are applied after the user file."""
        isolated_config.mkdir(parents=True)
        with open(isolated_config / "bssvol_config.json", "w") as f:
            json.dump({"estimation": {"k_max_lag": 3}}, f)
        monkeypatch.setenv("BSSVOL_ESTIMATION_K_MAX_LAG", "4")

        reset_config()
        assert get_config("estimation", "k_max_lag") == 4

    def test_invalid_values_repaired(self, monkeypatch):
        """Out-of-range values fall back to their defaults."""
        monkeypatch.setenv("BSSVOL_ESTIMATION_CONFIDENCE_LEVEL", "1.5")
        monkeypatch.setenv("BSSVOL_NUMERICAL_MAX_ITERATIONS", "0")
        reset_config()

        assert get_config("estimation", "confidence_level") == 0.95
        assert get_config("numerical", "max_iterations") == 500
