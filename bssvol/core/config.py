'''
Configuration management for bssvol.

Settings are resolved in layers:
1. Defaults built into the package (the dataclasses below)
2. A user configuration file (``~/.bssvol/bssvol_config.json``)
3. Environment variables named ``BSSVOL_<SECTION>_<OPTION>``
4. Runtime modifications through ``set_config``

The estimation routines read their defaults (number of autocorrelation lags
used by the kernel fits, truncation lag for the K_p constant, hybrid-scheme
settings) from this manager, so the numerics can be tuned without touching
source code.
'''

import os
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import ConfigurationError
from .types import LogLevel

logger = logging.getLogger("bssvol.core.config")

CONFIG_ENV_PREFIX = "BSSVOL_"
DEFAULT_CONFIG_FILENAME = "bssvol_config.json"
USER_CONFIG_DIR_ENV = "BSSVOL_CONFIG_DIR"


class ConfigSection(Enum):
    """Enumeration of configuration sections."""
    CORE = "core"
    NUMERICAL = "numerical"
    ESTIMATION = "estimation"
    SIMULATION = "simulation"
    LOGGING = "logging"


@dataclass
class CoreConfig:
    """
    Core configuration settings.

    Attributes:
        user_config_dir: Directory for user-specific configuration files
        random_seed: Default seed for the simulators (None for fresh entropy)
    """
    user_config_dir: Path = field(default_factory=lambda: Path.home() / ".bssvol")
    random_seed: Optional[int] = None


@dataclass
class NumericalConfig:
    """
    Numerical configuration settings.

    Attributes:
        optimization_method: scipy.optimize.minimize method for the kernel fits
        optimization_tol: Optimizer convergence tolerance
        max_iterations: Maximum optimizer iterations
        quad_limit: Subinterval limit passed to scipy.integrate.quad
    """
    optimization_method: str = "L-BFGS-B"
    optimization_tol: float = 1e-10
    max_iterations: int = 500
    quad_limit: int = 200


@dataclass
class EstimationConfig:
    """
    Estimation defaults.

    Attributes:
        default_method: Scale-factor method used when none is given
        default_kernel: Kernel family used when none is given
        default_power: Power p used when none is given
        acf_num_lags: Autocorrelation lags matched by the kernel fits (0 uses n)
        k_max_lag: Truncation lag for the K_p long-run variance sum
        confidence_level: Default two-sided confidence level
        pin_ci_to_nonparametric: Whether the interval estimator pins both
            internal estimates to the non-parametric method
    """
    default_method: str = "nonparametric"
    default_kernel: str = "gamma"
    default_power: float = 2.0
    acf_num_lags: int = 0
    k_max_lag: int = 50
    confidence_level: float = 0.95
    pin_ci_to_nonparametric: bool = True


@dataclass
class SimulationConfig:
    """
    Simulation defaults for the hybrid scheme.

    Attributes:
        hybrid_kappa: Number of near-origin cells simulated exactly
        num_past: Number of pre-sample cells in the Riemann sum (0 uses N)
    """
    hybrid_kappa: int = 3
    num_past: int = 0


@dataclass
class LoggingConfig:
    """
    Logging configuration settings.

    Attributes:
        log_level: Default logging level
        log_file: Path to log file (None for no file logging)
        log_format: Format string for log messages
        log_date_format: Format string for log message timestamps
        console_logging: Whether to log to console
        file_logging: Whether to log to file
    """
    log_level: LogLevel = "INFO"
    log_file: Optional[Path] = None
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    console_logging: bool = True
    file_logging: bool = False


@dataclass
class BSSConfig:
    """
    Complete configuration, one attribute per section.
    """
    core: CoreConfig = field(default_factory=CoreConfig)
    numerical: NumericalConfig = field(default_factory=NumericalConfig)
    estimation: EstimationConfig = field(default_factory=EstimationConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigManager:
    """
    Configuration manager.

    Holds the current configuration and applies the user file and environment
    overrides on first use.

    Attributes:
        _config: The current configuration object
        _initialized: Whether the manager has loaded file and env overrides
        _config_file: Path to the user configuration file
    """

    def __init__(self):
        """Initialize the configuration manager with default settings."""
        self._config = BSSConfig()
        self._initialized = False
        self._config_file: Optional[Path] = None
        self._modified_keys = set()

    def initialize(self) -> None:
        """
        Load the user configuration file and environment overrides.

        The user configuration directory is only created when a configuration
        is saved, so importing the package never writes to the filesystem.
        """
        if self._initialized:
            return

        self._resolve_config_file()
        self._load_user_config()
        self._apply_env_overrides()
        self._validate_config()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def _resolve_config_file(self) -> None:
        env_config_dir = os.environ.get(USER_CONFIG_DIR_ENV)
        if env_config_dir:
            self._config.core.user_config_dir = Path(env_config_dir)
        self._config_file = self._config.core.user_config_dir / DEFAULT_CONFIG_FILENAME

    def _load_user_config(self) -> None:
        """Load user configuration from file if it exists."""
        if not self._config_file or not self._config_file.exists():
            logger.debug("No user configuration file found")
            return

        try:
            with open(self._config_file, 'r') as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load user configuration: {e}")
            return

        self._update_from_dict(user_config)
        logger.debug(f"Loaded user configuration from {self._config_file}")

    def _apply_env_overrides(self) -> None:
        """
        Apply ``BSSVOL_<SECTION>_<OPTION>`` environment variables.
        """
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX):
                continue

            key = env_var[len(CONFIG_ENV_PREFIX):]
            parts = key.lower().split('_', 1)

            if len(parts) != 2:
                continue

            section, option = parts

            try:
                ConfigSection(section)
            except ValueError:
                continue

            section_obj = getattr(self._config, section)
            if not hasattr(section_obj, option):
                continue

            try:
                typed_value = self._coerce(getattr(section_obj, option), value)
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to apply environment override {env_var}: {e}")
                continue

            setattr(section_obj, option, typed_value)
            logger.debug(f"Applied environment override: {env_var}={value}")

    @staticmethod
    def _coerce(current_value: Any, value: Any) -> Any:
        """Convert ``value`` to the type of ``current_value``."""
        if isinstance(current_value, bool):
            if isinstance(value, str):
                return value.lower() in ('true', 'yes', '1', 'y')
            return bool(value)
        if isinstance(current_value, Path):
            return Path(value)
        if current_value is None:
            if not isinstance(value, str):
                return value
            if os.sep in value:
                return Path(value)
            for cast in (int, float):
                try:
                    return cast(value)
                except ValueError:
                    continue
            return value
        if isinstance(current_value, int):
            return int(value)
        if isinstance(current_value, float):
            return float(value)
        return type(current_value)(value)

    def _validate_config(self) -> None:
        """
        Validate option values, resetting invalid ones to their defaults.
        """
        numerical = self._config.numerical
        if numerical.max_iterations <= 0:
            logger.warning(f"Invalid max_iterations: {numerical.max_iterations}, using 500")
            numerical.max_iterations = 500
        if numerical.optimization_tol <= 0:
            logger.warning(f"Invalid optimization_tol: {numerical.optimization_tol}, using 1e-10")
            numerical.optimization_tol = 1e-10
        if numerical.quad_limit <= 0:
            logger.warning(f"Invalid quad_limit: {numerical.quad_limit}, using 200")
            numerical.quad_limit = 200

        estimation = self._config.estimation
        if estimation.acf_num_lags < 0:
            logger.warning(f"Invalid acf_num_lags: {estimation.acf_num_lags}, using 0")
            estimation.acf_num_lags = 0
        if estimation.k_max_lag < 0:
            logger.warning(f"Invalid k_max_lag: {estimation.k_max_lag}, using 50")
            estimation.k_max_lag = 50
        if not 0.0 < estimation.confidence_level < 1.0:
            logger.warning(f"Invalid confidence_level: {estimation.confidence_level}, using 0.95")
            estimation.confidence_level = 0.95
        if estimation.default_power <= 0:
            logger.warning(f"Invalid default_power: {estimation.default_power}, using 2.0")
            estimation.default_power = 2.0

        simulation = self._config.simulation
        if simulation.hybrid_kappa < 0:
            logger.warning(f"Invalid hybrid_kappa: {simulation.hybrid_kappa}, using 3")
            simulation.hybrid_kappa = 3
        if simulation.num_past < 0:
            logger.warning(f"Invalid num_past: {simulation.num_past}, using 0")
            simulation.num_past = 0

        if self._config.logging.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            logger.warning(f"Invalid log_level: {self._config.logging.log_level}, using INFO")
            self._config.logging.log_level = "INFO"

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """
        Update the configuration from a nested ``{section: {option: value}}`` dict.
        """
        for section_name, section_dict in config_dict.items():
            if not hasattr(self._config, section_name):
                logger.warning(f"Unknown configuration section: {section_name}")
                continue

            section = getattr(self._config, section_name)

            for option_name, option_value in section_dict.items():
                if not hasattr(section, option_name):
                    logger.warning(f"Unknown configuration option: {section_name}.{option_name}")
                    continue

                if isinstance(getattr(section, option_name), Path) and isinstance(option_value, str):
                    option_value = Path(option_value)

                setattr(section, option_name, option_value)

    def save_user_config(self) -> None:
        """
        Save the current configuration to the user configuration file.
        """
        self.initialize()

        self._config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_file, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.debug(f"Saved user configuration to {self._config_file}")

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the configuration to a JSON-serializable dictionary.
        """
        result = {}

        for section in ConfigSection:
            section_obj = getattr(self._config, section.value)
            section_dict = {}
            for field_name in section_obj.__dataclass_fields__:
                value = getattr(section_obj, field_name)
                if isinstance(value, Path):
                    value = str(value)
                section_dict[field_name] = value
            result[section.value] = section_dict

        return result

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            default: Default value if the option is not found

        Returns:
            The configuration value, or the default if not found
        """
        self.initialize()

        section_obj = getattr(self._config, section, None)
        if section_obj is None or not hasattr(section_obj, option):
            return default

        return getattr(section_obj, option)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            value: The value to set

        Raises:
            ConfigurationError: If the section or option is not found, or the
                value cannot be converted to the option's type
        """
        self.initialize()

        if not self.has_section(section):
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=f"{section}.{option}",
                value=value,
                valid_options=self.get_sections(),
                issue="Section not found"
            )

        section_obj = getattr(self._config, section)

        if not hasattr(section_obj, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                valid_options=self.get_options(section),
                issue="Option not found"
            )

        try:
            typed_value = self._coerce(getattr(section_obj, option), value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to set configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue=str(e)
            ) from e

        setattr(section_obj, option, typed_value)
        self._modified_keys.add(f"{section}.{option}")
        logger.debug(f"Set configuration option: {section}.{option}={value}")

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        """
        Reset configuration to default values.

        Args:
            section: The configuration section to reset, or None to reset all
            option: The configuration option to reset, or None to reset the entire section

        Raises:
            ConfigurationError: If the section or option is not found
        """
        if section is None:
            self._config = BSSConfig()
            self._modified_keys.clear()
            self._initialized = False
            logger.debug("Reset all configuration to defaults")
            return

        if not self.has_section(section):
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )

        default_section = getattr(BSSConfig(), section)

        if option is None:
            setattr(self._config, section, default_section)
            self._modified_keys = {k for k in self._modified_keys if not k.startswith(f"{section}.")}
            logger.debug(f"Reset configuration section {section} to defaults")
            return

        if not hasattr(default_section, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                issue="Option not found"
            )

        setattr(getattr(self._config, section), option, getattr(default_section, option))
        self._modified_keys.discard(f"{section}.{option}")
        logger.debug(f"Reset configuration option {section}.{option} to default")

    def get_modified_options(self) -> Dict[str, Any]:
        """Return the options changed at runtime, keyed by ``section.option``."""
        return {
            key: self.get(*key.split('.', 1))
            for key in sorted(self._modified_keys)
        }

    def has_section(self, section: str) -> bool:
        return section in self.get_sections()

    def get_sections(self) -> List[str]:
        return [s.value for s in ConfigSection]

    def get_options(self, section: str) -> List[str]:
        if not self.has_section(section):
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )
        return list(getattr(self._config, section).__dataclass_fields__)

    def get_config_file(self) -> Optional[Path]:
        self.initialize()
        return self._config_file

    def get_full_config(self) -> BSSConfig:
        self.initialize()
        return self._config


_config_manager = ConfigManager()


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        default: Default value if the option is not found

    Returns:
        The configuration value, or the default if not found
    """
    return _config_manager.get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """
    Set a configuration value at runtime.

    Raises:
        ConfigurationError: If the section or option is not found
    """
    _config_manager.set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    """
    Reset configuration to default values.

    Raises:
        ConfigurationError: If the section or option is not found
    """
    _config_manager.reset(section, option)


def save_config() -> None:
    """Persist the current configuration to the user configuration file."""
    _config_manager.save_user_config()


def get_config_manager() -> ConfigManager:
    """Return the process-wide configuration manager."""
    return _config_manager


def get_estimation_config() -> EstimationConfig:
    return _config_manager.get_full_config().estimation


def get_numerical_config() -> NumericalConfig:
    return _config_manager.get_full_config().numerical


def get_simulation_config() -> SimulationConfig:
    return _config_manager.get_full_config().simulation


def get_logging_config() -> LoggingConfig:
    return _config_manager.get_full_config().logging
