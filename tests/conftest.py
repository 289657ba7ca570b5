# tests/conftest.py

'''
Pytest configuration and fixtures for the bssvol test suite.

Provides seeded generators, simulated Brownian semistationary paths and
simple deterministic paths, and isolates every test from the user's
configuration file and environment overrides.
'''

import numpy as np
import pandas as pd
import pytest

from bssvol.core.config import reset_config
from bssvol.models.simulation import exponentiated_ornstein_uhlenbeck, gamma_kernel_bss


# ---- Configuration isolation ----

@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the configuration manager at an empty directory for each test."""
    monkeypatch.setenv("BSSVOL_CONFIG_DIR", str(tmp_path / "bssvol_config"))
    reset_config()
    yield tmp_path / "bssvol_config"
    reset_config()


# ---- Basic Data Generation Fixtures ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture(scope="session")
def simulation_settings() -> dict:
    """Settings of the simulated gamma-kernel BSS path."""
    return {
        "N": 10000,
        "n": 100,
        "T": 100,
        "theta": 0.5,
        "beta": 0.125,
        "kappa": 3,
        "alpha": -0.2,
        "lam": 1.0,
    }


@pytest.fixture(scope="session")
def bss_simulation(simulation_settings):
    """Gamma-kernel BSS path of length 10001 driven by exponentiated OU volatility."""
    s = simulation_settings
    generator = np.random.default_rng(20240917)
    vol = exponentiated_ornstein_uhlenbeck(
        s["N"], s["n"], s["T"], s["theta"], s["beta"], random_state=generator
    )
    return gamma_kernel_bss(
        s["N"], s["n"], s["T"], s["kappa"], s["alpha"], s["lam"],
        sigma=vol, random_state=generator
    )


@pytest.fixture(scope="session")
def bss_path(bss_simulation) -> np.ndarray:
    return bss_simulation.bss


@pytest.fixture
def brownian_path(rng) -> np.ndarray:
    """Standard Brownian motion observed at n = 100 over T = 100."""
    n = 100
    increments = rng.standard_normal(10000) / np.sqrt(n)
    return np.concatenate([[0.0], np.cumsum(increments)])


@pytest.fixture
def small_path() -> np.ndarray:
    """Short deterministic path with hand-computable estimates."""
    return np.array([0.0, 1.0, 0.0, 2.0])


@pytest.fixture
def constant_path() -> np.ndarray:
    return np.full(50, 3.0)


@pytest.fixture
def series_path(brownian_path) -> pd.Series:
    """Brownian path as a time-indexed pandas Series."""
    index = pd.date_range("2024-01-01", periods=len(brownian_path), freq="min")
    return pd.Series(brownian_path, index=index, name="Y")
