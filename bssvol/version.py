# bssvol/version.py
"""
bssvol version information.

bssvol follows semantic versioning (MAJOR.MINOR.PATCH).
"""

from typing import Dict, Tuple

VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0

__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

__title__ = "bssvol"
__description__ = "Accumulated volatility estimation for Brownian semistationary processes"
__license__ = "MIT"

__python_requires__ = ">=3.10"

__dependencies__ = {
    "numpy": ">=1.26.0",
    "scipy": ">=1.11.3",
    "pandas": ">=2.1.1",
    "numba": ">=0.58.0",
    "statsmodels": ">=0.14.0",
}

VERSION_HISTORY = [
    {
        "version": "1.0.0",
        "changes": [
            "Accumulated volatility estimator with change-of-frequency, ACF-fit and non-parametric scale factors",
            "Pointwise confidence intervals with pinned and generic entry points",
            "Gamma and power kernel families with least-squares ACF fits",
            "Exponentiated Ornstein-Uhlenbeck and hybrid-scheme gamma-kernel BSS simulators",
        ],
    },
]


def get_version_info() -> Tuple[int, int, int]:
    """Return the version as a (major, minor, patch) tuple."""
    return (VERSION_MAJOR, VERSION_MINOR, VERSION_PATCH)


def get_dependencies() -> Dict[str, str]:
    return dict(__dependencies__)
