"""
Path simulators for Brownian semistationary models.

Provides an exponentiated Ornstein-Uhlenbeck volatility process and the
hybrid-scheme simulation of gamma-kernel BSS processes driven by it.
"""

import logging

logger = logging.getLogger("bssvol.models.simulation")

from .ornstein_uhlenbeck import exponentiated_ornstein_uhlenbeck
from .hybrid import gamma_kernel_bss, hybrid_covariance, optimal_discretization_points

__all__ = [
    'exponentiated_ornstein_uhlenbeck',
    'gamma_kernel_bss',
    'hybrid_covariance',
    'optimal_discretization_points',
]
