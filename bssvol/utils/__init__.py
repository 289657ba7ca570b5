"""
bssvol utilities

Empirical autocorrelation helpers shared by the kernel fits and the K_p
constant.
"""

import logging

logger = logging.getLogger("bssvol.utils")

from .correlation import empirical_acf, increments_acf, max_available_lag

__all__ = ['empirical_acf', 'increments_acf', 'max_available_lag']
