"""
bssvol models

- kernels: gamma and power kernel families
- volatility: accumulated volatility estimation and confidence intervals
- simulation: volatility and BSS path simulators
"""

import logging

logger = logging.getLogger("bssvol.models")

from . import kernels
from . import volatility
from . import simulation

__all__ = ['kernels', 'volatility', 'simulation']
