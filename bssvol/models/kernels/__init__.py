"""
Parametric kernel families for Brownian semistationary processes.

Each family provides the kernel function, the model autocorrelation, the
scale factor tau_n and a least-squares fit of the autocorrelation to an
observed path.
"""

import logging

logger = logging.getLogger("bssvol.models.kernels")

from .gamma import (
    gamma_kernel,
    gamma_kernel_l2_norm,
    gamma_kernel_correlation,
    gamma_kernel_tau,
    gamma_kernel_tau_asymptotic,
    fit_gamma_kernel,
    gamma_kernel_bss_fit,
)
from .power import (
    power_kernel,
    power_kernel_l2_norm,
    power_kernel_correlation,
    power_kernel_tau,
    fit_power_kernel,
    power_kernel_bss_fit,
)

__all__ = [
    'gamma_kernel', 'gamma_kernel_l2_norm', 'gamma_kernel_correlation',
    'gamma_kernel_tau', 'gamma_kernel_tau_asymptotic', 'fit_gamma_kernel',
    'gamma_kernel_bss_fit',
    'power_kernel', 'power_kernel_l2_norm', 'power_kernel_correlation',
    'power_kernel_tau', 'fit_power_kernel', 'power_kernel_bss_fit',
]
