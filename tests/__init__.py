"""
bssvol test suite

Tests for the accumulated volatility estimator, its confidence interval, the
kernel families and fits, the scale factors, the path simulators and the
configuration layer. Long-running fits and simulations carry the ``slow``
marker and can be deselected with ``-m "not slow"``.
"""
