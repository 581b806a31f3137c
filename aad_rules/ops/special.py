# aad_rules/ops/special.py
import math
from numbers import Real

import numpy as np
from scipy import special

from ..core.scalar import scalar_rule

SQRT_TWO_PI = np.sqrt(2.0 * np.pi)
TWO_OVER_SQRT_PI = 2.0 / np.sqrt(np.pi)


def norm_pdf(x):
    return np.exp(-0.5 * x * x) / SQRT_TWO_PI


def norm_cdf(x):
    """Standard normal CDF N(x); dN/dx = phi(x)."""
    return special.ndtr(x)


def register(registry):
    # d/dx erf(x) = (2/√π) * e^(-x²)
    scalar_rule(math.erf, Real,
                partials=lambda om, x: TWO_OVER_SQRT_PI * math.exp(-x * x), registry=registry)
    for pattern in (Real, np.ndarray):
        scalar_rule(special.erf, pattern,
                    partials=lambda om, x: TWO_OVER_SQRT_PI * np.exp(-x * x), registry=registry)
        scalar_rule(norm_cdf, pattern, partials=lambda om, x: norm_pdf(x), registry=registry)
