# aad_rules/ops/arithmetic.py
import math
import operator
from numbers import Real

import numpy as np

from ..core.scalar import scalar_rule


def _pow_partials(om, x, p):
    # ∂/∂p = x^p log x needs x > 0; use 0 outside that domain
    dp = om * math.log(x) if x > 0 else 0.0
    return p * x ** (p - 1), dp


def register(registry):
    scalar_rule(operator.add, Real, Real, partials=lambda om, x, y: (1.0, 1.0), registry=registry)
    scalar_rule(operator.sub, Real, Real, partials=lambda om, x, y: (1.0, -1.0), registry=registry)
    scalar_rule(operator.mul, Real, Real, partials=lambda om, x, y: (y, x), registry=registry)
    scalar_rule(operator.truediv, Real, Real,
                partials=lambda om, x, y: (1.0 / y, -om / y), registry=registry)
    scalar_rule(operator.neg, Real, partials=lambda om, x: -1.0, registry=registry)
    scalar_rule(operator.pow, Real, Real, partials=_pow_partials, registry=registry)

    # hypot: ∂/∂x = x / h, ∂/∂y = y / h
    scalar_rule(math.hypot, Real, Real,
                partials=lambda om, x, y: (x / om, y / om), registry=registry)
    # numpy version for equally-shaped arrays (no broadcasting reduction)
    scalar_rule(np.hypot, np.ndarray, np.ndarray,
                partials=lambda om, x, y: (x / om, y / om), registry=registry)
