# aad_rules/ops/transcendental.py
import math
from numbers import Real

import numpy as np

from ..core.scalar import scalar_rule


def sincos(x):
    """Return (sin x, cos x); elementwise for arrays."""
    if isinstance(x, np.ndarray):
        return np.sin(x), np.cos(x)
    return math.sin(x), math.cos(x)


def register(registry):
    scalar_rule(math.sin, Real, partials=lambda om, x: math.cos(x), registry=registry)
    scalar_rule(math.cos, Real, partials=lambda om, x: -math.sin(x), registry=registry)
    scalar_rule(math.tan, Real, partials=lambda om, x: 1.0 + om * om, registry=registry)
    scalar_rule(math.exp, Real, partials=lambda om, x: om, registry=registry)
    scalar_rule(math.log, Real, partials=lambda om, x: 1.0 / x, registry=registry)
    scalar_rule(math.sqrt, Real, partials=lambda om, x: 0.5 / om, registry=registry)

    for pattern in (Real, np.ndarray):
        scalar_rule(np.sin, pattern, partials=lambda om, x: np.cos(x), registry=registry)
        scalar_rule(np.cos, pattern, partials=lambda om, x: -np.sin(x), registry=registry)
        scalar_rule(np.tan, pattern, partials=lambda om, x: 1.0 + om * om, registry=registry)
        scalar_rule(np.exp, pattern, partials=lambda om, x: om, registry=registry)
        scalar_rule(np.log, pattern, partials=lambda om, x: 1.0 / x, registry=registry)
        scalar_rule(np.sqrt, pattern, partials=lambda om, x: 0.5 / om, registry=registry)
        # two outputs: d(sin x) = cos x, d(cos x) = -sin x
        scalar_rule(sincos, pattern, partials=lambda om, x: (om[1], -om[0]), registry=registry)
