# aad_rules/ops/__init__.py

# Importing this package registers the rules in the default registry
from . import arithmetic
from . import transcendental
from . import special
from ..core.registry import DEFAULT_REGISTRY

# Convenience re-exports for functions defined here rather than in math/numpy
from .transcendental import sincos
from .special import norm_cdf, norm_pdf


def register_all(registry):
    """Register every rule of this package in `registry`."""
    arithmetic.register(registry)
    transcendental.register(registry)
    special.register(registry)


register_all(DEFAULT_REGISTRY)

__all__ = [
    "register_all",
    "sincos",
    "norm_cdf", "norm_pdf",
]
