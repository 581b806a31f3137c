# aad_rules/core/rules.py
"""
Module-level entry points, bound to the active registry at call time.

    frule([config,] (Δf, Δx...), f, x...)  -> (Ω, ΔΩ)        or None
    rrule([config,] f, x...)               -> (Ω, pullback)  or None
    frule_via_ad(config, (Δf, Δx...), f, x...)
    rrule_via_ad(config, f, x...)

Example
-------
>>> import math
>>> from numbers import Real
>>> from aad_rules import define_rrule, rrule, NO_TANGENT
>>> @define_rrule(math.hypot, Real, Real)
... def _hypot_rrule(f, x, y):
...     h = math.hypot(x, y)
...     def hypot_pullback(dh):
...         return NO_TANGENT, dh * x / h, dh * y / h
...     return h, hypot_pullback
>>> h, back = rrule(math.hypot, 3.0, 4.0)
>>> back(1.0)
(NoTangent(), 0.6, 0.8)
"""
from __future__ import annotations

from . import registry as _registry_mod


def frule(*args, **kwargs):
    """
    frule([config,] (Δf, Δx...), f, x...) -> (Ω, ΔΩ) or None

    Expressing the output of `f(x...)` as Ω, return Ω and its directional
    derivative ΔΩ along the input differentials. Multi-output functions
    return a `Tangent` with one component per output.

    If no rule matches, return None. With a configuration, rules written for
    that configuration are tried first and the configuration-less rules after.
    """
    return _registry_mod.global_registry.frule(*args, **kwargs)


def rrule(*args, **kwargs):
    """
    rrule([config,] f, x...) -> (Ω, pullback) or None

    The pullback maps the output cotangent Ω̄ to (f̄, x̄₁, x̄₂, ...), where f̄
    is the cotangent of the function itself (NO_TANGENT unless it carries
    differentiable state).

    If no rule matches, return None.
    """
    return _registry_mod.global_registry.rrule(*args, **kwargs)


def frule_via_ad(config, bundle, f, *args, **kwargs):
    return _registry_mod.global_registry.frule_via_ad(config, bundle, f, *args, **kwargs)


def rrule_via_ad(config, f, *args, **kwargs):
    return _registry_mod.global_registry.rrule_via_ad(config, f, *args, **kwargs)


def define_frule(callee, *patterns, config=None, replace=False):
    """Decorator: register an frule in the active registry."""
    return _registry_mod.global_registry.register_frule(
        callee, *patterns, config=config, replace=replace)


def define_rrule(callee, *patterns, config=None, replace=False):
    """Decorator: register an rrule in the active registry."""
    return _registry_mod.global_registry.register_rrule(
        callee, *patterns, config=config, replace=replace)
