# aad_rules/fd.py
"""
Central finite differences packaged as an AD backend.

No rules are needed: the executors only call `f`. They are used as the
fallback strategy when no rule exists, as a reference when checking rules, and
as the example backend for `frule_via_ad` / `rrule_via_ad`.

Formulas (h = step * max(1, |x|_inf)):
    forward : ΔΩ ≈ [f(x + h·Δx) - f(x - h·Δx)] / (2h)
    reverse : x̄ᵢ ≈ Σ Ω̄ · [f(x + h·eᵢ) - f(x - h·eᵢ)] / (2h)    one pair per component

Arguments that are not real numbers or real arrays are held fixed; their
cotangent is NO_TANGENT. The callee itself is never perturbed.
"""
from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Any

import numpy as np

from .core.config import RuleConfig
from .core.differentials import NO_TANGENT, ZERO_TANGENT, Tangent, is_structural_zero
from .log import get_logger

logger = get_logger(__name__)


def is_differentiable_value(x) -> bool:
    """Real scalars (bool excluded) and real-valued numpy arrays."""
    if isinstance(x, (bool, np.bool_)):
        return False
    if isinstance(x, numbers.Real):
        return True
    return isinstance(x, np.ndarray) and (
        np.issubdtype(x.dtype, np.integer) or np.issubdtype(x.dtype, np.floating)
    )


def _magnitude(x) -> float:
    if np.size(x) == 0:
        return 0.0
    return float(np.max(np.abs(x)))


def _difference(a, b, h):
    if isinstance(a, tuple):
        return tuple(_difference(ai, bi, h) for ai, bi in zip(a, b))
    return (a - b) / (2.0 * h)


def _inner(cotangent, dy) -> float:
    """<Ω̄, dΩ> summed over outputs and array components."""
    if isinstance(dy, tuple):
        return sum(_inner(c, d) for c, d in zip(cotangent, dy) if not is_structural_zero(c))
    return float(np.sum(np.asarray(cotangent) * np.asarray(dy)))


@dataclass(frozen=True)
class FiniteDifferences:
    """Central-difference executors with relative step `step`."""
    step: float = 1e-6

    def __post_init__(self):
        if not self.step > 0:
            raise ValueError(f"finite-difference step must be positive, got {self.step!r}")

    def frule(self, bundle, f, *args, **kwargs):
        omega = f(*args, **kwargs)
        tangents = bundle[1:]
        active = [
            i for i, (x, dx) in enumerate(zip(args, tangents))
            if is_differentiable_value(x) and not is_structural_zero(dx)
        ]
        if not active:
            return omega, ZERO_TANGENT

        h = self.step * max([1.0] + [_magnitude(args[i]) for i in active])
        plus, minus = list(args), list(args)
        for i in active:
            plus[i] = args[i] + h * tangents[i]
            minus[i] = args[i] - h * tangents[i]
        d_omega = _difference(f(*plus, **kwargs), f(*minus, **kwargs), h)
        if isinstance(omega, tuple):
            d_omega = Tangent(tuple, *d_omega)
        return omega, d_omega

    def rrule(self, f, *args, **kwargs):
        omega = f(*args, **kwargs)

        def fd_pullback(d_omega):
            if is_structural_zero(d_omega):
                return (NO_TANGENT,) + tuple(
                    ZERO_TANGENT if is_differentiable_value(x) else NO_TANGENT for x in args
                )
            grads = []
            for i, x in enumerate(args):
                if is_differentiable_value(x):
                    grads.append(self._gradient(f, args, kwargs, i, d_omega))
                else:
                    grads.append(NO_TANGENT)
            return (NO_TANGENT,) + tuple(grads)

        return omega, fd_pullback

    def _gradient(self, f, args, kwargs, i, d_omega):
        x = args[i]
        arr = np.asarray(x, dtype=float)
        h = self.step * max(1.0, _magnitude(arr))
        grad = np.zeros_like(arr)

        def call(bumped):
            value = bumped if isinstance(x, np.ndarray) else float(bumped)
            return f(*args[:i], value, *args[i + 1:], **kwargs)

        for idx in np.ndindex(arr.shape):
            plus = arr.copy()
            plus[idx] += h
            minus = arr.copy()
            minus[idx] -= h
            grad[idx] = _inner(d_omega, _difference(call(plus), call(minus), h))

        logger.debug("fd gradient for argument %d: %d evaluations", i, 2 * max(arr.size, 1))
        if isinstance(x, np.ndarray):
            return grad
        return float(grad)


_default = FiniteDifferences()
fd_frule = _default.frule
fd_rrule = _default.rrule


@dataclass(frozen=True)
class FiniteDifferenceConfig(RuleConfig):
    """Configuration whose forward and reverse executors are finite differences."""
    forward: Any = fd_frule
    reverse: Any = fd_rrule

    @classmethod
    def with_step(cls, step: float, **kwargs) -> "FiniteDifferenceConfig":
        fd = FiniteDifferences(step)
        return cls(forward=fd.frule, reverse=fd.rrule, **kwargs)
