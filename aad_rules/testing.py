# aad_rules/testing.py
"""
Helpers for rule authors: compare a registered rule against finite differences.

    check_frule(math.sin, 0.3)
    check_rrule(math.hypot, 3.0, 4.0)

Both raise AssertionError describing the first mismatch.
"""
from __future__ import annotations

import numpy as np

from .core.differentials import NO_TANGENT, Tangent, is_structural_zero
from .core.registry import current_registry
from .fd import FiniteDifferences, is_differentiable_value


def _name(f) -> str:
    return getattr(f, "__name__", type(f).__name__)


def _ones_like(x):
    if isinstance(x, np.ndarray):
        return np.ones_like(x, dtype=float)
    return 1.0


def _assert_close(actual, desired, what, rtol, atol):
    if isinstance(desired, (tuple, Tangent)) and not is_structural_zero(actual):
        actual_parts, desired_parts = tuple(actual), tuple(desired)
        assert len(actual_parts) == len(desired_parts), (
            f"{what}: expected {len(desired_parts)} components, got {len(actual_parts)}"
        )
        for k, (a, d) in enumerate(zip(actual_parts, desired_parts)):
            _assert_close(a, d, f"{what}[{k}]", rtol, atol)
        return
    if is_structural_zero(actual):
        actual = 0.0
    if is_structural_zero(desired):
        desired = 0.0
    np.testing.assert_allclose(actual, desired, rtol=rtol, atol=atol, err_msg=what)


def check_frule(f, *args, tangents=None, registry=None, fd=None,
                rtol=1e-5, atol=1e-8, **kwargs):
    """
    Check the frule for f(*args): it exists, keeps the primal value, and its
    ΔΩ agrees with central differences. `tangents` defaults to ones.
    """
    reg = registry if registry is not None else current_registry()
    fd = fd if fd is not None else FiniteDifferences()
    if tangents is None:
        tangents = tuple(_ones_like(x) for x in args)
    bundle = (NO_TANGENT,) + tuple(tangents)

    result = reg.frule(bundle, f, *args, **kwargs)
    assert result is not None, f"no frule for {_name(f)}{tuple(type(x).__name__ for x in args)}"
    omega, d_omega = result

    _assert_close(omega, f(*args, **kwargs), f"{_name(f)} primal", rtol, atol)
    _, expected = fd.frule(bundle, f, *args, **kwargs)
    _assert_close(d_omega, expected, f"{_name(f)} tangent", rtol, atol)
    return omega, d_omega


def check_rrule(f, *args, cotangent=None, registry=None, fd=None,
                rtol=1e-5, atol=1e-8, **kwargs):
    """
    Check the rrule for f(*args): it exists, keeps the primal value, its
    pullback returns 1 + len(args) cotangents, and those agree with central
    differences. `cotangent` defaults to ones shaped like the output.
    """
    reg = registry if registry is not None else current_registry()
    fd = fd if fd is not None else FiniteDifferences()

    result = reg.rrule(f, *args, **kwargs)
    assert result is not None, f"no rrule for {_name(f)}{tuple(type(x).__name__ for x in args)}"
    omega, pullback = result
    _assert_close(omega, f(*args, **kwargs), f"{_name(f)} primal", rtol, atol)

    if cotangent is None:
        if isinstance(omega, tuple):
            cotangent = Tangent(tuple, *(_ones_like(o) for o in omega))
        else:
            cotangent = _ones_like(omega)

    grads = pullback(cotangent)
    assert len(grads) == len(args) + 1, (
        f"{_name(f)} pullback returned {len(grads)} cotangents, expected {len(args) + 1}"
    )
    _, fd_pullback = fd.rrule(f, *args, **kwargs)
    expected = fd_pullback(cotangent)
    # slot 0 is the callee; finite differences cannot perturb it
    for i, x in enumerate(args, start=1):
        if not is_differentiable_value(x):
            continue
        _assert_close(grads[i], expected[i], f"{_name(f)} cotangent of argument {i - 1}", rtol, atol)
    return omega, grads
