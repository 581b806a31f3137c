# aad_rules/core/scalar.py
"""
Define frule + rrule for a scalar (elementwise) function from its local partials.

    scalar_rule(math.hypot, Real, Real,
                partials=lambda om, x, y: (x / om, y / om))

`partials(Ω, *args)` returns ∂Ω/∂xᵢ for every argument. When `f` returns a
tuple, it returns one such row per output instead:

    scalar_rule(sincos, Real, partials=lambda om, x: (om[1], -om[0]))

A row for a single-argument function may be given as a bare value. With a
trailing `Vararg` pattern the row length follows the actual call:

    scalar_rule(total, Vararg(Real), partials=lambda om, *xs: (1.0,) * len(xs))
"""
from __future__ import annotations

from typing import Callable

from .differentials import NO_TANGENT, ZERO_TANGENT, Tangent, is_structural_zero
from .registry import FRULE, RRULE, current_registry


def _as_row(p):
    return p if isinstance(p, tuple) else (p,)


def _rows(omega, dfs, n_args):
    """Normalize partials to a tuple of rows, one per output."""
    if isinstance(omega, tuple):
        rows = tuple(_as_row(r) for r in dfs)
    else:
        rows = (_as_row(dfs),)
    for row in rows:
        if len(row) != n_args:
            raise ValueError(f"partials returned {len(row)} entries for {n_args} arguments")
    return rows


def _push(row, tangents):
    """Σ ∂Ω/∂xᵢ · Δxᵢ, skipping structurally zero tangents."""
    total = None
    for p, dx in zip(row, tangents):
        if is_structural_zero(dx):
            continue
        term = p * dx
        total = term if total is None else total + term
    return ZERO_TANGENT if total is None else total


def _pull(rows, cotangents, n_args):
    """x̄ᵢ = Σₖ Ω̄ₖ · ∂Ωₖ/∂xᵢ, skipping structurally zero cotangents."""
    grads = []
    for i in range(n_args):
        total = None
        for row, dy in zip(rows, cotangents):
            if is_structural_zero(dy):
                continue
            term = dy * row[i]
            total = term if total is None else total + term
        grads.append(ZERO_TANGENT if total is None else total)
    return tuple(grads)


def scalar_rule(f, *patterns, partials: Callable, registry=None, replace: bool = False):
    """
    Register an frule and an rrule for `f` called with arguments matching
    `patterns`, both derived from `partials`.

    Returns the (frule, rrule) functions that were registered.
    """
    reg = registry if registry is not None else current_registry()
    name = getattr(f, "__name__", type(f).__name__)

    def scalar_frule(bundle, fn, *args, **kwargs):
        omega = fn(*args, **kwargs)
        rows = _rows(omega, partials(omega, *args), len(args))
        tangents = bundle[1:]
        if isinstance(omega, tuple):
            return omega, Tangent(tuple, *(_push(row, tangents) for row in rows))
        return omega, _push(rows[0], tangents)

    def scalar_rrule(fn, *args, **kwargs):
        omega = fn(*args, **kwargs)
        rows = _rows(omega, partials(omega, *args), len(args))
        multi = isinstance(omega, tuple)

        def pullback(d_omega):
            if is_structural_zero(d_omega):
                return (NO_TANGENT,) + (ZERO_TANGENT,) * len(args)
            cotangents = tuple(d_omega) if multi else (d_omega,)
            return (NO_TANGENT,) + _pull(rows, cotangents, len(args))

        pullback.__name__ = pullback.__qualname__ = f"{name}_pullback"
        return omega, pullback

    scalar_frule.__name__ = scalar_frule.__qualname__ = f"{name}_frule"
    scalar_rrule.__name__ = scalar_rrule.__qualname__ = f"{name}_rrule"
    reg.add_rule(FRULE, scalar_frule, f, *patterns, replace=replace)
    reg.add_rule(RRULE, scalar_rrule, f, *patterns, replace=replace)
    return scalar_frule, scalar_rrule
