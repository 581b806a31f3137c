# aad_rules/core/differentials.py
"""
Minimal differential contract.

The dispatch layer treats tangents and cotangents as opaque values. The only
things it needs to know about are the two "structurally nothing" singletons and
a small aggregate used for functions that return several outputs.
"""
from __future__ import annotations

from typing import Any


class _StructuralDifferential:
    """Base for the singleton differentials; one instance per subclass."""

    __slots__ = ()
    _instance = None
    _global_name = ""

    def __new__(cls):
        inst = cls.__dict__.get("_instance")
        if inst is None:
            inst = super().__new__(cls)
            cls._instance = inst
        return inst

    def __bool__(self):
        return False

    def __repr__(self):
        return f"{type(self).__name__}()"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        # pickle resolves the module-level name back to the singleton
        return self._global_name


class NoTangent(_StructuralDifferential):
    """
    The value carries no derivative information at all.

    Used for the callee slot of a stateless function and for arguments that
    are not differentiable (integers used as indices, strings, ...).
    """

    __slots__ = ()
    _global_name = "NO_TANGENT"


class ZeroTangent(_StructuralDifferential):
    """The value is differentiable but its differential is structurally zero."""

    __slots__ = ()
    _global_name = "ZERO_TANGENT"


NO_TANGENT = NoTangent()
ZERO_TANGENT = ZeroTangent()


def is_structural_zero(d: Any) -> bool:
    """True for NO_TANGENT / ZERO_TANGENT, the values rules may skip."""
    return isinstance(d, _StructuralDifferential)


class Tangent:
    """
    Differential of a structured primal, e.g. the tuple returned by `sincos`.

    Positional components mirror a tuple-like primal; keyword components mirror
    an object with named fields. No arithmetic is defined here.
    """

    __slots__ = ("primal_type", "_backing")

    def __init__(self, primal_type: type, *components: Any, **fields: Any):
        if components and fields:
            raise ValueError("Tangent takes positional or keyword components, not both")
        self.primal_type = primal_type
        self._backing = dict(fields) if fields else tuple(components)

    def __getitem__(self, key):
        return self._backing[key]

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        backing = self._backing
        if isinstance(backing, dict) and name in backing:
            return backing[name]
        raise AttributeError(f"Tangent[{self.primal_type.__name__}] has no field {name!r}")

    def __iter__(self):
        if isinstance(self._backing, dict):
            return iter(self._backing.values())
        return iter(self._backing)

    def __len__(self):
        return len(self._backing)

    def __eq__(self, other):
        if not isinstance(other, Tangent):
            return NotImplemented
        return self.primal_type is other.primal_type and self._backing == other._backing

    __hash__ = None

    def __repr__(self):
        if isinstance(self._backing, dict):
            inner = ", ".join(f"{k}={v!r}" for k, v in self._backing.items())
        else:
            inner = ", ".join(repr(v) for v in self._backing)
        return f"Tangent[{self.primal_type.__name__}]({inner})"
