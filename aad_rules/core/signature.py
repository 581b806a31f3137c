# aad_rules/core/signature.py
"""
Rule signatures and the specificity order between them.

A signature is a pattern over one call:

    (config pattern?, callee, arg_1, ..., arg_n [, *vararg])

Positions are matched independently:
  - an `Identity` pattern matches exactly one object (callee position only;
    used for functions, the analogue of a singleton function type),
  - a class matches its instances (ABCs such as numbers.Real included),
  - a `ConfigPattern` matches rule configurations.

`a <= b` means "every call matched by a is matched by b"; the most specific
applicable rule is the one that is `<=` all other applicable rules.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .config import ConfigPattern
from .errors import RuleDefinitionError


class Identity:
    """Pattern matching a single object by identity."""

    __slots__ = ("obj",)

    def __init__(self, obj: Any):
        self.obj = obj

    def __eq__(self, other):
        return isinstance(other, Identity) and other.obj is self.obj

    def __hash__(self):
        return hash((Identity, id(self.obj)))

    def __repr__(self):
        return f"Identity({getattr(self.obj, '__qualname__', None) or self.obj!r})"


class Vararg:
    """Trailing pattern: zero or more further arguments of type `cls`."""

    __slots__ = ("cls",)

    def __init__(self, cls: type = object):
        if not isinstance(cls, type):
            raise RuleDefinitionError(f"Vararg expects a class, got {cls!r}")
        self.cls = cls

    def __repr__(self):
        return f"Vararg({self.cls.__name__})"


# ---------------- single-position helpers ---------------- #

def _matches(p, value) -> bool:
    if isinstance(p, Identity):
        return value is p.obj
    return isinstance(value, p)


def _le(a, b) -> bool:
    if isinstance(b, Identity):
        return isinstance(a, Identity) and a.obj is b.obj
    if isinstance(a, Identity):
        return isinstance(a.obj, b)
    return issubclass(a, b)


def _meet(a, b):
    # unrelated classes are treated as disjoint
    if _le(a, b):
        return a
    if _le(b, a):
        return b
    return None


def callee_pattern(callee):
    """Classes match their instances; anything else matches itself."""
    if isinstance(callee, Identity):
        return callee
    if isinstance(callee, type):
        return callee
    return Identity(callee)


def _common_subclass(a, b):
    """An existing class deriving from both `a` and `b`, or None."""
    seen = set()
    stack = [a, b]
    while stack:
        c = stack.pop()
        if c in seen:
            continue
        seen.add(c)
        if issubclass(c, a) and issubclass(c, b):
            return c
        stack.extend(type.__subclasses__(c))
    return None


def _meet_or_shared(a, b):
    p = _meet(a, b)
    if p is None and isinstance(a, type) and isinstance(b, type):
        return _common_subclass(a, b)
    return p


def _arg_pattern(p):
    # the dispatch cache keys arguments by type, so values cannot be pinned
    if isinstance(p, type):
        return p
    raise RuleDefinitionError(f"argument patterns must be classes, got {p!r}")


@dataclass(frozen=True)
class Signature:
    callee: Any
    params: Tuple[Any, ...] = ()
    vararg: Optional[type] = None
    config: Optional[ConfigPattern] = None

    @classmethod
    def build(cls, callee, patterns, config=None) -> "Signature":
        patterns = tuple(patterns)
        vararg = None
        if patterns and isinstance(patterns[-1], Vararg):
            vararg = patterns[-1].cls
            patterns = patterns[:-1]
        if any(isinstance(p, Vararg) for p in patterns):
            raise RuleDefinitionError("Vararg may only appear as the last pattern")
        return cls(
            callee=callee_pattern(callee),
            params=tuple(_arg_pattern(p) for p in patterns),
            vararg=vararg,
            config=config,
        )

    # ---- arity ----
    def accepts_arity(self, n: int) -> bool:
        if self.vararg is None:
            return n == len(self.params)
        return n >= len(self.params)

    def param_at(self, i: int):
        return self.params[i] if i < len(self.params) else self.vararg

    # ---- matching ----
    def matches(self, config, f, args) -> bool:
        if self.config is not None and not self.config.matches(config):
            return False
        if not self.accepts_arity(len(args)) or not _matches(self.callee, f):
            return False
        return all(_matches(self.param_at(i), x) for i, x in enumerate(args))

    # ---- order ----
    def __le__(self, other: "Signature") -> bool:
        if (self.config is None) != (other.config is None):
            return False
        if self.config is not None and not self.config <= other.config:
            return False
        if not _le(self.callee, other.callee):
            return False
        n = len(self.params)
        if self.vararg is None:
            if not other.accepts_arity(n):
                return False
        elif other.vararg is None or len(other.params) > n:
            return False
        elif not issubclass(self.vararg, other.vararg):
            return False
        return all(_le(self.params[i], other.param_at(i)) for i in range(n))

    def equivalent(self, other: "Signature") -> bool:
        return self <= other and other <= self

    def meet(self, other: "Signature") -> Optional["Signature"]:
        """Signature matching exactly the calls both match, or None if disjoint."""
        return self._combine(other, _meet)

    def shared_subclass_overlap(self, other: "Signature") -> Optional["Signature"]:
        """
        Calls both signatures match only through a class inheriting from two
        unrelated patterns, e.g. np.float64 for `float` and `np.floating`.
        None when no such class exists yet.
        """
        if self.meet(other) is not None:
            return None
        return self._combine(other, _meet_or_shared)

    def _combine(self, other: "Signature", meet_pos) -> Optional["Signature"]:
        config = None
        if self.config is not None or other.config is not None:
            if self.config is None or other.config is None:
                return None
            config = self.config.meet(other.config)
            if config is None:
                return None
        callee = meet_pos(self.callee, other.callee)
        if callee is None:
            return None

        if self.vararg is None and other.vararg is None:
            if len(self.params) != len(other.params):
                return None
            n, vararg = len(self.params), None
        elif self.vararg is None or other.vararg is None:
            fixed, var = (self, other) if self.vararg is None else (other, self)
            if not var.accepts_arity(len(fixed.params)):
                return None
            n, vararg = len(fixed.params), None
        else:
            n = max(len(self.params), len(other.params))
            vararg = meet_pos(self.vararg, other.vararg)

        params = []
        for i in range(n):
            p = meet_pos(self.param_at(i), other.param_at(i))
            if p is None:
                return None
            params.append(p)
        return Signature(callee, tuple(params), vararg, config)

    def __repr__(self):
        parts = [repr(self.callee)] + [getattr(p, "__name__", repr(p)) for p in self.params]
        if self.vararg is not None:
            parts.append(f"*{self.vararg.__name__}")
        prefix = f"{self.config!r}, " if self.config is not None else ""
        return f"Signature({prefix}{', '.join(parts)})"
