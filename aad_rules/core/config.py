# aad_rules/core/config.py
"""
Rule configurations and the patterns rule authors use to match them.

A `RuleConfig` describes the AD system driving a differentiation:

    forward : ABSENT, or a callable with the `frule` call shape
    reverse : ABSENT, or a callable with the `rrule` call shape
    traits  : frozenset of `Trait` subclasses the system supports

A `ConfigPattern` restricts which configurations a rule applies to. Each axis
is a small lattice; the pattern as a whole is ordered by "matches a subset of"
so the registry can pick the most specific rule.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Optional

from .errors import RuleDefinitionError


class _Marker:
    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self):
        return self.name

    def __reduce__(self):
        return self.name


ABSENT = _Marker("ABSENT")            # no executor on this axis
ANY = _Marker("ANY")                  # pattern: axis unconstrained
HAS_EXECUTOR = _Marker("HAS_EXECUTOR")  # pattern: any executor, but not ABSENT


class Trait:
    """Base class for capabilities a backend can advertise."""


class SupportsMutation(Trait):
    """The backend can differentiate through in-place mutation."""


def _check_traits(traits: Iterable[Any]) -> FrozenSet[type]:
    traits = frozenset(traits)
    for t in traits:
        if not (isinstance(t, type) and issubclass(t, Trait)):
            raise TypeError(f"traits must be Trait subclasses, got {t!r}")
    return traits


@dataclass(frozen=True)
class RuleConfig:
    """
    Configuration handed to rules by an AD backend.

    Backends usually subclass this (and may add their own fields); the
    concrete subclass takes part in dispatch through `ConfigPattern.kind`.
    """
    forward: Any = ABSENT
    reverse: Any = ABSENT
    traits: FrozenSet[type] = field(default_factory=frozenset)

    def __post_init__(self):
        for axis in ("forward", "reverse"):
            value = getattr(self, axis)
            if value is not ABSENT and not callable(value):
                raise TypeError(
                    f"{type(self).__name__}.{axis} must be ABSENT or a callable executor, "
                    f"got {value!r}"
                )
        object.__setattr__(self, "traits", _check_traits(self.traits))

    @property
    def has_forward(self) -> bool:
        return self.forward is not ABSENT

    @property
    def has_reverse(self) -> bool:
        return self.reverse is not ABSENT

    def supports(self, trait: type) -> bool:
        return any(issubclass(t, trait) for t in self.traits)

    def with_traits(self, *traits: type) -> "RuleConfig":
        return dataclasses.replace(self, traits=self.traits | frozenset(traits))

    def dispatch_key(self):
        """Everything about this configuration that patterns can observe."""
        return (type(self), self.forward, self.reverse, self.traits)


# ---------------- per-axis executor lattice ---------------- #
# ANY ⊃ HAS_EXECUTOR ⊃ {specific executor}, ANY ⊃ ABSENT

def _axis_matches(pattern, value) -> bool:
    if pattern is ANY:
        return True
    if pattern is HAS_EXECUTOR:
        return value is not ABSENT
    if pattern is ABSENT:
        return value is ABSENT
    return value is not ABSENT and value == pattern


def _axis_le(a, b) -> bool:
    if b is ANY:
        return True
    if a is ANY:
        return False
    if b is HAS_EXECUTOR:
        return a is not ABSENT
    if b is ABSENT:
        return a is ABSENT
    return a is not ABSENT and a is not HAS_EXECUTOR and a == b


def _axis_meet(a, b):
    if _axis_le(a, b):
        return a
    if _axis_le(b, a):
        return b
    return None


def _check_axis(name, value):
    if value is ANY or value is HAS_EXECUTOR or value is ABSENT or callable(value):
        return value
    raise RuleDefinitionError(
        f"config pattern axis {name!r} must be ANY, HAS_EXECUTOR, ABSENT or an executor, "
        f"got {value!r}"
    )


@dataclass(frozen=True)
class ConfigPattern:
    """
    Which configurations a rule is defined for.

    kind    : RuleConfig subclass the configuration must be an instance of
    forward : ANY | HAS_EXECUTOR | ABSENT | a specific executor
    reverse : same as `forward`
    traits  : traits the configuration must support (subclasses count)

    Examples
    --------
    ConfigPattern(forward=HAS_EXECUTOR)              # backends with a forward mode
    ConfigPattern(forward=ABSENT, reverse=HAS_EXECUTOR)  # reverse-only backends
    ConfigPattern(traits={SupportsMutation})
    """
    kind: type = RuleConfig
    forward: Any = ANY
    reverse: Any = ANY
    traits: FrozenSet[type] = field(default_factory=frozenset)

    def __post_init__(self):
        if not (isinstance(self.kind, type) and issubclass(self.kind, RuleConfig)):
            raise RuleDefinitionError(f"ConfigPattern.kind must be a RuleConfig subclass, got {self.kind!r}")
        _check_axis("forward", self.forward)
        _check_axis("reverse", self.reverse)
        try:
            traits = _check_traits(self.traits)
        except TypeError as exc:
            raise RuleDefinitionError(str(exc)) from exc
        object.__setattr__(self, "traits", traits)

    def matches(self, config: RuleConfig) -> bool:
        return (
            isinstance(config, self.kind)
            and _axis_matches(self.forward, config.forward)
            and _axis_matches(self.reverse, config.reverse)
            and all(config.supports(t) for t in self.traits)
        )

    def __le__(self, other: "ConfigPattern") -> bool:
        """True if every configuration matching `self` also matches `other`."""
        return (
            issubclass(self.kind, other.kind)
            and _axis_le(self.forward, other.forward)
            and _axis_le(self.reverse, other.reverse)
            and all(any(issubclass(mine, req) for mine in self.traits) for req in other.traits)
        )

    def meet(self, other: "ConfigPattern") -> Optional["ConfigPattern"]:
        """Pattern matching exactly the configurations both match, or None."""
        if issubclass(self.kind, other.kind):
            kind = self.kind
        elif issubclass(other.kind, self.kind):
            kind = other.kind
        else:
            return None
        forward = _axis_meet(self.forward, other.forward)
        reverse = _axis_meet(self.reverse, other.reverse)
        if forward is None or reverse is None:
            return None
        return ConfigPattern(kind, forward, reverse, self.traits | other.traits)


def as_config_pattern(obj) -> ConfigPattern:
    """Accept a ConfigPattern or a bare RuleConfig subclass."""
    if isinstance(obj, ConfigPattern):
        return obj
    if isinstance(obj, type) and issubclass(obj, RuleConfig):
        return ConfigPattern(kind=obj)
    raise RuleDefinitionError(f"expected a ConfigPattern or RuleConfig subclass, got {obj!r}")
