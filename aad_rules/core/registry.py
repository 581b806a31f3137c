# aad_rules/core/registry.py
"""
Rule tables and dispatch.

Each registry keeps four tables: {frule, rrule} x {configuration-less,
configuration-qualified}. A lookup with a configuration searches the qualified
table first and falls back to the configuration-less one, so rules written for
a particular backend only ever add to the general rules, never hide them.

Registration is expected to happen at import/initialization time; lookups are
safe to run concurrently once it has finished. Registering from several
threads at once is not supported.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from ..log import get_logger
from .config import ABSENT, RuleConfig, as_config_pattern
from .errors import AmbiguousRuleError, BundleLengthError, DuplicateRuleError, RuleDefinitionError
from .settings import DispatchSettings
from .signature import Identity, Signature

logger = get_logger(__name__)

FRULE = "frule"
RRULE = "rrule"
MODES = (FRULE, RRULE)

_MISS = object()


class Rule(NamedTuple):
    signature: Signature
    func: Callable

    @property
    def qualified(self) -> bool:
        return self.signature.config is not None


def _split_call(name: str, args: Tuple, n_leading: int):
    """Split positional args into (config, leading..., rest)."""
    if args and isinstance(args[0], RuleConfig):
        config, args = args[0], args[1:]
    else:
        config = None
    if len(args) < n_leading:
        shape = "bundle, f" if n_leading == 2 else "f"
        raise TypeError(f"{name}([config,] {shape}, *args) got too few positional arguments")
    return (config,) + tuple(args[:n_leading]) + (args[n_leading:],)


def _func_name(f) -> str:
    return getattr(f, "__qualname__", None) or getattr(f, "__name__", None) or repr(f)


class RuleRegistry:
    """
    Forward and reverse differentiation rules keyed by call signature.

    Rule call shapes
    ----------------
    frule rule              : rule(bundle, f, *args, **kwargs) -> (Ω, ΔΩ)
    rrule rule              : rule(f, *args, **kwargs) -> (Ω, pullback)
    config-qualified frule  : rule(config, bundle, f, *args, **kwargs)
    config-qualified rrule  : rule(config, f, *args, **kwargs)
    """

    def __init__(self, settings: Optional[DispatchSettings] = None):
        self.settings = settings if settings is not None else DispatchSettings.from_env()
        self._tables: Dict[Tuple[str, bool], List[Rule]] = {
            (mode, qualified): [] for mode in MODES for qualified in (False, True)
        }
        self._identity_ids = set()
        self._cache: Dict[Any, Optional[Rule]] = {}

    def __repr__(self):
        counts = ", ".join(f"{m}={len(self.rules(m))}" for m in MODES)
        return f"RuleRegistry({counts})"

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #
    def add_rule(self, mode: str, func: Callable, callee, *patterns,
                 config=None, replace: bool = False) -> Callable:
        """
        Register `func` as the `mode` rule for calls matching
        (config?, callee, *patterns).

        Raises DuplicateRuleError for an identical signature (unless
        `replace=True`) and AmbiguousRuleError when the new rule overlaps an
        existing one, neither is more specific, and no rule for their
        intersection has been registered yet.
        """
        if mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}, got {mode!r}")
        if not callable(func):
            raise RuleDefinitionError(f"rule must be callable, got {func!r}")
        pattern = as_config_pattern(config) if config is not None else None
        sig = Signature.build(callee, patterns, pattern)
        table = self._tables[(mode, pattern is not None)]

        for i, existing in enumerate(table):
            if sig.equivalent(existing.signature):
                if not replace:
                    raise DuplicateRuleError(f"{mode} rule for {sig!r} is already registered")
                logger.warning("replacing %s rule for %r (%s -> %s)", mode, sig,
                               _func_name(existing.func), _func_name(func))
                table[i] = Rule(sig, func)
                self.clear_cache()
                return func

        self._check_ambiguity(mode, table, sig)
        table.append(Rule(sig, func))
        if isinstance(sig.callee, Identity):
            self._identity_ids.add(id(sig.callee.obj))
        self.clear_cache()
        logger.debug("registered %s rule %r -> %s", mode, sig, _func_name(func))
        return func

    @staticmethod
    def _check_ambiguity(mode: str, table: List[Rule], sig: Signature) -> None:
        for existing in table:
            other = existing.signature
            if sig <= other or other <= sig:
                continue
            overlap = sig.meet(other)
            if overlap is None:
                shared = sig.shared_subclass_overlap(other)
                if shared is not None and not any(shared.equivalent(r.signature) for r in table):
                    logger.warning(
                        "%s rules %r and %r both match %r; such calls will raise "
                        "AmbiguousRuleError unless a rule for %r is registered",
                        mode, sig, other, shared, shared)
                continue
            if any(overlap.equivalent(r.signature) for r in table):
                continue
            raise AmbiguousRuleError(
                f"{mode} rules {sig!r} and {other!r} are equally specific for {overlap!r}; "
                f"register a rule for the intersection first"
            )

    def register_frule(self, callee, *patterns, config=None, replace: bool = False):
        """Decorator form of `add_rule(FRULE, ...)`."""
        def decorator(func):
            return self.add_rule(FRULE, func, callee, *patterns, config=config, replace=replace)
        return decorator

    def register_rrule(self, callee, *patterns, config=None, replace: bool = False):
        """Decorator form of `add_rule(RRULE, ...)`."""
        def decorator(func):
            return self.add_rule(RRULE, func, callee, *patterns, config=config, replace=replace)
        return decorator

    def rules(self, mode: str) -> Tuple[Rule, ...]:
        return tuple(self._tables[(mode, False)]) + tuple(self._tables[(mode, True)])

    def clear_cache(self) -> None:
        if self._cache:
            logger.debug("clearing dispatch cache (%d entries)", len(self._cache))
        self._cache.clear()

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #
    def _cache_key(self, mode, config, f, args):
        ident = id(f) if id(f) in self._identity_ids else None
        cfg = config.dispatch_key() if config is not None else None
        key = (mode, cfg, type(f), ident, tuple(map(type, args)))
        try:
            hash(key)
        except TypeError:
            # unhashable executor on the configuration: resolve without caching
            return None
        return key

    @staticmethod
    def _resolve(table: List[Rule], config, f, args) -> Optional[Rule]:
        applicable = [r for r in table if r.signature.matches(config, f, args)]
        if not applicable:
            return None
        for rule in applicable:
            if all(rule.signature <= other.signature for other in applicable):
                return rule
        # only reachable through classes that inherit from unrelated patterns
        raise AmbiguousRuleError(
            f"no most specific rule for {_func_name(f)}{tuple(type(a).__name__ for a in args)} "
            f"among {[r.signature for r in applicable]!r}"
        )

    def find(self, mode: str, config: Optional[RuleConfig], f, args: Tuple) -> Optional[Rule]:
        """The rule `mode` would run for this call, or None."""
        key = None
        if self.settings.cache_lookups:
            key = self._cache_key(mode, config, f, args)
            if key is not None:
                hit = self._cache.get(key, _MISS)
                if hit is not _MISS:
                    return hit
        rule = None
        if config is not None:
            rule = self._resolve(self._tables[(mode, True)], config, f, args)
        if rule is None:
            rule = self._resolve(self._tables[(mode, False)], None, f, args)
        if key is not None:
            self._cache[key] = rule
        return rule

    # ------------------------------------------------------------------ #
    # Entry points
    # ------------------------------------------------------------------ #
    def frule(self, *args, **kwargs):
        """
        frule([config,] bundle, f, *args, **kwargs) -> (Ω, ΔΩ) or None

        `bundle` holds one differential for `f` itself followed by one per
        positional argument. Returns None when no rule applies.
        """
        config, bundle, f, xs = _split_call("frule", args, 2)
        bundle = tuple(bundle)
        if self.settings.check_bundle_length and len(bundle) != len(xs) + 1:
            raise BundleLengthError(
                f"frule bundle for {_func_name(f)} has {len(bundle)} entries, "
                f"expected {len(xs) + 1} (callee + {len(xs)} arguments)"
            )
        rule = self.find(FRULE, config, f, xs)
        if rule is None:
            return None
        if rule.qualified:
            return rule.func(config, bundle, f, *xs, **kwargs)
        return rule.func(bundle, f, *xs, **kwargs)

    def rrule(self, *args, **kwargs):
        """
        rrule([config,] f, *args, **kwargs) -> (Ω, pullback) or None

        Keyword arguments never take part in dispatch and are only forwarded
        when a rule is found.
        """
        config, f, xs = _split_call("rrule", args, 1)
        rule = self.find(RRULE, config, f, xs)
        if rule is None:
            return None
        if rule.qualified:
            return rule.func(config, f, *xs, **kwargs)
        return rule.func(f, *xs, **kwargs)

    def frule_via_ad(self, config: RuleConfig, bundle, f, *args, **kwargs):
        """Run the configuration's forward executor, or plain `frule` if it has none."""
        if not isinstance(config, RuleConfig):
            raise TypeError(f"frule_via_ad expects a RuleConfig, got {type(config).__name__}")
        if config.forward is ABSENT:
            logger.debug("frule_via_ad: %s has no forward executor, using frule for %s",
                         type(config).__name__, _func_name(f))
            return self.frule(bundle, f, *args, **kwargs)
        return config.forward(bundle, f, *args, **kwargs)

    def rrule_via_ad(self, config: RuleConfig, f, *args, **kwargs):
        """Run the configuration's reverse executor, or plain `rrule` if it has none."""
        if not isinstance(config, RuleConfig):
            raise TypeError(f"rrule_via_ad expects a RuleConfig, got {type(config).__name__}")
        if config.reverse is ABSENT:
            logger.debug("rrule_via_ad: %s has no reverse executor, using rrule for %s",
                         type(config).__name__, _func_name(f))
            return self.rrule(f, *args, **kwargs)
        return config.reverse(f, *args, **kwargs)


# Process-wide registry; `global_registry` is the active one, swapped by use_registry()
DEFAULT_REGISTRY = RuleRegistry()
global_registry = DEFAULT_REGISTRY


def current_registry() -> RuleRegistry:
    return global_registry


@contextmanager
def use_registry(registry: Optional[RuleRegistry] = None):
    """
    Context manager to temporarily make another registry the active one:
        with use_registry() as reg:
            ... define rules, call frule/rrule ...
    """
    global global_registry
    prev = global_registry
    try:
        global_registry = registry if registry is not None else RuleRegistry()
        yield global_registry
    finally:
        global_registry = prev
