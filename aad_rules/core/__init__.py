# aad_rules/core/__init__.py

"""
Core public API of the rule registry.

Exports:
    frule, rrule                 : rule lookup; None when no rule applies
    frule_via_ad, rrule_via_ad   : call back into the configured AD backend
    define_frule, define_rrule   : decorators registering rules in the active registry
    scalar_rule                  : frule + rrule from local partial derivatives
    RuleConfig, ConfigPattern    : backend configuration and the patterns matching it
    RuleRegistry, use_registry   : explicit registries, temporary active registry
    NO_TANGENT, ZERO_TANGENT     : structural differentials
    Tangent                      : differential of a multi-output result
"""

from .config import (
    ABSENT,
    ANY,
    HAS_EXECUTOR,
    ConfigPattern,
    RuleConfig,
    SupportsMutation,
    Trait,
)
from .differentials import (
    NO_TANGENT,
    ZERO_TANGENT,
    NoTangent,
    Tangent,
    ZeroTangent,
    is_structural_zero,
)
from .errors import (
    AmbiguousRuleError,
    BundleLengthError,
    DuplicateRuleError,
    RuleDefinitionError,
    RuleError,
)
from .registry import DEFAULT_REGISTRY, FRULE, RRULE, RuleRegistry, current_registry, use_registry
from .rules import define_frule, define_rrule, frule, frule_via_ad, rrule, rrule_via_ad
from .scalar import scalar_rule
from .settings import DispatchSettings
from .signature import Identity, Vararg

__all__ = [
    "frule", "rrule", "frule_via_ad", "rrule_via_ad",
    "define_frule", "define_rrule", "scalar_rule",
    "RuleConfig", "ConfigPattern", "Trait", "SupportsMutation",
    "ABSENT", "ANY", "HAS_EXECUTOR",
    "RuleRegistry", "DEFAULT_REGISTRY", "current_registry", "use_registry", "FRULE", "RRULE",
    "DispatchSettings", "Identity", "Vararg",
    "NO_TANGENT", "ZERO_TANGENT", "NoTangent", "ZeroTangent", "Tangent",
    "is_structural_zero",
    "RuleError", "RuleDefinitionError", "AmbiguousRuleError",
    "DuplicateRuleError", "BundleLengthError",
]
