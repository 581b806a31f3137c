"""Errors raised by the rule registry."""


class RuleError(Exception):
    pass


class RuleDefinitionError(RuleError, TypeError):
    """A rule signature or configuration pattern is malformed."""


class AmbiguousRuleError(RuleDefinitionError):
    """Two rules are equally specific for some call."""


class DuplicateRuleError(AmbiguousRuleError):
    """A rule with an identical signature is already registered."""


class BundleLengthError(RuleError, ValueError):
    """The differential bundle does not have 1 + len(args) entries."""
