import pickle

import pytest

from aad_rules import (
    ABSENT,
    ANY,
    HAS_EXECUTOR,
    ConfigPattern,
    RuleConfig,
    RuleDefinitionError,
    SupportsMutation,
    Trait,
)
from aad_rules.core.config import as_config_pattern


def fwd(bundle, f, *args, **kwargs):
    return None


def rev(f, *args, **kwargs):
    return None


class SupportsInPlaceSort(SupportsMutation):
    pass


class ReverseOnlyConfig(RuleConfig):
    pass


def test_default_config_has_no_executors():
    cfg = RuleConfig()
    assert cfg.forward is ABSENT and cfg.reverse is ABSENT
    assert not cfg.has_forward and not cfg.has_reverse
    assert cfg.traits == frozenset()


def test_axes_are_independently_nullable():
    cfg = RuleConfig(reverse=rev)
    assert not cfg.has_forward
    assert cfg.has_reverse


def test_invalid_executor_rejected():
    with pytest.raises(TypeError):
        RuleConfig(forward=42)


def test_invalid_trait_rejected():
    with pytest.raises(TypeError):
        RuleConfig(traits={int})


def test_traits_and_supports():
    cfg = RuleConfig().with_traits(SupportsInPlaceSort)
    assert cfg.supports(SupportsMutation)
    assert cfg.supports(SupportsInPlaceSort)
    assert not RuleConfig().supports(SupportsMutation)


def test_markers_pickle_to_themselves():
    assert pickle.loads(pickle.dumps(ABSENT)) is ABSENT
    assert repr(HAS_EXECUTOR) == "HAS_EXECUTOR"


def test_pattern_matching_on_executor_axes():
    both = RuleConfig(forward=fwd, reverse=rev)
    reverse_only = RuleConfig(reverse=rev)

    assert ConfigPattern().matches(both)
    assert ConfigPattern(forward=HAS_EXECUTOR).matches(both)
    assert not ConfigPattern(forward=HAS_EXECUTOR).matches(reverse_only)
    assert ConfigPattern(forward=ABSENT, reverse=HAS_EXECUTOR).matches(reverse_only)
    assert ConfigPattern(reverse=rev).matches(reverse_only)
    assert not ConfigPattern(reverse=fwd).matches(reverse_only)


def test_pattern_matching_on_traits_and_kind():
    cfg = ReverseOnlyConfig(reverse=rev, traits={SupportsInPlaceSort})
    assert ConfigPattern(traits={SupportsMutation}).matches(cfg)
    assert ConfigPattern(kind=ReverseOnlyConfig).matches(cfg)
    assert not ConfigPattern(kind=ReverseOnlyConfig).matches(RuleConfig(reverse=rev))
    assert not ConfigPattern(traits={SupportsMutation}).matches(RuleConfig())


def test_pattern_order():
    specific = ConfigPattern(forward=fwd)
    has = ConfigPattern(forward=HAS_EXECUTOR)
    anything = ConfigPattern()
    absent = ConfigPattern(forward=ABSENT)

    assert specific <= has <= anything
    assert not has <= specific
    assert absent <= anything
    assert not absent <= has and not has <= absent
    assert ConfigPattern(traits={SupportsInPlaceSort}) <= ConfigPattern(traits={SupportsMutation})
    assert ConfigPattern(kind=ReverseOnlyConfig) <= anything


def test_pattern_meet():
    assert ConfigPattern(forward=ABSENT).meet(ConfigPattern(forward=HAS_EXECUTOR)) is None
    met = ConfigPattern(forward=HAS_EXECUTOR).meet(ConfigPattern(reverse=rev))
    assert met.forward is HAS_EXECUTOR and met.reverse is rev

    class A(Trait):
        pass

    class B(Trait):
        pass

    both = ConfigPattern(traits={A}).meet(ConfigPattern(traits={B}))
    assert both.traits == frozenset({A, B})


def test_invalid_patterns():
    with pytest.raises(RuleDefinitionError):
        ConfigPattern(forward=3)
    with pytest.raises(RuleDefinitionError):
        ConfigPattern(kind=int)
    with pytest.raises(RuleDefinitionError):
        ConfigPattern(traits={str})
    with pytest.raises(RuleDefinitionError):
        as_config_pattern("zygote")


def test_as_config_pattern_accepts_config_class():
    pattern = as_config_pattern(ReverseOnlyConfig)
    assert pattern.kind is ReverseOnlyConfig
    assert pattern.forward is ANY and pattern.reverse is ANY
