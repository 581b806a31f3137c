import math
from numbers import Real

import pytest

from aad_rules import ConfigPattern, HAS_EXECUTOR, Identity, RuleDefinitionError, Vararg
from aad_rules.core.signature import Signature


def sig(callee, *patterns, config=None):
    return Signature.build(callee, patterns, config)


def test_functions_match_by_identity():
    s = sig(math.sin, Real)
    assert isinstance(s.callee, Identity)
    assert s.matches(None, math.sin, (0.5,))
    assert not s.matches(None, math.cos, (0.5,))
    assert not s.matches(None, math.sin, ("x",))
    assert not s.matches(None, math.sin, (0.5, 0.5))


def test_classes_match_instances():
    class Poly:
        def __call__(self, x):
            return x

    s = sig(Poly, object)
    assert s.matches(None, Poly(), (1,))
    assert not s.matches(None, math.sin, (1,))


def test_specificity_order():
    assert sig(math.sin, float) <= sig(math.sin, Real)
    assert sig(math.sin, Real) <= sig(math.sin, object)
    assert not sig(math.sin, object) <= sig(math.sin, Real)
    assert sig(math.sin, Real) <= sig(object, Real)
    assert sig(math.sin, Real).equivalent(sig(math.sin, Real))


def test_fixed_arity_more_specific_than_vararg():
    fixed = sig(max, Real, Real)
    var = sig(max, Vararg(Real))
    assert fixed <= var
    assert not var <= fixed
    assert sig(max, Real, Vararg(Real)) <= var
    assert not sig(max, Real, Real) <= sig(max, Real)


def test_vararg_matching():
    s = sig(max, Real, Vararg(Real))
    assert s.matches(None, max, (1,))
    assert s.matches(None, max, (1, 2.0, 3))
    assert not s.matches(None, max, ())
    assert not s.matches(None, max, (1, "a"))


def test_meet():
    a = sig(math.hypot, Real, object)
    b = sig(math.hypot, object, Real)
    assert a.meet(b).equivalent(sig(math.hypot, Real, Real))
    assert sig(math.hypot, float, float).meet(sig(math.hypot, str, object)) is None
    assert sig(math.sin, Real).meet(sig(math.cos, Real)) is None
    assert sig(max, Vararg(Real)).meet(sig(max, object, object)).equivalent(sig(max, Real, Real))


def test_config_patterns_take_part():
    general = sig(map, object, object, config=ConfigPattern())
    forward = sig(map, object, object, config=ConfigPattern(forward=HAS_EXECUTOR))
    assert forward <= general
    assert not general <= forward
    # qualified and unqualified signatures are never compared
    assert not sig(map, object, object) <= general


def test_malformed_signatures():
    with pytest.raises(RuleDefinitionError):
        sig(math.sin, Vararg(Real), Real)
    with pytest.raises(RuleDefinitionError):
        sig(math.sin, 1.0)
    with pytest.raises(RuleDefinitionError):
        Vararg("Real")
