import math
import operator

import numpy as np
import pytest
from scipy import special

from aad_rules import NO_TANGENT, ZERO_TANGENT, DEFAULT_REGISTRY, Tangent, frule, rrule
from aad_rules.ops import norm_cdf, sincos
from aad_rules.testing import check_frule, check_rrule

X = 0.8236475079774124


def test_sin_frule():
    sinx, d_sinx = frule((NO_TANGENT, 1), math.sin, X)
    assert sinx == math.sin(X)
    assert d_sinx == math.cos(X)
    assert sinx == pytest.approx(0.7336293678134624, abs=1e-15)
    assert d_sinx == pytest.approx(0.6795498147167869, abs=1e-15)


def test_sincos_frule_returns_structured_tangent():
    sincosx, d_sincosx = frule((NO_TANGENT, 1), sincos, X)
    assert sincosx == sincos(X)
    assert isinstance(d_sincosx, Tangent)
    assert d_sincosx[0] == math.cos(X)
    assert d_sincosx[1] == -math.sin(X)
    assert d_sincosx == Tangent(tuple, math.cos(X), -math.sin(X))


def test_sin_rrule():
    sinx, sin_pullback = rrule(math.sin, X)
    assert sinx == math.sin(X)
    assert sin_pullback(1) == (NO_TANGENT, math.cos(X))


def test_hypot_rrule():
    x, y = 0.3, 0.7
    hypotxy, hypot_pullback = rrule(math.hypot, x, y)
    assert hypotxy == math.hypot(x, y)
    assert hypot_pullback(1) == (NO_TANGENT, x / math.hypot(x, y), y / math.hypot(x, y))


def test_structural_zero_differentials_pass_through():
    assert frule((NO_TANGENT, ZERO_TANGENT), math.sin, X) == (math.sin(X), ZERO_TANGENT)
    omega, d_omega = frule((NO_TANGENT, 2.0, NO_TANGENT), operator.mul, 3.0, 4.0)
    assert (omega, d_omega) == (12.0, 8.0)

    _, pullback = rrule(math.hypot, 3.0, 4.0)
    assert pullback(ZERO_TANGENT) == (NO_TANGENT, ZERO_TANGENT, ZERO_TANGENT)

    _, pullback = rrule(sincos, X)
    assert pullback(Tangent(tuple, ZERO_TANGENT, 1.0)) == (NO_TANGENT, -math.sin(X))


def test_unregistered_types_and_functions():
    assert rrule(math.sin, "x") is None
    assert rrule(math.gamma, 2.0) is None
    assert frule((NO_TANGENT, 1.0), math.gamma, 2.0) is None


SCALAR_CASES = [
    (operator.add, (1.5, -2.0)),
    (operator.sub, (1.5, -2.0)),
    (operator.mul, (1.5, -2.0)),
    (operator.truediv, (1.5, -2.0)),
    (operator.neg, (1.5,)),
    (operator.pow, (1.5, 2.5)),
    (math.hypot, (0.3, 0.7)),
    (math.sin, (X,)),
    (math.cos, (X,)),
    (math.tan, (X,)),
    (math.exp, (X,)),
    (math.log, (X,)),
    (math.sqrt, (X,)),
    (math.erf, (X,)),
    (special.erf, (X,)),
    (norm_cdf, (X,)),
    (np.sin, (X,)),
    (np.exp, (X,)),
    (sincos, (X,)),
]


@pytest.mark.parametrize("f, args", SCALAR_CASES, ids=lambda v: getattr(v, "__name__", None))
def test_scalar_rules_against_finite_differences(f, args):
    check_frule(f, *args, registry=DEFAULT_REGISTRY)
    _, grads = check_rrule(f, *args, registry=DEFAULT_REGISTRY)
    assert len(grads) == 1 + len(args)
    assert grads[0] is NO_TANGENT


ARRAY = np.array([0.2, 0.5, 1.3])


@pytest.mark.parametrize("f", [np.sin, np.cos, np.tan, np.exp, np.log, np.sqrt, special.erf, norm_cdf, sincos])
def test_array_rules_against_finite_differences(f):
    check_frule(f, ARRAY, registry=DEFAULT_REGISTRY)
    check_rrule(f, ARRAY, registry=DEFAULT_REGISTRY)


def test_numpy_hypot_on_arrays():
    x, y = np.array([3.0, 1.0]), np.array([4.0, 2.0])
    omega, pullback = rrule(np.hypot, x, y)
    np.testing.assert_array_equal(omega, np.hypot(x, y))
    _, dx, dy = pullback(np.ones(2))
    np.testing.assert_allclose(dx, x / omega)
    np.testing.assert_allclose(dy, y / omega)
    check_rrule(np.hypot, x, y, registry=DEFAULT_REGISTRY)


def test_pow_with_nonpositive_base_has_zero_exponent_partial():
    _, pullback = rrule(operator.pow, -2.0, 2.0)
    _, dx, dp = pullback(1.0)
    assert dx == -4.0
    assert dp == 0.0
