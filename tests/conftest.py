import pytest

import aad_rules.ops  # noqa: F401  registers the demonstration rules
from aad_rules import RuleRegistry, use_registry


@pytest.fixture
def registry():
    """Fresh registry made active for the duration of the test."""
    with use_registry(RuleRegistry()) as reg:
        yield reg
