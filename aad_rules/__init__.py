# aad_rules/__init__.py
# Forward/reverse differentiation rule registry

from .core import *  # noqa: F401,F403
from .core import __all__ as _core_all

# Finite-difference backend
from . import fd
from .fd import FiniteDifferenceConfig, FiniteDifferences, fd_frule, fd_rrule

__all__ = list(_core_all) + [
    'fd',
    'FiniteDifferences',
    'FiniteDifferenceConfig',
    'fd_frule',
    'fd_rrule',
]
