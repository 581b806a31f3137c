from __future__ import annotations

import os
from dataclasses import dataclass

_FALSE = {"0", "false", "no", "off"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in _FALSE


@dataclass(frozen=True)
class DispatchSettings:
    """
    Registry behaviour switches.

    check_bundle_length : reject frule bundles whose length is not 1 + len(args)
    cache_lookups       : memoize rule resolution per (config, callee, arg types)
    """
    check_bundle_length: bool = True
    cache_lookups: bool = True

    @classmethod
    def from_env(cls) -> "DispatchSettings":
        return cls(
            check_bundle_length=_env_flag("AAD_RULES_CHECK_BUNDLES", True),
            cache_lookups=_env_flag("AAD_RULES_CACHE", True),
        )
