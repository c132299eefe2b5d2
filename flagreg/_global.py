"""Process-wide flag registry.

The registry is created on first use and lives until the process exits.
Flags set here can never be cleared, so tests should use their own
`FlagRegistry` instances instead.
"""
from threading import Lock
from typing import Optional

from flagreg._types import Action, FlagKey
from flagreg.core import FlagRegistry

_registry: Optional[FlagRegistry] = None
_registry_lock = Lock()


def get_registry() -> FlagRegistry:
    """Return the process-wide FlagRegistry, creating it on first use."""
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = FlagRegistry()
    return _registry


def is_set(flag: FlagKey) -> bool:
    return get_registry().is_set(flag)


def set(flag: FlagKey) -> None:
    get_registry().set(flag)


def claim(flag: FlagKey) -> bool:
    return get_registry().claim(flag)


def once(flag: FlagKey, action: Action) -> None:
    get_registry().once(flag, action)


def once_exclusive(flag: FlagKey, action: Action) -> bool:
    return get_registry().once_exclusive(flag, action)


def run_if_set(flag: FlagKey, action: Action) -> None:
    get_registry().run_if_set(flag, action)


def run_if_unset(flag: FlagKey, action: Action) -> None:
    get_registry().run_if_unset(flag, action)
