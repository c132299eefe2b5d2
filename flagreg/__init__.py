"""flagreg — write-once process-wide boolean flags.

This package exposes a thread-safe `FlagRegistry` of flags that can be set
but never cleared, plus helpers to run code once, or only when a flag is
(or is not) set. Module-level functions operate on a single process-wide
registry created on first use.
"""
from importlib.metadata import PackageNotFoundError, version as _pkg_version
from pathlib import Path
from typing import Optional

from flagreg._global import (
    claim,
    get_registry,
    is_set,
    once,
    once_exclusive,
    run_if_set,
    run_if_unset,
    set,
)
from flagreg._storage import (
    AbstractFlagStorage,
    FlagStorageProtocol,
    MemoryFlagStorage,
)
from flagreg.core import FlagRegistry
from flagreg.exceptions import FlagError, InvalidActionError, InvalidFlagError


def _read_version_file() -> Optional[str]:
    try:
        return Path(__file__).with_name("VERSION").read_text(encoding="utf8").strip()
    except OSError:
        return None


def _get_version() -> str:
    # 1) Try to read installed distribution metadata
    try:
        return _pkg_version("flagreg")
    except PackageNotFoundError:
        pass

    # 2) Try the VERSION file that setuptools_scm can write at build time
    v = _read_version_file()
    if v:
        return v

    # 3) Fall back to a safe default
    return "0.0.0"


__version__ = _get_version()


__all__ = [
    "FlagRegistry",
    "FlagStorageProtocol",
    "AbstractFlagStorage",
    "MemoryFlagStorage",
    "FlagError",
    "InvalidFlagError",
    "InvalidActionError",
    "get_registry",
    "is_set",
    "set",
    "claim",
    "once",
    "once_exclusive",
    "run_if_set",
    "run_if_unset",
    "__version__",
]
