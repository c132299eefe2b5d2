from flagreg.core.registry import FlagRegistry
from flagreg.core.utils import DEFAULT_PREFIX

__all__ = ["FlagRegistry", "DEFAULT_PREFIX"]
