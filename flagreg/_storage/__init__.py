from .base import AbstractFlagStorage
from .memory import MemoryFlagStorage
from .protocol import FlagStorageProtocol

__all__ = ["AbstractFlagStorage", "MemoryFlagStorage", "FlagStorageProtocol"]
