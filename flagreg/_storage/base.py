from abc import ABC, abstractmethod
from typing import Iterator


class AbstractFlagStorage(ABC):
    """Abstract base class for flag storage implementations."""

    @abstractmethod
    def add(self, key: str) -> bool:
        """Store ``key``; return True if it was not stored before."""

    @abstractmethod
    def keys(self) -> Iterator[str]:
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass

    @abstractmethod
    def __contains__(self, key: object) -> bool:
        pass
