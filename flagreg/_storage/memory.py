from typing import Iterator, Set

from flagreg._storage.base import AbstractFlagStorage


class MemoryFlagStorage(AbstractFlagStorage):
    """In-memory flag storage backed by a set. Callers provide the locking."""

    def __init__(self) -> None:
        self._keys: Set[str] = set()

    def add(self, key: str) -> bool:
        if key in self._keys:
            return False
        self._keys.add(key)
        return True

    def keys(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys
