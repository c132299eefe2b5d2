from typing import Iterator, Protocol, runtime_checkable


@runtime_checkable
class FlagStorageProtocol(Protocol):
    """Minimal protocol describing the storage interface expected by FlagRegistry.

    Only the members `flagreg.core.FlagRegistry` uses are specified here.
    There is no way to remove a key: a stored flag is permanent.
    """

    def add(self, key: str) -> bool:  # pragma: no cover - interface
        ...

    def keys(self) -> Iterator[str]:  # pragma: no cover - interface
        ...

    def __len__(self) -> int:  # pragma: no cover - interface
        ...

    def __contains__(self, key: object) -> bool:  # pragma: no cover - interface
        ...
