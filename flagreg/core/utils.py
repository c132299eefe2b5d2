from typing import TYPE_CHECKING, Any, Callable

from flagreg._storage import FlagStorageProtocol, MemoryFlagStorage
from flagreg._types import FlagKey
from flagreg.exceptions import InvalidActionError, InvalidFlagError

if TYPE_CHECKING:  # pragma: no cover
    from .registry import FlagRegistry

DEFAULT_PREFIX = "flag:"


def locked_method(method: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to lock method calls for thread safety."""

    def wrapper(self: "FlagRegistry", *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return method(self, *args, **kwargs)

    wrapper.__name__ = method.__name__
    wrapper.__doc__ = method.__doc__
    return wrapper


def flag_name(flag: FlagKey) -> str:
    """Normalize a flag to text.

    Bytes map one byte to one character (latin-1), so decoding is total and
    ``b"abc"`` names the same flag as ``"abc"``.
    """
    if isinstance(flag, str):
        return flag
    if isinstance(flag, (bytes, bytearray)):
        return bytes(flag).decode("latin-1")
    raise InvalidFlagError(f"Flag must be str or bytes, got {type(flag)}")


def to_flag_key(prefix: str, flag: FlagKey) -> str:
    return prefix + flag_name(flag)


def validate_action(action: Any) -> None:
    if not callable(action):
        raise InvalidActionError(f"Action must be callable, got {type(action)}")


def _make_default_store() -> FlagStorageProtocol:
    return MemoryFlagStorage()
