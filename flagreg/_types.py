from typing import Any, Callable, Union

# Flags may be given as text or as raw bytes; both name the same key space.
FlagKey = Union[str, bytes, bytearray]

Action = Callable[[], Any]

__all__ = ["FlagKey", "Action"]
