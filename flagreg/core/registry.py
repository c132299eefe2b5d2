import contextlib
import functools
import logging
from threading import Condition, RLock, get_ident
from typing import (
    Any,
    Callable,
    ContextManager,
    Dict,
    FrozenSet,
    Iterator,
    Optional,
)

from flagreg._storage import FlagStorageProtocol
from flagreg._types import Action, FlagKey
from flagreg.core.utils import (
    DEFAULT_PREFIX,
    _make_default_store,
    flag_name,
    locked_method,
    to_flag_key,
    validate_action,
)

logger = logging.getLogger(__name__)


class FlagRegistry:
    """
    Thread-safe registry of write-once boolean flags.

    A flag is either unset or set. Setting is idempotent and permanent:
    there is no way to clear a flag once it has been set.

    Raises:
        InvalidFlagError: If a flag is not str, bytes or bytearray.
        InvalidActionError: If an action is not callable.

    Examples:
        >>> flags = FlagRegistry()
        >>> flags.is_set("warmed_up")
        False
        >>> flags.once("warmed_up", lambda: print("warming up"))
        warming up
        >>> flags.once("warmed_up", lambda: print("warming up"))
        >>> flags.is_set("warmed_up")
        True
    """

    def __init__(
        self,
        *,
        lock: Optional[RLock] = None,
        log_level: Optional[int] = None,
        store: Optional[FlagStorageProtocol] = None,
        prefix: str = DEFAULT_PREFIX,
    ) -> None:
        """
        Initialize the FlagRegistry.

        Args:
            lock: An optional threading.RLock or similar object guarding the store.
            log_level: Logging level for the registry logger. Left untouched
                when not given.
            store: An optional storage backend implementing FlagStorageProtocol.
            prefix: Prefix prepended to every flag before it reaches the store.
                Registries sharing a store must use prefixes where none is the
                start of another, or their flags can overlap.

        Raises:
            TypeError: If the lock, store or prefix has the wrong type.
            ValueError: If log_level is not a valid logging level.

        Example:
            flags = FlagRegistry(log_level=logging.DEBUG)
        """
        if lock is not None and not all(
            hasattr(lock, method)
            for method in ("__enter__", "__exit__", "acquire", "release")
        ):
            raise TypeError("lock must be a threading.RLock or similar object")

        if log_level is not None and not (50 >= log_level >= 0):
            raise ValueError("log_level must be a valid logging level between 0 and 50")

        if store is not None and not isinstance(store, FlagStorageProtocol):
            raise TypeError("store must implement FlagStorageProtocol")

        if not isinstance(prefix, str):
            raise TypeError(f"prefix must be a string, got {type(prefix)}")

        self._lock: RLock = lock or RLock()
        self._store: FlagStorageProtocol = (
            store if store is not None else _make_default_store()
        )
        self._prefix = prefix
        # flag key -> thread running its once_exclusive action
        self._in_progress: Dict[str, int] = {}
        self._done = Condition(self._lock)
        if log_level is not None:
            logger.setLevel(log_level)

    @locked_method
    def is_set(self, flag: FlagKey) -> bool:
        """
        Return True if the flag has been set.

        Checking a flag never adds it to the store.
        """
        return to_flag_key(self._prefix, flag) in self._store

    @locked_method
    def set(self, flag: FlagKey) -> None:
        """
        Set the flag. Setting an already set flag is a no-op.
        """
        if self._store.add(to_flag_key(self._prefix, flag)):
            logger.debug("Flag %r set", flag_name(flag))

    @locked_method
    def claim(self, flag: FlagKey) -> bool:
        """
        Atomically set the flag and report whether this call set it.

        Exactly one caller gets True for a given flag, no matter how many
        threads race on it.
        """
        claimed = self._store.add(to_flag_key(self._prefix, flag))
        if claimed:
            logger.debug("Flag %r claimed", flag_name(flag))
        return claimed

    def once(self, flag: FlagKey, action: Action) -> None:
        """
        Run ``action`` and set the flag, unless the flag is already set.

        The check, the call and the set are separate steps and the registry
        lock is not held while ``action`` runs: concurrent callers may both
        see the flag unset and both run ``action``. Use ``once_exclusive``
        when the action must run exactly once.

        If ``action`` raises, the exception propagates and the flag stays
        unset, so the next call runs ``action`` again.
        """
        validate_action(action)
        if self.is_set(flag):
            return
        logger.debug("Running once-action for flag %r", flag_name(flag))
        action()
        self.set(flag)

    def once_exclusive(self, flag: FlagKey, action: Action) -> bool:
        """
        Run ``action`` exactly once for the flag, even under concurrency.

        The first caller marks the flag as in progress and runs ``action``
        without holding the registry lock; other callers for the same flag
        wait on the registry condition, which releases the registry lock
        (also one held through ``bulk``), and then find the flag set.
        Callers for other flags are not blocked.

        Returns:
            True if this call ran ``action``, False otherwise.

        Raises:
            RuntimeError: If ``action`` calls ``once_exclusive`` for its own flag.
            Whatever ``action`` raises. The flag stays unset and the next
            waiting caller retries.
        """
        validate_action(action)
        key = to_flag_key(self._prefix, flag)
        me = get_ident()

        with self._done:
            while key not in self._store:
                owner = self._in_progress.get(key)
                if owner is None:
                    break
                if owner == me:
                    raise RuntimeError(
                        f"once_exclusive re-entered for flag {flag_name(flag)!r}"
                    )
                self._done.wait()
            else:
                return False
            self._in_progress[key] = me

        try:
            logger.debug("Running exclusive once-action for flag %r", flag_name(flag))
            action()
            self.set(flag)
        finally:
            with self._done:
                del self._in_progress[key]
                self._done.notify_all()
        return True

    def run_if_set(self, flag: FlagKey, action: Action) -> None:
        """
        Run ``action`` only if the flag is set. Never changes the registry.
        """
        validate_action(action)
        if self.is_set(flag):
            action()

    def run_if_unset(self, flag: FlagKey, action: Action) -> None:
        """
        Run ``action`` only if the flag is not set.

        Unlike ``once``, the flag is not set afterwards.
        """
        validate_action(action)
        if not self.is_set(flag):
            action()

    def flagged(self, flag: FlagKey) -> Callable[[Callable[..., Any]], Callable[..., None]]:
        """
        Decorator running the wrapped function through ``once``.

        The decorated function returns None, like ``once`` itself.

        Usage:
            @flags.flagged("db_migrated")
            def migrate() -> None:
                ...
        """
        flag_name(flag)

        def decorator(func: Callable[..., Any]) -> Callable[..., None]:
            validate_action(func)

            @functools.wraps(func)
            def wrapper(*args: Any, **kwargs: Any) -> None:
                self.once(flag, lambda: func(*args, **kwargs))

            return wrapper

        return decorator

    @locked_method
    def snapshot(self) -> FrozenSet[str]:
        """
        Return the names of all set flags, without the internal prefix.
        """
        n = len(self._prefix)
        return frozenset(k[n:] for k in self._store.keys() if k.startswith(self._prefix))

    def bulk(self) -> ContextManager["FlagRegistry"]:
        """
        Context manager holding the registry lock across several calls.

        Usage:
            with flags.bulk() as f:
                if not f.is_set("a") and f.is_set("b"):
                    f.set("a")
        """

        @contextlib.contextmanager
        def _bulk_ctx() -> Iterator[FlagRegistry]:
            self._lock.acquire()
            try:
                yield self
            finally:
                self._lock.release()

        return _bulk_ctx()

    def __contains__(self, flag: object) -> bool:
        if not isinstance(flag, (str, bytes, bytearray)):
            return False
        return self.is_set(flag)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.snapshot()))

    def __len__(self) -> int:
        return len(self.snapshot())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({sorted(self.snapshot())!r})"
