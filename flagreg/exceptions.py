class FlagError(Exception):
    """Base class for errors raised by flagreg."""


class InvalidFlagError(FlagError, TypeError):
    """Raised when a flag is neither ``str`` nor ``bytes``."""


class InvalidActionError(FlagError, TypeError):
    """Raised when an action passed to a conditional helper is not callable."""


__all__ = ["FlagError", "InvalidFlagError", "InvalidActionError"]
