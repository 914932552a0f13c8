"""Launch-level exception types for entrylaunch."""

from __future__ import annotations


class LaunchError(Exception):
    """Base exception for entrylaunch."""

    def __init__(self, entry_name: str, message: str) -> None:
        super().__init__(message)
        self.entry_name = entry_name


class UsageError(LaunchError):
    """Raised when the launch arguments do not name an entry unit."""


class ResolutionError(LaunchError):
    """Base exception for entry resolution failures."""


class UnitNotFoundError(ResolutionError):
    """Raised when the named module, file or object does not exist."""


class EntryFunctionNotFoundError(ResolutionError):
    """Raised when the unit has no entry function accepting one argv list."""


class EntryShapeError(LaunchError):
    """Raised when the entry function needs an instance to be called."""


class EntryAccessError(LaunchError):
    """Raised when looking up the entry function is refused by the unit."""
