"""Exception taxonomy for modules, the tracker client and settings."""

from __future__ import annotations

from collections.abc import Iterable


class OperationNotNeeded(Exception):
    """A module's precondition was false. Not an error."""


class ModuleFailure(Exception):
    """One or more underlying faults occurred while a module ran."""

    def __init__(self, exceptions: Iterable[BaseException], message: str | None = None):
        self.exceptions: tuple[BaseException, ...] = tuple(exceptions)
        super().__init__(message or f"{len(self.exceptions)} action(s) failed")


class TrackerError(RuntimeError):
    """A tracker call failed or returned an unexpected payload."""


class SettingsError(ValueError):
    """The configuration file could not be read."""
