"""Tri-state rule outcome: Success, NoActionNeeded or Failed with causes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Success:
    label = "Successful"


@dataclass(frozen=True, slots=True)
class NoActionNeeded:
    label = "Operation not needed"


@dataclass(frozen=True, slots=True)
class Failed:
    exceptions: tuple[BaseException, ...] = field(default_factory=tuple)
    label = "Failed"


ModuleOutcome = Success | NoActionNeeded | Failed

SUCCESS = Success()
NO_ACTION_NEEDED = NoActionNeeded()


def is_live(outcomes: Mapping[str, ModuleOutcome]) -> bool:
    """True when at least one module applied its effects.

    A ticket with no successful module is a dedup candidate, even if every
    other module failed.
    """
    return any(isinstance(o, Success) for o in outcomes.values())
