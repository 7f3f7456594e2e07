"""Rule module contract, evaluation context and precondition helpers.

A module's ``evaluate`` either returns normally (its effects were applied),
raises :class:`OperationNotNeeded` (its precondition was false) or raises any
other exception (it failed). The dispatch engine turns those three paths into
``Success``, ``NoActionNeeded`` and ``Failed`` outcomes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

import pytz

from jira_bot.core.config import PRIVILEGED_GROUPS, STAFF_GROUP
from jira_bot.core.errors import ModuleFailure, OperationNotNeeded
from jira_bot.core.models import Issue, Project, User

logger = logging.getLogger(__name__)

GroupLookup = Callable[[str | None], list[str] | None]


class Actions(Protocol):
    def add_comment(self, body: str) -> None: ...

    def restrict_comment(self, comment_id: str, body: str, group: str = STAFF_GROUP) -> None: ...

    def update_comment_body(self, comment_id: str, body: str) -> None: ...

    def delete_attachment(self, attachment_id: str) -> None: ...

    def resolve_as(self, resolution: str) -> None: ...

    def reopen(self) -> None: ...

    def link(self, link_type: str, target_key: str) -> None: ...

    def add_affected_version(self, version_id: str) -> None: ...

    def remove_affected_version(self, version_id: str) -> None: ...

    def update_field(self, field_key: str, value: Any) -> None: ...

    def update_security(self, level_id: str) -> None: ...


def _no_groups(_username: str | None) -> list[str] | None:
    return None


def _utcnow() -> datetime:
    return datetime.now(pytz.UTC)


@dataclass(slots=True)
class ModuleContext:
    last_run: datetime
    actions: Actions
    project: Project | None = None
    get_groups: GroupLookup = _no_groups
    private_security_level: str = ""
    now: datetime = field(default_factory=_utcnow)
    _groups_cache: dict[str | None, list[str] | None] = field(default_factory=dict, init=False, repr=False)

    def author_groups(self, user: User | None) -> list[str] | None:
        name = user.name if user else None
        if name not in self._groups_cache:
            self._groups_cache[name] = self.get_groups(name) if name else None
        return self._groups_cache[name]

    def is_privileged(self, user: User | None) -> bool:
        groups = self.author_groups(user)
        return any(g in PRIVILEGED_GROUPS for g in groups or ())


class RuleModule:
    """Base class for every rule module."""

    name: str = ""

    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


# ------------------ Preconditions ------------------
def assert_true(value: bool) -> None:
    if not value:
        raise OperationNotNeeded()


def assert_null(value: Any) -> None:
    if value is not None:
        raise OperationNotNeeded()


def assert_not_null(value: Any) -> None:
    if value is None:
        raise OperationNotNeeded()


def assert_not_empty(values: Sequence[Any]) -> None:
    if not values:
        raise OperationNotNeeded()


def assert_any(*conditions: bool) -> None:
    if not any(conditions):
        raise OperationNotNeeded()


def is_blank(text: str | None) -> bool:
    return text is None or not text.strip()


# ------------------ Side effects ------------------
def apply_all(module: str, issue_key: str, actions: Iterable[Callable[[], None]]) -> None:
    """Run every action, collecting failures instead of stopping at the first.

    Raises :class:`ModuleFailure` with every collected exception when at least
    one action failed.
    """
    pending = list(actions)
    failures: list[BaseException] = []
    for action in pending:
        try:
            action()
        except Exception as exc:
            failures.append(exc)
    if failures:
        logger.warning(
            "[%s] [%s] %d of %d action(s) failed",
            issue_key,
            module,
            len(failures),
            len(pending),
        )
        raise ModuleFailure(failures)
