"""Domain snapshot models for Jira issues, comments, attachments and change logs."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


def _no_content() -> bytes:
    return b""


@dataclass(frozen=True, slots=True)
class User:
    name: str | None
    display_name: str | None = None


@dataclass(frozen=True, slots=True)
class Attachment:
    id: str
    filename: str
    mime_type: str
    created: datetime
    issue_key: str | None = None
    content_loader: Callable[[], bytes] = field(default=_no_content, repr=False, compare=False)

    def get_content(self) -> bytes:
        return self.content_loader()

    def get_text(self) -> str:
        return self.get_content().decode("utf-8", errors="replace")


@dataclass(frozen=True, slots=True)
class Comment:
    id: str
    author: User | None
    body: str | None
    created: datetime
    updated: datetime
    visibility_type: str | None = None
    visibility_value: str | None = None

    @property
    def is_restricted(self) -> bool:
        return self.visibility_type is not None


@dataclass(frozen=True, slots=True)
class ChangeLogItem:
    field: str
    from_string: str | None
    to_string: str | None


@dataclass(frozen=True, slots=True)
class ChangeLogEntry:
    author: User | None
    created: datetime
    items: tuple[ChangeLogItem, ...] = ()


@dataclass(frozen=True, slots=True)
class ChangeLogEvent:
    """One field change flattened together with its entry's author and time."""

    author: User | None
    created: datetime
    field: str
    changed_from_string: str | None
    changed_to_string: str | None


@dataclass(frozen=True, slots=True)
class Version:
    id: str
    name: str
    released: bool = False
    archived: bool = False
    release_date: datetime | None = None


@dataclass(frozen=True, slots=True)
class Project:
    key: str
    versions: tuple[Version, ...] = ()


@dataclass(frozen=True, slots=True)
class Issue:
    key: str
    project_key: str
    created: datetime
    updated: datetime
    summary: str | None = None
    description: str | None = None
    environment: str | None = None
    resolution: str | None = None
    security_level: str | None = None
    reporter: User | None = None
    attachments: tuple[Attachment, ...] = ()
    comments: tuple[Comment, ...] = ()
    change_log: tuple[ChangeLogEntry, ...] = ()
    affected_versions: tuple[Version, ...] = ()
    fields: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def change_events(self) -> list[ChangeLogEvent]:
        return [
            ChangeLogEvent(
                author=entry.author,
                created=entry.created,
                field=item.field,
                changed_from_string=item.from_string,
                changed_to_string=item.to_string,
            )
            for entry in self.change_log
            for item in entry.items
        ]

    def get_field(self, key: str | None) -> Any:
        if not key:
            return None
        return self.fields.get(key)

    def get_option_value(self, key: str | None) -> str | None:
        """Value of a select-list custom field (``{"value": ...}``) or a plain string."""
        raw = self.get_field(key)
        if isinstance(raw, dict):
            value = raw.get("value")
            return value if isinstance(value, str) else None
        if isinstance(raw, str):
            return raw
        return None
