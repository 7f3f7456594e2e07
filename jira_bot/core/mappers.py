"""Mapping raw Jira issue/project JSON into immutable snapshot models."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from functools import partial
from typing import Any

import pandas as pd
import pytz

from .models import (
    Attachment,
    ChangeLogEntry,
    ChangeLogItem,
    Comment,
    Issue,
    Project,
    User,
    Version,
)

ContentFetcher = Callable[[str], bytes]

_EPOCH = datetime(1970, 1, 1, tzinfo=pytz.UTC)


def parse_dt(val) -> datetime | None:
    if not val:
        return None
    ts = pd.to_datetime(val, utc=True, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def _required_dt(val) -> datetime:
    return parse_dt(val) or _EPOCH


def map_user(raw: Any) -> User | None:
    if not isinstance(raw, dict):
        return None
    return User(
        name=raw.get("name") or raw.get("accountId"),
        display_name=raw.get("displayName"),
    )


def map_version(raw: dict[str, Any]) -> Version:
    return Version(
        id=str(raw.get("id")),
        name=raw.get("name") or "",
        released=bool(raw.get("released", False)),
        archived=bool(raw.get("archived", False)),
        release_date=parse_dt(raw.get("releaseDate")),
    )


def map_comment(raw: dict[str, Any]) -> Comment:
    visibility = raw.get("visibility") or {}
    created = _required_dt(raw.get("created"))
    return Comment(
        id=str(raw.get("id")),
        author=map_user(raw.get("author")),
        body=raw.get("body"),
        created=created,
        updated=parse_dt(raw.get("updated")) or created,
        visibility_type=visibility.get("type"),
        visibility_value=visibility.get("value"),
    )


def map_attachment(
    raw: dict[str, Any],
    issue_key: str | None = None,
    fetch_content: ContentFetcher | None = None,
) -> Attachment:
    attachment_id = str(raw.get("id"))
    kwargs: dict[str, Any] = {}
    if fetch_content is not None:
        kwargs["content_loader"] = partial(fetch_content, attachment_id)
    return Attachment(
        id=attachment_id,
        filename=raw.get("filename") or "",
        mime_type=raw.get("mimeType") or "",
        created=_required_dt(raw.get("created")),
        issue_key=issue_key,
        **kwargs,
    )


def map_changelog(raw: dict[str, Any] | None) -> tuple[ChangeLogEntry, ...]:
    histories = (raw or {}).get("histories", []) or []
    entries = []
    for h in histories:
        items = tuple(
            ChangeLogItem(
                field=it.get("field") or "",
                from_string=it.get("fromString"),
                to_string=it.get("toString"),
            )
            for it in h.get("items") or []
            if isinstance(it, dict)
        )
        entries.append(
            ChangeLogEntry(
                author=map_user(h.get("author")),
                created=_required_dt(h.get("created")),
                items=items,
            )
        )
    # Jira usually returns histories oldest first; do not rely on it
    entries.sort(key=lambda e: e.created)
    return tuple(entries)


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def map_issue(raw: dict[str, Any], fetch_content: ContentFetcher | None = None) -> Issue:
    fields = raw.get("fields", {}) or {}
    key = raw.get("key")
    project = fields.get("project") or {}
    comments_raw = (fields.get("comment") or {}).get("comments", []) or []
    comments = sorted((map_comment(c) for c in comments_raw), key=lambda c: c.created)
    attachments = tuple(
        map_attachment(a, issue_key=key, fetch_content=fetch_content)
        for a in fields.get("attachment", []) or []
    )
    return Issue(
        key=key,
        project_key=project.get("key") or (key.split("-")[0] if key else ""),
        created=_required_dt(fields.get("created")),
        updated=_required_dt(fields.get("updated")),
        summary=_text(fields.get("summary")),
        description=_text(fields.get("description")),
        environment=_text(fields.get("environment")),
        resolution=(fields.get("resolution") or {}).get("name") if fields.get("resolution") else None,
        security_level=str(fields["security"]["id"]) if fields.get("security") else None,
        reporter=map_user(fields.get("reporter")),
        attachments=attachments,
        comments=tuple(comments),
        change_log=map_changelog(raw.get("changelog")),
        affected_versions=tuple(map_version(v) for v in fields.get("versions", []) or []),
        fields=dict(fields),
    )


def map_project(raw: dict[str, Any]) -> Project:
    return Project(
        key=raw.get("key") or "",
        versions=tuple(map_version(v) for v in raw.get("versions", []) or []),
    )
