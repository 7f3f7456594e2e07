"""Jira API client wrapper: search, snapshot fetches and remediation calls."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from jira import JIRA, JIRAError

from .config import ISSUE_FETCH_EXPAND, ISSUE_FETCH_FIELDS, STAFF_GROUP
from .errors import TrackerError

logger = logging.getLogger(__name__)


class JiraAPI:
    def __init__(self, server: str, username: str, token: str, *, client: JIRA | None = None):
        self.server = server.rstrip("/")
        self.username = username
        self.client = client or JIRA(basic_auth=(username, token), options={"server": self.server})

    # ------------------ Reads ------------------
    def search_issue_keys(self, jql: str) -> list[str]:
        try:
            issues = self.client.search_issues(jql, maxResults=False, fields="key")
        except JIRAError as exc:
            raise TrackerError(f"Search failed for {jql!r}: {exc}") from exc
        return [issue.key for issue in issues]

    def fetch_issue_raw(self, issue_key: str) -> dict[str, Any]:
        try:
            issue = self.client.issue(issue_key, fields=ISSUE_FETCH_FIELDS, expand=ISSUE_FETCH_EXPAND)
        except JIRAError as exc:
            raise TrackerError(f"Failed to fetch issue {issue_key}: {exc}") from exc
        if hasattr(issue, "raw"):
            return issue.raw
        if isinstance(issue, dict):
            return issue
        raise TrackerError(f"Unexpected issue payload type for {issue_key}: {type(issue)!r}")

    def fetch_project_raw(self, project_key: str) -> dict[str, Any]:
        try:
            project = self.client.project(project_key)
        except JIRAError as exc:
            raise TrackerError(f"Failed to fetch project {project_key}: {exc}") from exc
        raw = dict(getattr(project, "raw", {}) or {})
        if "versions" not in raw:
            raw["versions"] = [v.raw for v in getattr(project, "versions", []) or []]
        return raw

    def attachment_content(self, attachment_id: str) -> bytes:
        try:
            return self.client.attachment(attachment_id).get()
        except JIRAError as exc:
            raise TrackerError(f"Failed to download attachment {attachment_id}: {exc}") from exc

    def get_groups(self, username: str | None) -> list[str] | None:
        """Group names of a user, or None when the user cannot be resolved."""
        if not username:
            return None
        try:
            user = self.client.user(username, expand="groups")
        except JIRAError as exc:
            logger.warning("Failed to resolve groups of %s: %s", username, exc)
            return None
        groups = (getattr(user, "raw", {}) or {}).get("groups") or {}
        return [g.get("name") for g in groups.get("items", []) if g.get("name")]

    # ------------------ Mutations ------------------
    def add_comment(self, issue_key: str, body: str, *, restrict_to: str | None = None) -> None:
        visibility = {"type": "group", "value": restrict_to} if restrict_to else None
        self._call("add comment", issue_key, self.client.add_comment, issue_key, body, visibility=visibility)

    def update_comment(
        self,
        issue_key: str,
        comment_id: str,
        body: str,
        *,
        restrict_to: str | None = None,
    ) -> None:
        comment = self._call("get comment", issue_key, self.client.comment, issue_key, comment_id)
        visibility = {"type": "group", "value": restrict_to} if restrict_to else None
        self._call("update comment", issue_key, comment.update, body=body, visibility=visibility)

    def restrict_comment(self, issue_key: str, comment_id: str, body: str, group: str = STAFF_GROUP) -> None:
        self.update_comment(issue_key, comment_id, body, restrict_to=group)

    def delete_attachment(self, attachment_id: str) -> None:
        self._call("delete attachment", attachment_id, self.client.delete_attachment, attachment_id)

    def resolve_as(self, issue_key: str, resolution: str) -> None:
        transition = self._find_transition(issue_key, "Resolve Issue")
        self._call(
            "resolve",
            issue_key,
            self.client.transition_issue,
            issue_key,
            transition,
            fields={"resolution": {"name": resolution}},
        )

    def reopen(self, issue_key: str) -> None:
        transition = self._find_transition(issue_key, "Reopen Issue")
        self._call("reopen", issue_key, self.client.transition_issue, issue_key, transition)

    def link_issues(self, issue_key: str, link_type: str, target_key: str) -> None:
        self._call("link", issue_key, self.client.create_issue_link, link_type, issue_key, target_key)

    def add_affected_version(self, issue_key: str, version_id: str) -> None:
        self._update(issue_key, update={"versions": [{"add": {"id": version_id}}]})

    def remove_affected_version(self, issue_key: str, version_id: str) -> None:
        self._update(issue_key, update={"versions": [{"remove": {"id": version_id}}]})

    def update_field(self, issue_key: str, field_key: str, value: Any) -> None:
        if isinstance(value, datetime):
            value = value.strftime("%Y-%m-%dT%H:%M:%S.000%z")
        self._update(issue_key, fields={field_key: value})

    def update_security(self, issue_key: str, level_id: str) -> None:
        self._update(issue_key, fields={"security": {"id": level_id}})

    # ------------------ Internal Helpers ------------------
    def _update(self, issue_key: str, **kwargs) -> None:
        issue = self._call("get issue", issue_key, self.client.issue, issue_key, fields="key")
        self._call("update issue", issue_key, issue.update, notify=False, **kwargs)

    def _find_transition(self, issue_key: str, name: str) -> str:
        transitions = self._call("list transitions", issue_key, self.client.transitions, issue_key)
        for t in transitions:
            if t.get("name") == name:
                return t["id"]
        raise TrackerError(f"Transition {name!r} not available for {issue_key}")

    def _call(self, action: str, target: str, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except JIRAError as exc:
            raise TrackerError(f"Failed to {action} on {target}: {exc}") from exc


class IssueActions:
    """Remediation calls bound to a single issue key."""

    def __init__(self, api: JiraAPI, issue_key: str):
        self.api = api
        self.issue_key = issue_key

    def add_comment(self, body: str) -> None:
        self.api.add_comment(self.issue_key, body)

    def restrict_comment(self, comment_id: str, body: str, group: str = STAFF_GROUP) -> None:
        self.api.restrict_comment(self.issue_key, comment_id, body, group)

    def update_comment_body(self, comment_id: str, body: str) -> None:
        self.api.update_comment(self.issue_key, comment_id, body)

    def delete_attachment(self, attachment_id: str) -> None:
        self.api.delete_attachment(attachment_id)

    def resolve_as(self, resolution: str) -> None:
        self.api.resolve_as(self.issue_key, resolution)

    def reopen(self) -> None:
        self.api.reopen(self.issue_key)

    def link(self, link_type: str, target_key: str) -> None:
        self.api.link_issues(self.issue_key, link_type, target_key)

    def add_affected_version(self, version_id: str) -> None:
        self.api.add_affected_version(self.issue_key, version_id)

    def remove_affected_version(self, version_id: str) -> None:
        self.api.remove_affected_version(self.issue_key, version_id)

    def update_field(self, field_key: str, value: Any) -> None:
        self.api.update_field(self.issue_key, field_key, value)

    def update_security(self, level_id: str) -> None:
        self.api.update_security(self.issue_key, level_id)
