"""IssueService: turns tracker search results and fetches into snapshots."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .config import SEARCH_RESOLUTIONS, SEARCH_WINDOW
from .jira_client import IssueActions, JiraAPI
from .mappers import map_issue, map_project
from .models import Issue, Project

logger = logging.getLogger(__name__)


def build_search_jql(projects: Sequence[str], window: str = SEARCH_WINDOW) -> str:
    resolutions = ", ".join(SEARCH_RESOLUTIONS)
    return f"project in ({', '.join(projects)}) AND resolution in ({resolutions}) AND updated >= {window}"


class IssueService:
    def __init__(self, api: JiraAPI):
        self.api = api

    @property
    def bot_username(self) -> str:
        return self.api.username

    def search_recent_keys(self, projects: Sequence[str]) -> list[str]:
        jql = build_search_jql(projects)
        logger.debug("Searching with %s", jql)
        return self.api.search_issue_keys(jql)

    def fetch_snapshot(self, issue_key: str) -> Issue:
        raw = self.api.fetch_issue_raw(issue_key)
        return map_issue(raw, fetch_content=self.api.attachment_content)

    def fetch_project(self, project_key: str) -> Project | None:
        """Full project (with versions); None when it cannot be fetched."""
        try:
            return map_project(self.api.fetch_project_raw(project_key))
        except Exception as exc:
            logger.error("Failed to get project %s: %s", project_key, exc)
            return None

    def actions_for(self, issue_key: str) -> IssueActions:
        return IssueActions(self.api, issue_key)

    def get_groups(self, username: str | None) -> list[str] | None:
        return self.api.get_groups(username)
