"""Replace affected versions that have not been released yet."""

from __future__ import annotations

from jira_bot.core.models import Issue, Project, Version

from .base import ModuleContext, RuleModule, apply_all, assert_not_empty, assert_not_null


def latest_released(project: Project) -> Version | None:
    released = [v for v in project.versions if v.released and not v.archived]
    return released[-1] if released else None


class FutureVersionModule(RuleModule):
    name = "FutureVersion"

    def __init__(self, message: str):
        self.message = message

    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        removable = [v for v in issue.affected_versions if not v.released and not v.archived]
        assert_not_empty(removable)
        assert_not_null(context.project)
        latest = latest_released(context.project)
        assert_not_null(latest)

        actions = context.actions
        steps = []
        if all(v.id != latest.id for v in issue.affected_versions):
            steps.append(lambda: actions.add_affected_version(latest.id))
        steps.extend(lambda v=v: actions.remove_affected_version(v.id) for v in removable)
        steps.append(lambda: actions.add_comment(self.message))
        apply_all(self.name, issue.key, steps)
