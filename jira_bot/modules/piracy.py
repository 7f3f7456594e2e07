"""Resolve issues whose report carries a known piracy signature."""

from __future__ import annotations

from collections.abc import Iterable

from jira_bot.core.models import Issue

from .base import ModuleContext, RuleModule, assert_true


class PiracyModule(RuleModule):
    name = "Piracy"

    def __init__(self, message: str, signatures: Iterable[str]):
        self.message = message
        self.signatures = tuple(s for s in signatures if s)

    def matches(self, issue: Issue) -> bool:
        for text in (issue.environment, issue.summary, issue.description):
            if text and any(sig in text for sig in self.signatures):
                return True
        return False

    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        assert_true(self.matches(issue))
        context.actions.resolve_as("Invalid")
        context.actions.add_comment(self.message)
