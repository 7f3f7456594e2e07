"""Resolve reports that carry no information at all."""

from __future__ import annotations

from jira_bot.core.config import EMPTY_DESCRIPTION_TEMPLATE, EMPTY_ENVIRONMENT_TEMPLATE
from jira_bot.core.models import Issue

from .base import ModuleContext, RuleModule, assert_true, is_blank


def _is_placeholder(text: str | None, template: str) -> bool:
    return is_blank(text) or text.strip() == template


class EmptyModule(RuleModule):
    name = "Empty"

    def __init__(self, message: str):
        self.message = message

    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        assert_true(not issue.attachments)
        assert_true(_is_placeholder(issue.description, EMPTY_DESCRIPTION_TEMPLATE))
        assert_true(_is_placeholder(issue.environment, EMPTY_ENVIRONMENT_TEMPLATE))
        context.actions.resolve_as("Incomplete")
        context.actions.add_comment(self.message)
