"""Revert confirmation status changes made by users who may not make them."""

from __future__ import annotations

from jira_bot.core.config import DEFAULT_CONFIRMATION
from jira_bot.core.models import Issue

from .base import ModuleContext, RuleModule, assert_true


class RevokeConfirmationModule(RuleModule):
    name = "RevokeConfirmation"

    def __init__(self, confirmation_field: str | None, field_name: str = "Confirmation Status"):
        self.confirmation_field = confirmation_field
        # Change logs name custom fields by display name, not by key
        self.field_name = field_name

    def expected_status(self, issue: Issue, context: ModuleContext) -> str:
        """Last value set by a privileged user, or the default."""
        expected = DEFAULT_CONFIRMATION
        for event in issue.change_events():
            if event.field != self.field_name:
                continue
            if context.is_privileged(event.author):
                expected = event.changed_to_string or DEFAULT_CONFIRMATION
        return expected

    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        assert_true(bool(self.confirmation_field))
        current = issue.get_option_value(self.confirmation_field) or DEFAULT_CONFIRMATION
        expected = self.expected_status(issue, context)
        assert_true(current != expected)
        context.actions.update_field(self.confirmation_field, {"value": expected})
