"""Stamp the CHK field the first time an issue gets confirmed."""

from __future__ import annotations

from jira_bot.core.config import UNCONFIRMED_STATUSES
from jira_bot.core.models import Issue

from .base import ModuleContext, RuleModule, assert_not_null, assert_null, assert_true


class CHKModule(RuleModule):
    name = "CHK"

    def __init__(self, chk_field: str | None, confirmation_field: str | None):
        self.chk_field = chk_field
        self.confirmation_field = confirmation_field

    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        assert_not_null(self.chk_field)
        confirmation = issue.get_option_value(self.confirmation_field)
        assert_not_null(confirmation)
        assert_true(confirmation not in UNCONFIRMED_STATUSES)
        assert_null(issue.get_field(self.chk_field))
        context.actions.update_field(self.chk_field, context.now)
