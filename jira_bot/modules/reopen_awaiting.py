"""Reopen issues resolved as Awaiting Response once someone answers."""

from __future__ import annotations

from datetime import timedelta

from jira_bot.core.config import AWAITING_RESPONSE, CREATION_GRACE_SECONDS
from jira_bot.core.models import Issue

from .base import ModuleContext, RuleModule, assert_true


class ReopenAwaitingModule(RuleModule):
    name = "ReopenAwaiting"

    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        assert_true(issue.resolution == AWAITING_RESPONSE)
        # Comments posted together with the report do not count as an answer
        threshold = max(context.last_run, issue.created + timedelta(seconds=CREATION_GRACE_SECONDS))
        answered = any(c.created > threshold and not c.is_restricted for c in issue.comments)
        assert_true(answered)
        context.actions.reopen()
