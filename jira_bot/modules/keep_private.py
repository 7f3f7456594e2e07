"""Put issues tagged as private back to the private security level."""

from __future__ import annotations

from jira_bot.core.models import Issue

from .base import ModuleContext, RuleModule, assert_true


class KeepPrivateModule(RuleModule):
    name = "KeepPrivate"

    def __init__(self, message: str, tag: str | None):
        self.message = message
        self.tag = tag

    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        assert_true(bool(self.tag))
        tagged = any(c.body and self.tag in c.body for c in issue.comments)
        assert_true(tagged)
        assert_true(issue.security_level != context.private_security_level)
        context.actions.update_security(context.private_security_level)
        context.actions.add_comment(self.message)
