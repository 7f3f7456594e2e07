"""Delete attachments whose file extension is blacklisted."""

from __future__ import annotations

from collections.abc import Iterable

from jira_bot.core.models import Issue

from .base import ModuleContext, RuleModule, apply_all, assert_not_empty


class AttachmentModule(RuleModule):
    name = "Attachment"

    def __init__(self, extension_blacklist: Iterable[str]):
        self.extension_blacklist = tuple(e.lower().lstrip(".") for e in extension_blacklist)

    def is_blacklisted(self, filename: str) -> bool:
        lowered = filename.lower()
        return any(lowered.endswith(f".{ext}") for ext in self.extension_blacklist)

    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        offending = [a for a in issue.attachments if self.is_blacklisted(a.filename)]
        assert_not_empty(offending)
        apply_all(
            self.name,
            issue.key,
            [lambda a=a: context.actions.delete_attachment(a.id) for a in offending],
        )
