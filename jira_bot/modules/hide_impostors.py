"""Hide comments from users whose display name pretends to a staff role."""

from __future__ import annotations

import re
from datetime import timedelta

from jira_bot.core.config import IMPOSTOR_LOOKBACK_SECONDS, IMPOSTOR_NAME_PATTERN, STAFF_GROUP
from jira_bot.core.models import Comment, Issue

from .base import ModuleContext, RuleModule, apply_all, assert_not_empty

_IMPOSTOR_NAME = re.compile(IMPOSTOR_NAME_PATTERN)


def looks_like_role_tag(display_name: str | None) -> bool:
    return bool(display_name and _IMPOSTOR_NAME.match(display_name.strip()))


class HideImpostorsModule(RuleModule):
    name = "HideImpostors"

    def _is_impostor(self, comment: Comment, context: ModuleContext) -> bool:
        author = comment.author
        if author is None or not looks_like_role_tag(author.display_name):
            return False
        return not context.is_privileged(author)

    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        since = context.now - timedelta(seconds=IMPOSTOR_LOOKBACK_SECONDS)
        impostors = [
            c
            for c in issue.comments
            if c.created > since and not c.is_restricted and self._is_impostor(c, context)
        ]
        assert_not_empty(impostors)
        apply_all(
            self.name,
            issue.key,
            [lambda c=c: context.actions.restrict_comment(c.id, c.body or "", STAFF_GROUP) for c in impostors],
        )
