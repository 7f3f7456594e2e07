"""Neutralise MEQS workflow tags that should no longer be acted upon."""

from __future__ import annotations

import re
from collections.abc import Iterable

from jira_bot.core.config import MEQS_PREFIX, MEQS_REMOVED_PREFIX, STAFF_GROUP
from jira_bot.core.models import Comment, Issue

from .base import ModuleContext, RuleModule, apply_all, assert_not_empty, assert_true

_ACTIVE_TAG = re.compile(rf"{MEQS_PREFIX}(?!{MEQS_REMOVED_PREFIX[len(MEQS_PREFIX):]})(\w+)")


def active_tags(body: str | None) -> list[str]:
    if not body:
        return []
    return [f"{MEQS_PREFIX}{m.group(1)}" for m in _ACTIVE_TAG.finditer(body)]


def remove_tags(body: str, tags: Iterable[str], reason: str) -> str:
    """Rename each tag to its ``MEQS_ARISA_REMOVED_`` form and append the reason."""
    wanted = set(tags)

    def _rename(match: re.Match) -> str:
        tag = match.group(0)
        if tag not in wanted:
            return tag
        return f"{MEQS_REMOVED_PREFIX}{match.group(1)}"

    return f"{_ACTIVE_TAG.sub(_rename, body)}\nRemoval Reason: {reason}"


class RemoveTriagedMeqsModule(RuleModule):
    """Once Mojang triaged an issue, community MEQS tags are obsolete."""

    name = "RemoveTriagedMeqs"

    def __init__(
        self,
        meqs_tags: Iterable[str],
        removal_reason: str,
        priority_field: str | None,
        triaged_time_field: str | None,
    ):
        self.meqs_tags = tuple(meqs_tags)
        self.removal_reason = removal_reason
        self.priority_field = priority_field
        self.triaged_time_field = triaged_time_field

    def _tags_in(self, comment: Comment) -> list[str]:
        return [t for t in active_tags(comment.body) if t in self.meqs_tags]

    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        triaged = (
            issue.get_option_value(self.priority_field) is not None
            or issue.get_field(self.triaged_time_field) is not None
        )
        assert_true(triaged)
        tagged = [(c, self._tags_in(c)) for c in issue.comments]
        tagged = [(c, tags) for c, tags in tagged if tags]
        assert_not_empty(tagged)
        apply_all(
            self.name,
            issue.key,
            [
                lambda c=c, tags=tags: context.actions.update_comment_body(
                    c.id, remove_tags(c.body or "", tags, self.removal_reason)
                )
                for c, tags in tagged
            ],
        )


class RemoveNonStaffMeqsModule(RuleModule):
    """MEQS tags are a staff tool; hide them when anyone else posts one."""

    name = "RemoveNonStaffMeqs"

    def __init__(self, removal_reason: str):
        self.removal_reason = removal_reason

    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        offending = [
            c
            for c in issue.comments
            if active_tags(c.body)
            and not (c.visibility_type == "group" and c.visibility_value == STAFF_GROUP)
            and not context.is_privileged(c.author)
        ]
        assert_not_empty(offending)
        apply_all(
            self.name,
            issue.key,
            [
                lambda c=c: context.actions.restrict_comment(
                    c.id,
                    remove_tags(c.body or "", active_tags(c.body), self.removal_reason),
                    STAFF_GROUP,
                )
                for c in offending
            ],
        )
