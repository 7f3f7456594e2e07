"""Sensitive-content detector: leaked credentials and unredacted email addresses.

:meth:`PrivacyModule.detect` performs no writes and returns plain descriptors;
:meth:`PrivacyModule.evaluate` applies them. A leak in core fields, new
attachments or newly set change-log values makes the whole issue private;
a leak in a comment only restricts that comment, unless its author is
privileged.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from jira_bot.core.config import EMAIL_PATTERN, LEAK_PATTERNS, STAFF_GROUP
from jira_bot.core.models import Issue

from .base import ModuleContext, RuleModule, apply_all, assert_null, assert_true


@dataclass(frozen=True, slots=True)
class CommentRestriction:
    comment_id: str
    body: str


@dataclass(frozen=True, slots=True)
class PrivacyFindings:
    make_private: bool = False
    comment_restrictions: tuple[CommentRestriction, ...] = field(default_factory=tuple)

    @property
    def triggered(self) -> bool:
        return self.make_private or bool(self.comment_restrictions)


class PrivacyModule(RuleModule):
    name = "Privacy"

    def __init__(
        self,
        message: str,
        comment_note: str,
        allowed_emails: Iterable[str] = (),
        *,
        patterns: Sequence[str] = LEAK_PATTERNS,
    ):
        self.message = message
        self.comment_note = comment_note
        self.allowed_emails = [re.compile(p) for p in allowed_emails]
        self.patterns = [re.compile(p) for p in patterns]
        self.email_regex = re.compile(EMAIL_PATTERN)

    # ------------------ Matching ------------------
    def matches_patterns(self, text: str | None) -> bool:
        if not text:
            return False
        return any(p.search(text) for p in self.patterns)

    def matches_email(self, text: str | None) -> bool:
        if not text:
            return False
        for match in self.email_regex.finditer(text):
            email = match.group(0)
            if not any(allowed.fullmatch(email) for allowed in self.allowed_emails):
                return True
        return False

    def recent_content(self, issue: Issue, last_run: datetime) -> str:
        """Concatenate the content that appeared since ``last_run``."""
        parts: list[str] = []
        if issue.created > last_run:
            parts.extend([issue.summary or "", issue.environment or "", issue.description or ""])
        for attachment in issue.attachments:
            if attachment.created > last_run and attachment.mime_type.startswith("text/"):
                parts.append(attachment.get_text())
        for event in issue.change_events():
            if event.created > last_run and event.changed_from_string is None:
                parts.append(event.changed_to_string or "")
        return " ".join(parts)

    # ------------------ Detection ------------------
    def detect(self, issue: Issue, context: ModuleContext) -> PrivacyFindings:
        last_run = context.last_run
        content = self.recent_content(issue, last_run)
        make_private = self.matches_patterns(content) or self.matches_email(content)

        restrictions = []
        for comment in issue.comments:
            if comment.created <= last_run or comment.is_restricted:
                continue
            if not (self.matches_patterns(comment.body) or self.matches_email(comment.body)):
                continue
            if context.is_privileged(comment.author):
                continue
            restrictions.append(CommentRestriction(comment.id, f"{comment.body}{self.comment_note}"))

        return PrivacyFindings(make_private=make_private, comment_restrictions=tuple(restrictions))

    # ------------------ Evaluation ------------------
    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        # Already restricted: someone handled it
        assert_null(issue.security_level)

        findings = self.detect(issue, context)
        assert_true(findings.triggered)

        actions = context.actions
        steps = []
        if findings.make_private:
            steps.append(lambda: actions.update_security(context.private_security_level))
            steps.append(lambda: actions.add_comment(self.message))
        for restriction in findings.comment_restrictions:
            steps.append(
                lambda r=restriction: actions.restrict_comment(r.comment_id, r.body, STAFF_GROUP)
            )
        apply_all(self.name, issue.key, steps)
