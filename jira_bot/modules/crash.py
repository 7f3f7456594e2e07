"""Resolve crash reports that are modded or match a known crash."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import timedelta

from jira_bot.core.models import Issue

from .base import ModuleContext, RuleModule, apply_all, assert_not_empty, assert_true

CRASH_REPORT_HEADER = "---- Minecraft Crash Report ----"
MODDED_VALUES = ("Definitely", "Very likely")

_DESCRIPTION_LINE = re.compile(r"^Description: (?P<description>.*)$", re.MULTILINE)
_MODDED_LINE = re.compile(r"^\s*Is Modded: (?P<value>.*)$", re.MULTILINE)


@dataclass(frozen=True, slots=True)
class CrashReport:
    description: str
    exception: str
    modded: bool


@dataclass(frozen=True, slots=True)
class KnownCrash:
    exception_regex: re.Pattern
    duplicates: str


def parse_crash_report(text: str | None) -> CrashReport | None:
    """Parse a game crash report; None when ``text`` does not contain one."""
    if not text or CRASH_REPORT_HEADER not in text:
        return None
    body = text[text.index(CRASH_REPORT_HEADER) :]
    description_match = _DESCRIPTION_LINE.search(body)
    if description_match is None:
        return None
    # The exception is the first non-empty line after the description
    exception = ""
    for line in body[description_match.end() :].splitlines():
        if line.strip():
            exception = line.strip()
            break
    modded_match = _MODDED_LINE.search(body)
    modded = bool(modded_match and modded_match.group("value").startswith(MODDED_VALUES))
    return CrashReport(
        description=description_match.group("description").strip(),
        exception=exception,
        modded=modded,
    )


def parse_known_crashes(raw: Iterable[Mapping[str, str]]) -> list[KnownCrash]:
    return [
        KnownCrash(exception_regex=re.compile(entry["exception_regex"]), duplicates=entry["duplicates"])
        for entry in raw
    ]


class CrashModule(RuleModule):
    name = "Crash"

    def __init__(
        self,
        crash_extensions: Iterable[str],
        known_crashes: Iterable[KnownCrash],
        max_attachment_age_days: int,
        modded_message: str,
        duplicate_message: str,
    ):
        self.crash_extensions = tuple(e.lower().lstrip(".") for e in crash_extensions)
        self.known_crashes = list(known_crashes)
        self.max_attachment_age = timedelta(days=max_attachment_age_days)
        self.modded_message = modded_message
        self.duplicate_message = duplicate_message

    def _texts(self, issue: Issue, context: ModuleContext) -> list[str]:
        texts = [issue.description or ""]
        oldest = context.now - self.max_attachment_age
        for attachment in issue.attachments:
            extension = attachment.filename.rsplit(".", 1)[-1].lower() if "." in attachment.filename else ""
            if extension in self.crash_extensions and attachment.created > oldest:
                texts.append(attachment.get_text())
        return texts

    def find_duplicate(self, crashes: Iterable[CrashReport]) -> str | None:
        for crash in crashes:
            for known in self.known_crashes:
                if known.exception_regex.search(crash.exception):
                    return known.duplicates
        return None

    def evaluate(self, issue: Issue, context: ModuleContext) -> None:
        crashes = [c for c in (parse_crash_report(t) for t in self._texts(issue, context)) if c]
        assert_not_empty(crashes)

        actions = context.actions
        if any(c.modded for c in crashes):
            apply_all(
                self.name,
                issue.key,
                [lambda: actions.resolve_as("Invalid"), lambda: actions.add_comment(self.modded_message)],
            )
            return

        duplicate = self.find_duplicate(crashes)
        assert_true(duplicate is not None)
        apply_all(
            self.name,
            issue.key,
            [
                lambda: actions.link("Duplicate", duplicate),
                lambda: actions.resolve_as("Duplicate"),
                lambda: actions.add_comment(self.duplicate_message.replace("{DUPLICATE}", duplicate)),
            ],
        )
