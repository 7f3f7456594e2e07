"""Dispatch engine: run every applicable rule module against one snapshot."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from jira_bot.core.config import RESOLUTION_FIELD
from jira_bot.core.errors import ModuleFailure, OperationNotNeeded
from jira_bot.core.models import Issue
from jira_bot.core.outcome import NO_ACTION_NEEDED, SUCCESS, Failed, ModuleOutcome
from jira_bot.modules.base import ModuleContext, RuleModule

logger = logging.getLogger(__name__)


def is_quiet_period(issue: Issue, bot_username: str | None) -> bool:
    """True right after a human resolved the issue and nobody commented since.

    Any comment updated after the resolution change re-enables automation.
    """
    if not issue.change_log:
        return False
    latest = issue.change_log[-1]
    if not any(item.field == RESOLUTION_FIELD for item in latest.items):
        return False
    author = latest.author.name if latest.author else None
    if author is not None and author == bot_username:
        return False
    return not any(c.updated > latest.created for c in issue.comments)


def is_whitelisted(whitelist: Sequence[str] | None, issue: Issue) -> bool:
    return issue.project_key in (whitelist or ())


def run_module(module: RuleModule, issue: Issue, context: ModuleContext) -> ModuleOutcome:
    try:
        module.evaluate(issue, context)
    except OperationNotNeeded:
        return NO_ACTION_NEEDED
    except ModuleFailure as exc:
        return Failed(exc.exceptions)
    except Exception as exc:
        return Failed((exc,))
    return SUCCESS


def dispatch(
    issue: Issue,
    context: ModuleContext,
    registry: Mapping[str, RuleModule],
    whitelists: Mapping[str, Sequence[str]],
    *,
    bot_username: str | None = None,
) -> dict[str, ModuleOutcome]:
    """Evaluate each registered module and map its name to its outcome.

    Returns an empty mapping during the post-resolution quiet period. A
    module whose whitelist excludes the issue's project is reported as
    ``NoActionNeeded`` without being run.
    """
    if is_quiet_period(issue, bot_username):
        logger.debug("[%s] Skipped: resolved by a human with no comment since", issue.key)
        return {}

    outcomes: dict[str, ModuleOutcome] = {}
    for name, module in registry.items():
        if not is_whitelisted(whitelists.get(name), issue):
            outcomes[name] = NO_ACTION_NEEDED
            continue
        outcomes[name] = run_module(module, issue, context)
    return outcomes
