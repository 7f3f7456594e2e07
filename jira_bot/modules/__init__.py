"""Rule modules evaluated against every polled issue."""

from jira_bot.modules.base import ModuleContext, RuleModule
from jira_bot.modules.privacy import CommentRestriction, PrivacyFindings, PrivacyModule
from jira_bot.modules.registry import build_modules

__all__ = [
    "CommentRestriction",
    "ModuleContext",
    "PrivacyFindings",
    "PrivacyModule",
    "RuleModule",
    "build_modules",
]
