"""Build the fixed module registry from settings."""

from __future__ import annotations

from jira_bot.core.config import MODULE_ORDER
from jira_bot.core.settings import BotSettings

from .attachment import AttachmentModule
from .base import RuleModule
from .chk import CHKModule
from .crash import CrashModule, parse_known_crashes
from .empty import EmptyModule
from .future_version import FutureVersionModule
from .hide_impostors import HideImpostorsModule
from .keep_private import KeepPrivateModule
from .meqs import RemoveNonStaffMeqsModule, RemoveTriagedMeqsModule
from .piracy import PiracyModule
from .privacy import PrivacyModule
from .reopen_awaiting import ReopenAwaitingModule
from .revoke_confirmation import RevokeConfirmationModule


def build_modules(settings: BotSettings) -> dict[str, RuleModule]:
    """Instantiate every module, keyed by name, in dispatch order."""
    fields = settings.custom_fields

    def opt(module: str, key: str, default=None):
        return settings.module(module).get(key, default)

    modules: list[RuleModule] = [
        AttachmentModule(opt("Attachment", "extension_blacklist", [])),
        CHKModule(fields.chk, fields.confirmation),
        ReopenAwaitingModule(),
        PiracyModule(opt("Piracy", "message", ""), opt("Piracy", "signatures", [])),
        RemoveTriagedMeqsModule(
            opt("RemoveTriagedMeqs", "meqs_tags", []),
            opt("RemoveTriagedMeqs", "removal_reason", ""),
            fields.mojang_priority,
            fields.triaged_time,
        ),
        FutureVersionModule(opt("FutureVersion", "message", "")),
        RemoveNonStaffMeqsModule(opt("RemoveNonStaffMeqs", "removal_reason", "")),
        EmptyModule(opt("Empty", "message", "")),
        CrashModule(
            crash_extensions=opt("Crash", "crash_extensions", ["txt", "log"]),
            known_crashes=parse_known_crashes(opt("Crash", "duplicates", [])),
            max_attachment_age_days=int(opt("Crash", "max_attachment_age", 30)),
            modded_message=opt("Crash", "modded_message", ""),
            duplicate_message=opt("Crash", "duplicate_message", ""),
        ),
        RevokeConfirmationModule(
            fields.confirmation,
            opt("RevokeConfirmation", "field_name", "Confirmation Status"),
        ),
        KeepPrivateModule(opt("KeepPrivate", "message", ""), opt("KeepPrivate", "tag")),
        HideImpostorsModule(),
        PrivacyModule(
            opt("Privacy", "message", ""),
            opt("Privacy", "comment_note", ""),
            opt("Privacy", "allowed_emails", []),
        ),
    ]
    by_name = {m.name: m for m in modules}
    return {name: by_name[name] for name in MODULE_ORDER if name in by_name}
