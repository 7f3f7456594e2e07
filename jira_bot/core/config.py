"""Central configuration constants shared by the bot, the modules and the loop."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

# =============================================================================
# Jira Connection Settings
# =============================================================================
JIRA_DEFAULT_SERVER = "https://bugs.mojang.com"
DEFAULT_CONFIG_PATH = "config.yaml"
CONFIG_PATH_ENV = "JIRA_BOT_CONFIG"

# =============================================================================
# Polling
# =============================================================================
# The search window and the dedup TTL must stay consistent: a ticket cached
# after a no-op pass is reconsidered on roughly every other cycle.
SEARCH_WINDOW = "-5m"
SEARCH_WINDOW_SECONDS: int = 300
DEFAULT_CHECK_INTERVAL_SECONDS: int = 60
DEDUP_TTL_SECONDS: float = 290.0

# Parallel ticket processing tuning.
# Tracker calls are blocking HTTP; below the threshold stay sequential.
DEFAULT_MAX_WORKERS = 4
MIN_PARALLEL_TICKETS = 4

# Resolutions the poll query considers open
SEARCH_RESOLUTIONS: Sequence[str] = ("Unresolved", '"Awaiting Response"')

# Full snapshot fetch
ISSUE_FETCH_FIELDS = "*all"
ISSUE_FETCH_EXPAND = "changelog"

# =============================================================================
# Tracker Vocabulary
# =============================================================================
RESOLUTION_FIELD = "resolution"
AWAITING_RESPONSE = "Awaiting Response"
STAFF_GROUP = "staff"

# Authors in any of these groups are never auto-restricted or reverted
PRIVILEGED_GROUPS: frozenset[str] = frozenset(
    {
        "helper",
        "global-moderators",
        "staff",
    }
)

# Confirmation values that do not count as confirmed
UNCONFIRMED_STATUSES: frozenset[str] = frozenset({"Undefined", "Unconfirmed"})
DEFAULT_CONFIRMATION = "Unconfirmed"

# =============================================================================
# Sensitive Content Patterns
# =============================================================================
LEAK_PATTERNS: Sequence[str] = (
    r"\(Session ID is token:",
    r"--accessToken ey",
)

# `[~` prefixes a tracker user mention; such text is not an email address
EMAIL_PATTERN = r"(?<!\[~)\b[a-zA-Z0-9._-]+@[a-zA-Z0-9._-]+\.[a-zA-Z0-9.-]{2,15}\b"

# =============================================================================
# Module Defaults
# =============================================================================
MEQS_PREFIX = "MEQS_"
MEQS_REMOVED_PREFIX = "MEQS_ARISA_REMOVED_"

# Display names impersonating a role, e.g. "[Mod] Someone"
IMPOSTOR_NAME_PATTERN = r"^\[(?:\w|\s)+\]\s.+"
IMPOSTOR_LOOKBACK_SECONDS = 86400

# Comments and reopen checks closer than this to creation are ignored
CREATION_GRACE_SECONDS = 2

EMPTY_DESCRIPTION_TEMPLATE = "Put the summary of the bug you're having here"
EMPTY_ENVIRONMENT_TEMPLATE = "Put your operating system (Windows 7, Windows XP, OSX) and Java version if you know it here"

# Ordering used when no explicit registry order is configured
MODULE_ORDER: Sequence[str] = (
    "Attachment",
    "CHK",
    "ReopenAwaiting",
    "Piracy",
    "RemoveTriagedMeqs",
    "FutureVersion",
    "RemoveNonStaffMeqs",
    "Empty",
    "Crash",
    "RevokeConfirmation",
    "KeepPrivate",
    "HideImpostors",
    "Privacy",
)

# Modules that move issues to the private security level
PRIVATE_LEVEL_MODULES: Sequence[str] = ("KeepPrivate", "Privacy")


@dataclass(slots=True)
class LogSettings:
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    level: str = "INFO"


LOG_LEVELS: Sequence[str] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

LOGGING = LogSettings()
