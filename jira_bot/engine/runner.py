"""Command-line entry point for the moderation bot."""

from __future__ import annotations

import argparse
import logging
import sys

from jira_bot.core.config import LOG_LEVELS, LOGGING
from jira_bot.core.errors import SettingsError
from jira_bot.core.jira_client import JiraAPI
from jira_bot.core.service import IssueService
from jira_bot.core.settings import load_settings
from jira_bot.modules.registry import build_modules

from .loop import PollLoop

logger = logging.getLogger("jira_bot")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Moderation automation for Jira issues.")
    parser.add_argument("--config", help="Path to the YAML settings file")
    parser.add_argument("--once", action="store_true", help="Run a single poll cycle and exit")
    parser.add_argument(
        "--log-level",
        default=LOGGING.level,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: %(default)s)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOGGING.format)

    try:
        settings = load_settings(args.config)
    except SettingsError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2
    if not settings.issues.projects:
        logger.error("No projects configured under issues.projects")
        return 2

    creds = settings.credentials
    api = JiraAPI(creds.server, creds.username, creds.token)
    logger.info("Connected to jira")

    loop = PollLoop(IssueService(api), build_modules(settings), settings)
    if args.once:
        return 0 if loop.run_cycle() is not None else 1
    try:
        loop.run_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
