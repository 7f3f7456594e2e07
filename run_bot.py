"""Convenience launcher for the moderation bot.

Usage:
  python run_bot.py --config config.yaml
  python run_bot.py --once

Credentials may come from ``JIRA_SERVER``, ``JIRA_USERNAME`` and
``JIRA_API_TOKEN`` instead of the config file, so real secrets stay out of
version control.
"""

import sys

from jira_bot.engine.runner import main

if __name__ == "__main__":
    sys.exit(main())
