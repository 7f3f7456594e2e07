"""Poll loop: search recent tickets, dispatch modules, cache no-op tickets."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta

import pytz

from jira_bot.core.config import MIN_PARALLEL_TICKETS, SEARCH_WINDOW_SECONDS
from jira_bot.core.outcome import Failed, ModuleOutcome, NoActionNeeded, Success, is_live
from jira_bot.core.service import IssueService
from jira_bot.core.settings import BotSettings
from jira_bot.modules.base import ModuleContext, RuleModule

from .cache import TicketCache
from .dispatch import dispatch

logger = logging.getLogger(__name__)

Outcomes = dict[str, ModuleOutcome]


def _utcnow() -> datetime:
    return datetime.now(pytz.UTC)


def log_outcomes(issue_key: str, outcomes: Mapping[str, ModuleOutcome]) -> None:
    for module, outcome in outcomes.items():
        if isinstance(outcome, Success):
            logger.info("[RESPONSE] [%s] [%s] Successful", issue_key, module)
        elif isinstance(outcome, NoActionNeeded):
            logger.info("[RESPONSE] [%s] [%s] Operation not needed", issue_key, module)
        elif isinstance(outcome, Failed):
            for exc in outcome.exceptions:
                logger.error("[RESPONSE] [%s] [%s] Failed", issue_key, module, exc_info=exc)


class PollLoop:
    """Owns the dedup cache and the last-run timestamp for the process lifetime."""

    def __init__(
        self,
        service: IssueService,
        registry: Mapping[str, RuleModule],
        settings: BotSettings,
        *,
        cache: TicketCache | None = None,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.service = service
        self.registry = registry
        self.settings = settings
        self.whitelists = settings.whitelists()
        self.cache = cache if cache is not None else TicketCache()
        self._now = now
        self.last_run: datetime = now() - timedelta(seconds=SEARCH_WINDOW_SECONDS)
        # Per-ticket scan start for tickets that were skipped or failed since last_run
        self._scan_from: dict[str, datetime] = {}

    # ------------------ Per Ticket ------------------
    def build_context(self, issue_key: str, project_key: str, last_run: datetime) -> ModuleContext:
        return ModuleContext(
            last_run=last_run,
            actions=self.service.actions_for(issue_key),
            project=self.service.fetch_project(project_key),
            get_groups=self.service.get_groups,
            private_security_level=self.settings.private_security_level.for_project(project_key),
            now=self._now(),
        )

    def process_ticket(self, issue_key: str, last_run: datetime) -> Outcomes:
        issue = self.service.fetch_snapshot(issue_key)
        context = self.build_context(issue.key, issue.project_key, last_run)
        outcomes = dispatch(
            issue,
            context,
            self.registry,
            self.whitelists,
            bot_username=self.service.bot_username,
        )
        log_outcomes(issue.key, outcomes)
        if not is_live(outcomes):
            self.cache.add(issue.key)
        return outcomes

    def _process_safely(self, issue_key: str, last_run: datetime) -> Outcomes | None:
        try:
            return self.process_ticket(issue_key, last_run)
        except Exception:
            logger.exception("[%s] Failed to process ticket", issue_key)
            return None

    # ------------------ Scan Window ------------------
    def scan_start(self, issue_key: str) -> datetime:
        """Start of the window the next pass over ``issue_key`` must cover."""
        return self._scan_from.get(issue_key, self.last_run)

    def _track_scan_starts(
        self,
        found: list[str],
        starts: Mapping[str, datetime],
        results: Mapping[str, Outcomes],
        cycle_start: datetime,
    ) -> None:
        for key in list(self._scan_from):
            if key not in found and key not in self.cache:
                del self._scan_from[key]
        for key, start in starts.items():
            # A failed pass keeps its window so the retry covers it
            self._scan_from[key] = cycle_start if key in results else start

    # ------------------ Cycle ------------------
    def run_cycle(self) -> dict[str, Outcomes] | None:
        """Run one poll cycle; None when the search itself failed."""
        cycle_start = self._now()
        try:
            keys = self.service.search_recent_keys(self.settings.issues.projects)
        except Exception:
            logger.exception("Failed to get issues")
            return None

        pending = self.cache.filter_new(keys)
        logger.debug("Found %d ticket(s), %d not cached", len(keys), len(pending))
        starts = {key: self.scan_start(key) for key in pending}
        results = self._process_all(starts)
        self._track_scan_starts(keys, starts, results, cycle_start)
        self.last_run = cycle_start
        return results

    def _process_all(self, starts: Mapping[str, datetime]) -> dict[str, Outcomes]:
        results: dict[str, Outcomes] = {}
        max_workers = max(1, self.settings.issues.max_workers)
        if len(starts) < MIN_PARALLEL_TICKETS or max_workers == 1:
            for key, last_run in starts.items():
                outcomes = self._process_safely(key, last_run)
                if outcomes is not None:
                    results[key] = outcomes
            return results

        # Tickets are independent; blocking HTTP calls run in threads
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = {pool.submit(self._process_safely, key, start): key for key, start in starts.items()}
            for fut in as_completed(futures):
                outcomes = fut.result()
                if outcomes is not None:
                    results[futures[fut]] = outcomes
        return results

    def run_forever(self, stop_event: threading.Event | None = None) -> None:
        stop_event = stop_event or threading.Event()
        interval = self.settings.issues.check_interval
        logger.info("Polling %s every %ss", ", ".join(self.settings.issues.projects), interval)
        while not stop_event.is_set():
            self.run_cycle()
            stop_event.wait(interval)
