from datetime import timedelta

from factories import AFTER, make_change, make_comment, make_context, make_issue

from jira_bot.core.errors import ModuleFailure, OperationNotNeeded, TrackerError
from jira_bot.core.outcome import Failed, NoActionNeeded, Success, is_live
from jira_bot.engine.dispatch import dispatch, is_quiet_period
from jira_bot.modules.base import RuleModule

BOT = "arisa"


class StubModule(RuleModule):
    def __init__(self, name, behaviour="success"):
        self.name = name
        self.behaviour = behaviour
        self.calls = 0

    def evaluate(self, issue, context):
        self.calls += 1
        if self.behaviour == "noop":
            raise OperationNotNeeded()
        if self.behaviour == "fail":
            raise TrackerError("boom")
        if self.behaviour == "multi":
            raise ModuleFailure([TrackerError("a"), TrackerError("b")])


def _resolved_by(author, *, at=AFTER):
    return make_change("resolution", "Invalid", created=at, author=author)


def test_quiet_period_after_human_resolution():
    issue = make_issue(change_log=[_resolved_by("moderator")])
    module = StubModule("A")
    outcomes = dispatch(issue, make_context(), {"A": module}, {"A": ["MC"]}, bot_username=BOT)
    assert outcomes == {}
    assert module.calls == 0


def test_comment_after_resolution_resumes_dispatch():
    resolved_at = AFTER
    comment = make_comment("1", "still happens", created=resolved_at + timedelta(minutes=1))
    issue = make_issue(change_log=[_resolved_by("moderator", at=resolved_at)], comments=[comment])
    assert not is_quiet_period(issue, BOT)
    outcomes = dispatch(issue, make_context(), {"A": StubModule("A")}, {"A": ["MC"]}, bot_username=BOT)
    assert isinstance(outcomes["A"], Success)


def test_comment_edited_after_resolution_resumes_dispatch():
    resolved_at = AFTER
    edited = make_comment(
        "1",
        "updated: still happens",
        created=resolved_at - timedelta(hours=1),
        updated=resolved_at + timedelta(seconds=30),
    )
    issue = make_issue(change_log=[_resolved_by("moderator", at=resolved_at)], comments=[edited])
    assert not is_quiet_period(issue, BOT)
    module = StubModule("A")
    dispatch(issue, make_context(), {"A": module}, {"A": ["MC"]}, bot_username=BOT)
    assert module.calls == 1


def test_comment_untouched_since_resolution_keeps_quiet_period():
    old = make_comment("1", "first report", created=AFTER - timedelta(hours=1))
    issue = make_issue(change_log=[_resolved_by("moderator")], comments=[old])
    assert is_quiet_period(issue, BOT)


def test_bot_resolution_and_other_changes_do_not_pause():
    assert not is_quiet_period(make_issue(change_log=[_resolved_by(BOT)]), BOT)
    assert not is_quiet_period(make_issue(change_log=[make_change("labels", "x")]), BOT)
    assert not is_quiet_period(make_issue(), BOT)


def test_only_latest_change_counts():
    later = make_change("labels", "crash", created=AFTER + timedelta(minutes=5))
    issue = make_issue(change_log=[_resolved_by("moderator"), later])
    assert not is_quiet_period(issue, BOT)


def test_non_whitelisted_module_is_not_run():
    module = StubModule("A")
    outcomes = dispatch(make_issue(), make_context(), {"A": module}, {"A": ["MCPE"]}, bot_username=BOT)
    assert isinstance(outcomes["A"], NoActionNeeded)
    assert module.calls == 0


def test_missing_whitelist_means_disabled():
    module = StubModule("A")
    outcomes = dispatch(make_issue(), make_context(), {"A": module}, {}, bot_username=BOT)
    assert isinstance(outcomes["A"], NoActionNeeded)
    assert module.calls == 0


def test_failure_does_not_abort_siblings():
    registry = {
        "Fail": StubModule("Fail", "fail"),
        "Multi": StubModule("Multi", "multi"),
        "Noop": StubModule("Noop", "noop"),
        "Ok": StubModule("Ok"),
    }
    whitelists = {name: ["MC"] for name in registry}
    outcomes = dispatch(make_issue(), make_context(), registry, whitelists, bot_username=BOT)
    assert isinstance(outcomes["Fail"], Failed)
    assert [str(e) for e in outcomes["Fail"].exceptions] == ["boom"]
    assert len(outcomes["Multi"].exceptions) == 2
    assert isinstance(outcomes["Noop"], NoActionNeeded)
    assert isinstance(outcomes["Ok"], Success)
    assert list(outcomes) == ["Fail", "Multi", "Noop", "Ok"]


def test_is_live_needs_one_success():
    assert is_live({"A": Failed(()), "B": Success()})
    assert not is_live({"A": Failed(()), "B": NoActionNeeded()})
    assert not is_live({})
