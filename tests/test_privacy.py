from dataclasses import replace

from factories import (
    AFTER,
    BEFORE,
    PRIVATE_LEVEL,
    RecordingActions,
    make_attachment,
    make_change,
    make_comment,
    make_context,
    make_issue,
)

from jira_bot.core.errors import TrackerError
from jira_bot.core.outcome import Failed, NoActionNeeded, Success
from jira_bot.engine.dispatch import run_module
from jira_bot.modules.privacy import CommentRestriction, PrivacyModule

MESSAGE = "This ticket has been made private."
NOTE = "\n(restricted)"


def _module(allowed=()):
    return PrivacyModule(MESSAGE, NOTE, allowed)


def test_restricted_issue_needs_no_action(actions):
    issue = make_issue(created=AFTER, summary="--accessToken eyJhbGci", security_level="10318")
    outcome = run_module(_module(), issue, make_context(actions))
    assert isinstance(outcome, NoActionNeeded)
    assert actions.calls == []


def test_access_token_in_new_summary_makes_issue_private(actions):
    issue = make_issue(created=AFTER, summary="works fine here `--accessToken eyJhbGciOiJIUzI1NiJ9`")
    outcome = run_module(_module(), issue, make_context(actions))
    assert isinstance(outcome, Success)
    assert actions.named("update_security") == [("update_security", PRIVATE_LEVEL)]
    assert actions.named("add_comment") == [("add_comment", MESSAGE)]


def test_several_matches_add_a_single_notice(actions):
    issue = make_issue(
        created=AFTER,
        summary="(Session ID is token:abc) --accessToken eyJ",
        description="mail me at someone@example.com",
    )
    run_module(_module(), issue, make_context(actions))
    assert len(actions.named("add_comment")) == 1
    assert len(actions.named("update_security")) == 1


def test_old_fields_are_not_rescanned(actions):
    issue = make_issue(created=BEFORE, summary="--accessToken eyJ")
    outcome = run_module(_module(), issue, make_context(actions))
    assert isinstance(outcome, NoActionNeeded)
    assert actions.calls == []


def test_comment_with_email_is_restricted_with_note(actions):
    comment = make_comment("7", "contact me at user@example.com for details")
    issue = make_issue(comments=[comment])
    outcome = run_module(_module(), issue, make_context(actions))
    assert isinstance(outcome, Success)
    assert actions.named("restrict_comment") == [
        ("restrict_comment", "7", f"contact me at user@example.com for details{NOTE}", "staff")
    ]
    assert actions.named("update_security") == []
    assert actions.named("add_comment") == []


def test_privileged_authors_are_never_restricted(actions):
    comment = make_comment("7", "--accessToken eyJ", author="helpful")
    issue = make_issue(comments=[comment])
    context = make_context(actions, groups={"helpful": ["users", "helper"]})
    outcome = run_module(_module(), issue, context)
    assert isinstance(outcome, NoActionNeeded)
    assert actions.calls == []


def test_old_and_already_restricted_comments_are_ignored(actions):
    old = make_comment("1", "user@example.com", created=BEFORE)
    hidden = make_comment("2", "user@example.com", visibility_type="group", visibility_value="staff")
    issue = make_issue(comments=[old, hidden])
    assert isinstance(run_module(_module(), issue, make_context(actions)), NoActionNeeded)


def test_empty_comment_body_does_not_match():
    issue = make_issue(comments=[make_comment("1", None), make_comment("2", "")])
    findings = _module().detect(issue, make_context())
    assert not findings.triggered


def test_user_mentions_are_not_emails():
    module = _module()
    assert not module.matches_email("thanks [~user@example.com] for the report")
    assert not module.matches_email("ping @someone about this")
    assert module.matches_email("write to user@example.com")


def test_allow_listed_emails_are_ignored():
    module = _module([r".+@mojang\.com"])
    assert not module.matches_email("contact support@mojang.com")
    assert module.matches_email("contact support@mojang.com or me@example.org")


def test_only_text_attachments_are_scanned():
    module = _module()
    text = make_attachment("1", mime_type="text/plain", content=b"--accessToken eyJ")
    upper = make_attachment("2", mime_type="Text/plain", content=b"--accessToken eyJ")
    image = make_attachment("3", mime_type="image/png", content=b"--accessToken eyJ")
    old = make_attachment("4", created=BEFORE, content=b"--accessToken eyJ")
    context = make_context()
    assert module.detect(make_issue(attachments=[text]), context).make_private
    assert not module.detect(make_issue(attachments=[upper, image, old]), context).make_private


def test_changelog_values_count_only_when_set():
    module = _module()
    context = make_context()
    set_value = make_change("environment", "user@example.com")
    edited = make_change("environment", "user@example.com", from_string="Windows")
    assert module.detect(make_issue(change_log=[set_value]), context).make_private
    assert not module.detect(make_issue(change_log=[edited]), context).make_private


def test_detect_returns_plain_descriptors_without_side_effects():
    actions = RecordingActions()
    issue = make_issue(created=AFTER, summary="me@example.com", comments=[make_comment("9", "me@example.com")])
    findings = _module().detect(issue, make_context(actions))
    assert findings.make_private
    assert findings.comment_restrictions == (CommentRestriction("9", f"me@example.com{NOTE}"),)
    assert actions.calls == []


def test_privatize_and_restrict_in_one_pass(actions):
    issue = make_issue(
        created=AFTER,
        description="(Session ID is token:123:abc)",
        comments=[make_comment("5", "reach me: a.b@example.net")],
    )
    outcome = run_module(_module(), issue, make_context(actions))
    assert isinstance(outcome, Success)
    assert len(actions.named("update_security")) == 1
    assert len(actions.named("restrict_comment")) == 1


def test_second_pass_on_privatized_issue_is_a_no_op(actions):
    issue = make_issue(created=AFTER, summary="--accessToken eyJ")
    module = _module()
    assert isinstance(run_module(module, issue, make_context(actions)), Success)
    privatized = replace(issue, security_level=PRIVATE_LEVEL)
    second = RecordingActions()
    assert isinstance(run_module(module, privatized, make_context(second)), NoActionNeeded)
    assert second.calls == []


def test_failed_restriction_reports_failure_but_applies_the_rest():
    actions = RecordingActions(fail_on={"restrict_comment"})
    issue = make_issue(created=AFTER, summary="--accessToken eyJ", comments=[make_comment("5", "x@example.com")])
    outcome = run_module(_module(), issue, make_context(actions))
    assert isinstance(outcome, Failed)
    assert all(isinstance(e, TrackerError) for e in outcome.exceptions)
    assert actions.named("update_security")
    assert actions.named("add_comment")
