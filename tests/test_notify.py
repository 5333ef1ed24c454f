from datetime import timedelta

import pytest

from incubator.extensions import db, rq
from incubator.jobs.expire_invites import run_expiry_sweep
from incubator.jobs.notify import build_message, deliver_notification
from incubator.models import Application, Notification, ReviewerAssignment, UserProfile
from incubator.services import mail
from incubator.services.dispatch import SECRET_JOB_TTL_SECONDS, dispatch
from incubator.services.events import DraftResumeLink, InviteExpired, ReviewerInvited, ReviewerResponded, UserWelcome
from incubator.utils.clock import utcnow


@pytest.fixture
def ctx(app):
    with app.app_context():
        manager = UserProfile(email_address="boss@example.com", full_name="Boss", role="manager")
        reviewer = UserProfile(email_address="rev@example.com", full_name="Rev <b>", role="reviewer")
        application = Application(team_name="Team Rocket", status="pending")
        db.session.add_all([manager, reviewer, application])
        db.session.commit()
        yield application, reviewer, manager


@pytest.fixture
def sent(monkeypatch):
    calls = []

    def fake_send(to, subject, html):
        calls.append((to, subject, html))
        return 202, "msg-1"

    monkeypatch.setattr(mail, "send_email", fake_send)
    return calls


def test_invite_goes_to_the_reviewer(ctx, sent):
    application, reviewer, _ = ctx
    dispatch([ReviewerInvited(application_id=application.id, reviewer_id=reviewer.id)])
    [(to, subject, html)] = sent
    assert to == ["rev@example.com"]
    assert subject == "You have been assigned to review: Team Rocket"
    assert "Rev &lt;b&gt;" in html

    row = Notification.query.one()
    assert row.type == "reviewer_invited"
    assert row.application_id == application.id
    assert row.provider_message_id == "msg-1"


def test_responses_go_to_managers(ctx, sent):
    application, reviewer, _ = ctx
    event = ReviewerResponded(application_id=application.id, reviewer_id=reviewer.id, accepted=False)
    deliver_notification(event.to_payload())
    [(to, subject, _)] = sent
    assert to == ["boss@example.com"]
    assert subject.startswith("Reviewer declined")


def test_expired_message(ctx):
    application, reviewer, _ = ctx
    to, subject, html, app_id = build_message(InviteExpired(application_id=application.id, reviewer_id=reviewer.id))
    assert to == ["boss@example.com"]
    assert subject.startswith("Reviewer invite auto-expired")
    assert "after 2 days" in html
    assert app_id == application.id


def test_welcome_body_is_not_stored(ctx, sent):
    _, reviewer, _ = ctx
    deliver_notification(UserWelcome(user_id=reviewer.id, password="S3cret!pw").to_payload())
    assert "S3cret!pw" in sent[0][2]
    assert Notification.query.one().body is None


def test_delivery_failures_do_not_propagate(ctx, monkeypatch):
    application, reviewer, _ = ctx

    def boom(*args):
        raise RuntimeError("provider down")

    monkeypatch.setattr(mail, "send_email", boom)
    dispatch([ReviewerInvited(application_id=application.id, reviewer_id=reviewer.id)])
    assert Notification.query.count() == 0


def test_no_api_key_skips_sending(ctx):
    application, reviewer, _ = ctx
    assert mail.send_email(["x@example.com"], "hi", "<p>hi</p>") is None
    assert deliver_notification(ReviewerInvited(application_id=application.id, reviewer_id=reviewer.id).to_payload()) is None


def test_expiry_sweep_commits_and_notifies(ctx, sent):
    application, reviewer, _ = ctx
    db.session.add(ReviewerAssignment(application_id=application.id, reviewer_id=reviewer.id,
                                      invite_status="pending", invited_at=utcnow() - timedelta(days=3)))
    db.session.commit()

    assert run_expiry_sweep() == 1
    assert ReviewerAssignment.query.one().invite_status == "rejected"
    assert [s[1] for s in sent] == ["Reviewer invite auto-expired: Rev <b> - Team Rocket"]
    assert run_expiry_sweep() == 0


def test_expire_invites_command(app, ctx):
    application, reviewer, _ = ctx
    db.session.add(ReviewerAssignment(application_id=application.id, reviewer_id=reviewer.id,
                                      invite_status="pending", invited_at=utcnow() - timedelta(hours=1)))
    db.session.commit()
    result = app.test_cli_runner().invoke(args=["expire-invites"])
    assert "expired 0 reviewer invite(s)" in result.output


def test_resume_token_is_mailed_but_not_stored(app, client, sent):
    resp = client.post("/api/applications/draft", json={"teamName": "Drafty", "email": "d@example.com"})
    token = resp.get_json()["data"]["resumeToken"]

    [(to, _, html)] = sent
    assert to == ["d@example.com"]
    assert f"token={token}" in html
    with app.app_context():
        row = Notification.query.one()
        assert row.type == "draft_resume_link"
        assert row.body is None
        assert not any(token in (n.body or "") for n in Notification.query.all())


def test_credential_jobs_do_not_linger_in_redis(ctx, monkeypatch):
    application, reviewer, _ = ctx
    calls = []
    monkeypatch.setattr(rq, "enqueue", lambda func, payload, **options: calls.append((payload["kind"], options)))

    dispatch([
        ReviewerInvited(application_id=application.id, reviewer_id=reviewer.id),
        DraftResumeLink(application_id=application.id, email="d@example.com", token="raw-token"),
        UserWelcome(user_id=reviewer.id, password="S3cret!pw"),
    ])
    options = dict(calls)
    assert "result_ttl" not in options["reviewer_invited"]
    for kind in ("draft_resume_link", "user_welcome"):
        assert options[kind]["result_ttl"] == 0
        assert options[kind]["failure_ttl"] == SECRET_JOB_TTL_SECONDS


def test_worker_needs_a_queue(app):
    result = app.test_cli_runner().invoke(args=["worker"])
    assert result.exit_code != 0
    assert "RQ is disabled" in result.output
