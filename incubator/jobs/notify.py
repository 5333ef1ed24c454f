from contextlib import contextmanager

from flask import current_app, has_app_context

from ..extensions import db
from ..models import Application, Notification, UserProfile
from ..services import mail
from ..services.events import (DraftResumeLink, InviteExpired, ReviewerInvited, ReviewerResponded, UserWelcome,
                               event_from_payload)
from ..utils.clock import utcnow


@contextmanager
def job_context():
    # `flask worker` runs inside a context; anything else gets a fresh app
    if has_app_context():
        yield
        return
    from .. import create_app
    with create_app().app_context():
        yield


def _manager_emails():
    rows = (UserProfile.query
            .filter(UserProfile.role == "manager", UserProfile.email_address.isnot(None))
            .order_by(UserProfile.email_address)
            .all())
    return [r.email_address for r in rows]


def _names(application_id, reviewer_id):
    application = db.session.get(Application, application_id)
    reviewer = db.session.get(UserProfile, reviewer_id)
    startup = (application.team_name if application else None) or "Startup"
    name = reviewer.full_name if reviewer and reviewer.full_name else "Reviewer"
    return startup, name, reviewer


def build_message(event):
    """Return ``(recipients, subject, html, application_id)`` for an event.

    ``recipients`` is empty when there is nobody to tell.
    """
    if isinstance(event, ReviewerInvited):
        startup, name, reviewer = _names(event.application_id, event.reviewer_id)
        to = [reviewer.email_address] if reviewer and reviewer.email_address else []
        subject, html = mail.reviewer_invite(name, startup)
        return to, subject, html, event.application_id

    if isinstance(event, ReviewerResponded):
        startup, name, _ = _names(event.application_id, event.reviewer_id)
        subject, html = mail.reviewer_response(name, startup, event.application_id, event.accepted)
        return _manager_emails(), subject, html, event.application_id

    if isinstance(event, InviteExpired):
        startup, name, _ = _names(event.application_id, event.reviewer_id)
        subject, html = mail.invite_expired(name, startup, event.application_id, event.expire_days)
        return _manager_emails(), subject, html, event.application_id

    if isinstance(event, DraftResumeLink):
        application = db.session.get(Application, event.application_id)
        subject, html = mail.draft_resume_link(application.team_name if application else None, event.token)
        return [event.email] if event.email else [], subject, html, event.application_id

    if isinstance(event, UserWelcome):
        user = db.session.get(UserProfile, event.user_id)
        if user is None:
            return [], None, None, None
        subject, html = mail.user_welcome(user.full_name, user.email_address, event.password, user.role)
        return [user.email_address], subject, html, None

    raise ValueError(f"no message for {event.kind}")


def deliver_notification(payload):
    """RQ job: send the email for one event and record it.

    Returns the id of the Notification row, or None when nothing was sent.
    """
    event = event_from_payload(payload)
    with job_context():
        to, subject, html, application_id = build_message(event)
        if not to:
            current_app.logger.info("no recipients for %s notification", event.kind)
            return None

        result = mail.send_email(to, subject, html)
        if result is None:
            return None
        status, message_id = result
        current_app.logger.info("sent %s notification to %d recipient(s), status %s", event.kind, len(to), status)

        body = None if event.secret else html
        n = Notification(application_id=application_id, type=event.kind, sent_to=", ".join(to),
                         subject=subject, body=body, provider_message_id=message_id or "",
                         sent_at=utcnow())
        try:
            db.session.add(n)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return n.id
