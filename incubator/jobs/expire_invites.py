"""Periodic sweep that auto-rejects reviewer invites nobody answered."""
from datetime import timedelta

from flask import current_app

from ..extensions import db, rq
from ..services import reviewer_service
from ..services.dispatch import dispatch
from .notify import job_context


def run_expiry_sweep(now=None):
    """Run one sweep, commit, and announce each expired invite.

    Returns the number of invites that were expired.
    """
    days = current_app.config.get("REVIEWER_INVITE_EXPIRE_DAYS", 2)
    try:
        outcome = reviewer_service().expire_pending_invites(cutoff_days=days, now=now)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    if outcome.value:
        current_app.logger.info("expired %d reviewer invite(s)", outcome.value)
    dispatch(outcome.events)
    return outcome.value


def schedule_next_sweep():
    interval = current_app.config.get("REVIEWER_INVITE_SWEEP_INTERVAL_SECONDS", 3600)
    return rq.enqueue_in(timedelta(seconds=interval), expire_invites_job, job_id="expire-invites")


def expire_invites_job():
    """RQ job: one sweep, then queue the next run.

    The next run is scheduled even when this one fails, so a transient
    database error does not stop the cycle.
    """
    with job_context():
        try:
            return run_expiry_sweep()
        except Exception:
            current_app.logger.exception("reviewer invite expiry sweep failed")
            return None
        finally:
            schedule_next_sweep()
