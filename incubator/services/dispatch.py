"""Hand notification events to the background queue."""
from flask import current_app

from ..extensions import rq

# failed jobs whose payload holds a token or password leave Redis after this
SECRET_JOB_TTL_SECONDS = 300


def dispatch(events):
    """Enqueue one delivery job per event.

    Called after the triggering change has been committed. Failures are
    logged and never reach the caller.
    """
    # imported here so the jobs module can import the app factory lazily
    from ..jobs.notify import deliver_notification

    timeout = current_app.config.get("NOTIFY_TIMEOUT_SECONDS", 15)
    for event in events or ():
        options = {"job_timeout": timeout}
        if event.secret:
            options.update(result_ttl=0, failure_ttl=SECRET_JOB_TTL_SECONDS)
        try:
            rq.enqueue(deliver_notification, event.to_payload(), **options)
        except Exception:
            current_app.logger.exception("could not dispatch %s notification", event.kind)
