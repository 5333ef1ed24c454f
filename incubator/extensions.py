from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from redis import Redis
from rq import Queue
from flask import current_app

# RQ enqueue kwargs that are not meant for the job function itself
RQ_KEYS = {'job_id', 'job_timeout', 'timeout', 'at_front', 'depends_on', 'result_ttl', 'failure_ttl', 'ttl', 'meta', 'description'}


class RQWrapper:
    def __init__(self):
        self.redis = None
        self.queue = None

    def init_app(self, app):
        self.redis = None
        self.queue = None
        if not app.config.get("RQ_ENABLED", True):
            app.logger.info('RQ disabled, jobs run synchronously')
            return
        try:
            self.redis = Redis.from_url(app.config.get("REDIS_URL"))
            self.queue = Queue("default", connection=self.redis)
        except Exception:
            # no redis on this machine: run jobs inline instead
            app.logger.exception('Redis/RQ init failed, falling back to sync execution')
            self.redis = None
            self.queue = None

    def _run_inline(self, func, func_args, kwargs):
        safe_kwargs = {k: v for k, v in kwargs.items() if k not in RQ_KEYS}
        try:
            return func(*func_args, **safe_kwargs)
        except Exception:
            current_app.logger.exception('Synchronous job execution failed: %s', getattr(func, '__name__', func))
        return None

    def enqueue(self, func, *args, **kwargs):
        """Enqueue ``func`` on RQ, or call it inline when Redis is unavailable.

        Inline failures are logged and swallowed, so callers can treat this
        as fire-and-forget either way.
        """
        if not self.queue:
            return self._run_inline(func, args, kwargs)
        try:
            return self.queue.enqueue(func, *args, **kwargs)
        except Exception:
            current_app.logger.exception('RQ enqueue failed, falling back to sync execution')
            return self._run_inline(func, args, kwargs)

    def enqueue_in(self, delay, func, *args, **kwargs):
        """Schedule ``func`` after ``delay`` (a timedelta).

        Needs a worker started with the scheduler enabled. Returns None when
        there is no queue; there is nothing to run a delayed job inline.
        """
        if not self.queue:
            current_app.logger.info('No RQ queue, not scheduling %s', getattr(func, '__name__', func))
            return None
        try:
            return self.queue.enqueue_in(delay, func, *args, **kwargs)
        except Exception:
            current_app.logger.exception('RQ enqueue_in failed for %s', getattr(func, '__name__', func))
            return None


db = SQLAlchemy()
login_manager = LoginManager()
rq = RQWrapper()
