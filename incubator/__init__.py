import logging

import click
from flask import Flask, jsonify
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError

from .errors import Dependency, ServiceError
from .extensions import db, login_manager, rq

migrate = Migrate(directory="alembic")


def create_app(config_object="config.Config"):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    rq.init_app(app)

    from . import models  # noqa: F401  register tables on db.metadata

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(models.UserProfile, user_id)

    @login_manager.request_loader
    def load_user_from_request(request):
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        from .services import user_service
        return user_service().resolve_token(token.strip())

    from .api.applications import bp as applications_bp
    from .api.auth import bp as auth_bp
    from .api.evaluations import bp as evaluations_bp
    from .api.users import bp as users_bp
    app.register_blueprint(applications_bp)
    app.register_blueprint(evaluations_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(auth_bp)

    _register_error_handlers(app)
    _register_commands(app)

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.get("/api")
    def index():
        return jsonify({
            "name": "incubator",
            "endpoints": ["/api/applications", "/api/evaluations", "/api/users", "/api/auth/token"],
        })

    if app.config.get("SWEEP_ON_STARTUP"):
        _start_expiry_sweep(app)

    return app


def _register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def handle_service_error(err):
        if err.status_code >= 500:
            app.logger.error("%s: %s", err.category, err.detail)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(err):
        db.session.rollback()
        app.logger.exception("database error")
        err = Dependency("Database operation failed")
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(404)
    def handle_not_found(_):
        return jsonify({"error": "not_found", "detail": "Route not found"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(_):
        return jsonify({"error": "method_not_allowed", "detail": "Method not allowed"}), 405

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        return jsonify({"error": "unauthorized", "detail": "Missing or invalid bearer token"}), 401


def _register_commands(app):
    @app.cli.command("expire-invites")
    def expire_invites_command():
        """Auto-reject reviewer invites left unanswered too long."""
        from .jobs.expire_invites import run_expiry_sweep
        count = run_expiry_sweep()
        click.echo(f"expired {count} reviewer invite(s)")

    @app.cli.command("create-manager")
    @click.argument("email")
    @click.argument("full_name")
    def create_manager_command(email, full_name):
        """Create a manager account and print its one-time password."""
        from .services import user_service
        from .services.dispatch import dispatch
        try:
            outcome = user_service().create_user(email, full_name, "manager")
        except ServiceError as err:
            raise click.ClickException(err.detail)
        db.session.commit()
        dispatch(outcome.events)
        user, password = outcome.value
        click.echo(f"created manager {user.id} ({user.email_address}) password: {password}")

    @app.cli.command("worker")
    def worker_command():
        """Run an RQ worker for the notification and expiry jobs."""
        from rq import Worker
        if rq.queue is None:
            raise click.ClickException("RQ is disabled or Redis is unavailable")
        # the scheduler runs the expiry sweep queued with enqueue_in
        Worker([rq.queue], connection=rq.redis).work(with_scheduler=True,
                                                     logging_level=app.config.get("LOG_LEVEL", "INFO"))


def _start_expiry_sweep(app):
    from .jobs.expire_invites import expire_invites_job
    with app.app_context():
        # one fixed job id, so restarts do not start parallel sweep chains
        rq.enqueue(expire_invites_job, job_id="expire-invites")
