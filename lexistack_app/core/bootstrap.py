"""Bootstrap helpers for configuring the Flask application."""

from __future__ import annotations

import logging
import os

from flask import Flask

from ..extensions import csrf_protect, db, login_manager, scheduler
from .error_handlers import AuthenticationError
from .error_handlers import register_error_handlers as _register_error_handlers
from .logging_config import setup_logging
from .module_registry import register_default_modules


def configure_logging(app: Flask) -> None:
    """Configure package and Flask logging if no handlers are present."""

    if app.logger.handlers:
        return

    level = app.config.get("LOG_LEVEL", "INFO")
    setup_logging(
        app,
        log_level=level,
        log_dir=app.config.get("LOG_DIR"),
        json_format=app.config.get("LOG_JSON", False),
    )

    app.logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    app.logger.addHandler(handler)
    app.logger.propagate = False
    app.logger.info("Flask app logger configured successfully.")


def register_extensions(app: Flask) -> None:
    """Initialize shared extensions with the Flask app instance."""

    db.init_app(app)
    login_manager.init_app(app)
    csrf_protect.init_app(app)

    @login_manager.user_loader
    def load_user(user_id: str):
        from ..models import User

        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        raise AuthenticationError()


def register_error_handlers(app: Flask) -> None:
    """Render application errors as JSON envelopes."""

    _register_error_handlers(app)


def register_blueprints(app: Flask) -> None:
    """Register all default blueprints with the app."""

    register_default_modules(app)


def register_listeners(app: Flask) -> None:
    """Connect signal subscribers."""

    from ..modules.stats.listener import init_stats_listener

    init_stats_listener()


def initialize_database(app: Flask) -> None:
    """Create database tables."""

    from .. import models  # noqa: F401  (registers the model metadata)

    db.create_all()
    app.logger.info("Database tables are ready.")


def register_scheduled_jobs(app: Flask) -> None:
    """Start the background scheduler and the abandoned-session sweep."""

    if not app.config.get("SCHEDULER_ENABLED"):
        return

    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        # The reloader parent process must not run jobs
        return

    from apscheduler.schedulers import SchedulerAlreadyRunningError

    from ..modules.session.tasks import cleanup_abandoned_sessions_job

    try:
        scheduler.init_app(app)
        if not scheduler.get_job('cleanup_abandoned_sessions'):
            scheduler.add_job(
                id='cleanup_abandoned_sessions',
                func=cleanup_abandoned_sessions_job,
                trigger='interval',
                minutes=app.config.get('ABANDONED_SESSION_CLEANUP_MINUTES', 30),
                replace_existing=True,
            )
        if not scheduler.running:
            scheduler.start()
        app.logger.info("Scheduled job 'cleanup_abandoned_sessions' registered.")
    except SchedulerAlreadyRunningError:
        app.logger.info("Scheduler already running, skipping re-initialisation.")
    except Exception as e:
        app.logger.error(f"Failed to start scheduler: {e}")
