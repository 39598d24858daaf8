"""Background jobs for the session module."""

import logging

from lexistack_app.extensions import scheduler

from .services.session_service import PracticeSessionService

logger = logging.getLogger(__name__)


def cleanup_abandoned_sessions_job():
    """Scheduler entry point: delete empty sessions whose tab went away without teardown."""
    app = scheduler.app
    with app.app_context():
        max_age = app.config.get('PRACTICE_SNAPSHOT_TIMEOUT_MINUTES', 30)
        removed = PracticeSessionService.cleanup_abandoned_sessions(max_age)
        logger.info(f"Abandoned session sweep finished, {removed} removed")
