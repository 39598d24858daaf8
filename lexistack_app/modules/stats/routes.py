# File: lexistack_app/modules/stats/routes.py
from flask import request
from flask_login import current_user, login_required

from lexistack_app.core.error_handlers import success_response
from lexistack_app.modules.session.interface import PracticeSessionTracker

from . import stats_bp
from .services.progress_service import ProgressService


@stats_bp.route('/progress', methods=['GET'])
@login_required
def progress():
    return success_response(ProgressService.get_progress(current_user.user_id))


@stats_bp.route('/sessions', methods=['GET'])
@login_required
def sessions():
    limit = request.args.get('limit', 20, type=int)
    limit = max(1, min(limit, 100))
    history = PracticeSessionTracker.get_session_history(current_user.user_id, limit)
    return success_response([s.to_dict() for s in history])
