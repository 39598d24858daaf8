# File: lexistack_app/modules/practice/routes/api.py
from flask import request
from flask_login import current_user, login_required

from lexistack_app.core.error_handlers import NotFoundError, ValidationError, success_response

from .. import practice_bp
from ..services.engine_factory import build_flashcard_engine, build_quiz_engine


def _collection_id_from_body():
    data = request.get_json(silent=True) or {}
    collection_id = data.get('collection_id')
    if collection_id is None:
        return None
    try:
        return int(collection_id)
    except (TypeError, ValueError):
        raise ValidationError('collection_id must be an integer', errors={'collection_id': 'invalid'})


def _resumed(engine):
    if not engine.resume():
        raise NotFoundError('No practice session in progress', resource='practice_session')
    return engine


def _start(engine):
    # Restoring first lets start() close out a session still in progress
    engine.resume()
    engine.collection_id = _collection_id_from_body()
    started = engine.start()
    return success_response(engine.to_view(), message=None if started else 'Practice session not started')


# ── Flashcards ──────────────────────────────────────────────────────

@practice_bp.route('/flashcard', methods=['GET'])
@login_required
def flashcard_state():
    engine = build_flashcard_engine(current_user.user_id)
    engine.resume()
    return success_response(engine.to_view())


@practice_bp.route('/flashcard/start', methods=['POST'])
@login_required
def flashcard_start():
    return _start(build_flashcard_engine(current_user.user_id))


@practice_bp.route('/flashcard/flip', methods=['POST'])
@login_required
def flashcard_flip():
    engine = _resumed(build_flashcard_engine(current_user.user_id))
    engine.flip()
    return success_response(engine.to_view())


@practice_bp.route('/flashcard/next', methods=['POST'])
@login_required
def flashcard_next():
    engine = _resumed(build_flashcard_engine(current_user.user_id))
    engine.next()
    return success_response(engine.to_view())


@practice_bp.route('/flashcard/finish', methods=['POST'])
@login_required
def flashcard_finish():
    engine = _resumed(build_flashcard_engine(current_user.user_id))
    summary = engine.finish()
    return success_response({'summary': summary, 'notices': engine.notices}, message='Session complete')


@practice_bp.route('/flashcard/continue', methods=['POST'])
@login_required
def flashcard_continue():
    engine = _resumed(build_flashcard_engine(current_user.user_id))
    engine.continue_session()
    return success_response(engine.to_view())


@practice_bp.route('/flashcard/back', methods=['POST'])
@login_required
def flashcard_back():
    engine = build_flashcard_engine(current_user.user_id)
    engine.resume()
    show_acknowledgment = engine.back()
    return success_response({'show_acknowledgment': show_acknowledgment, 'notices': engine.notices})


# ── Quiz ────────────────────────────────────────────────────────────

@practice_bp.route('/quiz', methods=['GET'])
@login_required
def quiz_state():
    engine = build_quiz_engine(current_user.user_id)
    engine.resume()
    return success_response(engine.to_view())


@practice_bp.route('/quiz/start', methods=['POST'])
@login_required
def quiz_start():
    return _start(build_quiz_engine(current_user.user_id))


@practice_bp.route('/quiz/select', methods=['POST'])
@login_required
def quiz_select():
    data = request.get_json(silent=True) or {}
    option_index = data.get('option_index')
    if not isinstance(option_index, int) or isinstance(option_index, bool):
        raise ValidationError('option_index must be an integer', errors={'option_index': 'invalid'})

    engine = _resumed(build_quiz_engine(current_user.user_id))
    is_correct = engine.select_option(option_index)
    view = engine.to_view()
    view['is_correct'] = is_correct
    return success_response(view)


@practice_bp.route('/quiz/next', methods=['POST'])
@login_required
def quiz_next():
    engine = _resumed(build_quiz_engine(current_user.user_id))
    engine.next()
    return success_response(engine.to_view())


@practice_bp.route('/quiz/previous', methods=['POST'])
@login_required
def quiz_previous():
    engine = _resumed(build_quiz_engine(current_user.user_id))
    engine.previous()
    return success_response(engine.to_view())


@practice_bp.route('/quiz/hint', methods=['POST'])
@login_required
def quiz_hint():
    engine = _resumed(build_quiz_engine(current_user.user_id))
    engine.toggle_hint()
    return success_response(engine.to_view())


@practice_bp.route('/quiz/finish', methods=['POST'])
@login_required
def quiz_finish():
    engine = _resumed(build_quiz_engine(current_user.user_id))
    summary = engine.finish()
    return success_response({'summary': summary, 'notices': engine.notices}, message='Quiz complete')


@practice_bp.route('/quiz/continue', methods=['POST'])
@login_required
def quiz_continue():
    engine = _resumed(build_quiz_engine(current_user.user_id))
    engine.continue_session()
    return success_response(engine.to_view())


@practice_bp.route('/quiz/back', methods=['POST'])
@login_required
def quiz_back():
    engine = build_quiz_engine(current_user.user_id)
    engine.resume()
    show_acknowledgment = engine.back()
    return success_response({'show_acknowledgment': show_acknowledgment, 'notices': engine.notices})
