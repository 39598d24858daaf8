# File: lexistack_app/modules/vocabulary/routes/api.py
from flask import current_app
from flask_login import login_required

from lexistack_app.core.error_handlers import DictionaryLookupError, NotFoundError, ValidationError, success_response
from lexistack_app.modules.ai_services.interface import get_extraction_client
from lexistack_app.modules.dictionary.interface import WordLookupClient
from lexistack_app.modules.shared.utils.request_payload import parse_json
from lexistack_app.schemas import AnalyzeRequest, TopicRequest

from .. import vocabulary_bp
from ..services.acquisition_service import VocabularyAcquisitionService


def _service():
    return VocabularyAcquisitionService(get_extraction_client(), WordLookupClient())


@vocabulary_bp.route('/lookup/<string:word>', methods=['GET'])
@login_required
def lookup(word):
    try:
        definition = WordLookupClient().lookup(word)
    except DictionaryLookupError:
        current_app.logger.warning(f"Dictionary lookup for '{word}' failed, reporting as not found")
        definition = None
    if definition is None:
        raise NotFoundError(f"No definition found for '{word}'", resource='word')
    return success_response(definition.model_dump())


@vocabulary_bp.route('/analyze', methods=['POST'])
@login_required
def analyze():
    payload = parse_json(AnalyzeRequest)
    if not payload.text.strip() and not payload.files:
        raise ValidationError('Provide some text or at least one file', errors={'text': 'required'})
    result = _service().analyze(payload.text, payload.files)
    return success_response(result)


@vocabulary_bp.route('/topic', methods=['POST'])
@login_required
def topic():
    payload = parse_json(TopicRequest)
    result = _service().generate_topic(payload.topic, payload.tuning_options)
    return success_response(result)
