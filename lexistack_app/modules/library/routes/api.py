# File: lexistack_app/modules/library/routes/api.py
from flask import request
from flask_login import current_user, login_required

from lexistack_app.core.error_handlers import NotFoundError, ValidationError, success_response
from lexistack_app.models import CollectionWord
from lexistack_app.modules.shared.utils.request_payload import parse_json
from lexistack_app.schemas import CreateCollectionRequest, SaveWordsRequest

from .. import library_bp
from ..services.collection_service import CollectionStore


@library_bp.route('/collections', methods=['GET'])
@login_required
def list_collections():
    collections = CollectionStore.get_user_collections(current_user.user_id)
    return success_response([c.to_dict() for c in collections])


@library_bp.route('/collections', methods=['POST'])
@login_required
def create_collection():
    payload = parse_json(CreateCollectionRequest)
    collection = CollectionStore.create_collection(current_user.user_id, payload.name, payload.description)
    if collection is None:
        raise ValidationError(f"A collection named '{payload.name}' already exists", errors={'name': 'duplicate'})
    return success_response(collection.to_dict(), message='Collection created'), 201


@library_bp.route('/collections/<int:collection_id>/words', methods=['GET'])
@login_required
def collection_words(collection_id):
    collection = CollectionStore.get_owned_collection(collection_id, current_user.user_id)
    if collection is None:
        raise NotFoundError('Collection not found', resource='collection')
    entries = CollectionStore.get_collection_words(collection_id, current_user.user_id)
    return success_response({
        'collection': collection.to_dict(),
        'words': [entry.to_dict() for entry in entries],
    })


@library_bp.route('/collections/<int:collection_id>/words/<int:word_id>', methods=['DELETE'])
@login_required
def remove_word(collection_id, word_id):
    if not CollectionStore.remove_word_from_collection(collection_id, word_id, current_user.user_id):
        raise NotFoundError('Word not found in collection', resource='collection_word')
    return success_response(message='Word removed')


@library_bp.route('/collections/<int:collection_id>/words/<int:word_id>/status', methods=['PATCH'])
@login_required
def update_status(collection_id, word_id):
    data = request.get_json(silent=True) or {}
    status = data.get('status')
    if status not in CollectionWord.STATUSES:
        raise ValidationError('Invalid status', errors={'status': f"must be one of {', '.join(CollectionWord.STATUSES)}"})
    if not CollectionStore.update_word_status(collection_id, word_id, current_user.user_id, status):
        raise NotFoundError('Word not found in collection', resource='collection_word')
    return success_response({'status': status})


@library_bp.route('/save', methods=['POST'])
@login_required
def save_words():
    payload = parse_json(SaveWordsRequest)
    saved = CollectionStore.save_words(
        current_user.user_id,
        payload.collection_name,
        payload.words,
        description=payload.description,
    )
    return success_response(
        {'saved': saved, 'requested': len(payload.words)},
        message=f"Saved {saved} of {len(payload.words)} words to '{payload.collection_name}'",
    )


@library_bp.route('/words', methods=['GET'])
@login_required
def user_words():
    entries = CollectionStore.get_user_words(current_user.user_id)
    return success_response([entry.word.to_dict() for entry in entries])


@library_bp.route('/words/search', methods=['GET'])
@login_required
def search_words():
    return success_response(CollectionStore.search_words(request.args.get('q', '')))
