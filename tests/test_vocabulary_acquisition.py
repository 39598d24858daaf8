import base64
import json
from unittest.mock import MagicMock, patch

import pytest
from google.api_core import exceptions as google_exceptions

from lexistack_app.core.error_handlers import ConfigurationError, DictionaryLookupError, ExtractionError
from lexistack_app.modules.ai_services.interface import ResponseParser, VocabularyExtractionClient
from lexistack_app.modules.vocabulary.services.acquisition_service import VocabularyAcquisitionService
from lexistack_app.schemas import ExtractionResult, FileInput, TopicExtractionResult, WordDefinition

GENAI = 'lexistack_app.modules.ai_services.gemini_client.genai'


def gemini_reply(payload):
    response = MagicMock()
    response.parts = ['part']
    response.text = payload if isinstance(payload, str) else json.dumps(payload)
    return response


def empty_reply():
    response = MagicMock()
    response.parts = []
    return response


class TestResponseParser:
    def test_fenced_json(self):
        text = '```json\n{"vocabulary": ["trip"]}\n```'
        assert ResponseParser.extract_json(text) == {'vocabulary': ['trip']}

    def test_json_embedded_in_prose(self):
        text = 'Here you go: {"vocabulary": ["trip"], "topics": []} Enjoy!'
        assert ResponseParser.extract_json(text)['vocabulary'] == ['trip']

    def test_non_object_is_rejected(self):
        assert ResponseParser.extract_json('["trip"]') is None
        assert ResponseParser.extract_json('no json here') is None
        assert ResponseParser.extract_json('') is None


class TestExtractionClient:
    def test_missing_key(self, app):
        with pytest.raises(ConfigurationError):
            VocabularyExtractionClient(api_key='')

    def test_models_are_comma_separated(self, app):
        client = VocabularyExtractionClient(model_name='first, second,,')
        assert client.models == ['first', 'second']

    def test_analyze_text_normalises_vocabulary(self, app):
        reply = {'vocabulary': ['Trip', ' trip ', '', 'luggage'], 'topics': ['travel'], 'content': '<mark>Trip</mark>'}
        with patch(GENAI) as genai:
            genai.GenerativeModel.return_value.generate_content.return_value = gemini_reply(reply)
            result = VocabularyExtractionClient().analyze_text('A trip with luggage.')

        assert result.vocabulary == ['Trip', 'luggage']
        assert result.topics == ['travel']
        genai.configure.assert_called_once_with(api_key='test-gemini-key')

    def test_falls_back_to_next_model(self, app):
        first, second = MagicMock(), MagicMock()
        first.generate_content.side_effect = google_exceptions.ResourceExhausted('quota')
        second.generate_content.return_value = gemini_reply({'vocabulary': ['trip']})

        with patch(GENAI) as genai:
            genai.GenerativeModel.side_effect = [first, second]
            result = VocabularyExtractionClient(model_name='a,b').analyze_text('trip')

        assert result.vocabulary == ['trip']
        assert [c.args[0] for c in genai.GenerativeModel.call_args_list] == ['a', 'b']

    def test_all_models_failing(self, app):
        with patch(GENAI) as genai:
            genai.GenerativeModel.return_value.generate_content.return_value = empty_reply()
            with pytest.raises(ExtractionError):
                VocabularyExtractionClient(model_name='a,b').analyze_text('trip')

    def test_rejected_key_stops_immediately(self, app):
        with patch(GENAI) as genai:
            genai.GenerativeModel.return_value.generate_content.side_effect = google_exceptions.PermissionDenied('bad key')
            with pytest.raises(ExtractionError):
                VocabularyExtractionClient(model_name='a,b').analyze_text('trip')

        assert genai.GenerativeModel.call_count == 1

    def test_unparseable_reply(self, app):
        with patch(GENAI) as genai:
            genai.GenerativeModel.return_value.generate_content.return_value = gemini_reply('I cannot help with that.')
            with pytest.raises(ExtractionError):
                VocabularyExtractionClient().analyze_text('trip')

    def test_files_are_attached(self, app):
        pdf = FileInput(name='notes.pdf', mime_type='application/pdf', data=base64.b64encode(b'%PDF').decode())
        txt = FileInput(name='notes.txt', mime_type='text/plain', data='luggage and tickets')

        with patch(GENAI) as genai:
            model = genai.GenerativeModel.return_value
            model.generate_content.return_value = gemini_reply({'vocabulary': ['luggage']})
            VocabularyExtractionClient().analyze_text('', [pdf, txt])

        parts = model.generate_content.call_args.args[0]
        assert 'luggage and tickets' in parts[0]
        assert parts[1] == {'mime_type': 'application/pdf', 'data': b'%PDF'}

    def test_invalid_base64_file(self, app):
        broken = FileInput(name='scan.png', mime_type='image/png', data='***')
        with pytest.raises(ExtractionError):
            VocabularyExtractionClient().analyze_text('', [broken])

    def test_topic_name_defaults_to_topic(self, app):
        with patch(GENAI) as genai:
            model = genai.GenerativeModel.return_value
            model.generate_content.return_value = gemini_reply({'vocabulary': ['hotel']})
            result = VocabularyExtractionClient().generate_topic_vocabulary('travel', {'max_words': 5, 'level': 'B1'})

        assert result.topic_name == 'travel'
        prompt = model.generate_content.call_args.args[0][0]
        assert 'at most 5 words' in prompt
        assert '- level: B1' in prompt

    def test_quiz_question_must_mark_the_word(self, app):
        reply = {'question': 'Where do you sleep?', 'options': ['hotel', 'trip'], 'correct_option_index': 1}
        with patch(GENAI) as genai:
            genai.GenerativeModel.return_value.generate_content.return_value = gemini_reply(reply)
            with pytest.raises(ExtractionError):
                VocabularyExtractionClient().generate_quiz_question('hotel', 'a place to stay', ['trip'])

    def test_quiz_question(self, app):
        reply = {'question': 'Where do you sleep?', 'options': ['trip', 'Hotel'], 'correct_option_index': 1, 'hint': 'rooms'}
        with patch(GENAI) as genai:
            genai.GenerativeModel.return_value.generate_content.return_value = gemini_reply(reply)
            question = VocabularyExtractionClient().generate_quiz_question('hotel', 'a place to stay', ['trip'])

        assert question['correct_option_index'] == 1
        assert question['hint'] == 'rooms'


class TestAcquisitionService:
    @pytest.fixture
    def lookup_client(self):
        def lookup(word):
            if word == 'broken':
                raise DictionaryLookupError('timeout')
            if word == 'unknown':
                return None
            if word == 'bare':
                return WordDefinition(word='bare', definitions=[])
            return WordDefinition(word=word, definitions=[{'meaning': f'meaning of {word}'}])

        client = MagicMock()
        client.lookup.side_effect = lookup
        return client

    def test_analyze_skips_words_without_definition(self, lookup_client):
        extraction = MagicMock()
        extraction.analyze_text.return_value = ExtractionResult(
            vocabulary=['trip', 'unknown', 'broken', 'bare'], topics=['travel'], content='text'
        )
        service = VocabularyAcquisitionService(extraction, lookup_client)

        result = service.analyze('some text')

        assert [d['word'] for d in result['definitions']] == ['trip']
        assert result['skipped'] == ['unknown', 'broken', 'bare']
        assert result['topics'] == ['travel']
        assert result['content'] == 'text'

    def test_generate_topic(self, lookup_client):
        extraction = MagicMock()
        extraction.generate_topic_vocabulary.return_value = TopicExtractionResult(
            vocabulary=['hotel'], topicName='Holidays'
        )
        service = VocabularyAcquisitionService(extraction, lookup_client)

        result = service.generate_topic('travel', {'level': 'A2'})

        assert result['topic_name'] == 'Holidays'
        assert result['definitions'][0]['definitions'][0]['meaning'] == 'meaning of hotel'
        extraction.generate_topic_vocabulary.assert_called_once_with('travel', {'level': 'A2'})

    def test_save_uses_named_collection(self, user):
        definitions = [
            WordDefinition(word='hotel', definitions=[{'meaning': 'a place to stay'}]),
        ]

        assert VocabularyAcquisitionService.save(user.user_id, 'Holidays', definitions) == 1
        assert VocabularyAcquisitionService.save(user.user_id, 'Holidays', definitions) == 1
