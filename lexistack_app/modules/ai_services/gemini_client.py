# File: lexistack_app/modules/ai_services/gemini_client.py
# Gemini access for vocabulary extraction and quiz questions, with model fallback.

import base64
import binascii

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from flask import current_app
from pydantic import ValidationError as PydanticValidationError

from lexistack_app.core.error_handlers import ConfigurationError, ExtractionError
from lexistack_app.schemas import ExtractionResult, QuizQuestion, TopicExtractionResult

from .prompts import (
    DEFAULT_MAX_WORDS,
    QUIZ_QUESTION_PROMPT,
    TEXT_ANALYSIS_PROMPT,
    TOPIC_PROMPT,
    format_tuning,
)
from .response_parser import ResponseParser


class VocabularyExtractionClient:
    """
    Client for the Gemini API.

    ``model_name`` may list several models separated by commas; when one
    fails (quota, outage, empty answer) the next one is tried.
    """

    def __init__(self, api_key=None, model_name=None):
        config = current_app.config
        self.api_key = api_key if api_key is not None else config.get('GEMINI_API_KEY')
        self.model_name = model_name or config.get('GEMINI_MODEL', 'gemini-2.0-flash')
        if not self.api_key:
            raise ConfigurationError('Gemini API key is not configured', setting='GEMINI_API_KEY')

    @property
    def models(self):
        return [m.strip() for m in self.model_name.split(',') if m.strip()]

    def generate_content(self, parts):
        """Send ``parts`` to the first model that answers. Returns the response text."""
        genai.configure(api_key=self.api_key)
        models_to_try = self.models
        last_error = None

        for index, model_name in enumerate(models_to_try):
            current_app.logger.info(f"GeminiClient: [Model {index + 1}/{len(models_to_try)}] trying '{model_name}'")
            try:
                model = genai.GenerativeModel(model_name)
                response = model.generate_content(parts)
                if response.parts:
                    if index > 0:
                        current_app.logger.info(f"GeminiClient: fell back to model '{model_name}'")
                    return response.text
                last_error = f"empty response ({response.prompt_feedback})"
                current_app.logger.warning(f"GeminiClient: model '{model_name}' returned no content")
            except google_exceptions.PermissionDenied as e:
                # A rejected key fails every model the same way
                current_app.logger.error(f"GeminiClient: API key rejected: {e}")
                raise ExtractionError('The Gemini API key was rejected') from e
            except google_exceptions.GoogleAPIError as e:
                last_error = str(e)
                current_app.logger.warning(f"GeminiClient: model '{model_name}' failed: {e}")
            except Exception as e:
                last_error = str(e)
                current_app.logger.error(f"GeminiClient: unexpected error with '{model_name}': {e}", exc_info=True)

        raise ExtractionError(f"All Gemini models failed. Last error: {last_error}")

    def _generate_json(self, parts):
        text = self.generate_content(parts)
        data = ResponseParser.extract_json(text)
        if data is None:
            current_app.logger.warning(f"GeminiClient: response is not JSON: {text[:200]!r}")
            raise ExtractionError('The AI response could not be parsed')
        return data

    # ── Vocabulary extraction ──────────────────────────────────────

    @staticmethod
    def _file_parts(files):
        """Inline text files into the prompt text; pass other files as binary blobs."""
        texts, blobs = [], []
        for item in files or []:
            mime_type = item.mime_type or 'text/plain'
            if mime_type.startswith('text/'):
                texts.append(item.data)
                continue
            try:
                blobs.append({'mime_type': mime_type, 'data': base64.b64decode(item.data, validate=True)})
            except (binascii.Error, ValueError) as e:
                raise ExtractionError(f"File '{item.name or 'upload'}' is not valid base64") from e
        return texts, blobs

    def analyze_text(self, text, files=None):
        """Pick study vocabulary from text and/or files. Returns an ``ExtractionResult``."""
        texts, blobs = self._file_parts(files)
        material = '\n\n'.join(t for t in [text or ''] + texts if t.strip())
        if not material and not blobs:
            raise ExtractionError('Nothing to analyze')

        prompt = TEXT_ANALYSIS_PROMPT.format(
            text=material or '(see the attached files)',
            max_words=DEFAULT_MAX_WORDS,
        )
        data = self._generate_json([prompt] + blobs)
        try:
            return ExtractionResult.model_validate(data)
        except PydanticValidationError as e:
            raise ExtractionError('The AI response has an unexpected shape') from e

    def generate_topic_vocabulary(self, topic, tuning_options=None):
        """Generate vocabulary about a topic. Returns a ``TopicExtractionResult``."""
        tuning_options = dict(tuning_options or {})
        max_words = tuning_options.pop('max_words', DEFAULT_MAX_WORDS)
        prompt = TOPIC_PROMPT.format(topic=topic, tuning=format_tuning(tuning_options), max_words=max_words)
        data = self._generate_json([prompt])
        try:
            result = TopicExtractionResult.model_validate(data)
        except PydanticValidationError as e:
            raise ExtractionError('The AI response has an unexpected shape') from e
        if not result.topic_name:
            result.topic_name = topic
        return result

    # ── Quiz questions ─────────────────────────────────────────────

    def generate_quiz_question(self, word, definition, distractor_words):
        """Return ``{question, options, correct_option_index, hint}`` for one word."""
        options = [word] + list(distractor_words)
        prompt = QUIZ_QUESTION_PROMPT.format(word=word, definition=definition, options=', '.join(options))
        data = self._generate_json([prompt])
        try:
            question = QuizQuestion.model_validate(data)
        except PydanticValidationError as e:
            raise ExtractionError('The AI quiz question has an unexpected shape') from e
        if question.correct_option_index >= len(question.options):
            raise ExtractionError('The AI quiz question points at a missing option')
        if question.options[question.correct_option_index].strip().lower() != word.strip().lower():
            raise ExtractionError('The AI quiz question marks the wrong answer')
        return question.model_dump()
