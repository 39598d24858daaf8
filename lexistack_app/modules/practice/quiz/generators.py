# File: lexistack_app/modules/practice/quiz/generators.py
"""
Quiz question generators.

A generator turns one practice word (with the meaning picked for it) into a
multiple-choice question ``{question, options, correct_option_index, hint}``.
Raising means "skip this word".
"""

import logging
import re

logger = logging.getLogger(__name__)

OPTION_COUNT = 4
BLANK = '_____'

# Distractors used when a batch holds too few other words
FALLBACK_WORDS = (
    'optimistic',
    'serendipity',
    'eloquent',
    'persevere',
    'ephemeral',
    'meticulous',
    'ambiguous',
    'resilient',
)


class QuestionGenerationError(Exception):
    """A question could not be built for a word."""


def pick_distractors(rng, answer, batch, count=OPTION_COUNT - 1):
    """Distinct wrong options: other words of the batch first, then the fallback pool."""
    taken = {answer.lower()}
    candidates = []
    for item in batch:
        text = (item.get('word') or '').strip()
        if text and text.lower() not in taken:
            taken.add(text.lower())
            candidates.append(text)

    distractors = rng.sample(candidates, min(count, len(candidates)))
    if len(distractors) < count:
        pool = [w for w in FALLBACK_WORDS if w.lower() not in taken]
        distractors.extend(rng.sample(pool, min(count - len(distractors), len(pool))))
    return distractors


def blank_out(sentence, word):
    """Replace every occurrence of ``word`` in ``sentence``; None when it does not occur."""
    pattern = re.compile(r'\b' + re.escape(word) + r'\w*', re.IGNORECASE)
    if not pattern.search(sentence):
        return None
    return pattern.sub(BLANK, sentence)


class DefinitionQuizGenerator:
    """
    Local generator: asks which word fits a gapped example sentence, or which
    word matches the definition when no example contains the word.
    """

    def generate(self, word, meaning, batch, rng):
        answer = word['word']
        definition = meaning.get('definition')
        if not definition:
            raise QuestionGenerationError(f"No definition for '{answer}'")

        question = None
        for example in meaning.get('examples') or []:
            gapped = blank_out(example, answer)
            if gapped:
                question = f'Which word completes the sentence? "{gapped}"'
                break
        if question is None:
            question = f'Which word matches this definition? "{definition}"'

        options = pick_distractors(rng, answer, batch) + [answer]
        rng.shuffle(options)
        return {
            'question': question,
            'options': options,
            'correct_option_index': options.index(answer),
            'hint': definition,
        }


class AIQuizGenerator:
    """Asks the generative service for a scenario question, falling back to the local generator."""

    def __init__(self, client, fallback=None):
        self.client = client
        self.fallback = fallback or DefinitionQuizGenerator()

    def generate(self, word, meaning, batch, rng):
        answer = word['word']
        distractors = pick_distractors(rng, answer, batch)
        try:
            question = self.client.generate_quiz_question(answer, meaning.get('definition', ''), distractors)
            options = list(question['options'])
            correct = options[question['correct_option_index']]
        except Exception as e:
            logger.warning(f"AI question for '{answer}' failed, using local generator: {e}")
            return self.fallback.generate(word, meaning, batch, rng)

        rng.shuffle(options)
        return {
            'question': question['question'],
            'options': options,
            'correct_option_index': options.index(correct),
            'hint': question.get('hint') or meaning.get('definition'),
        }
