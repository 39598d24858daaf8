# File: lexistack_app/modules/ai_services/prompts.py
# Prompt templates for the generative vocabulary service.

TEXT_ANALYSIS_PROMPT = """You are a vocabulary tutor for English learners.
Read the material below and pick the words an intermediate learner should study.

Return ONLY a JSON object with this shape:
{{
  "vocabulary": ["word", ...],
  "topics": ["topic", ...],
  "content": "the source text with every picked word wrapped in <mark></mark>"
}}

Use dictionary base forms, at most {max_words} words, no phrases longer than three words.

Material:
{text}
"""

TOPIC_PROMPT = """You are a vocabulary tutor for English learners.
Generate vocabulary about the topic "{topic}".
{tuning}
Return ONLY a JSON object with this shape:
{{
  "vocabulary": ["word", ...],
  "topics": ["related topic", ...],
  "topicName": "a short title for the topic"
}}

Use dictionary base forms, at most {max_words} words.
"""

QUIZ_QUESTION_PROMPT = """Write one multiple-choice vocabulary question for the word "{word}".
Meaning to test: {definition}

Describe an everyday situation and ask which word fits it. Do not use the word itself in the question.
The options must be exactly these words, in any order: {options}

Return ONLY a JSON object with this shape:
{{
  "question": "...",
  "options": ["...", "..."],
  "correct_option_index": 0,
  "hint": "a short hint"
}}
"""

DEFAULT_MAX_WORDS = 20


def format_tuning(options):
    """Render user tuning options (level, count, style ...) as prompt lines."""
    if not options:
        return ''
    lines = [f"- {key.replace('_', ' ')}: {value}" for key, value in options.items() if value not in (None, '')]
    if not lines:
        return ''
    return 'Follow these preferences:\n' + '\n'.join(lines) + '\n'
