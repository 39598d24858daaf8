"""
Entry Parser - pure functions turning a Learner's Dictionary response into a
``WordDefinition``.
"""
import re
from typing import Any, List, Optional

from lexistack_app.schemas import DefinitionEntry, Pronunciation, WordDefinition

AUDIO_BASE_URL = 'https://media.merriam-webster.com/audio/prons/en/us/mp3'

_HOMOGRAPH_SUFFIX = re.compile(r':\d+$')
_CROSS_REFERENCE = re.compile(r'\{(?:sx|dxt|a_link|d_link|i_link|et_link|mat)\|([^|}]*)[^}]*\}')
_FORMAT_TOKEN = re.compile(r'\{[^}]*\}')


def clean_markup(text: str) -> str:
    """Strip dictionary formatting tokens such as ``{bc}`` or ``{it}...{/it}``."""
    if not text:
        return ''
    text = _CROSS_REFERENCE.sub(r'\1', text)
    text = _FORMAT_TOKEN.sub('', text)
    text = re.sub(r'^\s*:\s*', '', text)
    return re.sub(r'\s+', ' ', text).strip()


def audio_subdirectory(audio: str) -> str:
    """Merriam-Webster stores each audio file under a subdirectory derived from its name."""
    if audio.startswith('bix'):
        return 'bix'
    if audio.startswith('gg'):
        return 'gg'
    if not audio[:1].isalpha():
        return 'number'
    return audio[0]


def audio_url(audio: Optional[str]) -> Optional[str]:
    if not audio:
        return None
    return f"{AUDIO_BASE_URL}/{audio_subdirectory(audio)}/{audio}.mp3"


def headword(entry_id: str) -> str:
    return _HOMOGRAPH_SUFFIX.sub('', entry_id)


def _first_entry(data: Any) -> Optional[dict]:
    if not isinstance(data, list):
        return None
    for entry in data:
        # Unknown words come back as a list of spelling suggestions (strings)
        if isinstance(entry, dict) and (entry.get('meta') or {}).get('id'):
            return entry
    return None


def _senses(entry: dict) -> List[DefinitionEntry]:
    definitions = []
    for block in entry.get('def') or []:
        for sequence in block.get('sseq') or []:
            for item in sequence:
                if not isinstance(item, list) or len(item) < 2 or item[0] != 'sense':
                    continue
                meaning = ''
                examples = []
                for element in item[1].get('dt') or []:
                    if element[0] == 'text':
                        meaning += clean_markup(element[1])
                    elif element[0] == 'vis':
                        examples.extend(clean_markup(example.get('t', '')) for example in element[1])
                if meaning:
                    definitions.append(DefinitionEntry(meaning=meaning, examples=[e for e in examples if e]))
    return definitions


def parse_entry(data: Any) -> Optional[WordDefinition]:
    """Return the definition from a raw API response, or None if it holds no usable entry."""
    entry = _first_entry(data)
    if entry is None:
        return None

    meta = entry['meta']
    pronunciation = None
    prs = (entry.get('hwi') or {}).get('prs') or []
    if prs:
        first = prs[0]
        pronunciation = Pronunciation(
            text=first.get('ipa') or first.get('mw') or '',
            audio=audio_url((first.get('sound') or {}).get('audio')),
        )

    if entry.get('shortdef'):
        definitions = [DefinitionEntry(meaning=clean_markup(d)) for d in entry['shortdef'] if d]
    else:
        definitions = _senses(entry)

    return WordDefinition(
        word=headword(meta['id']),
        part_of_speech=entry.get('fl') or 'unknown',
        pronunciation=pronunciation,
        definitions=definitions,
        stems=list(meta.get('stems') or []),
    )
