from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any


def normalize_words(values) -> List[str]:
    """Trim, drop blanks and de-duplicate case-insensitively, keeping first-seen order."""
    seen = set()
    result = []
    for value in values or []:
        if not isinstance(value, str):
            continue
        word = value.strip()
        key = word.lower()
        if not word or key in seen:
            continue
        seen.add(key)
        result.append(word)
    return result


class Pronunciation(BaseModel):
    text: str
    audio: Optional[str] = None


class DefinitionEntry(BaseModel):
    meaning: str
    examples: List[str] = Field(default_factory=list)


class WordDefinition(BaseModel):
    """A dictionary entry ready to be saved into a collection."""
    word: str
    part_of_speech: str = 'unknown'
    pronunciation: Optional[Pronunciation] = None
    definitions: List[DefinitionEntry] = Field(default_factory=list)
    stems: List[str] = Field(default_factory=list)

    class Config:
        extra = "ignore"

    @field_validator('word')
    @classmethod
    def word_not_blank(cls, value):
        value = value.strip()
        if not value:
            raise ValueError('word must not be blank')
        return value


class FileInput(BaseModel):
    """An uploaded file already read by the client."""
    name: Optional[str] = None
    mime_type: str = 'text/plain'
    data: str  # base64 payload for binary files, raw text for text/*


class ExtractionResult(BaseModel):
    vocabulary: List[str] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)
    content: Optional[str] = None

    class Config:
        extra = "ignore"

    @field_validator('vocabulary', 'topics', mode='before')
    @classmethod
    def clean_words(cls, value):
        return normalize_words(value)


class TopicExtractionResult(BaseModel):
    vocabulary: List[str] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)
    topic_name: str = Field('', alias='topicName')

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator('vocabulary', 'topics', mode='before')
    @classmethod
    def clean_words(cls, value):
        return normalize_words(value)


class QuizQuestion(BaseModel):
    question: str
    options: List[str]
    correct_option_index: int
    hint: Optional[str] = None

    class Config:
        extra = "ignore"

    @field_validator('options')
    @classmethod
    def at_least_two_options(cls, value):
        if len(value) < 2:
            raise ValueError('a question needs at least two options')
        return value

    @field_validator('correct_option_index')
    @classmethod
    def non_negative_index(cls, value):
        if value < 0:
            raise ValueError('correct_option_index must be non-negative')
        return value


# --- Request payloads ---

class AnalyzeRequest(BaseModel):
    text: str = ''
    files: List[FileInput] = Field(default_factory=list)


class TopicRequest(BaseModel):
    topic: str
    tuning_options: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('topic')
    @classmethod
    def topic_not_blank(cls, value):
        value = value.strip()
        if not value:
            raise ValueError('topic must not be blank')
        return value


class SaveWordsRequest(BaseModel):
    collection_name: str
    description: Optional[str] = None
    words: List[WordDefinition] = Field(default_factory=list)

    @field_validator('collection_name')
    @classmethod
    def name_not_blank(cls, value):
        value = value.strip()
        if not value:
            raise ValueError('collection_name must not be blank')
        return value


class CreateCollectionRequest(BaseModel):
    name: str
    description: Optional[str] = None

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, value):
        value = value.strip()
        if not value:
            raise ValueError('name must not be blank')
        return value
