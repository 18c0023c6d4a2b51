from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ExerciseType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    FILL_BLANK = "fill_blank"
    ARRANGE_WORDS = "arrange_words"
    FLASH_CARDS = "flash_cards"
    MATCHING = "matching"
    TRANSLATION = "translation"
    EXTERNAL_LINK = "external_link"


class TranslationTier(str, Enum):
    """Approximate match quality of a translation answer."""

    EXACT = "exact"
    GOOD = "good"
    PARTIAL = "partial"
    INCORRECT = "incorrect"
    EMPTY = "empty"


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# ============================================================================
# Exercise Content Items
# ============================================================================


class MultipleChoiceQuestion(BaseModel):
    question: str
    options: list[str] = Field(default_factory=list)
    correct_index: int = 0

    @property
    def is_complete(self) -> bool:
        return bool(self.options)


class Blank(BaseModel):
    """A blank found in a fill-in sentence by scanning for [word] markers."""

    word: str
    position: int  # Offset of the opening bracket
    length: int  # Length including both brackets

    @property
    def end(self) -> int:
        return self.position + self.length


class FillBlankSentence(BaseModel):
    text: str  # e.g. "The [cat] is on the [mat]."
    blanks: list[Blank] = Field(default_factory=list)


class ArrangeWordsSentence(BaseModel):
    correct: str
    words: list[str] = Field(default_factory=list)
    shuffled: list[str] = Field(default_factory=list)


class FlashCard(BaseModel):
    front: str
    back: str


class MatchingPair(BaseModel):
    left: str
    right: str

    @property
    def is_complete(self) -> bool:
        return bool(self.left.strip() and self.right.strip())


class TranslationItem(BaseModel):
    source: str
    target: str
    language: str = "Portuguese"

    @property
    def is_complete(self) -> bool:
        return bool(self.source.strip() and self.target.strip())


# ============================================================================
# Exercise Content Variants
# ============================================================================


class MultipleChoiceContent(BaseModel):
    type: Literal["multiple_choice"] = "multiple_choice"
    questions: list[MultipleChoiceQuestion] = Field(default_factory=list)

    @property
    def items(self) -> list[MultipleChoiceQuestion]:
        return self.questions


class FillBlankContent(BaseModel):
    type: Literal["fill_blank"] = "fill_blank"
    sentences: list[FillBlankSentence] = Field(default_factory=list)

    @property
    def items(self) -> list[FillBlankSentence]:
        return self.sentences


class ArrangeWordsContent(BaseModel):
    type: Literal["arrange_words"] = "arrange_words"
    sentences: list[ArrangeWordsSentence] = Field(default_factory=list)

    @property
    def items(self) -> list[ArrangeWordsSentence]:
        return self.sentences


class FlashCardsContent(BaseModel):
    type: Literal["flash_cards"] = "flash_cards"
    cards: list[FlashCard] = Field(default_factory=list)

    @property
    def items(self) -> list[FlashCard]:
        return self.cards


class MatchingContent(BaseModel):
    type: Literal["matching"] = "matching"
    pairs: list[MatchingPair] = Field(default_factory=list)

    @property
    def items(self) -> list[MatchingPair]:
        return self.pairs


class TranslationContent(BaseModel):
    type: Literal["translation"] = "translation"
    items: list[TranslationItem] = Field(default_factory=list)


class ExternalLinkContent(BaseModel):
    type: Literal["external_link"] = "external_link"
    url: str = ""

    @property
    def items(self) -> list[str]:
        return [self.url] if self.url.strip() else []


ExerciseContent = Annotated[
    Union[
        MultipleChoiceContent,
        FillBlankContent,
        ArrangeWordsContent,
        FlashCardsContent,
        MatchingContent,
        TranslationContent,
        ExternalLinkContent,
    ],
    Field(discriminator="type"),
]

_content_adapter: TypeAdapter[ExerciseContent] = TypeAdapter(ExerciseContent)


def parse_content(data: dict[str, Any] | str) -> ExerciseContent:
    """Validate a stored content document into its typed variant.

    Accepts either a decoded dict or a JSON string.
    """
    if isinstance(data, str):
        return _content_adapter.validate_json(data)
    return _content_adapter.validate_python(data)


def dump_content(content: ExerciseContent) -> str:
    """Serialize content to the JSON document stored by the persistence layer."""
    return content.model_dump_json()


# ============================================================================
# Classroom Records
# ============================================================================


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClassRoom(BaseModel):
    id: str
    name: str
    description: str = ""
    teacher_id: str | None = None
    access_code: str
    is_active: bool = True


class Student(BaseModel):
    id: str
    name: str
    class_id: str


class Exercise(BaseModel):
    id: str
    title: str
    description: str = ""
    content: ExerciseContent
    is_active: bool = True
    class_id: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def type(self) -> ExerciseType:
        return ExerciseType(self.content.type)


class ExerciseResult(BaseModel):
    """A student's stored result; one row per (exercise, student)."""

    exercise_id: str
    student_id: str
    score: int = Field(ge=0, le=100)
    time_taken: int | None = None
    completed_at: datetime = Field(default_factory=_utcnow)


# ============================================================================
# Scoring
# ============================================================================


class ScoreResult(BaseModel):
    """Outcome of one completed play-through. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    percentage: int = Field(ge=0, le=100)
    correct_count: int = 0
    total_count: int = 0
    completed_at: datetime = Field(default_factory=_utcnow)
