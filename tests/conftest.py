"""Shared pytest fixtures for the English Exercises test suite."""

import random
import pytest

import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import (
    ArrangeWordsContent,
    ArrangeWordsSentence,
    Exercise,
    ExternalLinkContent,
    FillBlankContent,
    FillBlankSentence,
    FlashCard,
    FlashCardsContent,
    MatchingContent,
    MatchingPair,
    MultipleChoiceContent,
    MultipleChoiceQuestion,
    TranslationContent,
    TranslationItem,
)
from storage import (
    SQLiteClassRepository,
    SQLiteExerciseRepository,
    SQLiteStudentRepository,
    init_schema,
)


class FakeClock:
    """Monotonic clock that tests advance by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for deterministic shuffles."""
    return random.Random(42)


@pytest.fixture
def multiple_choice_content() -> MultipleChoiceContent:
    """Four questions whose correct answers are A, B, C and D in turn."""
    return MultipleChoiceContent(
        questions=[
            MultipleChoiceQuestion(
                question=f"Question {i + 1}",
                options=["alpha", "beta", "gamma", "delta"],
                correct_index=i,
            )
            for i in range(4)
        ]
    )


@pytest.fixture
def fill_blank_content() -> FillBlankContent:
    """Two sentences with one and three blanks."""
    return FillBlankContent(
        sentences=[
            FillBlankSentence(text="The [cat] is sleeping."),
            FillBlankSentence(text="I [like] to [read] good [books]."),
        ]
    )


@pytest.fixture
def arrange_words_content() -> ArrangeWordsContent:
    return ArrangeWordsContent(
        sentences=[
            ArrangeWordsSentence(
                correct="The cat is sleeping",
                words=["The", "cat", "is", "sleeping"],
                shuffled=["sleeping", "The", "is", "cat"],
            ),
            ArrangeWordsSentence(
                correct="I like books",
                words=["I", "like", "books"],
                shuffled=["books", "I", "like"],
            ),
        ]
    )


@pytest.fixture
def flash_cards_content() -> FlashCardsContent:
    return FlashCardsContent(
        cards=[
            FlashCard(front="apple", back="maçã"),
            FlashCard(front="house", back="casa"),
            FlashCard(front="dog", back="cachorro"),
        ]
    )


@pytest.fixture
def matching_content() -> MatchingContent:
    return MatchingContent(
        pairs=[
            MatchingPair(left="cat", right="gato"),
            MatchingPair(left="dog", right="cachorro"),
            MatchingPair(left="house", right="casa"),
        ]
    )


@pytest.fixture
def translation_content() -> TranslationContent:
    return TranslationContent(
        items=[
            TranslationItem(source="The cat is sleeping", target="o gato está dormindo"),
            TranslationItem(source="Good morning", target="bom dia"),
        ]
    )


@pytest.fixture
def external_link_content() -> ExternalLinkContent:
    return ExternalLinkContent(url="https://example.com/listening")


@pytest.fixture
def test_db_path(tmp_path) -> Path:
    """Create a temporary database with schema initialized."""
    db_path = tmp_path / "test.db"
    init_schema(db_path)
    return db_path


@pytest.fixture
def populated_test_db(test_db_path, multiple_choice_content, matching_content):
    """Create a test database with one class, one student and two exercises.

    Returns a dict of the database path and the created ids.
    """
    classroom = SQLiteClassRepository(test_db_path, rng=random.Random(7)).create_class(
        "Morning English", description="Beginners", teacher_id="teacher-1"
    )
    student = SQLiteStudentRepository(test_db_path).join_class(classroom.access_code, "Ana")

    exercises = SQLiteExerciseRepository(test_db_path)
    exercises.save(
        Exercise(
            id="ex-mc",
            title="Greek letters",
            content=multiple_choice_content,
            class_id=classroom.id,
        )
    )
    exercises.save(
        Exercise(
            id="ex-match",
            title="Animals",
            content=matching_content,
            class_id=classroom.id,
            is_active=False,
        )
    )

    return {
        "db_path": test_db_path,
        "class": classroom,
        "student": student,
    }
