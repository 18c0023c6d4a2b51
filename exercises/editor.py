"""Authoring helpers used when teachers build exercise content.

Every content variant keeps at least one item: removing the last item is
refused. Helpers return new content objects and leave their input untouched.

The command line only reaches prepare_content, when an exercise file is
added; the item and option helpers are a library API for authoring tools.
"""

import random

from exercises.base import parse_blanks, shuffled, split_words
from models import (
    ArrangeWordsContent,
    ArrangeWordsSentence,
    ExerciseType,
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

SUPPORTED_LANGUAGES = [
    "Portuguese",
    "Spanish",
    "French",
    "German",
    "Italian",
    "Dutch",
    "Russian",
    "Chinese",
    "Japanese",
    "Korean",
]

DEFAULT_LANGUAGE = SUPPORTED_LANGUAGES[0]

# Name of the item list field for each content variant.
_ITEM_FIELDS = {
    ExerciseType.MULTIPLE_CHOICE: "questions",
    ExerciseType.FILL_BLANK: "sentences",
    ExerciseType.ARRANGE_WORDS: "sentences",
    ExerciseType.FLASH_CARDS: "cards",
    ExerciseType.MATCHING: "pairs",
    ExerciseType.TRANSLATION: "items",
}


def new_content(exercise_type: ExerciseType | str):
    """Create content for a new exercise with one empty item."""
    exercise_type = ExerciseType(exercise_type)
    if exercise_type == ExerciseType.MULTIPLE_CHOICE:
        return MultipleChoiceContent(
            questions=[MultipleChoiceQuestion(question="", options=["", ""], correct_index=0)]
        )
    elif exercise_type == ExerciseType.FILL_BLANK:
        return FillBlankContent(sentences=[FillBlankSentence(text="")])
    elif exercise_type == ExerciseType.ARRANGE_WORDS:
        return ArrangeWordsContent(sentences=[ArrangeWordsSentence(correct="")])
    elif exercise_type == ExerciseType.FLASH_CARDS:
        return FlashCardsContent(cards=[FlashCard(front="", back="")])
    elif exercise_type == ExerciseType.MATCHING:
        return MatchingContent(pairs=[MatchingPair(left="", right="")])
    elif exercise_type == ExerciseType.TRANSLATION:
        return TranslationContent(
            items=[TranslationItem(source="", target="", language=DEFAULT_LANGUAGE)]
        )
    else:
        return ExternalLinkContent(url="")


def _blank_item(content):
    if isinstance(content, MultipleChoiceContent):
        return MultipleChoiceQuestion(question="", options=["", ""], correct_index=0)
    if isinstance(content, FillBlankContent):
        return FillBlankSentence(text="")
    if isinstance(content, ArrangeWordsContent):
        return ArrangeWordsSentence(correct="")
    if isinstance(content, FlashCardsContent):
        return FlashCard(front="", back="")
    if isinstance(content, MatchingContent):
        return MatchingPair(left="", right="")
    if isinstance(content, TranslationContent):
        # New items inherit the exercise-wide language
        language = content.items[0].language if content.items else DEFAULT_LANGUAGE
        return TranslationItem(source="", target="", language=language)
    raise ValueError(f"{content.type} content has no item list")


def add_item(content, item=None):
    """Append an item (an empty one by default)."""
    field = _ITEM_FIELDS[ExerciseType(content.type)]
    items = list(getattr(content, field))
    items.append(item if item is not None else _blank_item(content))
    return content.model_copy(update={field: items})


def remove_item(content, index: int):
    """Remove an item, refusing to remove the last one."""
    field = _ITEM_FIELDS[ExerciseType(content.type)]
    items = list(getattr(content, field))
    if len(items) <= 1 or not 0 <= index < len(items):
        return content
    del items[index]
    return content.model_copy(update={field: items})


def update_item(content, index: int, **changes):
    field = _ITEM_FIELDS[ExerciseType(content.type)]
    items = list(getattr(content, field))
    items[index] = items[index].model_copy(update=changes)
    return content.model_copy(update={field: items})


# =============================================================================
# Type-specific helpers
# =============================================================================


def add_option(question: MultipleChoiceQuestion, text: str = "") -> MultipleChoiceQuestion:
    return question.model_copy(update={"options": question.options + [text]})


def remove_option(question: MultipleChoiceQuestion, option_index: int) -> MultipleChoiceQuestion:
    """Remove an option, keeping at least two and keeping the answer key valid."""
    options = list(question.options)
    if len(options) <= 2 or not 0 <= option_index < len(options):
        return question
    del options[option_index]

    correct_index = question.correct_index
    if option_index < correct_index:
        correct_index -= 1
    elif option_index == correct_index:
        correct_index = 0
    return question.model_copy(update={"options": options, "correct_index": correct_index})


def generate_blanks(sentence: FillBlankSentence) -> FillBlankSentence:
    """Record the [word] markers of the sentence text as blanks."""
    return sentence.model_copy(update={"blanks": parse_blanks(sentence.text)})


def generate_words(
    sentence: ArrangeWordsSentence, rng: random.Random | None = None
) -> ArrangeWordsSentence:
    """Split the correct sentence into words and a shuffled copy."""
    words = split_words(sentence.correct.strip())
    return sentence.model_copy(update={"words": words, "shuffled": shuffled(words, rng)})


def reshuffle(
    sentence: ArrangeWordsSentence, rng: random.Random | None = None
) -> ArrangeWordsSentence:
    if not sentence.words:
        return sentence
    return sentence.model_copy(update={"shuffled": shuffled(sentence.words, rng)})


def set_language(content: TranslationContent, language: str) -> TranslationContent:
    """Apply one target language to every translation item."""
    if language not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language: {language}")
    return content.model_copy(
        update={
            "items": [item.model_copy(update={"language": language}) for item in content.items]
        }
    )


def prepare_content(content, rng: random.Random | None = None):
    """Fill in derived fields before saving.

    Scans blanks for fill-in sentences and generates word pools for
    arrange-words sentences that do not have them yet.
    """
    if isinstance(content, FillBlankContent):
        return content.model_copy(
            update={"sentences": [generate_blanks(s) for s in content.sentences]}
        )
    if isinstance(content, ArrangeWordsContent):
        return content.model_copy(
            update={
                "sentences": [
                    s if s.words else generate_words(s, rng) for s in content.sentences
                ]
            }
        )
    return content
