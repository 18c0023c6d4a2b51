"""Per-type graders.

Each grader is a pure function ``(content, responses, config) -> marks`` that
returns one mark per gradable unit: a bool for most exercise types, a
TranslationTier for translations. Graders never raise; missing responses and
malformed authored items are marked incorrect and stay in the denominator.

Responses are keyed by item index, except fill-in-blank responses which are
keyed by ``(item_index, blank_index)``.
"""

from typing import Any, Callable, Mapping, Sequence

from exercises.base import blanks_overlap, normalize, parse_blanks
from exercises.config import GradingConfig, TranslationConfig
from models import (
    ArrangeWordsContent,
    Blank,
    ExerciseType,
    ExternalLinkContent,
    FillBlankContent,
    FillBlankSentence,
    FlashCardsContent,
    MatchingContent,
    MatchingPair,
    MultipleChoiceContent,
    TranslationContent,
    TranslationTier,
)

ResponseKey = int | tuple[int, int]
ResponseSet = Mapping[ResponseKey, Any]
Mark = bool | TranslationTier

DEFAULT_GRADING = GradingConfig()


def grade_multiple_choice(
    content: MultipleChoiceContent,
    responses: ResponseSet,
    config: GradingConfig = DEFAULT_GRADING,
) -> list[bool]:
    marks = []
    for index, question in enumerate(content.questions):
        answer = responses.get(index)
        valid_key = 0 <= question.correct_index < len(question.options)
        marks.append(
            valid_key
            and isinstance(answer, int)
            and not isinstance(answer, bool)
            and answer == question.correct_index
        )
    return marks


def blanks_for(sentence: FillBlankSentence) -> list[Blank]:
    """Blanks recorded by the editor, or scanned from the text if none were."""
    return sentence.blanks or parse_blanks(sentence.text)


def grade_fill_blank(
    content: FillBlankContent,
    responses: ResponseSet,
    config: GradingConfig = DEFAULT_GRADING,
) -> list[bool]:
    """Grade every blank; the result has one mark per blank, not per sentence."""
    marks = []
    for sentence_index, sentence in enumerate(content.sentences):
        blanks = blanks_for(sentence)
        malformed = blanks_overlap(blanks)
        for blank_index, blank in enumerate(blanks):
            answer = responses.get((sentence_index, blank_index))
            if malformed or not isinstance(answer, str):
                marks.append(False)
                continue
            expected = normalize(blank.word, config.punctuation)
            marks.append(bool(expected) and normalize(answer, config.punctuation) == expected)
    return marks


def grade_arrange_words(
    content: ArrangeWordsContent,
    responses: ResponseSet,
    config: GradingConfig = DEFAULT_GRADING,
) -> list[bool]:
    marks = []
    for index, sentence in enumerate(content.sentences):
        arranged = responses.get(index)
        if not isinstance(arranged, (list, tuple)) or not arranged:
            marks.append(False)
            continue
        attempt = " ".join(str(word) for word in arranged)
        expected = normalize(sentence.correct, config.punctuation)
        marks.append(bool(expected) and normalize(attempt, config.punctuation) == expected)
    return marks


def grade_flash_cards(
    content: FlashCardsContent,
    responses: ResponseSet,
    config: GradingConfig = DEFAULT_GRADING,
) -> list[bool]:
    """Flash cards carry no answer key; the learner's self-report is the mark."""
    return [responses.get(index) is True for index in range(len(content.cards))]


def pair_matches(pairs: Sequence[MatchingPair], left_index: int, right_index: int) -> bool:
    """Check whether joining left item ``left_index`` with the right text of
    pair ``right_index`` reproduces an authored pair.

    Duplicate texts are allowed, so this compares text rather than indices.
    """
    if not (0 <= left_index < len(pairs) and 0 <= right_index < len(pairs)):
        return False
    left = pairs[left_index].left.strip()
    right = pairs[right_index].right.strip()
    return any(p.left.strip() == left and p.right.strip() == right for p in pairs)


def grade_matching(
    content: MatchingContent,
    responses: ResponseSet,
    config: GradingConfig = DEFAULT_GRADING,
) -> list[bool]:
    """Each response maps a left index to the pair index of its matched right item."""
    marks = []
    for index in range(len(content.pairs)):
        right_index = responses.get(index)
        marks.append(
            isinstance(right_index, int)
            and not isinstance(right_index, bool)
            and pair_matches(content.pairs, index, right_index)
        )
    return marks


def check_translation(
    answer: str | None,
    target: str,
    config: GradingConfig = DEFAULT_GRADING,
) -> TranslationTier:
    """Classify a translation answer against its target.

    The overlap ratio is the number of learner words found in (or containing)
    some target word, divided by the number of target words.
    """
    thresholds: TranslationConfig = config.translation
    attempt = normalize(answer if isinstance(answer, str) else "", config.punctuation)
    expected = normalize(target, config.punctuation)

    if attempt and attempt == expected:
        return TranslationTier.EXACT

    learner_words = attempt.split()
    if not learner_words:
        return TranslationTier.EMPTY

    target_words = expected.split()
    if not target_words:
        return TranslationTier.INCORRECT

    matching = [
        word
        for word in learner_words
        if any(word in target_word or target_word in word for target_word in target_words)
    ]
    ratio = len(matching) / len(target_words)

    if ratio >= thresholds.good_threshold:
        return TranslationTier.GOOD
    if ratio >= thresholds.partial_threshold:
        return TranslationTier.PARTIAL
    return TranslationTier.INCORRECT


def grade_translation(
    content: TranslationContent,
    responses: ResponseSet,
    config: GradingConfig = DEFAULT_GRADING,
) -> list[TranslationTier]:
    return [
        check_translation(responses.get(index), item.target, config)
        for index, item in enumerate(content.items)
    ]


def grade_external_link(
    content: ExternalLinkContent,
    responses: ResponseSet,
    config: GradingConfig = DEFAULT_GRADING,
) -> list[bool]:
    """Opening the link is the whole exercise."""
    return [responses.get(0) is True]


# Registry of graders; every ExerciseType must have an entry.
GRADERS: dict[ExerciseType, Callable[..., list]] = {
    ExerciseType.MULTIPLE_CHOICE: grade_multiple_choice,
    ExerciseType.FILL_BLANK: grade_fill_blank,
    ExerciseType.ARRANGE_WORDS: grade_arrange_words,
    ExerciseType.FLASH_CARDS: grade_flash_cards,
    ExerciseType.MATCHING: grade_matching,
    ExerciseType.TRANSLATION: grade_translation,
    ExerciseType.EXTERNAL_LINK: grade_external_link,
}


def get_grader(exercise_type: ExerciseType | str) -> Callable[..., list]:
    """Get the grader for the given type."""
    return GRADERS[ExerciseType(exercise_type)]


def grade(
    content,
    responses: ResponseSet,
    config: GradingConfig = DEFAULT_GRADING,
) -> list[Mark]:
    """Dispatch to the grader for the content's exercise type."""
    return get_grader(content.type)(content, responses, config)
