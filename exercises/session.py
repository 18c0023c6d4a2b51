"""Play sessions: one learner's single play-through of one exercise.

A session is either in progress or completed. Completing grades the recorded
responses exactly once, reduces them to a ScoreResult and hands the
percentage to the completion callback. Restarting a completed session starts
a new play-through with no responses.

Session classes by interaction style:
- ExerciseSession: linear previous/next navigation over items
  (MultipleChoiceSession, FillBlankSession, ArrangeWordsSession,
  FlashCardsSession, TranslationSession)
- MatchingSession: click a left item, then a right item, until all pairs match
- ExternalLinkSession: completes as soon as the link is opened
"""

import logging
import random
import time
from typing import Any, Callable, ClassVar, Protocol

from exercises.base import shuffled, split_words
from exercises.config import ExerciseConfig
from exercises.graders import Mark, grade, pair_matches
from exercises.scoring import (
    TranslationSummary,
    aggregate,
    matching_efficiency,
    translation_summary,
)
from models import (
    ArrangeWordsContent,
    ExerciseType,
    MatchingContent,
    MultipleChoiceContent,
    ScoreResult,
    SessionStatus,
    TranslationContent,
)

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[int, int | None], None]


class InvalidContentError(ValueError):
    """Raised when content has no playable items."""


class SessionStateError(RuntimeError):
    """Raised when an action is not allowed in the session's current state."""


class ContentSource(Protocol):
    def load_content(self, exercise_id: str) -> Any: ...


class CompletionReporter:
    """Hands a finished score to the persistence collaborator, best effort.

    Failures are logged and never reach the learner; no retry is attempted.
    """

    def __init__(self, callback: CompletionCallback | None = None):
        self.callback = callback

    def report(self, score: int, time_taken: int | None = None) -> bool:
        """Report a score. Returns True if the callback accepted it."""
        if self.callback is None:
            return False
        try:
            self.callback(score, time_taken)
        except Exception:
            logger.exception("Failed to report completion (score=%d)", score)
            return False
        return True


def playable_content(content):
    """Drop option-less questions, incomplete translation items and matching pairs."""
    if isinstance(content, MultipleChoiceContent):
        return content.model_copy(
            update={"questions": [q for q in content.questions if q.is_complete]}
        )
    if isinstance(content, TranslationContent):
        return content.model_copy(
            update={"items": [item for item in content.items if item.is_complete]}
        )
    if isinstance(content, MatchingContent):
        return content.model_copy(
            update={"pairs": [pair for pair in content.pairs if pair.is_complete]}
        )
    return content


class BaseSession:
    """State shared by every session type."""

    exercise_type: ClassVar[ExerciseType]

    def __init__(
        self,
        content,
        on_complete: CompletionCallback | None = None,
        config: ExerciseConfig | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.content = playable_content(content)
        if not self.content.items:
            raise InvalidContentError(
                f"{self.content.type} exercise has no playable items"
            )
        self.config = config or ExerciseConfig()
        self.rng = rng or random.Random()
        self._clock = clock
        self._reporter = CompletionReporter(on_complete)
        self.play_count = 0
        self._reset()

    def _reset(self) -> None:
        """Start a fresh play-through."""
        self.status = SessionStatus.IN_PROGRESS
        self.responses: dict[Any, Any] = {}
        self.marks: list[Mark] = []
        self.result: ScoreResult | None = None
        self.time_taken: int | None = None
        self._started_at = self._clock()
        self.play_count += 1

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    @property
    def item_count(self) -> int:
        return len(self.content.items)

    def _require_in_progress(self, action: str) -> None:
        if self.is_completed:
            raise SessionStateError(f"Cannot {action} a completed session")

    def _complete(self) -> None:
        if self.is_completed:
            return
        self.marks = grade(self.content, self.responses, self.config.grading)
        self.result = aggregate(self.marks)
        self.time_taken = max(0, round(self._clock() - self._started_at))
        self.status = SessionStatus.COMPLETED
        logger.debug(
            "Completed %s session: %d/%d correct (%d%%)",
            self.content.type,
            self.result.correct_count,
            self.result.total_count,
            self.result.percentage,
        )
        self._reporter.report(self.result.percentage, self.time_taken)

    def restart(self) -> None:
        """Begin a new play-through. Only allowed once completed."""
        if not self.is_completed:
            raise SessionStateError("Only a completed session can be restarted")
        self._reset()


# ============================================================================
# Linear Sessions
# ============================================================================


class ExerciseSession(BaseSession):
    """Linear navigation over items with previous/next."""

    def _reset(self) -> None:
        super()._reset()
        if not hasattr(self, "order"):
            self.order = list(range(len(self.content.items)))
        self.current_index = 0

    @property
    def last_index(self) -> int:
        return self.item_count - 1

    @property
    def current_item_index(self) -> int:
        """Authored index of the item currently shown."""
        return self.order[self.current_index]

    @property
    def current_item(self):
        return self.content.items[self.current_item_index]

    def _key(self, sub_index: int | None) -> Any:
        index = self.current_item_index
        return index if sub_index is None else (index, sub_index)

    def record_response(self, response: Any, sub_index: int | None = None) -> None:
        """Record the learner's answer for the current item (or one of its blanks)."""
        self._require_in_progress("record a response in")
        self.responses[self._key(sub_index)] = response

    def response_for(self, sub_index: int | None = None) -> Any:
        return self.responses.get(self._key(sub_index))

    def next(self) -> bool:
        """Advance, completing the session after the last item.

        Returns:
            False if the session was already completed (no-op).
        """
        if self.is_completed:
            return False
        if self.current_index < self.last_index:
            self.current_index += 1
        else:
            self._complete()
        return True

    def previous(self) -> bool:
        """Step back one item. No-op on the first item or once completed."""
        if self.is_completed or self.current_index == 0:
            return False
        self.current_index -= 1
        return True


class MultipleChoiceSession(ExerciseSession):
    exercise_type = ExerciseType.MULTIPLE_CHOICE

    def select_option(self, option_index: int) -> None:
        self.record_response(option_index)


class FillBlankSession(ExerciseSession):
    exercise_type = ExerciseType.FILL_BLANK

    def fill(self, blank_index: int, text: str) -> None:
        self.record_response(text.strip(), sub_index=blank_index)


class TranslationSession(ExerciseSession):
    exercise_type = ExerciseType.TRANSLATION

    def _reset(self) -> None:
        super()._reset()
        self.hints: set[int] = set()

    def answer(self, text: str) -> None:
        self.record_response(text)

    def toggle_hint(self) -> bool:
        """Show or hide the target translation for the current item."""
        index = self.current_item_index
        if index in self.hints:
            self.hints.discard(index)
            return False
        self.hints.add(index)
        return True

    @property
    def summary(self) -> TranslationSummary | None:
        """Exact and overall breakdown, available once completed."""
        if not self.is_completed:
            return None
        return translation_summary(self.marks)


class ArrangeWordsSession(ExerciseSession):
    """Learners move words from an available pool into an arranged sentence."""

    exercise_type = ExerciseType.ARRANGE_WORDS

    def _reset(self) -> None:
        super()._reset()
        self.arrangements = [
            {"available": self._initial_words(sentence), "arranged": []}
            for sentence in self.content.sentences
        ]

    def _initial_words(self, sentence) -> list[str]:
        if sentence.shuffled:
            return list(sentence.shuffled)
        if sentence.words:
            return list(sentence.words)
        return shuffled(split_words(sentence.correct), self.rng)

    @property
    def available(self) -> list[str]:
        return self.arrangements[self.current_item_index]["available"]

    @property
    def arranged(self) -> list[str]:
        return self.arrangements[self.current_item_index]["arranged"]

    def _store(self, available: list[str], arranged: list[str]) -> None:
        self.arrangements[self.current_item_index] = {
            "available": available,
            "arranged": arranged,
        }
        self.record_response(list(arranged))

    def move_to_arranged(self, word_index: int) -> bool:
        self._require_in_progress("arrange words in")
        available = list(self.available)
        if not 0 <= word_index < len(available):
            return False
        word = available.pop(word_index)
        self._store(available, self.arranged + [word])
        return True

    def move_to_available(self, word_index: int) -> bool:
        self._require_in_progress("arrange words in")
        arranged = list(self.arranged)
        if not 0 <= word_index < len(arranged):
            return False
        word = arranged.pop(word_index)
        self._store(self.available + [word], arranged)
        return True

    def move_arranged(self, from_index: int, to_index: int) -> bool:
        self._require_in_progress("arrange words in")
        arranged = list(self.arranged)
        if not (0 <= from_index < len(arranged) and 0 <= to_index < len(arranged)):
            return False
        word = arranged.pop(from_index)
        arranged.insert(to_index, word)
        self._store(list(self.available), arranged)
        return True

    def arrange(self, order: list[int]) -> bool:
        """Arrange all available words at once by their 0-based positions."""
        self._require_in_progress("arrange words in")
        pool = self.available + self.arranged
        if sorted(order) != list(range(len(pool))):
            return False
        self._store([], [pool[i] for i in order])
        return True

    def shuffle_restart(self) -> None:
        """Re-randomize every sentence's word pool, then restart."""
        if not self.is_completed:
            raise SessionStateError("Only a completed session can be restarted")
        content: ArrangeWordsContent = self.content
        self.content = content.model_copy(
            update={
                "sentences": [
                    sentence.model_copy(
                        update={
                            "shuffled": shuffled(
                                sentence.words or split_words(sentence.correct),
                                self.rng,
                            )
                        }
                    )
                    for sentence in content.sentences
                ]
            }
        )
        self._reset()


class FlashCardsSession(ExerciseSession):
    """Self-assessed cards: flip to reveal, then mark as known or not."""

    exercise_type = ExerciseType.FLASH_CARDS

    def _reset(self) -> None:
        super()._reset()
        self.flipped = False

    def flip(self) -> bool:
        self.flipped = not self.flipped
        return self.flipped

    def mark(self, known: bool) -> None:
        """Record the self-report for the current card and move on."""
        self.record_response(bool(known))
        self.next()

    def next(self) -> bool:
        moved = super().next()
        if moved and self.config.player.flip_back_on_move:
            self.flipped = False
        return moved

    def previous(self) -> bool:
        moved = super().previous()
        if moved and self.config.player.flip_back_on_move:
            self.flipped = False
        return moved

    @property
    def reviewed_count(self) -> int:
        return len(self.responses)

    def shuffle_restart(self) -> None:
        """Re-randomize card order, then restart."""
        if not self.is_completed:
            raise SessionStateError("Only a completed session can be restarted")
        self.order = shuffled(self.order, self.rng)
        self._reset()


# ============================================================================
# Matching and External Link Sessions
# ============================================================================


class MatchingSession(BaseSession):
    """Pair left items with right items shown in shuffled order.

    Only successful matches are recorded as responses; every left-then-right
    click pair counts as an attempt. Attempts feed the efficiency figure and
    never the score.
    """

    exercise_type = ExerciseType.MATCHING

    def _reset(self) -> None:
        super()._reset()
        indices = list(range(len(self.content.pairs)))
        if self.config.player.shuffle_matching:
            indices = shuffled(indices, self.rng)
        self.right_order = indices
        self.selected_left: int | None = None
        self.selected_right: int | None = None
        self.attempts = 0

    @property
    def left_items(self) -> list[str]:
        return [pair.left for pair in self.content.pairs]

    @property
    def right_items(self) -> list[str]:
        """Right texts in display order."""
        return [self.content.pairs[i].right for i in self.right_order]

    @property
    def matched_count(self) -> int:
        return len(self.responses)

    def is_left_matched(self, left_index: int) -> bool:
        return left_index in self.responses

    def is_right_matched(self, position: int) -> bool:
        return self.right_order[position] in self.responses.values()

    def select_left(self, left_index: int) -> bool:
        self._require_in_progress("select in")
        if not 0 <= left_index < len(self.content.pairs):
            return False
        if self.is_left_matched(left_index):
            return False
        self.selected_left = left_index
        self.selected_right = None
        return True

    def select_right(self, position: int) -> bool | None:
        """Select a right item by display position.

        Returns:
            True for a successful match, False for a rejected attempt and
            None if no attempt was made (no left item selected, or the right
            item is already matched).
        """
        self._require_in_progress("select in")
        if not 0 <= position < len(self.right_order):
            return None
        if self.is_right_matched(position):
            return None
        if self.selected_left is None:
            self.selected_right = position
            return None

        self.attempts += 1
        left_index = self.selected_left
        right_index = self.right_order[position]
        self.selected_left = None
        self.selected_right = None

        if not pair_matches(self.content.pairs, left_index, right_index):
            return False

        self.responses[left_index] = right_index
        if self.matched_count == len(self.content.pairs):
            self._complete()
        return True

    @property
    def efficiency(self) -> int:
        """Matches per attempt, shown on the results screen only."""
        return matching_efficiency(self.matched_count, self.attempts)


class ExternalLinkSession(BaseSession):
    """Opening the link completes the exercise with full marks."""

    exercise_type = ExerciseType.EXTERNAL_LINK

    @property
    def url(self) -> str:
        return self.content.url

    def activate(self) -> bool:
        """Record that the link was opened. Returns False if already completed."""
        if self.is_completed:
            return False
        self.responses[0] = True
        self._complete()
        return True


# Registry of session classes; every ExerciseType must have an entry.
SESSION_TYPES: dict[ExerciseType, type[BaseSession]] = {
    ExerciseType.MULTIPLE_CHOICE: MultipleChoiceSession,
    ExerciseType.FILL_BLANK: FillBlankSession,
    ExerciseType.ARRANGE_WORDS: ArrangeWordsSession,
    ExerciseType.FLASH_CARDS: FlashCardsSession,
    ExerciseType.MATCHING: MatchingSession,
    ExerciseType.TRANSLATION: TranslationSession,
    ExerciseType.EXTERNAL_LINK: ExternalLinkSession,
}


def create_session(
    content,
    on_complete: CompletionCallback | None = None,
    config: ExerciseConfig | None = None,
    rng: random.Random | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> BaseSession:
    """Create the session class matching the content's exercise type."""
    session_class = SESSION_TYPES[ExerciseType(content.type)]
    return session_class(
        content, on_complete=on_complete, config=config, rng=rng, clock=clock
    )


def start_session(
    exercise_id: str,
    source: ContentSource,
    on_complete: CompletionCallback | None = None,
    config: ExerciseConfig | None = None,
    rng: random.Random | None = None,
) -> BaseSession:
    """Load content and start a session.

    Load failures and unplayable content are logged and re-raised before any
    session state exists.
    """
    try:
        content = source.load_content(exercise_id)
        return create_session(content, on_complete=on_complete, config=config, rng=rng)
    except Exception as exc:
        logger.warning("Cannot start exercise %s: %s", exercise_id, exc)
        raise
