"""Terminal handlers for play sessions.

Handlers turn a session's current state into prompt text and options, and
apply one line of user input to the session. They never grade; grading
happens when the session completes.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Literal, TypeVar

from exercises.base import mask_blanks, option_label, parse_letter_input
from exercises.graders import blanks_for
from exercises.scoring import is_correct
from exercises.session import (
    ArrangeWordsSession,
    BaseSession,
    ExerciseSession,
    ExternalLinkSession,
    FillBlankSession,
    FlashCardsSession,
    MatchingSession,
    MultipleChoiceSession,
    TranslationSession,
)
from models import ExerciseType

S = TypeVar("S", bound=BaseSession)

PREVIOUS_COMMAND = "<"
BLANK_SEPARATOR = "|"

InputMode = Literal["choice", "ordering", "text", "matching", "card", "link"]

# ":q" quits anywhere; a bare "q" only where it cannot be a typed answer.
QUIT_COMMAND = ":q"
SHORT_QUIT_COMMAND = "q"


def is_quit_command(user_input: str, input_mode: InputMode) -> bool:
    command = user_input.strip().lower()
    if command == QUIT_COMMAND:
        return True
    return command == SHORT_QUIT_COMMAND and input_mode != "text"


def quit_hint(input_mode: InputMode) -> str:
    command = QUIT_COMMAND if input_mode == "text" else SHORT_QUIT_COMMAND
    return f"Type '{command}' to quit"


class SessionHandler(ABC, Generic[S]):
    """Abstract base class for session handlers."""

    input_mode: InputMode = "text"

    def __init__(self, session: S):
        self.session = session

    @abstractmethod
    def get_prompt_text(self) -> str:
        """Return the main prompt text."""
        ...

    def get_options(self) -> list[str]:
        """Return options for display."""
        return []

    @abstractmethod
    def get_input_prompt(self) -> str:
        """Return input prompt string."""
        ...

    @abstractmethod
    def process_user_input_with_input(self, user_input: str) -> str | None:
        """Apply user input to the session.

        Returns:
            An error message to show before asking again, or None.
        """
        ...

    @property
    def position(self) -> int:
        """1-based progress position for display."""
        return 0

    @property
    def total(self) -> int:
        return self.session.item_count

    def get_summary_details(self) -> list[tuple[str, str]]:
        """Extra label/value lines for the results screen."""
        return []

    def get_review_rows(self) -> list[dict[str, Any]]:
        """Per-item review rows for a completed session."""
        return []

    def _mark(self, index: int) -> bool:
        marks = self.session.marks
        return index < len(marks) and is_correct(marks[index])


class LinearHandler(SessionHandler[S]):
    """Shared navigation for sessions that step through items in order."""

    session: ExerciseSession

    @property
    def position(self) -> int:
        return self.session.current_index + 1

    def process_user_input_with_input(self, user_input: str) -> str | None:
        if user_input.strip() == PREVIOUS_COMMAND:
            self.session.previous()
            return None

        error = self.apply_answer(user_input)
        if error is None:
            self.session.next()
        return error

    @abstractmethod
    def apply_answer(self, user_input: str) -> str | None:
        """Record the answer for the current item. Returns an error or None."""
        ...


class MultipleChoiceHandler(LinearHandler[MultipleChoiceSession]):
    input_mode = "choice"

    def get_prompt_text(self) -> str:
        return self.session.current_item.question

    def get_options(self) -> list[str]:
        return self.session.current_item.options

    def get_input_prompt(self) -> str:
        return "Your answer (letter or number, '<' to go back): "

    def apply_answer(self, user_input: str) -> str | None:
        options = self.session.current_item.options
        index = parse_letter_input(user_input, len(options))
        if index is None:
            return f"Please enter a letter from A to {option_label(len(options) - 1)}"
        self.session.select_option(index)
        return None

    def get_review_rows(self) -> list[dict[str, Any]]:
        rows = []
        for i, question in enumerate(self.session.content.questions):
            answer = self.session.responses.get(i)
            options = question.options
            rows.append(
                {
                    "prompt": question.question,
                    "answer": options[answer] if isinstance(answer, int) and 0 <= answer < len(options) else "",
                    "expected": options[question.correct_index]
                    if 0 <= question.correct_index < len(options)
                    else "",
                    "correct": self._mark(i),
                }
            )
        return rows


class FillBlankHandler(LinearHandler[FillBlankSession]):
    def get_prompt_text(self) -> str:
        sentence = self.session.current_item
        count = len(blanks_for(sentence))
        return f"Fill in {count} blank(s):\n  {mask_blanks(sentence.text)}"

    def get_input_prompt(self) -> str:
        return f"Your answers (separate blanks with '{BLANK_SEPARATOR}'): "

    def apply_answer(self, user_input: str) -> str | None:
        count = len(blanks_for(self.session.current_item))
        answers = [part.strip() for part in user_input.split(BLANK_SEPARATOR)]
        if count and len(answers) != count:
            return f"Please give {count} answer(s) separated by '{BLANK_SEPARATOR}'"
        for blank_index, answer in enumerate(answers[:count]):
            self.session.fill(blank_index, answer)
        return None

    def get_review_rows(self) -> list[dict[str, Any]]:
        rows = []
        mark_index = 0
        for i, sentence in enumerate(self.session.content.sentences):
            masked = mask_blanks(sentence.text)
            for b, blank in enumerate(blanks_for(sentence)):
                rows.append(
                    {
                        "prompt": f"{masked} (blank {b + 1})",
                        "answer": self.session.responses.get((i, b), ""),
                        "expected": blank.word,
                        "correct": self._mark(mark_index),
                    }
                )
                mark_index += 1
        return rows


class ArrangeWordsHandler(LinearHandler[ArrangeWordsSession]):
    input_mode = "ordering"

    def get_prompt_text(self) -> str:
        return "Arrange the words to form a sentence:"

    def get_options(self) -> list[str]:
        return self.session.available + self.session.arranged

    def get_input_prompt(self) -> str:
        return "Enter the numbers in correct order (e.g., 2 1 3): "

    def apply_answer(self, user_input: str) -> str | None:
        try:
            order = [int(x) - 1 for x in user_input.split()]
        except ValueError:
            return "Please enter numbers separated by spaces"
        if not self.session.arrange(order):
            count = len(self.get_options())
            return f"Please use each number from 1 to {count} exactly once"
        return None

    def get_review_rows(self) -> list[dict[str, Any]]:
        return [
            {
                "prompt": f"Sentence {i + 1}",
                "answer": " ".join(self.session.responses.get(i, [])),
                "expected": sentence.correct,
                "correct": self._mark(i),
            }
            for i, sentence in enumerate(self.session.content.sentences)
        ]


class FlashCardsHandler(SessionHandler[FlashCardsSession]):
    input_mode = "card"

    @property
    def position(self) -> int:
        return self.session.current_index + 1

    def get_prompt_text(self) -> str:
        card = self.session.current_item
        if self.session.flipped:
            return f"{card.front}\n\n  {card.back}"
        return card.front

    def get_input_prompt(self) -> str:
        if self.session.flipped:
            return "Did you know it? (y/n, Enter to flip back): "
        return "Press Enter to flip the card ('<' to go back): "

    def process_user_input_with_input(self, user_input: str) -> str | None:
        choice = user_input.strip().lower()
        if choice == PREVIOUS_COMMAND:
            self.session.previous()
        elif choice in ("", "f"):
            self.session.flip()
        elif choice in ("y", "n") and self.session.flipped:
            self.session.mark(choice == "y")
        else:
            return "Flip the card first, then answer y or n"
        return None

    def get_summary_details(self) -> list[tuple[str, str]]:
        return [("Reviewed", f"{self.session.reviewed_count}/{self.session.item_count}")]

    def get_review_rows(self) -> list[dict[str, Any]]:
        labels = {True: "knew it", False: "still learning"}
        return [
            {
                "prompt": card.front,
                "answer": labels.get(self.session.responses.get(i), ""),
                "expected": card.back,
                "correct": self._mark(i),
            }
            for i, card in enumerate(self.session.content.cards)
        ]


class TranslationHandler(LinearHandler[TranslationSession]):
    HINT_COMMAND = "?"

    def get_prompt_text(self) -> str:
        item = self.session.current_item
        text = f"Translate into {item.language}:\n  {item.source}"
        if self.session.current_item_index in self.session.hints:
            text += f"\n  (hint: {item.target})"
        return text

    def get_input_prompt(self) -> str:
        return f"Your translation ('{self.HINT_COMMAND}' for a hint): "

    def process_user_input_with_input(self, user_input: str) -> str | None:
        if user_input.strip() == self.HINT_COMMAND:
            self.session.toggle_hint()
            return None
        return super().process_user_input_with_input(user_input)

    def apply_answer(self, user_input: str) -> str | None:
        self.session.answer(user_input)
        return None

    def get_summary_details(self) -> list[tuple[str, str]]:
        summary = self.session.summary
        if summary is None:
            return []
        return [
            (
                "Exact matches",
                f"{summary.exact_count}/{summary.total} ({summary.exact_percentage}%)",
            ),
            ("Overall accuracy", f"{summary.submitted_percentage}%"),
        ]

    def get_review_rows(self) -> list[dict[str, Any]]:
        marks = self.session.marks
        return [
            {
                "prompt": item.source,
                "answer": self.session.responses.get(i, ""),
                "expected": item.target,
                "correct": self._mark(i),
                "mark": marks[i].value if i < len(marks) else "",
            }
            for i, item in enumerate(self.session.content.items)
        ]


class MatchingHandler(SessionHandler[MatchingSession]):
    input_mode = "matching"

    def get_prompt_text(self) -> str:
        lines = ["Match each item on the left with one on the right:"]
        for i, text in enumerate(self.session.left_items):
            mark = " ✓" if self.session.is_left_matched(i) else ""
            lines.append(f"  {i + 1}. {text}{mark}")
        return "\n".join(lines)

    def get_options(self) -> list[str]:
        return [
            f"{text} ✓" if self.session.is_right_matched(pos) else text
            for pos, text in enumerate(self.session.right_items)
        ]

    def get_input_prompt(self) -> str:
        return "Enter a pair (e.g., 1 B): "

    @property
    def position(self) -> int:
        return self.session.matched_count

    def process_user_input_with_input(self, user_input: str) -> str | None:
        parts = user_input.split()
        if len(parts) != 2 or not parts[0].isdigit():
            return "Please enter a number and a letter, e.g. 1 B"

        left_index = int(parts[0]) - 1
        position = parse_letter_input(parts[1], len(self.session.right_items))
        if position is None or not self.session.select_left(left_index):
            return "That pair is not available"

        outcome = self.session.select_right(position)
        if outcome is False:
            return "Not a match, try again"
        if outcome is None:
            return "That item is already matched"
        return None

    def get_summary_details(self) -> list[tuple[str, str]]:
        return [
            ("Attempts", str(self.session.attempts)),
            ("Efficiency", f"{self.session.efficiency}%"),
        ]

    def get_review_rows(self) -> list[dict[str, Any]]:
        pairs = self.session.content.pairs
        rows = []
        for i, pair in enumerate(pairs):
            right_index = self.session.responses.get(i)
            rows.append(
                {
                    "prompt": pair.left,
                    "answer": pairs[right_index].right if right_index is not None else "",
                    "expected": pair.right,
                    "correct": self._mark(i),
                }
            )
        return rows


class ExternalLinkHandler(SessionHandler[ExternalLinkSession]):
    input_mode = "link"

    def get_prompt_text(self) -> str:
        return f"Open this link to complete the exercise:\n  {self.session.url}"

    def get_input_prompt(self) -> str:
        return "Type 'o' once you have opened the link: "

    def process_user_input_with_input(self, user_input: str) -> str | None:
        if user_input.strip().lower() not in ("o", "y"):
            return "Type 'o' after opening the link"
        self.session.activate()
        return None


# Registry of handler classes; every ExerciseType must have an entry.
SESSION_HANDLERS: dict[ExerciseType, type[SessionHandler]] = {
    ExerciseType.MULTIPLE_CHOICE: MultipleChoiceHandler,
    ExerciseType.FILL_BLANK: FillBlankHandler,
    ExerciseType.ARRANGE_WORDS: ArrangeWordsHandler,
    ExerciseType.FLASH_CARDS: FlashCardsHandler,
    ExerciseType.MATCHING: MatchingHandler,
    ExerciseType.TRANSLATION: TranslationHandler,
    ExerciseType.EXTERNAL_LINK: ExternalLinkHandler,
}


def get_session_handler(session: BaseSession) -> SessionHandler:
    """Get an initialized handler for the given session."""
    return SESSION_HANDLERS[session.exercise_type](session)
