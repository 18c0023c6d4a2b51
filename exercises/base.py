"""Shared text utilities for authoring and checking exercises."""

import random
import re
import string
from typing import Sequence, TypeVar

from models import Blank

T = TypeVar("T")

TERMINAL_PUNCTUATION = ".,!?;:"
BLANK_MARKER = "_____"

_BLANK_RE = re.compile(r"\[([^\]]+)\]")


def normalize(text: str | None, punctuation: str = TERMINAL_PUNCTUATION) -> str:
    """Canonicalize free-text input for tolerant comparison.

    Case-folds, removes the punctuation characters and collapses runs of
    whitespace (leading and trailing whitespace is dropped). ``None`` and
    the empty string both yield "".

    Examples:
        >>> normalize("  The Cat,  is sleeping! ")
        'the cat is sleeping'
    """
    if not text:
        return ""
    folded = text.casefold()
    if punctuation:
        folded = folded.translate(str.maketrans("", "", punctuation))
    return " ".join(folded.split())


def parse_blanks(text: str) -> list[Blank]:
    """Scan a template left to right for [word] markers.

    Returns:
        One Blank per marker, in order. Offsets refer to the raw template and
        never overlap.
    """
    if not text:
        return []
    return [
        Blank(word=match.group(1), position=match.start(), length=len(match.group(0)))
        for match in _BLANK_RE.finditer(text)
    ]


def mask_blanks(text: str) -> str:
    """Replace each [word] marker with a blank line for display."""
    return _BLANK_RE.sub(BLANK_MARKER, text or "")


def reveal_blanks(text: str) -> str:
    """Drop the brackets, showing the completed sentence."""
    return _BLANK_RE.sub(r"\1", text or "")


def blanks_overlap(blanks: Sequence[Blank]) -> bool:
    """Check whether any two blanks share characters of the template."""
    ordered = sorted(blanks, key=lambda b: b.position)
    for previous, current in zip(ordered, ordered[1:]):
        if current.position < previous.end:
            return True
    return False


def split_words(sentence: str) -> list[str]:
    """Split a sentence into words on whitespace, keeping punctuation attached."""
    return (sentence or "").split()


def shuffled(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Return a shuffled copy of items."""
    result = list(items)
    (rng or random).shuffle(result)
    return result


def parse_letter_input(user_input: str, max_options: int = 4) -> int | None:
    """Parse letter (A, B, ...) or number (1, 2, ...) input to 0-based index.

    Args:
        user_input: Raw user input string.
        max_options: Maximum number of valid options.

    Returns:
        0-based index or None if input is invalid or out of bounds.
    """
    user_input = user_input.strip().upper()

    if len(user_input) == 1 and user_input in string.ascii_uppercase:
        index = string.ascii_uppercase.index(user_input)
    elif user_input.isdigit():
        index = int(user_input) - 1
    else:
        return None

    if index < 0 or index >= max_options:
        return None

    return index


def option_label(index: int) -> str:
    """Letter label shown next to an option (0 -> "A")."""
    return string.ascii_uppercase[index] if index < 26 else str(index + 1)
