"""Reduce per-item marks to percentage scores."""

import math
from datetime import datetime
from typing import Literal, Sequence

from pydantic import BaseModel

from exercises.config import ScoreBandConfig
from models import ScoreResult, TranslationTier

# Tiers that count toward a submitted translation score.
CORRECT_TIERS = frozenset({TranslationTier.EXACT, TranslationTier.GOOD})

ScoreBand = Literal["good", "fair", "poor"]


def percentage(correct: int, total: int) -> int:
    """Whole-number percentage, rounding halves up and clamped to 0-100.

    A non-positive total yields 0.
    """
    if total <= 0:
        return 0
    value = math.floor(100 * correct / total + 0.5)
    return max(0, min(100, value))


def is_correct(mark: bool | TranslationTier) -> bool:
    """Whether a mark counts toward the submitted score."""
    if isinstance(mark, TranslationTier):
        return mark in CORRECT_TIERS
    return mark is True


def aggregate(
    marks: Sequence[bool | TranslationTier],
    completed_at: datetime | None = None,
) -> ScoreResult:
    """Reduce marks to a ScoreResult.

    The denominator is the number of marks, so fill-in-blank exercises are
    scored per blank and translation exercises count exact and good tiers.
    """
    correct = sum(1 for mark in marks if is_correct(mark))
    total = len(marks)
    fields = {"percentage": percentage(correct, total), "correct_count": correct, "total_count": total}
    if completed_at is not None:
        fields["completed_at"] = completed_at
    return ScoreResult(**fields)


class TranslationSummary(BaseModel):
    """Breakdown of a translation play-through shown on the results screen."""

    exact_count: int
    good_count: int
    partial_count: int
    total: int

    @property
    def exact_percentage(self) -> int:
        """Display-only score counting exact answers alone."""
        return percentage(self.exact_count, self.total)

    @property
    def submitted_percentage(self) -> int:
        """Submitted score counting exact and good answers."""
        return percentage(self.exact_count + self.good_count, self.total)


def translation_summary(tiers: Sequence[TranslationTier]) -> TranslationSummary:
    return TranslationSummary(
        exact_count=sum(1 for t in tiers if t == TranslationTier.EXACT),
        good_count=sum(1 for t in tiers if t == TranslationTier.GOOD),
        partial_count=sum(1 for t in tiers if t == TranslationTier.PARTIAL),
        total=len(tiers),
    )


def matching_efficiency(matched: int, attempts: int) -> int:
    """Matched pairs per click attempt as a percentage; display only."""
    return percentage(matched, attempts)


def score_band(value: int, bands: ScoreBandConfig | None = None) -> ScoreBand:
    """Classify a percentage for colouring result screens."""
    bands = bands or ScoreBandConfig()
    if value >= bands.good:
        return "good"
    elif value >= bands.fair:
        return "fair"
    else:
        return "poor"
