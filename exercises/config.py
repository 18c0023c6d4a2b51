"""Configuration for grading and playing exercises.

These configuration models allow tuning of answer tolerance and player
behaviour, such as the translation overlap thresholds or whether matching
answers are shuffled.
"""

from pydantic import BaseModel, Field, model_validator

from exercises.base import TERMINAL_PUNCTUATION


class TranslationConfig(BaseModel):
    """Word-overlap thresholds for translation tiers."""

    good_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    partial_threshold: float = Field(default=0.4, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_order(self) -> "TranslationConfig":
        if self.partial_threshold > self.good_threshold:
            raise ValueError("partial_threshold must not exceed good_threshold")
        return self


class GradingConfig(BaseModel):
    """Configuration for answer checking."""

    punctuation: str = TERMINAL_PUNCTUATION
    translation: TranslationConfig = Field(default_factory=TranslationConfig)


class ScoreBandConfig(BaseModel):
    """Percentage cut-offs used to colour results."""

    good: int = Field(default=70, ge=0, le=100)
    fair: int = Field(default=50, ge=0, le=100)


class PlayerConfig(BaseModel):
    """Configuration for play sessions."""

    shuffle_matching: bool = True
    flip_back_on_move: bool = True
    bands: ScoreBandConfig = Field(default_factory=ScoreBandConfig)


class ExerciseConfig(BaseModel):
    """Master configuration for grading and playing."""

    grading: GradingConfig = Field(default_factory=GradingConfig)
    player: PlayerConfig = Field(default_factory=PlayerConfig)
