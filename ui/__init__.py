"""English Exercises UI Module - terminal interface for playing exercises."""

from ui.app import ExerciseUI
from ui.components import (
    ExerciseListTable,
    ExercisePanel,
    ResultPanel,
    ResultsTable,
    ReviewTable,
    WelcomeScreen,
)
from ui.styles import (
    BRAND_BLUE,
    BRAND_GOLD,
    SUCCESS_GREEN,
    ERROR_RED,
    INFO_BLUE,
    MUTED_GRAY,
)

__all__ = [
    "ExerciseUI",
    "ExerciseListTable",
    "ExercisePanel",
    "ResultPanel",
    "ResultsTable",
    "ReviewTable",
    "WelcomeScreen",
    "BRAND_BLUE",
    "BRAND_GOLD",
    "SUCCESS_GREEN",
    "ERROR_RED",
    "INFO_BLUE",
    "MUTED_GRAY",
]
