"""Exercise grading and play sessions for the English exercises application.

Architecture:
- Content models (models.py) describe what a teacher authored
- Graders turn a content plus recorded responses into per-item marks (pure)
- Scoring reduces marks to a ScoreResult percentage
- Sessions hold one play-through and grade it exactly once on completion
- Handlers adapt sessions to one line of terminal input at a time
- Editor helpers build and tidy content before it is saved

Sessions:
- MultipleChoiceSession, FillBlankSession, ArrangeWordsSession,
  FlashCardsSession, TranslationSession: linear previous/next navigation
- MatchingSession: select a left item, then a right item
- ExternalLinkSession: completes when the link is opened

Configuration:
- ExerciseConfig: grading tolerance and player behaviour
"""

from exercises.base import normalize, parse_blanks, parse_letter_input
from exercises.config import (
    ExerciseConfig,
    GradingConfig,
    PlayerConfig,
    ScoreBandConfig,
    TranslationConfig,
)
from exercises.editor import (
    SUPPORTED_LANGUAGES,
    add_item,
    new_content,
    prepare_content,
    remove_item,
    update_item,
)
from exercises.graders import GRADERS, check_translation, get_grader, grade
from exercises.handlers import (
    SESSION_HANDLERS,
    SessionHandler,
    get_session_handler,
)
from exercises.scoring import (
    aggregate,
    matching_efficiency,
    percentage,
    score_band,
    translation_summary,
)
from exercises.session import (
    SESSION_TYPES,
    ArrangeWordsSession,
    BaseSession,
    CompletionReporter,
    ExerciseSession,
    ExternalLinkSession,
    FillBlankSession,
    FlashCardsSession,
    InvalidContentError,
    MatchingSession,
    MultipleChoiceSession,
    SessionStateError,
    TranslationSession,
    create_session,
    start_session,
)

__all__ = [
    # Utilities
    "normalize",
    "parse_blanks",
    "parse_letter_input",
    # Configuration
    "ExerciseConfig",
    "GradingConfig",
    "PlayerConfig",
    "ScoreBandConfig",
    "TranslationConfig",
    # Editor
    "SUPPORTED_LANGUAGES",
    "new_content",
    "add_item",
    "remove_item",
    "update_item",
    "prepare_content",
    # Grading
    "GRADERS",
    "get_grader",
    "grade",
    "check_translation",
    # Scoring
    "percentage",
    "aggregate",
    "translation_summary",
    "matching_efficiency",
    "score_band",
    # Sessions
    "SESSION_TYPES",
    "BaseSession",
    "ExerciseSession",
    "MultipleChoiceSession",
    "FillBlankSession",
    "ArrangeWordsSession",
    "FlashCardsSession",
    "TranslationSession",
    "MatchingSession",
    "ExternalLinkSession",
    "CompletionReporter",
    "InvalidContentError",
    "SessionStateError",
    "create_session",
    "start_session",
    # Handlers
    "SESSION_HANDLERS",
    "SessionHandler",
    "get_session_handler",
]
