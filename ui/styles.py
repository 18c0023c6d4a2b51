from rich.theme import Theme
from rich.style import Style
from rich.text import Text

from exercises.config import ScoreBandConfig
from exercises.scoring import score_band

BRAND_BLUE = "#2563EB"
BRAND_GOLD = "#F1C40F"
SUCCESS_GREEN = "#27AE60"
ERROR_RED = "#C0392B"
INFO_BLUE = "#3498DB"
MUTED_GRAY = "#7F8C8D"
TEXT_WHITE = "#FFFFFF"

DEFAULT_THEME = Theme(
    {
        "primary": Style(color=BRAND_BLUE, bold=True),
        "secondary": Style(color=BRAND_GOLD, bold=True),
        "success": Style(color=SUCCESS_GREEN),
        "error": Style(color=ERROR_RED, bold=True),
        "info": Style(color=INFO_BLUE),
        "muted": Style(color=MUTED_GRAY),
        "option_label": Style(color=BRAND_GOLD, bold=True),
        "option_text": Style(color=TEXT_WHITE),
        "score_good": Style(color=SUCCESS_GREEN, bold=True),
        "score_fair": Style(color=BRAND_GOLD, bold=True),
        "score_poor": Style(color=ERROR_RED, bold=True),
    }
)

_BAND_STYLES = {
    "good": Style(color=SUCCESS_GREEN, bold=True),
    "fair": Style(color=BRAND_GOLD, bold=True),
    "poor": Style(color=ERROR_RED, bold=True),
}

_BAND_MESSAGES = {
    "good": "Great job!",
    "fair": "Good effort!",
    "poor": "Keep practicing!",
}


def get_score_style(percentage: int, bands: ScoreBandConfig | None = None) -> Style:
    """Get color style based on score percentage."""
    return _BAND_STYLES[score_band(percentage, bands)]


def get_score_message(percentage: int, bands: ScoreBandConfig | None = None) -> str:
    return _BAND_MESSAGES[score_band(percentage, bands)]


def create_banner() -> Text:
    """Create the welcome banner text."""
    banner = Text()
    banner.append("╔══════════════════════════════════════╗\n", Style(color=BRAND_BLUE))
    banner.append("║          English Exercises           ║\n", Style(color=BRAND_GOLD, bold=True))
    banner.append("╚══════════════════════════════════════╝", Style(color=BRAND_BLUE))
    return banner
