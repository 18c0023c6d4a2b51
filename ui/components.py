from rich.text import Text
from rich.panel import Panel
from rich.table import Table
from rich.style import Style
from rich.align import Align
from rich.columns import Columns
from rich import box
from typing import Optional, List, Dict, Any

from exercises.base import option_label
from exercises.config import ScoreBandConfig
from exercises.handlers import InputMode, QUIT_COMMAND, quit_hint
from ui.styles import (
    BRAND_BLUE,
    BRAND_GOLD,
    SUCCESS_GREEN,
    ERROR_RED,
    MUTED_GRAY,
    TEXT_WHITE,
    get_score_message,
    get_score_style,
)


def _progress_bar(progress_percent: float, width: int = 30) -> str:
    """Create a text-based progress bar."""
    filled = int(width * progress_percent / 100)
    remaining = width - filled
    bar = "█" * filled + "░" * remaining
    return f"[{bar}] {progress_percent:.0f}%"


class ExercisePanel:
    """A styled panel for displaying the current exercise item."""

    def __init__(
        self,
        title: str,
        prompt_text: str,
        options: List[str],
        position: int = 0,
        total: int = 0,
        input_mode: InputMode = "text",
    ):
        self.title = title
        self.prompt_text = prompt_text
        self.options = options
        self.position = position
        self.total = total
        self.input_mode = input_mode

    @property
    def progress_percent(self) -> float:
        return (self.position / self.total * 100) if self.total > 0 else 0

    def render(self) -> Panel:
        content = Text()

        if self.total > 0:
            content.append(_progress_bar(self.progress_percent), Style(color=MUTED_GRAY))
            content.append("\n")
            label = "Matched" if self.input_mode == "matching" else "Item"
            content.append(f"{label} {self.position}/{self.total}\n", Style(color=MUTED_GRAY))

        content.append(self.prompt_text, Style(color=BRAND_BLUE, bold=True))
        content.append("\n\n")

        for i, option in enumerate(self.options):
            label = str(i + 1) if self.input_mode == "ordering" else option_label(i)
            content.append(f"{label}. ", Style(color=BRAND_GOLD, bold=True))
            content.append(option, Style(color=TEXT_WHITE))
            content.append("\n")

        return Panel(
            Align.left(content),
            title=self.title,
            subtitle=quit_hint(self.input_mode),
            border_style=BRAND_BLUE,
            box=box.HEAVY,
            padding=(1, 2),
        )

    def __rich__(self) -> Panel:
        return self.render()


class ResultPanel:
    """Score summary shown when a session completes."""

    def __init__(
        self,
        percentage: int,
        correct_count: int,
        total_count: int,
        details: Optional[List[tuple[str, str]]] = None,
        bands: Optional[ScoreBandConfig] = None,
    ):
        self.percentage = percentage
        self.correct_count = correct_count
        self.total_count = total_count
        self.details = details or []
        self.bands = bands

    def render(self) -> Panel:
        score_style = get_score_style(self.percentage, self.bands)

        content = Text()
        content.append(f"{self.percentage}%\n", score_style)
        content.append(get_score_message(self.percentage, self.bands), score_style)
        content.append("\n")

        stats = Table(show_header=False, border_style=MUTED_GRAY, box=box.SIMPLE)
        stats.add_column("Label", style=Style(color=MUTED_GRAY))
        stats.add_column("Value", justify="right")
        stats.add_row(
            "Correct",
            Text(f"{self.correct_count}/{self.total_count}", style=Style(color=SUCCESS_GREEN)),
        )
        for label, value in self.details:
            stats.add_row(label, Text(value, style=Style(color=BRAND_GOLD, bold=True)))

        return Panel(
            Columns(
                [Align.center(content), Align.center(stats)],
                align="center",
                padding=(0, 1),
            ),
            title="Exercise Complete!",
            border_style=score_style,
            box=box.HEAVY,
            padding=(1, 3),
        )

    def __rich__(self) -> Panel:
        return self.render()


class ReviewTable:
    """Per-item review of a completed session."""

    def __init__(self, rows: List[Dict[str, Any]]):
        self.rows = rows

    def render(self) -> Panel:
        table = Table(
            show_header=True,
            header_style=Style(color=BRAND_BLUE, bold=True),
            border_style=MUTED_GRAY,
            row_styles=[Style(), Style(dim=True)],
            box=box.HEAVY,
        )

        table.add_column("#", justify="right", style=Style(color=MUTED_GRAY))
        table.add_column("Item", style=Style(color=TEXT_WHITE))
        table.add_column("Your answer")
        table.add_column("Expected", style=Style(color=SUCCESS_GREEN))
        table.add_column("Result", justify="center")

        for i, row in enumerate(self.rows, 1):
            correct = row.get("correct", False)
            table.add_row(
                str(i),
                row.get("prompt", ""),
                row.get("answer", "") or "—",
                row.get("expected", ""),
                Text(
                    row.get("mark", "✓" if correct else "✗"),
                    style=Style(color=SUCCESS_GREEN if correct else ERROR_RED, bold=True),
                ),
            )

        return Panel(
            Align.center(table),
            title="Review",
            border_style=BRAND_GOLD,
            box=box.HEAVY,
            padding=(1, 1),
        )

    def __rich__(self) -> Panel:
        return self.render()


class WelcomeScreen:
    """Exercise introduction shown before playing."""

    def __init__(self, title: str, description: str, exercise_type: str, item_count: int):
        self.title = title
        self.description = description
        self.exercise_type = exercise_type
        self.item_count = item_count

    def render(self) -> Panel:
        content = Text()
        content.append(f"{self.title}\n", Style(color=BRAND_BLUE, bold=True))
        if self.description:
            content.append(f"{self.description}\n", Style(color=TEXT_WHITE))
        content.append(f"\nType '{QUIT_COMMAND}' at any time to quit.\n", Style(color=MUTED_GRAY))

        stats = Table(show_header=False, border_style=MUTED_GRAY, box=box.ROUNDED)
        stats.add_column("Label", justify="center")
        stats.add_column("Value", justify="center")
        stats.add_row(
            Text("Type", style=Style(color=MUTED_GRAY)),
            Text(self.exercise_type.replace("_", " ").title(), style=Style(color=BRAND_GOLD, bold=True)),
        )
        stats.add_row(
            Text("Items", style=Style(color=MUTED_GRAY)),
            Text(str(self.item_count), style=Style(color=BRAND_GOLD, bold=True)),
        )

        return Panel(
            Columns([Align.center(content), Align.center(stats)], align="center", padding=(1, 3)),
            border_style=BRAND_BLUE,
            box=box.HEAVY,
            padding=(1, 3),
        )

    def __rich__(self) -> Panel:
        return self.render()


class ResultsTable:
    """A student's stored results, as listed by the results command."""

    def __init__(self, rows: List[Dict[str, Any]], bands: Optional[ScoreBandConfig] = None):
        self.rows = rows
        self.bands = bands

    def render(self) -> Table:
        table = Table(
            show_header=True,
            header_style=Style(color=BRAND_BLUE, bold=True),
            border_style=MUTED_GRAY,
            box=box.HEAVY,
            title="Results",
        )
        table.add_column("Exercise", style=Style(color=TEXT_WHITE))
        table.add_column("Score", justify="right")
        table.add_column("Time", justify="right", style=Style(color=MUTED_GRAY))
        table.add_column("Completed", style=Style(color=MUTED_GRAY))

        for row in self.rows:
            score = row.get("score", 0)
            time_taken = row.get("time_taken")
            table.add_row(
                row.get("title", ""),
                Text(f"{score}%", style=get_score_style(score, self.bands)),
                f"{time_taken}s" if time_taken is not None else "—",
                row.get("completed_at", ""),
            )
        return table

    def __rich__(self) -> Table:
        return self.render()


class ExerciseListTable:
    """Exercises of one class, as listed by the list command."""

    def __init__(self, exercises: List[Any]):
        self.exercises = exercises

    def render(self) -> Table:
        table = Table(
            show_header=True,
            header_style=Style(color=BRAND_BLUE, bold=True),
            border_style=MUTED_GRAY,
            box=box.HEAVY,
            title="Exercises",
        )
        table.add_column("ID", style=Style(color=MUTED_GRAY))
        table.add_column("Title", style=Style(color=TEXT_WHITE))
        table.add_column("Type", style=Style(color=BRAND_GOLD))
        table.add_column("Items", justify="right")
        table.add_column("Active", justify="center")

        for exercise in self.exercises:
            table.add_row(
                exercise.id,
                exercise.title,
                exercise.type.value.replace("_", " "),
                str(len(exercise.content.items)),
                Text(
                    "yes" if exercise.is_active else "no",
                    style=Style(color=SUCCESS_GREEN if exercise.is_active else ERROR_RED),
                ),
            )
        return table

    def __rich__(self) -> Table:
        return self.render()
