from rich.console import Console
from rich.text import Text
from rich.panel import Panel
from typing import Optional, List, Dict, Any

from exercises.config import ScoreBandConfig
from exercises.handlers import SessionHandler, is_quit_command
from models import ClassRoom, ScoreResult, Student
from ui.components import (
    ExerciseListTable,
    ExercisePanel,
    ResultPanel,
    ResultsTable,
    ReviewTable,
    WelcomeScreen,
)
from ui.styles import (
    create_banner,
    SUCCESS_GREEN,
    ERROR_RED,
    INFO_BLUE,
    MUTED_GRAY,
    BRAND_GOLD,
)


class ExerciseUI:
    """Main UI orchestrator for playing exercises in the terminal."""

    def __init__(self, console: Optional[Console] = None, bands: Optional[ScoreBandConfig] = None):
        self.console = console or Console()
        self.bands = bands

    def show_welcome(
        self,
        title: str,
        description: str,
        exercise_type: str,
        item_count: int,
    ) -> None:
        """Display the exercise introduction and wait for user to press Enter."""
        self.console.print(create_banner())
        self.console.print()
        welcome = WelcomeScreen(
            title=title,
            description=description,
            exercise_type=exercise_type,
            item_count=item_count,
        )
        self.console.print(welcome)
        self.console.print()
        self.console.input(Text("Press Enter to start...", style=f"bold {MUTED_GRAY}"))

    def show_exercise(self, title: str, handler: SessionHandler) -> str:
        """Display the handler's current item and get one line of input.

        Returns:
            "quit" if user quits, otherwise the user's raw input.
        """
        panel = ExercisePanel(
            title=title,
            prompt_text=handler.get_prompt_text(),
            options=handler.get_options(),
            position=handler.position,
            total=handler.total,
            input_mode=handler.input_mode,
        )
        self.console.print(panel)
        self.console.print()

        user_input = self.console.input(
            Text(handler.get_input_prompt(), style=f"bold {MUTED_GRAY}")
        )
        if is_quit_command(user_input, handler.input_mode):
            return "quit"
        return user_input

    def show_results(self, result: ScoreResult, handler: SessionHandler) -> None:
        """Display the score summary and per-item review."""
        self.console.print(
            ResultPanel(
                percentage=result.percentage,
                correct_count=result.correct_count,
                total_count=result.total_count,
                details=handler.get_summary_details(),
                bands=self.bands,
            )
        )
        rows = handler.get_review_rows()
        if rows:
            self.console.print(ReviewTable(rows))
        self.console.print()

    def ask_play_again(self, can_shuffle: bool = False) -> str:
        """Ask whether to play again.

        Returns:
            "restart", "shuffle" or "quit".
        """
        choices = "(r)estart, (s)huffle and restart, (q)uit" if can_shuffle else "(r)estart, (q)uit"
        while True:
            user_input = self.console.input(
                Text(f"Play again? {choices}: ", style=f"bold {MUTED_GRAY}")
            ).strip().lower()

            if user_input in ("", "q"):
                return "quit"
            if user_input == "r":
                return "restart"
            if user_input == "s" and can_shuffle:
                return "shuffle"

            self.console.print(Text(f"Please choose {choices}\n", style=ERROR_RED))

    def show_results_table(self, rows: List[Dict[str, Any]]) -> None:
        if not rows:
            self.show_info("No results yet.")
            return
        self.console.print(ResultsTable(rows, self.bands))

    def show_exercise_list(self, exercises: List[Any]) -> None:
        if not exercises:
            self.show_info("No exercises yet.")
            return
        self.console.print(ExerciseListTable(exercises))

    def show_class_created(self, classroom: ClassRoom) -> None:
        content = Text()
        content.append(f"{classroom.name}\n\n", style=f"bold {INFO_BLUE}")
        content.append("Access code: ", style=MUTED_GRAY)
        content.append(classroom.access_code, style=f"bold {BRAND_GOLD}")
        self.console.print(Panel(content, title="Class Created", border_style=SUCCESS_GREEN))

    def show_joined(self, student: Student, classroom: ClassRoom) -> None:
        self.show_success(f"Welcome, {student.name}! You joined {classroom.name}.")
        self.show_info(f"Your student id: {student.id}")

    def show_error(self, message: str) -> None:
        """Display an error message."""
        self.console.print(
            Panel(
                Text(f"Error: {message}", style=ERROR_RED),
                title="Error",
                border_style=ERROR_RED,
            )
        )

    def show_hint(self, message: str) -> None:
        """Display an input correction without a panel."""
        self.console.print(Text(f"{message}\n", style=ERROR_RED))

    def show_info(self, message: str) -> None:
        """Display an informational message."""
        self.console.print(Text(message, style=INFO_BLUE))

    def show_success(self, message: str) -> None:
        """Display a success message."""
        self.console.print(Text(message, style=SUCCESS_GREEN))

    def show_quit_message(self) -> None:
        """Display the quit message."""
        self.console.print()
        self.console.print(Text("👋 Goodbye! Unfinished answers were not saved.", style=MUTED_GRAY))

    def clear_screen(self) -> None:
        """Clear the terminal screen."""
        self.console.clear()
