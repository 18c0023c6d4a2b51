import argparse
import functools
import json
import logging
import signal
import sys
import uuid
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console

from exercises import (
    ExerciseConfig,
    InvalidContentError,
    get_session_handler,
    prepare_content,
    start_session,
)
from exercises.session import BaseSession, playable_content
from models import Exercise, parse_content
from storage import (
    ClassNotFoundError,
    DEFAULT_DB_PATH,
    ExerciseNotFoundError,
    get_class_repo,
    get_exercise_repo,
    get_result_repo,
    get_student_repo,
    init_schema,
)
from ui import ExerciseUI
from ui.styles import DEFAULT_THEME

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with subcommands."""
    parser = argparse.ArgumentParser(description="English Exercises")
    parser.add_argument(
        "--db",
        type=Path,
        default=DEFAULT_DB_PATH,
        help=f"SQLite database path (default: {DEFAULT_DB_PATH})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="Create the database schema")

    class_parser = subparsers.add_parser("create-class", help="Create a class")
    class_parser.add_argument("name", help="Class name")
    class_parser.add_argument("--description", "-d", default="", help="Class description")
    class_parser.add_argument("--teacher", "-t", default=None, help="Teacher id")

    join_parser = subparsers.add_parser("join", help="Join a class with its access code")
    join_parser.add_argument("code", help="6-character access code")
    join_parser.add_argument("name", help="Student name")

    add_parser = subparsers.add_parser("add-exercise", help="Add an exercise from a JSON file")
    add_parser.add_argument("file", type=Path, help="JSON file with title, description and content")
    add_parser.add_argument("--class-id", "-c", default=None, help="Class the exercise belongs to")
    add_parser.add_argument("--title", default=None, help="Override the title in the file")

    list_parser = subparsers.add_parser("list", help="List a class's exercises")
    list_parser.add_argument("class_id", help="Class id")
    list_parser.add_argument("--all", "-a", action="store_true", help="Include inactive exercises")

    play_parser = subparsers.add_parser("play", help="Play an exercise")
    play_parser.add_argument("exercise_id", help="Exercise id")
    play_parser.add_argument(
        "--student",
        "-s",
        default=None,
        help="Student id; the score is saved only when given",
    )

    results_parser = subparsers.add_parser("results", help="Show a student's results")
    results_parser.add_argument("student_id", help="Student id")

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def create_sigint_handler(ui: ExerciseUI):
    """Create a SIGINT handler that exits with the quit message."""

    def sigint_handler(signum, frame):
        ui.show_quit_message()
        sys.exit(130)

    return sigint_handler


def load_exercise_file(path: Path, title: str | None = None, class_id: str | None = None) -> Exercise:
    """Read an exercise document and build an Exercise ready to save.

    The file holds {"title", "description", "content"}; a bare content
    object is also accepted, in which case a title must be given. Content
    with nothing playable is refused.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if "content" in data:
        content_data = data["content"]
    else:
        content_data, data = data, {}

    title = title or data.get("title")
    if not title:
        raise ValueError("Exercise title is required")

    content = prepare_content(parse_content(content_data))
    if not playable_content(content).items:
        raise ValueError(f"{content.type} exercise has no playable items")
    return Exercise(
        id=str(uuid.uuid4()),
        title=title,
        description=data.get("description", ""),
        content=content,
        is_active=data.get("is_active", True),
        class_id=class_id,
    )


def play_session(ui: ExerciseUI, session: BaseSession, title: str, description: str = "") -> bool:
    """Run a session until the learner leaves.

    Returns:
        True if at least one play-through was completed.
    """
    handler = get_session_handler(session)
    completed = False

    ui.clear_screen()
    ui.show_welcome(
        title=title,
        description=description,
        exercise_type=session.exercise_type.value,
        item_count=session.item_count,
    )

    while True:
        error = None
        while not session.is_completed:
            ui.clear_screen()
            if error:
                ui.show_hint(error)
            user_input = ui.show_exercise(title, handler)
            if user_input == "quit":
                ui.show_quit_message()
                return completed
            error = handler.process_user_input_with_input(user_input)

        completed = True
        ui.clear_screen()
        ui.show_results(session.result, handler)

        choice = ui.ask_play_again(can_shuffle=hasattr(session, "shuffle_restart"))
        if choice == "quit":
            return completed
        if choice == "shuffle":
            session.shuffle_restart()
        else:
            session.restart()


def run_init(args, ui: ExerciseUI) -> int:
    ui.show_success(f"Database ready at {args.db}")
    return 0


def run_create_class(args, ui: ExerciseUI) -> int:
    try:
        classroom = get_class_repo(args.db).create_class(
            args.name, description=args.description, teacher_id=args.teacher
        )
    except ValueError as exc:
        ui.show_error(str(exc))
        return 1
    ui.show_class_created(classroom)
    ui.show_info(f"Class id: {classroom.id}")
    return 0


def run_join(args, ui: ExerciseUI) -> int:
    try:
        student = get_student_repo(args.db).join_class(args.code, args.name)
    except (ValueError, ClassNotFoundError) as exc:
        ui.show_error(str(exc))
        return 1
    classroom = get_class_repo(args.db).get_by_id(student.class_id)
    ui.show_joined(student, classroom)
    return 0


def run_add_exercise(args, ui: ExerciseUI) -> int:
    if args.class_id and get_class_repo(args.db).get_by_id(args.class_id) is None:
        ui.show_error(f"Class {args.class_id} not found")
        return 1
    try:
        exercise = load_exercise_file(args.file, title=args.title, class_id=args.class_id)
    except (OSError, json.JSONDecodeError, ValidationError, ValueError) as exc:
        logger.debug("Rejected exercise file %s", args.file, exc_info=True)
        ui.show_error(f"Invalid exercise file: {exc}")
        return 1

    get_exercise_repo(args.db).save(exercise)
    ui.show_success(f"Added {exercise.type.value} exercise '{exercise.title}'")
    ui.show_info(f"Exercise id: {exercise.id}")
    return 0


def run_list(args, ui: ExerciseUI) -> int:
    exercises = get_exercise_repo(args.db).get_for_class(
        args.class_id, active_only=not args.all
    )
    ui.show_exercise_list(exercises)
    return 0


def run_play(args, ui: ExerciseUI) -> int:
    """Play one exercise, saving the score when a student is given."""
    exercise_repo = get_exercise_repo(args.db)
    config = ExerciseConfig()

    on_complete = None
    if args.student:
        student = get_student_repo(args.db).get_by_id(args.student)
        if student is None:
            ui.show_error(f"Student {args.student} not found")
            return 1
        on_complete = functools.partial(
            get_result_repo(args.db).report_completion, args.exercise_id, student.id
        )

    try:
        session = start_session(
            args.exercise_id, exercise_repo, on_complete=on_complete, config=config
        )
    except (ExerciseNotFoundError, InvalidContentError) as exc:
        ui.show_error(str(exc))
        return 1

    exercise = exercise_repo.get_by_id(args.exercise_id)
    ui.bands = config.player.bands
    signal.signal(signal.SIGINT, create_sigint_handler(ui))
    play_session(ui, session, exercise.title, exercise.description)
    return 0


def run_results(args, ui: ExerciseUI) -> int:
    student = get_student_repo(args.db).get_by_id(args.student_id)
    if student is None:
        ui.show_error(f"Student {args.student_id} not found")
        return 1

    exercise_repo = get_exercise_repo(args.db)
    rows = []
    for result in get_result_repo(args.db).get_for_student(student.id):
        exercise = exercise_repo.get_by_id(result.exercise_id)
        rows.append(
            {
                "title": exercise.title if exercise else result.exercise_id,
                "score": result.score,
                "time_taken": result.time_taken,
                "completed_at": result.completed_at.strftime("%Y-%m-%d %H:%M"),
            }
        )
    ui.show_info(f"Results for {student.name}")
    ui.show_results_table(rows)
    return 0


COMMANDS = {
    "init": run_init,
    "create-class": run_create_class,
    "join": run_join,
    "add-exercise": run_add_exercise,
    "list": run_list,
    "play": run_play,
    "results": run_results,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point with CLI routing."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    init_schema(args.db)
    ui = ExerciseUI(Console(theme=DEFAULT_THEME))
    return COMMANDS[args.command](args, ui)


if __name__ == "__main__":
    sys.exit(main())
