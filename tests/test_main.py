"""Integration tests for the command line in main.py.

These tests simulate user input through stdin by mocking Console.input().
"""

import json
from typing import Any

import pytest
from rich.console import Console

import main
from storage import (
    SQLiteClassRepository,
    SQLiteExerciseRepository,
    SQLiteResultRepository,
    SQLiteStudentRepository,
    get_connection,
)


class InputSequence:
    """Callable providing sequential inputs for mocked Console.input().

    Tracks all prompts received for debugging failed tests.
    """

    def __init__(self, inputs: list[str]):
        self.inputs = inputs
        self.index = 0
        self.call_history: list[tuple[int, Any]] = []

    def __call__(self, prompt: Any = "") -> str:
        """Return next input in sequence, tracking prompts received."""
        self.call_history.append((self.index, prompt))
        if self.index >= len(self.inputs):
            history = "\n".join(f"  {i}: {p}" for i, p in self.call_history)
            raise AssertionError(
                f"Ran out of inputs at call {self.index}.\n"
                f"Prompt: {prompt}\n"
                f"History:\n{history}"
            )
        result = self.inputs[self.index]
        self.index += 1
        return result

    @property
    def remaining(self) -> int:
        """Number of unused inputs remaining."""
        return len(self.inputs) - self.index


@pytest.fixture
def cli(tmp_path, monkeypatch):
    """Fixture providing a runner for main() against a temporary database.

    Patches Console.input with the given InputSequence, Console.clear to a
    no-op and signal.signal to a no-op.
    """
    db_path = tmp_path / "cli.db"
    monkeypatch.setattr("signal.signal", lambda *args, **kwargs: None)
    monkeypatch.setattr(Console, "clear", lambda self: None)

    def runner(*args: str, inputs: InputSequence | None = None) -> int:
        monkeypatch.setattr(Console, "input", inputs or InputSequence([]))
        return main.main(["--db", str(db_path), *args])

    runner.db_path = db_path
    return runner


@pytest.fixture
def exercise_file(tmp_path):
    path = tmp_path / "letters.json"
    path.write_text(
        json.dumps(
            {
                "title": "Greek letters",
                "description": "Pick the right letter",
                "content": {
                    "type": "multiple_choice",
                    "questions": [
                        {"question": f"Q{i}", "options": ["a", "b", "c", "d"], "correct_index": i}
                        for i in range(4)
                    ],
                },
            }
        )
    )
    return path


@pytest.fixture
def classroom_setup(cli, exercise_file):
    """Create a class, a student and one exercise through the CLI."""
    assert cli("create-class", "Morning English") == 0
    classroom = SQLiteClassRepository(cli.db_path).get_all()[0]
    assert cli("join", classroom.access_code.lower(), "Ana") == 0
    student = SQLiteStudentRepository(cli.db_path).get_for_class(classroom.id)[0]
    assert cli("add-exercise", str(exercise_file), "--class-id", classroom.id) == 0
    exercise = SQLiteExerciseRepository(cli.db_path).get_for_class(classroom.id)[0]
    return {"class": classroom, "student": student, "exercise": exercise}


class TestSetupCommands:
    """Tests for init, create-class, join, add-exercise and list."""

    def test_init_creates_database(self, cli):
        """init should create the database file."""
        assert cli("init") == 0
        assert cli.db_path.exists()

    def test_no_command_prints_help(self, cli, capsys):
        """Running without a command should show help."""
        assert cli() == 0
        assert "usage" in capsys.readouterr().out

    def test_join_unknown_code(self, cli):
        """Joining with an unknown code should fail."""
        assert cli("join", "ZZZZZZ", "Ana") == 1

    def test_add_exercise_prepares_content(self, classroom_setup):
        """Added exercises should be stored with their title and type."""
        exercise = classroom_setup["exercise"]
        assert exercise.title == "Greek letters"
        assert exercise.type.value == "multiple_choice"
        assert exercise.class_id == classroom_setup["class"].id

    def test_add_exercise_rejects_unknown_type(self, cli, tmp_path):
        """Unknown content types should be refused."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"title": "Bad", "content": {"type": "crossword"}}))
        assert cli("add-exercise", str(path)) == 1

    def test_add_exercise_requires_title(self, cli, tmp_path):
        """A bare content document needs --title."""
        path = tmp_path / "bare.json"
        path.write_text(json.dumps({"type": "external_link", "url": "https://example.com"}))
        assert cli("add-exercise", str(path)) == 1
        assert cli("add-exercise", str(path), "--title", "Listen") == 0

    @pytest.mark.parametrize(
        "content",
        [
            {"type": "matching", "pairs": []},
            {"type": "matching", "pairs": [{"left": "cat", "right": " "}]},
            {"type": "external_link", "url": "  "},
        ],
    )
    def test_add_exercise_rejects_unplayable_content(self, cli, tmp_path, content):
        """Content with nothing to play should not be saved."""
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"title": "Empty", "content": content}))
        assert cli("add-exercise", str(path)) == 1
        conn = get_connection(cli.db_path)
        try:
            assert conn.execute("SELECT COUNT(*) FROM exercises").fetchone()[0] == 0
        finally:
            conn.close()

    def test_list(self, cli, classroom_setup):
        """list should succeed for a class."""
        assert cli("list", classroom_setup["class"].id, "--all") == 0


class TestPlayCommand:
    """Tests for the play command."""

    def test_play_saves_score(self, cli, classroom_setup):
        """Completing an exercise should store the student's score."""
        exercise = classroom_setup["exercise"]
        student = classroom_setup["student"]
        inputs = InputSequence(["", "A", "B", "A", "D", "q"])

        assert cli("play", exercise.id, "--student", student.id, inputs=inputs) == 0
        assert inputs.remaining == 0

        result = SQLiteResultRepository(cli.db_path).get(exercise.id, student.id)
        assert result.score == 75

    def test_invalid_answer_asks_again(self, cli, classroom_setup):
        """An invalid answer should repeat the same item."""
        exercise = classroom_setup["exercise"]
        student = classroom_setup["student"]
        inputs = InputSequence(["", "Z", "A", "B", "C", "D", "q"])

        assert cli("play", exercise.id, "--student", student.id, inputs=inputs) == 0
        assert SQLiteResultRepository(cli.db_path).get(exercise.id, student.id).score == 100

    def test_restart_overwrites_score(self, cli, classroom_setup):
        """Playing again should replace the stored score."""
        exercise = classroom_setup["exercise"]
        student = classroom_setup["student"]
        inputs = InputSequence(["", "A", "B", "C", "D", "r", "A", "A", "A", "A", "q"])

        assert cli("play", exercise.id, "--student", student.id, inputs=inputs) == 0
        assert SQLiteResultRepository(cli.db_path).get(exercise.id, student.id).score == 25

    def test_quit_midway_saves_nothing(self, cli, classroom_setup):
        """Quitting before completion should not store a result."""
        exercise = classroom_setup["exercise"]
        student = classroom_setup["student"]
        inputs = InputSequence(["", "A", "q"])

        assert cli("play", exercise.id, "--student", student.id, inputs=inputs) == 0
        assert SQLiteResultRepository(cli.db_path).get(exercise.id, student.id) is None

    def test_play_without_student(self, cli, classroom_setup):
        """Anonymous play should work and store nothing."""
        exercise = classroom_setup["exercise"]
        inputs = InputSequence(["", "A", "B", "C", "D", "q"])
        assert cli("play", exercise.id, inputs=inputs) == 0
        assert SQLiteResultRepository(cli.db_path).get_for_exercise(exercise.id) == []

    def test_play_inactive_exercise(self, cli, classroom_setup):
        """Inactive exercises cannot be played."""
        exercise = classroom_setup["exercise"]
        SQLiteExerciseRepository(cli.db_path).set_active(exercise.id, False)
        assert cli("play", exercise.id) == 1

    def test_play_unknown_student(self, cli, classroom_setup):
        """An unknown student id should be refused before playing."""
        assert cli("play", classroom_setup["exercise"].id, "--student", "ghost") == 1

    def test_results(self, cli, classroom_setup):
        """results should list the student's scores."""
        exercise = classroom_setup["exercise"]
        student = classroom_setup["student"]
        cli("play", exercise.id, "--student", student.id,
            inputs=InputSequence(["", "A", "B", "C", "D", "q"]))
        assert cli("results", student.id) == 0
        assert cli("results", "ghost") == 1

    def test_q_is_a_fill_blank_answer(self, cli, classroom_setup, tmp_path):
        """Typing 'q' into a free-text item should answer it, not quit."""
        path = tmp_path / "keys.json"
        path.write_text(
            json.dumps(
                {
                    "title": "Keys",
                    "content": {"type": "fill_blank", "sentences": [{"text": "Press [q] to leave."}]},
                }
            )
        )
        classroom = classroom_setup["class"]
        student = classroom_setup["student"]
        assert cli("add-exercise", str(path), "--class-id", classroom.id) == 0
        exercise = [
            e for e in SQLiteExerciseRepository(cli.db_path).get_for_class(classroom.id)
            if e.title == "Keys"
        ][0]

        inputs = InputSequence(["", "q", "q"])
        assert cli("play", exercise.id, "--student", student.id, inputs=inputs) == 0
        assert inputs.remaining == 0
        assert SQLiteResultRepository(cli.db_path).get(exercise.id, student.id).score == 100

    def test_colon_q_quits_free_text(self, cli, classroom_setup, tmp_path):
        """':q' should leave a free-text item without saving."""
        path = tmp_path / "hello.json"
        path.write_text(
            json.dumps(
                {
                    "title": "Hello",
                    "content": {"type": "translation", "items": [{"source": "Hello", "target": "olá"}]},
                }
            )
        )
        student = classroom_setup["student"]
        assert cli("add-exercise", str(path), "--class-id", classroom_setup["class"].id) == 0
        exercise = [
            e for e in SQLiteExerciseRepository(cli.db_path).get_for_class(classroom_setup["class"].id)
            if e.title == "Hello"
        ][0]

        assert cli("play", exercise.id, "--student", student.id, inputs=InputSequence(["", ":q"])) == 0
        assert SQLiteResultRepository(cli.db_path).get(exercise.id, student.id) is None
