"""Tests for the storage layer repository implementations."""

import random
import re
import sqlite3

import pytest

from models import Exercise, ExerciseResult, FlashCardsContent, FlashCard
from storage import (
    ClassNotFoundError,
    ExerciseNotFoundError,
    SQLiteClassRepository,
    SQLiteExerciseRepository,
    SQLiteResultRepository,
    SQLiteStudentRepository,
    generate_access_code,
    get_connection,
)


class TestAccessCodes:
    """Tests for generate_access_code."""

    def test_format(self):
        """Codes should be six uppercase letters or digits."""
        for seed in range(20):
            code = generate_access_code(random.Random(seed))
            assert re.fullmatch(r"[A-Z0-9]{6}", code)

    def test_collision_retries(self, test_db_path):
        """A taken code should be replaced by a fresh one."""
        first = SQLiteClassRepository(test_db_path, rng=random.Random(1)).create_class("A")
        second = SQLiteClassRepository(test_db_path, rng=random.Random(1)).create_class("B")
        assert first.access_code != second.access_code


class TestClassRepository:
    """Tests for SQLiteClassRepository."""

    def test_create_and_get(self, test_db_path):
        """Should persist a class and read it back by id."""
        repo = SQLiteClassRepository(test_db_path)
        created = repo.create_class(" Evening ", description="Adults", teacher_id="t1")
        loaded = repo.get_by_id(created.id)
        assert loaded == created
        assert loaded.name == "Evening"
        assert loaded.is_active

    def test_blank_name_rejected(self, test_db_path):
        """A class needs a name."""
        with pytest.raises(ValueError):
            SQLiteClassRepository(test_db_path).create_class("   ")

    def test_lookup_by_code_is_case_insensitive(self, populated_test_db):
        """Codes typed in lower case should still match."""
        repo = SQLiteClassRepository(populated_test_db["db_path"])
        code = populated_test_db["class"].access_code
        assert repo.get_by_access_code(code.lower()).id == populated_test_db["class"].id

    def test_inactive_class_not_found_by_code(self, populated_test_db):
        """Deactivated classes cannot be joined."""
        repo = SQLiteClassRepository(populated_test_db["db_path"])
        classroom = populated_test_db["class"]
        repo.set_active(classroom.id, False)
        assert repo.get_by_access_code(classroom.access_code) is None

    def test_set_active_unknown_class(self, test_db_path):
        """Should raise for a class that does not exist."""
        with pytest.raises(ClassNotFoundError):
            SQLiteClassRepository(test_db_path).set_active("nope", True)

    def test_get_all_by_teacher(self, test_db_path):
        """Should filter classes by teacher."""
        repo = SQLiteClassRepository(test_db_path)
        repo.create_class("A", teacher_id="t1")
        repo.create_class("B", teacher_id="t2")
        assert [c.name for c in repo.get_all("t1")] == ["A"]
        assert len(repo.get_all()) == 2


class TestStudentRepository:
    """Tests for SQLiteStudentRepository."""

    def test_join_creates_student(self, populated_test_db):
        """Joining should create a student in the class."""
        student = populated_test_db["student"]
        assert student.name == "Ana"
        assert student.class_id == populated_test_db["class"].id

    def test_join_twice_returns_same_student(self, populated_test_db):
        """Joining again with the same name should reuse the student."""
        repo = SQLiteStudentRepository(populated_test_db["db_path"])
        again = repo.join_class(populated_test_db["class"].access_code.lower(), " Ana ")
        assert again.id == populated_test_db["student"].id
        assert len(repo.get_for_class(populated_test_db["class"].id)) == 1

    def test_unknown_code(self, test_db_path):
        """An unknown code should raise ClassNotFoundError."""
        with pytest.raises(ClassNotFoundError):
            SQLiteStudentRepository(test_db_path).join_class("ZZZZZZ", "Bo")

    def test_blank_inputs(self, test_db_path):
        """Code and name are both required."""
        with pytest.raises(ValueError):
            SQLiteStudentRepository(test_db_path).join_class("", "Bo")
        with pytest.raises(ValueError):
            SQLiteStudentRepository(test_db_path).join_class("ABC123", " ")


class TestExerciseRepository:
    """Tests for SQLiteExerciseRepository."""

    def test_content_round_trips_as_typed_variant(self, populated_test_db, multiple_choice_content):
        """Stored content should come back as the same typed variant."""
        repo = SQLiteExerciseRepository(populated_test_db["db_path"])
        exercise = repo.get_by_id("ex-mc")
        assert exercise.content == multiple_choice_content
        assert exercise.type.value == "multiple_choice"

    def test_content_stored_as_json_document(self, populated_test_db):
        """The content column should hold a JSON document with its type tag."""
        conn = get_connection(populated_test_db["db_path"])
        try:
            row = conn.execute("SELECT type, content FROM exercises WHERE id = 'ex-mc'").fetchone()
        finally:
            conn.close()
        assert row["type"] == "multiple_choice"
        assert '"type":"multiple_choice"' in row["content"]

    def test_get_for_class_active_only(self, populated_test_db):
        """Inactive exercises should be filtered when asked."""
        repo = SQLiteExerciseRepository(populated_test_db["db_path"])
        class_id = populated_test_db["class"].id
        assert {e.id for e in repo.get_for_class(class_id)} == {"ex-mc", "ex-match"}
        assert [e.id for e in repo.get_for_class(class_id, active_only=True)] == ["ex-mc"]

    def test_load_content_active(self, populated_test_db, multiple_choice_content):
        """Active exercises should load their content."""
        repo = SQLiteExerciseRepository(populated_test_db["db_path"])
        assert repo.load_content("ex-mc") == multiple_choice_content

    def test_load_content_inactive_or_missing(self, populated_test_db):
        """Inactive and unknown exercises should raise ExerciseNotFoundError."""
        repo = SQLiteExerciseRepository(populated_test_db["db_path"])
        with pytest.raises(ExerciseNotFoundError):
            repo.load_content("ex-match")
        with pytest.raises(ExerciseNotFoundError):
            repo.load_content("missing")

    def test_save_replaces(self, test_db_path):
        """Saving an existing id should replace it."""
        repo = SQLiteExerciseRepository(test_db_path)
        content = FlashCardsContent(cards=[FlashCard(front="a", back="b")])
        repo.save(Exercise(id="ex-1", title="Old", content=content))
        repo.save(Exercise(id="ex-1", title="New", content=content))
        assert repo.get_by_id("ex-1").title == "New"

    def test_set_active_unknown_exercise(self, test_db_path):
        """Should raise for an exercise that does not exist."""
        with pytest.raises(ExerciseNotFoundError):
            SQLiteExerciseRepository(test_db_path).set_active("nope", True)

    def test_set_active_and_delete(self, populated_test_db):
        """Should toggle availability and delete."""
        repo = SQLiteExerciseRepository(populated_test_db["db_path"])
        repo.set_active("ex-match", True)
        assert repo.get_by_id("ex-match").is_active
        repo.delete("ex-match")
        assert repo.get_by_id("ex-match") is None


class TestResultRepository:
    """Tests for SQLiteResultRepository."""

    def test_report_completion_stores_result(self, populated_test_db):
        """Should store one row per exercise and student."""
        repo = SQLiteResultRepository(populated_test_db["db_path"])
        student_id = populated_test_db["student"].id
        repo.report_completion("ex-mc", student_id, 75, time_taken=42)

        result = repo.get("ex-mc", student_id)
        assert isinstance(result, ExerciseResult)
        assert result.score == 75
        assert result.time_taken == 42

    def test_replay_overwrites(self, populated_test_db):
        """Reporting again should replace the earlier score."""
        repo = SQLiteResultRepository(populated_test_db["db_path"])
        student_id = populated_test_db["student"].id
        repo.report_completion("ex-mc", student_id, 40)
        repo.report_completion("ex-mc", student_id, 90)

        results = repo.get_for_student(student_id)
        assert len(results) == 1
        assert results[0].score == 90
        assert results[0].time_taken is None
        assert [r.score for r in repo.get_for_exercise("ex-mc")] == [90]

    def test_score_out_of_range_rejected(self, populated_test_db):
        """Scores outside 0-100 should never be stored."""
        repo = SQLiteResultRepository(populated_test_db["db_path"])
        with pytest.raises(ValueError):
            repo.report_completion("ex-mc", populated_test_db["student"].id, 101)

    def test_unknown_student_fails(self, populated_test_db):
        """Foreign keys should reject results for unknown students."""
        repo = SQLiteResultRepository(populated_test_db["db_path"])
        with pytest.raises(sqlite3.IntegrityError):
            repo.report_completion("ex-mc", "ghost", 50)

    def test_updating_exercise_keeps_results(self, populated_test_db, multiple_choice_content):
        """Re-saving an exercise should not drop its stored results."""
        student_id = populated_test_db["student"].id
        results = SQLiteResultRepository(populated_test_db["db_path"])
        results.report_completion("ex-mc", student_id, 60)

        SQLiteExerciseRepository(populated_test_db["db_path"]).save(
            Exercise(id="ex-mc", title="Renamed", content=multiple_choice_content)
        )
        assert results.get("ex-mc", student_id).score == 60
