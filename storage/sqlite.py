"""SQLite implementations of repository interfaces."""

import logging
import random
import sqlite3
import string
import uuid
from datetime import datetime, timezone
from pathlib import Path

from .base import (
    ClassNotFoundError,
    ExerciseNotFoundError,
    ClassRepository,
    ExerciseRepository,
    ResultRepository,
    StudentRepository,
)
from .connection import get_connection, DEFAULT_DB_PATH
from models import (
    ClassRoom,
    Exercise,
    ExerciseResult,
    Student,
    dump_content,
    parse_content,
)

logger = logging.getLogger(__name__)

ACCESS_CODE_LENGTH = 6
ACCESS_CODE_ALPHABET = string.ascii_uppercase + string.digits
_MAX_CODE_ATTEMPTS = 10


def generate_access_code(rng: random.Random | None = None) -> str:
    """Generate a class access code such as "K7Q2ZP"."""
    return "".join((rng or random).choices(ACCESS_CODE_ALPHABET, k=ACCESS_CODE_LENGTH))


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteClassRepository(ClassRepository):
    """SQLite implementation of ClassRepository."""

    def __init__(self, db_path: Path = DEFAULT_DB_PATH, rng: random.Random | None = None):
        self.db_path = db_path
        self.rng = rng

    def create_class(
        self, name: str, description: str = "", teacher_id: str | None = None
    ) -> ClassRoom:
        """Create a class, retrying if the generated access code is taken."""
        if not name.strip():
            raise ValueError("Class name is required")

        conn = get_connection(self.db_path)
        try:
            for _ in range(_MAX_CODE_ATTEMPTS):
                classroom = ClassRoom(
                    id=str(uuid.uuid4()),
                    name=name.strip(),
                    description=description.strip(),
                    teacher_id=teacher_id,
                    access_code=generate_access_code(self.rng),
                )
                try:
                    conn.execute(
                        """INSERT INTO classes
                        (id, name, description, teacher_id, access_code, is_active, created_at)
                        VALUES (?, ?, ?, ?, ?, 1, ?)""",
                        (
                            classroom.id,
                            classroom.name,
                            classroom.description,
                            classroom.teacher_id,
                            classroom.access_code,
                            _now(),
                        ),
                    )
                except sqlite3.IntegrityError:
                    logger.debug("Access code %s taken, retrying", classroom.access_code)
                    continue
                conn.commit()
                return classroom
        finally:
            conn.close()
        raise RuntimeError("Could not generate a unique access code")

    def get_by_id(self, class_id: str) -> ClassRoom | None:
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("SELECT * FROM classes WHERE id = ?", (class_id,))
            row = cursor.fetchone()
            return self._row_to_model(row) if row else None
        finally:
            conn.close()

    def get_by_access_code(self, access_code: str) -> ClassRoom | None:
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "SELECT * FROM classes WHERE access_code = ? AND is_active = 1",
                (access_code.strip().upper(),),
            )
            row = cursor.fetchone()
            return self._row_to_model(row) if row else None
        finally:
            conn.close()

    def get_all(self, teacher_id: str | None = None) -> list[ClassRoom]:
        conn = get_connection(self.db_path)
        try:
            if teacher_id is None:
                cursor = conn.execute("SELECT * FROM classes ORDER BY created_at")
            else:
                cursor = conn.execute(
                    "SELECT * FROM classes WHERE teacher_id = ? ORDER BY created_at",
                    (teacher_id,),
                )
            return [self._row_to_model(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def set_active(self, class_id: str, is_active: bool) -> None:
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "UPDATE classes SET is_active = ? WHERE id = ?",
                (int(is_active), class_id),
            )
            if cursor.rowcount == 0:
                raise ClassNotFoundError(f"Class {class_id} not found")
            conn.commit()
        finally:
            conn.close()

    def _row_to_model(self, row) -> ClassRoom:
        """Convert a database row to a ClassRoom model."""
        return ClassRoom(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            teacher_id=row["teacher_id"],
            access_code=row["access_code"],
            is_active=bool(row["is_active"]),
        )


class SQLiteStudentRepository(StudentRepository):
    """SQLite implementation of StudentRepository."""

    def __init__(self, db_path: Path = DEFAULT_DB_PATH):
        self.db_path = db_path
        self.classes = SQLiteClassRepository(db_path)

    def join_class(self, access_code: str, student_name: str) -> Student:
        if not access_code.strip() or not student_name.strip():
            raise ValueError("Access code and name are required")

        classroom = self.classes.get_by_access_code(access_code)
        if classroom is None:
            raise ClassNotFoundError("Invalid access code")

        name = student_name.strip()
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "SELECT * FROM students WHERE class_id = ? AND name = ?",
                (classroom.id, name),
            )
            row = cursor.fetchone()
            if row:
                return self._row_to_model(row)

            student = Student(id=str(uuid.uuid4()), name=name, class_id=classroom.id)
            conn.execute(
                "INSERT INTO students (id, name, class_id, created_at) VALUES (?, ?, ?, ?)",
                (student.id, student.name, student.class_id, _now()),
            )
            conn.commit()
            logger.info("Student %s joined class %s", student.name, classroom.name)
            return student
        finally:
            conn.close()

    def get_by_id(self, student_id: str) -> Student | None:
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("SELECT * FROM students WHERE id = ?", (student_id,))
            row = cursor.fetchone()
            return self._row_to_model(row) if row else None
        finally:
            conn.close()

    def get_for_class(self, class_id: str) -> list[Student]:
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "SELECT * FROM students WHERE class_id = ? ORDER BY name", (class_id,)
            )
            return [self._row_to_model(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def _row_to_model(self, row) -> Student:
        return Student(id=row["id"], name=row["name"], class_id=row["class_id"])


class SQLiteExerciseRepository(ExerciseRepository):
    """SQLite implementation of ExerciseRepository."""

    def __init__(self, db_path: Path = DEFAULT_DB_PATH):
        self.db_path = db_path

    def save(self, exercise: Exercise) -> None:
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                """INSERT INTO exercises
                (id, title, description, type, content, is_active, class_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (id) DO UPDATE SET
                    title = excluded.title,
                    description = excluded.description,
                    type = excluded.type,
                    content = excluded.content,
                    is_active = excluded.is_active,
                    class_id = excluded.class_id""",
                (
                    exercise.id,
                    exercise.title,
                    exercise.description,
                    exercise.type.value,
                    dump_content(exercise.content),
                    int(exercise.is_active),
                    exercise.class_id,
                    exercise.created_at.isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def get_by_id(self, exercise_id: str) -> Exercise | None:
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("SELECT * FROM exercises WHERE id = ?", (exercise_id,))
            row = cursor.fetchone()
            return self._row_to_model(row) if row else None
        finally:
            conn.close()

    def get_for_class(self, class_id: str, active_only: bool = False) -> list[Exercise]:
        query = "SELECT * FROM exercises WHERE class_id = ?"
        if active_only:
            query += " AND is_active = 1"
        query += " ORDER BY created_at"

        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(query, (class_id,))
            return [self._row_to_model(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def set_active(self, exercise_id: str, is_active: bool) -> None:
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "UPDATE exercises SET is_active = ? WHERE id = ?",
                (int(is_active), exercise_id),
            )
            if cursor.rowcount == 0:
                raise ExerciseNotFoundError(f"Exercise {exercise_id} not found")
            conn.commit()
        finally:
            conn.close()

    def delete(self, exercise_id: str) -> None:
        conn = get_connection(self.db_path)
        try:
            conn.execute("DELETE FROM exercises WHERE id = ?", (exercise_id,))
            conn.commit()
        finally:
            conn.close()

    def _row_to_model(self, row) -> Exercise:
        """Convert a database row to an Exercise model."""
        return Exercise(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            content=parse_content(row["content"]),
            is_active=bool(row["is_active"]),
            class_id=row["class_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteResultRepository(ResultRepository):
    """SQLite implementation of ResultRepository."""

    def __init__(self, db_path: Path = DEFAULT_DB_PATH):
        self.db_path = db_path

    def report_completion(
        self,
        exercise_id: str,
        student_id: str,
        score: int,
        time_taken: int | None = None,
    ) -> ExerciseResult:
        result = ExerciseResult(
            exercise_id=exercise_id,
            student_id=student_id,
            score=round(score),
            time_taken=time_taken,
        )
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                """INSERT INTO exercise_results
                (exercise_id, student_id, score, time_taken, completed_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (exercise_id, student_id) DO UPDATE SET
                    score = excluded.score,
                    time_taken = excluded.time_taken,
                    completed_at = excluded.completed_at""",
                (
                    result.exercise_id,
                    result.student_id,
                    result.score,
                    result.time_taken,
                    result.completed_at.isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()
        return result

    def get(self, exercise_id: str, student_id: str) -> ExerciseResult | None:
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "SELECT * FROM exercise_results WHERE exercise_id = ? AND student_id = ?",
                (exercise_id, student_id),
            )
            row = cursor.fetchone()
            return self._row_to_model(row) if row else None
        finally:
            conn.close()

    def get_for_student(self, student_id: str) -> list[ExerciseResult]:
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "SELECT * FROM exercise_results WHERE student_id = ? ORDER BY completed_at",
                (student_id,),
            )
            return [self._row_to_model(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_for_exercise(self, exercise_id: str) -> list[ExerciseResult]:
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "SELECT * FROM exercise_results WHERE exercise_id = ? ORDER BY completed_at",
                (exercise_id,),
            )
            return [self._row_to_model(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def _row_to_model(self, row) -> ExerciseResult:
        return ExerciseResult(
            exercise_id=row["exercise_id"],
            student_id=row["student_id"],
            score=row["score"],
            time_taken=row["time_taken"],
            completed_at=datetime.fromisoformat(row["completed_at"]),
        )
