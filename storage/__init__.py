"""Storage layer for the English exercises application.

Provides repository interfaces and SQLite implementations for persisting
classes, students, exercises and results. The exercise repository is the
content source for play sessions and the result repository is their
completion sink.
"""

from pathlib import Path

from .base import (
    ClassNotFoundError,
    ClassRepository,
    ExerciseNotFoundError,
    ExerciseRepository,
    ResultRepository,
    StorageError,
    StudentRepository,
)
from .sqlite import (
    SQLiteClassRepository,
    SQLiteExerciseRepository,
    SQLiteResultRepository,
    SQLiteStudentRepository,
    generate_access_code,
)
from .connection import get_connection, init_schema, DEFAULT_DB_PATH, DB_PATH_ENV

__all__ = [
    # Errors
    "StorageError",
    "ExerciseNotFoundError",
    "ClassNotFoundError",
    # Abstract interfaces
    "ClassRepository",
    "StudentRepository",
    "ExerciseRepository",
    "ResultRepository",
    # SQLite implementations
    "SQLiteClassRepository",
    "SQLiteStudentRepository",
    "SQLiteExerciseRepository",
    "SQLiteResultRepository",
    "generate_access_code",
    # Connection utilities
    "get_connection",
    "init_schema",
    "DEFAULT_DB_PATH",
    "DB_PATH_ENV",
    # Factory functions
    "get_class_repo",
    "get_student_repo",
    "get_exercise_repo",
    "get_result_repo",
]


def get_class_repo(db_path: Path = DEFAULT_DB_PATH) -> ClassRepository:
    """Get a ClassRepository instance."""
    return SQLiteClassRepository(db_path)


def get_student_repo(db_path: Path = DEFAULT_DB_PATH) -> StudentRepository:
    """Get a StudentRepository instance."""
    return SQLiteStudentRepository(db_path)


def get_exercise_repo(db_path: Path = DEFAULT_DB_PATH) -> ExerciseRepository:
    """Get an ExerciseRepository instance."""
    return SQLiteExerciseRepository(db_path)


def get_result_repo(db_path: Path = DEFAULT_DB_PATH) -> ResultRepository:
    """Get a ResultRepository instance."""
    return SQLiteResultRepository(db_path)
