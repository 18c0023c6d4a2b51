"""Database connection management and schema initialization."""

import os
import sqlite3
from pathlib import Path

DB_PATH_ENV = "ENGLISH_EXERCISES_DB"

DEFAULT_DB_PATH = Path(
    os.environ.get(DB_PATH_ENV, Path(__file__).parent.parent / "data" / "exercises.db")
)

SCHEMA_SQL = """
-- Classes that students join with an access code
CREATE TABLE IF NOT EXISTS classes (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    teacher_id TEXT,
    access_code TEXT NOT NULL UNIQUE,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_classes_teacher ON classes(teacher_id);

-- Students belong to exactly one class; names are unique within a class
CREATE TABLE IF NOT EXISTS students (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    class_id TEXT NOT NULL,
    created_at TEXT NOT NULL,
    UNIQUE (class_id, name),
    FOREIGN KEY (class_id) REFERENCES classes(id) ON DELETE CASCADE
);

-- Exercises store their content as an opaque JSON document
CREATE TABLE IF NOT EXISTS exercises (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    type TEXT NOT NULL,
    content TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1,
    class_id TEXT,
    created_at TEXT NOT NULL,
    FOREIGN KEY (class_id) REFERENCES classes(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_exercises_class ON exercises(class_id);

-- One result per (exercise, student); replaying overwrites it
CREATE TABLE IF NOT EXISTS exercise_results (
    exercise_id TEXT NOT NULL,
    student_id TEXT NOT NULL,
    score INTEGER NOT NULL CHECK (score BETWEEN 0 AND 100),
    time_taken INTEGER,
    completed_at TEXT NOT NULL,
    PRIMARY KEY (exercise_id, student_id),
    FOREIGN KEY (exercise_id) REFERENCES exercises(id) ON DELETE CASCADE,
    FOREIGN KEY (student_id) REFERENCES students(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_exercise_results_student ON exercise_results(student_id);
"""


def get_connection(db_path: Path = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Get a database connection with appropriate settings.

    Args:
        db_path: Path to the SQLite database file.

    Returns:
        A configured sqlite3 Connection object.
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_schema(db_path: Path = DEFAULT_DB_PATH) -> None:
    """Initialize the database schema if it doesn't exist.

    Args:
        db_path: Path to the SQLite database file.
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = get_connection(db_path)
    try:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    finally:
        conn.close()
