"""Abstract repository interfaces for the storage layer."""

from abc import ABC, abstractmethod

from models import ClassRoom, Exercise, ExerciseContent, ExerciseResult, Student


class StorageError(Exception):
    """Base class for storage failures."""


class ExerciseNotFoundError(StorageError, LookupError):
    """Raised when an exercise does not exist or is not active."""


class ClassNotFoundError(StorageError, LookupError):
    """Raised when no active class matches an id or access code."""


class ClassRepository(ABC):
    """Abstract interface for class storage."""

    @abstractmethod
    def create_class(
        self, name: str, description: str = "", teacher_id: str | None = None
    ) -> ClassRoom:
        """Create a class with a freshly generated access code.

        Raises:
            ValueError: If the name is blank.
        """
        pass

    @abstractmethod
    def get_by_id(self, class_id: str) -> ClassRoom | None:
        pass

    @abstractmethod
    def get_by_access_code(self, access_code: str) -> ClassRoom | None:
        """Find an active class by access code (case-insensitive)."""
        pass

    @abstractmethod
    def get_all(self, teacher_id: str | None = None) -> list[ClassRoom]:
        """List classes, optionally only those of one teacher."""
        pass

    @abstractmethod
    def set_active(self, class_id: str, is_active: bool) -> None:
        pass


class StudentRepository(ABC):
    """Abstract interface for student storage."""

    @abstractmethod
    def join_class(self, access_code: str, student_name: str) -> Student:
        """Join a class by access code.

        Returns the existing student with that name in the class, or a new one.

        Raises:
            ValueError: If the code or name is blank.
            ClassNotFoundError: If no active class has the code.
        """
        pass

    @abstractmethod
    def get_by_id(self, student_id: str) -> Student | None:
        pass

    @abstractmethod
    def get_for_class(self, class_id: str) -> list[Student]:
        pass


class ExerciseRepository(ABC):
    """Abstract interface for exercise storage. Also the session content source."""

    @abstractmethod
    def save(self, exercise: Exercise) -> None:
        """Insert an exercise, or update it in place keeping its results."""
        pass

    @abstractmethod
    def get_by_id(self, exercise_id: str) -> Exercise | None:
        pass

    @abstractmethod
    def get_for_class(self, class_id: str, active_only: bool = False) -> list[Exercise]:
        pass

    @abstractmethod
    def set_active(self, exercise_id: str, is_active: bool) -> None:
        pass

    @abstractmethod
    def delete(self, exercise_id: str) -> None:
        pass

    def load_content(self, exercise_id: str) -> ExerciseContent:
        """Load the content of an active exercise.

        Raises:
            ExerciseNotFoundError: If the exercise is missing or inactive.
        """
        exercise = self.get_by_id(exercise_id)
        if exercise is None or not exercise.is_active:
            raise ExerciseNotFoundError(
                f"Exercise {exercise_id} not found or not available"
            )
        return exercise.content


class ResultRepository(ABC):
    """Abstract interface for exercise result storage. The completion sink."""

    @abstractmethod
    def report_completion(
        self,
        exercise_id: str,
        student_id: str,
        score: int,
        time_taken: int | None = None,
    ) -> ExerciseResult:
        """Store a student's score, replacing any earlier result."""
        pass

    @abstractmethod
    def get(self, exercise_id: str, student_id: str) -> ExerciseResult | None:
        pass

    @abstractmethod
    def get_for_student(self, student_id: str) -> list[ExerciseResult]:
        pass

    @abstractmethod
    def get_for_exercise(self, exercise_id: str) -> list[ExerciseResult]:
        pass
