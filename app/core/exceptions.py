"""Errors raised by the record engine and its storage boundary."""


class RecordEngineError(ValueError):
    """Base class for record evaluation / aggregation errors."""


class InvalidInputError(RecordEngineError):
    """Malformed input: negative numbers, wrong exercise reference, duplicate records."""


class OrderingViolationError(RecordEngineError):
    """Batch input is not in chronological order."""

    def __init__(self, index: int, message: str | None = None):
        super().__init__(
            message or f"sets must be sorted by logged_at ascending (violation at index {index})"
        )
        self.index = index


class RecordConflictError(RecordEngineError):
    """Compare-and-set on a personal record kept losing to concurrent writers."""

    def __init__(self, exercise_id, attempts: int):
        super().__init__(
            f"personal record update for exercise {exercise_id} conflicted {attempts} times"
        )
        self.exercise_id = exercise_id
        self.attempts = attempts
