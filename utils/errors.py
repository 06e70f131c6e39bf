"""Failure taxonomy of the exercise tracker.

Every failure a request can end in is one of these exceptions. The API layer
renders them uniformly as a plain-text body carrying ``message`` with
``status_code`` as the HTTP status.
"""

from typing import Any


class ExerciseTrackerError(Exception):
    """Base class for all terminal request failures."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, message={self.message!r})"


class MissingField(ExerciseTrackerError):
    """A required input field is absent or empty."""

    status_code = 400

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Path `{path}` is required.")


class ConstraintViolation(ExerciseTrackerError):
    """A field is present but breaks a value constraint."""

    status_code = 400


class TypeCoercionError(ExerciseTrackerError):
    """A raw value could not be converted to the type its path requires."""

    status_code = 400

    def __init__(self, value: Any, target_type: str, path: str):
        self.value = value
        self.target_type = target_type
        self.path = path
        super().__init__(
            f'Cast to {target_type} failed for value "{value}" at path "{path}".'
        )


class InvalidReference(ExerciseTrackerError):
    """A user id or username is malformed or refers to nothing."""

    status_code = 403


class Conflict(ExerciseTrackerError):
    """The username is already registered."""

    status_code = 403
    default_message = "username already taken."


class NotFound(ExerciseTrackerError):
    """No route matches the request."""

    status_code = 404
    default_message = "not found"


class StorageUnavailable(ExerciseTrackerError):
    """The backing store failed; details are logged, never rendered."""

    status_code = 500
    default_message = "database error."
