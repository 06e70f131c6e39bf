"""Request and response schemas."""

from schemas.exercise import (
    ExerciseRecord,
    ExerciseResponse,
    LogResponse,
    User,
    UserResponse,
)

__all__ = [
    "ExerciseRecord",
    "ExerciseResponse",
    "LogResponse",
    "User",
    "UserResponse",
]
