"""User and exercise log schemas."""

import datetime
from typing import List, Union

from pydantic import BaseModel, Field


class ExerciseRecord(BaseModel):
    """One logged activity owned by a user."""
    description: str = Field(..., min_length=1, max_length=20, description="What was done")
    duration: Union[int, float] = Field(..., description="Duration of the exercise")
    date: datetime.date = Field(..., description="Calendar date of the exercise")


class User(BaseModel):
    """Users collection model."""
    id: str = Field(..., description="24-hex-character store identifier")
    username: str = Field(..., pattern=r"^[A-Za-z0-9_]+$", description="Unique username")
    log: List[ExerciseRecord] = Field(default_factory=list, description="Exercise log, unordered at rest")


class UserResponse(BaseModel):
    """Response body for a registered user."""
    username: str
    id: str


class ExerciseResponse(ExerciseRecord):
    """Response body for an appended exercise."""
    username: str
    id: str


class LogResponse(BaseModel):
    """Response body for a log query."""
    username: str
    id: str
    count: int
    log: List[ExerciseRecord]
