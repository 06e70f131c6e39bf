"""Normalization and validation of user-supplied exercise fields."""

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from schemas.exercise import ExerciseRecord
from utils.errors import (
    ConstraintViolation,
    InvalidReference,
    MissingField,
    TypeCoercionError,
)

OBJECT_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")
USERNAME_PATTERN = re.compile(r"\w+", re.ASCII)
MAX_DESCRIPTION_LENGTH = 20

# Non-ISO forms accepted after ISO 8601, e.g. "2024/01/15" or "Mon Jan 15 2024"
CALENDAR_DATE_FORMATS = (
    "%Y",
    "%Y-%m",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%a %b %d %Y",
    "%a %b %d %Y %H:%M:%S",
    "%a, %d %b %Y %H:%M:%S GMT",
    "%b %d %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
)


def is_object_id(value: Any) -> bool:
    """Return True if value is a 24-character hexadecimal identifier."""
    return isinstance(value, str) and OBJECT_ID_PATTERN.fullmatch(value) is not None


def is_blank(value: Any) -> bool:
    """Absent or empty input counts as not supplied."""
    return value is None or value == ""


def is_missing(value: Any) -> bool:
    """Body fields also count as missing when they are a JSON 0 or false."""
    return is_blank(value) or (isinstance(value, (int, float)) and not value)


def parse_number(raw: Any) -> Optional[float]:
    """Parse raw input as a finite number.

    Strings are stripped of surrounding whitespace and a blank string reads
    as zero. Returns None when the value is not a finite number.
    """
    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, (int, float)):
        number = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return 0.0
        if "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_calendar_date(raw: str) -> Optional[date]:
    """Parse a date or date-time string into a calendar date.

    ISO 8601 is tried first, then the formats in ``CALENDAR_DATE_FORMATS``.
    """
    text = " ".join(raw.split())
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        moment = None
    if moment is None:
        for fmt in CALENDAR_DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def parse_epoch_millis(millis: float) -> Optional[date]:
    """Convert milliseconds since the Unix epoch to a UTC calendar date."""
    try:
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).date()
    except (OverflowError, OSError, ValueError):
        return None


def parse_date(raw: Any) -> Optional[date]:
    """Numeric epoch first, calendar-date string second; None if neither."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    millis = parse_number(raw)
    if millis is not None:
        return parse_epoch_millis(millis)
    if isinstance(raw, str):
        return parse_calendar_date(raw)
    return None


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def validate_username(raw: Any) -> str:
    """Return the username if it is a non-empty word token."""
    if not isinstance(raw, str) or USERNAME_PATTERN.fullmatch(raw) is None:
        raise InvalidReference("username invalid.", status_code=400)
    return raw


def validate_exercise(fields: Mapping[str, Any], today: Optional[date] = None) -> ExerciseRecord:
    """Validate raw exercise input and build the record to append.

    Rules are checked in a fixed order and the first violated one is raised:
    user id, description presence, duration presence, description length,
    duration type, date type. When no date is supplied the record is dated
    ``today`` (UTC by default).
    """
    user_id = fields.get("userId")
    if is_blank(user_id) or not is_object_id(user_id):
        raise InvalidReference("unknown _id.", status_code=400)

    raw_description = fields.get("description")
    if is_missing(raw_description):
        raise MissingField("description")

    raw_duration = fields.get("duration")
    if is_missing(raw_duration):
        raise MissingField("duration")

    description = str(raw_description)
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ConstraintViolation("description too long.")

    duration = parse_number(raw_duration)
    if duration is None:
        raise TypeCoercionError(raw_duration, "Number", "duration")

    raw_date = fields.get("date")
    if is_missing(raw_date):
        exercise_date = today or today_utc()
    else:
        exercise_date = parse_date(raw_date)
        if exercise_date is None:
            raise TypeCoercionError(raw_date, "Date", "date")

    return ExerciseRecord(
        description=description,
        duration=int(duration) if duration.is_integer() else duration,
        date=exercise_date,
    )
