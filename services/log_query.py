"""Filtered, sorted and limited views over a user's exercise log."""

from datetime import date
from typing import Any, Iterable, List, Optional

from schemas.exercise import ExerciseRecord
from services.validator import is_blank, parse_calendar_date, parse_number


def parse_bound(raw: Any) -> Optional[date]:
    """Parse a from/to query bound as a calendar date.

    Bounds are never read as epoch numbers, so "2020" means 2020-01-01.
    Malformed input yields None.
    """
    if is_blank(raw) or not isinstance(raw, str):
        return None
    return parse_calendar_date(raw)


def parse_limit(raw: Any) -> Optional[int]:
    """Parse a limit query value, truncating fractions toward zero."""
    if is_blank(raw):
        return None
    number = parse_number(raw)
    if number is None:
        return None
    return int(number)


def query_log(
    log: Iterable[ExerciseRecord],
    from_: Any = None,
    to: Any = None,
    limit: Any = None,
) -> List[ExerciseRecord]:
    """Return a new list of log records sorted by date ascending.

    ``from_`` and ``to`` are inclusive bounds and ``limit`` keeps the first
    records of the filtered sequence. Values that do not parse are ignored
    rather than rejected. A negative limit drops that many records from the
    end, like a slice. The input is not modified.
    """
    records = sorted(log, key=lambda record: record.date)

    start = parse_bound(from_)
    if start is not None:
        records = [record for record in records if record.date >= start]

    end = parse_bound(to)
    if end is not None:
        records = [record for record in records if record.date <= end]

    count = parse_limit(limit)
    if count is not None:
        records = records[:count]

    return records
