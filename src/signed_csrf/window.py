"""Validity window forms and their resolution to an absolute epoch.

A window is the earliest issuance time a token may carry and still verify.
Callers may describe it three ways:

- AbsoluteEpoch: seconds since the epoch
- RelativeExpression: strtotime-style text such as "-1 hour" or "2 days ago"
- PointInTime: a datetime (naive values are local time) or a date

All three resolve to an integer epoch; the engine only ever stores that.
"""

import re
import time
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from datetime import time as dt_time
from typing import Optional, Union

from .errors import InvalidConfiguration

_UNIT_SECONDS = {
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
    "day": 86400,
    "days": 86400,
    "week": 604800,
    "weeks": 604800,
    "fortnight": 1209600,
    "fortnights": 1209600,
}

# Calendar units, applied to the local date with day overflow rolling forward
_UNIT_MONTHS = {
    "month": 1,
    "months": 1,
    "year": 12,
    "years": 12,
}

# Day offsets relative to local midnight
_ANCHORS = {
    "today": 0,
    "midnight": 0,
    "yesterday": -1,
    "tomorrow": 1,
}

_TOKEN = re.compile(
    r"\s*(?:(?P<sign>[+-]?)\s*(?P<count>\d+)\s*(?P<unit>[a-z]+)|(?P<word>[a-z]+))"
)


@dataclass(frozen=True)
class AbsoluteEpoch:
    """Window floor given directly as seconds since the epoch."""

    epoch: int

    def resolve(self, now: Optional[float] = None) -> int:
        return self.epoch


@dataclass(frozen=True)
class RelativeExpression:
    """Window floor given as a relative time expression.

    Supported forms (case-insensitive):
    - "now", "today"/"midnight", "yesterday", "tomorrow"
    - one or more "[+|-]N unit" terms, units from seconds up to years
    - a trailing "ago" that negates the terms before it
    - "@<epoch>"
    - ISO-8601 dates and datetimes ("2024-05-01", "2024-05-01T12:00:00+00:00")
    """

    expression: str

    def resolve(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        text = self.expression.strip().lower()
        if not text:
            raise InvalidConfiguration("Relative time expression must not be empty")

        if text.startswith("@"):
            try:
                return int(text[1:])
            except ValueError:
                raise InvalidConfiguration(f"Invalid epoch expression: {self.expression!r}")

        try:
            return _parse_relative(text, now)
        except InvalidConfiguration:
            pass

        try:
            moment = datetime.fromisoformat(self.expression.strip())
        except ValueError:
            raise InvalidConfiguration(
                f"Could not parse relative time expression: {self.expression!r}"
            )
        return int(moment.timestamp())


@dataclass(frozen=True)
class PointInTime:
    """Window floor given as a datetime or date."""

    moment: Union[datetime, date]

    def resolve(self, now: Optional[float] = None) -> int:
        if isinstance(self.moment, datetime):
            return int(self.moment.timestamp())
        return int(datetime.combine(self.moment, dt_time.min).timestamp())


ValidityWindow = Union[AbsoluteEpoch, RelativeExpression, PointInTime]


def _parse_relative(text: str, now: float) -> int:
    """Parse "[anchor] [+-]N unit ... [ago]" text against ``now``."""
    base = now
    offset = 0
    months = 0
    pos = 0

    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None or match.end() == pos:
            if text[pos:].strip():
                raise InvalidConfiguration(f"Unexpected text at position {pos}: {text[pos:]!r}")
            break
        pos = match.end()

        word = match.group("word")
        if word is not None:
            if word == "now":
                continue
            if word == "ago":
                offset = -offset
                months = -months
                continue
            if word in _ANCHORS:
                midnight = datetime.fromtimestamp(now).date() + timedelta(days=_ANCHORS[word])
                base = datetime.combine(midnight, dt_time.min).timestamp()
                continue
            raise InvalidConfiguration(f"Unknown time keyword: {word!r}")

        unit = match.group("unit")
        count = int(match.group("count"))
        if match.group("sign") == "-":
            count = -count
        if unit in _UNIT_SECONDS:
            offset += count * _UNIT_SECONDS[unit]
        elif unit in _UNIT_MONTHS:
            months += count * _UNIT_MONTHS[unit]
        else:
            raise InvalidConfiguration(f"Unknown time unit: {unit!r}")

    if months:
        base = _add_months(datetime.fromtimestamp(base), months).timestamp()
    return int(base + offset)


def _add_months(moment: datetime, months: int) -> datetime:
    """Shift by calendar months; Jan 31 + 1 month lands on Mar 2 or 3, as strtotime does."""
    year, month = divmod(moment.year * 12 + moment.month - 1 + months, 12)
    try:
        first = moment.replace(year=year, month=month + 1, day=1)
    except ValueError as e:
        raise InvalidConfiguration(f"Relative time out of range: {e}") from e
    return first + timedelta(days=moment.day - 1)


def coerce_window(value) -> ValidityWindow:
    """
    Convert a raw window value into its tagged form.

    Args:
        value: int epoch, relative expression str, datetime/date, or a tagged window

    Returns:
        AbsoluteEpoch, RelativeExpression or PointInTime

    Raises:
        InvalidConfiguration: For any other type
    """
    if isinstance(value, (AbsoluteEpoch, RelativeExpression, PointInTime)):
        return value
    # bool is an int subclass but never a meaningful epoch
    if isinstance(value, bool):
        raise InvalidConfiguration("Invalid argument of type bool")
    if isinstance(value, int):
        return AbsoluteEpoch(value)
    if isinstance(value, str):
        return RelativeExpression(value)
    if isinstance(value, (datetime, date)):
        return PointInTime(value)
    raise InvalidConfiguration(f"Invalid argument of type {type(value).__name__}")


def resolve_window(value, now: Optional[float] = None) -> int:
    """Coerce ``value`` and resolve it to an absolute epoch."""
    return coerce_window(value).resolve(now)
