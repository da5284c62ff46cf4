"""Date handling for feed elements.

Dates arrive as datetimes, Unix timestamps or free-form strings and are
normalized to timezone-aware UTC datetimes before being formatted for a
dialect.
"""

import re
from datetime import UTC, date, datetime
from email.utils import format_datetime

from dateutil import parser as date_parser

from .exceptions import MalformedInputError

DateInput = datetime | date | int | float | str

NOT_PARSEABLE = "The given date string was not parseable."
NOT_A_TIMESTAMP = "The given date is not an UNIX timestamp."

NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def to_datetime(value: DateInput, parameter: str = "date") -> datetime:
    """Normalize a date input to an aware UTC datetime.

    Args:
        value: A datetime or date, a non-negative Unix timestamp (number or
            numeric string), or a string dateutil can parse
        parameter: Name of the parameter, reported on failure

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        MalformedInputError: If the value is negative, out of range or
            cannot be parsed
    """
    if isinstance(value, bool):
        raise MalformedInputError(NOT_A_TIMESTAMP, parameter=parameter)

    if isinstance(value, datetime):
        return _to_utc(value, NOT_A_TIMESTAMP, parameter)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)

    if isinstance(value, int | float):
        return _from_timestamp(value, parameter)

    if not isinstance(value, str):
        raise MalformedInputError(NOT_PARSEABLE, parameter=parameter)

    # Numeric strings are timestamps, not years
    if NUMERIC_RE.match(value):
        return _from_timestamp(float(value), parameter)

    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError) as e:
        raise MalformedInputError(NOT_PARSEABLE, parameter=parameter) from e

    return _to_utc(parsed, NOT_PARSEABLE, parameter)


def _to_utc(value: datetime, message: str, parameter: str) -> datetime:
    # Naive values are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)

    try:
        return value.astimezone(UTC)
    except (OverflowError, ValueError) as e:
        raise MalformedInputError(message, parameter=parameter) from e


def _from_timestamp(timestamp: int | float, parameter: str) -> datetime:
    if timestamp != timestamp or timestamp < 0:
        raise MalformedInputError(NOT_A_TIMESTAMP, parameter=parameter)

    try:
        return datetime.fromtimestamp(int(timestamp), tz=UTC)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedInputError(NOT_A_TIMESTAMP, parameter=parameter) from e


def format_atom(value: datetime) -> str:
    """Format as an RFC 3339 timestamp, e.g. 2024-01-01T10:00:00+00:00."""
    return value.isoformat(timespec="seconds")


def format_rss(value: datetime) -> str:
    """Format as an RFC 822 timestamp, e.g. Mon, 01 Jan 2024 10:00:00 +0000."""
    return format_datetime(value)


def format_w3c_date(value: datetime) -> str:
    """Format as a bare YYYY-MM-DD date."""
    return value.strftime("%Y-%m-%d")


def parse_date(text: str) -> datetime | None:
    """Parse a formatted date back into an aware datetime.

    Returns None for empty text.
    """
    if not text:
        return None

    parsed = date_parser.parse(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
