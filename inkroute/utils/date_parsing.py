"""
Date and time parsing for free-text values pulled out of notes.
"""

import calendar
import re
from datetime import datetime, time, timedelta
from typing import Optional

from .logging_config import get_logger

logger = get_logger(__name__)

DATE_FORMATS = [
    '%Y-%m-%d',
    '%m/%d/%Y',
    '%m/%d/%y',
    '%B %d, %Y',
    '%b %d, %Y',
    '%A, %B %d, %Y',
]

# Formats without a year are resolved against the current year
YEARLESS_DATE_FORMATS = [
    '%B %d',
    '%b %d',
    '%m/%d',
]

TIME_FORMATS = [
    '%I:%M %p',
    '%H:%M',
    '%I:%M%p',
    '%I %p',
    '%I%p',
]

WEEKDAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']

ISO_FRACTION_PATTERN = re.compile(r'(?<=[T ]\d{2}:\d{2}:\d{2})\.(\d+)')


def _parse_iso(value: str) -> Optional[datetime]:
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    value = ISO_FRACTION_PATTERN.sub(lambda match: '.' + match.group(1).ljust(6, '0')[:6], value)
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def _add_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _parse_relative(value: str, today: datetime) -> Optional[datetime]:
    lowered = value.lower().strip()
    if lowered in ('today', 'tonight'):
        return today
    if lowered == 'tomorrow':
        return today + timedelta(days=1)
    if 'next week' in lowered:
        return today + timedelta(weeks=1)
    if 'next month' in lowered:
        return _add_months(today, 1)

    words = lowered.split()
    if words and words[-1] in WEEKDAYS:
        days_ahead = (WEEKDAYS.index(words[-1]) - today.weekday()) % 7
        if words[0] == 'next' and days_ahead == 0:
            days_ahead = 7
        return today + timedelta(days=days_ahead)
    return None


def parse_time(time_string: Optional[str]) -> Optional[time]:
    """Parse a clock time such as '2:00 PM', '14:00' or '9am'.

    Args:
        time_string: Free-text time

    Returns:
        Parsed time of day, or None if no format matches
    """
    if not time_string:
        return None

    normalized = time_string.strip().upper().replace('.', '')
    for time_format in TIME_FORMATS:
        try:
            return datetime.strptime(normalized, time_format).time()
        except ValueError:
            continue
    return None


def apply_time(time_string: Optional[str], value: datetime) -> datetime:
    """Set the clock time of a datetime from a free-text time, keeping the date."""
    parsed = parse_time(time_string)
    if parsed is None:
        return value
    return value.replace(hour=parsed.hour, minute=parsed.minute, second=0, microsecond=0)


def parse_date(date_string: Optional[str], time_string: Optional[str] = None, now: Optional[datetime] = None) -> Optional[datetime]:
    """Parse a free-text date, optionally combined with a separate time.

    Formats are tried in a fixed order: ISO-8601 (with or without fractional
    seconds), explicit formats, year-less formats rolled into the future, then
    keywords relative to the start of today.

    Args:
        date_string: Date text such as '2024-12-25', '12/25/2024' or 'tomorrow'
        time_string: Optional time text applied to the parsed date
        now: Reference time for relative dates (defaults to the current time)

    Returns:
        Parsed datetime, or None if nothing matches
    """
    if not date_string or not date_string.strip():
        return None

    value = date_string.strip()
    now = now or datetime.now()

    parsed = _parse_iso(value)
    if parsed is not None:
        return apply_time(time_string, parsed)

    for date_format in DATE_FORMATS:
        try:
            return apply_time(time_string, datetime.strptime(value, date_format))
        except ValueError:
            continue

    for date_format in YEARLESS_DATE_FORMATS:
        try:
            parsed = datetime.strptime(f'{value} {now.year}', f'{date_format} %Y')
        except ValueError:
            continue
        if parsed < now - timedelta(days=1):
            parsed = _add_months(parsed, 12)
        return apply_time(time_string, parsed)

    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    parsed = _parse_relative(value, today)
    if parsed is not None:
        return apply_time(time_string, parsed)

    logger.debug(f"Could not parse date string '{value}'")
    return None
