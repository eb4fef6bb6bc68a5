"""
Shared regular expressions used by classification, extraction and formatting.
"""

import re
from typing import List, Optional, Pattern, Tuple

EMAIL_PATTERN = re.compile(r'[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}')

# Ordered: international form first so the +1 prefix is kept
PHONE_PATTERNS: List[Pattern] = [
    re.compile(r'\+1[-.\s]?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}'),
    re.compile(r'\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}'),
    re.compile(r'\b\d{3}[-.\s]\d{4}\b'),
]

URL_PATTERNS: List[Pattern] = [
    re.compile(r'https?://[^\s]+', re.IGNORECASE),
    re.compile(r'www\.[A-Za-z0-9.-]+\.[A-Za-z]{2,}[^\s]*', re.IGNORECASE),
    re.compile(r'[A-Za-z0-9-]+\.(?:com|org|net|io|co|biz|info|us|me)\b[^\s]*', re.IGNORECASE),
]

CITY_STATE_ZIP_PATTERN = re.compile(r'[A-Za-z\s]+,\s*[A-Z]{2}\s*\d{5}')
ZIP_PATTERN = re.compile(r'\b\d{5}(?:-\d{4})?\b')

TIME_PATTERN = re.compile(r'\b\d{1,2}:\d{2}\s*(?:[AaPp]\.?[Mm]\.?)?(?![\w])|\b\d{1,2}\s*(?:[AaPp]\.?[Mm]\.?)(?![\w])')

ISO_DATE_PATTERN = re.compile(r'\b\d{4}-\d{2}-\d{2}(?:T\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?\b')
NUMERIC_DATE_PATTERN = re.compile(r'\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b')
MONTH_NAME_DATE_PATTERN = re.compile(
    r'\b(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|jun(?:e)?|jul(?:y)?|aug(?:ust)?|'
    r'sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\.?\s+\d{1,2}(?:st|nd|rd|th)?(?:,?\s+\d{4})?\b',
    re.IGNORECASE)
DAY_NAME_PATTERN = re.compile(r'\b(?:next\s+|this\s+)?(?:mon|tues|wednes|thurs|fri|satur|sun)day\b', re.IGNORECASE)
RELATIVE_DATE_PATTERN = re.compile(r'\b(?:today|tomorrow|tonight|next\s+week|next\s+month)\b', re.IGNORECASE)

# Ordered from most to least specific
DATE_PATTERNS: List[Pattern] = [
    ISO_DATE_PATTERN,
    NUMERIC_DATE_PATTERN,
    MONTH_NAME_DATE_PATTERN,
    DAY_NAME_PATTERN,
    RELATIVE_DATE_PATTERN,
]

MENTION_PATTERN = re.compile(r'@(\w+)')

LIST_MARKER_PATTERN = re.compile(r'^(\[[ xX]?\]|\([ xX]?\)|[☐☑✓✔]|[-*•]|\d+[.)](?=\s))\s*(.*)$')
CHECKBOX_PATTERN = re.compile(r'^(\[[ xX]?\]|\([ xX]?\)|[☐☑✓✔])\s*(.*)$')
CHECKED_MARKERS = ('[x]', '[X]', '(x)', '(X)', '☑', '✓', '✔')


def find_email(text: str) -> Optional[str]:
    """Return the first email address in the text, exactly as written."""
    match = EMAIL_PATTERN.search(text)
    return match.group(0) if match else None


def find_phone(text: str) -> Optional[str]:
    """Return the first phone-like digit run in the text."""
    for pattern in PHONE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0).strip()
    return None


def find_url(text: str) -> Optional[str]:
    """Return the first website in the text, ignoring bare email addresses."""
    if '@' in text and '://' not in text:
        return None
    for pattern in URL_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0).rstrip('.,)')
    return None


def find_time(text: str) -> Optional[str]:
    """Return the first clock time in the text, such as '2:00 PM' or '9am'."""
    match = TIME_PATTERN.search(text)
    return match.group(0).strip() if match else None


def find_date(text: str) -> Optional[str]:
    """Return the first date-like token, trying the most specific patterns first."""
    for pattern in DATE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0).strip()
    return None


def find_mentions(text: str) -> List[str]:
    """Return @mentions in order of appearance, without the @."""
    return MENTION_PATTERN.findall(text)


def split_list_marker(line: str) -> Optional[Tuple[str, str]]:
    """Split a checkbox, bullet or numbered line into (marker, rest).

    A checkbox behind a bullet or number, as in '- [x] bread', is the marker
    that counts, so it is returned in place of the bullet.

    Returns:
        Tuple of marker and remaining text, or None when the line is not a list item
    """
    match = LIST_MARKER_PATTERN.match(line.strip())
    if not match:
        return None
    marker, rest = match.group(1), match.group(2).strip()
    if not CHECKBOX_PATTERN.match(marker):
        inner = CHECKBOX_PATTERN.match(rest)
        if inner:
            return inner.group(1), inner.group(2).strip()
    return marker, rest


def is_checked_marker(marker: str) -> bool:
    return marker in CHECKED_MARKERS


def digit_count(text: str) -> int:
    return sum(1 for char in text if char.isdigit())
