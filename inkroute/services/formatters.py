"""
Display formatting and metadata for note content, one formatter per note type.
"""

import re
from typing import Any, Dict, List, Optional, Tuple

from ..models.core import FormattedNote, FormattedSegment, NoteType
from ..utils.logging_config import get_logger
from ..utils.patterns import EMAIL_PATTERN, digit_count, is_checked_marker, split_list_marker
from . import heuristic_extraction

logger = get_logger(__name__)

STYLE_BODY = 'body'
STYLE_HEADER = 'header'
STYLE_CHECKBOX = 'checkbox'
STYLE_COMPLETED = 'completed'
STYLE_ITEM = 'item'
STYLE_LABEL = 'label'
STYLE_TITLE = 'title'
STYLE_CAPTION = 'caption'
STYLE_AMOUNT = 'amount'
STYLE_STEP = 'step'
STYLE_QUOTE = 'quote'
STYLE_SIGNATURE = 'signature'
STYLE_RATING = 'rating'

MEETING_SECTIONS = [
    ('DISCUSSION', ('DISCUSSION', 'DISCUSSED')),
    ('ACTION ITEMS', ('ACTION ITEM', 'TODO', 'FOLLOW UP')),
    ('NOTES', ('NOTES:', 'NOTE:')),
    ('ATTENDEES', ('ATTENDEE', 'PARTICIPANT', 'PRESENT:')),
    ('AGENDA', ('AGENDA',)),
    ('NEXT MEETING', ('NEXT MEETING',)),
]

MEETING_DATE_PATTERNS = [
    re.compile(r'next meeting[:\s]+([\w\s,]+\d{1,2}(?:,\s*\d{4})?)', re.IGNORECASE),
    re.compile(r'meeting date[:\s]+([\w\s,]+\d{1,2})', re.IGNORECASE),
    re.compile(r'(\d{1,2}/\d{1,2}/\d{2,4})\s+\d{1,2}:\d{2}'),
]

EXPENSE_TOTAL_PATTERN = re.compile(r'\btotal[:\s]+\$?(\d+\.\d{2})', re.IGNORECASE)
CALCULATION_WORDS = ('subtotal', 'tax', 'total', 'amount')

CONTACT_PHONE_PATTERN = re.compile(r'(?:phone:?\s*)?([+\d\s()\-]{10,})', re.IGNORECASE)
COMPANY_LABELS = ('company:', 'organization:')
COMPANY_SUFFIXES = ('inc.', 'corp', 'llc', 'limited', 'co.')

RECIPE_HEADERS = {'ingredients': 'INGREDIENTS', 'steps': 'INSTRUCTIONS', 'notes': 'NOTES'}

EMAIL_HEADER_FIELDS = ('to:', 'from:', 'subject:', 'date:', 'cc:', 'bcc:', 'reply-to:')
EMAIL_QUOTE_MARKERS = ('>', '|')
SIGNATURE_MARKERS = ('best regards', 'kind regards', 'sincerely', 'thanks', 'cheers', 'sent from', 'get outlook for', 'signature', '--')

IDEA_BULLETS = ('•', '-', '*', '💡')
RATING_PATTERNS = [
    re.compile(r'rating:\s*(\d)', re.IGNORECASE),
    re.compile(r'(\d)\s*/\s*5\b'),
    re.compile(r'(\d)\s*stars?\b', re.IGNORECASE),
]
MAX_RATING = 5


def _content_lines(content: str) -> List[str]:
    return [line.strip() for line in content.splitlines() if line.strip()]


def _list_progress(content: str, noun: str) -> Dict[str, Any]:
    """Count checked versus total list lines."""
    total, completed = 0, 0
    for line in _content_lines(content):
        split = split_list_marker(line)
        if not split:
            continue
        total += 1
        if is_checked_marker(split[0]):
            completed += 1

    return {
        'completedCount': completed,
        'totalCount': total,
        'progress': f'{completed} of {total} {noun}',
        'progressPercentage': completed / total if total else 0.0,
    }


class NoteFormatter:
    """Default formatter: the whole content as one body segment, no metadata."""

    def format(self, content: str, note_type: NoteType = NoteType.GENERAL) -> FormattedNote:
        """
        Render content into styled segments plus metadata.

        Args:
            content: Note text, trigger tags already removed
            note_type: Type the note was classified as

        Returns:
            FormattedNote for display
        """
        return FormattedNote(note_type=note_type, segments=self.segments(content), metadata=self.extract_metadata(content))

    def segments(self, content: str) -> List[FormattedSegment]:
        stripped = content.strip()
        return [FormattedSegment(stripped)] if stripped else []

    def extract_metadata(self, content: str) -> Dict[str, Any]:
        return {}


class LineFormatter(NoteFormatter):
    """Formatter that styles each non-empty line on its own."""

    def segments(self, content: str) -> List[FormattedSegment]:
        return [self.format_line(line) for line in _content_lines(content)]

    def format_line(self, line: str) -> FormattedSegment:
        return FormattedSegment(line)


class TodoFormatter(LineFormatter):

    def format_line(self, line: str) -> FormattedSegment:
        split = split_list_marker(line)
        if not split:
            return FormattedSegment(line)
        marker, task = split
        return FormattedSegment(task, STYLE_COMPLETED if is_checked_marker(marker) else STYLE_CHECKBOX)

    def extract_metadata(self, content: str) -> Dict[str, Any]:
        return _list_progress(content, 'completed')


class ShoppingFormatter(LineFormatter):

    def format_line(self, line: str) -> FormattedSegment:
        item = heuristic_extraction.parse_shopping_item(line)
        if item is None:
            return FormattedSegment(line, STYLE_HEADER if line.endswith(':') else STYLE_BODY)
        return FormattedSegment(item.display_name, STYLE_COMPLETED if item.is_checked else STYLE_ITEM)

    def extract_metadata(self, content: str) -> Dict[str, Any]:
        return _list_progress(content, 'items')


class MeetingFormatter(LineFormatter):

    @staticmethod
    def section_header(line: str) -> Optional[str]:
        upper = line.upper()
        for header, markers in MEETING_SECTIONS:
            if header == 'NOTES':
                if upper.startswith(markers):
                    return header
            elif any(marker in upper for marker in markers):
                return header
        return None

    def format_line(self, line: str) -> FormattedSegment:
        header = self.section_header(line)
        if header is not None:
            # Headers with inline content ("Agenda: budget") keep their text
            _, _, rest = line.partition(':')
            return FormattedSegment(f'{header}: {rest.strip()}' if rest.strip() else header, STYLE_HEADER)
        split = split_list_marker(line)
        if split:
            return FormattedSegment(split[1], STYLE_COMPLETED if is_checked_marker(split[0]) else STYLE_ITEM)
        return FormattedSegment(line)

    def extract_metadata(self, content: str) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {}
        participants = heuristic_extraction.meeting_participants(content)
        if participants:
            metadata['participants'] = participants
        meeting_date = self.meeting_date(content)
        if meeting_date:
            metadata['meetingDate'] = meeting_date
        return metadata

    @staticmethod
    def meeting_date(content: str) -> Optional[str]:
        for pattern in MEETING_DATE_PATTERNS:
            match = pattern.search(content)
            if match:
                return match.group(1).strip()
        return None


class ExpenseFormatter(LineFormatter):

    @staticmethod
    def is_calculation_line(line: str) -> bool:
        lowered = line.lower()
        return any(word in lowered for word in CALCULATION_WORDS)

    @staticmethod
    def is_date_time_line(line: str) -> bool:
        lowered = line.lower()
        return '/' in lowered and (':' in lowered or 'am' in lowered or 'pm' in lowered)

    def segments(self, content: str) -> List[FormattedSegment]:
        segments = []
        merchant = self.merchant(content)
        for line in _content_lines(content):
            if merchant is not None and line == merchant:
                segments.append(FormattedSegment(line, STYLE_TITLE))
                merchant = None
            elif self.is_date_time_line(line):
                segments.append(FormattedSegment(line, STYLE_CAPTION))
            elif self.is_calculation_line(line):
                segments.append(FormattedSegment(line, STYLE_AMOUNT))
            else:
                segments.append(FormattedSegment(line))
        return segments

    def extract_metadata(self, content: str) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {}
        match = EXPENSE_TOTAL_PATTERN.search(content)
        if match:
            metadata['amount'] = f'${match.group(1)}'
        merchant = self.merchant(content)
        if merchant:
            metadata['merchant'] = merchant
        return metadata

    def merchant(self, content: str) -> Optional[str]:
        """First line that is neither a date stamp nor a total."""
        for line in _content_lines(content):
            if not self.is_date_time_line(line) and not self.is_calculation_line(line):
                return line
        return None


class ContactFormatter(LineFormatter):

    def segments(self, content: str) -> List[FormattedSegment]:
        lines = _content_lines(content)
        if not lines:
            return []
        return [FormattedSegment(lines[0], STYLE_TITLE)] + [self.format_line(line) for line in lines[1:]]

    def format_line(self, line: str) -> FormattedSegment:
        if ':' in line and not line.lower().startswith(('http:', 'https:')):
            return FormattedSegment(line, STYLE_LABEL)
        return FormattedSegment(line)

    def extract_metadata(self, content: str) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {}
        phone = self.phone(content)
        if phone:
            metadata['phone'] = phone
        email = EMAIL_PATTERN.search(content)
        if email:
            metadata['email'] = email.group(0)
        company = self.company(content)
        if company:
            metadata['company'] = company
        return metadata

    @staticmethod
    def phone(content: str) -> Optional[str]:
        match = CONTACT_PHONE_PATTERN.search(content)
        if not match:
            return None
        phone = match.group(1).strip()
        return phone if digit_count(phone) >= 10 else None

    @staticmethod
    def company(content: str) -> Optional[str]:
        for line in _content_lines(content):
            lowered = line.lower()
            if lowered.startswith(COMPANY_LABELS):
                return line.split(':', 1)[1].strip() or None
            if any(suffix in lowered for suffix in COMPANY_SUFFIXES):
                return line
        return None


class EventFormatter(LineFormatter):

    def segments(self, content: str) -> List[FormattedSegment]:
        lines = _content_lines(content)
        if not lines:
            return []
        return [FormattedSegment(lines[0], STYLE_TITLE)] + [self.format_line(line) for line in lines[1:]]

    def format_line(self, line: str) -> FormattedSegment:
        if heuristic_extraction.split_event_label(line):
            return FormattedSegment(line, STYLE_LABEL)
        return FormattedSegment(line)

    def extract_metadata(self, content: str) -> Dict[str, Any]:
        event = heuristic_extraction.extract_event(content)
        metadata: Dict[str, Any] = {}
        event_date = ' '.join(part for part in (event.date, event.time) if part)
        if event_date:
            metadata['eventDate'] = event_date
        if event.location:
            metadata['location'] = event.location
        return metadata


class RecipeFormatter(LineFormatter):
    """Title, section headers, ingredient items and renumbered steps."""

    def segments(self, content: str) -> List[FormattedSegment]:
        segments = []
        section = None
        step_number = 0
        for index, line in enumerate(_content_lines(content)):
            header = heuristic_extraction.recipe_section(line)
            if header:
                section = header
                segments.append(FormattedSegment(RECIPE_HEADERS[header], STYLE_HEADER))
            elif index == 0 and not heuristic_extraction.is_ingredient_line(line) and not heuristic_extraction.is_step_line(line):
                segments.append(FormattedSegment(line.strip(':#- '), STYLE_TITLE))
            elif section == 'steps' or (section != 'ingredients' and heuristic_extraction.STEP_NUMBER_PATTERN.match(line)):
                step_number += 1
                segments.append(FormattedSegment(f'{step_number}. {heuristic_extraction.step_text(line)}', STYLE_STEP))
            elif section == 'ingredients':
                segments.append(FormattedSegment(heuristic_extraction.clean_ingredient(line), STYLE_ITEM))
            else:
                segments.append(FormattedSegment(line))
        return segments

    def extract_metadata(self, content: str) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {}
        prep_time = heuristic_extraction.recipe_time(content, 'prep')
        if prep_time:
            metadata['prepTime'] = prep_time
        cook_time = heuristic_extraction.recipe_time(content, 'cook')
        if cook_time:
            metadata['cookTime'] = cook_time
        servings = heuristic_extraction.recipe_servings(content)
        if servings:
            metadata['servings'] = servings
        return metadata


class EmailFormatter(LineFormatter):
    """Header fields as labels, quoted replies, and a trailing signature block."""

    @staticmethod
    def header_field(line: str) -> Optional[Tuple[str, str]]:
        lowered = line.lower()
        for label in EMAIL_HEADER_FIELDS:
            if lowered.startswith(label):
                return label[:-1], line[len(label):].strip()
        return None

    @staticmethod
    def is_signature_start(line: str) -> bool:
        return line.lower().startswith(SIGNATURE_MARKERS)

    def segments(self, content: str) -> List[FormattedSegment]:
        segments = []
        in_signature = False
        for line in _content_lines(content):
            in_signature = in_signature or self.is_signature_start(line)
            if in_signature:
                segments.append(FormattedSegment(line, STYLE_SIGNATURE))
            elif self.header_field(line):
                segments.append(FormattedSegment(line, STYLE_LABEL))
            elif line.startswith(EMAIL_QUOTE_MARKERS):
                segments.append(FormattedSegment(line.lstrip('>| ').strip(), STYLE_QUOTE))
            else:
                segments.append(FormattedSegment(line))
        return segments

    def extract_metadata(self, content: str) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {}
        for line in _content_lines(content):
            field = self.header_field(line)
            if not field or not field[1]:
                continue
            label, value = field
            if label == 'subject':
                metadata.setdefault('subject', value)
            elif label == 'from':
                metadata.setdefault('sender', value)
            elif label == 'to':
                metadata.setdefault('recipients', [part.strip() for part in re.split(r'[,;]', value) if part.strip()])
        return metadata


class IdeaFormatter(LineFormatter):
    """Idea bullets and star ratings."""

    @staticmethod
    def rating(line: str) -> Optional[int]:
        stars = line.count('★')
        if stars:
            return min(stars, MAX_RATING)
        for pattern in RATING_PATTERNS:
            match = pattern.search(line)
            if match:
                return min(int(match.group(1)), MAX_RATING)
        return None

    def format_line(self, line: str) -> FormattedSegment:
        rating = self.rating(line)
        if rating is not None:
            return FormattedSegment('★' * rating + '☆' * (MAX_RATING - rating), STYLE_RATING)
        if line.startswith(IDEA_BULLETS):
            return FormattedSegment(line.lstrip(''.join(IDEA_BULLETS)).strip(), STYLE_ITEM)
        return FormattedSegment(line)

    def extract_metadata(self, content: str) -> Dict[str, Any]:
        for line in _content_lines(content):
            rating = self.rating(line)
            if rating is not None:
                return {'rating': rating}
        return {}


class FormatterRegistry:
    """Dispatch table from NoteType to its formatter."""

    def __init__(self, formatters: Optional[Dict[NoteType, NoteFormatter]] = None, fallback: Optional[NoteFormatter] = None):
        self._formatters: Dict[NoteType, NoteFormatter] = dict(formatters or {})
        self._fallback = fallback or NoteFormatter()

    @classmethod
    def default(cls) -> 'FormatterRegistry':
        return cls({
            NoteType.TODO: TodoFormatter(),
            NoteType.SHOPPING: ShoppingFormatter(),
            NoteType.MEETING: MeetingFormatter(),
            NoteType.EXPENSE: ExpenseFormatter(),
            NoteType.CONTACT: ContactFormatter(),
            NoteType.EVENT: EventFormatter(),
            NoteType.RECIPE: RecipeFormatter(),
            NoteType.EMAIL: EmailFormatter(),
            NoteType.IDEA: IdeaFormatter(),
        })

    def formatter_for(self, note_type: NoteType) -> NoteFormatter:
        return self._formatters.get(note_type, self._fallback)

    def has_formatter(self, note_type: NoteType) -> bool:
        return note_type in self._formatters

    def format(self, content: str, note_type: NoteType) -> FormattedNote:
        logger.debug(f'Formatting {note_type.value} note')
        return self.formatter_for(note_type).format(content, note_type)

    def extract_metadata(self, content: str, note_type: NoteType) -> Dict[str, Any]:
        return self.formatter_for(note_type).extract_metadata(content)
