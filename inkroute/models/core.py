"""
Core data models for note classification and structured extraction.
"""

import re
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..utils.date_parsing import parse_date, parse_time


class NoteType(str, Enum):
    """Closed set of note types a note can be routed to."""
    GENERAL = 'general'
    TODO = 'todo'
    MEETING = 'meeting'
    EMAIL = 'email'
    CLAUDE_PROMPT = 'claudePrompt'
    REMINDER = 'reminder'
    CONTACT = 'contact'
    EXPENSE = 'expense'
    SHOPPING = 'shopping'
    RECIPE = 'recipe'
    EVENT = 'event'
    IDEA = 'idea'

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional['NoteType']:
        """Case-insensitive lookup by value or name; None for unknown names."""
        if not value:
            return None
        lowered = value.strip().strip('#"\'.').lower()
        for note_type in cls:
            if lowered in (note_type.value.lower(), note_type.name.lower()):
                return note_type
        return None

    @classmethod
    def from_string(cls, value: Optional[str]) -> 'NoteType':
        """Case-insensitive lookup that falls back to GENERAL for unknown names."""
        return cls.parse(value) or cls.GENERAL


class ClassificationMethod(str, Enum):
    """How a classification was reached."""
    EXPLICIT = 'explicit'
    LLM = 'llm'
    HEURISTIC = 'heuristic'
    VOICE_COMMAND = 'voiceCommand'
    CONTENT_ANALYSIS = 'contentAnalysis'
    MANUAL = 'manual'
    DEFAULT = 'default'

    @property
    def display_name(self) -> str:
        return _METHOD_DISPLAY_NAMES[self]

    @property
    def is_automatic(self) -> bool:
        return self not in (ClassificationMethod.EXPLICIT, ClassificationMethod.MANUAL)


_METHOD_DISPLAY_NAMES = {
    ClassificationMethod.EXPLICIT: 'Hashtag',
    ClassificationMethod.LLM: 'AI Detection',
    ClassificationMethod.HEURISTIC: 'Pattern Match',
    ClassificationMethod.VOICE_COMMAND: 'Voice Command',
    ClassificationMethod.CONTENT_ANALYSIS: 'Content Analysis',
    ClassificationMethod.MANUAL: 'Manual',
    ClassificationMethod.DEFAULT: 'Default',
}

LLM_FALLBACK_PREFIX = 'LLM fallback'


@dataclass(frozen=True)
class NoteClassification:
    """Result of classifying a note into a NoteType.

    Confidence is exactly 1.0 for explicit and manual classifications and below
    1.0 for every automatic method. Instances are never mutated; a later pass
    produces a new classification instead.
    """
    note_type: NoteType
    confidence: float
    method: ClassificationMethod
    reasoning: Optional[str] = None
    prompt_version: Optional[str] = None

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f'Confidence must be within [0, 1], got {self.confidence}')
        user_directed = not self.method.is_automatic
        if user_directed and self.confidence != 1.0:
            raise ValueError(f'{self.method.value} classification must have confidence 1.0')
        if not user_directed and self.confidence >= 1.0:
            raise ValueError(f'{self.method.value} classification must have confidence below 1.0')

    @classmethod
    def explicit(cls, note_type: NoteType, trigger: Optional[str] = None) -> 'NoteClassification':
        reasoning = f'Explicit hashtag trigger detected: {trigger}' if trigger else 'Explicit hashtag trigger detected'
        return cls(note_type, 1.0, ClassificationMethod.EXPLICIT, reasoning)

    @classmethod
    def manual(cls, note_type: NoteType) -> 'NoteClassification':
        return cls(note_type, 1.0, ClassificationMethod.MANUAL, 'Manually corrected by user')

    @classmethod
    def llm(cls,
            note_type: NoteType,
            confidence: float = 0.85,
            reasoning: Optional[str] = None,
            prompt_version: Optional[str] = None) -> 'NoteClassification':
        return cls(note_type, confidence, ClassificationMethod.LLM, reasoning, prompt_version)

    @classmethod
    def heuristic(cls, note_type: NoteType, confidence: float = 0.75, reasoning: Optional[str] = None) -> 'NoteClassification':
        return cls(note_type, confidence, ClassificationMethod.HEURISTIC, reasoning)

    @classmethod
    def content_analysis(cls, note_type: NoteType, confidence: float = 0.6, reasoning: Optional[str] = None) -> 'NoteClassification':
        return cls(note_type, confidence, ClassificationMethod.CONTENT_ANALYSIS, reasoning)

    @classmethod
    def default(cls) -> 'NoteClassification':
        return cls(NoteType.GENERAL, 0.5, ClassificationMethod.DEFAULT, 'Default classification')

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence >= 0.85

    @property
    def is_low_confidence(self) -> bool:
        return self.confidence < 0.70

    @property
    def should_request_confirmation(self) -> bool:
        return self.method.is_automatic and self.confidence < 0.80

    @property
    def confidence_percentage(self) -> str:
        return f'{int(round(self.confidence * 100))}%'

    @property
    def is_llm_fallback(self) -> bool:
        """True when an LLM pass was attempted but the heuristic result was kept."""
        return bool(self.reasoning) and self.reasoning.startswith(LLM_FALLBACK_PREFIX)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.note_type.value,
            'confidence': self.confidence,
            'method': self.method.value,
            'reasoning': self.reasoning,
            'promptVersion': self.prompt_version,
        }


def _new_id() -> str:
    return str(uuid.uuid4())


def _text(value: Any) -> Optional[str]:
    """Normalize an optional JSON value to a stripped string or None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'yes', '1')
    return bool(value)


PRIORITY_HIGH = 'high'
PRIORITY_MEDIUM = 'medium'
PRIORITY_NORMAL = 'normal'


def todo_priority(value: Optional[str]) -> str:
    """Map a free-text priority onto high, medium or normal."""
    lowered = (value or '').strip().lower()
    if lowered in ('high', 'urgent', 'critical'):
        return PRIORITY_HIGH
    if lowered in ('medium', 'important'):
        return PRIORITY_MEDIUM
    return PRIORITY_NORMAL


@dataclass
class ExtractedTodo:
    """A single task pulled from a todo note."""
    text: str
    is_completed: bool = False
    priority: str = PRIORITY_NORMAL
    due_date: Optional[str] = None  # Raw text, parsed lazily
    notes: Optional[str] = None
    id: str = field(default_factory=_new_id, compare=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ExtractedTodo':
        text = _text(data.get('text'))
        if not text:
            raise ValueError('Todo item is missing text')
        return cls(text=text,
                   is_completed=_flag(data.get('completed', False)),
                   priority=todo_priority(_text(data.get('priority'))),
                   due_date=_text(data.get('dueDate')),
                   notes=_text(data.get('notes')))

    def parsed_due_date(self, now: Optional[datetime] = None) -> Optional[datetime]:
        return parse_date(self.due_date, now=now)


@dataclass
class ExtractedEvent:
    """Calendar-ready details pulled from an event note."""
    title: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    organizer: Optional[str] = None
    contact_info: Optional[str] = None
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None
    id: str = field(default_factory=_new_id, compare=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ExtractedEvent':
        return cls(title=_text(data.get('title')),
                   date=_text(data.get('date')),
                   time=_text(data.get('time')),
                   location=_text(data.get('location')),
                   description=_text(data.get('description')),
                   organizer=_text(data.get('organizer')),
                   contact_info=_text(data.get('contactInfo')),
                   is_recurring=_flag(data.get('isRecurring', False)),
                   recurrence_pattern=_text(data.get('recurrencePattern')))

    @property
    def has_minimum_data(self) -> bool:
        return bool(self.title) and bool(self.date or self.time)

    def parsed_datetime(self, now: Optional[datetime] = None) -> Optional[datetime]:
        """Resolve the raw date and time strings into a datetime.

        A time without a date is taken to mean today.
        """
        if self.date:
            return parse_date(self.date, self.time, now=now)
        parsed_time = parse_time(self.time)
        if parsed_time is None:
            return None
        now = now or datetime.now()
        return now.replace(hour=parsed_time.hour, minute=parsed_time.minute, second=0, microsecond=0)


@dataclass
class ExtractedContact:
    """Person or business details pulled from a contact note or business card."""
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    notes: Optional[str] = None
    id: str = field(default_factory=_new_id, compare=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ExtractedContact':
        contact = cls(name=_text(data.get('name')),
                      first_name=_text(data.get('firstName')),
                      last_name=_text(data.get('lastName')),
                      phone=_text(data.get('phone')),
                      email=_text(data.get('email')),
                      company=_text(data.get('company')),
                      title=_text(data.get('title')),
                      address=_text(data.get('address')),
                      website=_text(data.get('website')),
                      notes=_text(data.get('notes')))
        if not contact.name and (contact.first_name or contact.last_name):
            contact.name = ' '.join(part for part in (contact.first_name, contact.last_name) if part)
        return contact

    @property
    def has_minimum_data(self) -> bool:
        return any((self.name, self.phone, self.email, self.company))


@dataclass
class ExtractedShoppingItem:
    """One line of a shopping list."""
    name: str
    quantity: Optional[str] = None
    is_checked: bool = False
    category: Optional[str] = None
    id: str = field(default_factory=_new_id, compare=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ExtractedShoppingItem':
        name = _text(data.get('name'))
        if not name:
            raise ValueError('Shopping item is missing a name')
        return cls(name=name,
                   quantity=_text(data.get('quantity')),
                   is_checked=_flag(data.get('isChecked', False)),
                   category=_text(data.get('category')))

    @property
    def display_name(self) -> str:
        if self.quantity:
            return f'{self.quantity} {self.name}'
        return self.name


@dataclass
class ExtractedShoppingList:
    """Shopping list with optional store and free-text notes."""
    store_name: Optional[str] = None
    items: List[ExtractedShoppingItem] = field(default_factory=list)
    notes: Optional[str] = None
    id: str = field(default_factory=_new_id, compare=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ExtractedShoppingList':
        items = data.get('items') or []
        if not isinstance(items, list):
            raise ValueError(f'Expected list of items, got {type(items).__name__}')
        return cls(store_name=_text(data.get('storeName')),
                   items=[ExtractedShoppingItem.from_json(item) for item in items if isinstance(item, dict)],
                   notes=_text(data.get('notes')))

    @property
    def has_minimum_data(self) -> bool:
        return bool(self.items)

    @property
    def unchecked_count(self) -> int:
        return sum(1 for item in self.items if not item.is_checked)


@dataclass
class ExtractedExpense:
    """Spending details pulled from a receipt or expense note."""
    merchant: Optional[str] = None
    amount: Optional[float] = None
    currency: str = 'USD'
    date: Optional[str] = None
    category: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    id: str = field(default_factory=_new_id, compare=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ExtractedExpense':
        amount = data.get('amount')
        if isinstance(amount, str):
            amount = amount.replace(',', '').lstrip('$€£¥').strip() or None
        return cls(merchant=_text(data.get('merchant')),
                   amount=float(amount) if amount is not None else None,
                   currency=_text(data.get('currency')) or 'USD',
                   date=_text(data.get('date')),
                   category=_text(data.get('category')),
                   payment_method=_text(data.get('paymentMethod')),
                   notes=_text(data.get('notes')))

    @property
    def has_minimum_data(self) -> bool:
        return self.merchant is not None or self.amount is not None


@dataclass
class ExtractedMeeting:
    """Subject, attendees and follow-ups pulled from meeting notes."""
    subject: Optional[str] = None
    attendees: List[str] = field(default_factory=list)
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    agenda: Optional[str] = None
    action_items: List[str] = field(default_factory=list)
    notes: Optional[str] = None
    id: str = field(default_factory=_new_id, compare=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ExtractedMeeting':
        attendees = data.get('attendees') or []
        if isinstance(attendees, str):
            attendees = [name for name in (part.strip() for part in attendees.split(',')) if name]
        action_items = data.get('actionItems') or []
        if isinstance(action_items, str):
            action_items = [line for line in (part.strip() for part in action_items.splitlines()) if line]
        return cls(subject=_text(data.get('subject')),
                   attendees=[str(name).strip() for name in attendees if str(name).strip()],
                   date=_text(data.get('date')),
                   time=_text(data.get('time')),
                   location=_text(data.get('location')),
                   agenda=_text(data.get('agenda')),
                   action_items=[str(item).strip() for item in action_items if str(item).strip()],
                   notes=_text(data.get('notes')))

    @property
    def has_minimum_data(self) -> bool:
        return bool(self.subject or self.attendees or self.action_items)


def _string_list(value: Any) -> List[str]:
    """Normalize a JSON list of strings, or a newline separated string, to a list."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.splitlines()
    if not isinstance(value, list):
        raise ValueError(f'Expected list of strings, got {type(value).__name__}')
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def _recipients(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in re.split(r'[,;]', value) if part.strip()]


@dataclass
class ExtractedRecipe:
    """Ingredients, steps and timings pulled from a recipe note."""
    title: Optional[str] = None
    ingredients: List[str] = field(default_factory=list)
    steps: List[str] = field(default_factory=list)
    servings: Optional[str] = None
    cook_time: Optional[str] = None
    prep_time: Optional[str] = None
    notes: Optional[str] = None
    id: str = field(default_factory=_new_id, compare=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ExtractedRecipe':
        return cls(title=_text(data.get('title')),
                   ingredients=_string_list(data.get('ingredients')),
                   steps=_string_list(data.get('steps')),
                   servings=_text(data.get('servings')),
                   cook_time=_text(data.get('cookTime')),
                   prep_time=_text(data.get('prepTime')),
                   notes=_text(data.get('notes')))

    @property
    def has_minimum_data(self) -> bool:
        return bool(self.ingredients or self.steps)


@dataclass
class ExtractedEmail:
    """Draft email fields pulled from an email note."""
    to: Optional[str] = None
    cc: Optional[str] = None
    bcc: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    id: str = field(default_factory=_new_id, compare=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ExtractedEmail':
        return cls(to=_text(data.get('to')),
                   cc=_text(data.get('cc')),
                   bcc=_text(data.get('bcc')),
                   subject=_text(data.get('subject')),
                   body=_text(data.get('body')))

    @property
    def has_minimum_data(self) -> bool:
        return any((self.to, self.subject, self.body))

    @property
    def to_recipients(self) -> List[str]:
        return _recipients(self.to)

    @property
    def cc_recipients(self) -> List[str]:
        return _recipients(self.cc)

    @property
    def bcc_recipients(self) -> List[str]:
        return _recipients(self.bcc)


@dataclass(frozen=True)
class NoteSection:
    """A hashtag-delimited slice of a note, classified on its own."""
    classification: NoteClassification
    content: str
    tag: Optional[str] = None

    @property
    def note_type(self) -> NoteType:
        return self.classification.note_type


@dataclass
class FormattedSegment:
    """A run of display text with a style hint."""
    text: str
    style: str = 'body'


@dataclass
class FormattedNote:
    """Display-ready rendering of a note; never persisted."""
    note_type: NoteType
    segments: List[FormattedSegment] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ProcessedNote:
    """Classification plus extracted data handed to the persistence layer."""
    classification: NoteClassification
    content: str
    extracted: Optional[Any] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'classification': self.classification.to_dict(),
            'content': self.content,
            'extracted': record_to_dict(self.extracted),
            'metadata': dict(self.metadata),
        }


def record_to_dict(record: Any) -> Any:
    """Convert an extracted record (or list of records) into plain JSON-ready data."""
    if record is None:
        return None
    if isinstance(record, list):
        return [record_to_dict(item) for item in record]
    return asdict(record)
