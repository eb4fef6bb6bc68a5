"""
Hashtag trigger detection, including tolerance for common OCR misreads.
"""

import re
from typing import Callable, List, Optional, Tuple

from ..models.core import NoteClassification, NoteSection, NoteType
from ..models.note_types import NoteTypeRegistry
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

# Triggers are only honoured near the start of a note
TRIGGER_PREFIX_LENGTH = 100
LOOSE_MATCH_WINDOW = 10

# Checked in order; earlier types are more specific
FUZZY_TRIGGERS: List[Tuple[NoteType, List[str]]] = [
    (NoteType.CLAUDE_PROMPT, [
        '#claude#', '#c1aude#', '#ciaude#', '#claudee#', '#claube#',
        '#feature#', '#featur#', '#featuer#', '#featuree#', '#f3ature#',
        '#prompt#', '#prompl#', '#prornpt#', '#promptt#',
        '#request#', '#requesl#', '#requesi#', '#requestt#',
        '#issue#', '#issu3#', '#issuse#', '#issuee#',
        '#claude', 'claude#', '#feature', 'feature#', '#prompt', 'prompt#',
    ]),
    (NoteType.REMINDER, [
        '#reminder#', '#reminde#', '#rerinder#', '#rerninder#',
        '#remind#', '#rernind#', '#rernlnd#',
        '#remindme#', '#remindm3#',
        '#reminder', 'reminder#', '#remind', 'remind#',
    ]),
    (NoteType.CONTACT, [
        '#contact#', '#contacl#', '#contaci#', '#coniact#',
        '#person#', '#pers0n#', '#persun#',
        '#phone#', '#phon3#', '#fone#',
        '#contact', 'contact#', '#person', 'person#',
    ]),
    (NoteType.EXPENSE, [
        '#expense#', '#expens3#', '#expanse#', '#expensee#',
        '#receipt#', '#recipt#', '#reciept#', '#recelpt#',
        '#spent#', '#spentt#', '#sp3nt#',
        '#paid#', '#pald#', '#pa1d#',
        '#expense', 'expense#', '#receipt', 'receipt#',
    ]),
    (NoteType.SHOPPING, [
        '#shopping#', '#shoppinq#', '#shopplng#', '#shoppingg#',
        '#shop#', '#shopp#',
        '#grocery#', '#groceries#', '#grocer1es#', '#qrocery#',
        '#list#', '#listt#',
        '#shopping', 'shopping#', '#grocery', 'grocery#',
    ]),
    (NoteType.RECIPE, [
        '#recipe#', '#recipee#', '#recip3#', '#reclpe#',
        '#cook#', '#cookk#', '#c00k#',
        '#bake#', '#bakee#', '#bak3#',
        '#recipe', 'recipe#', '#cook', 'cook#',
    ]),
    (NoteType.EVENT, [
        '#event#', '#eventt#', '#evnt#', '#3vent#',
        '#appointment#', '#appointrnent#', '#apointment#', '#appointmentt#',
        '#schedule#', '#schedu1e#', '#schedulle#',
        '#appt#', '#apptt#',
        '#event', 'event#', '#appointment', 'appointment#',
    ]),
    (NoteType.IDEA, [
        '#idea#', '#ideaa#', '#1dea#', '#ldea#',
        '#thought#', '#thoughtt#', '#thouqht#', '#thoughl#',
        '#note-to-self#', '#notetoself#', '#note2self#',
        '#idea', 'idea#', '#thought', 'thought#',
    ]),
    (NoteType.TODO, [
        '#todo#', '#tod0#', '#todoo#',
        '#task#', '#tasks#', '#taskk#', '#tash#', '#tashs#',
        '#to-do#', '#todo', 'todo#', '#todolt', '#todott',
    ]),
    (NoteType.EMAIL, [
        '#email#', '#emaill#', '#emailtt', '#ernail#', '#emai1#',
        '#mail#', '#maill#', '#mai1#',
        '#email', 'email#',
    ]),
    (NoteType.MEETING, [
        '#meeting#', '#meetinq#', '#meetimg#', '#rneetinq#',
        '#notes#', '#notess#', '#note5#',
        '#minutes#', '#rninutes#', '#minutess#',
        '#meeting', 'meeting#',
    ]),
]

LOOSE_KEYWORDS: List[Tuple[NoteType, List[str]]] = [
    (NoteType.CLAUDE_PROMPT, ['claude', 'feature', 'prompt', 'request', 'issue']),
    (NoteType.REMINDER, ['reminder', 'remind', 'remindme']),
    (NoteType.CONTACT, ['contact', 'person', 'phone']),
    (NoteType.EXPENSE, ['expense', 'receipt', 'spent', 'paid']),
    (NoteType.SHOPPING, ['shopping', 'shop', 'grocery', 'groceries']),
    (NoteType.RECIPE, ['recipe', 'cook', 'bake']),
    (NoteType.EVENT, ['event', 'appointment', 'schedule', 'appt']),
    (NoteType.IDEA, ['idea', 'thought', 'notetoself']),
    (NoteType.EMAIL, ['email', 'mail', 'emai', 'ernail']),
    (NoteType.TODO, ['todo', 'task', 'tasks']),
    (NoteType.MEETING, ['meeting', 'notes', 'minutes']),
]

OCR_SUBSTITUTIONS = [
    ('m', 'rn'), ('m', 'nn'),
    ('l', '1'), ('l', 'i'),
    ('o', '0'),
    ('g', 'q'),
    ('a', 'o'),
    ('i', 'l'), ('i', '1'),
]


def ocr_variations(word: str) -> List[str]:
    """Spellings a keyword commonly takes after handwriting OCR."""
    return [word.replace(original, replacement) for original, replacement in OCR_SUBSTITUTIONS if original in word]


def _normalize_for_fuzzy_match(prefix: str) -> str:
    return prefix.replace(' ', '').replace('.', '#').replace(',', '')


def _matches_loose_pattern(text: str, keywords: List[str]) -> bool:
    hash_index = text.find('#')
    if hash_index < 0:
        return False
    window = text[hash_index + 1:hash_index + 1 + LOOSE_MATCH_WINDOW]
    for keyword in keywords:
        if keyword in window:
            return True
        if any(variation in window for variation in ocr_variations(keyword)):
            return True
    return False


class TriggerDetector:
    """Finds, strips and splits on hashtag triggers registered in a NoteTypeRegistry."""

    def __init__(self, registry: NoteTypeRegistry):
        self.registry = registry

    def detect_explicit(self, text: str) -> Optional[Tuple[NoteType, str]]:
        """Find the earliest exact trigger near the start of the text.

        Returns:
            Tuple of (note_type, trigger) or None when no trigger is present
        """
        prefix = text[:TRIGGER_PREFIX_LENGTH].lower()
        best: Optional[Tuple[int, NoteType, str]] = None
        for trigger, note_type in self.registry.all_triggers():
            position = prefix.find(trigger)
            if position >= 0 and (best is None or position < best[0]):
                best = (position, note_type, trigger)
        if best is None:
            return None
        return best[1], best[2]

    def detect_fuzzy(self, text: str) -> Optional[NoteType]:
        """Match triggers mangled by OCR, e.g. '#tod0#', '#rneetinq#' or '.email.'."""
        normalized = _normalize_for_fuzzy_match(text[:TRIGGER_PREFIX_LENGTH].strip().lower())
        if '#' not in normalized:
            return None

        for note_type, patterns in FUZZY_TRIGGERS:
            if any(pattern in normalized for pattern in patterns):
                logger.debug(f'Fuzzy trigger matched {note_type.value}')
                return note_type

        for note_type, keywords in LOOSE_KEYWORDS:
            if _matches_loose_pattern(normalized, keywords):
                logger.debug(f'Loose trigger pattern matched {note_type.value}')
                return note_type

        return None

    def extract_trigger_tag(self, text: str) -> Optional[Tuple[str, str]]:
        """Find the first registered trigger anywhere in the text.

        Returns:
            Tuple of (tag as written, text with that tag removed), or None
        """
        lowered = text.lower()
        best: Optional[Tuple[int, str]] = None
        for trigger, _ in self.registry.all_triggers():
            position = lowered.find(trigger)
            if position >= 0 and (best is None or position < best[0]):
                best = (position, trigger)
        if best is None:
            return None

        start, trigger = best
        end = start + len(trigger)
        return text[start:end], (text[:start] + text[end:]).strip()

    def strip_trigger_tags(self, text: str, note_type: NoteType) -> str:
        """Remove every trigger of the given type, case-insensitively."""
        triggers = self.registry.triggers_for(note_type)
        if not triggers:
            return text

        cleaned = text
        for trigger in triggers:
            cleaned = re.sub(re.escape(trigger), '', cleaned, flags=re.IGNORECASE)
        return re.sub(r'\n{3,}', '\n\n', cleaned).strip()

    def tag_positions(self, text: str) -> List[Tuple[int, int, NoteType]]:
        """Return (start, end, note_type) for every trigger occurrence, ordered by position."""
        lowered = text.lower()
        positions = []
        for trigger, note_type in self.registry.all_triggers():
            for match in re.finditer(re.escape(trigger), lowered):
                positions.append((match.start(), match.end(), note_type))
        positions.sort(key=lambda position: (position[0], -(position[1] - position[0])))

        # Drop shorter triggers that overlap a longer one already kept
        result: List[Tuple[int, int, NoteType]] = []
        for position in positions:
            if result and position[0] < result[-1][1]:
                continue
            result.append(position)
        return result

    def split_into_sections(self, text: str, classify: Callable[[str], NoteClassification]) -> List[NoteSection]:
        """Split a note into sections at each trigger.

        Text before the first trigger is classified with ``classify``. Each
        tagged section runs until the next trigger and is classified explicitly.
        A note without usable sections comes back as a single classified section.

        Args:
            text: Full note text
            classify: Classifier applied to untagged text

        Returns:
            List of NoteSection in document order
        """
        positions = self.tag_positions(text)
        if not positions:
            return [NoteSection(classify(text), text)]

        sections: List[NoteSection] = []
        leading = text[:positions[0][0]].strip()
        if leading:
            sections.append(NoteSection(classify(leading), leading))

        for index, (start, end, note_type) in enumerate(positions):
            section_end = positions[index + 1][0] if index + 1 < len(positions) else len(text)
            content = text[end:section_end].strip()
            if not content:
                continue
            tag = text[start:end]
            sections.append(NoteSection(NoteClassification.explicit(note_type, tag), content, tag))

        if not sections:
            return [NoteSection(classify(text), text)]

        logger.debug(f'Split note into {len(sections)} sections')
        return sections
