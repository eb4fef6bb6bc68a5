"""
Scoring heuristic that recognises business cards without a contact hashtag.
"""

import re
from typing import List, Optional, Tuple

from ..models.core import NoteType
from ..models.note_types import NoteTypeRegistry
from ..utils.patterns import CITY_STATE_ZIP_PATTERN, EMAIL_PATTERN, PHONE_PATTERNS

BUSINESS_CARD_THRESHOLD = 40
DISQUALIFIED_SCORE = -100

CARD_URL_PATTERNS = [
    re.compile(r'https?://[^\s]+', re.IGNORECASE),
    re.compile(r'www\.[A-Za-z0-9.-]+\.[A-Za-z]{2,}', re.IGNORECASE),
    re.compile(r'[A-Za-z0-9-]+\.(?:com|org|net|io|co)\b', re.IGNORECASE),
]

COMPANY_INDICATORS = [
    'inc', 'llc', 'ltd', 'corp', 'corporation', 'company', 'co.', 'group', 'holdings', 'solutions', 'services', 'consulting',
    'partners', 'technologies', 'tech', 'systems', 'enterprises'
]

TITLE_INDICATORS = [
    'ceo', 'cto', 'cfo', 'president', 'director', 'manager', 'engineer', 'designer', 'developer', 'consultant', 'analyst',
    'specialist', 'coordinator', 'founder', 'partner', 'owner', 'vp', 'vice president'
]


class BusinessCardDetector:
    """Scores text on how much it looks like a business card."""

    def __init__(self, registry: NoteTypeRegistry, threshold: int = BUSINESS_CARD_THRESHOLD):
        self.threshold = threshold
        self._other_triggers = [
            trigger for config in registry.all_configs() if config.note_type != NoteType.CONTACT for trigger in config.triggers
        ]

    def is_business_card(self, text: str) -> bool:
        return self.score(text) >= self.threshold

    def score(self, text: str) -> int:
        return sum(points for _, points in self.signals(text))

    def signals(self, text: str) -> List[Tuple[str, int]]:
        """Return each signal that fired with its points.

        A trigger for another note type disqualifies the text outright.

        Args:
            text: Note text

        Returns:
            List of (signal name, points) pairs
        """
        lowered = text.lower()
        disqualifier = self._other_trigger(lowered)
        if disqualifier:
            return [(f'trigger {disqualifier}', DISQUALIFIED_SCORE)]

        lines = [line.strip() for line in text.splitlines() if line.strip()]
        signals: List[Tuple[str, int]] = []

        # Penalties
        if len(lines) > 15:
            signals.append(('too many lines', -20))
        words = text.split()
        if len(words) > 50 and len(words) / max(len(lines), 1) > 10:
            signals.append(('dense paragraph text', -50))

        # Bonuses
        if any(pattern.search(text) for pattern in PHONE_PATTERNS[:2]):
            signals.append(('phone', 20))
        if EMAIL_PATTERN.search(text):
            signals.append(('email', 20))
        if any(pattern.search(text) for pattern in CARD_URL_PATTERNS):
            if '@' not in text or 'www.' in text or 'http' in text:
                signals.append(('website', 15))
        if CITY_STATE_ZIP_PATTERN.search(text):
            signals.append(('city, state zip', 15))
        if 2 <= len(lines) <= 10:
            signals.append(('compact line count', 10))
        if any(indicator in lowered for indicator in COMPANY_INDICATORS):
            signals.append(('company indicator', 10))
        if sum(len(line) for line in lines) // max(len(lines), 1) < 40:
            signals.append(('short lines', 5))
        if any(indicator in lowered for indicator in TITLE_INDICATORS):
            signals.append(('job title', 5))
        if lines:
            first_words = lines[0].split()
            if 2 <= len(first_words) <= 4 and all(word[0].isupper() for word in first_words):
                signals.append(('name-like first line', 5))

        return signals

    def _other_trigger(self, lowered: str) -> Optional[str]:
        for trigger in self._other_triggers:
            if trigger in lowered:
                return trigger
        return None
