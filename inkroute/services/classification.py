"""
Note type classification: explicit hashtags, heuristics, then an optional LLM pass.
"""

import dataclasses
from typing import Any, List, Optional, Tuple

from ..models.core import LLM_FALLBACK_PREFIX, ClassificationMethod, NoteClassification, NoteType
from ..models.note_types import NoteTypeRegistry
from ..utils.bedrock_llm import BedrockLLMError
from ..utils.json_utils import parse_json_object
from ..utils.logging_config import get_logger
from ..utils.patterns import find_date, find_time, split_list_marker
from ..utils.result import Result
from .business_card import BusinessCardDetector
from .heuristic_extraction import is_grocery_list
from .prompts import CLASSIFICATION_PROMPT_VERSION, classification_system_prompt, classification_user_prompt
from .triggers import TriggerDetector

logger = get_logger(__name__)

LLM_MAX_CONFIDENCE = 0.99
LLM_DEFAULT_CONFIDENCE = 0.85

MEETING_INDICATORS = ['meeting', 'call with', 'agenda', 'attendees:', 'discussion:', 'action items', 'minutes', 'conference']
EVENT_LABELS = ('date:', 'when:', 'time:', 'where:', 'venue:')
CONTACT_LABELS = ('phone:', 'email:', 'tel:', 'cell:', 'mobile:', 'company:')
CHECKBOX_MARKERS = ('[ ]', '[x]', '[X]', '[]', '☐', '☑')

# Scored when no pattern-based detector matches
CONTENT_KEYWORDS: List[Tuple[NoteType, List[str]]] = [
    (NoteType.EMAIL, ['dear ', 'regards', 'sincerely', 'subject:', 'to:', 'cc:', 'best,', 'thanks,']),
    (NoteType.REMINDER, ['remind', "don't forget", 'dont forget', 'remember to', 'reminder']),
    (NoteType.RECIPE, ['ingredients', 'tbsp', 'tsp', 'preheat', 'oven', 'bake', 'simmer', 'servings']),
    (NoteType.EXPENSE, ['total', 'receipt', 'subtotal', 'tax', 'paid', '$']),
    (NoteType.IDEA, ['idea', 'what if', 'maybe', 'concept', 'brainstorm']),
    (NoteType.CLAUDE_PROMPT, ['feature', 'bug', 'app should', 'add support', 'implement', 'claude']),
]


class ClassificationError(Exception):
    """Custom exception for LLM classification failures."""
    pass


class ClassificationService:
    """Classify note text into a NoteType with a confidence and the method used.

    Precedence: an explicit hashtag always wins, then pattern heuristics in a
    fixed order. When no heuristic matches and an LLM client is configured, a
    single LLM request is made; if it fails the heuristic result is returned
    with the failure recorded in its reasoning.
    """

    def __init__(self, registry: NoteTypeRegistry, llm: Optional[Any] = None, prompt_version: str = CLASSIFICATION_PROMPT_VERSION):
        """
        Initialize the classification service.

        Args:
            registry: Note type registry with hashtag triggers
            llm: Client exposing ``complete(prompt, system_prompt, prefill, stop_sequences)``, or None
            prompt_version: Version tag recorded on LLM classifications
        """
        self.registry = registry
        self.llm = llm
        self.prompt_version = prompt_version
        self.triggers = TriggerDetector(registry)
        self.business_card = BusinessCardDetector(registry)

        logger.info(f"Initialized ClassificationService ({'with' if llm else 'without'} LLM)")

    def classify(self, text: str, explicit_trigger: Optional[str] = None) -> NoteClassification:
        """Classify a note.

        Args:
            text: OCR'd note text
            explicit_trigger: Hashtag chosen by the user, e.g. '#todo#'

        Returns:
            NoteClassification for the note
        """
        if explicit_trigger:
            note_type = self.registry.match_trigger(explicit_trigger)
            if note_type is not None:
                return NoteClassification.explicit(note_type, explicit_trigger)
            logger.debug(f"Ignoring unregistered trigger '{explicit_trigger}'")

        detected = self.triggers.detect_explicit(text)
        if detected:
            note_type, trigger = detected
            return NoteClassification.explicit(note_type, trigger)

        heuristic = self.classify_heuristically(text)
        if self.llm is None or heuristic.method == ClassificationMethod.HEURISTIC:
            return heuristic

        return self._classify_with_llm(text).unwrap_or_else(lambda error: self._llm_fallback(heuristic, error))

    def classify_manual(self, note_type: NoteType) -> NoteClassification:
        return NoteClassification.manual(note_type)

    def classify_heuristically(self, text: str) -> NoteClassification:
        """Pattern-based classification without explicit triggers or the LLM."""
        for detector in (self._detect_fuzzy_trigger, self._detect_contact, self._detect_event, self._detect_list, self._detect_meeting):
            classification = detector(text)
            if classification is not None:
                logger.debug(f'Heuristic classification: {classification.note_type.value} ({classification.reasoning})')
                return classification
        return self._analyze_content(text)

    def _detect_fuzzy_trigger(self, text: str) -> Optional[NoteClassification]:
        note_type = self.triggers.detect_fuzzy(text)
        if note_type is None:
            return None
        return NoteClassification.heuristic(note_type, 0.85, 'OCR-tolerant hashtag match')

    def _detect_contact(self, text: str) -> Optional[NoteClassification]:
        score = self.business_card.score(text)
        if score >= self.business_card.threshold:
            confidence = min(0.85, 0.70 + (score - self.business_card.threshold) / 400)
            return NoteClassification.heuristic(NoteType.CONTACT, round(confidence, 2), f'Business card pattern (score {score})')

        lowered = text.lower()
        labelled = sum(1 for line in lowered.splitlines() if line.strip().startswith(CONTACT_LABELS))
        if labelled >= 2:
            return NoteClassification.heuristic(NoteType.CONTACT, 0.75, 'Labelled contact fields')
        return None

    def _detect_event(self, text: str) -> Optional[NoteClassification]:
        if find_date(text) and find_time(text):
            return NoteClassification.heuristic(NoteType.EVENT, 0.80, 'Date and time detected')

        lowered = text.lower()
        labelled = sum(1 for line in lowered.splitlines() if line.strip().startswith(EVENT_LABELS))
        if labelled >= 2:
            return NoteClassification.heuristic(NoteType.EVENT, 0.75, 'Labelled event fields')
        return None

    def _detect_list(self, text: str) -> Optional[NoteClassification]:
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        items = [line for line in lines if split_list_marker(line)]
        has_checkbox = any(line.startswith(CHECKBOX_MARKERS) for line in lines)
        if not has_checkbox and len(items) < 2 and 'checklist' not in text.lower():
            return None

        if is_grocery_list(text):
            return NoteClassification.heuristic(NoteType.SHOPPING, 0.75, 'List of grocery items')
        return NoteClassification.heuristic(NoteType.TODO, 0.80, 'Checkbox or bullet list')

    def _detect_meeting(self, text: str) -> Optional[NoteClassification]:
        lowered = text.lower()
        matches = [indicator for indicator in MEETING_INDICATORS if indicator in lowered]
        if not matches:
            return None
        confidence = min(0.85, 0.70 + 0.05 * (len(matches) - 1))
        return NoteClassification.heuristic(NoteType.MEETING, round(confidence, 2), f"Meeting keywords: {', '.join(matches)}")

    def _analyze_content(self, text: str) -> NoteClassification:
        lowered = text.lower()
        best_type, best_score = None, 0
        for note_type, keywords in CONTENT_KEYWORDS:
            score = sum(1 for keyword in keywords if keyword in lowered)
            if score > best_score:
                best_type, best_score = note_type, score

        if best_type is None:
            return NoteClassification.default()
        confidence = min(0.65, 0.55 + 0.05 * (best_score - 1))
        return NoteClassification.content_analysis(best_type, round(confidence, 2), f'{best_score} {best_type.value} keyword(s)')

    def _classify_with_llm(self, text: str) -> Result[NoteClassification, ClassificationError]:
        try:
            response = self.llm.complete(prompt=classification_user_prompt(text),
                                         system_prompt=classification_system_prompt(NoteType),
                                         prefill='```json',
                                         stop_sequences=['```'])
            return Result.ok(self._parse_llm_response(response))
        except BedrockLLMError as e:
            return Result.err(ClassificationError(f'LLM request failed: {e}'))
        except (ValueError, TypeError) as e:
            return Result.err(ClassificationError(f'Malformed LLM response: {e}'))
        except Exception as e:
            logger.warning(f'Unexpected error in LLM classification: {e}')
            return Result.err(ClassificationError(f'Unexpected LLM classification error: {e}'))

    def _parse_llm_response(self, response: str) -> NoteClassification:
        """Decode a JSON classification, or a bare type label.

        Raises:
            ValueError: If the response names no known note type
        """
        try:
            data = parse_json_object(response)
        except ValueError:
            words = response.strip().split()
            data = {'type': words[0] if words else ''}

        note_type = NoteType.parse(str(data.get('type', '')))
        if note_type is None:
            raise ValueError(f"Unknown note type label '{data.get('type')}'")

        confidence = float(data.get('confidence', LLM_DEFAULT_CONFIDENCE))
        confidence = max(0.0, min(LLM_MAX_CONFIDENCE, confidence))
        reasoning = data.get('reasoning')
        return NoteClassification.llm(note_type, confidence, str(reasoning) if reasoning else None, self.prompt_version)

    def _llm_fallback(self, heuristic: NoteClassification, error: ClassificationError) -> NoteClassification:
        logger.warning(f'LLM classification failed, keeping {heuristic.method.value} result: {error}')
        reasoning = f'{LLM_FALLBACK_PREFIX} ({error}): {heuristic.reasoning or heuristic.method.display_name}'
        return dataclasses.replace(heuristic, reasoning=reasoning)
