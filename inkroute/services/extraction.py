"""
Structured data extraction: LLM first, regex heuristics as the fallback.
"""

from typing import Any, Callable, Dict, List, Optional, TypeVar

from ..models.core import (ExtractedContact, ExtractedEmail, ExtractedEvent, ExtractedExpense, ExtractedMeeting, ExtractedRecipe,
                           ExtractedShoppingList, ExtractedTodo, NoteType)
from ..utils.bedrock_llm import BedrockLLMError
from ..utils.json_utils import parse_json_object
from ..utils.logging_config import get_logger
from ..utils.result import Result
from . import heuristic_extraction
from .prompts import EXTRACTION_SYSTEM_PROMPT, extraction_prompt

logger = get_logger(__name__)

T = TypeVar('T')


class ExtractionError(Exception):
    """Custom exception for LLM extraction failures."""
    pass


def _todos_from_json(data: Dict[str, Any]) -> List[ExtractedTodo]:
    todos = data.get('todos')
    if not isinstance(todos, list):
        raise ValueError(f'Expected list of todos, got {type(todos).__name__}')
    return [ExtractedTodo.from_json(todo) for todo in todos if isinstance(todo, dict)]


class ExtractionService:
    """Extract typed records from note text.

    When an LLM client is available each extractor asks it for JSON first. Any
    failure, or an empty answer, falls back to the heuristic extractor for the
    same type, so callers always get a record back.
    """

    def __init__(self, llm: Optional[Any] = None):
        """
        Initialize the extraction service.

        Args:
            llm: Client exposing ``complete(prompt, system_prompt, prefill, stop_sequences)``,
                or None to use heuristics only
        """
        self.llm = llm
        self._extractors: Dict[NoteType, Callable[[str], Any]] = {
            NoteType.TODO: self.extract_todos,
            NoteType.EVENT: self.extract_event,
            NoteType.CONTACT: self.extract_contact,
            NoteType.SHOPPING: self.extract_shopping_list,
            NoteType.EXPENSE: self.extract_expense,
            NoteType.MEETING: self.extract_meeting,
            NoteType.RECIPE: self.extract_recipe,
            NoteType.EMAIL: self.extract_email,
        }

        logger.info(f"Initialized ExtractionService ({'LLM with heuristic fallback' if llm else 'heuristics only'})")

    def supports(self, note_type: NoteType) -> bool:
        return note_type in self._extractors

    def extract(self, note_type: NoteType, text: str) -> Optional[Any]:
        """Run the extractor registered for a note type.

        Returns:
            Extracted record, a list of todos, or None for types without an extractor
        """
        extractor = self._extractors.get(note_type)
        if extractor is None:
            logger.debug(f'No extractor for note type {note_type.value}')
            return None
        return extractor(text)

    def extract_todos(self, text: str) -> List[ExtractedTodo]:
        result = self._extract_with_llm(NoteType.TODO, text, _todos_from_json, accept=bool)
        return result.unwrap_or_else(self._fallback(NoteType.TODO, lambda: heuristic_extraction.extract_todos(text)))

    def extract_event(self, text: str) -> ExtractedEvent:
        result = self._extract_with_llm(NoteType.EVENT, text, ExtractedEvent.from_json, accept=lambda event: event.has_minimum_data)
        return result.unwrap_or_else(self._fallback(NoteType.EVENT, lambda: heuristic_extraction.extract_event(text)))

    def extract_contact(self, text: str) -> ExtractedContact:
        result = self._extract_with_llm(NoteType.CONTACT, text, ExtractedContact.from_json,
                                        accept=lambda contact: contact.has_minimum_data)
        return result.unwrap_or_else(self._fallback(NoteType.CONTACT, lambda: heuristic_extraction.extract_contact(text)))

    def extract_shopping_list(self, text: str) -> ExtractedShoppingList:
        result = self._extract_with_llm(NoteType.SHOPPING, text, ExtractedShoppingList.from_json,
                                        accept=lambda shopping: shopping.has_minimum_data)
        return result.unwrap_or_else(self._fallback(NoteType.SHOPPING, lambda: heuristic_extraction.extract_shopping_list(text)))

    def extract_expense(self, text: str) -> ExtractedExpense:
        result = self._extract_with_llm(NoteType.EXPENSE, text, ExtractedExpense.from_json,
                                        accept=lambda expense: expense.has_minimum_data)
        return result.unwrap_or_else(self._fallback(NoteType.EXPENSE, lambda: heuristic_extraction.extract_expense(text)))

    def extract_meeting(self, text: str) -> ExtractedMeeting:
        result = self._extract_with_llm(NoteType.MEETING, text, ExtractedMeeting.from_json,
                                        accept=lambda meeting: meeting.has_minimum_data)
        return result.unwrap_or_else(self._fallback(NoteType.MEETING, lambda: heuristic_extraction.extract_meeting(text)))

    def extract_recipe(self, text: str) -> ExtractedRecipe:
        result = self._extract_with_llm(NoteType.RECIPE, text, ExtractedRecipe.from_json,
                                        accept=lambda recipe: recipe.has_minimum_data)
        return result.unwrap_or_else(self._fallback(NoteType.RECIPE, lambda: heuristic_extraction.extract_recipe(text)))

    def extract_email(self, text: str) -> ExtractedEmail:
        result = self._extract_with_llm(NoteType.EMAIL, text, ExtractedEmail.from_json,
                                        accept=lambda email: email.has_minimum_data)
        return result.unwrap_or_else(self._fallback(NoteType.EMAIL, lambda: heuristic_extraction.extract_email(text)))

    def _extract_with_llm(self,
                          note_type: NoteType,
                          text: str,
                          build: Callable[[Dict[str, Any]], T],
                          accept: Callable[[T], bool]) -> Result[T, ExtractionError]:
        """Ask the LLM for a JSON record and decode it.

        Args:
            note_type: Type whose prompt template is used
            text: Note text
            build: Converts the decoded JSON object into a record
            accept: Rejects records that carry no usable data

        Returns:
            Result holding the record, or the ExtractionError that prevented it
        """
        if self.llm is None:
            return Result.err(ExtractionError('LLM extraction not configured'))

        try:
            response = self.llm.complete(prompt=extraction_prompt(note_type, text),
                                         system_prompt=EXTRACTION_SYSTEM_PROMPT,
                                         prefill='```json',
                                         stop_sequences=['```'])
            record = build(parse_json_object(response))
        except BedrockLLMError as e:
            return Result.err(ExtractionError(f'LLM request failed: {e}'))
        except (ValueError, TypeError, AttributeError) as e:
            # json.JSONDecodeError is a ValueError
            return Result.err(ExtractionError(f'Malformed LLM response: {e}'))
        except Exception as e:
            logger.warning(f'Unexpected error in {note_type.value} LLM extraction: {e}')
            return Result.err(ExtractionError(f'Unexpected LLM extraction error: {e}'))

        if not accept(record):
            return Result.err(ExtractionError('LLM response contained no usable data'))

        logger.debug(f'Extracted {note_type.value} data with LLM')
        return Result.ok(record)

    def _fallback(self, note_type: NoteType, heuristic: Callable[[], T]) -> Callable[[ExtractionError], T]:

        def run_heuristic(error: ExtractionError) -> T:
            if self.llm is not None:
                logger.warning(f'Falling back to heuristic {note_type.value} extraction: {error}')
            return heuristic()

        return run_heuristic
