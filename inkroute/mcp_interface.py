"""
MCP Interface Layer using fastmcp for agent orchestration.
"""
from typing import Any, Dict, List, Optional

from fastmcp import FastMCP

from .models.core import NoteType, record_to_dict
from .services.pipeline import NotePipeline
from .utils.config import config
from .utils.health_check import get_system_info
from .utils.logging_config import get_logger

logger = get_logger(__name__)

# Initialize FastMCP application
mcp = FastMCP('Note Router')
pipeline = NotePipeline.from_config(config)


def _note_type(value: str) -> NoteType:
    note_type = NoteType.parse(value)
    if note_type is None:
        raise ValueError(f"Unknown note type '{value}'")
    return note_type


def classify_note(text: str, explicit_trigger: Optional[str] = None) -> Dict[str, Any]:
    """Classify a note into one of the known note types.

    Args:
        text: OCR'd note text
        explicit_trigger: Hashtag chosen by the user, e.g. '#todo#'

    Returns:
        Dictionary with type, confidence, method, reasoning and promptVersion

    Raises:
        Exception: If classification fails
    """
    try:
        if not text or not text.strip():
            raise ValueError('Note text is required')

        classification = pipeline.classifier.classify(text, explicit_trigger)
        logger.debug(f'MCP classify returned {classification.note_type.value}')
        return classification.to_dict()

    except Exception as e:
        logger.error(f'Unexpected error in MCP classify: {e}')
        raise Exception(f'Note classification failed: {e}')


def extract_note_data(text: str, note_type: str) -> Any:
    """Extract structured data for a note of a given type.

    Args:
        text: Note text
        note_type: Note type name, e.g. 'todo', 'event' or 'contact'

    Returns:
        Extracted record as a dictionary, a list of todos, or None for types without an extractor

    Raises:
        Exception: If extraction fails
    """
    try:
        extracted = pipeline.extractor.extract(_note_type(note_type), text)
        return record_to_dict(extracted)

    except Exception as e:
        logger.error(f'Unexpected error in MCP extract: {e}')
        raise Exception(f'Note extraction failed: {e}')


def process_note(text: str, explicit_trigger: Optional[str] = None, split_sections: bool = False) -> List[Dict[str, Any]]:
    """Classify a note and extract its structured data.

    Args:
        text: OCR'd note text
        explicit_trigger: Hashtag chosen by the user, ignored when splitting sections
        split_sections: Process each hashtag-delimited section on its own

    Returns:
        List of processed notes (a single entry unless sections are split)

    Raises:
        Exception: If processing fails
    """
    try:
        if not text or not text.strip():
            raise ValueError('Note text is required')

        if split_sections:
            processed = pipeline.process_sections(text)
        else:
            processed = [pipeline.process(text, explicit_trigger)]

        logger.debug(f'MCP process returned {len(processed)} notes')
        return [note.to_dict() for note in processed]

    except Exception as e:
        logger.error(f'Unexpected error in MCP process: {e}')
        raise Exception(f'Note processing failed: {e}')


def format_note(text: str, note_type: Optional[str] = None) -> Dict[str, Any]:
    """Format a note for display.

    Args:
        text: Note text
        note_type: Note type name; the note is classified first when omitted

    Returns:
        Dictionary with type, styled segments and metadata

    Raises:
        Exception: If formatting fails
    """
    try:
        formatted = pipeline.format(text, _note_type(note_type) if note_type else None)
        return {
            'type': formatted.note_type.value,
            'segments': [{'text': segment.text, 'style': segment.style} for segment in formatted.segments],
            'metadata': formatted.metadata,
        }

    except Exception as e:
        logger.error(f'Unexpected error in MCP format: {e}')
        raise Exception(f'Note formatting failed: {e}')


def health_status() -> Dict[str, Any]:
    """Report configuration and the health of external services."""
    return get_system_info(config)


# Registered here so the module-level names stay plain functions
for _tool in (classify_note, extract_note_data, process_note, format_note, health_status):
    mcp.tool()(_tool)


def main() -> None:
    transport = config.mcp.transport
    if transport == 'stdio':
        mcp.run(transport=transport)
    else:
        mcp.run(transport=transport, host=config.mcp.host, port=config.mcp.port)


if __name__ == '__main__':
    main()
