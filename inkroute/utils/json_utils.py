"""
JSON utilities for cleaning and decoding LLM responses.
"""

import json
from typing import Any, Dict


def clean_json_response(response: str) -> str:
    """Clean LLM response by removing code block markers.

    Args:
        response: Raw LLM response

    Returns:
        Cleaned JSON string
    """
    response = response.strip()

    # Remove ```json and ``` markers
    if response.startswith('```json'):
        response = response[7:]
    elif response.startswith('```'):
        response = response[3:]

    if response.endswith('```'):
        response = response[:-3]

    return response.strip()


def parse_json_object(response: str) -> Dict[str, Any]:
    """Decode an LLM response that must hold a single JSON object.

    Args:
        response: Raw LLM response, optionally fenced

    Returns:
        Decoded dictionary

    Raises:
        json.JSONDecodeError: If the cleaned response is not valid JSON
        ValueError: If the decoded value is not an object
    """
    data = json.loads(clean_json_response(response))
    if not isinstance(data, dict):
        raise ValueError(f'Expected JSON object, got {type(data).__name__}')
    return data
