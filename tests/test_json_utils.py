import json

import pytest

from inkroute.utils.json_utils import clean_json_response, parse_json_object


def test_clean_json_response_strips_fences():
    assert clean_json_response('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert clean_json_response('```\n[1, 2]\n```') == '[1, 2]'
    assert clean_json_response('  {"a": 1}  ') == '{"a": 1}'


def test_parse_json_object_after_prefill():
    # With a '```json' prefill the model continues inside the fence
    assert parse_json_object('\n{"type": "todo", "confidence": 0.9}\n') == {'type': 'todo', 'confidence': 0.9}


def test_parse_json_object_rejects_non_objects():
    with pytest.raises(ValueError, match='Expected JSON object'):
        parse_json_object('[1, 2, 3]')


def test_parse_json_object_invalid_json():
    with pytest.raises(json.JSONDecodeError):
        parse_json_object('{"type": ')
