"""
Test-wide fixtures.

The Bedrock client is replaced by a scripted fake so no test touches AWS.
"""
import json
from datetime import datetime

import pytest

from inkroute.models.note_types import NoteTypeRegistry
from inkroute.utils.bedrock_llm import BedrockLLMError
from inkroute.utils.config import AppConfig, BedrockLLMConfig, ClassificationConfig, ExtractionConfig, MCPConfig


class FakeLLM:
    """Replays scripted responses, or raises the configured error, for every completion."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    def complete(self, prompt, system_prompt, prefill=None, stop_sequences=None, max_tokens=None):
        self.calls.append({'prompt': prompt, 'system_prompt': system_prompt, 'prefill': prefill, 'stop_sequences': stop_sequences})
        if self.error is not None:
            raise self.error
        response = self.responses.pop(0)
        return response if isinstance(response, str) else json.dumps(response)


@pytest.fixture
def registry():
    return NoteTypeRegistry.default()


@pytest.fixture
def now():
    # A Wednesday
    return datetime(2024, 6, 12, 9, 30)


@pytest.fixture
def make_llm():

    def factory(*responses):
        return FakeLLM(responses=responses)

    return factory


@pytest.fixture
def failing_llm():
    return FakeLLM(error=BedrockLLMError('Bedrock LLM request failed: Read timeout on endpoint URL'))


@pytest.fixture
def make_config():

    def factory(llm_enabled=False, classification_llm=True, extraction_llm=True):
        return AppConfig(environment='testing',
                         log_level='DEBUG',
                         bedrock_llm=BedrockLLMConfig(enabled=llm_enabled,
                                                      region='us-east-1',
                                                      model_id='anthropic.claude-3-haiku-20240307-v1:0',
                                                      max_tokens=256,
                                                      temperature=0.0,
                                                      connect_timeout=1,
                                                      read_timeout=2),
                         classification=ClassificationConfig(use_llm=classification_llm, prompt_version='v1'),
                         extraction=ExtractionConfig(use_llm=extraction_llm),
                         mcp=MCPConfig(transport='stdio', host='127.0.0.1', port=8000))

    return factory


@pytest.fixture
def broken_llm():
    # Not a BedrockLLMError, so it reaches the catch-all handlers
    return FakeLLM(error=RuntimeError('stream closed'))
