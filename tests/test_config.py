import pytest

from inkroute.utils.config import load_config

ENV_VARS = [
    'ENVIRONMENT', 'LOG_LEVEL', 'BEDROCK_LLM_ENABLED', 'BEDROCK_LLM_AWS_REGION', 'BEDROCK_LLM_MODEL_ID',
    'BEDROCK_LLM_MAX_TOKENS', 'BEDROCK_LLM_TEMPERATURE', 'BEDROCK_LLM_CONNECT_TIMEOUT', 'BEDROCK_LLM_READ_TIMEOUT',
    'CLASSIFICATION_USE_LLM', 'CLASSIFICATION_PROMPT_VERSION', 'EXTRACTION_USE_LLM', 'MCP_TRANSPORT', 'MCP_HOST', 'MCP_PORT',
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    app_config = load_config()
    assert app_config.environment == 'development'
    assert app_config.bedrock_llm.enabled is False
    assert app_config.bedrock_llm.region == 'us-east-1'
    assert app_config.bedrock_llm.read_timeout == 20.0
    assert app_config.classification.use_llm is True
    assert app_config.classification.prompt_version == 'v1'
    assert app_config.extraction.use_llm is True
    assert app_config.mcp.transport == 'sse'
    assert app_config.mcp.port == 8000


@pytest.mark.parametrize('value, expected', [('yes', True), ('TRUE', True), ('1', True), ('off', False), ('nope', False)])
def test_llm_flag(clean_env, value, expected):
    clean_env.setenv('BEDROCK_LLM_ENABLED', value)
    assert load_config().bedrock_llm.enabled is expected


def test_overrides(clean_env):
    clean_env.setenv('MCP_PORT', '9000')
    clean_env.setenv('BEDROCK_LLM_MAX_TOKENS', '512')
    clean_env.setenv('EXTRACTION_USE_LLM', 'false')
    app_config = load_config()
    assert app_config.mcp.port == 9000
    assert app_config.bedrock_llm.max_tokens == 512
    assert app_config.extraction.use_llm is False
