"""
Configuration management for the Bedrock client and pipeline settings.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class BedrockLLMConfig:
    """Configuration for Amazon Bedrock LLM service."""
    enabled: bool
    region: str
    model_id: str
    max_tokens: int
    temperature: float
    connect_timeout: float
    read_timeout: float


@dataclass
class ClassificationConfig:
    """Configuration for note type classification."""
    use_llm: bool
    prompt_version: str


@dataclass
class ExtractionConfig:
    """Configuration for structured data extraction."""
    use_llm: bool


@dataclass
class MCPConfig:
    """Configuration for MCP interface."""
    transport: str
    host: str
    port: int


@dataclass
class AppConfig:
    """Main application configuration."""
    environment: str
    log_level: str
    bedrock_llm: BedrockLLMConfig
    classification: ClassificationConfig
    extraction: ExtractionConfig
    mcp: MCPConfig


def load_config() -> AppConfig:
    """Load configuration from environment variables with defaults."""
    environment = os.getenv('ENVIRONMENT', 'development')

    # Bedrock configuration
    bedrock_llm_config = BedrockLLMConfig(enabled=_env_flag('BEDROCK_LLM_ENABLED', 'false'),
                                          region=os.getenv('BEDROCK_LLM_AWS_REGION', 'us-east-1'),
                                          model_id=os.getenv('BEDROCK_LLM_MODEL_ID', 'anthropic.claude-3-haiku-20240307-v1:0'),
                                          max_tokens=int(os.getenv('BEDROCK_LLM_MAX_TOKENS', '1024')),
                                          temperature=float(os.getenv('BEDROCK_LLM_TEMPERATURE', '0.0')),
                                          connect_timeout=float(os.getenv('BEDROCK_LLM_CONNECT_TIMEOUT', '5')),
                                          read_timeout=float(os.getenv('BEDROCK_LLM_READ_TIMEOUT', '20')))

    # Classification configuration
    classification_config = ClassificationConfig(use_llm=_env_flag('CLASSIFICATION_USE_LLM', 'true'),
                                                 prompt_version=os.getenv('CLASSIFICATION_PROMPT_VERSION', 'v1'))

    # Extraction configuration
    extraction_config = ExtractionConfig(use_llm=_env_flag('EXTRACTION_USE_LLM', 'true'))

    # MCP configuration
    mcp_config = MCPConfig(transport=os.getenv('MCP_TRANSPORT', 'sse'),
                           host=os.getenv('MCP_HOST', '127.0.0.1'),
                           port=int(os.getenv('MCP_PORT', '8000')))

    return AppConfig(environment=environment,
                     log_level=os.getenv('LOG_LEVEL', 'INFO'),
                     bedrock_llm=bedrock_llm_config,
                     classification=classification_config,
                     extraction=extraction_config,
                     mcp=mcp_config)


# Global configuration instance
config = load_config()
