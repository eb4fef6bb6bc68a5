"""
Amazon Bedrock LLM client wrapper with bounded timeouts and error handling.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .config import BedrockLLMConfig
from .logging_config import get_logger

logger = get_logger(__name__)


class BedrockLLMError(Exception):
    """Custom exception for Bedrock LLM errors."""
    pass


class BedrockLLM:
    """Amazon Bedrock LLM client making a single, timeout-bounded attempt per request."""

    def __init__(self, config: BedrockLLMConfig):
        """
        Initialize Bedrock LLM client.

        Args:
            config: BedrockLLMConfig instance with connection parameters
        """
        self.config = config
        self.model_id = config.model_id

        # A failed request falls back to heuristics, so botocore must not retry
        self.bedrock_runtime = boto3.client('bedrock-runtime',
                                            region_name=config.region,
                                            config=BotoConfig(connect_timeout=config.connect_timeout,
                                                              read_timeout=config.read_timeout,
                                                              retries={'max_attempts': 0}))

        logger.info(f'Initialized Bedrock LLM client with model: {self.model_id}')

    def generate_response(self,
                          messages: List[Dict[str, Any]],
                          system_prompt: str,
                          max_tokens: Optional[int] = None,
                          temperature: Optional[float] = None,
                          stop_sequences: Optional[List[str]] = None) -> Tuple[str, Optional[Dict[str, Any]]]:
        """
        Generate response using Bedrock LLM.

        Args:
            messages: List of message dictionaries in Bedrock format
            system_prompt: System prompt for the conversation
            max_tokens: Maximum tokens to generate (uses config default if None)
            temperature: Temperature for generation (uses config default if None)
            stop_sequences: Stop sequences for generation

        Returns:
            Tuple of (response_text, invoke_metrics)

        Raises:
            BedrockLLMError: If the request fails or times out
        """
        max_tokens = max_tokens or self.config.max_tokens
        temperature = self.config.temperature if temperature is None else temperature
        stop_sequences = stop_sequences or []

        system = [{'text': system_prompt}]
        inf_params = {
            'maxTokens': max_tokens,
            'temperature': temperature,
            'stopSequences': stop_sequences,
        }

        try:
            logger.debug(f'Bedrock LLM request to {self.model_id} ({len(messages)} messages)')

            stream = self.bedrock_runtime.converse_stream(modelId=self.model_id,
                                                          messages=messages,
                                                          system=system,
                                                          inferenceConfig=inf_params).get('stream')

            msg = ''
            invoke_metrics = None

            if stream:
                for event in stream:
                    if 'contentBlockDelta' in event:
                        msg += event['contentBlockDelta']['delta']['text']
                    if 'metadata' in event:
                        invoke_metrics = {**event['metadata'].get('usage', {}), **event['metadata'].get('metrics', {})}

            logger.debug(f'Bedrock LLM response generated successfully (length: {len(msg)})')
            return msg, invoke_metrics

        except (ClientError, BotoCoreError, json.JSONDecodeError) as e:
            logger.warning(f'Bedrock LLM request failed: {e}')
            raise BedrockLLMError(f'Bedrock LLM request failed: {e}') from e

        except Exception as e:
            logger.error(f'Unexpected error in Bedrock LLM: {e}')
            raise BedrockLLMError(f'Unexpected Bedrock LLM error: {e}') from e

    def complete(self,
                 prompt: str,
                 system_prompt: str,
                 prefill: Optional[str] = None,
                 stop_sequences: Optional[List[str]] = None,
                 max_tokens: Optional[int] = None) -> str:
        """
        Send a single user prompt and return the response text.

        Args:
            prompt: User prompt text
            system_prompt: System prompt for the conversation
            prefill: Optional assistant prefill the model continues from
            stop_sequences: Stop sequences for generation
            max_tokens: Maximum tokens to generate (uses config default if None)

        Returns:
            Response text

        Raises:
            BedrockLLMError: If the request fails or times out
        """
        messages = [{'role': 'user', 'content': [{'text': prompt}]}]
        if prefill:
            messages.append({'role': 'assistant', 'content': [{'text': prefill}]})

        response, _ = self.generate_response(messages=messages,
                                             system_prompt=system_prompt,
                                             max_tokens=max_tokens,
                                             stop_sequences=stop_sequences)
        return response

    def health_check(self) -> bool:
        """
        Perform a health check on the Bedrock LLM service.

        Returns:
            True if service is healthy, False otherwise
        """
        try:
            response = self.complete(prompt='Hi', system_prompt="You are a helpful assistant. Respond with just 'OK'.", max_tokens=10)
            return len(response.strip()) > 0

        except BedrockLLMError as e:
            logger.error(f'Bedrock LLM health check failed: {e}')
            return False
