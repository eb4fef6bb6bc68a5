"""
Health check utilities for the application.
"""

from typing import Any, Dict, Optional

from .bedrock_llm import BedrockLLM
from .config import AppConfig
from .logging_config import get_logger

logger = get_logger(__name__)


def _resolve(app_config: Optional[AppConfig]) -> AppConfig:
    if app_config is None:
        from .config import config as default_config
        return default_config
    return app_config


def check_health(app_config: Optional[AppConfig] = None) -> bool:
    """Check the health of all system components.

    Returns:
        True if all components are healthy, False otherwise
    """
    try:
        health_status = get_health_status(app_config)

        all_healthy = all(status.get('healthy', False) for status in health_status.values())

        if all_healthy:
            logger.info('All system components are healthy')
        else:
            logger.warning('Some system components are unhealthy')

        return all_healthy

    except Exception as e:
        logger.error(f'Health check failed: {e}')
        return False


def get_health_status(app_config: Optional[AppConfig] = None) -> Dict[str, Any]:
    """Get detailed health status of all components.

    A disabled Bedrock LLM is reported healthy, since the heuristics need no
    external service.

    Returns:
        Dictionary with health status of each component
    """
    app_config = _resolve(app_config)
    health_status = {}

    if not app_config.bedrock_llm.enabled:
        health_status['bedrock_llm'] = {
            'healthy': True,
            'enabled': False,
            'service': 'Amazon Bedrock LLM',
        }
        return health_status

    try:
        llm = BedrockLLM(app_config.bedrock_llm)
        health_status['bedrock_llm'] = {
            'healthy': llm.health_check(),
            'enabled': True,
            'service': 'Amazon Bedrock LLM',
            'model': app_config.bedrock_llm.model_id
        }
    except Exception as e:
        health_status['bedrock_llm'] = {'healthy': False, 'enabled': True, 'service': 'Amazon Bedrock LLM', 'error': str(e)}

    return health_status


def get_system_info(app_config: Optional[AppConfig] = None) -> Dict[str, Any]:
    """Get system information and configuration.

    Returns:
        Dictionary with system information
    """
    app_config = _resolve(app_config)
    return {
        'service_name': 'Inkroute',
        'version': '1.0.0',
        'environment': app_config.environment,
        'configuration': {
            'bedrock_llm_enabled': app_config.bedrock_llm.enabled,
            'bedrock_llm_model': app_config.bedrock_llm.model_id,
            'aws_region': app_config.bedrock_llm.region,
            'classification_use_llm': app_config.classification.use_llm,
            'classification_prompt_version': app_config.classification.prompt_version,
            'extraction_use_llm': app_config.extraction.use_llm
        },
        'health_status': get_health_status(app_config)
    }
