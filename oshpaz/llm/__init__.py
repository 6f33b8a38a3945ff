"""LLM module - provides unified interface for LLM API providers."""

from .base import LLMError, LLMProvider, LLMMessage, LLMResponse, parse_json_object
from .openai_provider import OpenAIProvider
from .volcengine_provider import VolcEngineProvider
from .factory import create_llm_provider, create_provider_from_settings

__all__ = [
    'LLMError',
    'LLMProvider',
    'LLMMessage',
    'LLMResponse',
    'parse_json_object',
    'OpenAIProvider',
    'VolcEngineProvider',
    'create_llm_provider',
    'create_provider_from_settings',
]
