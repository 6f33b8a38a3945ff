"""
LLM Provider Factory - Creates the configured LLM provider instance.
"""

import logging
from typing import Optional, Dict, Type

from ..config.settings import Settings
from .base import LLMProvider
from .openai_provider import OpenAIProvider
from .volcengine_provider import VolcEngineProvider

logger = logging.getLogger(__name__)

PROVIDERS: Dict[str, Type[OpenAIProvider]] = {
    "openai": OpenAIProvider,
    "volcengine": VolcEngineProvider,
}


def create_llm_provider(
    provider: str = "openai",
    api_key: str = "",
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    **kwargs
) -> Optional[LLMProvider]:
    """
    Create an LLM provider instance.

    Args:
        provider: Provider name ("openai" or "volcengine")
        api_key: API key for the provider
        model: Model name (uses provider default if not specified)
        base_url: Custom base URL (uses provider default if not specified)
        **kwargs: Additional provider-specific parameters

    Returns:
        LLMProvider instance, or None if api_key is not configured
    """
    if not api_key:
        return None

    provider_cls = PROVIDERS.get(provider)
    if provider_cls is None:
        raise ValueError(f"Unsupported LLM provider: {provider}")

    params = {"api_key": api_key}
    if model:
        params["model"] = model
    if base_url:
        params["base_url"] = base_url
    params.update(kwargs)
    return provider_cls(**params)


def create_provider_from_settings(settings: Settings) -> Optional[LLMProvider]:
    """Build the provider from settings; the legacy OPENAI_API_KEY is accepted for openai."""
    api_key = settings.llm_api_key
    if not api_key and settings.llm_provider == "openai":
        api_key = settings.openai_api_key

    provider = create_llm_provider(
        provider=settings.llm_provider,
        api_key=api_key or "",
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        log_calls=settings.log_llm_calls,
    )
    if provider is None:
        logger.warning("LLM API key not configured - food analysis and report cards are disabled")
    else:
        logger.info(f"LLM provider initialized: {settings.llm_provider} ({provider.model})")
    return provider
