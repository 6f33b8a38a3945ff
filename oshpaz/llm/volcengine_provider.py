"""
Volcano Engine LLM Provider.
Uses the OpenAI-compatible Ark API, so only the defaults differ from OpenAIProvider.
"""

from .openai_provider import OpenAIProvider


class VolcEngineProvider(OpenAIProvider):
    """
    Provider for Volcano Engine Doubao / Ark models.
    Default base_url points to the Volcano Engine Ark API.
    """

    provider_name = "volcengine"

    def __init__(
        self,
        api_key: str,
        model: str = "doubao-1.5-vision-pro-32k",
        base_url: str = "https://ark.cn-beijing.volces.com/api/v3",
        default_temperature: float = 0.7,
        default_max_tokens: int = 2048,
        timeout: float = 120.0,
        log_calls: bool = True,
    ):
        super().__init__(api_key, model, base_url, default_temperature, default_max_tokens, timeout, log_calls)
