"""
LLM Provider Base - Abstract base for all LLM API providers.
Supports multimodal messages (text + images) and JSON-mode responses.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List, Union
from dataclasses import dataclass, field

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


@dataclass
class LLMMessage:
    """
    Represents a message in a conversation.
    Supports multimodal content (text and images).
    """
    role: str  # "system", "user", "assistant"
    content: Union[str, List[Dict[str, Any]]]  # text or multimodal content blocks

    @staticmethod
    def text(role: str, text: str) -> "LLMMessage":
        """Create a text-only message."""
        return LLMMessage(role=role, content=text)

    @staticmethod
    def image(role: str, text: str, image_base64: str, media_type: str = "image/jpeg") -> "LLMMessage":
        """
        Create a message carrying one inline image followed by text.

        Args:
            role: Message role
            text: Text content
            image_base64: Base64-encoded image bytes
            media_type: MIME type of the image
        """
        return LLMMessage(role=role, content=[
            {
                "type": "image_url",
                "image_url": {"url": f"data:{media_type};base64,{image_base64}"},
            },
            {"type": "text", "text": text},
        ])


class LLMError(Exception):
    """The API answered, but not with a usable chat completion."""


@dataclass
class LLMResponse:
    """Response from an LLM API call."""
    content: str
    model: str = ""
    usage: Dict[str, int] = field(default_factory=dict)
    raw: Optional[Dict[str, Any]] = None

    def json(self) -> Dict[str, Any]:
        """Parse the content as a JSON object (tolerates a markdown code fence)."""
        return parse_json_object(self.content)


def parse_json_object(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object out of model output.

    Raises:
        ValueError: If the text is not a JSON object
    """
    cleaned = _CODE_FENCE.sub("", text.strip())
    data = json.loads(cleaned)
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object")
    return data


class LLMProvider(ABC):
    """
    Abstract base class for LLM API providers.
    All providers must implement chat_completion.
    """

    def __init__(self, api_key: str, model: str, base_url: Optional[str] = None,
                 default_temperature: float = 0.7, default_max_tokens: int = 2048):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens

    @abstractmethod
    async def chat_completion(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
        **kwargs
    ) -> LLMResponse:
        """
        Send a chat completion request.

        Args:
            messages: List of conversation messages (supports multimodal)
            temperature: Sampling temperature override
            max_tokens: Max tokens override
            json_mode: Ask the model to answer with a single JSON object
            **kwargs: Additional provider-specific parameters

        Returns:
            LLMResponse with the generated content
        """
        pass

    def _format_messages(self, messages: List[LLMMessage]) -> List[Dict[str, Any]]:
        """Convert LLMMessage list to API-compatible format."""
        return [{"role": m.role, "content": m.content} for m in messages]
