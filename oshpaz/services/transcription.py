"""
Speech-to-Text Transcription Service using OpenAI Whisper API.
Turns Telegram voice notes into text meal descriptions.
"""

import io
import logging
from typing import Optional

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)


class TranscriptionError(Exception):
    """Raised when a voice note cannot be transcribed."""


class TranscriptionService:
    """
    Service for transcribing voice notes to text using OpenAI Whisper API.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = "whisper-1"):
        """
        Initialize transcription service.

        Args:
            api_key: OpenAI API key. Without it the service is disabled.
            model: Whisper model name
        """
        self.model = model
        self.client = AsyncOpenAI(api_key=api_key) if api_key else None

    async def transcribe(
        self,
        audio_data: bytes,
        filename: str = "voice.ogg",
        language: Optional[str] = None,
        prompt: Optional[str] = None
    ) -> str:
        """
        Transcribe a voice note to text.

        Args:
            audio_data: Raw audio bytes (Telegram voice notes are OGG/Opus)
            filename: Filename hint so Whisper detects the format
            language: ISO 639-1 code ("uz", "en"); auto-detected when omitted
            prompt: Optional text to bias the vocabulary (dish names)

        Returns:
            Transcribed text

        Raises:
            TranscriptionError: If the service is not configured or the API call fails
        """
        if not self.client:
            raise TranscriptionError("OpenAI API key not configured for transcription")

        audio_file = io.BytesIO(audio_data)
        audio_file.name = filename

        params = {"model": self.model, "file": audio_file}
        if language:
            params["language"] = language
        if prompt:
            params["prompt"] = prompt

        try:
            response = await self.client.audio.transcriptions.create(**params)
        except Exception as e:
            logger.error(f"Transcription failed: {e}", exc_info=True)
            raise TranscriptionError(f"Transcription failed: {e}") from e

        text = (response.text or "").strip()
        logger.info(
            "Voice note transcribed",
            extra={"extra_fields": {"bytes": len(audio_data), "chars": len(text), "language": language}}
        )
        return text

    def is_configured(self) -> bool:
        """True if an API key is set."""
        return self.client is not None
