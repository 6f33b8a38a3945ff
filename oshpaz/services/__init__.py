"""Services module - provides external service integrations."""

from .transcription import TranscriptionService, TranscriptionError

__all__ = ['TranscriptionService', 'TranscriptionError']
