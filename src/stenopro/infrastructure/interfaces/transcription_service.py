"""Abstract interface for transcription service operations."""

from abc import ABC, abstractmethod
from pathlib import Path

from stenopro.domain.models import TranscriptionResult


class TranscriptionService(ABC):
    """Abstract base class for speech-to-text backends."""

    @abstractmethod
    def ensure_configured(self) -> None:
        """
        Checks that the backend has its credentials, without any network call.

        Raises:
            ConfigurationError: If a required credential is missing.
        """

    @abstractmethod
    def transcribe(self, audio_path: Path) -> TranscriptionResult:
        """
        Transcribes an audio file.

        Args:
            audio_path: Local path of the audio file.

        Returns:
            TranscriptionResult with the text and detected duration.

        Raises:
            ProviderConnectionError: If the provider cannot be reached.
            ProviderTimeoutError: If the provider's HTTP timeout elapses.
            ProviderResponseError: If the provider reports a failure.
        """
