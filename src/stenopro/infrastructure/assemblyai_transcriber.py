"""AssemblyAI implementation of the TranscriptionService interface."""

from pathlib import Path

import assemblyai as aai
import httpx

from stenopro.domain.models import TranscriptionResult
from stenopro.exceptions import (
    ConfigurationError,
    ProviderConnectionError,
    ProviderResponseError,
    ProviderTimeoutError,
)
from stenopro.logging import setup_logging

from .interfaces import TranscriptionService

logger = setup_logging()

PROVIDER = "AssemblyAI"


class AssemblyAITranscriber(TranscriptionService):
    """Handles audio transcription using AssemblyAI."""

    def __init__(self, transcriber: aai.Transcriber | None):
        self._transcriber = transcriber

    def ensure_configured(self) -> None:
        if self._transcriber is None:
            raise ConfigurationError("ASSEMBLYAI_API_KEY")

    def transcribe(self, audio_path: Path) -> TranscriptionResult:
        """
        Transcribes a local audio file using AssemblyAI.

        The SDK uploads the file, then polls until the transcript is done.
        HTTP timeouts and transport failures are reported as such; every
        other SDK failure is a provider error.
        """
        self.ensure_configured()
        logger.info(
            "Starting AssemblyAI transcription",
            extra={"audio_path": str(audio_path), "size": audio_path.stat().st_size},
        )

        try:
            transcript = self._transcriber.transcribe(str(audio_path))
        except httpx.TimeoutException as e:
            logger.exception("AssemblyAI request timed out")
            raise ProviderTimeoutError(PROVIDER, cause=e) from e
        except httpx.TransportError as e:
            logger.exception("AssemblyAI unreachable")
            raise ProviderConnectionError(PROVIDER, e) from e
        except Exception as e:
            logger.exception("AssemblyAI transcription failed")
            raise ProviderResponseError(PROVIDER, str(e) or type(e).__name__, e) from e

        if transcript.status == aai.TranscriptStatus.error:
            raise ProviderResponseError(PROVIDER, transcript.error or "unknown error")

        if transcript.text is None:
            raise ProviderResponseError(PROVIDER, "Transcription returned no text")

        duration = transcript.audio_duration
        result = TranscriptionResult(
            text=transcript.text,
            duration_seconds=int(duration) if duration is not None else None,
        )

        logger.info(
            "Audio transcription successful",
            extra={
                "characters": len(result.text),
                "duration_seconds": result.duration_seconds,
            },
        )
        return result
