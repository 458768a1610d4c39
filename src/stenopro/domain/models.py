"""Domain models for the transcription pipeline."""

from pydantic import BaseModel


class TranscriptionResult(BaseModel, frozen=True):
    """Best-effort speech-to-text output for one audio file."""

    text: str
    duration_seconds: int | None = None


class CorrectionResult(BaseModel, frozen=True):
    """Revised transcript returned by the correction model."""

    text: str
    input_tokens: int = 0
    output_tokens: int = 0


class GlossaryTerm(BaseModel, frozen=True):
    """A name and its description, used to bias spelling during correction."""

    name: str
    info: str | None = None
