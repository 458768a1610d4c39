"""Domain layer exports."""

from stenopro.domain.error_classifier import classify
from stenopro.domain.models import CorrectionResult, GlossaryTerm, TranscriptionResult
from stenopro.domain.prompt_builder import (
    END_MARKER,
    CorrectionPromptBuilder,
    load_fallback_prompt,
)
from stenopro.domain.status import PROGRESS, TranscriptionStatus, progress_fields

__all__ = [
    "classify",
    "CorrectionResult",
    "GlossaryTerm",
    "TranscriptionResult",
    "END_MARKER",
    "CorrectionPromptBuilder",
    "load_fallback_prompt",
    "PROGRESS",
    "TranscriptionStatus",
    "progress_fields",
]
