from .glossary_repository import GlossaryRepository
from .prompt_repository import PromptRepository
from .transcription_repository import SessionFactory, TranscriptionRepository

__all__ = [
    "GlossaryRepository",
    "PromptRepository",
    "SessionFactory",
    "TranscriptionRepository",
]
