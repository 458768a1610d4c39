"""Infrastructure interface exports."""

from .blob_store import BlobStore
from .correction_service import CorrectionService
from .transcription_service import TranscriptionService

__all__ = ["BlobStore", "CorrectionService", "TranscriptionService"]
