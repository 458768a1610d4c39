"""Infrastructure layer exports."""

from .assemblyai_transcriber import AssemblyAITranscriber
from .gemini_corrector import GeminiCorrector
from .local_blob_store import LocalBlobStore
from .minio_blob_store import MinioBlobStore

__all__ = ["AssemblyAITranscriber", "GeminiCorrector", "LocalBlobStore", "MinioBlobStore"]
