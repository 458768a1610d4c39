"""Dependency injection configuration for the transcription API."""

from contextlib import contextmanager

import assemblyai as aai
from google import genai
from google.genai import types
from minio import Minio
from sqlmodel import Session, SQLModel, create_engine

from stenopro.config import load_config
from stenopro.domain import CorrectionPromptBuilder, load_fallback_prompt
from stenopro.handlers import PipelineOrchestrator
from stenopro.infrastructure import (
    AssemblyAITranscriber,
    GeminiCorrector,
    LocalBlobStore,
    MinioBlobStore,
)
from stenopro.infrastructure.interfaces import BlobStore
from stenopro.logging import setup_logging
from stenopro.repositories import (
    GlossaryRepository,
    PromptRepository,
    TranscriptionRepository,
)

logger = setup_logging()

_config = load_config()

# Audio storage
if _config.storage_backend == "local":
    _blob_store: BlobStore = LocalBlobStore(_config.local_storage.directory)
else:
    _minio_client = Minio(
        endpoint=_config.minio.endpoint,
        access_key=_config.minio.user,
        secret_key=_config.minio.password,
        secure=_config.minio.secure,
    )
    _blob_store = MinioBlobStore(_minio_client, _config.minio.bucket_name)

# PostgreSQL database
_db_engine = create_engine(_config.database.url)


@contextmanager
def _session_factory():
    """Creates a database session context manager."""
    with Session(_db_engine, expire_on_commit=False) as session:
        yield session


_transcription_repository = TranscriptionRepository(_session_factory)
_glossary_repository = GlossaryRepository(_session_factory)
_prompt_repository = PromptRepository(_session_factory)

# AssemblyAI; left unset without a key so runs fail with a configuration error
_aai_transcriber = None
if _config.assemblyai.api_key:
    aai.settings.api_key = _config.assemblyai.api_key
    aai.settings.http_timeout = _config.assemblyai.http_timeout_seconds
    _aai_config = aai.TranscriptionConfig(language_code=_config.assemblyai.language_code)
    _aai_transcriber = aai.Transcriber(config=_aai_config)
_transcriber = AssemblyAITranscriber(_aai_transcriber)

# Gemini LLM
_gemini_client = None
if _config.gemini.api_key:
    _gemini_client = genai.Client(
        api_key=_config.gemini.api_key,
        http_options=types.HttpOptions(
            timeout=int(_config.pipeline.correction_timeout_seconds * 1000)
        ),
    )
_corrector = GeminiCorrector(
    _gemini_client,
    _config.gemini.model_name,
    temperature=_config.gemini.temperature,
    max_output_tokens=_config.gemini.max_output_tokens,
)

# Service composition
_orchestrator = PipelineOrchestrator(
    repository=_transcription_repository,
    glossary_repository=_glossary_repository,
    prompt_repository=_prompt_repository,
    blob_store=_blob_store,
    transcriber=_transcriber,
    corrector=_corrector,
    prompt_builder=CorrectionPromptBuilder(load_fallback_prompt()),
    config=_config.pipeline,
)


def init_infrastructure() -> None:
    """Creates the tables and the storage bucket or directory."""
    SQLModel.metadata.create_all(_db_engine)
    logger.info("Database initialized", extra={"host": _config.database.host})
    _blob_store.ensure_ready()


def get_transcription_repository() -> TranscriptionRepository:
    """Returns the configured transcription repository."""
    return _transcription_repository


def get_glossary_repository() -> GlossaryRepository:
    """Returns the configured glossary repository."""
    return _glossary_repository


def get_prompt_repository() -> PromptRepository:
    """Returns the configured prompt repository."""
    return _prompt_repository


def get_blob_store() -> BlobStore:
    """Returns the configured audio store."""
    return _blob_store


def get_orchestrator() -> PipelineOrchestrator:
    """Returns the configured pipeline orchestrator."""
    return _orchestrator
