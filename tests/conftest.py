"""Shared fixtures: in-memory database, local audio store and fake providers."""

from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from stenopro.config import PipelineConfig
from stenopro.db_models import Transcription
from stenopro.dependencies import (
    get_blob_store,
    get_glossary_repository,
    get_orchestrator,
    get_prompt_repository,
    get_transcription_repository,
)
from stenopro.domain import CorrectionPromptBuilder
from stenopro.domain.models import CorrectionResult, TranscriptionResult
from stenopro.domain.status import TranscriptionStatus, progress_fields
from stenopro.handlers import PipelineOrchestrator
from stenopro.infrastructure import LocalBlobStore
from stenopro.infrastructure.interfaces import CorrectionService, TranscriptionService
from stenopro.repositories import (
    GlossaryRepository,
    PromptRepository,
    TranscriptionRepository,
)
from stenopro.routes import (
    glossary_router,
    prompts_router,
    templates_router,
    transcriptions_router,
)

FALLBACK_PROMPT = "Revise a transcrição."


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    @contextmanager
    def factory():
        with Session(engine, expire_on_commit=False) as session:
            yield session

    return factory


@pytest.fixture
def repository(session_factory):
    return TranscriptionRepository(session_factory)


@pytest.fixture
def glossary_repository(session_factory):
    return GlossaryRepository(session_factory)


@pytest.fixture
def prompt_repository(session_factory):
    return PromptRepository(session_factory)


@pytest.fixture
def blob_store(tmp_path):
    store = LocalBlobStore(tmp_path / "audio")
    store.ensure_ready()
    return store


@pytest.fixture
def transcriber():
    service = MagicMock(spec=TranscriptionService)
    service.transcribe.return_value = TranscriptionResult(
        text="ola mundo", duration_seconds=12
    )
    return service


@pytest.fixture
def corrector():
    service = MagicMock(spec=CorrectionService)
    service.correct.return_value = CorrectionResult(
        text="Olá, mundo. (Fim da transcrição)", input_tokens=120, output_tokens=40
    )
    return service


@pytest.fixture
def pipeline_config():
    return PipelineConfig(transcription_timeout_seconds=5, correction_timeout_seconds=5)


@pytest.fixture
def orchestrator(
    repository,
    glossary_repository,
    prompt_repository,
    blob_store,
    transcriber,
    corrector,
    pipeline_config,
):
    return PipelineOrchestrator(
        repository=repository,
        glossary_repository=glossary_repository,
        prompt_repository=prompt_repository,
        blob_store=blob_store,
        transcriber=transcriber,
        corrector=corrector,
        prompt_builder=CorrectionPromptBuilder(FALLBACK_PROMPT),
        config=pipeline_config,
    )


@pytest.fixture
def stored_audio(blob_store, tmp_path):
    """Stores ``a.mp3`` and returns its object name."""
    source = tmp_path / "source.mp3"
    source.write_bytes(b"ID3 fake audio")
    with source.open("rb") as data:
        blob_store.save("a.mp3", data, size=14, content_type="audio/mpeg")
    return "a.mp3"


@pytest.fixture
def uploading_record(repository, stored_audio):
    """A freshly created record waiting in ``uploading``."""
    return repository.create(
        Transcription(
            id=7,
            title="Sessão ordinária",
            room="Plenário",
            audio_filename=stored_audio,
            **progress_fields(TranscriptionStatus.UPLOADING),
        )
    )


@pytest.fixture
def app(repository, glossary_repository, prompt_repository, blob_store, orchestrator):
    app = FastAPI()
    app.include_router(transcriptions_router)
    app.include_router(glossary_router)
    app.include_router(prompts_router)
    app.include_router(templates_router)

    app.dependency_overrides[get_transcription_repository] = lambda: repository
    app.dependency_overrides[get_glossary_repository] = lambda: glossary_repository
    app.dependency_overrides[get_prompt_repository] = lambda: prompt_repository
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
