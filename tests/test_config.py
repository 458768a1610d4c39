from pathlib import Path

from stenopro.config import load_config


def test_defaults(monkeypatch):
    for name in (
        "STORAGE_BACKEND",
        "STORAGE_DIR",
        "ASSEMBLYAI_API_KEY",
        "GEMINI_MODEL",
        "PIPELINE_TRANSCRIPTION_TIMEOUT_SECONDS",
        "PIPELINE_CORRECTION_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)

    config = load_config()

    assert config.storage_backend == "minio"
    assert config.local_storage.directory == Path("uploads")
    assert config.assemblyai.api_key == ""
    assert config.gemini.model_name == "gemini-2.5-flash"
    assert config.pipeline.transcription_timeout_seconds == 1800
    assert config.pipeline.correction_timeout_seconds == 300


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("STORAGE_DIR", "/data/audio")
    monkeypatch.setenv("POSTGRES_HOST", "db")
    monkeypatch.setenv("POSTGRES_PORT", "5433")
    monkeypatch.setenv("POSTGRES_USER", "steno")
    monkeypatch.setenv("POSTGRES_PASSWORD", "secret")
    monkeypatch.setenv("POSTGRES_DB", "camara")
    monkeypatch.setenv("PIPELINE_CORRECTION_TIMEOUT_SECONDS", "60")

    config = load_config()

    assert config.storage_backend == "local"
    assert config.local_storage.directory == Path("/data/audio")
    assert config.database.url == "postgresql+psycopg://steno:secret@db:5433/camara"
    assert config.pipeline.correction_timeout_seconds == 60
