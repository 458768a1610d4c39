"""Application configuration loaded from environment variables."""

import os
from pathlib import Path

from pydantic import BaseModel, computed_field


class MinioConfig(BaseModel, frozen=True):
    """MinIO connection configuration."""

    endpoint: str
    user: str
    password: str
    bucket_name: str = "audio"
    secure: bool = False


class LocalStorageConfig(BaseModel, frozen=True):
    """Local directory used when audio is kept on a mounted volume."""

    directory: Path = Path("uploads")


class DatabaseConfig(BaseModel, frozen=True):
    """Immutable database connection configuration."""

    host: str
    port: str
    user: str
    password: str
    database: str

    @computed_field
    @property
    def url(self) -> str:
        """Returns the full PostgreSQL connection URL."""
        return (
            f"postgresql+psycopg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )


class AssemblyAIConfig(BaseModel, frozen=True):
    """AssemblyAI API configuration."""

    api_key: str
    language_code: str = "pt"
    http_timeout_seconds: float = 120.0


class GeminiConfig(BaseModel, frozen=True):
    """Gemini LLM configuration."""

    api_key: str
    model_name: str = "gemini-2.5-flash"
    temperature: float = 0.1
    max_output_tokens: int = 16000


class PipelineConfig(BaseModel, frozen=True):
    """Bounded waits applied to each provider call."""

    transcription_timeout_seconds: float = 1800.0
    correction_timeout_seconds: float = 300.0


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    storage_backend: str = "minio"
    minio: MinioConfig
    local_storage: LocalStorageConfig
    database: DatabaseConfig
    assemblyai: AssemblyAIConfig
    gemini: GeminiConfig
    pipeline: PipelineConfig


def load_config() -> AppConfig:
    """Loads configuration from environment variables."""
    return AppConfig(
        storage_backend=os.getenv("STORAGE_BACKEND", "minio"),
        minio=MinioConfig(
            endpoint=os.getenv("MINIO_ENDPOINT", "minio:9000"),
            user=os.getenv("MINIO_USER", ""),
            password=os.getenv("MINIO_PASSWORD", ""),
            bucket_name=os.getenv("MINIO_BUCKET", "audio"),
        ),
        local_storage=LocalStorageConfig(
            directory=Path(os.getenv("STORAGE_DIR", "uploads")),
        ),
        database=DatabaseConfig(
            host=os.getenv("POSTGRES_HOST", "postgres"),
            port=os.getenv("POSTGRES_PORT", "5432"),
            user=os.getenv("POSTGRES_USER", ""),
            password=os.getenv("POSTGRES_PASSWORD", ""),
            database=os.getenv("POSTGRES_DB", "stenopro"),
        ),
        assemblyai=AssemblyAIConfig(
            api_key=os.getenv("ASSEMBLYAI_API_KEY", ""),
            language_code=os.getenv("ASSEMBLYAI_LANGUAGE_CODE", "pt"),
        ),
        gemini=GeminiConfig(
            api_key=os.getenv("GEMINI_API_KEY", ""),
            model_name=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        ),
        pipeline=PipelineConfig(
            transcription_timeout_seconds=float(
                os.getenv("PIPELINE_TRANSCRIPTION_TIMEOUT_SECONDS", "1800")
            ),
            correction_timeout_seconds=float(
                os.getenv("PIPELINE_CORRECTION_TIMEOUT_SECONDS", "300")
            ),
        ),
    )
