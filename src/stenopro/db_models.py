from datetime import datetime, timezone

from sqlalchemy import Column
from sqlalchemy.types import Text
from sqlmodel import Field, SQLModel

from stenopro.domain.status import TranscriptionStatus
from stenopro.exceptions import ErrorKind


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Transcription(SQLModel, table=True):
    __tablename__ = "transcriptions"

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    room: str | None = Field(default=None, max_length=100)
    audio_filename: str = Field(max_length=255)
    duration_seconds: int | None = None

    raw_text: str | None = Field(default=None, sa_column=Column(Text))
    corrected_text: str | None = Field(default=None, sa_column=Column(Text))
    final_text: str | None = Field(default=None, sa_column=Column(Text))

    status: TranscriptionStatus = Field(default=TranscriptionStatus.UPLOADING)
    progress_message: str | None = Field(default=None, max_length=255)
    progress_percent: int = 0
    error_message: str | None = Field(default=None, sa_column=Column(Text))
    error_kind: ErrorKind | None = None
    processing_started_at: datetime | None = None
    processing_completed_at: datetime | None = None

    custom_prompt: str | None = Field(default=None, sa_column=Column(Text))

    # Bumped by every lifecycle write; editor writes leave it alone.
    version: int = 1

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class GlossaryEntry(SQLModel, table=True):
    __tablename__ = "glossary_entries"

    id: int | None = Field(default=None, primary_key=True)
    transcription_id: int | None = Field(default=None, index=True)
    name: str = Field(max_length=255)
    info: str | None = Field(default=None, max_length=255)
    is_global: bool = False
    created_at: datetime = Field(default_factory=utcnow)


class SystemPrompt(SQLModel, table=True):
    __tablename__ = "system_prompts"

    id: int | None = Field(default=None, primary_key=True)
    version: int = Field(unique=True)
    content: str = Field(sa_column=Column(Text, nullable=False))
    is_active: bool = False
    created_at: datetime = Field(default_factory=utcnow)


class PromptTemplate(SQLModel, table=True):
    __tablename__ = "prompt_templates"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    prompt_text: str = Field(sa_column=Column(Text, nullable=False))
    is_default: bool = False
    created_at: datetime = Field(default_factory=utcnow)
