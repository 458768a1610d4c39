"""Response models for the transcription API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from stenopro.domain.status import TranscriptionStatus
from stenopro.exceptions import ErrorKind


class TranscriptionSummary(BaseModel):
    """List view of a transcription, without the text columns."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    room: str | None
    duration_seconds: int | None
    status: TranscriptionStatus
    progress_message: str | None
    progress_percent: int
    error_message: str | None
    created_at: datetime
    updated_at: datetime


class TranscriptionResponse(TranscriptionSummary):
    """Full transcription record."""

    audio_filename: str
    raw_text: str | None
    corrected_text: str | None
    final_text: str | None
    error_kind: ErrorKind | None
    custom_prompt: str | None
    processing_started_at: datetime | None
    processing_completed_at: datetime | None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = (total + limit - 1) // limit
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class TranscriptionListResponse(BaseModel):
    items: list[TranscriptionSummary]
    pagination: Pagination


class ReprocessResponse(BaseModel):
    """Returned once a record has been reset and its run scheduled."""

    message: str
    transcription: TranscriptionResponse


class GlossaryEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    info: str | None
    transcription_id: int | None
    is_global: bool
    created_at: datetime


class GlossaryImportResponse(BaseModel):
    imported: int


class SystemPromptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    version: int
    content: str
    is_active: bool
    created_at: datetime


class PromptTemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    prompt_text: str
    is_default: bool
    created_at: datetime
