"""Request bodies accepted by the HTTP API."""

from typing import Self

from pydantic import BaseModel, Field, field_validator, model_validator

from stenopro.domain.models import GlossaryTerm


class TranscriptionUpdateRequest(BaseModel):
    """Editor changes; only the fields present in the body are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    room: str | None = Field(default=None, max_length=100)
    final_text: str | None = None
    custom_prompt: str | None = None

    @field_validator("title")
    @classmethod
    def _title_not_null(cls, value: str | None) -> str:
        # Omitting the title keeps it; an explicit null would empty a required column.
        if value is None:
            raise ValueError("title cannot be null")
        return value


class GlossaryEntryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    info: str | None = Field(default=None, max_length=255)
    transcription_id: int | None = None
    is_global: bool = False

    @model_validator(mode="after")
    def _require_scope(self) -> Self:
        if not self.is_global and self.transcription_id is None:
            raise ValueError("transcription_id is required for non-global entries")
        return self


class GlossaryImportRequest(BaseModel):
    """Bulk import of terms into one scope."""

    terms: list[GlossaryTerm] = Field(min_length=1)
    transcription_id: int | None = None
    is_global: bool = False

    @model_validator(mode="after")
    def _require_scope(self) -> Self:
        if not self.is_global and self.transcription_id is None:
            raise ValueError("transcription_id is required for non-global entries")
        return self


class SystemPromptCreateRequest(BaseModel):
    version: int = Field(ge=1)
    content: str = Field(min_length=1)
    is_active: bool = False


class PromptTemplateCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    prompt_text: str = Field(min_length=1)
    is_default: bool = False


class PromptTemplateUpdateRequest(BaseModel):
    """Template changes; only the fields present in the body are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    prompt_text: str | None = Field(default=None, min_length=1)
    is_default: bool | None = None

    @field_validator("name", "prompt_text", "is_default")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("field cannot be null")
        return value
