"""Lifecycle states of a transcription and their fixed progress values."""

from enum import Enum

from pydantic import BaseModel


class TranscriptionStatus(str, Enum):
    """Exactly one of these is active on a record at any time."""

    UPLOADING = "uploading"
    TRANSCRIBING = "transcribing"
    CORRECTING = "correcting"
    READY = "ready"
    ARCHIVED = "archived"
    ERROR = "error"


class StageProgress(BaseModel, frozen=True):
    """Progress shown to the user while a record sits in a status."""

    percent: int
    message: str


PROGRESS: dict[TranscriptionStatus, StageProgress] = {
    TranscriptionStatus.UPLOADING: StageProgress(percent=0, message="Uploading audio…"),
    TranscriptionStatus.TRANSCRIBING: StageProgress(
        percent=33, message="Transcribing audio…"
    ),
    TranscriptionStatus.CORRECTING: StageProgress(percent=66, message="Correcting text…"),
    TranscriptionStatus.READY: StageProgress(percent=100, message="Done"),
    TranscriptionStatus.ARCHIVED: StageProgress(percent=100, message="Archived"),
    TranscriptionStatus.ERROR: StageProgress(percent=0, message="Processing failed"),
}

IN_FLIGHT = frozenset(
    {
        TranscriptionStatus.UPLOADING,
        TranscriptionStatus.TRANSCRIBING,
        TranscriptionStatus.CORRECTING,
    }
)

TRANSITIONS: dict[TranscriptionStatus, frozenset[TranscriptionStatus]] = {
    TranscriptionStatus.UPLOADING: frozenset(
        {TranscriptionStatus.TRANSCRIBING, TranscriptionStatus.ERROR}
    ),
    TranscriptionStatus.TRANSCRIBING: frozenset(
        {TranscriptionStatus.CORRECTING, TranscriptionStatus.ERROR}
    ),
    TranscriptionStatus.CORRECTING: frozenset(
        {TranscriptionStatus.READY, TranscriptionStatus.ERROR}
    ),
    TranscriptionStatus.READY: frozenset({TranscriptionStatus.ARCHIVED}),
    TranscriptionStatus.ERROR: frozenset({TranscriptionStatus.ARCHIVED}),
    TranscriptionStatus.ARCHIVED: frozenset(),
}


def progress_fields(status: TranscriptionStatus) -> dict:
    """Returns the status column values paired with their progress row."""
    progress = PROGRESS[status]
    return {
        "status": status,
        "progress_message": progress.message,
        "progress_percent": progress.percent,
    }


def can_transition(current: TranscriptionStatus, target: TranscriptionStatus) -> bool:
    """Whether the pipeline may move a record from ``current`` to ``target``."""
    return target in TRANSITIONS[current]


def can_reset(current: TranscriptionStatus) -> bool:
    """Reprocessing may restart any record that has not been archived."""
    return current is not TranscriptionStatus.ARCHIVED
