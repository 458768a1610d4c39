"""Transcription endpoints: upload, browse, edit, reprocess and delete."""

from typing import Annotated, Literal

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    Form,
    HTTPException,
    Query,
    Response,
    UploadFile,
)

from stenopro.db_models import Transcription, utcnow
from stenopro.dependencies import (
    get_blob_store,
    get_glossary_repository,
    get_orchestrator,
    get_prompt_repository,
    get_transcription_repository,
)
from stenopro.domain.audio import ALLOWED_AUDIO_TYPES, MAX_AUDIO_BYTES, unique_audio_name
from stenopro.domain.status import TranscriptionStatus, progress_fields
from stenopro.exceptions import (
    AudioNotFoundError,
    PromptNotFoundError,
    ReprocessNotAllowedError,
    StaleTranscriptionError,
    StorageDeleteError,
    StorageDownloadError,
    StorageUploadError,
    TranscriptionNotFoundError,
)
from stenopro.handlers import PipelineOrchestrator
from stenopro.infrastructure.interfaces import BlobStore
from stenopro.logging import setup_logging
from stenopro.repositories import (
    GlossaryRepository,
    PromptRepository,
    TranscriptionRepository,
)
from stenopro.request_models import TranscriptionUpdateRequest
from stenopro.response_models import (
    Pagination,
    ReprocessResponse,
    TranscriptionListResponse,
    TranscriptionResponse,
    TranscriptionSummary,
)

logger = setup_logging()

router = APIRouter(prefix="/transcriptions", tags=["transcriptions"])

RepositoryDep = Annotated[TranscriptionRepository, Depends(get_transcription_repository)]
GlossaryRepositoryDep = Annotated[GlossaryRepository, Depends(get_glossary_repository)]
PromptRepositoryDep = Annotated[PromptRepository, Depends(get_prompt_repository)]
BlobStoreDep = Annotated[BlobStore, Depends(get_blob_store)]
OrchestratorDep = Annotated[PipelineOrchestrator, Depends(get_orchestrator)]


def _discard_audio(blob_store: BlobStore, object_name: str) -> None:
    """Removes an uploaded file whose record could not be created."""
    try:
        blob_store.delete(object_name)
    except StorageDeleteError:
        logger.warning(
            "Orphaned audio file could not be deleted",
            extra={"object_name": object_name},
        )


@router.get("", response_model=TranscriptionListResponse)
def list_transcriptions(
    repo: RepositoryDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: TranscriptionStatus | None = None,
    room: str | None = None,
    search: str | None = None,
    sort_by: Literal["created_at", "updated_at", "title"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
):
    """Returns one page of transcriptions with pagination metadata."""
    try:
        items, total = repo.list_page(
            page=page,
            limit=limit,
            status=status,
            room=room,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except Exception as e:
        logger.error(f"Error listing transcriptions: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    return TranscriptionListResponse(
        items=[TranscriptionSummary.model_validate(item) for item in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{transcription_id}", response_model=TranscriptionResponse)
def get_transcription(transcription_id: int, repo: RepositoryDep):
    """Returns a single transcription including its texts."""
    try:
        return repo.get_by_id(transcription_id)
    except TranscriptionNotFoundError:
        raise HTTPException(status_code=404, detail="Transcription not found")


@router.post("", response_model=TranscriptionResponse, status_code=201)
def create_transcription(
    file: UploadFile,
    background_tasks: BackgroundTasks,
    repo: RepositoryDep,
    prompt_repo: PromptRepositoryDep,
    blob_store: BlobStoreDep,
    orchestrator: OrchestratorDep,
    title: str = Form(..., min_length=1, max_length=255),
    room: str | None = Form(None, max_length=100),
    custom_prompt_id: int | None = Form(None),
):
    """
    Uploads an audio file and starts processing it.

    The audio is stored, the record is created in ``uploading`` and the
    pipeline is scheduled to run after the response is sent.
    """
    if file.content_type not in ALLOWED_AUDIO_TYPES:
        raise HTTPException(
            status_code=422,
            detail="File must be an MP3, WAV or OGG audio file",
        )

    size = file.size
    if size is None:
        size = file.file.seek(0, 2)
        file.file.seek(0)
    if size == 0:
        raise HTTPException(status_code=422, detail="File is empty")
    if size > MAX_AUDIO_BYTES:
        raise HTTPException(status_code=413, detail="File exceeds the 100 MB limit")

    custom_prompt = None
    if custom_prompt_id is not None:
        try:
            custom_prompt = prompt_repo.get_template(custom_prompt_id).prompt_text
        except PromptNotFoundError:
            logger.warning(
                "Prompt template not found, using the active system prompt",
                extra={"custom_prompt_id": custom_prompt_id},
            )

    object_name = unique_audio_name(file.filename or "audio", utcnow())
    logger.info(
        "Received upload request",
        extra={
            "file_name": file.filename,
            "object_name": object_name,
            "size": size,
            "title": title,
        },
    )

    try:
        blob_store.save(
            object_name=object_name,
            data=file.file,
            size=size,
            content_type=file.content_type,
        )
    except StorageUploadError:
        raise HTTPException(status_code=500, detail="File upload failed")

    try:
        transcription = repo.create(
            Transcription(
                title=title,
                room=room,
                audio_filename=object_name,
                custom_prompt=custom_prompt,
                processing_started_at=utcnow(),
                **progress_fields(TranscriptionStatus.UPLOADING),
            )
        )
    except Exception as e:
        logger.error(f"Error creating transcription for {object_name}: {e}")
        _discard_audio(blob_store, object_name)
        raise HTTPException(status_code=500, detail="Transcription could not be created")

    background_tasks.add_task(orchestrator.run_in_background, transcription.id)
    return transcription


@router.patch("/{transcription_id}", response_model=TranscriptionResponse)
def update_transcription(
    transcription_id: int,
    body: TranscriptionUpdateRequest,
    repo: RepositoryDep,
):
    """Applies editor changes to title, room, final text or custom prompt."""
    changes = body.model_dump(exclude_unset=True)
    try:
        if not changes:
            return repo.get_by_id(transcription_id)
        return repo.edit(transcription_id, **changes)
    except TranscriptionNotFoundError:
        raise HTTPException(status_code=404, detail="Transcription not found")


@router.post(
    "/{transcription_id}/reprocess",
    response_model=ReprocessResponse,
    status_code=202,
)
def reprocess_transcription(
    transcription_id: int,
    background_tasks: BackgroundTasks,
    orchestrator: OrchestratorDep,
):
    """
    Resets a transcription and runs the pipeline on it again.

    The reset happens before the response so that refusals are reported to
    the caller; the run itself happens in the background.
    """
    try:
        transcription = orchestrator.reset(transcription_id)
    except TranscriptionNotFoundError:
        raise HTTPException(status_code=404, detail="Transcription not found")
    except AudioNotFoundError:
        raise HTTPException(
            status_code=409, detail="Audio file not found, cannot reprocess"
        )
    except ReprocessNotAllowedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StaleTranscriptionError:
        raise HTTPException(
            status_code=409, detail="Transcription changed, try again"
        )
    except StorageDownloadError:
        raise HTTPException(status_code=500, detail="Storage unavailable")

    background_tasks.add_task(orchestrator.run_in_background, transcription_id)
    return ReprocessResponse(
        message="Reprocessing started",
        transcription=TranscriptionResponse.model_validate(transcription),
    )


@router.delete("/{transcription_id}", status_code=204)
def delete_transcription(
    transcription_id: int,
    repo: RepositoryDep,
    glossary_repo: GlossaryRepositoryDep,
    blob_store: BlobStoreDep,
):
    """Deletes a transcription, its scoped glossary entries and its audio."""
    try:
        transcription = repo.get_by_id(transcription_id)
    except TranscriptionNotFoundError:
        raise HTTPException(status_code=404, detail="Transcription not found")

    try:
        blob_store.delete(transcription.audio_filename)
    except StorageDeleteError:
        logger.warning(
            "Audio file could not be deleted, removing record anyway",
            extra={
                "transcription_id": transcription_id,
                "object_name": transcription.audio_filename,
            },
        )

    glossary_repo.delete_for_transcription(transcription_id)
    try:
        repo.delete(transcription_id)
    except TranscriptionNotFoundError:
        raise HTTPException(status_code=404, detail="Transcription not found")

    return Response(status_code=204)
