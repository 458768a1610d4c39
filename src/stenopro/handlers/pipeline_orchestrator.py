"""Drives a transcription record through speech-to-text and correction."""

import threading
from collections.abc import Callable
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TypeVar

from pydantic import BaseModel

from stenopro.config import PipelineConfig
from stenopro.db_models import Transcription, utcnow
from stenopro.domain import CorrectionPromptBuilder, classify
from stenopro.domain.status import (
    TranscriptionStatus,
    can_reset,
    can_transition,
    progress_fields,
)
from stenopro.exceptions import (
    AudioNotFoundError,
    InvalidStatusTransitionError,
    ProviderTimeoutError,
    ReprocessNotAllowedError,
    StaleTranscriptionError,
    TranscriptionNotFoundError,
)
from stenopro.infrastructure.interfaces import (
    BlobStore,
    CorrectionService,
    TranscriptionService,
)
from stenopro.logging import setup_logging
from stenopro.repositories import (
    GlossaryRepository,
    PromptRepository,
    TranscriptionRepository,
)

logger = setup_logging()

T = TypeVar("T")


class _RunState(BaseModel):
    """What one run last wrote: the version it owns and the status it set."""

    transcription_id: int
    version: int
    status: TranscriptionStatus


class PipelineOrchestrator:
    """
    Advances one transcription record through its lifecycle.

    Every stage is an independent, immediately durable write, so a crash
    mid-run leaves an inspectable record rather than losing progress. Writes
    carry the version the run last observed; if a reset or another run
    bumps it, the superseded run stops without touching the record again.
    """

    def __init__(
        self,
        repository: TranscriptionRepository,
        glossary_repository: GlossaryRepository,
        prompt_repository: PromptRepository,
        blob_store: BlobStore,
        transcriber: TranscriptionService,
        corrector: CorrectionService,
        prompt_builder: CorrectionPromptBuilder,
        config: PipelineConfig,
    ):
        self._repository = repository
        self._glossary_repository = glossary_repository
        self._prompt_repository = prompt_repository
        self._blob_store = blob_store
        self._transcriber = transcriber
        self._corrector = corrector
        self._prompt_builder = prompt_builder
        self._config = config

    def run(self, transcription_id: int) -> None:
        """
        Processes a record that is waiting in ``uploading``.

        Outcome is communicated only through the persisted record: success
        ends in ``ready``, any failure in ``error`` with a classified message.

        Args:
            transcription_id: The record to process.

        Raises:
            TranscriptionNotFoundError: If the record does not exist.
            InvalidStatusTransitionError: If the record is not in ``uploading``.
        """
        transcription = self._repository.get_by_id(transcription_id)
        if transcription.status != TranscriptionStatus.UPLOADING:
            raise InvalidStatusTransitionError(
                transcription_id,
                transcription.status.value,
                TranscriptionStatus.TRANSCRIBING.value,
            )

        state = _RunState(
            transcription_id=transcription_id,
            version=transcription.version,
            status=transcription.status,
        )
        logger.info(
            "Processing started",
            extra={
                "transcription_id": transcription_id,
                "audio_file": transcription.audio_filename,
            },
        )

        try:
            self._process(state, transcription)
        except StaleTranscriptionError:
            logger.warning(
                "Run superseded by a newer write, stopping",
                extra={"transcription_id": transcription_id, "version": state.version},
            )
        except TranscriptionNotFoundError:
            logger.warning(
                "Transcription deleted while processing",
                extra={"transcription_id": transcription_id},
            )
        except Exception as e:
            self._record_failure(state, e)

    def run_in_background(self, transcription_id: int) -> None:
        """Fire-and-forget entry point; failures are logged, never raised."""
        try:
            self.run(transcription_id)
        except Exception:
            logger.exception(
                "Background processing failed",
                extra={"transcription_id": transcription_id},
            )

    def reset(self, transcription_id: int) -> Transcription:
        """
        Returns a record to ``uploading`` so it can be processed again.

        Raw and corrected text are cleared; the final text is kept so that
        human edits survive reprocessing. All checks happen before the single
        write, so a refused reset changes nothing.

        Raises:
            TranscriptionNotFoundError: If the record does not exist.
            ReprocessNotAllowedError: If the record is archived.
            AudioNotFoundError: If the audio blob is gone.
            StaleTranscriptionError: If the record changed during the reset.
        """
        transcription = self._repository.get_by_id(transcription_id)

        if not can_reset(transcription.status):
            raise ReprocessNotAllowedError(transcription_id, transcription.status.value)

        if not self._blob_store.exists(transcription.audio_filename):
            raise AudioNotFoundError(transcription.audio_filename)

        self._repository.update(
            transcription_id,
            transcription.version,
            **progress_fields(TranscriptionStatus.UPLOADING),
            error_message=None,
            error_kind=None,
            raw_text=None,
            corrected_text=None,
            processing_started_at=utcnow(),
            processing_completed_at=None,
        )
        logger.info(
            "Transcription reset for reprocessing",
            extra={
                "transcription_id": transcription_id,
                "previous_status": transcription.status.value,
            },
        )
        return self._repository.get_by_id(transcription_id)

    def reprocess(self, transcription_id: int) -> None:
        """Resets a record, then runs the pipeline on it within the same call."""
        self.reset(transcription_id)
        self.run(transcription_id)

    def _process(self, state: _RunState, transcription: Transcription) -> None:
        self._transcriber.ensure_configured()
        self._corrector.ensure_configured()

        self._advance(state, TranscriptionStatus.TRANSCRIBING)

        with self._blob_store.local_copy(transcription.audio_filename) as audio_path:
            transcript = self._call_with_timeout(
                "Transcription provider",
                self._config.transcription_timeout_seconds,
                self._transcriber.transcribe,
                audio_path,
            )

        self._write(
            state,
            raw_text=transcript.text,
            duration_seconds=transcript.duration_seconds,
        )

        self._advance(state, TranscriptionStatus.CORRECTING)

        prompt = self._build_prompt(transcription, transcript.text)
        correction = self._call_with_timeout(
            "Correction provider",
            self._config.correction_timeout_seconds,
            self._corrector.correct,
            prompt,
        )

        self._advance(
            state,
            TranscriptionStatus.READY,
            corrected_text=correction.text,
            initial_final_text=correction.text,
            processing_completed_at=utcnow(),
        )
        logger.info(
            "Processing completed",
            extra={
                "transcription_id": state.transcription_id,
                "input_tokens": correction.input_tokens,
                "output_tokens": correction.output_tokens,
            },
        )

    def _build_prompt(self, transcription: Transcription, raw_text: str) -> str:
        system_prompt = self._prompt_builder.resolve_system_prompt(
            transcription.custom_prompt,
            self._prompt_repository.get_active_content(),
        )
        glossary = self._prompt_builder.format_glossary(
            self._glossary_repository.entries_for_transcription(transcription.id)
        )
        return self._prompt_builder.build(system_prompt, raw_text, glossary)

    def _advance(self, state: _RunState, target: TranscriptionStatus, **fields) -> None:
        if not can_transition(state.status, target):
            raise InvalidStatusTransitionError(
                state.transcription_id, state.status.value, target.value
            )
        self._write(state, **progress_fields(target), **fields)
        state.status = target
        logger.info(
            "Status updated",
            extra={"transcription_id": state.transcription_id, "status": target.value},
        )

    def _write(self, state: _RunState, **fields) -> None:
        state.version = self._repository.update(
            state.transcription_id, state.version, **fields
        )

    def _call_with_timeout(
        self,
        provider: str,
        timeout_seconds: float,
        call: Callable[..., T],
        *args,
    ) -> T:
        # A timed-out call is abandoned on a daemon thread so it never holds
        # up interpreter shutdown.
        future: Future[T] = Future()

        def _invoke() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(call(*args))
            except BaseException as e:
                future.set_exception(e)

        threading.Thread(target=_invoke, name="provider-call", daemon=True).start()
        try:
            return future.result(timeout=timeout_seconds)
        except FutureTimeoutError as e:
            if future.done():
                raise
            raise ProviderTimeoutError(provider, timeout_seconds, e) from e

    def _record_failure(self, state: _RunState, error: Exception) -> None:
        kind, message = classify(error)
        logger.exception(
            "Processing failed",
            extra={
                "transcription_id": state.transcription_id,
                "error_kind": kind.value,
                "stage": state.status.value,
            },
        )
        try:
            self._repository.update(
                state.transcription_id,
                state.version,
                **progress_fields(TranscriptionStatus.ERROR),
                error_message=message,
                error_kind=kind,
            )
        except StaleTranscriptionError:
            logger.warning(
                "Run superseded before its failure could be recorded",
                extra={"transcription_id": state.transcription_id},
            )
        except Exception:
            logger.exception(
                "Could not record processing failure",
                extra={"transcription_id": state.transcription_id},
            )
