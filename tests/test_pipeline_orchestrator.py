import threading
from unittest.mock import patch

import pytest

from stenopro.config import PipelineConfig
from stenopro.db_models import Transcription
from stenopro.domain import CorrectionPromptBuilder
from stenopro.domain.models import CorrectionResult, TranscriptionResult
from stenopro.domain.status import TranscriptionStatus, progress_fields
from stenopro.exceptions import (
    AudioNotFoundError,
    ConfigurationError,
    ErrorKind,
    InvalidStatusTransitionError,
    ProviderConnectionError,
    ProviderResponseError,
    ReprocessNotAllowedError,
    TranscriptionNotFoundError,
)
from stenopro.handlers import PipelineOrchestrator


class TestRun:
    def test_successful_run_ends_ready(
        self, orchestrator, repository, uploading_record, transcriber, corrector
    ):
        orchestrator.run(7)

        record = repository.get_by_id(7)
        assert record.status == TranscriptionStatus.READY
        assert record.progress_percent == 100
        assert record.progress_message == "Done"
        assert record.raw_text == "ola mundo"
        assert record.corrected_text == "Olá, mundo. (Fim da transcrição)"
        assert record.final_text == record.corrected_text
        assert record.duration_seconds == 12
        assert record.error_message is None
        assert record.processing_completed_at is not None
        transcriber.transcribe.assert_called_once()
        corrector.correct.assert_called_once()

    def test_transcriber_receives_local_audio_path(
        self, orchestrator, uploading_record, transcriber, blob_store
    ):
        orchestrator.run(7)

        audio_path = transcriber.transcribe.call_args.args[0]
        assert audio_path.name == "a.mp3"

    def test_progress_is_monotonic(self, orchestrator, repository, uploading_record):
        with patch.object(repository, "update", wraps=repository.update) as update:
            orchestrator.run(7)

        percents = [uploading_record.progress_percent] + [
            call.kwargs["progress_percent"]
            for call in update.call_args_list
            if "progress_percent" in call.kwargs
        ]
        assert percents == [0, 33, 66, 100]

    def test_transcription_failure_leaves_raw_text_empty(
        self, orchestrator, repository, uploading_record, transcriber, corrector
    ):
        transcriber.transcribe.side_effect = ProviderResponseError(
            "AssemblyAI", "audio could not be decoded"
        )

        orchestrator.run(7)

        record = repository.get_by_id(7)
        assert record.status == TranscriptionStatus.ERROR
        assert record.raw_text is None
        assert record.progress_percent == 0
        assert record.error_kind == ErrorKind.PROVIDER
        assert record.error_message == (
            "Provider error: AssemblyAI failed: audio could not be decoded"
        )
        corrector.correct.assert_not_called()

    def test_correction_failure_keeps_raw_text(
        self, orchestrator, repository, uploading_record, corrector
    ):
        corrector.correct.side_effect = ProviderConnectionError("Gemini")

        orchestrator.run(7)

        record = repository.get_by_id(7)
        assert record.status == TranscriptionStatus.ERROR
        assert record.raw_text == "ola mundo"
        assert record.corrected_text is None
        assert record.error_kind == ErrorKind.NETWORK
        assert record.error_message.startswith("Network error:")

    def test_correction_timeout_is_classified(
        self, orchestrator, repository, uploading_record, corrector
    ):
        corrector.correct.side_effect = TimeoutError("no answer after 300s")

        orchestrator.run(7)

        record = repository.get_by_id(7)
        assert record.status == TranscriptionStatus.ERROR
        assert record.error_kind == ErrorKind.TIMEOUT
        assert "timeout" in record.error_message.lower()
        assert record.raw_text == "ola mundo"

    @pytest.fixture
    def orchestrator_with_timeouts(
        self,
        repository,
        glossary_repository,
        prompt_repository,
        blob_store,
        transcriber,
        corrector,
    ):
        def build(transcription_timeout_seconds=5, correction_timeout_seconds=5):
            return PipelineOrchestrator(
                repository=repository,
                glossary_repository=glossary_repository,
                prompt_repository=prompt_repository,
                blob_store=blob_store,
                transcriber=transcriber,
                corrector=corrector,
                prompt_builder=CorrectionPromptBuilder("Revise."),
                config=PipelineConfig(
                    transcription_timeout_seconds=transcription_timeout_seconds,
                    correction_timeout_seconds=correction_timeout_seconds,
                ),
            )

        return build

    def test_slow_correction_is_abandoned_after_bounded_wait(
        self, orchestrator_with_timeouts, repository, uploading_record, corrector
    ):
        release = threading.Event()
        corrector.correct.side_effect = lambda prompt: release.wait(5)
        orchestrator = orchestrator_with_timeouts(correction_timeout_seconds=0.05)

        try:
            orchestrator.run(7)
        finally:
            release.set()

        record = repository.get_by_id(7)
        assert record.status == TranscriptionStatus.ERROR
        assert record.error_kind == ErrorKind.TIMEOUT
        assert record.error_message == (
            "Provider timeout: Correction provider did not answer within 0.05s"
        )
        assert record.raw_text == "ola mundo"

    def test_slow_transcription_is_abandoned_after_bounded_wait(
        self,
        orchestrator_with_timeouts,
        repository,
        uploading_record,
        transcriber,
        corrector,
    ):
        release = threading.Event()
        transcriber.transcribe.side_effect = lambda audio_path: release.wait(5)
        orchestrator = orchestrator_with_timeouts(transcription_timeout_seconds=0.05)

        try:
            orchestrator.run(7)
        finally:
            release.set()

        record = repository.get_by_id(7)
        assert record.status == TranscriptionStatus.ERROR
        assert record.error_kind == ErrorKind.TIMEOUT
        assert record.error_message == (
            "Provider timeout: Transcription provider did not answer within 0.05s"
        )
        assert record.raw_text is None
        corrector.correct.assert_not_called()

    def test_abandoned_provider_call_runs_on_daemon_thread(
        self, orchestrator_with_timeouts, uploading_record, corrector
    ):
        release = threading.Event()
        seen = {}

        def slow_correction(prompt):
            seen["daemon"] = threading.current_thread().daemon
            release.wait(5)

        corrector.correct.side_effect = slow_correction
        orchestrator = orchestrator_with_timeouts(correction_timeout_seconds=0.05)

        try:
            orchestrator.run(7)
        finally:
            release.set()

        assert seen == {"daemon": True}

    def test_unexpected_error_keeps_raw_message(
        self, orchestrator, repository, uploading_record, corrector
    ):
        corrector.correct.side_effect = RuntimeError("boom")

        orchestrator.run(7)

        record = repository.get_by_id(7)
        assert record.error_kind == ErrorKind.UNKNOWN
        assert record.error_message == "Unexpected error: boom"

    def test_missing_credentials_fail_before_any_provider_call(
        self, orchestrator, repository, uploading_record, transcriber, corrector
    ):
        corrector.ensure_configured.side_effect = ConfigurationError("GEMINI_API_KEY")

        orchestrator.run(7)

        record = repository.get_by_id(7)
        assert record.status == TranscriptionStatus.ERROR
        assert record.error_kind == ErrorKind.CONFIGURATION
        assert record.error_message == "Configuration error: GEMINI_API_KEY is not set"
        transcriber.transcribe.assert_not_called()

    def test_missing_audio_ends_in_not_found_error(
        self, orchestrator, repository, uploading_record, blob_store
    ):
        blob_store.delete("a.mp3")

        orchestrator.run(7)

        record = repository.get_by_id(7)
        assert record.status == TranscriptionStatus.ERROR
        assert record.error_kind == ErrorKind.NOT_FOUND

    def test_missing_record_raises(self, orchestrator):
        with pytest.raises(TranscriptionNotFoundError):
            orchestrator.run(404)

    def test_record_not_uploading_is_refused_without_writes(
        self, orchestrator, repository, uploading_record, transcriber
    ):
        orchestrator.run(7)
        version = repository.get_by_id(7).version

        with pytest.raises(InvalidStatusTransitionError):
            orchestrator.run(7)

        assert repository.get_by_id(7).version == version
        assert transcriber.transcribe.call_count == 1

    def test_superseded_run_stops_writing(
        self, orchestrator, repository, uploading_record, transcriber, corrector
    ):
        def reset_during_transcription(audio_path):
            record = repository.get_by_id(7)
            repository.update(
                7,
                record.version,
                **progress_fields(TranscriptionStatus.UPLOADING),
            )
            return TranscriptionResult(text="stale text", duration_seconds=3)

        transcriber.transcribe.side_effect = reset_during_transcription

        orchestrator.run(7)

        record = repository.get_by_id(7)
        assert record.status == TranscriptionStatus.UPLOADING
        assert record.raw_text is None
        assert record.error_message is None
        corrector.correct.assert_not_called()

    def test_prompt_includes_glossary_and_active_prompt(
        self,
        orchestrator,
        uploading_record,
        glossary_repository,
        prompt_repository,
        corrector,
    ):
        prompt_repository.create_prompt(1, "Instruções ativas", is_active=True)
        glossary_repository.create("Dep. Silva", "relator", None, is_global=True)
        glossary_repository.create("Plenário", "sala", 7, is_global=False)
        glossary_repository.create("Outro", "alheio", 8, is_global=False)

        orchestrator.run(7)

        prompt = corrector.correct.call_args.args[0]
        assert prompt.startswith("Instruções ativas")
        assert "# TRANSCRIÇÃO BRUTA:\nola mundo" in prompt
        assert "Dep. Silva - relator" in prompt
        assert "Plenário - sala" in prompt
        assert "Outro" not in prompt
        assert prompt.rstrip().endswith("(Fim da transcrição)")

    def test_custom_prompt_overrides_active_prompt(
        self, orchestrator, repository, uploading_record, prompt_repository, corrector
    ):
        prompt_repository.create_prompt(1, "Instruções ativas", is_active=True)
        repository.edit(7, custom_prompt="Instruções da sessão")

        orchestrator.run(7)

        prompt = corrector.correct.call_args.args[0]
        assert prompt.startswith("Instruções da sessão")
        assert "Instruções ativas" not in prompt

    def test_fallback_prompt_used_without_active_prompt(
        self, orchestrator, uploading_record, corrector
    ):
        orchestrator.run(7)

        prompt = corrector.correct.call_args.args[0]
        assert prompt.startswith("Revise a transcrição.")


class TestRunInBackground:
    def test_swallows_and_logs_refusals(self, orchestrator):
        with patch("stenopro.handlers.pipeline_orchestrator.logger") as logger:
            orchestrator.run_in_background(404)

        logger.exception.assert_called_once()


class TestReprocess:
    def test_preserves_human_edited_final_text(
        self, orchestrator, repository, uploading_record, transcriber, corrector
    ):
        orchestrator.run(7)
        repository.edit(7, final_text="Texto revisado pelo taquígrafo")

        transcriber.transcribe.return_value = TranscriptionResult(
            text="olá mundo de novo", duration_seconds=12
        )
        corrector.correct.return_value = CorrectionResult(
            text="Olá, mundo de novo. (Fim da transcrição)"
        )

        orchestrator.reprocess(7)

        record = repository.get_by_id(7)
        assert record.status == TranscriptionStatus.READY
        assert record.raw_text == "olá mundo de novo"
        assert record.corrected_text == "Olá, mundo de novo. (Fim da transcrição)"
        assert record.final_text == "Texto revisado pelo taquígrafo"

    def test_recovers_a_failed_record(
        self, orchestrator, repository, uploading_record, corrector
    ):
        corrector.correct.side_effect = TimeoutError()
        orchestrator.run(7)
        assert repository.get_by_id(7).status == TranscriptionStatus.ERROR

        corrector.correct.side_effect = None
        orchestrator.reprocess(7)

        record = repository.get_by_id(7)
        assert record.status == TranscriptionStatus.READY
        assert record.error_message is None
        assert record.error_kind is None

    def test_deleted_audio_fails_fast_without_reset(
        self, orchestrator, repository, uploading_record, blob_store, transcriber
    ):
        orchestrator.run(7)
        before = repository.get_by_id(7)
        blob_store.delete("a.mp3")

        with pytest.raises(AudioNotFoundError, match="a.mp3"):
            orchestrator.reprocess(7)

        after = repository.get_by_id(7)
        assert after.status == TranscriptionStatus.READY
        assert after.version == before.version
        assert after.raw_text == before.raw_text
        assert after.corrected_text == before.corrected_text
        assert transcriber.transcribe.call_count == 1

    def test_archived_record_is_refused(self, orchestrator, repository, stored_audio):
        repository.create(
            Transcription(
                id=9,
                title="Arquivada",
                audio_filename=stored_audio,
                **progress_fields(TranscriptionStatus.ARCHIVED),
            )
        )

        with pytest.raises(ReprocessNotAllowedError):
            orchestrator.reprocess(9)

        assert repository.get_by_id(9).status == TranscriptionStatus.ARCHIVED

    def test_missing_record_raises(self, orchestrator):
        with pytest.raises(TranscriptionNotFoundError):
            orchestrator.reprocess(404)

    def test_reset_clears_stage_outputs(
        self, orchestrator, repository, uploading_record
    ):
        orchestrator.run(7)

        record = orchestrator.reset(7)

        assert record.status == TranscriptionStatus.UPLOADING
        assert record.progress_percent == 0
        assert record.raw_text is None
        assert record.corrected_text is None
        assert record.final_text == "Olá, mundo. (Fim da transcrição)"
        assert record.processing_completed_at is None
