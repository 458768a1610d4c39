"""Custom exceptions for the transcription pipeline."""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories persisted alongside a failed transcription."""

    CONFIGURATION = "configuration"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    TIMEOUT = "timeout"
    PROVIDER = "provider"
    UNKNOWN = "unknown"


class PipelineError(Exception):
    """Base class for failures the orchestrator knows how to classify."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class ConfigurationError(PipelineError):
    """Raised when a required provider credential is missing."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(f"{setting} is not set")


class TranscriptionNotFoundError(PipelineError):
    """Raised when a transcription record does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, transcription_id: int):
        self.transcription_id = transcription_id
        super().__init__(f"Transcription {transcription_id} not found")


class AudioNotFoundError(PipelineError):
    """Raised when the audio blob of a transcription is gone."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Audio file '{filename}' not found")


class ProviderConnectionError(PipelineError):
    """Raised when a provider cannot be reached."""

    kind = ErrorKind.NETWORK

    def __init__(self, provider: str, cause: Exception | None = None):
        self.provider = provider
        super().__init__(f"Could not reach {provider}", cause)


class ProviderTimeoutError(PipelineError):
    """Raised when a provider call exceeds its bounded wait."""

    kind = ErrorKind.TIMEOUT

    def __init__(
        self,
        provider: str,
        timeout_seconds: float | None = None,
        cause: Exception | None = None,
    ):
        self.provider = provider
        self.timeout_seconds = timeout_seconds
        if timeout_seconds is None:
            message = f"{provider} timed out"
        else:
            message = f"{provider} did not answer within {timeout_seconds:g}s"
        super().__init__(message, cause)


class ProviderResponseError(PipelineError):
    """Raised when a provider reports a failure or returns nothing usable."""

    kind = ErrorKind.PROVIDER

    def __init__(self, provider: str, detail: str, cause: Exception | None = None):
        self.provider = provider
        self.detail = detail
        super().__init__(f"{provider} failed: {detail}", cause)


class InvalidStatusTransitionError(Exception):
    """Raised when a record is not in a state that allows the operation."""

    def __init__(self, transcription_id: int, current: str, target: str):
        self.transcription_id = transcription_id
        self.current = current
        self.target = target
        super().__init__(
            f"Transcription {transcription_id} cannot move from '{current}' to '{target}'"
        )


class ReprocessNotAllowedError(Exception):
    """Raised when reprocessing is refused for the record's current status."""

    def __init__(self, transcription_id: int, status: str):
        self.transcription_id = transcription_id
        self.status = status
        super().__init__(
            f"Transcription {transcription_id} cannot be reprocessed while '{status}'"
        )


class StaleTranscriptionError(Exception):
    """Raised when a versioned write loses against a concurrent writer."""

    def __init__(self, transcription_id: int, expected_version: int):
        self.transcription_id = transcription_id
        self.expected_version = expected_version
        super().__init__(
            f"Transcription {transcription_id} changed since version {expected_version}"
        )


class StorageUploadError(Exception):
    """Raised when uploading a file to storage fails."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        self.cause = cause
        super().__init__(f"Failed to upload '{object_name}' to storage")


class StorageDownloadError(Exception):
    """Raised when downloading a file from storage fails."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        self.cause = cause
        super().__init__(f"Failed to download '{object_name}' from storage")


class StorageDeleteError(Exception):
    """Raised when deleting a file from storage fails."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        self.cause = cause
        super().__init__(f"Failed to delete '{object_name}' from storage")


class GlossaryEntryNotFoundError(Exception):
    """Raised when a glossary entry does not exist."""

    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"Glossary entry {entry_id} not found")


class DuplicateGlossaryEntryError(Exception):
    """Raised when a glossary term already exists in the same scope."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Glossary term '{name}' already exists")


class PromptNotFoundError(Exception):
    """Raised when a system prompt or prompt template does not exist."""

    def __init__(self, description: str):
        super().__init__(f"{description} not found")


class DuplicatePromptVersionError(Exception):
    """Raised when a system prompt version number is already taken."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"System prompt version {version} already exists")
