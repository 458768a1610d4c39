"""Abstract interface for transcript correction operations."""

from abc import ABC, abstractmethod

from stenopro.domain.models import CorrectionResult


class CorrectionService(ABC):
    """Abstract base class for LLM correction backends."""

    @abstractmethod
    def ensure_configured(self) -> None:
        """
        Checks that the backend has its credentials, without any network call.

        Raises:
            ConfigurationError: If a required credential is missing.
        """

    @abstractmethod
    def correct(self, prompt: str) -> CorrectionResult:
        """
        Sends a fully built correction prompt to the model.

        Args:
            prompt: System prompt, raw text, glossary and task instructions.

        Returns:
            CorrectionResult with the revised text and token usage.

        Raises:
            ProviderConnectionError: If the provider cannot be reached.
            ProviderTimeoutError: If the provider's HTTP timeout elapses.
            ProviderResponseError: If the provider reports a failure.
        """
