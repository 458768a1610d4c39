"""Gemini implementation of the CorrectionService interface."""

import httpx
from google import genai
from google.genai import errors as genai_errors

from stenopro.domain.models import CorrectionResult
from stenopro.exceptions import (
    ConfigurationError,
    ProviderConnectionError,
    ProviderResponseError,
    ProviderTimeoutError,
)
from stenopro.logging import setup_logging

from .interfaces import CorrectionService

logger = setup_logging()

PROVIDER = "Gemini"


class GeminiCorrector(CorrectionService):
    """Transcript correction using Google Gemini."""

    def __init__(
        self,
        client: genai.Client | None,
        model_name: str,
        temperature: float = 0.1,
        max_output_tokens: int = 16000,
    ):
        self._client = client
        self._model_name = model_name
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens

    def ensure_configured(self) -> None:
        if self._client is None:
            raise ConfigurationError("GEMINI_API_KEY")

    def correct(self, prompt: str) -> CorrectionResult:
        """
        Sends the correction prompt to Gemini.

        Args:
            prompt: The fully built correction prompt.

        Returns:
            CorrectionResult with the revised text and token counts.

        Raises:
            ProviderTimeoutError: If the HTTP request times out.
            ProviderConnectionError: If Gemini cannot be reached.
            ProviderResponseError: If Gemini returns an error or no text.
        """
        self.ensure_configured()
        logger.info(
            "Sending correction request",
            extra={"model": self._model_name, "prompt_characters": len(prompt)},
        )

        try:
            response = self._client.models.generate_content(
                model=self._model_name,
                contents=prompt,
                config={
                    "temperature": self._temperature,
                    "max_output_tokens": self._max_output_tokens,
                },
            )
        except httpx.TimeoutException as e:
            logger.exception("Gemini request timed out")
            raise ProviderTimeoutError(PROVIDER, cause=e) from e
        except httpx.TransportError as e:
            logger.exception("Gemini unreachable")
            raise ProviderConnectionError(PROVIDER, e) from e
        except genai_errors.APIError as e:
            logger.exception("Gemini API call failed", extra={"code": e.code})
            raise ProviderResponseError(PROVIDER, f"{e.code} {e.message}", e) from e
        except Exception as e:
            logger.exception("Gemini API call failed")
            raise ProviderResponseError(PROVIDER, str(e) or type(e).__name__, e) from e

        if not response.text:
            raise ProviderResponseError(PROVIDER, "Gemini returned empty response")

        usage = response.usage_metadata
        result = CorrectionResult(
            text=response.text,
            input_tokens=(usage.prompt_token_count or 0) if usage else 0,
            output_tokens=(usage.candidates_token_count or 0) if usage else 0,
        )

        logger.info(
            "Correction completed",
            extra={
                "characters": len(result.text),
                "input_tokens": result.input_tokens,
                "output_tokens": result.output_tokens,
            },
        )
        return result
