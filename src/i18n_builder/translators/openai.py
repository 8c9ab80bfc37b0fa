# SPDX-License-Identifier: Apache-2.0
"""OpenAI GPT translation backend."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping

from aiolimiter import AsyncLimiter

from i18n_builder.core.placeholders import same_variables
from i18n_builder.translators.base import (
    ApiError,
    AuthenticationFailed,
    ConfigurationError,
    InvalidResponse,
    NetworkError,
    NotSupported,
    RateLimitExceeded,
    TranslationError,
    TranslatorError,
    sorted_items,
)
from i18n_builder.translators.locales import language_name

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a professional translator specializing in UI/UX text. "
    "Translate each entry accurately while preserving the original meaning, "
    "tone, and formatting. Return only the translations without any explanations."
)

PLACEHOLDER_RULES = (
    "CRITICAL REQUIREMENTS:\n"
    "1. Return every entry with its key unchanged.\n"
    "2. PRESERVE ALL PLACEHOLDERS EXACTLY: {{count}}, %{count}, {count}.\n"
    "3. Do NOT translate placeholder names; translate only the surrounding text.\n"
    'Example: "{{count}} items" in French -> "{{count}} éléments"'
)


class OpenAITranslator:
    """OpenAI GPT translation backend (Tier 4, generative fallback).

    This backend uses OpenAI's GPT models with Structured Outputs. Each
    returned entry echoes the key it answers, so results are mapped by
    key rather than by position and unknown keys are dropped.

    Attributes:
        name: Backend identifier ("openai").
    """

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_CHUNK_SIZE = 15
    DEFAULT_TIMEOUT = 60.0
    DEFAULT_RATE_LIMIT = 5

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        system_prompt: str | None = None,
        *,
        source_locale: str = "en",
        timeout: float | None = None,
        batch_size: int | None = None,
        rate_limit_per_sec: int | None = None,
    ) -> None:
        """Initialize OpenAITranslator.

        Args:
            api_key: OpenAI API key.
            model: Model to use (default: DEFAULT_MODEL).
            system_prompt: Custom system prompt for translation.
            source_locale: Source language of the catalogs.
            timeout: Request timeout in seconds.
            batch_size: Entries per request.
            rate_limit_per_sec: Request ceiling shared by all tasks.

        Raises:
            ConfigurationError: If API key is not provided.
            ImportError: If openai package is not installed.
        """
        if not api_key:
            raise ConfigurationError("OpenAI API key is required")

        # Lazy import openai and pydantic
        try:
            from openai import AsyncOpenAI as _AsyncOpenAI

            self._AsyncOpenAI = _AsyncOpenAI
        except ImportError:
            raise ImportError(
                "openai is required for OpenAI backend. "
                "Install with: pip install i18n-builder[openai]"
            ) from None

        try:
            from pydantic import BaseModel as _BaseModel

            # Create the response model classes here
            class KeyedTranslation(_BaseModel):
                key: str
                text: str

            class TranslationResult(_BaseModel):
                translations: list[KeyedTranslation]

            self._TranslationResult = TranslationResult
        except ImportError:
            raise ImportError(
                "pydantic is required for OpenAI backend. "
                "Install with: pip install i18n-builder[openai]"
            ) from None

        self._api_key = api_key
        self._model = model or self.DEFAULT_MODEL
        self._system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT
        self._source_locale = source_locale
        self._timeout = timeout or self.DEFAULT_TIMEOUT
        self._chunk_size = max(1, batch_size or self.DEFAULT_CHUNK_SIZE)
        self._limiter = AsyncLimiter(
            max_rate=rate_limit_per_sec or self.DEFAULT_RATE_LIMIT, time_period=1.0
        )
        self._client: AsyncOpenAI | None = None

    @property
    def name(self) -> str:
        """Return backend name."""
        return "openai"

    @property
    def tier(self) -> int:
        """Return default priority."""
        return 4

    def _ensure_client(self) -> AsyncOpenAI:
        """Ensure OpenAI client exists.

        Retries are left to the fallback router.

        Returns:
            Active OpenAI async client.
        """
        if self._client is None:
            self._client = self._AsyncOpenAI(
                api_key=self._api_key, timeout=self._timeout, max_retries=0
            )
        return self._client

    async def translate_batch(
        self,
        items: Mapping[str, str],
        target_locale: str,
    ) -> dict[str, str]:
        """Translate keyed texts in chunks using Structured Outputs.

        Args:
            items: Mapping of key to source text.
            target_locale: Target locale code.

        Returns:
            Mapping of key to translated text. Entries the model skipped are
            absent.

        Raises:
            TranslatorError: If the first chunk fails.
        """
        if not items:
            return {}

        ordered = sorted_items(items)
        results: dict[str, str] = {}

        for start in range(0, len(ordered), self._chunk_size):
            chunk = dict(ordered[start : start + self._chunk_size])
            try:
                translated = await self._translate_with_structured_output(
                    chunk, target_locale
                )
            except TranslatorError as e:
                if not results:
                    raise
                logger.warning("OpenAI chunk failed after partial success: %s", e)
                break
            results.update(translated)

        return results

    async def _translate_with_structured_output(
        self,
        texts: dict[str, str],
        target_locale: str,
    ) -> dict[str, str]:
        """Translate one chunk of keyed texts.

        Raises:
            TranslatorError: On API failure or an unusable response.
        """
        client = self._ensure_client()

        source_name = language_name(self._source_locale)
        target_name = language_name(target_locale)

        user_content = (
            f"Translate the following {len(texts)} UI text(s) from {source_name} "
            f"to {target_name}.\n{PLACEHOLDER_RULES}\n\nEntries:\n"
        )
        for key, text in texts.items():
            user_content += f"- key: {key}\n  text: {text}\n"

        try:
            async with self._limiter:
                response = await client.chat.completions.parse(
                    model=self._model,
                    messages=[
                        {"role": "system", "content": self._system_prompt},
                        {"role": "user", "content": user_content},
                    ],
                    response_format=self._TranslationResult,
                    temperature=0.3,
                )
        except self._get_openai_errors() as e:
            raise self._map_openai_error(e) from e
        except ValueError as e:
            # pydantic rejected the structured output
            raise InvalidResponse(f"OpenAI response did not match schema: {e}") from e

        result = response.choices[0].message.parsed
        if result is None:
            raise InvalidResponse("OpenAI returned empty response")

        translations: dict[str, str] = {}
        for entry in result.translations:
            if entry.key not in texts:
                logger.debug("OpenAI returned unknown key '%s'", entry.key)
                continue
            if not same_variables(texts[entry.key], entry.text):
                logger.warning(
                    "Placeholder mismatch in key '%s': %r -> %r",
                    entry.key,
                    texts[entry.key],
                    entry.text,
                )
            translations[entry.key] = entry.text
        return translations

    def _get_openai_errors(self) -> tuple[type[Exception], ...]:
        """Get OpenAI exception types for error handling.

        Catches OpenAIError (base class) to handle all API errors including:
        - AuthenticationError
        - RateLimitError
        - BadRequestError
        - APIConnectionError
        - APITimeoutError

        Returns:
            Tuple of exception types to catch.
        """
        from openai import OpenAIError

        return (OpenAIError,)

    def _map_openai_error(self, error: Any) -> TranslatorError:
        """Map an OpenAI SDK error onto the provider error taxonomy.

        Args:
            error: The caught exception.

        Returns:
            Error instance to raise.
        """
        from openai import (
            APIConnectionError,
            APIStatusError,
            AuthenticationError,
            NotFoundError,
            PermissionDeniedError,
            RateLimitError,
        )

        if isinstance(error, (AuthenticationError, PermissionDeniedError)):
            return AuthenticationFailed("Invalid OpenAI API key")
        if isinstance(error, RateLimitError):
            return RateLimitExceeded("OpenAI rate limit exceeded, please retry later")
        if isinstance(error, NotFoundError):
            # NotFoundError is raised when model is not found
            return NotSupported(f"Model '{self._model}' is not available")
        if isinstance(error, APIConnectionError):
            # Includes APITimeoutError
            return NetworkError(f"OpenAI request failed: {error}")
        if isinstance(error, APIStatusError):
            return ApiError(error.status_code, str(error))
        return TranslationError(f"OpenAI API error: {error}")

    async def validate_credentials(self) -> None:
        """List models; a rejected key raises AuthenticationFailed."""
        client = self._ensure_client()
        try:
            await client.models.list()
        except self._get_openai_errors() as e:
            raise self._map_openai_error(e) from e

    async def close(self) -> None:
        """Close the OpenAI client."""
        if self._client:
            await self._client.close()
            self._client = None
