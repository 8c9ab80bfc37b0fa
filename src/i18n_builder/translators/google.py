# SPDX-License-Identifier: Apache-2.0
"""Google Translate backend using deep-translator."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping

from aiolimiter import AsyncLimiter
from deep_translator import GoogleTranslator as DeepGoogleTranslator  # type: ignore[import-untyped]
from deep_translator import exceptions as dt_exceptions  # type: ignore[import-untyped]

from i18n_builder.translators.base import (
    NetworkError,
    NotSupported,
    RateLimitExceeded,
    TranslationError,
    TranslatorError,
    sorted_items,
)
from i18n_builder.translators.locales import primary_language

logger = logging.getLogger(__name__)


class GoogleTranslator:
    """Google Translate backend (Tier 3).

    This backend uses Google Translate via deep-translator library.
    No API key is required (uses free web API). Each text is translated
    in a worker thread; texts that fail individually are left out of the
    result while the rest of the batch succeeds.

    Attributes:
        name: Backend identifier ("google").
    """

    def __init__(
        self,
        *,
        source_locale: str = "en",
        max_concurrent: int = 5,
        rate_limit_per_sec: int = 10,
        timeout: float = 30.0,
    ) -> None:
        """Initialize GoogleTranslator.

        Args:
            source_locale: Source language of the catalogs.
            max_concurrent: Maximum concurrent translation requests.
            rate_limit_per_sec: Request ceiling shared by all tasks.
            timeout: Seconds allowed for each text.
        """
        self._source_locale = source_locale
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._limiter = AsyncLimiter(max_rate=rate_limit_per_sec, time_period=1.0)
        self._timeout = timeout

    @property
    def name(self) -> str:
        """Return backend name."""
        return "google"

    @property
    def tier(self) -> int:
        """Return default priority."""
        return 3

    async def translate_batch(
        self,
        items: Mapping[str, str],
        target_locale: str,
    ) -> dict[str, str]:
        """Translate keyed texts using parallel execution.

        Args:
            items: Mapping of key to source text.
            target_locale: Target locale code.

        Returns:
            Mapping of key to translated text (possibly partial).

        Raises:
            TranslatorError: If every text failed, or the locale is unsupported.
        """
        if not items:
            return {}

        ordered = sorted_items(items)
        outcomes = await asyncio.gather(
            *(self._translate_one(text, target_locale) for _, text in ordered),
            return_exceptions=True,
        )

        results: dict[str, str] = {}
        errors: list[BaseException] = []
        for (key, _), outcome in zip(ordered, outcomes):
            if isinstance(outcome, str):
                results[key] = outcome
            elif isinstance(outcome, TranslatorError):
                logger.debug("Google failed for '%s': %s", key, outcome)
                errors.append(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome

        if not results and errors:
            raise errors[0]
        return results

    async def _translate_one(self, text: str, target_locale: str) -> str:
        # Early return for empty or whitespace-only text
        if not text or not text.strip():
            return text

        async with self._semaphore, self._limiter:
            try:
                return await asyncio.wait_for(
                    asyncio.to_thread(self._translate_sync, text, target_locale),
                    timeout=self._timeout,
                )
            except asyncio.TimeoutError as e:
                raise NetworkError(f"Google timed out after {self._timeout}s") from e

    def _translate_sync(self, text: str, target_locale: str) -> str:
        """Synchronous translation implementation.

        Raises:
            TranslatorError: On translation failure.
        """
        try:
            translator = DeepGoogleTranslator(
                source=primary_language(self._source_locale),
                target=_google_target(target_locale),
            )
            result = translator.translate(text)
        except (
            dt_exceptions.LanguageNotSupportedException,
            dt_exceptions.InvalidSourceOrTargetLanguage,
        ) as e:
            raise NotSupported(f"Google does not support '{target_locale}': {e}") from e
        except dt_exceptions.TooManyRequests as e:
            raise RateLimitExceeded(f"Google rate limit exceeded: {e}") from e
        except dt_exceptions.RequestError as e:
            raise NetworkError(f"Google request failed: {e}") from e
        except Exception as e:
            raise TranslationError(f"Google Translate failed: {e}") from e
        if result is None:
            raise TranslationError("Google Translate returned no text")
        return str(result)

    async def validate_credentials(self) -> None:
        """No credentials are needed for the web API."""

    async def close(self) -> None:
        """Nothing to release."""


def _google_target(locale: str) -> str:
    language = primary_language(locale)
    if language == "zh":
        # Google needs the script variant for Chinese.
        region = locale.replace("_", "-").upper()
        return "zh-TW" if region.endswith(("-TW", "-HK", "-HANT")) else "zh-CN"
    return language
