# SPDX-License-Identifier: Apache-2.0
"""Shared aiohttp plumbing for REST translation backends."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping

import aiohttp
from aiolimiter import AsyncLimiter

from i18n_builder.translators.base import (
    ConfigurationError,
    InvalidResponse,
    NetworkError,
    TranslatorError,
    error_for_status,
    sorted_items,
)

logger = logging.getLogger(__name__)


class HttpTranslator:
    """Base class for backends that talk JSON over HTTP.

    Subclasses implement ``_translate_chunk`` for one positional request.
    The session is created lazily and the request rate is throttled by an
    ``AsyncLimiter`` shared by every task using this instance.
    """

    display_name = "HTTP"
    DEFAULT_TIMEOUT = 30.0
    DEFAULT_BATCH_SIZE = 50
    DEFAULT_RATE_LIMIT = 10

    def __init__(
        self,
        api_key: str,
        *,
        source_locale: str = "en",
        timeout: float | None = None,
        batch_size: int | None = None,
        rate_limit_per_sec: int | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError(f"{self.display_name} API key is required")

        self._api_key = api_key
        self._source_locale = source_locale
        self._timeout = timeout or self.DEFAULT_TIMEOUT
        self._batch_size = max(1, batch_size or self.DEFAULT_BATCH_SIZE)
        self._limiter = AsyncLimiter(
            max_rate=rate_limit_per_sec or self.DEFAULT_RATE_LIMIT, time_period=1.0
        )
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> HttpTranslator:
        """Enter async context manager."""
        await self._ensure_session()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context manager."""
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session exists.

        Returns:
            Active aiohttp session.
        """
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers={"User-Agent": "i18n-builder/0.1"},
            )
        return self._session

    async def translate_batch(
        self,
        items: Mapping[str, str],
        target_locale: str,
    ) -> dict[str, str]:
        """Translate keyed texts in chunks of at most ``batch_size``.

        A failure after at least one chunk succeeded returns the partial
        result; the caller treats the missing keys as untranslated.

        Raises:
            TranslatorError: If the first chunk fails.
        """
        if not items:
            return {}

        self._check_locale(target_locale)
        ordered = sorted_items(items)
        results: dict[str, str] = {}

        for start in range(0, len(ordered), self._batch_size):
            chunk = ordered[start : start + self._batch_size]
            keys = [key for key, _ in chunk]
            texts = [text for _, text in chunk]
            try:
                translated = await self._translate_chunk(texts, target_locale)
            except TranslatorError as e:
                if not results:
                    raise
                logger.warning(
                    "%s chunk %d failed after partial success: %s",
                    self.display_name,
                    start // self._batch_size + 1,
                    e,
                )
                break
            for key, text in zip(keys, translated):
                if text is not None:
                    results[key] = text

        return results

    def _check_locale(self, target_locale: str) -> None:
        """Raise NotSupported for locales the backend cannot serve."""

    async def _translate_chunk(
        self, texts: list[str], target_locale: str
    ) -> list[str | None]:
        raise NotImplementedError

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        payload: Any = None,
    ) -> Any:
        """Send one throttled request and decode the JSON body.

        Raises:
            NetworkError: On connection failure or timeout.
            InvalidResponse: On a non-JSON body.
            TranslatorError: On non-2xx statuses.
        """
        session = await self._ensure_session()
        async with self._limiter:
            try:
                async with session.request(
                    method, url, headers=headers, json=payload
                ) as response:
                    body = await response.text()
                    if response.status >= 400:
                        raise error_for_status(
                            self.display_name,
                            response.status,
                            body,
                            response.headers.get("Retry-After"),
                        )
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise NetworkError(f"{self.display_name} request failed: {e}") from e

        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise InvalidResponse(
                f"{self.display_name} returned malformed JSON: {e}"
            ) from e

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
