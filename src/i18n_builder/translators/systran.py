# SPDX-License-Identifier: Apache-2.0
"""Systran translation backend."""

from __future__ import annotations

import logging
from typing import Any

from i18n_builder.translators.base import ArrayLengthMismatchError, InvalidResponse
from i18n_builder.translators.http import HttpTranslator
from i18n_builder.translators.locales import primary_language

logger = logging.getLogger(__name__)


class SystranTranslator(HttpTranslator):
    """Systran translation backend (Tier 1, enterprise quality).

    Responses are positional (``outputs[i]`` answers ``input[i]``). An
    output carrying an ``error`` field instead of a translation is dropped,
    so a request can succeed partially.

    Attributes:
        name: Backend identifier ("systran").
    """

    display_name = "Systran"
    DEFAULT_API_URL = "https://api-translate.systran.net"
    DEFAULT_BATCH_SIZE = 50
    DEFAULT_RATE_LIMIT = 100

    def __init__(
        self,
        api_key: str,
        api_url: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize SystranTranslator.

        Args:
            api_key: Systran API key.
            api_url: API base URL.
            **kwargs: source_locale, timeout, batch_size, rate_limit_per_sec.

        Raises:
            ConfigurationError: If API key is not provided.
        """
        super().__init__(api_key, **kwargs)
        self._api_url = (api_url or self.DEFAULT_API_URL).rstrip("/")

    @property
    def name(self) -> str:
        """Return backend name."""
        return "systran"

    @property
    def tier(self) -> int:
        """Return default priority."""
        return 1

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Key {self._api_key}"}

    async def _translate_chunk(
        self, texts: list[str], target_locale: str
    ) -> list[str | None]:
        payload = {
            "input": texts,
            "source": primary_language(self._source_locale),
            "target": primary_language(target_locale),
        }
        data = await self._request_json(
            "POST",
            f"{self._api_url}/translation/text/translate",
            headers=self._headers(),
            payload=payload,
        )
        try:
            outputs = data["outputs"]
        except (KeyError, TypeError) as e:
            raise InvalidResponse(f"Systran response missing outputs: {e}") from e

        if len(outputs) != len(texts):
            raise ArrayLengthMismatchError(expected=len(texts), actual=len(outputs))

        results: list[str | None] = []
        for index, output in enumerate(outputs):
            if isinstance(output, dict) and isinstance(output.get("output"), str):
                results.append(output["output"])
            else:
                error = output.get("error") if isinstance(output, dict) else output
                logger.debug("Systran output %d rejected: %s", index, error)
                results.append(None)
        return results

    async def validate_credentials(self) -> None:
        """List supported languages; a rejected key raises AuthenticationFailed."""
        await self._request_json(
            "GET",
            f"{self._api_url}/translation/supportedLanguages",
            headers=self._headers(),
        )
