# SPDX-License-Identifier: Apache-2.0
"""DeepL translation backend."""

from __future__ import annotations

from typing import Any

from i18n_builder.translators.base import (
    ArrayLengthMismatchError,
    InvalidResponse,
    NotSupported,
)
from i18n_builder.translators.http import HttpTranslator
from i18n_builder.translators.locales import (
    DEEPL_LANGUAGES,
    deepl_target_code,
    primary_language,
)


class DeepLTranslator(HttpTranslator):
    """DeepL translation backend (Tier 2).

    This backend uses DeepL API for high-quality translation of European
    and CJK languages. Requires an API key (free or pro); free keys end
    with ``:fx`` and are routed to the free endpoint.

    Supports batch translation with multiple texts in a single request.
    The response is positional: ``translations[i]`` belongs to ``text[i]``.

    Attributes:
        name: Backend identifier ("deepl").
    """

    display_name = "DeepL"
    FREE_API_URL = "https://api-free.deepl.com/v2"
    PRO_API_URL = "https://api.deepl.com/v2"
    DEFAULT_BATCH_SIZE = 50
    DEFAULT_RATE_LIMIT = 10

    def __init__(
        self,
        api_key: str,
        api_url: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize DeepLTranslator.

        Args:
            api_key: DeepL API key.
            api_url: API base URL (default: chosen from the key type).
            **kwargs: source_locale, timeout, batch_size, rate_limit_per_sec.

        Raises:
            ConfigurationError: If API key is not provided.
        """
        super().__init__(api_key, **kwargs)
        default_url = self.FREE_API_URL if api_key.endswith(":fx") else self.PRO_API_URL
        self._api_url = (api_url or default_url).rstrip("/")

    @property
    def name(self) -> str:
        """Return backend name."""
        return "deepl"

    @property
    def tier(self) -> int:
        """Return default priority."""
        return 2

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"DeepL-Auth-Key {self._api_key}"}

    def _check_locale(self, target_locale: str) -> None:
        if primary_language(target_locale) not in DEEPL_LANGUAGES:
            raise NotSupported(f"DeepL does not support target locale '{target_locale}'")

    async def _translate_chunk(
        self, texts: list[str], target_locale: str
    ) -> list[str | None]:
        payload = {
            "text": texts,
            "target_lang": deepl_target_code(target_locale),
            "source_lang": primary_language(self._source_locale).upper(),
        }
        data = await self._request_json(
            "POST", f"{self._api_url}/translate", headers=self._headers(), payload=payload
        )
        try:
            translations = [t["text"] for t in data["translations"]]
        except (KeyError, TypeError) as e:
            raise InvalidResponse(f"DeepL response missing translations: {e}") from e

        # Validate response length matches input
        if len(translations) != len(texts):
            raise ArrayLengthMismatchError(expected=len(texts), actual=len(translations))
        return list(translations)

    async def validate_credentials(self) -> None:
        """Query the usage endpoint; a rejected key raises AuthenticationFailed."""
        await self._request_json("GET", f"{self._api_url}/usage", headers=self._headers())
