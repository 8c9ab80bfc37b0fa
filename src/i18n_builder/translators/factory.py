# SPDX-License-Identifier: Apache-2.0
"""Provider construction from configuration."""

from __future__ import annotations

import logging

from i18n_builder.config import PROVIDER_NAMES, ProviderSettings, TranslationConfig
from i18n_builder.translators.base import ConfigurationError, TranslatorBackend

logger = logging.getLogger(__name__)


def build_providers(config: TranslationConfig) -> list[TranslatorBackend]:
    """Create every enabled provider whose credentials are configured.

    Providers are returned in tier order (Systran, DeepL, Google, OpenAI).

    Args:
        config: Engine configuration with API keys already injected.

    Returns:
        Provider instances.

    Raises:
        ConfigurationError: If no provider is available, or a key is missing
            while ``fallback.skip_on_missing_key`` is off.
    """
    providers: list[TranslatorBackend] = []

    for name in PROVIDER_NAMES:
        settings = config.providers.get(name)
        if settings is None or not settings.enabled:
            logger.info("%s skipped (disabled in config)", name)
            continue

        if name != "google" and not settings.api_key:
            if config.fallback.skip_on_missing_key:
                logger.info("%s skipped (no API key configured)", name)
                continue
            raise ConfigurationError(f"{name} is enabled but has no API key")

        try:
            provider = _create(name, settings, config.source_locale)
        except ImportError as e:
            logger.warning("%s initialization failed: %s", name, e)
            continue
        logger.info("%s translator initialized (Tier %d)", name, provider.tier)
        providers.append(provider)

    if not providers:
        raise ConfigurationError(
            "No translation providers available. Configure at least one API key."
        )
    return providers


def _create(
    name: str, settings: ProviderSettings, source_locale: str
) -> TranslatorBackend:
    common = {
        "source_locale": source_locale,
        "timeout": settings.timeout,
        "batch_size": settings.batch_size,
        "rate_limit_per_sec": settings.rate_limit_per_sec,
    }
    api_key = settings.api_key or ""

    if name == "systran":
        from i18n_builder.translators.systran import SystranTranslator

        return SystranTranslator(api_key, api_url=settings.api_url, **common)
    if name == "deepl":
        from i18n_builder.translators.deepl import DeepLTranslator

        return DeepLTranslator(api_key, api_url=settings.api_url, **common)
    if name == "google":
        from i18n_builder.translators.google import GoogleTranslator

        return GoogleTranslator(
            source_locale=source_locale,
            rate_limit_per_sec=settings.rate_limit_per_sec,
            timeout=settings.timeout,
        )
    if name == "openai":
        from i18n_builder.translators.openai import OpenAITranslator

        return OpenAITranslator(api_key, model=settings.model, **common)
    raise ConfigurationError(f"Unknown provider '{name}'")
