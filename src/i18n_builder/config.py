# SPDX-License-Identifier: Apache-2.0
"""Configuration for the translation engine.

Values are plain data: the engine never reads the environment. The CLI
layer loads ``.i18n-builder.yaml``, injects API keys from the environment
and applies per-run overrides.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Iterable

import yaml

from i18n_builder.translators.base import ConfigurationError
from i18n_builder.translators.locales import DEEPL_LANGUAGES, GOOGLE_PREFERRED

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".i18n-builder.yaml"

PROVIDER_NAMES: tuple[str, ...] = ("systran", "deepl", "google", "openai")

STRATEGIES: tuple[str, ...] = ("priority", "smart")


@dataclass
class ProviderSettings:
    """Per-provider settings.

    Attributes:
        enabled: Whether the provider may be used at all.
        api_key: Credential (injected by the CLI layer).
        api_url: Optional endpoint override.
        timeout: Request timeout in seconds.
        max_retries: Attempts per tier for transient failures.
        batch_size: Entries per outgoing request.
        rate_limit_per_sec: Request ceiling shared across tasks.
        retry_delay: Initial backoff in seconds.
        max_delay: Backoff cap in seconds.
        backoff_multiplier: Backoff growth factor.
        preferred_locales: Locales this provider is tried first for ("smart").
        model: Model name for generative providers.
    """

    enabled: bool = True
    api_key: str | None = None
    api_url: str | None = None
    timeout: float = 30.0
    max_retries: int = 3
    batch_size: int = 50
    rate_limit_per_sec: int = 10
    retry_delay: float = 1.0
    max_delay: float = 30.0
    backoff_multiplier: float = 2.0
    preferred_locales: list[str] = field(default_factory=list)
    model: str | None = None


@dataclass
class FallbackSettings:
    """Fallback router behaviour.

    Attributes:
        strategy: "priority" (fixed tier order) or "smart" (locale-aware).
        no_fallback: Use only the first tier.
        skip_on_missing_key: Skip providers without credentials instead of failing.
        verify_credentials: Check every provider's credentials before a run.
    """

    strategy: str = "smart"
    no_fallback: bool = False
    skip_on_missing_key: bool = True
    verify_credentials: bool = False


def _default_providers() -> dict[str, ProviderSettings]:
    return {
        "systran": ProviderSettings(rate_limit_per_sec=100),
        "deepl": ProviderSettings(preferred_locales=sorted(DEEPL_LANGUAGES)),
        "google": ProviderSettings(
            rate_limit_per_sec=10, preferred_locales=sorted(GOOGLE_PREFERRED)
        ),
        "openai": ProviderSettings(timeout=60.0, batch_size=15, rate_limit_per_sec=5),
    }


@dataclass
class TranslationConfig:
    """Engine configuration.

    Attributes:
        translation_dir: Root holding one directory per locale.
        source_locale: Locale the catalogs are written in.
        cache_dir: Persistent translation cache location.
        format: Catalog format ("json" or "yaml").
        batch_size: Keys per router call within a namespace.
        max_concurrency: Namespace batches translated concurrently.
        min_coverage: Coverage floor in percent; below it is a hard error.
        providers: Settings per provider name.
        fallback: Router behaviour.
    """

    translation_dir: Path = Path("frontend/public/locales")
    source_locale: str = "en"
    cache_dir: Path = Path(".i18n-cache")
    format: str = "json"
    batch_size: int = 50
    max_concurrency: int = 4
    min_coverage: float | None = None
    providers: dict[str, ProviderSettings] = field(default_factory=_default_providers)
    fallback: FallbackSettings = field(default_factory=FallbackSettings)

    API_KEY_ENV_VARS: ClassVar[dict[str, str]] = {
        "systran": "SYSTRAN_API_KEY",
        "deepl": "DEEPL_API_KEY",
        "google": "GOOGLE_API_KEY",
        "openai": "OPENAI_API_KEY",
    }

    def provider(self, name: str) -> ProviderSettings:
        """Return settings for a provider, creating defaults if absent."""
        if name not in self.providers:
            self.providers[name] = ProviderSettings()
        return self.providers[name]


def load_config(path: Path | str | None = None) -> TranslationConfig:
    """Load configuration from a YAML file.

    Args:
        path: Config file (default: ``.i18n-builder.yaml`` in the working dir).

    Returns:
        Parsed configuration; defaults if the file does not exist.

    Raises:
        ConfigurationError: If the file is malformed.
    """
    config_path = Path(path) if path is not None else Path(DEFAULT_CONFIG_FILE)
    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return TranslationConfig()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read config {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {config_path} must be a mapping")
    return config_from_dict(data)


def config_from_dict(data: dict[str, Any]) -> TranslationConfig:
    """Build a configuration from decoded YAML.

    Raises:
        ConfigurationError: On unknown keys or invalid values.
    """
    data = dict(data)
    translation = data.pop("translation", None) or {}
    if not isinstance(translation, dict):
        raise ConfigurationError("'translation' must be a mapping")
    merged = {**data, **translation}

    providers_data = merged.pop("providers", None) or {}
    fallback_data = merged.pop("fallback", None) or {}

    config = TranslationConfig()
    for key, value in merged.items():
        _assign(config, key, value, "config")

    for name, values in providers_data.items():
        if name not in PROVIDER_NAMES:
            raise ConfigurationError(f"Unknown provider '{name}'")
        if not isinstance(values, dict):
            raise ConfigurationError(f"providers.{name} must be a mapping")
        settings = config.provider(name)
        for key, value in values.items():
            _assign(settings, key, value, f"providers.{name}")

    for key, value in fallback_data.items():
        _assign(config.fallback, key, value, "fallback")

    validate_config(config)
    return config


def validate_config(config: TranslationConfig) -> None:
    """Raise ConfigurationError for values the engine cannot work with."""
    if config.fallback.strategy not in STRATEGIES:
        raise ConfigurationError(
            f"Unknown fallback strategy '{config.fallback.strategy}' "
            f"(expected one of: {', '.join(STRATEGIES)})"
        )
    if config.batch_size < 1:
        raise ConfigurationError("batch_size must be at least 1")
    if config.max_concurrency < 1:
        raise ConfigurationError("max_concurrency must be at least 1")
    if config.min_coverage is not None and not 0 <= config.min_coverage <= 100:
        raise ConfigurationError("min_coverage must be between 0 and 100")
    for name, settings in config.providers.items():
        if settings.max_retries < 1:
            raise ConfigurationError(f"providers.{name}.max_retries must be at least 1")


def apply_overrides(
    config: TranslationConfig,
    *,
    timeout: float | None = None,
    batch_size: int | None = None,
    max_retries: int | None = None,
    disabled_providers: Iterable[str] = (),
    no_fallback: bool = False,
    strategy: str | None = None,
) -> TranslationConfig:
    """Return a copy of the configuration with per-run overrides applied."""
    providers = {
        name: dataclasses.replace(settings, preferred_locales=list(settings.preferred_locales))
        for name, settings in config.providers.items()
    }
    fallback = dataclasses.replace(config.fallback)
    updated = dataclasses.replace(config, providers=providers, fallback=fallback)

    if timeout is not None:
        for settings in providers.values():
            settings.timeout = timeout
    if batch_size is not None:
        updated.batch_size = batch_size
        for settings in providers.values():
            settings.batch_size = batch_size
    if max_retries is not None:
        for settings in providers.values():
            settings.max_retries = max_retries
    for name in disabled_providers:
        key = name.lower()
        if key not in PROVIDER_NAMES:
            raise ConfigurationError(f"Unknown provider '{name}'")
        updated.provider(key).enabled = False
    if no_fallback:
        fallback.no_fallback = True
    if strategy is not None:
        fallback.strategy = strategy

    validate_config(updated)
    return updated


def _assign(target: Any, key: str, value: Any, section: str) -> None:
    fields = {f.name: f for f in dataclasses.fields(target)}
    if key not in fields:
        raise ConfigurationError(f"Unknown setting '{section}.{key}'")
    if key in ("translation_dir", "cache_dir") and value is not None:
        value = Path(value)
    setattr(target, key, value)
