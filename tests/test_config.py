# SPDX-License-Identifier: Apache-2.0
"""Tests for configuration loading and overrides."""

from __future__ import annotations

from pathlib import Path

import pytest

from i18n_builder.config import (
    PROVIDER_NAMES,
    ProviderSettings,
    TranslationConfig,
    apply_overrides,
    config_from_dict,
    load_config,
    validate_config,
)
from i18n_builder.translators.base import ConfigurationError


class TestDefaults:
    """Tests for default values."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        config = TranslationConfig()

        assert config.source_locale == "en"
        assert config.format == "json"
        assert config.batch_size == 50
        assert config.min_coverage is None
        assert config.fallback.strategy == "smart"
        assert config.fallback.skip_on_missing_key is True
        assert set(config.providers) == set(PROVIDER_NAMES)

    def test_provider_defaults(self) -> None:
        """Provider defaults differ per tier."""
        config = TranslationConfig()

        assert config.providers["openai"].timeout == 60.0
        assert config.providers["openai"].batch_size == 15
        assert "fi" in config.providers["deepl"].preferred_locales
        assert "ar" in config.providers["google"].preferred_locales
        assert config.providers["systran"].preferred_locales == []

    def test_instances_do_not_share_state(self) -> None:
        """Mutable defaults are per instance."""
        first = TranslationConfig()
        second = TranslationConfig()
        first.providers["deepl"].api_key = "key"
        assert second.providers["deepl"].api_key is None

    def test_provider_creates_defaults(self) -> None:
        """provider() returns default settings for unknown names."""
        config = TranslationConfig()
        assert config.provider("custom") == ProviderSettings()
        assert "custom" in config.providers


class TestLoadConfig:
    """Tests for YAML loading."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file yields defaults."""
        assert load_config(tmp_path / "absent.yaml") == TranslationConfig()

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file yields defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == TranslationConfig()

    def test_full_file(self, tmp_path: Path) -> None:
        """Top-level, provider and fallback sections are applied."""
        path = tmp_path / "config.yaml"
        path.write_text(
            """
translation_dir: public/locales
source_locale: en
format: yaml
min_coverage: 95
providers:
  deepl:
    api_key: secret
    timeout: 10
    preferred_locales: [de, fi]
  openai:
    enabled: false
    model: gpt-4o
fallback:
  strategy: priority
  skip_on_missing_key: false
""",
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.translation_dir == Path("public/locales")
        assert config.format == "yaml"
        assert config.min_coverage == 95
        assert config.providers["deepl"].api_key == "secret"
        assert config.providers["deepl"].timeout == 10
        assert config.providers["deepl"].preferred_locales == ["de", "fi"]
        assert config.providers["openai"].enabled is False
        assert config.providers["openai"].model == "gpt-4o"
        assert config.providers["systran"] == TranslationConfig().providers["systran"]
        assert config.fallback.strategy == "priority"
        assert config.fallback.skip_on_missing_key is False

    def test_translation_section(self) -> None:
        """Settings may be nested under a translation section."""
        config = config_from_dict(
            {"translation": {"batch_size": 20, "providers": {"google": {"enabled": False}}}}
        )
        assert config.batch_size == 20
        assert config.providers["google"].enabled is False

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        """Unparseable YAML is a configuration error."""
        path = tmp_path / "config.yaml"
        path.write_text("providers: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        """A top-level list is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(path)

    @pytest.mark.parametrize(
        "data",
        [
            {"unknown_setting": 1},
            {"providers": {"bing": {}}},
            {"providers": {"deepl": {"colour": "blue"}}},
            {"providers": {"deepl": "key"}},
            {"fallback": {"strategy": "random"}},
            {"batch_size": 0},
            {"min_coverage": 120},
            {"providers": {"deepl": {"max_retries": 0}}},
            {"translation": ["not", "a", "mapping"]},
        ],
    )
    def test_invalid_values(self, data: dict) -> None:
        """Unknown keys and out-of-range values are rejected."""
        with pytest.raises(ConfigurationError):
            config_from_dict(data)


class TestValidateConfig:
    """Tests for validate_config."""

    def test_valid_defaults(self) -> None:
        """Defaults are valid."""
        validate_config(TranslationConfig())

    def test_invalid_concurrency(self) -> None:
        """max_concurrency must be positive."""
        config = TranslationConfig(max_concurrency=0)
        with pytest.raises(ConfigurationError):
            validate_config(config)


class TestApplyOverrides:
    """Tests for per-run overrides."""

    def test_overrides_apply_to_every_provider(self) -> None:
        """Timeout, batch size and retries override every provider."""
        config = apply_overrides(TranslationConfig(), timeout=5.0, batch_size=10, max_retries=2)

        assert config.batch_size == 10
        for settings in config.providers.values():
            assert settings.timeout == 5.0
            assert settings.batch_size == 10
            assert settings.max_retries == 2

    def test_original_untouched(self) -> None:
        """Overrides return a copy."""
        original = TranslationConfig()

        updated = apply_overrides(
            original,
            timeout=1.0,
            disabled_providers=["deepl"],
            no_fallback=True,
            strategy="priority",
        )

        assert updated.providers["deepl"].enabled is False
        assert updated.fallback.no_fallback is True
        assert updated.fallback.strategy == "priority"
        assert original.providers["deepl"].enabled is True
        assert original.providers["deepl"].timeout == 30.0
        assert original.fallback.no_fallback is False
        assert original.fallback.strategy == "smart"
        assert updated.providers["deepl"].preferred_locales is not original.providers[
            "deepl"
        ].preferred_locales

    def test_disable_is_case_insensitive(self) -> None:
        """Provider names are matched case-insensitively."""
        config = apply_overrides(TranslationConfig(), disabled_providers=["OpenAI"])
        assert config.providers["openai"].enabled is False

    def test_unknown_provider(self) -> None:
        """Disabling an unknown provider is an error."""
        with pytest.raises(ConfigurationError):
            apply_overrides(TranslationConfig(), disabled_providers=["bing"])

    def test_invalid_override(self) -> None:
        """Overrides are validated."""
        with pytest.raises(ConfigurationError):
            apply_overrides(TranslationConfig(), max_retries=0)
