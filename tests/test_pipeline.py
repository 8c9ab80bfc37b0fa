# SPDX-License-Identifier: Apache-2.0
"""Tests for the translation pipeline module."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping
from unittest.mock import MagicMock

import pytest

from i18n_builder.cache import FileCache
from i18n_builder.config import TranslationConfig
from i18n_builder.core.models import PluralForms, copy_tree
from i18n_builder.pipeline import (
    CatalogStore,
    LoadError,
    PersistError,
    PipelineError,
    TranslationWorkflow,
    build_requests,
    find_missing_keys,
    merge_translations,
)
from i18n_builder.router import FallbackRouter
from i18n_builder.translators.base import NotSupported, TranslatorError
from i18n_builder.validation import DuplicateKey


class PrefixProvider:
    """Provider that prefixes every text and keeps placeholders intact."""

    def __init__(self, name: str = "fake", tier: int = 1, prefix: str = "FI ") -> None:
        self.name = name
        self.tier = tier
        self.prefix = prefix
        self.calls: list[dict[str, str]] = []
        self.error: TranslatorError | None = None

    async def translate_batch(self, items: Mapping[str, str], target_locale: str) -> dict[str, str]:
        self.calls.append(dict(items))
        if self.error is not None:
            raise self.error
        return {key: f"{self.prefix}{text}" for key, text in items.items()}

    async def validate_credentials(self) -> None:
        pass

    async def close(self) -> None:
        pass


SOURCE: dict[str, Any] = {
    "greeting": "Hello {{name}}",
    "items": {"one": "{{count}} item", "other": "{{count}} items"},
    "menu": {"open": "Open"},
}


def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def locales_dir(tmp_path: Path) -> Path:
    root = tmp_path / "locales"
    write_json(root / "en" / "common.json", SOURCE)
    write_json(root / "en" / "settings.json", {"title": "Settings"})
    write_json(root / "fi" / "common.json", {"menu": {"open": "Avaa"}})
    return root


@pytest.fixture
def config(tmp_path: Path, locales_dir: Path) -> TranslationConfig:
    config = TranslationConfig(translation_dir=locales_dir, cache_dir=tmp_path / "cache")
    config.fallback.strategy = "priority"
    return config


def make_workflow(
    config: TranslationConfig,
    provider: PrefixProvider,
    **kwargs: Any,
) -> TranslationWorkflow:
    router = FallbackRouter([provider], FileCache(config.cache_dir), config)
    return TranslationWorkflow(router, config, **kwargs)


class TestPipelineErrors:
    """Tests for pipeline error classes."""

    def test_pipeline_error(self) -> None:
        """Test PipelineError creation."""
        error = PipelineError("Test error", stage="test")

        assert str(error) == "[test] Test error"
        assert error.stage == "test"
        assert error.cause is None

    def test_pipeline_error_with_cause(self) -> None:
        """Test PipelineError with cause."""
        cause = ValueError("Original error")
        error = PipelineError("Wrapped error", stage="test", cause=cause)

        assert error.cause is cause
        assert "caused by ValueError: Original error" in str(error)

    def test_stage_errors(self) -> None:
        """Stage-specific errors carry their stage."""
        assert LoadError("x").stage == "load"
        assert PersistError("x").stage == "persist"
        assert isinstance(LoadError("x"), PipelineError)


class TestDiff:
    """Tests for tree diffing and merging."""

    def test_find_missing_keys(self) -> None:
        """Absent, empty and wrong-kind leaves need translation."""
        source = {"a": "A", "b": "B", "c": "C", "n": PluralForms(other="N")}
        target = {"a": "AA", "b": "", "n": "not a plural"}

        assert find_missing_keys(source, target) == ["b", "c", "n"]

    def test_force(self) -> None:
        """force returns every source leaf."""
        assert find_missing_keys({"a": "A", "b": {"c": "C"}}, {"a": "AA"}, force=True) == [
            "a",
            "b.c",
        ]

    def test_detect_untranslated(self) -> None:
        """Copies of the source text count as missing only when asked."""
        source = {"a": "Save", "b": "Open"}
        target = {"a": "Save", "b": "Avaa"}

        assert find_missing_keys(source, target) == []
        assert find_missing_keys(source, target, detect_untranslated=True) == ["a"]

    def test_build_requests(self) -> None:
        """Plurals expand into one item per populated form."""
        source = {
            "a": "A",
            "empty": "",
            "n": PluralForms(one="one N", other="N"),
        }

        items = build_requests(source, ["a", "empty", "n", "absent"])

        assert items == {"a": "A", "n.one": "one N", "n.other": "N"}

    def test_merge_translations(self) -> None:
        """Texts and plurals are written into the target tree."""
        source = {"menu": {"open": "Open"}, "n": PluralForms(one="one", other="many")}
        target: dict[str, Any] = {}

        written = merge_translations(
            target, source, {"menu.open": "Avaa", "n.one": "yksi", "n.other": "monta"}
        )

        assert written == ["menu.open", "n"]
        assert target == {"menu": {"open": "Avaa"}, "n": PluralForms(one="yksi", other="monta")}

    def test_dotted_keys_resolve(self) -> None:
        """Flat keys containing dots are matched as single keys."""
        tree = {"errors.notFound": "Not found", "menu": {"file.open": "Open"}}

        assert find_missing_keys(tree, copy_tree(tree)) == []
        assert find_missing_keys(tree, {"menu": {"file": {"open": "Avaa"}}}) == [
            "errors.notFound",
            "menu.file.open",
        ]
        assert build_requests(tree, ["errors.notFound"]) == {"errors.notFound": "Not found"}

    def test_merge_keeps_flat_dotted_keys(self) -> None:
        """Merged leaves keep the source's key structure."""
        source = {"errors.notFound": "Not found", "menu": {"file.open": "Open"}}
        target: dict[str, Any] = {}

        merge_translations(
            target, source, {"errors.notFound": "Ei löytynyt", "menu.file.open": "Avaa"}
        )

        assert target == {"errors.notFound": "Ei löytynyt", "menu": {"file.open": "Avaa"}}

    def test_merge_plural_requires_other(self) -> None:
        """A plural without a translated other form is not written."""
        source = {"n": PluralForms(one="one", other="many")}
        target: dict[str, Any] = {}

        assert merge_translations(target, source, {"n.one": "yksi"}) == []
        assert target == {}

    def test_merge_plural_keeps_existing_forms(self) -> None:
        """Untranslated categories keep the target's previous text."""
        source = {"n": PluralForms(one="one", other="many")}
        target: dict[str, Any] = {"n": PluralForms(one="yksi", other="")}

        merge_translations(target, source, {"n.other": "monta"})

        assert target["n"] == PluralForms(one="yksi", other="monta")


class TestCatalogStore:
    """Tests for on-disk catalog access."""

    def test_listing(self, locales_dir: Path) -> None:
        """Locales and namespaces are discovered from the directory tree."""
        store = CatalogStore(locales_dir)

        assert store.locales() == ["en", "fi"]
        assert store.namespaces("en") == ["common", "settings"]
        assert store.namespaces("sv") == []

    def test_load_missing_is_empty(self, locales_dir: Path) -> None:
        """An absent namespace file loads as an empty tree."""
        assert CatalogStore(locales_dir).load("fi", "settings") == {}

    def test_load_plural(self, locales_dir: Path) -> None:
        """Plural objects are parsed into PluralForms."""
        tree = CatalogStore(locales_dir).load("en", "common")
        assert tree["items"] == PluralForms(one="{{count}} item", other="{{count}} items")

    def test_load_error(self, locales_dir: Path) -> None:
        """Malformed files raise LoadError."""
        (locales_dir / "fi" / "broken.json").write_text("{", encoding="utf-8")

        with pytest.raises(LoadError) as exc_info:
            CatalogStore(locales_dir).load("fi", "broken")
        assert exc_info.value.stage == "load"

    def test_write_and_scan(self, locales_dir: Path) -> None:
        """Written files round-trip and expose their key stream."""
        store = CatalogStore(locales_dir)

        path = store.write("sv", "common", {"a": {"b": "B"}})

        assert path == locales_dir / "sv" / "common.json"
        assert store.load("sv", "common") == {"a": {"b": "B"}}
        assert store.scan_keys("sv", "common") == ["a.b"]
        assert store.scan_keys("sv", "absent") == []

    def test_write_error(self, tmp_path: Path) -> None:
        """Write failures raise PersistError."""
        blocker = tmp_path / "blocked"
        blocker.write_text("file, not a directory", encoding="utf-8")

        with pytest.raises(PersistError):
            CatalogStore(blocker).write("fi", "common", {"a": "A"})

    def test_yaml_store(self, tmp_path: Path) -> None:
        """The YAML format uses .yaml files."""
        store = CatalogStore(tmp_path, "yaml")

        store.write("fi", "common", {"a": "Ä"})

        assert (tmp_path / "fi" / "common.yaml").is_file()
        assert store.load("fi", "common") == {"a": "Ä"}


class TestTranslationWorkflow:
    """End-to-end workflow runs against a fake provider."""

    @pytest.mark.asyncio
    async def test_run_fills_missing_keys(self, config: TranslationConfig, locales_dir: Path) -> None:
        """Missing keys are translated, merged and written."""
        provider = PrefixProvider()
        report = await make_workflow(config, provider).run("fi")

        common = read_json(locales_dir / "fi" / "common.json")
        assert common == {
            "menu": {"open": "Avaa"},
            "greeting": "FI Hello {{name}}",
            "items": {"one": "FI {{count}} item", "other": "FI {{count}} items"},
        }
        assert read_json(locales_dir / "fi" / "settings.json") == {"title": "FI Settings"}
        assert report.persisted == ["common", "settings"]
        assert report.exit_code == 0
        assert report.untranslated == {}
        assert report.result.providers == {"fake": 4}
        assert report.result.translated_count == 3

    @pytest.mark.asyncio
    async def test_second_run_is_a_no_op(
        self, config: TranslationConfig, locales_dir: Path
    ) -> None:
        """Re-running produces the same files without provider calls."""
        await make_workflow(config, PrefixProvider()).run("fi")
        before = (locales_dir / "fi" / "common.json").read_text(encoding="utf-8")

        provider = PrefixProvider()
        report = await make_workflow(config, provider).run("fi")

        assert provider.calls == []
        assert report.persisted == []
        assert report.result.provider_calls == 0
        assert (locales_dir / "fi" / "common.json").read_text(encoding="utf-8") == before

    @pytest.mark.asyncio
    async def test_cache_serves_forced_run(self, config: TranslationConfig) -> None:
        """A forced run is served from the cache filled by earlier runs."""
        await make_workflow(config, PrefixProvider()).run("fi", namespace="settings")

        provider = PrefixProvider()
        report = await make_workflow(config, provider, force=True).run(
            "fi", namespace="settings"
        )

        assert provider.calls == []
        assert report.result.cache_hits == 1
        assert report.result.provider_calls == 0

    @pytest.mark.asyncio
    async def test_dry_run_writes_nothing(
        self, config: TranslationConfig, locales_dir: Path
    ) -> None:
        """A dry run translates in memory only."""
        report = await make_workflow(config, PrefixProvider()).run("fi", dry_run=True)

        assert report.dry_run
        assert report.persisted == []
        assert read_json(locales_dir / "fi" / "common.json") == {"menu": {"open": "Avaa"}}
        assert not (locales_dir / "fi" / "settings.json").exists()
        assert report.result.trees["settings"] == {"title": "FI Settings"}

    @pytest.mark.asyncio
    async def test_namespace_filter(self, config: TranslationConfig, locales_dir: Path) -> None:
        """Only the requested namespace is processed."""
        report = await make_workflow(config, PrefixProvider()).run("fi", namespace="settings")

        assert list(report.result.trees) == ["settings"]
        assert read_json(locales_dir / "fi" / "common.json") == {"menu": {"open": "Avaa"}}

    @pytest.mark.asyncio
    async def test_duplicate_key_reported_when_file_rewritten(
        self, config: TranslationConfig, locales_dir: Path
    ) -> None:
        """Duplicates in the target file are reported even though the rewrite folds them."""
        write_json(locales_dir / "en" / "settings.json", {"title": "Settings", "about": "About"})
        (locales_dir / "fi" / "settings.json").write_text(
            '{"title": "Asetukset", "title": "Säädöt"}', encoding="utf-8"
        )

        report = await make_workflow(config, PrefixProvider()).run("fi", namespace="settings")

        assert report.persisted == ["settings"]
        assert read_json(locales_dir / "fi" / "settings.json") == {
            "title": "Säädöt",
            "about": "FI About",
        }
        assert report.validation.errors_for("settings") == [DuplicateKey("settings", "title", 2)]
        assert report.exit_code == 1

    @pytest.mark.asyncio
    async def test_dotted_keys_untouched(
        self, config: TranslationConfig, locales_dir: Path
    ) -> None:
        """Translated flat dotted keys are neither retranslated nor restructured."""
        flat = {"errors.notFound": "Not found", "errors.denied": "Denied"}
        write_json(locales_dir / "en" / "errors.json", flat)
        write_json(locales_dir / "fi" / "errors.json", {"errors.notFound": "Ei löytynyt"})
        provider = PrefixProvider()

        report = await make_workflow(config, provider).run("fi", namespace="errors")

        assert provider.calls == [{"errors.denied": "Denied"}]
        assert read_json(locales_dir / "fi" / "errors.json") == {
            "errors.notFound": "Ei löytynyt",
            "errors.denied": "FI Denied",
        }
        assert report.exit_code == 0

    @pytest.mark.asyncio
    async def test_provider_failure_leaves_keys_untranslated(
        self, config: TranslationConfig
    ) -> None:
        """Failed keys are reported and fail validation."""
        provider = PrefixProvider()
        provider.error = NotSupported("locale not supported")

        report = await make_workflow(config, provider).run("fi", namespace="settings")

        assert report.untranslated == {"settings": ["title"]}
        assert report.persisted == []
        assert report.exit_code == 1

    @pytest.mark.asyncio
    async def test_variable_mismatch_fails_validation(self, config: TranslationConfig) -> None:
        """Translations that drop placeholders set a failing exit code."""

        class DroppingProvider(PrefixProvider):
            async def translate_batch(
                self, items: Mapping[str, str], target_locale: str
            ) -> dict[str, str]:
                self.calls.append(dict(items))
                return {key: "käännös" for key in items}

        report = await make_workflow(config, DroppingProvider()).run("fi", namespace="common")

        assert report.exit_code == 1
        keys = [error.key for _, error in report.validation.errors()]
        assert "greeting" in keys

    @pytest.mark.asyncio
    async def test_batches_and_progress(self, config: TranslationConfig) -> None:
        """Keys are split into sorted batches and progress is reported."""
        config.batch_size = 2
        provider = PrefixProvider()
        progress = MagicMock()

        await make_workflow(config, provider, progress_callback=progress).run(
            "fi", namespace="common"
        )

        assert sorted(provider.calls, key=lambda c: list(c)) == [
            {"greeting": "Hello {{name}}", "items.one": "{{count}} item"},
            {"items.other": "{{count}} items"},
        ]
        stages = [c.args[0] for c in progress.call_args_list]
        assert stages.count("translate") == 2
        assert "load" in stages and "persist" in stages and "validate" in stages

    @pytest.mark.asyncio
    async def test_source_locale_rejected(self, config: TranslationConfig) -> None:
        """Translating into the source locale is an error."""
        with pytest.raises(LoadError):
            await make_workflow(config, PrefixProvider()).run("en")

    @pytest.mark.asyncio
    async def test_unknown_namespace(self, config: TranslationConfig) -> None:
        """An unknown namespace is an error."""
        with pytest.raises(LoadError):
            await make_workflow(config, PrefixProvider()).run("fi", namespace="nope")

    @pytest.mark.asyncio
    async def test_no_source_catalogs(self, tmp_path: Path) -> None:
        """A missing source directory is an error."""
        config = TranslationConfig(translation_dir=tmp_path / "empty", cache_dir=tmp_path / "c")
        with pytest.raises(LoadError):
            await make_workflow(config, PrefixProvider()).run("fi")

    @pytest.mark.asyncio
    async def test_translate_namespaces_does_not_mutate_inputs(
        self, config: TranslationConfig
    ) -> None:
        """In-memory translation works on copies."""
        target = {"common": {"menu": {"open": "Avaa"}}}
        workflow = make_workflow(config, PrefixProvider())

        result = await workflow.translate_namespaces("fi", {"common": {"a": "A"}}, target)

        assert target == {"common": {"menu": {"open": "Avaa"}}}
        assert result.trees["common"] == {"menu": {"open": "Avaa"}, "a": "FI A"}
        assert result.written == {"common": ["a"]}
