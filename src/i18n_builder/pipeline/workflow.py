# SPDX-License-Identifier: Apache-2.0
"""Translation workflow implementation."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Mapping

from i18n_builder.config import TranslationConfig
from i18n_builder.core.models import TranslationTree, copy_tree
from i18n_builder.pipeline.catalog import CatalogStore
from i18n_builder.pipeline.diff import build_requests, find_missing_keys, merge_translations
from i18n_builder.pipeline.errors import LoadError
from i18n_builder.pipeline.progress import ProgressCallback
from i18n_builder.router import FallbackRouter, RouterResult, TierAttempt
from i18n_builder.validation import ValidationReport, run_validators

logger = logging.getLogger(__name__)


@dataclass
class LocaleResult:
    """Translated trees for one locale, before persistence.

    Attributes:
        locale: Target locale.
        trees: Updated target trees by namespace.
        written: Leaf paths filled in, by namespace.
        untranslated: Request keys no provider translated, by namespace.
        providers: Number of request keys produced by each provider
            ("cache" for cache hits).
        diagnostics: Tier attempts of every batch, by namespace.
    """

    locale: str
    trees: dict[str, TranslationTree] = field(default_factory=dict)
    written: dict[str, list[str]] = field(default_factory=dict)
    untranslated: dict[str, list[str]] = field(default_factory=dict)
    providers: dict[str, int] = field(default_factory=dict)
    diagnostics: dict[str, list[TierAttempt]] = field(default_factory=dict)

    @property
    def translated_count(self) -> int:
        return sum(len(paths) for paths in self.written.values())

    @property
    def untranslated_count(self) -> int:
        return sum(len(keys) for keys in self.untranslated.values())

    @property
    def cache_hits(self) -> int:
        return self.providers.get("cache", 0)

    @property
    def provider_calls(self) -> int:
        return sum(
            attempt.attempts
            for attempts in self.diagnostics.values()
            for attempt in attempts
        )

    def changed_namespaces(self) -> list[str]:
        return [ns for ns, paths in self.written.items() if paths]


@dataclass
class WorkflowReport:
    """Outcome of one workflow run."""

    locale: str
    result: LocaleResult
    validation: ValidationReport
    dry_run: bool = False
    persisted: list[str] = field(default_factory=list)

    @property
    def untranslated(self) -> dict[str, list[str]]:
        return {ns: keys for ns, keys in self.result.untranslated.items() if keys}

    @property
    def exit_code(self) -> int:
        """1 when validation found hard errors; untranslated keys are warnings."""
        return 0 if self.validation.is_valid else 1


class TranslationWorkflow:
    """Fill in missing translations for one locale at a time."""

    def __init__(
        self,
        router: FallbackRouter,
        config: TranslationConfig | None = None,
        progress_callback: ProgressCallback | None = None,
        *,
        store: CatalogStore | None = None,
        force: bool = False,
        detect_untranslated: bool = False,
    ) -> None:
        """Initialize TranslationWorkflow.

        Args:
            router: Router resolving batches through cache and providers.
            config: Engine configuration.
            progress_callback: Receives ("translate", done, total, namespace)
                and other stage updates.
            store: Catalog access (default: built from the configuration).
            force: Retranslate every key.
            detect_untranslated: Retranslate keys whose text equals the source.
        """
        self._router = router
        self._config = config or TranslationConfig()
        self._progress_callback = progress_callback
        self._store = store or CatalogStore(
            self._config.translation_dir, self._config.format
        )
        self._force = force
        self._detect_untranslated = detect_untranslated

    @property
    def store(self) -> CatalogStore:
        return self._store

    async def translate_namespaces(
        self,
        locale: str,
        source: Mapping[str, TranslationTree],
        target: Mapping[str, TranslationTree],
    ) -> LocaleResult:
        """Translate missing keys of every source namespace in memory.

        Batches of ``config.batch_size`` keys run concurrently, at most
        ``config.max_concurrency`` at a time. The input trees are not modified.
        """
        result = LocaleResult(locale=locale)
        requests: dict[str, dict[str, str]] = {}

        for namespace, source_tree in source.items():
            result.trees[namespace] = copy_tree(target.get(namespace) or {})
            paths = find_missing_keys(
                source_tree,
                result.trees[namespace],
                force=self._force,
                detect_untranslated=self._detect_untranslated,
            )
            requests[namespace] = build_requests(source_tree, paths)
            if paths:
                logger.info("%s/%s: %d key(s) to translate", locale, namespace, len(paths))

        batches = [
            (namespace, batch)
            for namespace, items in requests.items()
            for batch in self._chunk(items)
        ]
        total = len(batches)
        semaphore = asyncio.Semaphore(self._config.max_concurrency)
        done = 0

        async def run_batch(namespace: str, batch: dict[str, str]) -> RouterResult:
            nonlocal done
            async with semaphore:
                routed = await self._router.translate(namespace, batch, locale)
            done += 1
            self._notify("translate", done, total, namespace)
            return routed

        routed_batches = await asyncio.gather(
            *(run_batch(namespace, batch) for namespace, batch in batches)
        )

        translations: dict[str, dict[str, str]] = {ns: {} for ns in source}
        providers: Counter[str] = Counter()
        for (namespace, _), routed in zip(batches, routed_batches):
            translations[namespace].update(routed.translations)
            result.untranslated.setdefault(namespace, []).extend(routed.untranslated)
            result.diagnostics.setdefault(namespace, []).extend(routed.diagnostics)
            providers.update(routed.providers.values())

        for namespace, source_tree in source.items():
            result.written[namespace] = merge_translations(
                result.trees[namespace], source_tree, translations[namespace]
            )
        result.providers = dict(sorted(providers.items()))
        return result

    async def run(
        self,
        locale: str,
        namespace: str | None = None,
        dry_run: bool = False,
    ) -> WorkflowReport:
        """Load, translate, persist and validate one locale.

        Raises:
            LoadError: If catalogs cannot be loaded.
            PersistError: If a catalog cannot be written.
            CacheError: If the cache for the locale is unreadable.
            ConfigurationError: If credential verification fails.
        """
        source_locale = self._config.source_locale
        if locale == source_locale:
            raise LoadError(f"Target locale '{locale}' is the source locale")

        names = self._store.namespaces(source_locale)
        if not names:
            raise LoadError(
                f"No source catalogs found in {self._store.root / source_locale}"
            )
        if namespace is not None:
            if namespace not in names:
                raise LoadError(f"Namespace '{namespace}' not found for '{source_locale}'")
            names = [namespace]

        source = self._store.load_all(source_locale, names)
        target = self._store.load_all(locale, names)
        # Raw key streams are read before persisting folds duplicate keys.
        key_streams = {name: self._store.scan_keys(locale, name) for name in names}
        self._notify("load", len(names), len(names))

        if self._router.cache is not None:
            await asyncio.to_thread(self._router.cache.verify, locale)
        if self._config.fallback.verify_credentials:
            await self._router.verify_credentials()

        result = await self.translate_namespaces(locale, source, target)

        persisted: list[str] = []
        if dry_run:
            logger.info("Dry run: %d leaf(s) not written", result.translated_count)
        else:
            changed = result.changed_namespaces()
            for index, name in enumerate(changed, start=1):
                self._store.write(locale, name, result.trees[name])
                persisted.append(name)
                self._notify("persist", index, len(changed), name)

        validation = run_validators(
            source,
            result.trees,
            min_coverage=self._config.min_coverage,
            key_streams=key_streams,
        )
        self._notify("validate", 1, 1)

        for name, keys in result.untranslated.items():
            if keys:
                logger.warning(
                    "%s/%s: %d key(s) untranslated: %s", locale, name, len(keys), ", ".join(keys)
                )

        return WorkflowReport(
            locale=locale,
            result=result,
            validation=validation,
            dry_run=dry_run,
            persisted=persisted,
        )

    def _chunk(self, items: dict[str, str]) -> list[dict[str, str]]:
        batch_size = max(1, int(self._config.batch_size))
        ordered = sorted(items.items())
        return [
            dict(ordered[i : i + batch_size]) for i in range(0, len(ordered), batch_size)
        ]

    def _notify(self, stage: str, current: int, total: int, message: str = "") -> None:
        if self._progress_callback is None:
            return
        self._progress_callback(stage, current, total, message)
