# SPDX-License-Identifier: Apache-2.0
"""File-based translation cache.

Cache layout::

    .i18n-cache/
      fi/
        dashboard.json
        settings.json
      sv/
        dashboard.json

Each namespace file holds ``{"version": 1, "entries": {key: entry}}``. An
entry is identified by ``(locale, namespace, key, source_text)``; editing the
source string makes the old entry unreachable without an explicit purge.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
import time
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Iterable, Iterator, Mapping

logger = logging.getLogger(__name__)

CACHE_VERSION = 1


class CacheError(Exception):
    """Raised when the cache store cannot be read or written."""


@dataclass
class CacheStats:
    """Aggregate cache statistics for one locale."""

    total_entries: int = 0
    total_namespaces: int = 0
    providers: dict[str, int] = field(default_factory=dict)


@contextmanager
def atomic_write(path: Path, encoding: str = "utf-8") -> Iterator[IO[str]]:
    """Write a file so that readers see either the old or the new content.

    The content goes to a temporary file in the target directory, which is
    fsynced and renamed over ``path`` on success and removed on failure.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding=encoding) as handle:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class FileCache:
    """Translation cache persisted as one JSON document per namespace.

    Methods are blocking; async callers run them through
    ``asyncio.to_thread``. Writes to the same namespace file are serialized
    by a per-file lock, so concurrent batches of one namespace cannot lose
    each other's entries.
    """

    def __init__(self, cache_dir: Path | str) -> None:
        self._cache_dir = Path(cache_dir)
        self._locks: dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def get(
        self,
        locale: str,
        namespace: str,
        key: str,
        source_text: str,
    ) -> str | None:
        """Return the cached translation, or None.

        Unreadable files are logged and treated as misses.
        """
        return self.get_many(locale, namespace, {key: source_text}).get(key)

    def get_many(
        self,
        locale: str,
        namespace: str,
        items: Mapping[str, str],
    ) -> dict[str, str]:
        """Return cached translations for ``{key: source_text}`` items.

        The namespace file is read once. Keys whose source text changed are
        misses. Unreadable files are logged and treated as empty.
        """
        path = self._path(locale, namespace)
        if not items or not path.exists():
            return {}

        try:
            entries = self._load(path)
        except CacheError as e:
            logger.warning("Failed to load cache %s: %s", path, e)
            return {}

        hits: dict[str, str] = {}
        for key, source_text in items.items():
            entry = entries.get(key)
            if entry is None:
                continue
            if entry.get("source_text") != source_text:
                logger.debug("Cache miss: %s -> %s (source text changed)", key, locale)
                continue
            translated = entry.get("translated_text")
            if isinstance(translated, str):
                hits[key] = translated
        logger.debug(
            "Cache: %d/%d hit(s) for %s/%s", len(hits), len(items), locale, namespace
        )
        return hits

    def set(
        self,
        locale: str,
        namespace: str,
        key: str,
        source_text: str,
        translated_text: str,
        provider: str,
    ) -> None:
        """Upsert one entry.

        Raises:
            CacheError: If the existing namespace file is corrupt or the
                write fails.
        """
        self.set_batch(locale, namespace, [(key, source_text, translated_text)], provider)

    def set_batch(
        self,
        locale: str,
        namespace: str,
        entries: Iterable[tuple[str, str, str]],
        provider: str,
    ) -> None:
        """Upsert ``(key, source_text, translated_text)`` triples in one commit.

        Raises:
            CacheError: If the existing namespace file is corrupt or the
                write fails.
        """
        batch = list(entries)
        if not batch:
            return

        path = self._path(locale, namespace)
        with self._lock_for(path):
            stored = self._load(path) if path.exists() else {}

            timestamp = int(time.time())
            for key, source_text, translated_text in batch:
                stored[key] = {
                    "source_text": source_text,
                    "translated_text": translated_text,
                    "provider": provider,
                    "timestamp": timestamp,
                }

            self._save(path, stored)
        logger.debug(
            "Cached %d translation(s) for %s/%s (%s)",
            len(batch),
            locale,
            namespace,
            provider,
        )

    def stats(self, locale: str) -> CacheStats:
        """Compute statistics from the files currently on disk.

        Unreadable namespace files are logged and skipped.
        """
        stats = CacheStats()
        providers: Counter[str] = Counter()

        for path in self._namespace_files(locale):
            try:
                entries = self._load(path)
            except CacheError as e:
                logger.warning("Failed to load cache %s: %s", path, e)
                continue
            stats.total_namespaces += 1
            stats.total_entries += len(entries)
            providers.update(
                str(entry.get("provider", "unknown")) for entry in entries.values()
            )

        stats.providers = dict(sorted(providers.items()))
        return stats

    def verify(self, locale: str) -> None:
        """Load every namespace file for a locale.

        Raises:
            CacheError: If any file is unreadable.
        """
        for path in self._namespace_files(locale):
            self._load(path)

    def clear(self, locale: str, namespace: str) -> None:
        """Remove the cache for one namespace."""
        path = self._path(locale, namespace)
        if path.exists():
            path.unlink()
            logger.info("Cleared cache for %s/%s", locale, namespace)

    def clear_locale(self, locale: str) -> None:
        """Remove every namespace cached for a locale."""
        locale_dir = self._cache_dir / locale
        if locale_dir.exists():
            shutil.rmtree(locale_dir)
            logger.info("Cleared cache for %s", locale)

    def clear_all(self) -> None:
        """Remove the whole cache directory."""
        if self._cache_dir.exists():
            shutil.rmtree(self._cache_dir)
            logger.info("Cleared all cache")

    def _path(self, locale: str, namespace: str) -> Path:
        return self._cache_dir / locale / f"{namespace}.json"

    def _namespace_files(self, locale: str) -> list[Path]:
        locale_dir = self._cache_dir / locale
        if not locale_dir.is_dir():
            return []
        return sorted(locale_dir.glob("*.json"))

    def _load(self, path: Path) -> dict[str, dict[str, Any]]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CacheError(f"Cannot read cache file {path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("entries"), dict):
            raise CacheError(f"Cache file {path} has an unexpected structure")
        return data["entries"]

    def _save(self, path: Path, entries: dict[str, dict[str, Any]]) -> None:
        document = {"version": CACHE_VERSION, "entries": entries}
        try:
            with atomic_write(path) as handle:
                json.dump(document, handle, ensure_ascii=False, indent=2)
        except OSError as e:
            raise CacheError(f"Cannot write cache file {path}: {e}") from e

    def _lock_for(self, path: Path) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(path)
            if lock is None:
                lock = threading.Lock()
                self._locks[path] = lock
            return lock
